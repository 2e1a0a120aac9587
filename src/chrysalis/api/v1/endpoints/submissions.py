"""Submission and vote endpoints for the Chrysalis API."""

import asyncio

from fastapi import APIRouter, Query, status

from chrysalis.schemas.submission import SubmissionCreate, SubmissionResponse
from chrysalis.services.stages import Stage
from chrysalis.services.submissions import SubmissionFilters, to_submission_responses

from ..dependencies import CurrentUserDep, SessionDep, SubmissionServiceDep

router = APIRouter(prefix="/submissions", tags=["submissions"])


def _filters(
    stage: Stage | None,
    category_id: int | None,
    user_id: int | None,
) -> SubmissionFilters:
    return SubmissionFilters(
        stage=stage.value if stage is not None else None,
        category_id=category_id,
        user_id=user_id,
    )


@router.get("/", response_model=list[SubmissionResponse])
async def list_submissions(
    db: SessionDep,
    current_user: CurrentUserDep,
    service: SubmissionServiceDep,
    stage: Stage | None = Query(None, description="Only submissions in this stage"),
    category_id: int | None = Query(None, description="Only submissions in this category"),
    user_id: int | None = Query(None, description="Only submissions by this user"),
) -> list[SubmissionResponse]:
    """List submissions, newest first, with optional filters."""
    submissions = service.list_submissions(db, _filters(stage, category_id, user_id))
    return to_submission_responses(db, submissions, current_user)


@router.get("/bookmarks", response_model=list[SubmissionResponse])
async def list_bookmarks(
    db: SessionDep,
    current_user: CurrentUserDep,
    service: SubmissionServiceDep,
    stage: Stage | None = Query(None, description="Only submissions in this stage"),
    category_id: int | None = Query(None, description="Only submissions in this category"),
    user_id: int | None = Query(None, description="Only submissions by this user"),
) -> list[SubmissionResponse]:
    """List submissions the caller has voted yes on."""
    submissions = service.list_bookmarks(db, current_user, _filters(stage, category_id, user_id))
    return to_submission_responses(db, submissions, current_user)


@router.get("/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    submission_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    service: SubmissionServiceDep,
) -> SubmissionResponse:
    """Get a specific submission by ID."""
    submission = service.get(db, submission_id)
    return to_submission_responses(db, [submission], current_user)[0]


@router.post("/", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit(
    submission_data: SubmissionCreate,
    db: SessionDep,
    current_user: CurrentUserDep,
    service: SubmissionServiceDep,
) -> SubmissionResponse:
    """Submit a URL into a category.

    Page metadata is fetched the first time a URL is seen. The submitter is
    credited tokens whether or not the content was new.
    """
    submission = await service.create(
        db,
        current_user,
        category_id=submission_data.category_id,
        comment=submission_data.comment,
        url=submission_data.url,
    )
    return to_submission_responses(db, [submission], current_user)[0]


@router.post("/{submission_id}/vote", response_model=SubmissionResponse)
async def vote(
    submission_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    service: SubmissionServiceDep,
) -> SubmissionResponse:
    """Toggle the caller's yes-vote on a submission.

    This is a toggle, not a set: calling it again retracts the vote. Clients
    must not blindly retry a timed-out request, since a retry that lands
    after the first call flips the vote back.
    """
    submission = await asyncio.to_thread(service.apply_vote, db, current_user, submission_id)
    return to_submission_responses(db, [submission], current_user)[0]
