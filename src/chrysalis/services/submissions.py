"""Submission lifecycle: creation, vote-driven stage updates, and listing.

Each write path commits as a single transaction. ``create`` fetches page
metadata outside any transaction, then stores content, inserts the
submission and credits the submitter. ``apply_vote`` locks the submission
row, toggles the caller's ballot, adjusts tokens and rewrites the cached
stage. Either everything commits or nothing does.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from chrysalis.core.errors import (
    CategoryNotFound,
    SubmissionNotFound,
    Unauthenticated,
    ValidationError,
)
from chrysalis.core.settings import settings
from chrysalis.models import VOTE_YES, Ballot, Submission, User
from chrysalis.schemas.submission import SubmissionResponse
from chrysalis.services.ballots import BallotLedger
from chrysalis.services.categories import get_category
from chrysalis.services.content import ContentResolver
from chrysalis.services.stages import DEFAULT_STAGE, classify_stage
from chrysalis.services.tokens import adjust_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionFilters:
    """Optional exact-match filters for submission listings."""

    stage: str | None = None
    category_id: int | None = None
    user_id: int | None = None


def _require_caller(caller: User | None, action: str) -> User:
    if caller is None:
        raise Unauthenticated(f"You will have to login or sign up first to {action}")
    return caller


class SubmissionService:
    """Orchestrates submissions and the votes that move them through stages."""

    def __init__(
        self,
        resolver: ContentResolver | None = None,
        ledger: BallotLedger | None = None,
    ) -> None:
        self.resolver = resolver or ContentResolver()
        self.ledger = ledger or BallotLedger()

    async def create(
        self,
        db: Session,
        caller: User | None,
        *,
        category_id: int,
        comment: str,
        url: str,
    ) -> Submission:
        """Submit ``url`` into a category on behalf of ``caller``.

        Lookups run in a short read transaction that is rolled back before
        any page fetch, so no lock is held while waiting on the network.
        Anything pending on ``db`` is discarded at that point. The inserts
        and the token credit then commit together.

        Raises:
            Unauthenticated: If there is no caller.
            ValidationError: If the URL is blank.
            CategoryNotFound: If the category does not exist.
            MetadataFetchError: If the URL is new and its page cannot be
                fetched. Nothing is written in that case.
        """
        user = _require_caller(caller, "submit")
        url = url.strip()
        if not url:
            raise ValidationError("URL must not be empty", field="url")

        try:
            if get_category(db, category_id) is None:
                raise CategoryNotFound(category_id)
            existing = self.resolver.find(db, url)
            content_id = existing.id if existing is not None else None
        finally:
            db.rollback()

        metadata = None
        if content_id is None:
            metadata = await self.resolver.fetch(url)

        try:
            if metadata is not None:
                content_id = self.resolver.store(db, url, metadata).id

            submission = Submission(
                user_id=user.id,
                category_id=category_id,
                content_id=content_id,
                comment=comment,
                stage=user.stage or DEFAULT_STAGE.value,
            )
            db.add(submission)
            db.flush()
            adjust_tokens(db, user, settings.submission_token_reward)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(submission)
        logger.info(
            "User %s submitted content %s into category %s as submission %s",
            user.id,
            submission.content_id,
            submission.category_id,
            submission.id,
        )
        return submission

    def apply_vote(self, db: Session, caller: User | None, submission_id: int) -> Submission:
        """Toggle the caller's yes-ballot and move the submission to its new stage.

        Voting twice retracts the first vote. A retried request is
        indistinguishable from a second vote.

        Raises:
            Unauthenticated: If there is no caller.
            SubmissionNotFound: If the submission does not exist.
        """
        user = _require_caller(caller, "vote")

        try:
            submission = self._lock(db, submission_id)
            outcome = self.ledger.toggle(db, user, submission_id)
            reward = settings.vote_token_reward
            adjust_tokens(db, user, -reward if outcome.existed_before else reward)
            previous_stage = submission.stage
            submission.stage = classify_stage(outcome.votes)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(submission)
        if submission.stage != previous_stage:
            logger.info(
                "Submission %s moved from %s to %s",
                submission.id,
                previous_stage,
                submission.stage,
            )
        return submission

    def get(self, db: Session, submission_id: int) -> Submission:
        """Return a submission or raise ``SubmissionNotFound``."""
        submission = db.get(Submission, submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)
        return submission

    def list_submissions(
        self, db: Session, filters: SubmissionFilters | None = None
    ) -> Sequence[Submission]:
        """Return submissions matching ``filters``, newest first."""
        stmt = self._apply_filters(select(Submission), filters or SubmissionFilters())
        return db.execute(stmt).scalars().all()

    def list_bookmarks(
        self,
        db: Session,
        caller: User | None,
        filters: SubmissionFilters | None = None,
    ) -> Sequence[Submission]:
        """Return submissions the caller has voted yes on, newest first.

        Raises:
            Unauthenticated: If there is no caller.
        """
        user = _require_caller(caller, "see bookmarks")
        stmt = select(Submission).join(
            Ballot,
            (Ballot.submission_id == Submission.id)
            & (Ballot.user_id == user.id)
            & (Ballot.vote == VOTE_YES),
        )
        stmt = self._apply_filters(stmt, filters or SubmissionFilters())
        return db.execute(stmt).scalars().all()

    @staticmethod
    def _lock(db: Session, submission_id: int) -> Submission:
        # Row lock serializes concurrent votes on the same submission.
        submission = db.execute(
            select(Submission)
            .where(Submission.id == submission_id)
            .with_for_update(of=Submission)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if submission is None:
            raise SubmissionNotFound(submission_id)
        return submission

    @staticmethod
    def _apply_filters(stmt: Select, filters: SubmissionFilters) -> Select:
        if filters.stage:
            stmt = stmt.where(Submission.stage == filters.stage)
        if filters.category_id is not None:
            stmt = stmt.where(Submission.category_id == filters.category_id)
        if filters.user_id is not None:
            stmt = stmt.where(Submission.user_id == filters.user_id)
        return stmt.order_by(Submission.created_at.desc(), Submission.id.desc())


def to_submission_responses(
    db: Session,
    submissions: Iterable[Submission],
    caller: User | None = None,
) -> list[SubmissionResponse]:
    """Convert submissions to API schemas with vote counts and caller state."""
    submissions = list(submissions)
    ids = [s.id for s in submissions]
    if not ids:
        return []

    counts = dict(
        db.execute(
            select(Ballot.submission_id, func.count())
            .where(Ballot.submission_id.in_(ids), Ballot.vote == VOTE_YES)
            .group_by(Ballot.submission_id)
        ).all()
    )
    voted: set[int] = set()
    if caller is not None:
        voted = set(
            db.execute(
                select(Ballot.submission_id).where(
                    Ballot.submission_id.in_(ids),
                    Ballot.user_id == caller.id,
                    Ballot.vote == VOTE_YES,
                )
            ).scalars()
        )

    return [
        SubmissionResponse.model_validate(
            {
                "id": s.id,
                "user_id": s.user_id,
                "category_id": s.category_id,
                "content_id": s.content_id,
                "comment": s.comment,
                "stage": s.stage,
                "votes": counts.get(s.id, 0),
                "me_has_voted": s.id in voted,
                "created_at": s.created_at,
                "user": s.user,
                "category": s.category,
                "content": s.content,
            },
            from_attributes=True,
        )
        for s in submissions
    ]


def get_submission_service() -> SubmissionService:
    """Return a submission service wired with the default collaborators."""
    return SubmissionService()
