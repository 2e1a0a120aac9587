"""Ballot ledger: per-user yes-votes on submissions."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from chrysalis.core.errors import SubmissionNotFound
from chrysalis.models import VOTE_YES, Ballot, Submission, User
from chrysalis.services.stages import DEFAULT_STAGE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BallotToggle:
    """Outcome of flipping a user's ballot."""

    votes: int
    existed_before: bool


def count_votes(db: Session, submission_id: int) -> int:
    """Return the number of yes-ballots on a submission."""
    return db.execute(
        select(func.count())
        .select_from(Ballot)
        .where(Ballot.submission_id == submission_id, Ballot.vote == VOTE_YES)
    ).scalar_one()


class BallotLedger:
    """Records and retracts a user's yes-ballot on a submission.

    ``toggle`` flips state on every call. A client that retries after a
    timeout can undo its own vote; it is not a set-vote operation.
    """

    def toggle(self, db: Session, user: User, submission_id: int) -> BallotToggle:
        """Flip the user's ballot and return the recounted votes.

        The caller owns the transaction and should hold the submission row
        lock so the recount reflects this mutation.

        Raises:
            SubmissionNotFound: If the submission does not exist.
        """
        if db.get(Submission, submission_id) is None:
            raise SubmissionNotFound(submission_id)

        existing = db.execute(
            select(Ballot).where(
                Ballot.user_id == user.id,
                Ballot.submission_id == submission_id,
            )
        ).scalar_one_or_none()

        if existing is not None:
            db.delete(existing)
        else:
            db.add(
                Ballot(
                    user_id=user.id,
                    submission_id=submission_id,
                    vote=VOTE_YES,
                    stage=user.stage or DEFAULT_STAGE.value,
                )
            )
        db.flush()

        votes = count_votes(db, submission_id)
        logger.info(
            "Ballot %s by user %s on submission %s; votes now %d",
            "retracted" if existing is not None else "cast",
            user.id,
            submission_id,
            votes,
        )
        return BallotToggle(votes=votes, existed_before=existing is not None)
