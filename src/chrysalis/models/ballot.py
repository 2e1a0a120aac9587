"""Models capturing yes-votes on submissions."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from chrysalis.db.session import Base
from chrysalis.db.time import utcnow

VOTE_YES = "yes"


class Ballot(Base):
    """Per-user vote on a submission.

    A row exists only while the vote is "yes"; retracting deletes it.
    """

    __tablename__ = "ballots"
    __table_args__ = (
        CheckConstraint("vote IN ('yes')", name="ck_ballots_vote"),
        Index("ix_ballots_submission_id", "submission_id"),
    )

    # Composite primary key prevents duplicate ballots from the same user.
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    submission_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("submissions.id", ondelete="CASCADE"),
        primary_key=True,
    )

    vote: Mapped[str] = mapped_column(Text, nullable=False, default=VOTE_YES)
    # Voter's stage at cast time; never recomputed.
    stage: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
