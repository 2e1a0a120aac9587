"""Business logic services for the Chrysalis application."""

from .ballots import BallotLedger, BallotToggle
from .content import ContentResolver, MetadataFetcher, PageMetadata
from .stages import Stage, classify_stage
from .submissions import SubmissionFilters, SubmissionService
from .tokens import adjust_tokens

__all__ = [
    "BallotLedger", "BallotToggle",
    "ContentResolver", "MetadataFetcher", "PageMetadata",
    "Stage", "classify_stage",
    "SubmissionFilters", "SubmissionService",
    "adjust_tokens",
]
