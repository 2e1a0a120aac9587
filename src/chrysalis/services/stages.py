"""Vote-count to lifecycle-stage classification.

A submission's stage is a pure function of its yes-ballot count. The rule is
an ordered table of predicates evaluated first-match-wins, so order matters.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from chrysalis.core.errors import ConfigurationError


class Stage(str, Enum):
    """Lifecycle stages a submission grows through."""

    EGG = "egg"
    CATERPILLAR = "caterpillar"
    CHRYSALIS = "chrysalis"
    BUTTERFLY = "butterfly"


DEFAULT_STAGE = Stage.EGG


@dataclass(frozen=True)
class StageRule:
    """One row of the stage table."""

    stage: Stage
    predicate: Callable[[int], bool]


STAGE_RULES: tuple[StageRule, ...] = (
    StageRule(Stage.EGG, lambda votes: votes <= 0),
    StageRule(Stage.CATERPILLAR, lambda votes: votes == 1),
    StageRule(Stage.CHRYSALIS, lambda votes: votes == 2),
    StageRule(Stage.BUTTERFLY, lambda votes: votes >= 3),
)


def classify_stage(votes: int, rules: Sequence[StageRule] = STAGE_RULES) -> str:
    """Return the stage name for ``votes``.

    Raises:
        ConfigurationError: If no rule matches.
    """
    for rule in rules:
        if rule.predicate(votes):
            return rule.stage.value
    raise ConfigurationError(
        "Amount of votes does not fit into any stage",
        votes=votes,
    )


def verify_stage_rules(rules: Sequence[StageRule] = STAGE_RULES) -> None:
    """Check that ``rules`` match every probed vote count exactly once.

    Probes run from one below zero to one past the number of rules, which
    crosses every boundary of a table whose thresholds are small integers.

    Raises:
        ConfigurationError: On a gap or an overlap.
    """
    for votes in range(-1, len(rules) + 2):
        matches = [rule.stage.value for rule in rules if rule.predicate(votes)]
        if len(matches) != 1:
            raise ConfigurationError(
                "Stage table must match every vote count exactly once",
                votes=votes,
                matches=matches,
            )


verify_stage_rules()
