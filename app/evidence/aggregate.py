from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from app.core.config.scoring import get_scoring_int

from .engine import SkillResult, round_half_up


@dataclass(slots=True)
class Aggregate:
    overall_score: int = 0
    proven: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def aggregate(results: Sequence[SkillResult]) -> Aggregate:
    if not results:
        return Aggregate()

    threshold = get_scoring_int("aggregate.proof_threshold", 25)
    overall = round_half_up(sum(item.score for item in results) / len(results))
    return Aggregate(
        overall_score=overall,
        proven=[item.skill for item in results if item.score >= threshold],
        missing=[item.skill for item in results if item.score < threshold],
    )
