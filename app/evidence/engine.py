from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Literal

from app.core.config.scoring import get_scoring_int, get_scoring_value

from .facts import RepositoryFacts
from .rules import HybridRule, LanguageRule, SignalRule, Signals, SkillRule, get_rule

Proficiency = Literal["None", "Beginner", "Intermediate", "Expert"]
Status = Literal["Needs attention", "Medium", "Good"]
StatusColor = Literal["red", "yellow", "green"]


@dataclass(slots=True)
class EvidenceCount:
    signal_repos: int = 0
    advanced_repos: int = 0
    repos: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SkillResult:
    skill: str
    score: int
    status: Status
    color: StatusColor
    proficiency: Proficiency | None = None
    supporting_repos: list[str] | None = None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def status_for(score: int) -> tuple[Status, StatusColor]:
    if score < get_scoring_int("status.needs_attention_below", 25):
        return "Needs attention", "red"
    if score < get_scoring_int("status.medium_below", 60):
        return "Medium", "yellow"
    return "Good", "green"


def language_share(language: str, totals: dict[str, int]) -> int:
    total = sum(totals.values())
    if total <= 0:
        return 0
    return clamp_score(totals.get(language, 0) / total * 100)


def _any_regex(patterns: Iterable, samples: list[str]) -> bool:
    return any(pattern.search(text) for text in samples for pattern in patterns)


def repo_signal(signals: Signals, facts: RepositoryFacts) -> bool:
    if signals.indicators:
        needles = [indicator.lower() for indicator in signals.indicators]
        if any(needle in path for path in facts.files for needle in needles):
            return True
    if signals.deps and any(dep.lower() in facts.deps for dep in signals.deps):
        return True
    if signals.py_deps and any(dep.lower() in facts.py_deps for dep in signals.py_deps):
        return True
    if signals.usage and _any_regex(signals.usage, facts.samples):
        return True
    return False


def repo_advanced(signals: Signals, facts: RepositoryFacts) -> bool:
    return bool(signals.advanced) and _any_regex(signals.advanced, facts.samples)


def count_evidence(signals: Signals, facts_list: Iterable[RepositoryFacts]) -> EvidenceCount:
    """Count signaling and advanced-usage repositories.

    Stops once both counts saturate the Expert tier; later repositories could
    not move the score or tier.
    """
    exit_signals = get_scoring_int("early_exit.signal_repos", 3)
    exit_advanced = get_scoring_int("tiers.expert_min_advanced", 2)
    count = EvidenceCount()
    for facts in facts_list:
        advanced = repo_advanced(signals, facts)
        if advanced or repo_signal(signals, facts):
            count.signal_repos += 1
            count.repos.append(facts.repo)
        if advanced:
            count.advanced_repos += 1
        if count.signal_repos >= exit_signals and count.advanced_repos >= exit_advanced:
            break
    return count


def derive_score(signal_repos: int, advanced_repos: int, total_code_files: int) -> tuple[int, Proficiency]:
    if signal_repos <= 0:
        return 0, "None"

    if signal_repos == 1:
        base = get_scoring_int("signal_scores.single_repo", 50)
    else:
        base = get_scoring_int("signal_scores.multi_repo", 100)

    boost = min(
        get_scoring_int("advanced.max_boost", 20),
        advanced_repos * get_scoring_int("advanced.per_repo_boost", 10),
    )
    score = min(100, base + boost)

    if (
        advanced_repos >= get_scoring_int("tiers.expert_min_advanced", 2)
        and score >= get_scoring_int("tiers.expert_min_score", 80)
    ):
        return clamp_score(score), "Expert"

    if advanced_repos >= 1 or (
        signal_repos >= get_scoring_int("tiers.intermediate_min_signal_repos", 2)
        and total_code_files >= get_scoring_int("tiers.intermediate_min_code_files", 20)
    ):
        return clamp_score(max(score, get_scoring_int("tiers.intermediate_floor", 60))), "Intermediate"

    return clamp_score(min(score, get_scoring_int("tiers.beginner_cap", 65))), "Beginner"


def _blend(language_score: int, evidence_score: int, mode: str) -> int:
    if mode == "blend":
        weight = float(get_scoring_value("hybrid.language_weight", 0.5))
        return clamp_score(language_score * weight + evidence_score * (1.0 - weight))
    return max(language_score, evidence_score)


def _result(skill: str, score: int, proficiency: Proficiency | None = None, repos: list[str] | None = None) -> SkillResult:
    status, color = status_for(score)
    return SkillResult(
        skill=skill,
        score=score,
        status=status,
        color=color,
        proficiency=proficiency,
        supporting_repos=repos or None,
    )


def evaluate_rule(
    skill: str,
    rule: SkillRule | None,
    facts_list: list[RepositoryFacts],
    language_totals: dict[str, int],
) -> SkillResult:
    if rule is None:
        return _result(skill, 0, "None")

    if isinstance(rule, LanguageRule):
        return _result(skill, language_share(rule.language, language_totals))

    total_code_files = sum(item.code_file_count for item in facts_list)

    if isinstance(rule, SignalRule):
        count = count_evidence(rule.signals, facts_list)
        score, tier = derive_score(count.signal_repos, count.advanced_repos, total_code_files)
        return _result(skill, score, tier, count.repos)

    if isinstance(rule, HybridRule):
        count = count_evidence(rule.signals, facts_list)
        evidence_score, tier = derive_score(count.signal_repos, count.advanced_repos, total_code_files)
        score = _blend(language_share(rule.language, language_totals), evidence_score, rule.mode)
        # Byte share alone carries no tier.
        return _result(skill, score, tier if count.signal_repos else None, count.repos)

    raise TypeError(f"Unsupported rule type for {skill!r}: {type(rule).__name__}")


def evaluate_skill(skill: str, facts_list: list[RepositoryFacts], language_totals: dict[str, int]) -> SkillResult:
    return evaluate_rule(skill, get_rule(skill), facts_list, language_totals)


def evaluate_skills(
    skills: Iterable[str],
    facts_list: list[RepositoryFacts],
    language_totals: dict[str, int],
) -> list[SkillResult]:
    return [evaluate_skill(skill, facts_list, language_totals) for skill in skills]
