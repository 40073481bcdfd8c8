from .aggregate import Aggregate, aggregate
from .engine import EvidenceCount, SkillResult, derive_score, evaluate_skill, evaluate_skills, status_for
from .facts import RepositoryFacts
from .planner import RemediationPlan, build_plan
from .rules import RULES, HybridRule, LanguageRule, SignalRule, Signals, SkillRule
from .scanner import ScanLimits, ScanOutcome, scan_repositories, scan_repository

__all__ = [
    "Aggregate",
    "aggregate",
    "EvidenceCount",
    "SkillResult",
    "derive_score",
    "evaluate_skill",
    "evaluate_skills",
    "status_for",
    "RepositoryFacts",
    "RemediationPlan",
    "build_plan",
    "RULES",
    "HybridRule",
    "LanguageRule",
    "SignalRule",
    "Signals",
    "SkillRule",
    "ScanLimits",
    "ScanOutcome",
    "scan_repositories",
    "scan_repository",
]
