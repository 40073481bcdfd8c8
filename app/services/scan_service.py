from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from app.core.config import settings
from app.evidence import (
    RemediationPlan,
    ScanLimits,
    SkillResult,
    aggregate,
    build_plan,
    evaluate_skills,
    scan_repositories,
)
from app.integrations.github import QuotaExhaustedError, RepoSource, UpstreamError
from app.schemas.scan import RemediationPlanOut, ScanRequest, ScanResponse, SkillBreakdown
from app.taxonomy import get_default_taxonomy_provider

logger = logging.getLogger(__name__)


class ScanError(RuntimeError):
    def __init__(self, message: str, status_code: int = 500, retry_after: int | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after


def _validate(payload: ScanRequest) -> None:
    if not payload.github_username:
        raise ScanError("Missing GitHub username", status_code=400)
    if payload.resume_text is None:
        raise ScanError("Missing resumeText", status_code=400)


def _retry_after_seconds(reset_at: datetime | None) -> int | None:
    if reset_at is None:
        return None
    return max(0, int((reset_at - datetime.now(timezone.utc)).total_seconds()))


async def _preflight(source: RepoSource, floor: int) -> None:
    status = await source.rate_limit_status()
    if status is None:
        logger.info("rate_limit_check_unavailable")
        return
    if status.remaining < floor:
        raise QuotaExhaustedError(status.remaining, status.reset_at)


def _upstream_status(status_code: int) -> int:
    return status_code if 400 <= status_code < 600 else 502


def _breakdown(result: SkillResult) -> SkillBreakdown:
    return SkillBreakdown(
        skill=result.skill,
        score=result.score,
        status=result.status,
        color=result.color,
        proficiency=result.proficiency,
        supporting_repos=result.supporting_repos,
    )


def _plan_out(plan: RemediationPlan) -> RemediationPlanOut:
    return RemediationPlanOut(
        skill=plan.skill,
        candidate_exists=plan.candidate_exists,
        goal=plan.goal,
        repo_name=plan.repo_name,
        usage=plan.usage,
        usage_guidance=plan.usage_guidance,
        project_ideas=plan.project_ideas,
        per_idea_plan=plan.per_idea_plan,
        candidate_repos=plan.candidate_repos or None,
    )


async def run_scan(
    payload: ScanRequest,
    source: RepoSource,
    *,
    limits: ScanLimits | None = None,
    deadline_s: float | None = None,
    rate_limit_floor: int | None = None,
) -> ScanResponse:
    """Score the resume's claimed skills against the user's public repositories."""
    _validate(payload)
    started = time.perf_counter()
    username = payload.github_username
    claimed = get_default_taxonomy_provider().claimed_skills(payload.resume_text or "")

    floor = settings.rate_limit_floor if rate_limit_floor is None else rate_limit_floor
    try:
        await _preflight(source, floor)
    except QuotaExhaustedError as exc:
        logger.warning("scan_rejected_quota user=%s remaining=%s", username, exc.remaining)
        raise ScanError(str(exc), status_code=429, retry_after=_retry_after_seconds(exc.reset_at)) from exc

    try:
        repos = await source.list_public_repos(username)
    except UpstreamError as exc:
        logger.warning("repo_listing_failed user=%s status=%s", username, exc.status_code)
        raise ScanError(str(exc), status_code=_upstream_status(exc.status_code)) from exc

    # Nothing to score or plan means the per-repository scan can be skipped.
    wanted = repos if (claimed or payload.selected_skills) else []
    outcome = await scan_repositories(
        source,
        username,
        wanted,
        limits=limits,
        deadline_s=settings.scan_deadline_s if deadline_s is None else deadline_s,
    )

    results = evaluate_skills(claimed, outcome.facts, outcome.language_bytes)
    summary = aggregate(results)

    remediation = None
    if payload.selected_skills is not None:
        proven = set(summary.proven)
        remediation = [
            _plan_out(build_plan(skill, outcome.facts))
            for skill in payload.selected_skills
            if skill not in proven
        ]

    logger.info(
        "scan_finished user=%s repos=%s claimed=%s overall=%s partial=%s elapsed_ms=%s",
        username,
        len(repos),
        len(claimed),
        summary.overall_score,
        outcome.timed_out,
        int((time.perf_counter() - started) * 1000),
    )
    return ScanResponse(
        github_username=username,
        repos_analyzed=len(repos),
        overall_score=summary.overall_score,
        claimed_skills=claimed,
        proven_skills=summary.proven,
        missing_proof=summary.missing,
        breakdown=[_breakdown(item) for item in results],
        remediation=remediation,
        partial=True if outcome.timed_out else None,
    )
