from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from dataclasses import dataclass, field

from app.core.config import settings
from app.integrations.github import RepoRef, RepoSource, TreeEntry

from .facts import (
    RepositoryFacts,
    filter_tree,
    is_code_file,
    parse_package_json_deps,
    parse_requirements,
    select_code_files,
)

logger = logging.getLogger(__name__)

PRIMARY_MANIFEST = "package.json"
SECONDARY_MANIFEST = "requirements.txt"


@dataclass(frozen=True, slots=True)
class ScanLimits:
    max_files_per_repo: int = 260
    max_code_files_fetch: int = 70
    max_blob_chars: int = 40_000
    fetch_batch_size: int = 8

    @classmethod
    def from_settings(cls) -> "ScanLimits":
        return cls(
            max_files_per_repo=settings.max_files_per_repo,
            max_code_files_fetch=settings.max_code_files_fetch,
            max_blob_chars=settings.max_blob_chars,
            fetch_batch_size=settings.fetch_batch_size,
        )


@dataclass(slots=True)
class ScanOutcome:
    facts: list[RepositoryFacts] = field(default_factory=list)
    language_bytes: dict[str, int] = field(default_factory=dict)
    timed_out: bool = False


def _fallback_branch(default_branch: str) -> str:
    return "main" if default_branch == "master" else "master"


async def _fetch_tree(source: RepoSource, owner: str, repo: RepoRef) -> list[TreeEntry] | None:
    tree = await source.get_tree(owner, repo.name, repo.default_branch)
    if tree is not None:
        return tree
    fallback = _fallback_branch(repo.default_branch)
    logger.info("tree_fallback repo=%s default=%s fallback=%s", repo.name, repo.default_branch, fallback)
    return await source.get_tree(owner, repo.name, fallback)


async def _fetch_samples(
    source: RepoSource,
    owner: str,
    repo: str,
    entries: list[TreeEntry],
    limits: ScanLimits,
) -> list[str]:
    samples: list[str] = []
    batch_size = max(1, limits.fetch_batch_size)
    for start in range(0, len(entries), batch_size):
        batch = entries[start : start + batch_size]
        texts = await asyncio.gather(*(source.get_blob_text(owner, repo, entry.sha) for entry in batch))
        for text in texts:
            if not text:
                continue
            samples.append(text[: limits.max_blob_chars])
    return samples


async def scan_repository(
    source: RepoSource,
    owner: str,
    repo: RepoRef,
    limits: ScanLimits | None = None,
) -> RepositoryFacts:
    limits = limits or ScanLimits.from_settings()

    package_json, requirements, languages = await asyncio.gather(
        source.get_file_text(owner, repo.name, PRIMARY_MANIFEST),
        source.get_file_text(owner, repo.name, SECONDARY_MANIFEST),
        source.get_language_bytes(owner, repo.name),
    )
    facts = RepositoryFacts(
        repo=repo.name,
        deps=parse_package_json_deps(package_json),
        py_deps=parse_requirements(requirements),
        language_bytes=dict(languages or {}),
    )

    tree = await _fetch_tree(source, owner, repo)
    if tree is None:
        logger.warning("tree_unavailable repo=%s", repo.name)
        return facts

    kept = filter_tree(tree, limits.max_files_per_repo)
    facts.files = [entry.path.lower() for entry in kept]
    facts.code_file_count = sum(1 for entry in kept if is_code_file(entry.path))

    selected = select_code_files(kept, limits.max_code_files_fetch)
    facts.samples = await _fetch_samples(source, owner, repo.name, selected, limits)
    logger.debug(
        "repo_scanned repo=%s files=%s code=%s samples=%s",
        repo.name,
        len(facts.files),
        facts.code_file_count,
        len(facts.samples),
    )
    return facts


async def scan_repositories(
    source: RepoSource,
    owner: str,
    repos: list[RepoRef],
    *,
    limits: ScanLimits | None = None,
    deadline_s: float | None = None,
) -> ScanOutcome:
    """Scan every repository concurrently.

    When ``deadline_s`` elapses the unfinished repositories are cancelled and
    the outcome only holds the ones that completed.
    """
    if not repos:
        return ScanOutcome()

    limits = limits or ScanLimits.from_settings()
    started = time.perf_counter()
    tasks = [asyncio.create_task(scan_repository(source, owner, repo, limits)) for repo in repos]
    done, pending = await asyncio.wait(tasks, timeout=deadline_s)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "scan_deadline_reached owner=%s completed=%s cancelled=%s",
            owner,
            len(done),
            len(pending),
        )

    outcome = ScanOutcome(timed_out=bool(pending))
    totals: Counter[str] = Counter()
    for repo, task in zip(repos, tasks):
        if task not in done:
            continue
        exc = task.exception()
        if exc is not None:
            logger.warning("repo_scan_failed repo=%s error=%s", repo.name, exc)
            continue
        facts = task.result()
        outcome.facts.append(facts)
        totals.update(facts.language_bytes)

    outcome.language_bytes = dict(totals)
    logger.info(
        "scan_complete owner=%s repos=%s scanned=%s elapsed_ms=%s",
        owner,
        len(repos),
        len(outcome.facts),
        int((time.perf_counter() - started) * 1000),
    )
    return outcome
