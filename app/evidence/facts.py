from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Iterable

from app.integrations.github import TreeEntry

SKIP_DIRS = (
    "node_modules",
    ".next",
    "dist",
    "build",
    "out",
    ".git",
    "coverage",
    "docs",
    "vendor",
    "__pycache__",
    ".venv",
    "venv",
    "target",
)
DOC_EXTENSIONS = frozenset({".md", ".rst", ".txt", ".adoc"})
ARTIFACT_SUFFIXES = (".min.js", ".min.css", ".bundle.js", ".map")
LOCKFILES = frozenset({"package-lock.json", "yarn.lock", "pnpm-lock.yaml", "poetry.lock"})
SCAN_EXTENSIONS = frozenset(
    {
        ".js", ".jsx", ".ts", ".tsx",
        ".py", ".java", ".kt",
        ".c", ".cc", ".cpp", ".h", ".hpp",
        ".yml", ".yaml", ".json",
        ".html", ".css", ".scss",
        ".sh", ".gradle", ".properties",
        ".xml", ".tf",
    }
)
CODE_EXTENSIONS = frozenset(
    {
        ".js", ".jsx", ".ts", ".tsx",
        ".py", ".java", ".kt",
        ".c", ".cc", ".cpp", ".h", ".hpp",
        ".yml", ".yaml",
        ".html", ".css", ".scss",
        ".xml", ".gradle", ".tf",
    }
)
# Extension-less files that carry strong tooling evidence.
WELL_KNOWN_FILES = frozenset({"dockerfile", "jenkinsfile", "makefile", "procfile"})
# Python manifests kept despite their extensions; they are not code.
MANIFEST_FILES = frozenset({"requirements.txt", "pyproject.toml"})
PRIORITY_HINTS = (
    "dockerfile",
    "jenkinsfile",
    ".github/workflows",
    "main",
    "index",
    "app",
    "server",
    "config",
    "settings",
    "route",
    "controller",
    "service",
    "api",
)

_REQUIREMENT_NAME_RE = re.compile(r"[<>=~!;\[\s]")


@dataclass(slots=True)
class RepositoryFacts:
    repo: str
    deps: set[str] = field(default_factory=set)
    py_deps: set[str] = field(default_factory=set)
    files: list[str] = field(default_factory=list)
    samples: list[str] = field(default_factory=list)
    code_file_count: int = 0
    language_bytes: dict[str, int] = field(default_factory=dict)


def get_ext(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    index = name.rfind(".")
    return "" if index <= 0 else name[index:].lower()


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1].lower()


def parse_package_json_deps(text: str | None) -> set[str]:
    if not text:
        return set()
    try:
        payload = json.loads(text)
    except ValueError:
        return set()
    if not isinstance(payload, dict):
        return set()
    names: set[str] = set()
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        deps = payload.get(section)
        if isinstance(deps, dict):
            names.update(str(name).strip().lower() for name in deps if str(name).strip())
    return names


def parse_requirements(text: str | None) -> set[str]:
    names: set[str] = set()
    for line in (text or "").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or stripped.startswith("-"):
            continue
        name = _REQUIREMENT_NAME_RE.split(stripped, maxsplit=1)[0].strip()
        if name:
            names.add(name.lower())
    return names


def _in_skipped_dir(path: str) -> bool:
    return any(path.startswith(f"{name}/") or f"/{name}/" in path for name in SKIP_DIRS)


def _is_artifact(path: str) -> bool:
    return path.endswith(ARTIFACT_SUFFIXES) or _basename(path) in LOCKFILES


def is_scannable(path: str) -> bool:
    lowered = path.lower()
    if _in_skipped_dir(lowered) or _is_artifact(lowered):
        return False
    if _basename(lowered) in MANIFEST_FILES:
        return True
    ext = get_ext(lowered)
    if ext in DOC_EXTENSIONS:
        return False
    return ext in SCAN_EXTENSIONS or _basename(lowered) in WELL_KNOWN_FILES


def is_code_file(path: str) -> bool:
    lowered = path.lower()
    return get_ext(lowered) in CODE_EXTENSIONS or _basename(lowered) in WELL_KNOWN_FILES


def filter_tree(entries: Iterable[TreeEntry], limit: int) -> list[TreeEntry]:
    kept: list[TreeEntry] = []
    for entry in entries:
        if entry.type != "blob" or not is_scannable(entry.path):
            continue
        kept.append(entry)
        if len(kept) >= limit:
            break
    return kept


def _priority(path: str) -> int:
    lowered = path.lower()
    return 0 if any(hint in lowered for hint in PRIORITY_HINTS) else 1


def select_code_files(entries: Iterable[TreeEntry], limit: int) -> list[TreeEntry]:
    """Pick the files worth fetching, high-signal paths first, tree order otherwise."""
    code = [entry for entry in entries if is_code_file(entry.path)]
    code.sort(key=lambda entry: _priority(entry.path))
    return code[:limit]
