from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    github_token: str | None
    github_api_url: str
    github_timeout_s: float
    github_max_connections: int
    github_repos_per_page: int
    rate_limit_floor: int
    max_files_per_repo: int
    max_code_files_fetch: int
    max_blob_chars: int
    fetch_batch_size: int
    scan_deadline_s: float | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool


def _deadline(raw: float) -> float | None:
    return raw if raw > 0 else None


settings = Settings(
    github_token=_get_env("GITHUB_TOKEN"),
    github_api_url=(_get_env("GITHUB_API_URL", "https://api.github.com") or "https://api.github.com").rstrip("/"),
    github_timeout_s=_get_env_float("GITHUB_TIMEOUT_S", 10.0),
    github_max_connections=_get_env_int("GITHUB_MAX_CONNECTIONS", 40),
    github_repos_per_page=_get_env_int("GITHUB_REPOS_PER_PAGE", 25),
    rate_limit_floor=_get_env_int("RATE_LIMIT_FLOOR", 50),
    max_files_per_repo=_get_env_int("MAX_FILES_PER_REPO", 260),
    max_code_files_fetch=_get_env_int("MAX_CODE_FILES_FETCH", 70),
    max_blob_chars=_get_env_int("MAX_BLOB_CHARS", 40_000),
    fetch_batch_size=_get_env_int("FETCH_BATCH_SIZE", 8),
    scan_deadline_s=_deadline(_get_env_float("SCAN_DEADLINE_S", 45.0)),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
)

if settings.fetch_batch_size < 1:
    raise RuntimeError("FETCH_BATCH_SIZE must be at least 1.")

if settings.max_code_files_fetch > settings.max_files_per_repo:
    raise RuntimeError("MAX_CODE_FILES_FETCH cannot exceed MAX_FILES_PER_REPO.")
