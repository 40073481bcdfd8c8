from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

_API_VERSION = "2022-11-28"


class UpstreamError(RuntimeError):
    """The provider rejected a call the scan cannot continue without."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


class QuotaExhaustedError(RuntimeError):
    def __init__(self, remaining: int, reset_at: datetime | None):
        when = reset_at.strftime("%Y-%m-%d %H:%M:%S UTC") if reset_at else "later"
        super().__init__(f"GitHub API rate limit nearly exhausted ({remaining} calls left). Try again after {when}.")
        self.remaining = remaining
        self.reset_at = reset_at


@dataclass(frozen=True, slots=True)
class RepoRef:
    name: str
    default_branch: str = "main"


@dataclass(frozen=True, slots=True)
class TreeEntry:
    path: str
    type: str
    sha: str


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    limit: int
    remaining: int
    reset_at: datetime | None


class RepoSource(Protocol):
    async def rate_limit_status(self) -> RateLimitStatus | None: ...

    async def list_public_repos(self, user: str) -> list[RepoRef]: ...

    async def get_language_bytes(self, owner: str, repo: str) -> dict[str, int]: ...

    async def get_tree(self, owner: str, repo: str, ref: str) -> list[TreeEntry] | None: ...

    async def get_blob_text(self, owner: str, repo: str, sha: str) -> str | None: ...

    async def get_file_text(self, owner: str, repo: str, path: str) -> str | None: ...


def build_http_client(
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    token: str | None = None,
) -> httpx.AsyncClient:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": _API_VERSION,
        "User-Agent": "proofmap-api",
    }
    auth_token = token if token is not None else settings.github_token
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return httpx.AsyncClient(
        base_url=settings.github_api_url,
        headers=headers,
        timeout=settings.github_timeout_s,
        limits=httpx.Limits(max_connections=settings.github_max_connections),
        transport=transport,
    )


def _decode_base64(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    content = payload.get("content")
    if not content or payload.get("encoding") != "base64":
        return None
    try:
        raw = base64.b64decode(content)
    except (binascii.Error, ValueError):
        return None
    return raw.decode("utf-8", errors="replace")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or "Unknown error"


def _segment(value: str) -> str:
    return quote(value, safe="")


class GitHubRepoSource:
    """Repository source over the GitHub REST API.

    Every call except the repository listing degrades to an empty/absent result
    so a single broken repository never aborts a multi-repository scan.
    """

    def __init__(self, client: httpx.AsyncClient, repos_per_page: int | None = None):
        self._client = client
        self._repos_per_page = repos_per_page or settings.github_repos_per_page

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any | None:
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("github_request_failed url=%s error=%s", url, exc)
            return None
        if response.status_code != 200:
            logger.info("github_request_status url=%s status=%s", url, response.status_code)
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("github_invalid_json url=%s", url)
            return None

    async def rate_limit_status(self) -> RateLimitStatus | None:
        data = await self._get_json("/rate_limit")
        if not isinstance(data, dict):
            return None
        core = (data.get("resources") or {}).get("core") or data.get("rate") or {}
        try:
            remaining = int(core.get("remaining"))
            limit = int(core.get("limit", 0))
        except (TypeError, ValueError):
            return None
        reset_raw = core.get("reset")
        reset_at = None
        if isinstance(reset_raw, (int, float)):
            reset_at = datetime.fromtimestamp(reset_raw, tz=timezone.utc)
        return RateLimitStatus(limit=limit, remaining=remaining, reset_at=reset_at)

    async def list_public_repos(self, user: str) -> list[RepoRef]:
        url = f"/users/{_segment(user)}/repos"
        params = {"per_page": self._repos_per_page, "sort": "updated"}
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Scan failed (502): {exc}", status_code=502) from exc

        if response.status_code != 200:
            status_code = response.status_code
            raise UpstreamError(
                f"Scan failed ({status_code}): {_error_message(response)}",
                status_code=status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("Scan failed (502): invalid repository listing", status_code=502) from exc
        if not isinstance(payload, list):
            raise UpstreamError("Scan failed (502): invalid repository listing", status_code=502)

        repos: list[RepoRef] = []
        for item in payload:
            if not isinstance(item, dict) or item.get("fork"):
                continue
            name = str(item.get("name") or "").strip()
            if not name:
                continue
            repos.append(RepoRef(name=name, default_branch=str(item.get("default_branch") or "main")))
        return repos

    async def get_language_bytes(self, owner: str, repo: str) -> dict[str, int]:
        data = await self._get_json(f"/repos/{_segment(owner)}/{_segment(repo)}/languages")
        if not isinstance(data, dict):
            return {}
        output: dict[str, int] = {}
        for language, count in data.items():
            if isinstance(count, int) and count > 0:
                output[str(language)] = count
        return output

    async def get_tree(self, owner: str, repo: str, ref: str) -> list[TreeEntry] | None:
        url = f"/repos/{_segment(owner)}/{_segment(repo)}/git/trees/{_segment(ref)}"
        data = await self._get_json(url, params={"recursive": "1"})
        if not isinstance(data, dict) or not isinstance(data.get("tree"), list):
            return None
        if data.get("truncated"):
            logger.info("github_tree_truncated repo=%s/%s ref=%s", owner, repo, ref)
        entries: list[TreeEntry] = []
        for item in data["tree"]:
            if not isinstance(item, dict):
                continue
            path = item.get("path")
            sha = item.get("sha")
            if not path or not sha:
                continue
            entries.append(TreeEntry(path=str(path), type=str(item.get("type") or ""), sha=str(sha)))
        return entries

    async def get_blob_text(self, owner: str, repo: str, sha: str) -> str | None:
        data = await self._get_json(f"/repos/{_segment(owner)}/{_segment(repo)}/git/blobs/{_segment(sha)}")
        return _decode_base64(data)

    async def get_file_text(self, owner: str, repo: str, path: str) -> str | None:
        encoded_path = quote(path.lstrip("/"), safe="/")
        data = await self._get_json(f"/repos/{_segment(owner)}/{_segment(repo)}/contents/{encoded_path}")
        # A list payload means the path is a directory.
        return _decode_base64(data)
