from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.rate_limit import rate_limit
from app.integrations.github import GitHubRepoSource, RepoSource, build_http_client
from app.schemas.scan import ScanRequest, ScanResponse
from app.services.scan_service import ScanError, run_scan

router = APIRouter()


async def get_repo_source(request: Request) -> AsyncIterator[RepoSource]:
    shared = getattr(request.app.state, "github_http", None)
    if shared is not None:
        yield GitHubRepoSource(shared)
        return
    async with build_http_client() as client:
        yield GitHubRepoSource(client)


def _raise_scan_error(exc: ScanError) -> None:
    headers = None
    if exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}
    raise HTTPException(status_code=exc.status_code, detail=str(exc), headers=headers) from exc


@router.post(
    "/scan",
    response_model=ScanResponse,
    response_model_exclude_none=True,
    summary="Score resume skills against GitHub evidence",
)
@rate_limit()
async def scan(
    request: Request,
    payload: ScanRequest,
    source: RepoSource = Depends(get_repo_source),
):
    try:
        return await run_scan(payload, source)
    except ScanError as exc:
        _raise_scan_error(exc)
