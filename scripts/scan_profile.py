from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.integrations.github import GitHubRepoSource, build_http_client  # noqa: E402
from app.schemas.scan import ScanRequest  # noqa: E402
from app.services.scan_service import ScanError, run_scan  # noqa: E402


async def _run(username: str, resume_text: str, selected: list[str] | None) -> dict:
    payload = ScanRequest(github_username=username, resume_text=resume_text, selected_skills=selected)
    async with build_http_client() as client:
        response = await run_scan(payload, GitHubRepoSource(client))
    return response.model_dump(mode="json", by_alias=True, exclude_none=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Score resume skills against a GitHub user's public repositories.")
    parser.add_argument("username", help="GitHub username")
    parser.add_argument("--resume", required=True, help="Path to a plain-text resume")
    parser.add_argument(
        "--plan",
        action="append",
        default=None,
        metavar="SKILL",
        help="Build a remediation plan for this skill (repeatable).",
    )
    parser.add_argument("--out", default=None, help="Write JSON here instead of stdout")
    args = parser.parse_args()

    resume_text = Path(args.resume).read_text(encoding="utf-8")
    try:
        result = asyncio.run(_run(args.username, resume_text, args.plan))
    except ScanError as exc:
        print(f"error ({exc.status_code}): {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rendered = json.dumps(result, indent=2, ensure_ascii=False)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(rendered + "\n", encoding="utf-8")
    else:
        print(rendered)


if __name__ == "__main__":
    main()
