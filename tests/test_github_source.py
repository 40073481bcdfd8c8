import base64
import sys
import unittest
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.integrations.github import GitHubRepoSource, UpstreamError, build_http_client  # noqa: E402


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/rate_limit":
        return httpx.Response(200, json={"resources": {"core": {"limit": 60, "remaining": 12, "reset": 1900000000}}})
    if path == "/users/octocat/repos":
        return httpx.Response(
            200,
            json=[
                {"name": "hello", "fork": False, "default_branch": "trunk"},
                {"name": "forked", "fork": True, "default_branch": "main"},
                {"name": "plain", "fork": False},
            ],
        )
    if path == "/users/ghost/repos":
        return httpx.Response(404, json={"message": "Not Found"})
    if path == "/repos/octocat/hello/languages":
        return httpx.Response(200, json={"Python": 1200, "Shell": 0})
    if path == "/repos/octocat/hello/git/trees/trunk":
        return httpx.Response(
            200,
            json={
                "tree": [
                    {"path": "app.py", "type": "blob", "sha": "abc"},
                    {"path": "src", "type": "tree", "sha": "def"},
                    {"path": "broken", "type": "blob"},
                ]
            },
        )
    if path == "/repos/octocat/hello/git/blobs/abc":
        return httpx.Response(200, json={"content": _b64("import fastapi\n"), "encoding": "base64"})
    if path == "/repos/octocat/hello/contents/package.json":
        return httpx.Response(200, json={"content": _b64('{"dependencies": {}}'), "encoding": "base64"})
    if path == "/repos/octocat/hello/contents/src":
        return httpx.Response(200, json=[{"name": "index.js"}])
    if path == "/repos/octocat/slow/languages":
        raise httpx.ConnectTimeout("timed out", request=request)
    return httpx.Response(404, json={"message": "Not Found"})


class GitHubRepoSourceTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.requests: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return _handler(request)

        self.client = build_http_client(transport=httpx.MockTransport(recording), token="secret-token")
        self.source = GitHubRepoSource(self.client, repos_per_page=25)

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_listing_drops_forks_and_defaults_branch(self):
        repos = await self.source.list_public_repos("octocat")
        self.assertEqual([(repo.name, repo.default_branch) for repo in repos], [("hello", "trunk"), ("plain", "main")])
        request = self.requests[-1]
        self.assertEqual(request.url.params["per_page"], "25")
        self.assertEqual(request.url.params["sort"], "updated")
        self.assertEqual(request.headers["Authorization"], "Bearer secret-token")

    async def test_listing_failure_propagates_status(self):
        with self.assertRaises(UpstreamError) as ctx:
            await self.source.list_public_repos("ghost")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("Not Found", str(ctx.exception))

    async def test_rate_limit_status(self):
        status = await self.source.rate_limit_status()
        self.assertEqual(status.remaining, 12)
        self.assertEqual(status.reset_at.year, 2030)

    async def test_languages_tree_and_blob(self):
        self.assertEqual(await self.source.get_language_bytes("octocat", "hello"), {"Python": 1200})
        tree = await self.source.get_tree("octocat", "hello", "trunk")
        self.assertEqual([(entry.path, entry.type) for entry in tree], [("app.py", "blob"), ("src", "tree")])
        self.assertEqual(self.requests[-1].url.params["recursive"], "1")
        self.assertEqual(await self.source.get_blob_text("octocat", "hello", "abc"), "import fastapi\n")

    async def test_file_text_decodes_and_ignores_directories(self):
        self.assertEqual(await self.source.get_file_text("octocat", "hello", "package.json"), '{"dependencies": {}}')
        self.assertIsNone(await self.source.get_file_text("octocat", "hello", "src"))

    async def test_individual_failures_are_absent_not_raised(self):
        self.assertIsNone(await self.source.get_tree("octocat", "hello", "main"))
        self.assertIsNone(await self.source.get_blob_text("octocat", "hello", "missing"))
        self.assertIsNone(await self.source.get_file_text("octocat", "hello", "requirements.txt"))
        self.assertEqual(await self.source.get_language_bytes("octocat", "slow"), {})


if __name__ == "__main__":
    unittest.main()
