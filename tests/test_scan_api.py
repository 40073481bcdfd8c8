import json
import os
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi.testclient import TestClient  # noqa: E402

from app.api.v1.scan import get_repo_source  # noqa: E402
from app.integrations.github import UpstreamError  # noqa: E402
from app.main import app  # noqa: E402
from fake_source import FakeRepo, FakeRepoSource  # noqa: E402


class ScanApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _use(self, source: FakeRepoSource) -> FakeRepoSource:
        app.dependency_overrides[get_repo_source] = lambda: source
        return source

    def _express_repo(self, name: str = "shop-api") -> FakeRepo:
        return FakeRepo(
            name=name,
            files={
                "package.json": json.dumps({"dependencies": {"express": "^4.19.0"}}),
                "Dockerfile": "FROM node:20-alpine\nCMD [\"node\", \"index.js\"]\n",
                "index.js": "const express = require('express');\nconst app = express();\n",
            },
            languages={"JavaScript": 4000, "Dockerfile": 100},
        )

    def test_express_and_docker_resume_is_proven(self):
        self._use(FakeRepoSource([self._express_repo()]))
        response = self.client.post(
            "/v1/scan",
            json={
                "githubUsername": "octo",
                "resumeText": "Built APIs with Node.js and Express, deployed via Docker",
            },
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()

        self.assertEqual(body["githubUsername"], "octo")
        self.assertEqual(body["reposAnalyzed"], 1)
        self.assertTrue({"Node.js", "Express", "Docker"}.issubset(body["claimedSkills"]))
        rows = {row["skill"]: row for row in body["breakdown"]}
        for skill in ("Express", "Docker"):
            self.assertGreaterEqual(rows[skill]["score"], 50)
            self.assertIn(rows[skill]["status"], {"Medium", "Good"})
            self.assertEqual(rows[skill]["supportingRepos"], ["shop-api"])
            self.assertIn(skill, body["provenSkills"])
        scores = [row["score"] for row in body["breakdown"]]
        self.assertEqual(body["overallScore"], int(sum(scores) / len(scores) + 0.5))
        self.assertNotIn("remediation", body)

    def test_language_skill_omits_proficiency(self):
        self._use(FakeRepoSource([self._express_repo()]))
        response = self.client.post(
            "/v1/scan",
            json={"githubUsername": "octo", "resumeText": "Python developer"},
        )
        body = response.json()
        self.assertEqual(body["claimedSkills"], ["Python"])
        row = body["breakdown"][0]
        self.assertEqual(row["score"], 0)
        self.assertEqual(row["status"], "Needs attention")
        self.assertEqual(row["color"], "red")
        self.assertNotIn("proficiency", row)
        self.assertEqual(body["missingProof"], ["Python"])

    def test_empty_resume_text_scores_nothing(self):
        source = self._use(FakeRepoSource([self._express_repo()]))
        response = self.client.post("/v1/scan", json={"githubUsername": "octo", "resumeText": ""})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["claimedSkills"], [])
        self.assertEqual(body["overallScore"], 0)
        self.assertEqual(body["breakdown"], [])
        self.assertEqual(source.count("tree"), 0)

    def test_user_without_repositories(self):
        self._use(FakeRepoSource([FakeRepo(name="fork", fork=True)]))
        response = self.client.post(
            "/v1/scan",
            json={"githubUsername": "octo", "resumeText": "React, Python and Docker"},
        )
        body = response.json()
        self.assertEqual(body["reposAnalyzed"], 0)
        self.assertTrue(all(row["score"] == 0 for row in body["breakdown"]))
        self.assertEqual(body["overallScore"], 0)

    def test_missing_input_fails_fast(self):
        source = self._use(FakeRepoSource([self._express_repo()]))
        response = self.client.post("/v1/scan", json={"resumeText": "Docker"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Missing GitHub username")

        response = self.client.post("/v1/scan", json={"githubUsername": "octo"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Missing resumeText")
        self.assertEqual(source.calls, [])

    def test_quota_below_floor_is_rejected_before_fetching(self):
        source = self._use(FakeRepoSource([self._express_repo()], remaining=3))
        response = self.client.post(
            "/v1/scan",
            json={"githubUsername": "octo", "resumeText": "Docker"},
        )
        self.assertEqual(response.status_code, 429)
        self.assertIn("2030-01-01", response.json()["detail"])
        self.assertIn("retry-after", response.headers)
        self.assertEqual(source.calls, [("rate_limit",)])

    def test_listing_failure_passes_status_through(self):
        self._use(FakeRepoSource(listing_error=UpstreamError("Scan failed (404): Not Found", status_code=404)))
        response = self.client.post(
            "/v1/scan",
            json={"githubUsername": "ghost", "resumeText": "Docker"},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Scan failed (404): Not Found")

    def test_remediation_for_selected_skills(self):
        repo = FakeRepo(
            name="frontend",
            files={
                "package.json": json.dumps({"dependencies": {"react": "18.2.0"}}),
                "src/App.jsx": "export default function App() { return null; }\n",
            },
            languages={"JavaScript": 900},
        )
        self._use(FakeRepoSource([repo]))
        response = self.client.post(
            "/v1/scan",
            json={
                "githubUsername": "octo",
                "resumeText": "Next.js and MongoDB",
                "selectedSkills": ["Next.js", "MongoDB", "Next.js"],
            },
        )
        self.assertEqual(response.status_code, 200)
        plans = {plan["skill"]: plan for plan in response.json()["remediation"]}
        self.assertEqual(set(plans), {"Next.js", "MongoDB"})

        nextjs = plans["Next.js"]
        self.assertTrue(nextjs["candidateExists"])
        self.assertEqual(nextjs["repoName"], "frontend")
        self.assertEqual(nextjs["candidateRepos"], ["frontend"])
        self.assertEqual(len(nextjs["usageGuidance"]), 3)

        mongo = plans["MongoDB"]
        self.assertFalse(mongo["candidateExists"])
        self.assertNotIn("candidateRepos", mongo)
        self.assertTrue(1 <= len(mongo["projectIdeas"]) <= 3)
        for idea in mongo["projectIdeas"]:
            self.assertEqual(len(mongo["perIdeaPlan"][idea]), 3)

    def test_repeat_scans_are_identical(self):
        source = self._use(FakeRepoSource([self._express_repo(), self._express_repo("worker")]))
        payload = {"githubUsername": "octo", "resumeText": "Express, Docker, JavaScript, CSS"}
        first = self.client.post("/v1/scan", json=payload).json()
        second = self.client.post("/v1/scan", json=payload).json()
        self.assertEqual(first["breakdown"], second["breakdown"])
        self.assertGreater(source.count("blob"), 0)


class HealthApiTests(unittest.TestCase):
    def test_health(self):
        client = TestClient(app)
        response = client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")
        self.assertIn("githubTokenConfigured", response.json())


if __name__ == "__main__":
    unittest.main()
