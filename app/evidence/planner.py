from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .facts import RepositoryFacts

logger = logging.getLogger(__name__)

EXTENSION_POINTS = 3
DEPENDENCY_POINTS = 4
INDICATOR_POINTS = 5
SIZE_BONUS_CAP = 2
SIZE_BONUS_STEP = 50
MAX_PROJECT_IDEAS = 3

_JS_EXT = (".js", ".jsx", ".ts", ".tsx")


@dataclass(frozen=True, slots=True)
class Affinity:
    extensions: tuple[str, ...] = ()
    deps: tuple[str, ...] = ()
    indicators: tuple[str, ...] = ()


# Looser than the evidence rules: these only suggest where proof would fit.
AFFINITY: dict[str, Affinity] = {
    "Java": Affinity(extensions=(".java",), indicators=("pom.xml", "build.gradle")),
    "Python": Affinity(extensions=(".py",), indicators=("requirements.txt", "pyproject.toml")),
    "JavaScript": Affinity(extensions=(".js", ".jsx")),
    "TypeScript": Affinity(extensions=(".ts", ".tsx"), indicators=("tsconfig",)),
    "C++": Affinity(extensions=(".cpp", ".cc", ".hpp", ".h")),
    "React": Affinity(extensions=_JS_EXT, deps=("react", "react-dom")),
    "Next.js": Affinity(extensions=_JS_EXT, deps=("next",), indicators=("next.config",)),
    "React Native": Affinity(extensions=_JS_EXT, deps=("react-native", "expo")),
    "HTML": Affinity(extensions=(".html",)),
    "CSS": Affinity(extensions=(".css", ".scss")),
    "Tailwind": Affinity(deps=("tailwindcss", "postcss"), indicators=("postcss.config",)),
    "Node.js": Affinity(extensions=_JS_EXT, deps=("express",), indicators=("package.json",)),
    "Express": Affinity(extensions=(".js", ".ts"), deps=("express", "koa", "fastify")),
    "Spring Boot": Affinity(extensions=(".java", ".kt"), indicators=("pom.xml", "build.gradle")),
    "FastAPI": Affinity(extensions=(".py",), deps=("fastapi", "flask", "starlette", "uvicorn")),
    "REST API": Affinity(deps=("express", "fastapi", "flask", "axios"), indicators=("routes", "controller", "api/")),
    "Microservices": Affinity(indicators=("docker-compose", "services/")),
    "AWS": Affinity(deps=("aws-sdk", "boto3"), indicators=("serverless.yml", ".tf")),
    "Docker": Affinity(indicators=("dockerfile",)),
    "Jenkins": Affinity(indicators=("jenkinsfile",)),
    "CI/CD": Affinity(indicators=(".github/workflows", ".gitlab-ci", "jenkinsfile")),
    "GitHub Actions": Affinity(indicators=(".github/workflows",)),
    "PostgreSQL": Affinity(deps=("pg", "sequelize", "prisma", "sqlalchemy", "psycopg2"), indicators=("migrations",)),
    "MySQL": Affinity(deps=("mysql", "mysql2", "sequelize", "sqlalchemy", "pymysql"), indicators=("migrations",)),
    "MongoDB": Affinity(deps=("mongodb", "mongoose", "pymongo")),
    "Testing": Affinity(deps=("jest", "vitest", "mocha", "pytest"), indicators=("test",)),
    "Concurrency": Affinity(extensions=(".py", ".js", ".ts", ".java")),
}

# Skill -> key into the canned text tables below.
_TOPIC: dict[str, str] = {
    "React": "react",
    "React Native": "react",
    "Next.js": "next",
    "Node.js": "node",
    "Express": "node",
    "Docker": "docker",
    "GitHub Actions": "ci",
    "CI/CD": "ci",
    "Jenkins": "ci",
    "Testing": "testing",
    "AWS": "aws",
    "PostgreSQL": "sql",
    "MySQL": "sql",
    "MongoDB": "mongo",
    "Python": "python",
    "FastAPI": "python",
    "Java": "java",
    "Spring Boot": "java",
}

_GOALS: dict[str, str] = {
    "react": "Add a small React component and integrate it into an existing frontend repo to demonstrate component based UI work.",
    "next": "Add a page or API route using Next.js features (app/pages, next.config) to show framework usage.",
    "node": "Add a small Node.js service or script (package.json + index.js) to demonstrate backend work.",
    "docker": "Add a Dockerfile and .dockerignore to containerize an existing service.",
    "ci": "Add a CI workflow under .github/workflows to run tests and builds.",
    "testing": "Add unit or integration tests using a standard test framework and expose a test script.",
    "aws": "Add a small integration showing AWS SDK usage or a short infrastructure example.",
}

_USAGE_GUIDANCE: dict[str, tuple[str, str, str]] = {
    "react": (
        "Add a small demo component in an examples or components folder so reviewers can see React usage in context.",
        "Document one example import and the demo page where the component is rendered so it is easy to find.",
        "Include a short note describing the component purpose and expected behavior for quick verification.",
    ),
    "next": (
        "Add one server rendered page or API route in the app or pages directory to show Next.js features.",
        "Mention the route path and the local URL to visit so reviewers can confirm server side rendering.",
        "Include a brief note about where data originates and which file demonstrates the framework usage.",
    ),
    "node": (
        "Add a compact API route or script in a server or scripts folder to show Node.js backend work.",
        "Provide one curl example or command that demonstrates the endpoint response for quick verification.",
        "Add a short description of the endpoint purpose and expected JSON fields so reviewers can validate behavior.",
    ),
    "docker": (
        "Add a Dockerfile at the project root and a .dockerignore so the repository shows containerization skills.",
        "Document exact build and run commands so reviewers can reproduce the container locally.",
        "Point to a health or status command the reviewer can run to confirm the container starts correctly.",
    ),
    "ci": (
        "Add a minimal workflow under .github/workflows that runs the project test command to demonstrate CI integration.",
        "Mention the workflow file name and the trigger (push or pull request) so reviewers can find the run.",
        "Include a short note about what the workflow verifies and how success looks in the Actions tab.",
    ),
    "testing": (
        "Add a focused unit test for a core module and expose a test script in the project manifest.",
        "Point to the test file and list the exact command to run tests so reviewers can reproduce results.",
        "Include one sentence about what the test demonstrates and any fixture or mock used.",
    ),
    "aws": (
        "Add a short example that uses the AWS SDK to perform one clear action such as uploading to S3.",
        "Document how reviewers can configure credentials or use a local emulator like LocalStack.",
        "Mention the file that contains the example and the exact command to run it for verification.",
    ),
    "sql": (
        "Add a migration or a small query example in a migrations or db directory to demonstrate database usage.",
        "Document the connection URL format and a one line query to run for verification.",
        "Mention the migration or seed file so reviewers can inspect the schema and sample data.",
    ),
    "mongo": (
        "Add a small data example that inserts and queries a document to show MongoDB usage within the repository.",
        "Mention the script or module that runs the example and the connection string format.",
        "Include a short note about the expected document output so reviewers can confirm the example quickly.",
    ),
    "python": (
        "Add a small script and a requirements.txt and include a pytest test to make Python usage visible.",
        "Document the Python version and exact commands to create a venv and run the test.",
        "Point to the script and test file so reviewers can inspect the behavior quickly.",
    ),
    "java": (
        "Add a tiny module with a JUnit test and include build files so Java usage is visible in the repository.",
        "Mention the build command (mvn or gradle) and the test to run for verification.",
        "Point to the example class and test file so reviewers can see the demonstration immediately.",
    ),
}
_GENERIC_GUIDANCE = (
    "Add a focused example in a clear folder and mention the file that demonstrates the skill.",
    "Document the exact command reviewers can run to verify the example.",
    "Include a one line description of what the example shows for quick inspection.",
)

_PROJECT_IDEAS: dict[str, tuple[str, ...]] = {
    "react": (
        "A notes component library that showcases interactive list and state management.",
        "A reusable form input collection with validation patterns and examples.",
        "A dashboard card component that displays live or sample data and can be reused across pages.",
    ),
    "next": (
        "A minimal blog that demonstrates server rendered pages and simple post fetching.",
        "An events listing site with a server rendered index and JSON API for details.",
        "A documentation site that uses server rendering for content and a search API.",
    ),
    "node": (
        "A resume analyzer service that accepts profiles and returns simple matching suggestions.",
        "A parking helper API that tracks available spots and exposes search endpoints.",
        "A small CRUD microservice that manages items and demonstrates input validation.",
    ),
    "docker": (
        "A containerized sample web service designed to demonstrate multi stage builds.",
        "A tiny tooling image that wraps a CLI and can be run as a portable utility.",
    ),
    "ci": (
        "A continuous integration workflow that runs lint and tests for a project.",
        "A release automation workflow that builds and publishes an artifact when releasing.",
    ),
    "testing": (
        "A focused unit test suite that covers core module behavior and edge cases.",
        "A small end to end test that verifies a critical user flow for the app.",
    ),
    "aws": (
        "An S3 uploader utility that demonstrates object storage interactions.",
        "A simple Lambda function that processes input and writes results to storage.",
    ),
    "sql": (
        "A tiny app that illustrates database migrations and a sample analytical query.",
        "A URL shortener service that stores mappings and demonstrates basic SQL usage.",
    ),
    "mongo": (
        "A notes API that stores JSON documents and demonstrates flexible queries.",
        "A content service that uses document storage for varying schemas and search.",
    ),
    "python": (
        "A small machine learning trainer that fits a random forest on a toy dataset and reports metrics.",
        "A command line CSV processor that summarizes and filters data.",
    ),
    "java": (
        "A tiny service module with one REST endpoint and a JUnit test that validates its behavior.",
        "A simple library that provides a clear example class and unit test.",
    ),
}

_PROJECT_NAMES: dict[str, tuple[str, ...]] = {
    "react": ("Interactive notes app", "Tagged todo list", "Recipe manager with filters"),
    "next": ("Server rendered personal blog", "Events calendar with details API", "Documentation site with search"),
    "node": ("Resume analyzer API", "Parking availability service", "Inventory CRUD API"),
    "python": ("Random forest trainer for toy data", "CSV summarizer CLI", "Simple web scraper"),
    "docker": ("Containerized web API", "CLI utility image", "Multi stage build example"),
    "aws": ("S3 uploader utility", "Lambda image processor", "Simple DynamoDB key value store"),
    "sql": ("URL shortener", "Analytics sample app", "Blog with migrations"),
    "mongo": ("Notes API", "Content store with flexible schema", "Activity log service"),
    "ci": ("Lint and test CI workflow", "Release automation workflow", "Dependency update workflow"),
    "testing": ("Unit test suite for core module", "End to end test for critical flow", "Property based test example"),
    "java": ("Tiny REST service module", "Utility library with example", "CLI tool with unit tests"),
}

# Keyword -> steps, checked in order against the lower-cased idea text.
_PROJECT_PLANS: tuple[tuple[tuple[str, ...], tuple[str, str, str]], ...] = (
    (
        ("notes",),
        (
            "Build a single page that creates, edits, and lists notes with local persistence.",
            "Include a small search or tag filter to demonstrate state management or queries.",
            "Add one example data file or seed so reviewers can see sample content quickly.",
        ),
    ),
    (
        ("todo", "tasks"),
        (
            "Implement create, update, and delete flows for tasks to show CRUD behavior.",
            "Add a small filter by tag or status to demonstrate list handling and state.",
            "Provide a sample dataset or example usage that reviewers can inspect without running complex setup.",
        ),
    ),
    (
        ("resume", "analyzer"),
        (
            "Accept a simple JSON profile and return a scored summary of matching skills.",
            "Demonstrate how matching logic maps resume fields to skill categories with one example input.",
            "Include one sample input and the corresponding output so reviewers can verify the behavior quickly.",
        ),
    ),
    (
        ("parking",),
        (
            "Model available spots and a query endpoint to find nearby spots by simple criteria.",
            "Provide an example of adding and removing spots so reviewers can exercise state changes.",
            "Include one example query and the expected JSON response for quick verification.",
        ),
    ),
    (
        ("random forest", "trainer"),
        (
            "Train a small random forest on a toy dataset and report accuracy or a simple metric.",
            "Include the dataset or a script that generates synthetic data so results are reproducible.",
            "Provide the command and expected metric output so reviewers can confirm the training ran.",
        ),
    ),
)
_GENERIC_PLAN = (
    "Provide a minimal runnable entrypoint that demonstrates the core feature.",
    "Include one sample input and the expected output so reviewers can verify behavior quickly.",
    "Add a short README note explaining where the example is and how to run the verification command.",
)


@dataclass(slots=True)
class RemediationPlan:
    skill: str
    candidate_exists: bool
    goal: str
    repo_name: str | None = None
    usage: str | None = None
    usage_guidance: list[str] | None = None
    project_ideas: list[str] | None = None
    per_idea_plan: dict[str, list[str]] | None = None
    candidate_repos: list[str] = field(default_factory=list)


def _topic(skill: str) -> str | None:
    return _TOPIC.get(skill)


def goal_for(skill: str) -> str:
    topic = _topic(skill)
    if topic and topic in _GOALS:
        return _GOALS[topic]
    return f"Add a focused example demonstrating {skill}."


def affinity_score(skill: str, facts: RepositoryFacts) -> int:
    rule = AFFINITY.get(skill)
    if rule is None:
        return 0

    files = facts.files
    score = 0
    if rule.extensions and any(path.endswith(rule.extensions) for path in files):
        score += EXTENSION_POINTS
    if rule.deps and any(dep in facts.deps or dep in facts.py_deps for dep in rule.deps):
        score += DEPENDENCY_POINTS
    if rule.indicators and any(indicator in path for path in files for indicator in rule.indicators):
        score += INDICATOR_POINTS
    if score > 0:
        score += min(SIZE_BONUS_CAP, len(files) // SIZE_BONUS_STEP)
    return score


def rank_repos(skill: str, facts_list: Sequence[RepositoryFacts], limit: int = 3) -> list[str]:
    scored = [(affinity_score(skill, facts), index, facts.repo) for index, facts in enumerate(facts_list)]
    scored = [item for item in scored if item[0] > 0]
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [name for _, _, name in scored[:limit]]


def _plan_for_idea(idea: str) -> list[str]:
    lowered = idea.lower()
    for keywords, steps in _PROJECT_PLANS:
        if any(keyword in lowered for keyword in keywords):
            return list(steps)
    return list(_GENERIC_PLAN)


def project_ideas_for(skill: str) -> list[str]:
    topic = _topic(skill)
    primary = list(_PROJECT_IDEAS.get(topic, ())) if topic else []
    if not primary:
        primary = [
            f"A focused demo project that highlights {skill} with one clear outcome reviewers can run locally.",
            f"A small example that exercises {skill} in isolation and is easy to inspect.",
        ]
    names = list(_PROJECT_NAMES.get(topic, ())) if topic else []
    if not names:
        names = [f"{skill} demo project", f"{skill} example service", f"{skill} starter app"]

    ideas = primary[:MAX_PROJECT_IDEAS]
    for name in names:
        if len(ideas) >= MAX_PROJECT_IDEAS:
            break
        if name not in ideas:
            ideas.append(name)
    return ideas


def build_plan(skill: str, facts_list: Sequence[RepositoryFacts]) -> RemediationPlan:
    """Suggest where to add proof for ``skill``: an existing repo or new projects."""
    candidates = rank_repos(skill, facts_list)
    goal = goal_for(skill)

    if candidates:
        repo_name = candidates[0]
        topic = _topic(skill)
        guidance = _USAGE_GUIDANCE.get(topic, _GENERIC_GUIDANCE) if topic else _GENERIC_GUIDANCE
        logger.debug("remediation_candidate skill=%s repo=%s", skill, repo_name)
        return RemediationPlan(
            skill=skill,
            candidate_exists=True,
            goal=goal,
            repo_name=repo_name,
            usage=f"Demonstrate this skill in repository: {repo_name}.",
            usage_guidance=list(guidance),
            candidate_repos=candidates,
        )

    ideas = project_ideas_for(skill)
    return RemediationPlan(
        skill=skill,
        candidate_exists=False,
        goal=goal,
        project_ideas=ideas,
        per_idea_plan={idea: _plan_for_idea(idea) for idea in ideas},
    )
