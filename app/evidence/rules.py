"""Static skill -> evidence rule table.

Each catalog skill maps to exactly one rule variant:

* ``LanguageRule``: scored purely from the language's share of scanned bytes.
* ``SignalRule``: scored from repositories that show file, dependency or
  source-code evidence.
* ``HybridRule``: both of the above, combined either by taking the greater
  value (``mode="max"``) or by an equal-weight blend (``mode="blend"``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Union

HybridMode = Literal["max", "blend"]


def _compile(*patterns: str, flags: int = re.IGNORECASE) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, flags) for pattern in patterns)


@dataclass(frozen=True, slots=True)
class Signals:
    indicators: tuple[str, ...] = field(default_factory=tuple)
    deps: tuple[str, ...] = field(default_factory=tuple)
    py_deps: tuple[str, ...] = field(default_factory=tuple)
    usage: tuple[re.Pattern[str], ...] = field(default_factory=tuple)
    advanced: tuple[re.Pattern[str], ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class LanguageRule:
    language: str


@dataclass(frozen=True, slots=True)
class SignalRule:
    signals: Signals


@dataclass(frozen=True, slots=True)
class HybridRule:
    language: str
    signals: Signals
    mode: HybridMode = "max"


SkillRule = Union[LanguageRule, SignalRule, HybridRule]


RULES: dict[str, SkillRule] = {
    # Languages
    "Java": LanguageRule("Java"),
    "Python": LanguageRule("Python"),
    "JavaScript": LanguageRule("JavaScript"),
    "TypeScript": LanguageRule("TypeScript"),
    "C++": LanguageRule("C++"),
    "HTML": HybridRule(
        "HTML",
        Signals(
            indicators=(".html",),
            usage=_compile(r"<\s*(div|section|main|header|footer|form|button|input)\b"),
            advanced=_compile(r"<\s*template\b", r"\baria-[a-z]+\s*=", r"<\s*(dialog|details|picture)\b"),
        ),
    ),
    "CSS": HybridRule(
        "CSS",
        Signals(
            indicators=(".css", ".scss"),
            usage=_compile(r"\bstyled\.", r"\bcss`", r"\bstyle\.\w+\s*=\s*['\"`]"),
            advanced=_compile(r"@media\s*\(", r"\bdisplay\s*:\s*grid\b", r"@keyframes\b", r"--[a-z][\w-]*\s*:"),
        ),
    ),
    # Frameworks and tools
    "React": SignalRule(
        Signals(
            deps=("react", "react-dom"),
            usage=_compile(r"from\s+['\"]react['\"]", r"require\(\s*['\"]react['\"]\s*\)"),
            advanced=_compile(r"\buseReducer\b", r"\bcreateContext\b", r"\buseMemo\b", r"\bforwardRef\b"),
        )
    ),
    "Next.js": SignalRule(
        Signals(
            deps=("next",),
            indicators=("next.config", "app/", "pages/"),
            usage=_compile(r"from\s+['\"]next/"),
            advanced=_compile(r"\bgetServerSideProps\b", r"\bgenerateStaticParams\b", r"['\"]use server['\"]", r"\bNextResponse\b"),
        )
    ),
    "React Native": SignalRule(
        Signals(
            deps=("react-native",),
            usage=_compile(r"from\s+['\"]react-native['\"]"),
            advanced=_compile(r"\bNativeModules\b", r"\bAnimated\.", r"\bPlatform\.select\("),
        )
    ),
    "Tailwind": SignalRule(
        Signals(
            deps=("tailwindcss",),
            indicators=("tailwind.config", "postcss.config"),
            usage=_compile(r"tailwindcss"),
            advanced=_compile(r"@apply\s", r"\btheme\s*:\s*\{[^}]*extend\s*:"),
        )
    ),
    "Node.js": SignalRule(
        Signals(
            indicators=("package.json",),
            usage=_compile(r"process\.env", r"require\(\s*['\"]http['\"]\s*\)"),
            advanced=_compile(r"\bworker_threads\b", r"\bnew\s+EventEmitter\b", r"\bstream\.pipeline\b", r"\bcluster\.fork\("),
        )
    ),
    "Express": SignalRule(
        Signals(
            deps=("express",),
            usage=_compile(r"from\s+['\"]express['\"]", r"require\(\s*['\"]express['\"]\s*\)", r"\bexpress\(\)"),
            advanced=_compile(r"\bexpress\.Router\(\)", r"\bapp\.use\(\s*\(\s*err\b", r"\bapp\.use\(\s*['\"]/"),
        )
    ),
    "FastAPI": SignalRule(
        Signals(
            py_deps=("fastapi",),
            usage=_compile(r"\bfrom\s+fastapi\s+import\b", r"\bFastAPI\("),
            advanced=_compile(r"\bAPIRouter\(", r"\bDepends\(", r"\bBackgroundTasks\b", r"@\w+\.middleware\("),
        )
    ),
    "Spring Boot": SignalRule(
        Signals(
            indicators=("pom.xml", "build.gradle", "gradle"),
            usage=_compile(r"@SpringBootApplication", r"org\.springframework"),
            advanced=_compile(r"@Transactional\b", r"@EnableScheduling\b", r"@ControllerAdvice\b", r"@Configuration\b"),
        )
    ),
    # DevOps
    "Docker": SignalRule(
        Signals(
            indicators=("dockerfile", "docker-compose", "compose.yml"),
            usage=_compile(r"^FROM\s+", flags=re.IGNORECASE | re.MULTILINE),
            advanced=_compile(r"^FROM\s+\S+\s+AS\s+\w+", r"^HEALTHCHECK\s", flags=re.IGNORECASE | re.MULTILINE),
        )
    ),
    "GitHub Actions": SignalRule(
        Signals(
            indicators=(".github/workflows",),
            usage=_compile(r"runs-on:\s+", r"uses:\s+"),
            advanced=_compile(r"\bstrategy:\s*\n\s+matrix:", r"\bworkflow_dispatch\b", r"\bneeds:\s+"),
        )
    ),
    "CI/CD": SignalRule(
        Signals(
            indicators=(".github/workflows", "jenkinsfile", ".gitlab-ci", "azure-pipelines"),
            usage=_compile(r"runs-on:\s+", r"pipeline\s*\{"),
            advanced=_compile(r"\benvironment:\s+\w+", r"\bdeploy\w*:", r"\bstage\s*\(\s*['\"]deploy"),
        )
    ),
    "Jenkins": SignalRule(
        Signals(
            indicators=("jenkinsfile",),
            usage=_compile(r"pipeline\s*\{"),
            advanced=_compile(r"\bparallel\s*\{", r"\bpost\s*\{", r"\bwhen\s*\{"),
        )
    ),
    # Cloud
    "AWS": SignalRule(
        Signals(
            deps=("aws-sdk", "@aws-sdk/client-s3", "@aws-sdk/client-dynamodb", "@aws-sdk/client-lambda"),
            py_deps=("boto3", "botocore"),
            indicators=("serverless.yml", ".tf", "cloudformation", "template.yaml"),
            usage=_compile(r"from\s+['\"]@aws-sdk/", r"require\(\s*['\"]aws-sdk['\"]\s*\)", r"\bprocess\.env\.AWS_", r"\bimport\s+boto3\b"),
            advanced=_compile(r"\bAWS::\w+::\w+", r"resource\s+\"aws_\w+\"", r"\bboto3\.client\(\s*['\"](sqs|sns|dynamodb|lambda)"),
        )
    ),
    # Databases
    "PostgreSQL": SignalRule(
        Signals(
            deps=("pg", "postgres"),
            py_deps=("psycopg2", "psycopg2-binary", "psycopg", "asyncpg"),
            usage=_compile(r"\bfrom\s+['\"](pg|postgres)['\"]", r"require\(\s*['\"](pg|postgres)['\"]\s*\)", r"postgres(ql)?://"),
            advanced=_compile(r"\bJSONB\b", r"\bCREATE\s+INDEX\b", r"\bON\s+CONFLICT\b", r"\bBEGIN\s*;"),
        )
    ),
    "MySQL": SignalRule(
        Signals(
            deps=("mysql", "mysql2"),
            py_deps=("mysqlclient", "pymysql", "mysql-connector-python"),
            usage=_compile(r"\bfrom\s+['\"](mysql|mysql2)['\"]", r"require\(\s*['\"](mysql|mysql2)['\"]\s*\)", r"mysql://"),
            advanced=_compile(r"\bcreatePool\(", r"\bON\s+DUPLICATE\s+KEY\b", r"\bENGINE\s*=\s*InnoDB\b"),
        )
    ),
    "MongoDB": SignalRule(
        Signals(
            deps=("mongodb", "mongoose"),
            py_deps=("pymongo", "motor"),
            usage=_compile(r"\bfrom\s+['\"](mongodb|mongoose)['\"]", r"require\(\s*['\"](mongodb|mongoose)['\"]\s*\)", r"mongodb(\+srv)?://"),
            advanced=_compile(r"\.aggregate\(\s*\[", r"\$lookup\b", r"\.createIndex\(", r"\bstartSession\("),
        )
    ),
    # QA
    "Testing": SignalRule(
        Signals(
            deps=("jest", "vitest", "mocha", "chai", "cypress", "playwright"),
            py_deps=("pytest",),
            indicators=("__tests__", ".spec.", ".test.", "tests/test_"),
            usage=_compile(r"\bdescribe\(", r"\btest\(", r"\bexpect\(", r"\bimport\s+(pytest|unittest)\b"),
            advanced=_compile(r"\bjest\.mock\(", r"\bbeforeEach\(", r"@pytest\.fixture\b", r"\bunittest\.mock\b", r"@pytest\.mark\.parametrize\b"),
        )
    ),
    # APIs
    "REST API": SignalRule(
        Signals(
            deps=("axios",),
            usage=_compile(r"\bfetch\(", r"\baxios\.", r"\bapp\.(get|post|put|delete)\(", r"\brouter\.(get|post|put|delete)\("),
            advanced=_compile(r"\b(app|router)\.(patch|put)\(\s*['\"][^'\"]*/:\w+", r"\bstatus\(\s*(201|204|404|409)\s*\)", r"@(Get|Post|Put|Delete)Mapping\b"),
        )
    ),
    # Concepts
    "Concurrency": SignalRule(
        Signals(
            usage=_compile(r"\bPromise\.all\b", r"\bworker_threads\b", r"\bnew\s+Worker\b", r"\basyncio\.gather\b"),
            advanced=_compile(r"\bSharedArrayBuffer\b", r"\bAtomics\.", r"\basyncio\.Semaphore\b", r"\bThreadPoolExecutor\b", r"\bCompletableFuture\b"),
        )
    ),
    "Microservices": SignalRule(
        Signals(
            indicators=("docker-compose", "k8s", "helm", "services/"),
            usage=_compile(r"\bgrpc\b", r"\bkafka\b", r"\brabbitmq\b"),
            advanced=_compile(r"\bkind:\s*(Deployment|Service|Ingress)\b", r"\bcircuit\s*breaker\b", r"\bservice\s+\w+\s*\{\s*rpc\b"),
        )
    ),
}


def get_rule(skill: str) -> SkillRule | None:
    return RULES.get(skill)
