from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Proficiency = Literal["None", "Beginner", "Intermediate", "Expert"]
SkillStatus = Literal["Needs attention", "Medium", "Good"]
StatusColor = Literal["red", "yellow", "green"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScanRequest(CamelModel):
    github_username: str | None = Field(default=None, max_length=100)
    resume_text: str | None = Field(default=None, max_length=200_000)
    selected_skills: list[str] | None = Field(default=None, max_length=50)

    @field_validator("github_username")
    @classmethod
    def _strip_username(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lstrip("@")

    @field_validator("selected_skills")
    @classmethod
    def _dedupe_selected(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        seen: list[str] = []
        for item in value:
            clean = item.strip()
            if clean and clean not in seen:
                seen.append(clean)
        return seen


class SkillBreakdown(CamelModel):
    skill: str
    score: int = Field(ge=0, le=100)
    status: SkillStatus
    color: StatusColor
    proficiency: Proficiency | None = None
    supporting_repos: list[str] | None = None


class RemediationPlanOut(CamelModel):
    skill: str
    candidate_exists: bool
    goal: str
    repo_name: str | None = None
    usage: str | None = None
    usage_guidance: list[str] | None = Field(default=None, min_length=3, max_length=3)
    project_ideas: list[str] | None = Field(default=None, min_length=1, max_length=3)
    per_idea_plan: dict[str, list[str]] | None = None
    candidate_repos: list[str] | None = None


class ScanResponse(CamelModel):
    github_username: str
    repos_analyzed: int = Field(ge=0)
    overall_score: int = Field(ge=0, le=100)
    claimed_skills: list[str] = Field(default_factory=list)
    proven_skills: list[str] = Field(default_factory=list)
    missing_proof: list[str] = Field(default_factory=list)
    breakdown: list[SkillBreakdown] = Field(default_factory=list)
    remediation: list[RemediationPlanOut] | None = None
    partial: bool | None = None
