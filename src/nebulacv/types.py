from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TemplateId = Literal["classic", "compact"]
Plan = Literal["free", "pro"]
ApplicationStatus = Literal["applied", "interviewing", "offer", "rejected", "hold"]
CheckStatus = Literal["pass", "warning", "pending"]

APPLICATION_STATUSES: tuple[str, ...] = ("applied", "interviewing", "offer", "rejected", "hold")


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ResumeHeader(WireModel):
    full_name: str = Field(default="", alias="fullName")
    title: str = "Frontend Developer"
    location: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    github: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def absent_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class SectionModel(WireModel):
    @model_validator(mode="before")
    @classmethod
    def nulls_as_absent(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ExperienceItem(SectionModel):
    title: str = ""
    company: str = ""
    period: str = ""
    location: str = ""
    bullets: list[str] = Field(default_factory=list)


class ProjectItem(SectionModel):
    name: str = ""
    description: str = ""
    stack: list[str] = Field(default_factory=list)
    link: str = ""


class EducationItem(SectionModel):
    institution: str = ""
    degree: str = ""
    location: str = ""
    period: str = ""


SECTION_ITEM_MODELS: dict[str, type[SectionModel]] = {
    "experiences": ExperienceItem,
    "projects": ProjectItem,
    "education": EducationItem,
}


class ResumeBody(SectionModel):
    """Structured resume content.

    ``model_validate`` is strict about shapes and is what model output goes
    through. ``from_loose`` is the forgiving reader used for stored or
    client-supplied bodies: any section that is not a list collapses to an
    empty list and malformed entries are dropped.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    summary: str = ""
    skills: list[str] = Field(default_factory=list)
    experiences: list[ExperienceItem] = Field(default_factory=list)
    projects: list[ProjectItem] = Field(default_factory=list)
    education: list[EducationItem] = Field(default_factory=list)

    @classmethod
    def from_loose(cls, raw: Any) -> "ResumeBody":
        if isinstance(raw, ResumeBody):
            return raw
        data = dict(raw) if isinstance(raw, dict) else {}

        summary = data.get("summary")
        data["summary"] = summary if isinstance(summary, str) else ""

        skills = data.get("skills")
        data["skills"] = [s for s in skills if isinstance(s, str)] if isinstance(skills, list) else []

        for section, item_model in SECTION_ITEM_MODELS.items():
            entries = data.get(section)
            if not isinstance(entries, list):
                data[section] = []
                continue
            kept = []
            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                try:
                    kept.append(item_model.model_validate(_clean_lists(entry)))
                except ValueError:
                    continue
            data[section] = kept

        return cls.model_validate(data)


def _clean_lists(entry: dict[str, Any]) -> dict[str, Any]:
    cleaned = {key: value for key, value in entry.items() if value is not None}
    for key in ("bullets", "stack"):
        if key in cleaned and not isinstance(cleaned[key], list):
            cleaned[key] = []
        elif key in cleaned:
            cleaned[key] = [item for item in cleaned[key] if isinstance(item, str)]
    return cleaned


class ResumeDocument(WireModel):
    header: ResumeHeader = Field(default_factory=ResumeHeader)
    body: ResumeBody | None = None
    template_id: TemplateId = Field(default="classic", alias="templateId")
    cover_letter: str = Field(default="", alias="coverLetter")

    @field_validator("header", mode="before")
    @classmethod
    def default_header(cls, value: Any) -> Any:
        return ResumeHeader() if value is None else value

    @field_validator("body", mode="before")
    @classmethod
    def loose_body(cls, value: Any) -> Any:
        if value is None:
            return None
        return ResumeBody.from_loose(value)

    @field_validator("template_id", mode="before")
    @classmethod
    def default_template(cls, value: Any) -> Any:
        return value if value in ("classic", "compact") else "classic"

    @field_validator("cover_letter", mode="before")
    @classmethod
    def default_cover_letter(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ""

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TailorResult(WireModel):
    tailored_resume_json: ResumeBody = Field(alias="tailoredResumeJson")
    ats_score: int | None = Field(default=None, alias="atsScore")
    missing_skills: list[str] = Field(default_factory=list, alias="missingSkills")
    present_keywords: list[str] = Field(default_factory=list, alias="presentKeywords")
    missing_keywords: list[str] = Field(default_factory=list, alias="missingKeywords")
    job_title: str | None = Field(default=None, alias="jobTitle")
    job_company: str | None = Field(default=None, alias="jobCompany")

    @property
    def score_label(self) -> str:
        return score_label(self.ats_score)


def coerce_score(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(round(max(0.0, min(100.0, number))))


def score_label(score: int | None) -> str:
    if score is None:
        return "Not calculated yet"
    if score >= 80:
        return "Strong match"
    if score >= 60:
        return "Good match"
    return "Needs improvement"


class ChecklistItem(BaseModel):
    id: str
    label: str
    status: CheckStatus
    info: str


class ChecklistReport(BaseModel):
    items: list[ChecklistItem] = Field(default_factory=list)
    passed: int = 0
    total: int = 0
    score: int = 0


class ModelResponse(BaseModel):
    content: str
    raw: dict[str, Any] = Field(default_factory=dict)
