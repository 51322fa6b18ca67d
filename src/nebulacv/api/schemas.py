from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from nebulacv.core.document import SectionPatch
from nebulacv.types import (
    ApplicationStatus,
    ChecklistItem,
    ResumeBody,
    ResumeDocument,
    ResumeHeader,
    WireModel,
)

# Request bodies accept loosely typed fields on purpose: absent or wrongly typed
# input is reported by the gateway as MISSING_INPUT with a specific message.


class BuildResumeRequest(WireModel):
    answers: Any = None


class BuildResumeResponse(WireModel):
    resume_json: ResumeBody = Field(alias="resumeJson")


class ParseResumeRequest(WireModel):
    resume_text: Any = Field(default=None, alias="resumeText")


class ImproveSectionRequest(WireModel):
    section: str | None = None
    mode: str = "improve"
    summary: str | None = None
    experience: dict[str, Any] | None = None


class RefineResumeRequest(WireModel):
    resume_json: dict[str, Any] | None = Field(default=None, alias="resumeJson")
    tone: str | None = "neutral"


class RefineResumeResponse(WireModel):
    refined_resume_json: ResumeBody = Field(alias="refinedResumeJson")


class GenerateBulletsRequest(WireModel):
    title: str = ""
    company: str = ""
    period: str = ""
    location: str = ""
    tech_stack: list[str] = Field(default_factory=list, alias="techStack")
    existing_bullets: list[str] = Field(default_factory=list, alias="existingBullets")
    job_description_snippet: str = Field(default="", alias="jobDescriptionSnippet")


class BulletsResponse(WireModel):
    bullets: list[str]


class GenerateCoverLetterRequest(WireModel):
    header: dict[str, Any] | None = None
    resume_json: dict[str, Any] | None = Field(default=None, alias="resumeJson")
    job_title: str | None = Field(default=None, alias="jobTitle")
    job_company: str | None = Field(default=None, alias="jobCompany")
    tone: str | None = "neutral"


class CoverLetterRequest(WireModel):
    header: dict[str, Any] | None = None
    resume_json: dict[str, Any] | None = Field(default=None, alias="resumeJson")
    job_description: str | None = Field(default=None, alias="jobDescription")
    tone: str | None = "neutral"


class CoverLetterResponse(WireModel):
    cover_letter: str = Field(alias="coverLetter")


class TailorResumeRequest(WireModel):
    resume_json: dict[str, Any] | None = Field(default=None, alias="resumeJson")
    job_input: str | None = Field(default=None, alias="jobInput")


class TailorResumeResponse(WireModel):
    tailored_resume_json: ResumeBody = Field(alias="tailoredResumeJson")
    ats_score: int | None = Field(default=None, alias="atsScore")
    score_label: str = Field(alias="scoreLabel")
    missing_skills: list[str] = Field(default_factory=list, alias="missingSkills")
    present_keywords: list[str] = Field(default_factory=list, alias="presentKeywords")
    missing_keywords: list[str] = Field(default_factory=list, alias="missingKeywords")
    job_title: str | None = Field(default=None, alias="jobTitle")
    job_company: str | None = Field(default=None, alias="jobCompany")


class SaveResumeRequest(WireModel):
    id: str | None = None
    title: str | None = None
    document: ResumeDocument = Field(default_factory=ResumeDocument)


class ResumeSummaryResponse(WireModel):
    id: str
    title: str | None = None
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class ResumeRecordResponse(ResumeSummaryResponse):
    document: ResumeDocument


class DeleteResumesResponse(BaseModel):
    deleted: int


class ApplicationCreateRequest(WireModel):
    resume_id: str | None = Field(default=None, alias="resumeId")
    company: str | None = None
    role: str | None = None
    job_url: str | None = Field(default=None, alias="jobUrl")
    status: ApplicationStatus = "applied"
    applied_at: date | None = Field(default=None, alias="appliedAt")
    notes: str | None = None


class ApplicationStatusRequest(BaseModel):
    status: ApplicationStatus


class ApplicationResponse(WireModel):
    id: str
    resume_id: str | None = Field(default=None, alias="resumeId")
    resume_title: str | None = Field(default=None, alias="resumeTitle")
    company: str | None = None
    role: str | None = None
    job_url: str | None = Field(default=None, alias="jobUrl")
    status: ApplicationStatus
    applied_at: date | None = Field(default=None, alias="appliedAt")
    notes: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")


class PatchRequest(WireModel):
    document: ResumeDocument = Field(default_factory=ResumeDocument)
    patch: SectionPatch


class ChecklistRequest(WireModel):
    header: ResumeHeader = Field(default_factory=ResumeHeader)
    resume_json: dict[str, Any] | None = Field(default=None, alias="resumeJson")


class ChecklistResponse(BaseModel):
    items: list[ChecklistItem]
    passed: int
    total: int
    score: int


class InterviewQuestionsResponse(BaseModel):
    intro: str
    questions: list[str]
    closing: str


class SessionResponse(WireModel):
    authenticated: bool
    user_id: str | None = Field(default=None, alias="userId")
    email: str | None = None
    plan: str = "free"


class CheckoutResponse(BaseModel):
    url: str
