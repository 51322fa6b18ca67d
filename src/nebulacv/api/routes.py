from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from nebulacv.api.deps import get_gateway
from nebulacv.api.schemas import (
    BuildResumeRequest,
    BuildResumeResponse,
    BulletsResponse,
    CoverLetterRequest,
    CoverLetterResponse,
    GenerateBulletsRequest,
    GenerateCoverLetterRequest,
    ImproveSectionRequest,
    ParseResumeRequest,
    RefineResumeRequest,
    RefineResumeResponse,
    TailorResumeRequest,
    TailorResumeResponse,
)
from nebulacv.errors import MissingInput
from nebulacv.llm.gateway import EnrichmentGateway
from nebulacv.types import ExperienceItem, ResumeBody, ResumeHeader

router = APIRouter(prefix="/api", tags=["ai"])


def _body(raw: dict[str, Any] | None) -> ResumeBody | None:
    return ResumeBody.from_loose(raw) if raw is not None else None


def _header(raw: dict[str, Any] | None) -> ResumeHeader | None:
    if raw is None:
        return None
    try:
        return ResumeHeader.model_validate(raw)
    except ValidationError as exc:
        raise MissingInput("header is invalid") from exc


def _experience(raw: dict[str, Any] | None) -> ExperienceItem | None:
    if not raw:
        return None
    try:
        return ExperienceItem.model_validate(raw)
    except ValidationError as exc:
        raise MissingInput("experience is invalid") from exc


@router.post("/build-resume", response_model=BuildResumeResponse)
def build_resume(
    payload: BuildResumeRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> BuildResumeResponse:
    return BuildResumeResponse(resume_json=gateway.build_resume(payload.answers))


@router.post("/parse-resume", response_model=BuildResumeResponse)
def parse_resume(
    payload: ParseResumeRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> BuildResumeResponse:
    return BuildResumeResponse(resume_json=gateway.parse_resume(payload.resume_text))


@router.post("/improve-section")
def improve_section(
    payload: ImproveSectionRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> dict[str, Any]:
    return gateway.improve_section(
        section=payload.section,
        mode=payload.mode,
        summary=payload.summary,
        experience=_experience(payload.experience),
    )


@router.post("/refine-resume", response_model=RefineResumeResponse)
def refine_resume(
    payload: RefineResumeRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> RefineResumeResponse:
    refined = gateway.refine_resume(_body(payload.resume_json), payload.tone)
    return RefineResumeResponse(refined_resume_json=refined)


@router.post("/generate-bullets", response_model=BulletsResponse)
def generate_bullets(
    payload: GenerateBulletsRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> BulletsResponse:
    bullets = gateway.generate_bullets(
        title=payload.title,
        company=payload.company,
        period=payload.period,
        location=payload.location,
        tech_stack=payload.tech_stack,
        existing_bullets=payload.existing_bullets,
        job_description_snippet=payload.job_description_snippet,
    )
    return BulletsResponse(bullets=bullets)


@router.post("/generate-cover-letter", response_model=CoverLetterResponse)
def generate_cover_letter(
    payload: GenerateCoverLetterRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> CoverLetterResponse:
    text = gateway.generate_cover_letter(
        header=_header(payload.header),
        body=_body(payload.resume_json),
        job_title=payload.job_title,
        job_company=payload.job_company,
        tone=payload.tone,
    )
    return CoverLetterResponse(cover_letter=text)


@router.post("/cover-letter", response_model=CoverLetterResponse)
def cover_letter(
    payload: CoverLetterRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> CoverLetterResponse:
    text = gateway.cover_letter_for_job(
        header=_header(payload.header),
        body=_body(payload.resume_json),
        job_description=payload.job_description,
        tone=payload.tone,
    )
    return CoverLetterResponse(cover_letter=text)


@router.post("/tailor-resume", response_model=TailorResumeResponse)
def tailor_resume(
    payload: TailorResumeRequest,
    gateway: EnrichmentGateway = Depends(get_gateway),
) -> TailorResumeResponse:
    result = gateway.tailor_resume(_body(payload.resume_json), payload.job_input)
    return TailorResumeResponse(
        tailored_resume_json=result.tailored_resume_json,
        ats_score=result.ats_score,
        score_label=result.score_label,
        missing_skills=result.missing_skills,
        present_keywords=result.present_keywords,
        missing_keywords=result.missing_keywords,
        job_title=result.job_title,
        job_company=result.job_company,
    )
