from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nebulacv.api.deps import get_db, get_optional_session, get_session
from nebulacv.api.schemas import (
    ApplicationCreateRequest,
    ApplicationResponse,
    ApplicationStatusRequest,
    ChecklistRequest,
    ChecklistResponse,
    DeleteResumesResponse,
    InterviewQuestionsResponse,
    PatchRequest,
    ResumeRecordResponse,
    ResumeSummaryResponse,
    SaveResumeRequest,
    SessionResponse,
)
from nebulacv.core.checklist import evaluate_checklist
from nebulacv.core.document import apply_patch
from nebulacv.core.interview import CLOSING_MESSAGE, INTERVIEW_QUESTIONS, INTRO_MESSAGE
from nebulacv.core.session import SessionContext
from nebulacv.db.models import JobApplication, Resume
from nebulacv.db.repositories import Repository
from nebulacv.errors import NotFound
from nebulacv.types import ResumeBody, ResumeDocument

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["records"])


def _record(row: Resume) -> ResumeRecordResponse:
    return ResumeRecordResponse(
        id=row.id,
        title=row.title,
        updated_at=row.updated_at,
        document=ResumeDocument.model_validate(row.resume_json or {}),
    )


def _application(row: JobApplication, titles: dict[str, str | None]) -> ApplicationResponse:
    return ApplicationResponse(
        id=row.id,
        resume_id=row.resume_id,
        resume_title=titles.get(row.resume_id) if row.resume_id else None,
        company=row.company,
        role=row.role,
        job_url=row.job_url,
        status=row.status,
        applied_at=row.applied_at,
        notes=row.notes,
        created_at=row.created_at,
    )


@router.post("/resumes", response_model=ResumeRecordResponse)
def save_resume(
    payload: SaveResumeRequest,
    session: SessionContext = Depends(get_session),
    db: Session = Depends(get_db),
) -> ResumeRecordResponse:
    repo = Repository(db)
    try:
        row = repo.save_resume(
            user_id=session.user_id,
            title=payload.title,
            document=payload.document,
            resume_id=payload.id,
        )
    except ValueError as exc:
        raise NotFound(str(exc)) from exc
    logger.info("Saved resume id=%s user=%s", row.id, session.user_id)
    return _record(row)


@router.get("/resumes", response_model=list[ResumeSummaryResponse])
def list_resumes(
    session: SessionContext = Depends(get_session),
    db: Session = Depends(get_db),
) -> list[ResumeSummaryResponse]:
    rows = Repository(db).list_resumes(session.user_id)
    return [ResumeSummaryResponse(id=row.id, title=row.title, updated_at=row.updated_at) for row in rows]


@router.get("/resumes/{resume_id}", response_model=ResumeRecordResponse)
def get_resume(
    resume_id: str,
    session: SessionContext = Depends(get_session),
    db: Session = Depends(get_db),
) -> ResumeRecordResponse:
    row = Repository(db).load_resume(session.user_id, resume_id)
    if row is None:
        raise NotFound("Resume not found")
    return _record(row)


@router.delete("/resumes", response_model=DeleteResumesResponse)
def delete_resumes(
    session: SessionContext = Depends(get_session),
    db: Session = Depends(get_db),
) -> DeleteResumesResponse:
    deleted = Repository(db).delete_all_resumes(session.user_id)
    logger.info("Deleted %s resumes for user=%s", deleted, session.user_id)
    return DeleteResumesResponse(deleted=deleted)


@router.post("/applications", response_model=ApplicationResponse)
def create_application(
    payload: ApplicationCreateRequest,
    session: SessionContext = Depends(get_session),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    repo = Repository(db)
    row = repo.create_application(
        user_id=session.user_id,
        resume_id=payload.resume_id,
        company=payload.company,
        role=payload.role,
        job_url=payload.job_url,
        status=payload.status,
        applied_at=payload.applied_at,
        notes=payload.notes,
    )
    titles = repo.resume_titles(session.user_id, {row.resume_id} if row.resume_id else set())
    return _application(row, titles)


@router.get("/applications", response_model=list[ApplicationResponse])
def list_applications(
    session: SessionContext = Depends(get_session),
    db: Session = Depends(get_db),
) -> list[ApplicationResponse]:
    repo = Repository(db)
    rows = repo.list_applications(session.user_id)
    titles = repo.resume_titles(session.user_id, {row.resume_id for row in rows if row.resume_id})
    return [_application(row, titles) for row in rows]


@router.patch("/applications/{application_id}/status", response_model=ApplicationResponse)
def update_application_status(
    application_id: str,
    payload: ApplicationStatusRequest,
    session: SessionContext = Depends(get_session),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    repo = Repository(db)
    try:
        row = repo.update_application_status(session.user_id, application_id, payload.status)
    except ValueError as exc:
        raise NotFound(str(exc)) from exc
    titles = repo.resume_titles(session.user_id, {row.resume_id} if row.resume_id else set())
    return _application(row, titles)


@router.post("/documents/patch", response_model=ResumeDocument)
def patch_document(payload: PatchRequest) -> ResumeDocument:
    return apply_patch(payload.document, payload.patch)


@router.post("/checklist", response_model=ChecklistResponse)
def checklist(payload: ChecklistRequest) -> ChecklistResponse:
    body = ResumeBody.from_loose(payload.resume_json) if payload.resume_json is not None else None
    report = evaluate_checklist(payload.header, body)
    return ChecklistResponse(**report.model_dump())


@router.get("/interview/questions", response_model=InterviewQuestionsResponse)
def interview_questions() -> InterviewQuestionsResponse:
    return InterviewQuestionsResponse(
        intro=INTRO_MESSAGE,
        questions=list(INTERVIEW_QUESTIONS),
        closing=CLOSING_MESSAGE,
    )


@router.get("/session", response_model=SessionResponse)
def current_session(session: SessionContext | None = Depends(get_optional_session)) -> SessionResponse:
    if session is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user_id=session.user_id, email=session.email, plan=session.plan)


@router.post("/session/sign-out", response_model=SessionResponse)
def sign_out(session: SessionContext | None = Depends(get_optional_session)) -> SessionResponse:
    if session is not None:
        logger.info("Signed out user=%s", session.user_id)
    return SessionResponse(authenticated=False)
