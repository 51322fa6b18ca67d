from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from nebulacv.api.deps import get_db, get_optional_session
from nebulacv.core.session import SessionContext, guard_redirect, login_url, post_login_target
from nebulacv.db.repositories import Repository
from nebulacv.errors import NotFound
from nebulacv.types import ResumeDocument
from nebulacv.web.renderer import TEMPLATE_DIR, ExportRenderer

router = APIRouter(tags=["web"])
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
static_dir = TEMPLATE_DIR.parent / "static"
renderer = ExportRenderer()

PAGE_HEADINGS = {
    "/dashboard": "Dashboard",
    "/builder": "Resume builder",
    "/tracker": "Application tracker",
    "/settings": "Settings",
}


@router.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    for filename in ("favicon.ico", "favicon.png", "favicon.svg"):
        icon_path = static_dir / filename
        if icon_path.is_file():
            return FileResponse(icon_path)
    return Response(status_code=204)


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    redirect_to: str | None = Query(default=None, alias="redirectTo"),
    session: SessionContext | None = Depends(get_optional_session),
) -> Response:
    target = guard_redirect(request.url.path, session)
    if target is not None:
        return RedirectResponse(url=target, status_code=303)
    return templates.TemplateResponse(
        request,
        "login.html",
        {"page_title": "Sign in | NebulaCV", "redirect_to": post_login_target(redirect_to) if redirect_to else None},
    )


def _guarded_page(
    request: Request,
    session: SessionContext | None,
    db: Session,
) -> Response:
    path = request.url.path
    target = guard_redirect(path, session)
    if target is not None or session is None:
        return RedirectResponse(url=target or login_url(path), status_code=303)

    repo = Repository(db)
    applications = repo.list_applications(session.user_id)
    titles = repo.resume_titles(session.user_id, {row.resume_id for row in applications if row.resume_id})
    items = [
        {
            "company": row.company,
            "role": row.role,
            "status": row.status,
            "resume_title": titles.get(row.resume_id) if row.resume_id else None,
        }
        for row in applications
    ]
    heading = PAGE_HEADINGS.get(path, "NebulaCV")
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "page_title": f"{heading} | NebulaCV",
            "heading": heading,
            "session": session,
            "resumes": repo.list_resumes(session.user_id),
            "applications": items,
        },
    )


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> Response:
    return _guarded_page(request, session, db)


@router.get("/builder", response_class=HTMLResponse)
def builder(
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> Response:
    return _guarded_page(request, session, db)


@router.get("/tracker", response_class=HTMLResponse)
def tracker(
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> Response:
    return _guarded_page(request, session, db)


@router.get("/settings", response_class=HTMLResponse)
def settings_page(
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> Response:
    return _guarded_page(request, session, db)


def _load_document(db: Session, session: SessionContext, resume_id: str) -> ResumeDocument:
    row = Repository(db).load_resume(session.user_id, resume_id)
    if row is None:
        raise NotFound("Resume not found")
    return ResumeDocument.model_validate(row.resume_json or {})


@router.get("/preview/resume/{resume_id}", response_class=HTMLResponse)
def preview_resume(
    resume_id: str,
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> Response:
    if session is None:
        return RedirectResponse(url=login_url(request.url.path), status_code=303)
    document = _load_document(db, session, resume_id)
    return HTMLResponse(renderer.render_resume(document))


@router.get("/print/resume/{resume_id}", response_class=HTMLResponse)
def print_resume(
    resume_id: str,
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> Response:
    if session is None:
        return RedirectResponse(url=login_url(request.url.path), status_code=303)
    document = _load_document(db, session, resume_id)
    return HTMLResponse(renderer.render_resume(document, printable=True))


@router.get("/print/cover-letter/{resume_id}", response_class=HTMLResponse)
def print_cover_letter(
    resume_id: str,
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> Response:
    if session is None:
        return RedirectResponse(url=login_url(request.url.path), status_code=303)
    document = _load_document(db, session, resume_id)
    return HTMLResponse(renderer.render_cover_letter(document, printable=True))
