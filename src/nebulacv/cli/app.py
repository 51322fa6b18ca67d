from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn

from nebulacv.api.app import create_app
from nebulacv.config import get_settings
from nebulacv.core.checklist import evaluate_checklist
from nebulacv.db.init import init_database
from nebulacv.db.repositories import Repository
from nebulacv.db.session import SessionLocal
from nebulacv.errors import MissingInput
from nebulacv.logging_config import configure_logging
from nebulacv.types import ResumeDocument
from nebulacv.web.renderer import ExportRenderer

app = typer.Typer(help="NebulaCV CLI")
resumes_app = typer.Typer(help="Saved resumes")
applications_app = typer.Typer(help="Tracked job applications")

app.add_typer(resumes_app, name="resumes")
app.add_typer(applications_app, name="applications")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _read_document(file: Path) -> ResumeDocument:
    payload = json.loads(file.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "document" in payload:
        payload = payload["document"]
    return ResumeDocument.model_validate(payload)


@app.command("init")
def init_cmd() -> None:
    """Create the data directory and database tables."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)


@app.command("checklist")
def checklist_cmd(file: Path = typer.Option(..., "--file", exists=True, readable=True)) -> None:
    """Score a resume document JSON file against US/Canada conventions."""
    document = _read_document(file)
    report = evaluate_checklist(document.header, document.body)
    typer.echo(json.dumps(report.model_dump(), indent=2))


@resumes_app.command("list")
def resumes_list(user_id: str = typer.Option(..., "--user-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        rows = Repository(db).list_resumes(user_id)
        payload = [
            {"id": row.id, "title": row.title, "updated_at": row.updated_at.isoformat() if row.updated_at else None}
            for row in rows
        ]
    typer.echo(json.dumps(payload, indent=2))


@resumes_app.command("import")
def resumes_import(
    user_id: str = typer.Option(..., "--user-id"),
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
    title: str = typer.Option("", "--title"),
    resume_id: str | None = typer.Option(None, "--resume-id"),
) -> None:
    configure_logging()
    ensure_initialized()
    document = _read_document(file)
    with SessionLocal() as db:
        try:
            row = Repository(db).save_resume(
                user_id=user_id,
                title=title or None,
                document=document,
                resume_id=resume_id,
            )
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(json.dumps({"id": row.id, "title": row.title}, indent=2))


@resumes_app.command("export")
def resumes_export(
    user_id: str = typer.Option(..., "--user-id"),
    resume_id: str = typer.Option(..., "--resume-id"),
    output: Path = typer.Option(..., "--output"),
    cover_letter: bool = typer.Option(False, "--cover-letter", help="Export the cover letter instead"),
) -> None:
    """Write the printable HTML for a saved resume."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        row = Repository(db).load_resume(user_id, resume_id)
        if row is None:
            raise typer.BadParameter(f"resume {resume_id} not found")
        document = ResumeDocument.model_validate(row.resume_json or {})

    renderer = ExportRenderer()
    try:
        if cover_letter:
            html = renderer.render_cover_letter(document, printable=True)
        else:
            html = renderer.render_resume(document, printable=True)
    except MissingInput as exc:
        raise typer.BadParameter(exc.message) from exc

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    typer.echo(json.dumps({"ok": True, "output": str(output)}, indent=2))


@applications_app.command("list")
def applications_list(user_id: str = typer.Option(..., "--user-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        rows = repo.list_applications(user_id)
        titles = repo.resume_titles(user_id, {row.resume_id for row in rows if row.resume_id})
        payload = [
            {
                "id": row.id,
                "company": row.company,
                "role": row.role,
                "status": row.status,
                "resume_title": titles.get(row.resume_id) if row.resume_id else None,
            }
            for row in rows
        ]
    typer.echo(json.dumps(payload, indent=2))
