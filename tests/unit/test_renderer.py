from __future__ import annotations

import pytest

from nebulacv.errors import MissingInput
from nebulacv.types import ResumeDocument
from nebulacv.web.renderer import ExportRenderer


def _document(**overrides) -> ResumeDocument:
    payload = {
        "header": {"fullName": "Sara Ali", "email": "sara@example.com", "location": "Amman, Jordan"},
        "body": {
            "summary": "Frontend engineer <script>alert(1)</script>",
            "skills": ["React", "TypeScript"],
            "experiences": [{"title": "Engineer", "company": "Acme", "period": "2022", "bullets": ["Built UI", ""]}],
        },
        "templateId": "compact",
        "coverLetter": "Dear Hiring Manager,\n\nI am excited.\n\nSincerely,\nSara",
    }
    payload.update(overrides)
    return ResumeDocument.model_validate(payload)


def test_resume_render_uses_template_and_escapes_content() -> None:
    html = ExportRenderer().render_resume(_document(), printable=True)

    assert "<title>NebulaCV-Resume</title>" in html
    assert "template-compact" in html
    assert "Amman, Jordan • sara@example.com" in html
    assert "&lt;script&gt;" in html
    assert "window.print()" in html
    assert html.count("<li>") == 1


def test_preview_matches_print_layout() -> None:
    renderer = ExportRenderer()
    preview = renderer.render_resume(_document())
    printed = renderer.render_resume(_document(), printable=True)
    assert "window.print()" not in preview
    assert preview.replace(' onload="window.print()"', "") == printed.replace(' onload="window.print()"', "")


def test_print_requires_body() -> None:
    with pytest.raises(MissingInput):
        ExportRenderer().render_resume(_document(body=None), printable=True)
    assert "Your resume will appear here" in ExportRenderer().render_resume(_document(body=None))


def test_cover_letter_paragraphs() -> None:
    html = ExportRenderer().render_cover_letter(_document(), printable=True)
    assert "<title>NebulaCV-CoverLetter</title>" in html
    assert html.count("<p>") == 3


def test_print_cover_letter_requires_text() -> None:
    with pytest.raises(MissingInput):
        ExportRenderer().render_cover_letter(_document(coverLetter="   "), printable=True)
