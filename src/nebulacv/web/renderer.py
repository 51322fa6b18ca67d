from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from nebulacv.errors import MissingInput
from nebulacv.types import ResumeDocument, ResumeHeader

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

RESUME_PAGE_TITLE = "NebulaCV-Resume"
COVER_LETTER_PAGE_TITLE = "NebulaCV-CoverLetter"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def contact_parts(header: ResumeHeader) -> list[str]:
    parts = [header.location, header.email, header.phone, header.linkedin, header.github]
    return [part for part in parts if part]


def cover_letter_paragraphs(text: str) -> list[str]:
    return [block.strip() for block in text.replace("\r\n", "\n").split("\n\n") if block.strip()]


class ExportRenderer:
    """Turns a resume document into printable HTML.

    Preview and print share one template so what is printed is what was
    shown; ``printable`` only adds the print trigger and refuses empty input.
    """

    def __init__(self, env: Environment | None = None):
        self.env = env or _env

    def render_resume(self, document: ResumeDocument, *, printable: bool = False) -> str:
        if printable and document.body is None:
            raise MissingInput("Complete the interview or import a resume first.")
        template = self.env.get_template("resume.html")
        return template.render(
            page_title=RESUME_PAGE_TITLE,
            printable=printable,
            document=document,
            header=document.header,
            body=document.body,
            contact=contact_parts(document.header),
        )

    def render_cover_letter(self, document: ResumeDocument, *, printable: bool = False) -> str:
        paragraphs = cover_letter_paragraphs(document.cover_letter)
        if printable and not paragraphs:
            raise MissingInput("Generate a cover letter first.")
        template = self.env.get_template("cover_letter.html")
        return template.render(
            page_title=COVER_LETTER_PAGE_TITLE,
            printable=printable,
            paragraphs=paragraphs,
        )
