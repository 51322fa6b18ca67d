from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, Field

from nebulacv.errors import BodyMissing, MissingInput
from nebulacv.types import (
    EducationItem,
    ExperienceItem,
    ProjectItem,
    ResumeBody,
    ResumeDocument,
    ResumeHeader,
)

T = TypeVar("T")

EXPERIENCE_FIELDS = {"title", "company", "period", "location"}
PROJECT_FIELDS = {"name", "description", "link"}
EDUCATION_FIELDS = {"institution", "degree", "location", "period"}
HEADER_FIELDS = {"full_name", "title", "location", "email", "phone", "linkedin", "github"}
HEADER_ALIASES = {"fullName": "full_name"}

PatchOp = Literal[
    "replace_body",
    "set_summary",
    "add_skill",
    "remove_skill",
    "move_skill",
    "add_experience",
    "remove_experience",
    "update_experience",
    "move_experience",
    "add_bullet",
    "update_bullet",
    "remove_bullet",
    "add_project",
    "remove_project",
    "update_project",
    "move_project",
    "add_stack_item",
    "remove_stack_item",
    "add_education",
    "remove_education",
    "update_education",
    "move_education",
    "set_header_field",
    "set_template",
    "set_cover_letter",
]


def new_document() -> ResumeDocument:
    return ResumeDocument()


def move_item(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    result = list(items)
    if not 0 <= from_index < len(result) or not 0 <= to_index < len(result):
        return result
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


def _without(items: Sequence[T], index: int) -> list[T]:
    return [item for i, item in enumerate(items) if i != index]


def _replace_at(items: Sequence[T], index: int, fn: Callable[[T], T]) -> list[T]:
    return [fn(item) if i == index else item for i, item in enumerate(items)]


def _has_casefold(items: Sequence[str], value: str) -> bool:
    needle = value.lower()
    return any(item.lower() == needle for item in items)


def _check_field(field: str, allowed: set[str]) -> str:
    if field not in allowed:
        raise MissingInput(f"Unknown field '{field}'")
    return field


# Summary and skills

def set_summary(body: ResumeBody, value: str) -> ResumeBody:
    return body.model_copy(update={"summary": value})


def add_skill(body: ResumeBody, value: str) -> ResumeBody:
    skill = value.strip()
    if not skill or _has_casefold(body.skills, skill):
        return body
    return body.model_copy(update={"skills": [*body.skills, skill]})


def remove_skill(body: ResumeBody, index: int) -> ResumeBody:
    return body.model_copy(update={"skills": _without(body.skills, index)})


def move_skill(body: ResumeBody, from_index: int, to_index: int) -> ResumeBody:
    return body.model_copy(update={"skills": move_item(body.skills, from_index, to_index)})


# Experience

def add_experience(body: ResumeBody) -> ResumeBody:
    blank = ExperienceItem(bullets=[""])
    return body.model_copy(update={"experiences": [*body.experiences, blank]})


def remove_experience(body: ResumeBody, index: int) -> ResumeBody:
    return body.model_copy(update={"experiences": _without(body.experiences, index)})


def update_experience_field(body: ResumeBody, index: int, field: str, value: str) -> ResumeBody:
    _check_field(field, EXPERIENCE_FIELDS)
    experiences = _replace_at(body.experiences, index, lambda exp: exp.model_copy(update={field: value}))
    return body.model_copy(update={"experiences": experiences})


def move_experience(body: ResumeBody, from_index: int, to_index: int) -> ResumeBody:
    return body.model_copy(update={"experiences": move_item(body.experiences, from_index, to_index)})


def add_bullet(body: ResumeBody, index: int) -> ResumeBody:
    experiences = _replace_at(
        body.experiences,
        index,
        lambda exp: exp.model_copy(update={"bullets": [*exp.bullets, ""]}),
    )
    return body.model_copy(update={"experiences": experiences})


def update_bullet(body: ResumeBody, index: int, bullet_index: int, value: str) -> ResumeBody:
    def edit(exp: ExperienceItem) -> ExperienceItem:
        if not 0 <= bullet_index < len(exp.bullets):
            return exp
        bullets = [value if i == bullet_index else b for i, b in enumerate(exp.bullets)]
        return exp.model_copy(update={"bullets": bullets})

    return body.model_copy(update={"experiences": _replace_at(body.experiences, index, edit)})


def remove_bullet(body: ResumeBody, index: int, bullet_index: int) -> ResumeBody:
    experiences = _replace_at(
        body.experiences,
        index,
        lambda exp: exp.model_copy(update={"bullets": _without(exp.bullets, bullet_index)}),
    )
    return body.model_copy(update={"experiences": experiences})


# Projects

def add_project(body: ResumeBody) -> ResumeBody:
    return body.model_copy(update={"projects": [*body.projects, ProjectItem()]})


def remove_project(body: ResumeBody, index: int) -> ResumeBody:
    return body.model_copy(update={"projects": _without(body.projects, index)})


def update_project_field(body: ResumeBody, index: int, field: str, value: str) -> ResumeBody:
    _check_field(field, PROJECT_FIELDS)
    projects = _replace_at(body.projects, index, lambda p: p.model_copy(update={field: value}))
    return body.model_copy(update={"projects": projects})


def move_project(body: ResumeBody, from_index: int, to_index: int) -> ResumeBody:
    return body.model_copy(update={"projects": move_item(body.projects, from_index, to_index)})


def add_stack_item(body: ResumeBody, index: int, value: str) -> ResumeBody:
    item = value.strip()
    if not item:
        return body

    def edit(project: ProjectItem) -> ProjectItem:
        if _has_casefold(project.stack, item):
            return project
        return project.model_copy(update={"stack": [*project.stack, item]})

    return body.model_copy(update={"projects": _replace_at(body.projects, index, edit)})


def remove_stack_item(body: ResumeBody, index: int, stack_index: int) -> ResumeBody:
    projects = _replace_at(
        body.projects,
        index,
        lambda p: p.model_copy(update={"stack": _without(p.stack, stack_index)}),
    )
    return body.model_copy(update={"projects": projects})


# Education

def add_education(body: ResumeBody) -> ResumeBody:
    return body.model_copy(update={"education": [*body.education, EducationItem()]})


def remove_education(body: ResumeBody, index: int) -> ResumeBody:
    return body.model_copy(update={"education": _without(body.education, index)})


def update_education_field(body: ResumeBody, index: int, field: str, value: str) -> ResumeBody:
    _check_field(field, EDUCATION_FIELDS)
    education = _replace_at(body.education, index, lambda e: e.model_copy(update={field: value}))
    return body.model_copy(update={"education": education})


def move_education(body: ResumeBody, from_index: int, to_index: int) -> ResumeBody:
    return body.model_copy(update={"education": move_item(body.education, from_index, to_index)})


# Header

def update_header_field(header: ResumeHeader, field: str, value: str) -> ResumeHeader:
    name = _check_field(HEADER_ALIASES.get(field, field), HEADER_FIELDS)
    return header.model_copy(update={name: value})


class SectionPatch(BaseModel):
    """One editor command. Which of the optional arguments matter depends on ``op``."""

    op: PatchOp
    index: int = 0
    to_index: int = 0
    child_index: int = 0
    field: str = ""
    value: Any = None


def _text(patch: SectionPatch) -> str:
    if not isinstance(patch.value, str):
        raise MissingInput(f"'{patch.op}' requires a string value")
    return patch.value


BODY_REDUCERS: dict[str, Callable[[ResumeBody, SectionPatch], ResumeBody]] = {
    "set_summary": lambda b, p: set_summary(b, _text(p)),
    "add_skill": lambda b, p: add_skill(b, _text(p)),
    "remove_skill": lambda b, p: remove_skill(b, p.index),
    "move_skill": lambda b, p: move_skill(b, p.index, p.to_index),
    "add_experience": lambda b, p: add_experience(b),
    "remove_experience": lambda b, p: remove_experience(b, p.index),
    "update_experience": lambda b, p: update_experience_field(b, p.index, p.field, _text(p)),
    "move_experience": lambda b, p: move_experience(b, p.index, p.to_index),
    "add_bullet": lambda b, p: add_bullet(b, p.index),
    "update_bullet": lambda b, p: update_bullet(b, p.index, p.child_index, _text(p)),
    "remove_bullet": lambda b, p: remove_bullet(b, p.index, p.child_index),
    "add_project": lambda b, p: add_project(b),
    "remove_project": lambda b, p: remove_project(b, p.index),
    "update_project": lambda b, p: update_project_field(b, p.index, p.field, _text(p)),
    "move_project": lambda b, p: move_project(b, p.index, p.to_index),
    "add_stack_item": lambda b, p: add_stack_item(b, p.index, _text(p)),
    "remove_stack_item": lambda b, p: remove_stack_item(b, p.index, p.child_index),
    "add_education": lambda b, p: add_education(b),
    "remove_education": lambda b, p: remove_education(b, p.index),
    "update_education": lambda b, p: update_education_field(b, p.index, p.field, _text(p)),
    "move_education": lambda b, p: move_education(b, p.index, p.to_index),
}


def apply_patch(document: ResumeDocument, patch: SectionPatch) -> ResumeDocument:
    """Return a new document with ``patch`` applied; ``document`` is never mutated.

    Body edits on a document without a body raise ``BodyMissing``.
    """
    if patch.op == "replace_body":
        body = None if patch.value is None else ResumeBody.from_loose(patch.value)
        return document.model_copy(update={"body": body})
    if patch.op == "set_header_field":
        header = update_header_field(document.header, patch.field, _text(patch))
        return document.model_copy(update={"header": header})
    if patch.op == "set_template":
        if patch.value not in ("classic", "compact"):
            raise MissingInput("template must be 'classic' or 'compact'")
        return document.model_copy(update={"template_id": patch.value})
    if patch.op == "set_cover_letter":
        return document.model_copy(update={"cover_letter": _text(patch)})

    if document.body is None:
        raise BodyMissing()
    reducer = BODY_REDUCERS[patch.op]
    return document.model_copy(update={"body": reducer(document.body, patch)})


class DocumentHistory:
    def __init__(self, document: ResumeDocument | None = None, *, limit: int = 100):
        self._current = document or new_document()
        self._undo: list[ResumeDocument] = []
        self._redo: list[ResumeDocument] = []
        self.limit = limit

    @property
    def current(self) -> ResumeDocument:
        return self._current

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def apply(self, patch: SectionPatch) -> ResumeDocument:
        updated = apply_patch(self._current, patch)
        if updated == self._current:
            return self._current
        return self._push(updated)

    def replace(self, document: ResumeDocument) -> ResumeDocument:
        return self._push(document)

    def _push(self, document: ResumeDocument) -> ResumeDocument:
        self._undo.append(self._current)
        if len(self._undo) > self.limit:
            self._undo.pop(0)
        self._redo.clear()
        self._current = document
        return document

    def undo(self) -> ResumeDocument:
        if self._undo:
            self._redo.append(self._current)
            self._current = self._undo.pop()
        return self._current

    def redo(self) -> ResumeDocument:
        if self._redo:
            self._undo.append(self._current)
            self._current = self._redo.pop()
        return self._current
