from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from nebulacv.types import ResumeBody

_LIST_MARKER = re.compile(r"^(?:\d+[\).\s-]*|[-*•]\s*)")
MODEL_REQUIRED_KEYS = ("summary", "skills", "experiences")


class ExtractionError(ValueError):
    pass


def strip_code_fences(raw: str) -> str:
    return raw.replace("```json", "").replace("```", "").strip()


def extract_json_object(raw: str) -> dict[str, Any]:
    """Parse the text between the first ``{`` and the last ``}`` of ``raw``."""
    first = raw.find("{")
    last = raw.rfind("}")
    if first == -1 or last == -1 or last <= first:
        raise ExtractionError("Could not find JSON object in AI response")

    try:
        value = json.loads(raw[first : last + 1])
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"Invalid JSON in AI response: {exc.msg}") from exc

    if not isinstance(value, dict):
        raise ExtractionError("AI response JSON is not an object")
    return value


def validate_resume_body(data: Any) -> ResumeBody:
    """Validate model output as a resume body; the core sections must all be present."""
    if not isinstance(data, dict):
        raise ExtractionError("AI response resume is not an object")
    missing = [key for key in MODEL_REQUIRED_KEYS if key not in data]
    if missing:
        raise ExtractionError(f"AI response resume is missing {', '.join(missing)}")
    try:
        return ResumeBody.model_validate(data)
    except ValidationError as exc:
        raise ExtractionError(f"AI response does not match the resume schema ({exc.error_count()} errors)") from exc


def extract_resume_body(raw: str) -> ResumeBody:
    return validate_resume_body(extract_json_object(raw))


def parse_numbered_list(text: str) -> list[str]:
    items = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        item = _LIST_MARKER.sub("", line, count=1).strip()
        if item:
            items.append(item)
    return items


def clean_plain_text(text: str) -> str:
    return text.replace("```", "").strip()
