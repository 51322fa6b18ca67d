from __future__ import annotations

from nebulacv.types import ChecklistItem, ChecklistReport, CheckStatus, ResumeBody, ResumeHeader

ONE_PAGE_MAX_EXPERIENCES = 3


def evaluate_checklist(header: ResumeHeader, body: ResumeBody | None) -> ChecklistReport:
    """Score a resume against US/Canada application conventions."""

    def has_body(status: CheckStatus) -> CheckStatus:
        return status if body is not None else "pending"

    skills = body.skills if body is not None else []
    experiences = body.experiences if body is not None else []

    items = [
        ChecklistItem(
            id="no-photo",
            label="No photo",
            status="pass",
            info="US/Canada companies prefer resumes without photos",
        ),
        ChecklistItem(
            id="english-only",
            label="English language",
            status=has_body("pass"),
            info="Resume content should be in English",
        ),
        ChecklistItem(
            id="contact-info",
            label="Professional contact info",
            status="pass" if header.email and header.phone else "warning",
            info="Include email and phone number",
        ),
        ChecklistItem(
            id="tech-stack",
            label="Clear tech stack listed",
            status="pass" if skills else "pending",
            info="List your technical skills prominently",
        ),
        ChecklistItem(
            id="one-page",
            label="One page length",
            status="pass" if body is not None and len(experiences) <= ONE_PAGE_MAX_EXPERIENCES else "warning",
            info="Junior/mid-level resumes should be 1 page",
        ),
        ChecklistItem(
            id="no-personal",
            label="No personal info",
            status="pass",
            info="Avoid age, marital status, nationality",
        ),
    ]

    passed = sum(1 for item in items if item.status == "pass")
    return ChecklistReport(
        items=items,
        passed=passed,
        total=len(items),
        score=round(passed / len(items) * 100),
    )
