from __future__ import annotations

import json
import logging
from typing import Any

from nebulacv.config import Settings, get_settings
from nebulacv.errors import InternalFailure, MissingInput, ParseFailure
from nebulacv.llm import prompts
from nebulacv.llm.extraction import (
    ExtractionError,
    clean_plain_text,
    extract_json_object,
    extract_resume_body,
    parse_numbered_list,
    strip_code_fences,
    validate_resume_body,
)
from nebulacv.llm.providers import GenerationRequest, LLMProvider, ProviderPool
from nebulacv.types import (
    ExperienceItem,
    ResumeBody,
    ResumeHeader,
    TailorResult,
    coerce_score,
)

logger = logging.getLogger(__name__)

JOB_TEXT_LIMIT = 20000


class EnrichmentGateway:
    """Stateless request/response handlers around the text generation service.

    Every call goes to the provider; nothing is cached or retried. Malformed
    model output falls back to a safe default only where one exists (build,
    refine, bullet suggestions); resume import and tailoring report
    ``ParseFailure`` instead.
    """

    def __init__(self, settings: Settings | None = None, provider: LLMProvider | None = None):
        self.settings = settings or get_settings()
        self.pool = ProviderPool(self.settings)
        self._provider = provider

    def build_resume(self, answers: Any) -> ResumeBody:
        if not isinstance(answers, list) or not answers:
            raise MissingInput("answers required")
        lines = "\n".join(f"Answer {i}: {answer}" for i, answer in enumerate(answers, start=1))
        raw = self._generate(
            system=prompts.BUILD_RESUME_SYSTEM,
            prompt=prompts.BUILD_RESUME_PROMPT.format(schema=prompts.RESUME_SCHEMA, answers=lines),
            temperature=0.4,
            json_mode=True,
        )
        try:
            return extract_resume_body(raw)
        except ExtractionError as exc:
            logger.warning("JSON parse error (build-resume): %s", exc)
            return fallback_resume_body()

    def parse_resume(self, resume_text: Any) -> ResumeBody:
        if not isinstance(resume_text, str) or not resume_text.strip():
            raise MissingInput("resumeText is required")
        raw = self._generate(
            system=prompts.PARSE_RESUME_SYSTEM,
            prompt=prompts.PARSE_RESUME_PROMPT.format(schema=prompts.RESUME_SCHEMA, resume_text=resume_text),
            temperature=0.3,
            json_mode=True,
        )
        try:
            return extract_resume_body(raw)
        except ExtractionError as exc:
            logger.warning("JSON parse error (parse-resume): %s", exc)
            raise ParseFailure("Failed to parse AI response") from exc

    def improve_summary(self, summary: str | None, mode: str = "improve") -> str:
        if not summary:
            raise MissingInput("Missing summary")
        tone_hint = prompts.SUMMARY_MODE_HINTS.get(mode, prompts.SUMMARY_DEFAULT_HINT)
        text = self._generate(
            system=prompts.IMPROVE_SUMMARY_SYSTEM,
            prompt=prompts.IMPROVE_SUMMARY_PROMPT.format(summary=summary, tone_hint=tone_hint),
            temperature=0.6,
        )
        return text.strip()

    def improve_experience(self, experience: ExperienceItem | None, mode: str = "improve") -> list[str]:
        if experience is None or not any(b.strip() for b in experience.bullets):
            raise MissingInput("Missing experience bullets")
        tone_hint = prompts.EXPERIENCE_MODE_HINTS.get(mode, prompts.EXPERIENCE_DEFAULT_HINT)
        bullets = "\n".join(f"{i}. {bullet}" for i, bullet in enumerate(experience.bullets, start=1))
        text = self._generate(
            system=prompts.IMPROVE_EXPERIENCE_SYSTEM,
            prompt=prompts.IMPROVE_EXPERIENCE_PROMPT.format(
                title=experience.title or "Frontend Engineer",
                company=experience.company or "Company",
                period=experience.period,
                bullets=bullets,
                tone_hint=tone_hint,
            ),
            temperature=0.6,
        )
        return parse_numbered_list(text)

    def improve_section(
        self,
        *,
        section: str | None,
        mode: str = "improve",
        summary: str | None = None,
        experience: ExperienceItem | None = None,
    ) -> dict[str, Any]:
        if section == "summary":
            return {"summary": self.improve_summary(summary, mode)}
        if section == "experience":
            return {"bullets": self.improve_experience(experience, mode)}
        raise MissingInput("Unknown section")

    def refine_resume(self, body: ResumeBody | None, tone: str | None = "neutral") -> ResumeBody:
        if body is None:
            raise MissingInput("resumeJson is required")
        tone_description = prompts.REFINE_TONES.get(tone or "neutral", prompts.REFINE_TONES["neutral"])
        raw = self._generate(
            system=prompts.REFINE_RESUME_SYSTEM,
            prompt=prompts.REFINE_RESUME_PROMPT.format(
                tone_description=tone_description,
                resume_json=_dump(body),
            ),
            temperature=0.4,
            json_mode=True,
        )
        try:
            return extract_resume_body(raw)
        except ExtractionError as exc:
            logger.warning("JSON parse error (refine-resume): %s; keeping original", exc)
            return body

    def generate_bullets(
        self,
        *,
        title: str = "",
        company: str = "",
        period: str = "",
        location: str = "",
        tech_stack: list[str] | None = None,
        existing_bullets: list[str] | None = None,
        job_description_snippet: str = "",
    ) -> list[str]:
        if not title and not company:
            raise MissingInput("title or company is required")
        existing = "\n".join(f"  {i}. {b}" for i, b in enumerate(existing_bullets or [], start=1))
        raw = self._generate(
            system=prompts.GENERATE_BULLETS_SYSTEM,
            prompt=prompts.GENERATE_BULLETS_PROMPT.format(
                title=title or "N/A",
                company=company or "N/A",
                period=period or "N/A",
                location=location or "N/A",
                tech_stack=", ".join(tech_stack or []) or "N/A",
                existing_bullets=existing or "  none",
                job_snippet=job_description_snippet or "N/A",
            ),
            temperature=0.5,
            json_mode=True,
        )
        try:
            parsed = extract_json_object(raw)
        except ExtractionError as exc:
            logger.warning("JSON parse error (generate-bullets): %s", exc)
            return []
        bullets = parsed.get("bullets")
        if not isinstance(bullets, list):
            return []
        return [b for b in bullets if isinstance(b, str)]

    def generate_cover_letter(
        self,
        *,
        header: ResumeHeader | None,
        body: ResumeBody | None,
        job_title: str | None = None,
        job_company: str | None = None,
        tone: str | None = "neutral",
    ) -> str:
        if header is None or body is None:
            raise MissingInput("Missing header or resumeJson")
        name = header.full_name or "Candidate"
        experience_lines = "\n".join(
            f"- {exp.title} at {exp.company}: {' '.join(exp.bullets[:2])}" for exp in body.experiences
        )
        text = self._generate(
            system=prompts.COVER_LETTER_SYSTEM,
            prompt=prompts.COVER_LETTER_PROMPT.format(
                target_role=target_role_line(job_title, job_company),
                name=name,
                title=header.title or "Frontend Developer",
                location=header.location or "MENA (remote)",
                summary=body.summary or "(no explicit summary provided)",
                skills=", ".join(body.skills) or "(no skills listed)",
                experience_lines=experience_lines or "(no experience bullets available)",
                tone_hint=prompts.COVER_LETTER_TONES.get(tone or "neutral", prompts.COVER_LETTER_TONES["neutral"]),
            ),
            temperature=0.6,
        )
        return clean_plain_text(text)

    def cover_letter_for_job(
        self,
        *,
        header: ResumeHeader | None,
        body: ResumeBody | None,
        job_description: str | None,
        tone: str | None = "neutral",
    ) -> str:
        if header is None or body is None or not job_description:
            raise MissingInput("header, resumeJson, and jobDescription are required")
        text = self._generate(
            system=prompts.JOB_COVER_LETTER_SYSTEM,
            prompt=prompts.JOB_COVER_LETTER_PROMPT.format(
                name=header.full_name or "Candidate",
                title=header.title or "Frontend Developer",
                location=header.location or "MENA, remote",
                resume_json=_dump(body),
                job_description=job_description[:JOB_TEXT_LIMIT],
                tone_description=prompts.JOB_COVER_LETTER_TONES.get(
                    tone or "neutral", prompts.JOB_COVER_LETTER_TONES["neutral"]
                ),
            ),
            temperature=0.6,
        )
        return clean_plain_text(text)

    def tailor_resume(self, body: ResumeBody | None, job_input: str | None) -> TailorResult:
        if body is None or not job_input or not job_input.strip():
            raise MissingInput("Missing resumeJson or jobInput")
        raw = self._generate(
            system=prompts.TAILOR_RESUME_SYSTEM,
            prompt=prompts.TAILOR_RESUME_PROMPT.format(
                schema=prompts.RESUME_SCHEMA,
                resume_json=_dump(body),
                job_input=job_input.strip()[:JOB_TEXT_LIMIT],
            ),
            temperature=0.4,
            json_mode=True,
        )
        try:
            parsed = extract_json_object(strip_code_fences(raw))
            tailored = validate_resume_body(parsed.get("tailoredResumeJson"))
        except ExtractionError as exc:
            logger.warning("Malformed tailoring output: %s", exc)
            raise ParseFailure("The AI returned a malformed tailored resume. Please try again.") from exc
        return normalize_tailor_payload(parsed, tailored)

    def _generate(self, *, system: str, prompt: str, temperature: float, json_mode: bool = False) -> str:
        provider = self._resolve_provider()
        request = GenerationRequest(system=system, prompt=prompt, temperature=temperature, json_mode=json_mode)
        response = provider.complete(model=self.settings.openai_model, request=request)
        return response.content

    def _resolve_provider(self) -> LLMProvider:
        if self._provider is not None:
            return self._provider
        if not self.settings.openai_api_key:
            raise InternalFailure("OpenAI API key is not configured")
        return self.pool.openai()


def normalize_tailor_payload(parsed: dict[str, Any], tailored: ResumeBody) -> TailorResult:
    return TailorResult(
        tailored_resume_json=tailored,
        ats_score=coerce_score(parsed.get("atsScore")),
        missing_skills=_string_list(parsed.get("missingSkills")),
        present_keywords=_string_list(parsed.get("presentKeywords")),
        missing_keywords=_string_list(parsed.get("missingKeywords")),
        job_title=_optional_text(parsed.get("jobTitle")),
        job_company=_optional_text(parsed.get("jobCompany")),
    )


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _dump(body: ResumeBody) -> str:
    return json.dumps(body.model_dump(mode="json"), indent=2, ensure_ascii=False)


def target_role_line(job_title: str | None, job_company: str | None) -> str:
    if job_title and job_company:
        return f"for the {job_title} role at {job_company}"
    if job_title:
        return f"for the {job_title} role"
    if job_company:
        return f"for an open role at {job_company}"
    return "for a frontend engineering role"


def fallback_resume_body() -> ResumeBody:
    return ResumeBody(
        summary=(
            "Frontend developer with experience building responsive interfaces "
            "using modern JavaScript frameworks."
        ),
        skills=["React", "JavaScript", "CSS"],
        experiences=[
            ExperienceItem(
                title="Frontend Developer",
                company="Example Company",
                bullets=[
                    "Implemented responsive UI components.",
                    "Collaborated with backend engineers to integrate APIs.",
                ],
            )
        ],
        projects=[],
        education=[],
    )
