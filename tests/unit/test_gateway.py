from __future__ import annotations

import json

import pytest

from nebulacv.config import get_settings
from nebulacv.errors import InternalFailure, MissingInput, ParseFailure, RateLimited
from nebulacv.llm.gateway import EnrichmentGateway, fallback_resume_body
from nebulacv.types import ExperienceItem, ResumeBody, ResumeHeader

BODY_JSON = json.dumps(
    {
        "summary": "Frontend developer focused on performance.",
        "skills": ["React", "TypeScript"],
        "experiences": [{"title": "Engineer", "company": "Acme", "period": "2021-2024", "bullets": ["Built UI"]}],
        "projects": [],
        "education": [],
    }
)


def _gateway(provider) -> EnrichmentGateway:
    return EnrichmentGateway(settings=get_settings(), provider=provider)


def test_build_resume_requires_answers(scripted_provider) -> None:
    gateway = _gateway(scripted_provider())
    for answers in (None, [], "text"):
        with pytest.raises(MissingInput, match="answers required"):
            gateway.build_resume(answers)


def test_build_resume_returns_model_body(scripted_provider) -> None:
    provider = scripted_provider(f"Here you go: {BODY_JSON}")
    body = _gateway(provider).build_resume(["I build React apps", "React, TS"])

    assert body.skills == ["React", "TypeScript"]
    request = provider.requests[0]
    assert request.json_mode is True
    assert "Answer 1: I build React apps" in request.prompt
    assert "Answer 2: React, TS" in request.prompt


def test_build_resume_falls_back_when_output_has_no_json(scripted_provider) -> None:
    body = _gateway(scripted_provider("Sorry, I cannot help with that.")).build_resume(["answer"])
    assert body == fallback_resume_body()
    assert body.experiences[0].company == "Example Company"


def test_parse_resume_reports_parse_error(scripted_provider) -> None:
    gateway = _gateway(scripted_provider("no json here"))
    with pytest.raises(ParseFailure) as exc_info:
        gateway.parse_resume("Jane Doe, React developer")
    assert exc_info.value.status_code == 500
    assert exc_info.value.to_payload()["error"] == "PARSE_ERROR"


def test_parse_resume_requires_text(scripted_provider) -> None:
    with pytest.raises(MissingInput, match="resumeText is required"):
        _gateway(scripted_provider()).parse_resume("   ")


def test_improve_section_summary_and_experience(scripted_provider) -> None:
    provider = scripted_provider("  Sharper summary.  ", "1. Led redesign\n2) Cut bundle size\n\n- Mentored juniors")
    gateway = _gateway(provider)

    assert gateway.improve_section(section="summary", mode="concise", summary="Old summary") == {
        "summary": "Sharper summary."
    }
    result = gateway.improve_section(
        section="experience",
        experience=ExperienceItem(title="Engineer", company="Acme", bullets=["Did stuff"]),
    )
    assert result == {"bullets": ["Led redesign", "Cut bundle size", "Mentored juniors"]}
    assert "more concise" in provider.requests[0].prompt


def test_improve_section_rejects_unknown_section(scripted_provider) -> None:
    with pytest.raises(MissingInput, match="Unknown section"):
        _gateway(scripted_provider()).improve_section(section="skills", summary="x")


def test_refine_keeps_original_on_bad_output(scripted_provider) -> None:
    original = ResumeBody.model_validate_json(BODY_JSON)
    provider = scripted_provider("{broken")
    refined = _gateway(provider).refine_resume(original, "pirate")

    assert refined == original
    assert "neutral, concise, and professional" in provider.requests[0].prompt


def test_generate_bullets_policy(scripted_provider) -> None:
    gateway = _gateway(scripted_provider('{"bullets": ["One", 2, "Three"]}', '{"bullets": "nope"}', "garbage"))

    assert gateway.generate_bullets(title="Engineer") == ["One", "Three"]
    assert gateway.generate_bullets(company="Acme") == []
    assert gateway.generate_bullets(title="Engineer") == []
    with pytest.raises(MissingInput):
        gateway.generate_bullets()


def test_cover_letters_strip_fences(scripted_provider) -> None:
    header = ResumeHeader(full_name="Sara Ali")
    body = ResumeBody.model_validate_json(BODY_JSON)
    provider = scripted_provider("```\nDear Hiring Manager,\n\nSincerely,\nSara Ali\n```", "  Best regards, Sara  ")
    gateway = _gateway(provider)

    letter = gateway.generate_cover_letter(header=header, body=body, job_title="Frontend Engineer", job_company="Shopify")
    assert letter.startswith("Dear Hiring Manager,")
    assert "```" not in letter
    assert "for the Frontend Engineer role at Shopify" in provider.requests[0].prompt

    assert gateway.cover_letter_for_job(header=header, body=body, job_description="React role") == "Best regards, Sara"
    with pytest.raises(MissingInput):
        gateway.cover_letter_for_job(header=header, body=body, job_description="")


def test_tailor_resume_normalises_payload(scripted_provider) -> None:
    payload = {
        "tailoredResumeJson": json.loads(BODY_JSON),
        "atsScore": "91.4",
        "missingSkills": ["GraphQL"],
        "presentKeywords": ["React"],
    }
    result = _gateway(scripted_provider("```json\n" + json.dumps(payload) + "\n```")).tailor_resume(
        ResumeBody.model_validate_json(BODY_JSON), "Senior React engineer at Shopify"
    )

    assert result.ats_score == 91
    assert result.score_label == "Strong match"
    assert result.missing_skills == ["GraphQL"]
    assert result.missing_keywords == []
    assert result.job_title is None
    assert result.job_company is None


def test_tailor_resume_nan_score_becomes_null(scripted_provider) -> None:
    raw = '{"tailoredResumeJson": {"summary": "x", "skills": [], "experiences": []}, "atsScore": NaN}'
    result = _gateway(scripted_provider(raw)).tailor_resume(ResumeBody(), "job text")
    assert result.ats_score is None
    assert result.score_label == "Not calculated yet"


def test_tailor_resume_malformed_output_is_parse_error(scripted_provider) -> None:
    raw = '{"tailoredResumeJson": {"summary": "x", "skills": "React", "experiences": []}}'
    gateway = _gateway(scripted_provider(raw))
    with pytest.raises(ParseFailure):
        gateway.tailor_resume(ResumeBody(), "job text")


WRONG_SHAPES = ["{}", json.dumps({"resume": json.loads(BODY_JSON)})]


@pytest.mark.parametrize("raw", WRONG_SHAPES)
def test_build_resume_falls_back_on_wrong_shape(scripted_provider, raw: str) -> None:
    assert _gateway(scripted_provider(raw)).build_resume(["answer"]) == fallback_resume_body()


@pytest.mark.parametrize("raw", WRONG_SHAPES)
def test_refine_keeps_original_on_wrong_shape(scripted_provider, raw: str) -> None:
    original = ResumeBody.model_validate_json(BODY_JSON)
    assert _gateway(scripted_provider(raw)).refine_resume(original, "confident") == original


@pytest.mark.parametrize("raw", WRONG_SHAPES)
def test_parse_resume_wrong_shape_is_parse_error(scripted_provider, raw: str) -> None:
    with pytest.raises(ParseFailure):
        _gateway(scripted_provider(raw)).parse_resume("Jane Doe, React developer")


@pytest.mark.parametrize(
    "tailored",
    [{}, {"resume": json.loads(BODY_JSON)}, None],
)
def test_tailor_resume_wrong_shape_is_parse_error(scripted_provider, tailored) -> None:
    raw = json.dumps({"tailoredResumeJson": tailored, "atsScore": 70})
    with pytest.raises(ParseFailure):
        _gateway(scripted_provider(raw)).tailor_resume(ResumeBody(), "job text")


def test_tailor_resume_requires_inputs(scripted_provider) -> None:
    with pytest.raises(MissingInput, match="Missing resumeJson or jobInput"):
        _gateway(scripted_provider()).tailor_resume(ResumeBody(), "   ")


def test_rate_limit_propagates(scripted_provider) -> None:
    gateway = _gateway(scripted_provider(RateLimited("OpenAI rate limit exceeded.")))
    with pytest.raises(RateLimited):
        gateway.tailor_resume(ResumeBody(), "job text")


def test_missing_api_key_is_internal_failure() -> None:
    gateway = EnrichmentGateway(settings=get_settings())
    with pytest.raises(InternalFailure):
        gateway.parse_resume("some resume")
