from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from nebulacv.api.app import create_app

DOCUMENT = {
    "header": {"fullName": "Sara Ali", "email": "sara@example.com"},
    "body": {"summary": "Frontend engineer", "skills": ["React"]},
    "templateId": "classic",
    "coverLetter": "Dear Hiring Manager,\n\nThank you.",
}


@pytest.mark.parametrize("path", ["/builder", "/tracker", "/settings", "/dashboard"])
def test_protected_pages_redirect_to_login(path: str) -> None:
    client = TestClient(create_app())

    response = client.get(path, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == f"/login?redirectTo=%2F{path[1:]}"


def test_signed_in_user_sees_dashboard_and_skips_login(auth_headers) -> None:
    client = TestClient(create_app())
    client.post("/api/resumes", json={"title": "Main CV", "document": DOCUMENT}, headers=auth_headers)

    page = client.get("/dashboard", headers=auth_headers)
    assert page.status_code == 200
    assert "Main CV" in page.text
    assert "Free plan" in page.text

    login = client.get("/login", params={"redirectTo": "/tracker"}, headers=auth_headers, follow_redirects=False)
    assert login.status_code == 303
    assert login.headers["location"] == "/dashboard"

    plain_login = client.get("/login", headers=auth_headers, follow_redirects=False)
    assert plain_login.headers["location"] == "/dashboard"


def test_login_page_renders_for_anonymous_users() -> None:
    client = TestClient(create_app())

    response = client.get("/login", params={"redirectTo": "/builder"})
    assert response.status_code == 200
    assert "/builder" in response.text


def test_login_page_drops_offsite_redirect_target() -> None:
    client = TestClient(create_app())

    response = client.get("/login", params={"redirectTo": "https://evil.example"})
    assert response.status_code == 200
    assert "evil.example" not in response.text
    assert "/dashboard" in response.text


def test_preview_and_print_pages(auth_headers) -> None:
    client = TestClient(create_app())
    record = client.post("/api/resumes", json={"title": "CV", "document": DOCUMENT}, headers=auth_headers).json()

    preview = client.get(f"/preview/resume/{record['id']}", headers=auth_headers)
    assert preview.status_code == 200
    assert "Sara Ali" in preview.text
    assert "window.print()" not in preview.text

    printed = client.get(f"/print/resume/{record['id']}", headers=auth_headers)
    assert "<title>NebulaCV-Resume</title>" in printed.text
    assert "window.print()" in printed.text

    letter = client.get(f"/print/cover-letter/{record['id']}", headers=auth_headers)
    assert "<title>NebulaCV-CoverLetter</title>" in letter.text
    assert "Thank you." in letter.text


def test_print_without_body_is_missing_input(auth_headers) -> None:
    client = TestClient(create_app())
    record = client.post(
        "/api/resumes",
        json={"title": "Empty", "document": {"header": {"fullName": "Sara"}}},
        headers=auth_headers,
    ).json()

    response = client.get(f"/print/resume/{record['id']}", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "MISSING_INPUT"

    letter = client.get(f"/print/cover-letter/{record['id']}", headers=auth_headers)
    assert letter.status_code == 400


def test_print_pages_require_session_and_ownership(auth_headers) -> None:
    client = TestClient(create_app())
    record = client.post("/api/resumes", json={"title": "CV", "document": DOCUMENT}, headers=auth_headers).json()

    anonymous = client.get(f"/print/resume/{record['id']}", follow_redirects=False)
    assert anonymous.status_code == 303
    assert anonymous.headers["location"].startswith("/login?redirectTo=")

    stranger = client.get(f"/print/resume/{record['id']}", headers={"X-User-Id": "user-2"})
    assert stranger.status_code == 404


def test_health_and_favicon() -> None:
    client = TestClient(create_app())

    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/favicon.ico").status_code in {200, 204}
