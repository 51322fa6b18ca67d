from __future__ import annotations

from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from nebulacv.api.app import create_app
from nebulacv.db import repositories
from nebulacv.db.models import Resume
from nebulacv.db.session import SessionLocal

DOCUMENT = {
    "header": {"fullName": "Sara Ali", "email": "sara@example.com"},
    "body": {"summary": "Frontend engineer", "skills": ["React"], "experiences": [], "projects": [], "education": []},
    "templateId": "classic",
    "coverLetter": "",
}


def _row_count() -> int:
    with SessionLocal() as db:
        return db.query(Resume).count()


def test_resume_endpoints_require_session() -> None:
    client = TestClient(create_app())

    response = client.get("/api/resumes")
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHENTICATED"


def test_save_list_and_upsert(auth_headers, monkeypatch) -> None:
    clock = iter(datetime(2026, 1, 1, 12, 0) + timedelta(minutes=i) for i in range(10))
    monkeypatch.setattr(repositories, "utcnow", lambda: next(clock))
    client = TestClient(create_app())

    created = client.post("/api/resumes", json={"title": "", "document": DOCUMENT}, headers=auth_headers)
    assert created.status_code == 200
    record = created.json()
    assert record["title"] == "Untitled Resume"
    assert record["document"]["header"]["fullName"] == "Sara Ali"

    listing = client.get("/api/resumes", headers=auth_headers).json()
    assert [item["id"] for item in listing] == [record["id"]]
    assert _row_count() == 1

    edited = {**DOCUMENT, "templateId": "compact"}
    updated = client.post(
        "/api/resumes",
        json={"id": record["id"], "title": "Shopify", "document": edited},
        headers=auth_headers,
    ).json()
    assert updated["id"] == record["id"]
    assert updated["title"] == "Shopify"
    assert updated["updatedAt"] != record["updatedAt"]
    assert _row_count() == 1

    loaded = client.get(f"/api/resumes/{record['id']}", headers=auth_headers).json()
    assert loaded["document"]["templateId"] == "compact"


def test_list_orders_by_most_recent_update(auth_headers, monkeypatch) -> None:
    clock = iter(datetime(2026, 1, 1, 12, 0) + timedelta(minutes=i) for i in range(10))
    monkeypatch.setattr(repositories, "utcnow", lambda: next(clock))
    client = TestClient(create_app())

    first = client.post("/api/resumes", json={"title": "First", "document": DOCUMENT}, headers=auth_headers).json()
    second = client.post("/api/resumes", json={"title": "Second", "document": DOCUMENT}, headers=auth_headers).json()
    client.post("/api/resumes", json={"id": first["id"], "title": "First", "document": DOCUMENT}, headers=auth_headers)

    titles = [item["title"] for item in client.get("/api/resumes", headers=auth_headers).json()]
    assert titles == ["First", "Second"]
    assert second["id"] != first["id"]


def test_resumes_are_scoped_to_their_owner(auth_headers) -> None:
    client = TestClient(create_app())
    record = client.post("/api/resumes", json={"title": "Mine", "document": DOCUMENT}, headers=auth_headers).json()
    other = {"X-User-Id": "user-2"}

    assert client.get(f"/api/resumes/{record['id']}", headers=other).status_code == 404
    hijack = client.post("/api/resumes", json={"id": record["id"], "document": DOCUMENT}, headers=other)
    assert hijack.status_code == 404
    assert hijack.json()["error"] == "NOT_FOUND"
    assert client.get("/api/resumes", headers=other).json() == []


def test_delete_all_resumes(auth_headers) -> None:
    client = TestClient(create_app())
    for title in ("A", "B"):
        client.post("/api/resumes", json={"title": title, "document": DOCUMENT}, headers=auth_headers)
    client.post("/api/resumes", json={"title": "Other", "document": DOCUMENT}, headers={"X-User-Id": "user-2"})

    response = client.delete("/api/resumes", headers=auth_headers)
    assert response.json() == {"deleted": 2}
    assert client.get("/api/resumes", headers=auth_headers).json() == []
    assert _row_count() == 1


def test_stored_body_is_read_defensively(auth_headers) -> None:
    with SessionLocal() as db:
        db.add(Resume(id="legacy", user_id="user-1", title="Old", resume_json={"body": {"skills": "React"}}))
        db.commit()
    client = TestClient(create_app())

    loaded = client.get("/api/resumes/legacy", headers=auth_headers).json()
    assert loaded["document"]["body"]["skills"] == []
    assert loaded["document"]["templateId"] == "classic"
