from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from nebulacv.db.base import utcnow
from nebulacv.db.models import JobApplication, Profile, Resume
from nebulacv.types import APPLICATION_STATUSES, ResumeDocument

DEFAULT_RESUME_TITLE = "Untitled Resume"


def new_id() -> str:
    return str(uuid.uuid4())


class Repository:
    """Row access for one database session.

    Every query is scoped by ``user_id``; a row owned by another user is
    indistinguishable from a missing one.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_or_create_profile(self, user_id: str, email: str = "") -> Profile:
        profile = self.session.get(Profile, user_id)
        if profile is None:
            profile = Profile(user_id=user_id, email=email, plan="free")
            self.session.add(profile)
            self.session.commit()
            self.session.refresh(profile)
        elif email and profile.email != email:
            profile.email = email
            self.session.commit()
        return profile

    def get_plan(self, user_id: str) -> str:
        profile = self.session.get(Profile, user_id)
        return profile.plan if profile else "free"

    def set_plan(self, user_id: str, plan: str) -> Profile:
        profile = self.session.get(Profile, user_id)
        if profile is None:
            profile = Profile(user_id=user_id, email="", plan=plan)
            self.session.add(profile)
        else:
            profile.plan = plan
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def save_resume(
        self,
        *,
        user_id: str,
        title: str | None,
        document: ResumeDocument,
        resume_id: str | None = None,
    ) -> Resume:
        row = self.session.get(Resume, resume_id) if resume_id else None
        if row is not None and row.user_id != user_id:
            raise ValueError(f"resume {resume_id} not found")

        if row is None:
            row = Resume(id=resume_id or new_id(), user_id=user_id)
            self.session.add(row)

        row.title = title or DEFAULT_RESUME_TITLE
        row.resume_json = document.to_json()
        row.updated_at = utcnow()

        self.session.commit()
        self.session.refresh(row)
        return row

    def list_resumes(self, user_id: str) -> list[Resume]:
        statement = select(Resume).where(Resume.user_id == user_id).order_by(Resume.updated_at.desc())
        return list(self.session.scalars(statement).all())

    def load_resume(self, user_id: str, resume_id: str) -> Resume | None:
        statement = select(Resume).where(Resume.id == resume_id, Resume.user_id == user_id)
        return self.session.scalar(statement)

    def delete_all_resumes(self, user_id: str) -> int:
        result = self.session.execute(delete(Resume).where(Resume.user_id == user_id))
        self.session.commit()
        return result.rowcount or 0

    def create_application(
        self,
        *,
        user_id: str,
        resume_id: str | None = None,
        company: str | None = None,
        role: str | None = None,
        job_url: str | None = None,
        status: str = "applied",
        applied_at: date | None = None,
        notes: str | None = None,
    ) -> JobApplication:
        _check_status(status)
        application = JobApplication(
            id=new_id(),
            user_id=user_id,
            resume_id=resume_id,
            company=company,
            role=role,
            job_url=job_url,
            status=status,
            applied_at=applied_at,
            notes=notes,
        )
        self.session.add(application)
        self.session.commit()
        self.session.refresh(application)
        return application

    def list_applications(self, user_id: str) -> list[JobApplication]:
        statement = (
            select(JobApplication)
            .where(JobApplication.user_id == user_id)
            .order_by(JobApplication.created_at.desc())
        )
        return list(self.session.scalars(statement).all())

    def resume_titles(self, user_id: str, resume_ids: set[str]) -> dict[str, str | None]:
        if not resume_ids:
            return {}
        statement = select(Resume.id, Resume.title).where(
            Resume.user_id == user_id, Resume.id.in_(resume_ids)
        )
        return {row.id: row.title for row in self.session.execute(statement)}

    def update_application_status(self, user_id: str, application_id: str, status: str) -> JobApplication:
        _check_status(status)
        application = self.session.get(JobApplication, application_id)
        if application is None or application.user_id != user_id:
            raise ValueError(f"application {application_id} not found")
        application.status = status
        self.session.commit()
        self.session.refresh(application)
        return application


def _check_status(status: str) -> None:
    if status not in APPLICATION_STATUSES:
        raise ValueError(f"status must be one of {list(APPLICATION_STATUSES)}")
