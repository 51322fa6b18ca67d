from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from nebulacv.billing.stripe_service import BillingService
from nebulacv.config import get_settings
from nebulacv.core.session import SessionContext
from nebulacv.db.repositories import Repository
from nebulacv.db.session import get_db_session
from nebulacv.errors import Unauthenticated
from nebulacv.llm.gateway import EnrichmentGateway


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_optional_session(request: Request, db: Session = Depends(get_db)) -> SessionContext | None:
    """Resolve the signed-in user from the identity headers set by the auth proxy."""
    settings = get_settings()
    user_id = (request.headers.get(settings.auth_user_header) or "").strip()
    if not user_id:
        return None
    email = (request.headers.get(settings.auth_email_header) or "").strip()
    profile = Repository(db).get_or_create_profile(user_id, email)
    session = SessionContext(user_id=user_id, email=profile.email or email)
    return session.with_plan("pro") if profile.plan == "pro" else session


def get_session(session: SessionContext | None = Depends(get_optional_session)) -> SessionContext:
    if session is None:
        raise Unauthenticated("Sign in to continue")
    return session


def get_gateway() -> EnrichmentGateway:
    return EnrichmentGateway()


def get_billing() -> BillingService:
    return BillingService()
