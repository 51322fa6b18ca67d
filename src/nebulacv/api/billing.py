from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from nebulacv.api.deps import get_billing, get_db, get_session
from nebulacv.api.schemas import CheckoutResponse
from nebulacv.billing.stripe_service import BillingService, apply_event
from nebulacv.core.session import SessionContext
from nebulacv.db.repositories import Repository

router = APIRouter(prefix="/api", tags=["billing"])


@router.post("/checkout", response_model=CheckoutResponse)
def checkout(
    session: SessionContext = Depends(get_session),
    billing: BillingService = Depends(get_billing),
) -> CheckoutResponse:
    return CheckoutResponse(url=billing.create_checkout_url(session))


@router.post("/stripe/webhook")
async def stripe_webhook(
    request: Request,
    billing: BillingService = Depends(get_billing),
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    payload = await request.body()
    event = billing.verify_event(payload, request.headers.get("stripe-signature"))
    apply_event(Repository(db), event)
    return {"received": True}
