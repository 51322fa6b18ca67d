from __future__ import annotations

import logging
from typing import Any

import stripe

from nebulacv.config import Settings, get_settings
from nebulacv.core.session import SessionContext
from nebulacv.db.repositories import Repository
from nebulacv.errors import InternalFailure, InvalidSignature

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class BillingService:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def create_checkout_url(self, session: SessionContext) -> str:
        if not self.settings.stripe_secret_key or not self.settings.stripe_monthly_price_id:
            raise InternalFailure("Billing is not configured")

        app_url = self.settings.app_url.rstrip("/")
        try:
            checkout = stripe.checkout.Session.create(
                api_key=self.settings.stripe_secret_key,
                customer_email=session.email or None,
                line_items=[{"price": self.settings.stripe_monthly_price_id, "quantity": 1}],
                mode="subscription",
                success_url=f"{app_url}/billing/success",
                cancel_url=f"{app_url}/billing/cancel",
                metadata={"user_id": session.user_id},
            )
        except stripe.StripeError as exc:
            logger.warning("Stripe checkout creation failed user=%s error=%s", session.user_id, exc)
            raise InternalFailure("Unable to start checkout right now.") from exc

        url = getattr(checkout, "url", None)
        if not url:
            raise InternalFailure("No checkout URL returned")
        return url

    def verify_event(self, payload: bytes, signature: str | None) -> Any:
        if not self.settings.stripe_webhook_secret:
            raise InternalFailure("Stripe webhook secret is not configured")
        if not signature:
            raise InvalidSignature("Invalid signature")
        try:
            return stripe.Webhook.construct_event(
                payload=payload,
                sig_header=signature,
                secret=self.settings.stripe_webhook_secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as exc:
            logger.warning("Rejected webhook: %s", exc)
            raise InvalidSignature("Invalid signature") from exc


def _as_dict(event: Any) -> dict:
    # Recent stripe releases no longer subclass dict for StripeObject.
    if isinstance(event, dict):
        return event
    return event.to_dict()


def apply_event(repo: Repository, event: Any) -> bool:
    """Flip the user's plan for a completed checkout. Returns True when a plan changed."""
    payload = _as_dict(event)
    if payload.get("type") != CHECKOUT_COMPLETED:
        return False

    data_object = (payload.get("data") or {}).get("object") or {}
    metadata = data_object.get("metadata") or {}
    user_id = metadata.get("user_id")
    if not user_id:
        return False

    if repo.get_plan(str(user_id)) == "pro":
        logger.info("Checkout for user=%s already applied", user_id)
        return False
    repo.set_plan(str(user_id), "pro")
    logger.info("Upgraded user=%s to pro", user_id)
    return True
