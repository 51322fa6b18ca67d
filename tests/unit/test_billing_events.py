from __future__ import annotations

import hashlib
import hmac
import json
import time

import pytest
import stripe

from nebulacv.billing.stripe_service import BillingService, apply_event
from nebulacv.config import Settings
from nebulacv.db.repositories import Repository
from nebulacv.db.session import SessionLocal
from nebulacv.errors import InternalFailure, InvalidSignature


def _event(event_type: str, metadata: dict) -> dict:
    return {"type": event_type, "data": {"object": {"metadata": metadata}}}


def _signed(event: dict, secret: str) -> tuple[bytes, str]:
    payload = json.dumps(event).encode("utf-8")
    timestamp = int(time.time())
    digest = hmac.new(secret.encode("utf-8"), f"{timestamp}.".encode("utf-8") + payload, hashlib.sha256).hexdigest()
    return payload, f"t={timestamp},v1={digest}"


def test_completed_checkout_sets_pro_plan() -> None:
    with SessionLocal() as db:
        repo = Repository(db)
        assert apply_event(repo, _event("checkout.session.completed", {"user_id": "u1"})) is True
        assert repo.get_plan("u1") == "pro"


def test_verified_stripe_event_object_sets_pro_plan() -> None:
    event = {
        "id": "evt_1",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_1", "object": "checkout.session", "metadata": {"user_id": "u1"}}},
    }
    payload, signature = _signed(event, "whsec_unit")
    verified = BillingService(Settings(stripe_webhook_secret="whsec_unit")).verify_event(payload, signature)
    assert isinstance(verified, stripe.Event)

    with SessionLocal() as db:
        repo = Repository(db)
        assert apply_event(repo, verified) is True
        assert repo.get_plan("u1") == "pro"


def test_repeated_checkout_event_is_a_no_op() -> None:
    event = _event("checkout.session.completed", {"user_id": "u1"})
    with SessionLocal() as db:
        repo = Repository(db)
        assert apply_event(repo, event) is True
        assert apply_event(repo, event) is False
        assert repo.get_plan("u1") == "pro"


@pytest.mark.parametrize(
    "event",
    [
        _event("checkout.session.completed", {}),
        _event("invoice.paid", {"user_id": "u1"}),
        {"type": "checkout.session.completed"},
    ],
)
def test_other_events_are_ignored(event: dict) -> None:
    with SessionLocal() as db:
        repo = Repository(db)
        assert apply_event(repo, event) is False
        assert repo.get_plan("u1") == "free"


def test_verify_event_requires_configuration_and_signature() -> None:
    with pytest.raises(InternalFailure):
        BillingService(Settings(stripe_webhook_secret="")).verify_event(b"{}", "t=1,v1=abc")
    with pytest.raises(InvalidSignature):
        BillingService(Settings(stripe_webhook_secret="whsec_x")).verify_event(b"{}", None)
