"""Signed Stripe webhooks through the real gateway.

Invariants:
    - A paid checkout.session.completed (status "complete", payment_status
      "paid") credits the session owner
    - An unpaid completed session credits nothing
    - A payment_intent.succeeded event credits the intent's owner
"""

import hashlib
import hmac
import json
import time

import pytest
from httpx import ASGITransport, AsyncClient

from stoic_journal.infrastructure.stripe_gateway import ResilientStripeGateway
from stoic_journal.main import create_app
from stoic_journal.services.app_context import AppContext

WEBHOOK_SECRET = "whsec_test_signed"


@pytest.fixture
async def signed_client(settings, store, identity, db_manager):
    context = AppContext(
        settings=settings,
        store=store,
        identity=identity,
        payments=ResilientStripeGateway("sk_test_x", webhook_secret=WEBHOOK_SECRET),
        db_manager=db_manager,
    )
    async with AsyncClient(
        transport=ASGITransport(app=create_app(context=context)), base_url="http://test",
    ) as c:
        yield c


def _delivery(event_type: str, obj: dict) -> tuple[bytes, dict]:
    payload = json.dumps({
        "id": "evt_signed", "object": "event", "type": event_type,
        "data": {"object": obj},
    })
    timestamp = int(time.time())
    digest = hmac.new(
        WEBHOOK_SECRET.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256,
    ).hexdigest()
    return payload.encode(), {"Stripe-Signature": f"t={timestamp},v1={digest}"}


def _checkout_session(payment_status: str) -> dict:
    return {
        "id": "cs_live_1", "object": "checkout.session",
        "status": "complete", "payment_status": payment_status,
        "client_reference_id": "user-alice", "mode": "payment",
        "amount_total": 400, "currency": "usd", "payment_intent": "pi_from_cs",
        "metadata": {"user_id": "user-alice", "track_name": "Money"},
    }


async def test_paid_checkout_session_credits_track(signed_client, store):
    body, headers = _delivery("checkout.session.completed", _checkout_session("paid"))

    res = await signed_client.post("/api/v1/payments/webhook", content=body, headers=headers)

    assert res.status_code == 200
    assert res.json()["handled"] is True
    assert res.json()["added_tracks"] == ["Money"]
    assert await store.get("purchases:user-alice") == ["Money"]


async def test_unpaid_checkout_session_credits_nothing(signed_client, store):
    body, headers = _delivery("checkout.session.completed", _checkout_session("unpaid"))

    res = await signed_client.post("/api/v1/payments/webhook", content=body, headers=headers)

    assert res.status_code == 200
    assert res.json() == {"received": True, "handled": False}
    assert await store.get("purchases:user-alice") is None


async def test_succeeded_payment_intent_credits_track(signed_client, store):
    body, headers = _delivery("payment_intent.succeeded", {
        "id": "pi_live_1", "object": "payment_intent", "status": "succeeded",
        "amount": 400, "currency": "usd",
        "metadata": {"user_id": "user-alice", "track_name": "Ego"},
    })

    res = await signed_client.post("/api/v1/payments/webhook", content=body, headers=headers)

    assert res.status_code == 200
    assert await store.get("purchases:user-alice") == ["Ego"]


async def test_unsigned_delivery_rejected(signed_client, store):
    body, _ = _delivery("checkout.session.completed", _checkout_session("paid"))

    res = await signed_client.post(
        "/api/v1/payments/webhook", content=body, headers={"Stripe-Signature": "t=1,v1=00"},
    )

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_WEBHOOK_SIGNATURE"
    assert await store.get("purchases:user-alice") is None
