"""Payment Webhook: signature-gated crediting and replay safety.

Invariants:
    - No bearer token; an invalid signature is 400 and credits nothing
    - payment_intent.succeeded and paid checkout.session.completed credit
    - A replayed event (same processor object) is acknowledged, not re-credited
    - Events that pay for nothing are acknowledged with handled=False
"""

from stoic_journal.core.repository_protocols import WebhookEvent

from tests.services.fakes import VALID_SIGNATURE


def _post(client, signature=VALID_SIGNATURE):
    return client.post(
        "/api/v1/payments/webhook",
        content=b'{"id": "evt_1"}',
        headers={"Stripe-Signature": signature},
    )


async def test_invalid_signature_rejected(client, gateway, store):
    gateway.next_event = WebhookEvent(
        id="evt_1", type="payment_intent.succeeded", object_id="pi_1",
        object_type="payment_intent", status="succeeded",
        metadata={"user_id": "user-alice", "track_name": "Money"},
    )
    res = await _post(client, signature="t=1,v1=forged")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_WEBHOOK_SIGNATURE"
    assert await store.get("purchases:user-alice") is None


async def test_payment_intent_succeeded_credits_track(client, gateway, store):
    gateway.next_event = WebhookEvent(
        id="evt_1", type="payment_intent.succeeded", object_id="pi_1",
        object_type="payment_intent", status="succeeded",
        metadata={"user_id": "user-alice", "track_name": "Money"},
    )
    res = await _post(client)
    assert res.status_code == 200
    assert res.json() == {"received": True, "handled": True, "added_tracks": ["Money"]}
    assert await store.get("purchases:user-alice") == ["Money"]
    assert (await store.get("payment:pi_1"))["source"] == "webhook:payment_intent.succeeded"


async def test_replayed_event_is_not_credited_twice(client, gateway, store):
    gateway.next_event = WebhookEvent(
        id="evt_1", type="payment_intent.succeeded", object_id="pi_1",
        object_type="payment_intent", status="succeeded",
        metadata={"user_id": "user-alice", "track_name": "Money"},
    )
    await _post(client)
    res = await _post(client)
    assert res.json()["already_processed"] is True
    assert await store.get("purchases:user-alice") == ["Money"]


async def test_webhook_after_redirect_confirmation_is_already_processed(client, gateway):
    gateway.add_intent("pi_1", "user-alice", "Money")
    await client.post(
        "/api/v1/payments/process-payment-intent",
        headers={"Authorization": "Bearer token-alice"},
        json={"paymentIntentId": "pi_1", "trackName": "Money"},
    )
    gateway.next_event = WebhookEvent(
        id="evt_1", type="payment_intent.succeeded", object_id="pi_1",
        object_type="payment_intent", status="succeeded",
        metadata={"user_id": "user-alice", "track_name": "Money"},
    )
    res = await _post(client)
    assert res.json()["already_processed"] is True


async def test_paid_bundle_checkout_credits_all_tracks(client, gateway, store):
    gateway.next_event = WebhookEvent(
        id="evt_2", type="checkout.session.completed", object_id="cs_1",
        object_type="checkout.session", status="paid",
        metadata={"bundle": "true"}, client_reference_id="user-alice",
    )
    res = await _post(client)
    assert res.json()["added_tracks"] == ["Money", "Relationships", "Discipline", "Ego"]
    assert len(await store.get("purchases:user-alice")) == 4


async def test_unpaid_checkout_is_ignored(client, gateway, store):
    gateway.next_event = WebhookEvent(
        id="evt_3", type="checkout.session.completed", object_id="cs_2",
        object_type="checkout.session", status="unpaid",
        metadata={"user_id": "user-alice", "track_name": "Ego"},
    )
    res = await _post(client)
    assert res.json() == {"received": True, "handled": False}
    assert await store.get("purchases:user-alice") is None


async def test_unrelated_event_type_is_acknowledged(client, gateway):
    gateway.next_event = WebhookEvent(
        id="evt_4", type="customer.created", object_id="cus_1", object_type="customer",
    )
    res = await _post(client)
    assert res.status_code == 200
    assert res.json()["handled"] is False


async def test_event_without_track_metadata_is_not_credited(client, gateway, store):
    gateway.next_event = WebhookEvent(
        id="evt_5", type="payment_intent.succeeded", object_id="pi_9",
        object_type="payment_intent", status="succeeded",
        metadata={"user_id": "user-alice"},
    )
    res = await _post(client)
    assert res.json()["handled"] is False
    assert await store.get("purchases:user-alice") is None
