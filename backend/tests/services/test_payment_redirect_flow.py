"""Payment redirect flow: client orchestrator driving the real app.

Invariants:
    - Redirect with track + session id confirms server-side and reloads
    - Redirect with bundle + session id reports the added tracks
    - Redirect with track only polls until the webhook has credited the track
"""

import pytest
from httpx import ASGITransport

from stoic_journal.client.api_client import StoicJournalClient
from stoic_journal.client.orchestrator import PaymentRedirectOrchestrator
from stoic_journal.client.purchase_polling import PurchaseConfirmationPoller
from stoic_journal.core.domain_types import Track
from stoic_journal.main import create_app


@pytest.fixture
async def api_client(context):
    transport = ASGITransport(app=create_app(context=context))
    async with StoicJournalClient("http://test", "token-alice", transport=transport) as c:
        yield c


async def test_direct_purchase_redirect_credits_and_reloads(api_client, gateway):
    gateway.add_session("cs_live_1", {"user_id": "user-alice", "track_name": "Ego"})
    orchestrator = PaymentRedirectOrchestrator(api_client)

    outcome = await orchestrator.handle(
        "https://app.test/?success=true&track=Ego&session_id=cs_live_1",
    )

    assert outcome.reload is True
    assert outcome.clear_url is True
    assert outcome.notices[-1].message == "Ego track successfully added to your account!"
    assert await api_client.get_purchases() == ["Ego"]


async def test_bundle_redirect_reports_added_tracks(api_client, gateway):
    gateway.add_session("cs_bundle", {"user_id": "user-alice", "bundle": "true"})
    outcome = await PaymentRedirectOrchestrator(api_client).handle(
        "https://app.test/?success=true&bundle=true&session_id=cs_bundle",
    )
    assert outcome.notices[0].level == "success"
    assert outcome.notices[0].message == (
        "Bundle purchase successful! Added 4 tracks: Money, Relationships, Discipline, Ego"
    )


async def test_direct_purchase_redirect_for_unpaid_session_reports_error(api_client, gateway):
    gateway.add_session(
        "cs_unpaid", {"user_id": "user-alice", "track_name": "Ego"}, payment_status="unpaid",
    )
    outcome = await PaymentRedirectOrchestrator(api_client).handle(
        "https://app.test/?success=true&track=Ego&session_id=cs_unpaid",
    )
    assert outcome.reload is False
    assert outcome.clear_url is True
    assert outcome.notices[0].level == "error"


async def test_track_only_redirect_polls_until_webhook_credit(api_client, context):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 3:
            await context.ledger.credit("user-alice", [Track.MONEY])

    orchestrator = PaymentRedirectOrchestrator(
        api_client,
        poller_factory=lambda c: PurchaseConfirmationPoller(c.get_purchases, sleep=fake_sleep),
    )
    outcome = await orchestrator.handle("https://app.test/?success=true&track=Money")

    assert sleeps == [3.0, 5.0, 5.0]
    assert outcome.reload is True
    assert [n.message for n in outcome.notices] == [
        "Payment successful! Checking Money track activation...",
        "Money track activated! Refreshing dashboard...",
    ]
