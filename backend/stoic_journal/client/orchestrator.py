"""Payment Redirect Orchestrator: turns a post-checkout URL into user notices.

Invariants:
    - Decision order: bundle+session, track+session, track only, success only, canceled
    - Server-side confirmation is attempted first; polling is the fallback
      when the redirect carries no session id
    - handle() never raises for payment ambiguity; failures become error notices
    - clear_url is set on every success or cancel outcome, so a reload never
      handles the same redirect twice
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

import httpx

from stoic_journal.client.api_client import ApiRequestError, StoicJournalClient
from stoic_journal.client.purchase_polling import PurchaseConfirmationPoller
from stoic_journal.client.redirect import PaymentRedirect

logger = logging.getLogger(__name__)

NoticeLevel = Literal["success", "info", "error"]


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


@dataclass
class RedirectOutcome:
    notices: list[Notice] = field(default_factory=list)
    reload: bool = False
    clear_url: bool = False

    def notify(self, level: NoticeLevel, message: str) -> None:
        self.notices.append(Notice(level, message))


class PaymentRedirectOrchestrator:
    """Reconciles a checkout return against the API."""

    def __init__(
        self,
        client: StoicJournalClient,
        poller_factory: Callable[[StoicJournalClient], PurchaseConfirmationPoller] | None = None,
    ):
        self._client = client
        self._poller_factory = poller_factory or (
            lambda c: PurchaseConfirmationPoller(c.get_purchases)
        )

    async def handle(self, url: str) -> RedirectOutcome:
        redirect = PaymentRedirect.from_url(url)
        outcome = RedirectOutcome()
        if not redirect.is_payment_return:
            return outcome

        if redirect.success:
            if redirect.bundle and redirect.session_id:
                await self._confirm_bundle(redirect.session_id, outcome)
            elif redirect.track and redirect.session_id:
                await self._confirm_direct(redirect.track, redirect.session_id, outcome)
            elif redirect.track:
                await self._await_webhook(redirect.track, outcome)
            else:
                outcome.notify("success", "Payment successful! Refreshing your dashboard...")
                outcome.reload = True
                outcome.clear_url = True
        elif redirect.canceled:
            outcome.notify(
                "info",
                "Payment was canceled. You can try again anytime from the tracks section.",
            )
            outcome.clear_url = True
        return outcome

    async def _confirm_bundle(self, session_id: str, outcome: RedirectOutcome) -> None:
        outcome.clear_url = True
        try:
            result = await self._client.process_bundle_purchase(session_id)
        except (ApiRequestError, httpx.HTTPError) as e:
            logger.warning(f"Bundle confirmation failed: {e}")
            outcome.notify("error", "Failed to activate bundle tracks. Please contact support.")
            return
        added = result.get("added_tracks") or []
        outcome.notify(
            "success",
            f"Bundle purchase successful! Added {len(added)} tracks: {', '.join(added)}",
        )
        outcome.reload = True

    async def _confirm_direct(
        self, track: str, session_id: str, outcome: RedirectOutcome,
    ) -> None:
        outcome.clear_url = True
        try:
            await self._client.process_direct_purchase(track, session_id)
        except (ApiRequestError, httpx.HTTPError) as e:
            logger.warning(f"Direct purchase confirmation failed: {e}", extra={"track": track})
            outcome.notify(
                "error", f"Failed to activate {track} track. Please contact support.",
            )
            return
        outcome.notify("success", f"{track} track successfully added to your account!")
        outcome.reload = True

    async def _await_webhook(self, track: str, outcome: RedirectOutcome) -> None:
        outcome.clear_url = True
        outcome.notify("success", f"Payment successful! Checking {track} track activation...")
        result = await self._poller_factory(self._client).wait_for(track)
        if result.confirmed:
            outcome.notify("success", f"{track} track activated! Refreshing dashboard...")
            outcome.reload = True
            return
        if result.last_error:
            outcome.notify(
                "error", "Unable to verify purchase status. Please contact support.",
            )
        else:
            outcome.notify(
                "error",
                f"Payment completed but {track} track not activated. "
                "Keep the session_id from your URL and contact support.",
            )
