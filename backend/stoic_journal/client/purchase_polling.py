"""Purchase Confirmation Poller: bounded wait for webhook-driven entitlement.

Invariants:
    - Waits initial_delay once, then makes at most max_attempts reads
    - Fixed interval between attempts; no backoff
    - A failed read counts as an attempt and never aborts the loop early
    - last_error reflects only the final attempt: set when that request never
      got a response, cleared by any answered read (error statuses included)
    - Returns as soon as one read contains the track
    - Cancellation (CancelledError from the caller's task) propagates untouched

Design Decisions:
    - sleep is injected so tests run the whole schedule without waiting
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from stoic_journal.client.api_client import ApiRequestError

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_DELAY_SECONDS = 3.0
DEFAULT_INTERVAL_SECONDS = 5.0
DEFAULT_MAX_ATTEMPTS = 6


@dataclass(frozen=True)
class PollResult:
    confirmed: bool
    attempts: int
    last_error: str | None = None


class PurchaseConfirmationPoller:
    """Polls the purchase list until a track appears or attempts run out."""

    def __init__(
        self,
        fetch_purchases: Callable[[], Awaitable[list[str]]],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._fetch_purchases = fetch_purchases
        self._sleep = sleep
        self.initial_delay = initial_delay
        self.interval = interval
        self.max_attempts = max_attempts

    async def wait_for(self, track: str) -> PollResult:
        last_error: str | None = None
        await self._sleep(self.initial_delay)
        for attempt in range(1, self.max_attempts + 1):
            logger.info(
                f"Checking purchase status ({attempt}/{self.max_attempts})",
                extra={"track": track, "attempt": attempt},
            )
            try:
                purchases = await self._fetch_purchases()
            except ApiRequestError as e:
                # An error response is an answer: the track is not active yet
                last_error = None
                logger.warning(
                    f"Purchase status check rejected: {e}",
                    extra={"track": track, "attempt": attempt},
                )
            except httpx.HTTPError as e:
                last_error = str(e)
                logger.warning(
                    f"Purchase status check failed: {e}",
                    extra={"track": track, "attempt": attempt},
                )
            else:
                if track in purchases:
                    return PollResult(confirmed=True, attempts=attempt)
                last_error = None
            if attempt < self.max_attempts:
                await self._sleep(self.interval)
        return PollResult(
            confirmed=False, attempts=self.max_attempts, last_error=last_error,
        )
