"""Resilient Stripe Gateway: PaymentGateway over the stripe SDK with retry and error mapping.

Invariants:
    - Rate limits and transient errors (connection, 5xx): bounded retries with
      exponential backoff and jitter
    - Invalid requests (unknown ids, bad params): immediate failure, no retry,
      mapped to PaymentProcessorError(api_error_type="invalid_request")
    - Webhook payloads are only trusted after signature verification
    - SDK objects never leave this module: callers receive frozen records

Design Decisions:
    - api_key passed per call instead of setting stripe.api_key globally
    - Async SDK methods (*_async) so the event loop is never blocked
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

import stripe

from stoic_journal.core.errors import (
    PaymentError, PaymentProcessorError, ConfigurationError, ErrorContext,
)
from stoic_journal.core.repository_protocols import (
    PaymentIntentRecord, CheckoutSessionRecord, WebhookEvent,
)

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (stripe.RateLimitError, stripe.APIConnectionError, stripe.APIError)


def _metadata(obj: Any) -> dict[str, str]:
    raw = getattr(obj, "metadata", None)
    if not raw:
        return {}
    return {str(k): str(v) for k, v in raw.to_dict().items()}


def _payment_intent_record(obj: Any) -> PaymentIntentRecord:
    return PaymentIntentRecord(
        id=obj.id,
        status=obj.status,
        amount=obj.amount,
        currency=obj.currency,
        metadata=_metadata(obj),
        client_secret=getattr(obj, "client_secret", None),
    )


def _checkout_session_record(obj: Any) -> CheckoutSessionRecord:
    return CheckoutSessionRecord(
        id=obj.id,
        payment_status=obj.payment_status,
        metadata=_metadata(obj),
        client_reference_id=getattr(obj, "client_reference_id", None),
    )


class ResilientStripeGateway:
    """Wraps the stripe SDK with retry logic and error mapping."""

    def __init__(
        self,
        api_key: str,
        webhook_secret: str | None = None,
        max_retries: int = 2,
        base_delay_ms: int = 500,
        max_delay_ms: int = 8_000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._sleep = sleep

    async def create_payment_intent(
        self,
        *,
        amount: int,
        currency: str,
        metadata: dict[str, str],
        description: str,
    ) -> PaymentIntentRecord:
        intent = await self._call(
            lambda: stripe.PaymentIntent.create_async(
                api_key=self.api_key,
                amount=amount,
                currency=currency,
                metadata=metadata,
                description=description,
            ),
            ErrorContext(user_id=metadata.get("user_id"), track=metadata.get("track_name")),
        )
        return _payment_intent_record(intent)

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentRecord:
        intent = await self._call(
            lambda: stripe.PaymentIntent.retrieve_async(
                payment_intent_id, api_key=self.api_key,
            ),
            ErrorContext(payment_id=payment_intent_id),
        )
        return _payment_intent_record(intent)

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionRecord:
        session = await self._call(
            lambda: stripe.checkout.Session.retrieve_async(
                session_id, api_key=self.api_key,
            ),
            ErrorContext(payment_id=session_id),
        )
        return _checkout_session_record(session)

    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify the Stripe-Signature header and reduce the event to a record."""
        if not self.webhook_secret:
            raise ConfigurationError("Stripe webhook secret not configured")
        try:
            event = stripe.Webhook.construct_event(
                payload, signature, self.webhook_secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Rejected Stripe webhook: {e}")
            raise PaymentError(
                "Invalid webhook signature or payload",
                "INVALID_WEBHOOK_SIGNATURE",
            )
        obj = event.data.object
        object_type = getattr(obj, "object", "")
        # Checkout sessions report "complete" in status; payment lives in payment_status
        if object_type == "checkout.session":
            status = getattr(obj, "payment_status", None)
        else:
            status = getattr(obj, "status", None)
        return WebhookEvent(
            id=event.id,
            type=event.type,
            object_id=obj.id,
            object_type=object_type,
            metadata=_metadata(obj),
            status=status,
            client_reference_id=getattr(obj, "client_reference_id", None),
        )

    async def _call(
        self,
        operation: Callable[[], Awaitable[Any]],
        context: ErrorContext | None = None,
    ) -> Any:
        """Run operation, retrying transient failures up to max_retries."""
        for attempt in range(self.max_retries + 1):
            try:
                return await operation()
            except _TRANSIENT_ERRORS as e:
                if attempt >= self.max_retries:
                    raise PaymentProcessorError(
                        f"Transient failure after {self.max_retries} retries",
                        "connection_error",
                        context=context,
                    ) from e
                delay = self._backoff(attempt)
                logger.warning(
                    f"Stripe transient error, retry after {delay}ms: {e}",
                    extra={"attempt": attempt + 1},
                )
                await self._sleep(delay / 1000)
            except stripe.InvalidRequestError as e:
                raise PaymentProcessorError(
                    str(e.user_message or e), "invalid_request", context=context,
                ) from e
            except stripe.AuthenticationError as e:
                logger.error("Stripe rejected the configured secret key")
                raise PaymentProcessorError(
                    "Processor authentication failed", "authentication", context=context,
                ) from e
            except stripe.StripeError as e:
                raise PaymentProcessorError(
                    str(e.user_message or e), "client_error", context=context,
                ) from e

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
