"""Payment Reconciliation: verify a processor transaction, then credit entitlement.

Invariants:
    - Nothing is credited before the processor object is retrieved (or the
      webhook signature verified) and passes core/enforce_payment rules
    - Crediting goes through PurchaseLedger.credit: at most once per (user, track)
      no matter how many times a confirmation or webhook is retried
    - Each credited processor object leaves a receipt under "payment:{id}"
    - Processor "not found"/invalid-request failures are 400
      PAYMENT_VERIFICATION_FAILED; processor outages stay 503

Design Decisions:
    - Redirect confirmation, direct checkout, bundle checkout and webhook share
      one verify-then-credit path (_credit); only the verification rule differs
"""

import logging

from stoic_journal.core.domain_types import (
    Track, WebhookEventType, PaymentIntentStatus, CheckoutPaymentStatus,
)
from stoic_journal.core.enforce_payment import (
    validate_payment_intent,
    validate_checkout_session,
    validate_bundle_session,
    entitled_tracks,
    session_owner,
)
from stoic_journal.core.errors import (
    ErrorContext, PaymentError, PaymentProcessorError, ValidationError,
)
from stoic_journal.core.profile_state import utc_now_iso
from stoic_journal.core.repository_protocols import (
    AuthUser, KeyValueStore, PaymentGateway, CheckoutSessionRecord, WebhookEvent,
)
from stoic_journal.services.purchase_ledger import PurchaseLedger

logger = logging.getLogger(__name__)

_VERIFICATION_ERROR_TYPES = frozenset({"invalid_request", "client_error"})


def receipt_key(processor_id: str) -> str:
    return f"payment:{processor_id}"


class PaymentReconciler:
    """Turns verified processor payments into purchases."""

    def __init__(
        self,
        gateway: PaymentGateway,
        ledger: PurchaseLedger,
        store: KeyValueStore,
        price_cents: int = 400,
        currency: str = "usd",
    ):
        self._gateway = gateway
        self._ledger = ledger
        self._store = store
        self._price_cents = price_cents
        self._currency = currency

    async def create_intent(self, user: AuthUser, track: Track) -> str:
        """Create a processor payment intent tagged with user and track."""
        context = ErrorContext(user_id=user.id, track=track.value)
        if track.value in await self._ledger.owned(user.id):
            raise PaymentError("Track already purchased", "TRACK_ALREADY_PURCHASED", context)

        intent = await self._gateway.create_payment_intent(
            amount=self._price_cents,
            currency=self._currency,
            metadata={"user_id": user.id, "track_name": track.value},
            description=f"Stoic AF Journal - {track.value} Track (30-day program)",
        )
        if not intent.client_secret:
            raise PaymentProcessorError("intent created without client secret", "invalid_response", context)

        logger.info(
            "Payment intent created",
            extra={"user_id": user.id, "track": track.value, "payment_id": intent.id},
        )
        return intent.client_secret

    async def confirm_payment_intent(
        self, user: AuthUser, payment_intent_id: str, track: Track,
    ) -> dict:
        """Verify a succeeded payment intent and credit its track."""
        context = ErrorContext(user_id=user.id, track=track.value, payment_id=payment_intent_id)
        if not payment_intent_id:
            raise ValidationError("Payment intent ID required", "paymentIntentId", context)

        intent = await self._verify(
            self._gateway.retrieve_payment_intent(payment_intent_id), context,
        )
        error = validate_payment_intent(intent, user.id, track)
        if error:
            raise PaymentError(error["message"], error["error_code"], context)

        purchases, added = await self._credit(user.id, intent.id, [track], "payment_intent")
        return _purchase_result(track, purchases, added)

    async def process_direct_purchase(
        self, user: AuthUser, session_id: str, track: Track,
    ) -> dict:
        """Verify a paid single-track checkout session from the redirect URL."""
        context = ErrorContext(user_id=user.id, track=track.value, payment_id=session_id)
        if not session_id:
            raise ValidationError("Session ID required", "sessionId", context)

        session = await self._verify(
            self._gateway.retrieve_checkout_session(session_id), context,
        )
        error = validate_checkout_session(session, user.id, track)
        if error:
            raise PaymentError(error["message"], error["error_code"], context)

        purchases, added = await self._credit(user.id, session.id, [track], "checkout_session")
        return _purchase_result(track, purchases, added)

    async def process_bundle_purchase(self, user: AuthUser, session_id: str) -> dict:
        """Verify a paid bundle checkout session and credit every track."""
        context = ErrorContext(user_id=user.id, payment_id=session_id)
        if not session_id:
            raise ValidationError("Session ID required", "sessionId", context)

        session = await self._verify(
            self._gateway.retrieve_checkout_session(session_id), context,
        )
        error = validate_bundle_session(session, user.id)
        if error:
            raise PaymentError(error["message"], error["error_code"], context)

        purchases, added = await self._credit(
            user.id, session.id, entitled_tracks(session.metadata), "bundle_checkout",
        )
        return {
            "success": True,
            "message": f"Bundle purchase processed: {len(added)} track(s) added",
            "added_tracks": added,
            "purchases": purchases,
        }

    async def handle_webhook(self, payload: bytes, signature: str) -> dict:
        """Credit entitlement from a signed processor event."""
        event = self._gateway.construct_webhook_event(payload, signature)
        log_extra = {"event_type": event.type, "payment_id": event.object_id}

        user_id, tracks = _webhook_entitlement(event)
        if user_id is None:
            logger.info("Webhook event ignored", extra=log_extra)
            return {"received": True, "handled": False}
        if not tracks:
            logger.warning("Webhook event carries no track metadata", extra=log_extra)
            return {"received": True, "handled": False}

        if await self._store.get(receipt_key(event.object_id)) is not None:
            logger.info("Webhook event already processed", extra=log_extra)
            return {"received": True, "handled": True, "already_processed": True}

        _, added = await self._credit(user_id, event.object_id, tracks, f"webhook:{event.type}")
        return {"received": True, "handled": True, "added_tracks": added}

    async def _verify(self, retrieval, context: ErrorContext):
        try:
            return await retrieval
        except PaymentProcessorError as e:
            if e.api_error_type in _VERIFICATION_ERROR_TYPES:
                logger.warning(
                    f"Processor lookup rejected: {e.message}",
                    extra={"payment_id": context.payment_id, "user_id": context.user_id},
                )
                raise PaymentError(
                    "Payment verification failed", "PAYMENT_VERIFICATION_FAILED", context,
                ) from e
            raise

    async def _credit(
        self, user_id: str, processor_id: str, tracks: list[Track], source: str,
    ) -> tuple[list[str], list[str]]:
        purchases, added = await self._ledger.credit(user_id, tracks)
        if await self._store.get(receipt_key(processor_id)) is None:
            await self._store.set(receipt_key(processor_id), {
                "user_id": user_id,
                "tracks": [t.value for t in tracks],
                "source": source,
                "processed_at": utc_now_iso(),
            })
        logger.info(
            "Payment reconciled",
            extra={"user_id": user_id, "payment_id": processor_id, "added_tracks": added},
        )
        return purchases, added


def _purchase_result(track: Track, purchases: list[str], added: list[str]) -> dict:
    if added:
        return {
            "success": True,
            "message": f"Successfully purchased {track.value} track",
            "purchases": purchases,
            "track": track.value,
        }
    return {
        "success": True,
        "message": f"{track.value} track already owned",
        "purchases": purchases,
        "track": track.value,
    }


def _webhook_entitlement(event: WebhookEvent) -> tuple[str | None, list[Track]]:
    """(user_id, tracks) a webhook event pays for, or (None, []) if it pays for nothing."""
    if event.type == WebhookEventType.PAYMENT_INTENT_SUCCEEDED.value:
        if event.status not in (None, PaymentIntentStatus.SUCCEEDED.value):
            return None, []
        user_id = event.metadata.get("user_id")
    elif event.type == WebhookEventType.CHECKOUT_SESSION_COMPLETED.value:
        session = CheckoutSessionRecord(
            id=event.object_id,
            payment_status=event.status or "",
            metadata=event.metadata,
            client_reference_id=event.client_reference_id,
        )
        if session.payment_status != CheckoutPaymentStatus.PAID.value:
            return None, []
        user_id = session_owner(session)
    else:
        return None, []
    if not user_id:
        return None, []
    return user_id, entitled_tracks(event.metadata)
