"""Payment Reconciliation Rules: decide whether a processor object earns entitlement.

Invariants:
    - validate_* functions are PURE: return an error descriptor or None
    - A payment intent credits only when status == "succeeded" AND metadata
      user_id/track_name equal the requesting user and track
    - A checkout session credits only when payment_status == "paid" AND its
      owner (metadata user_id, else client_reference_id) is the requesting user
    - credit_tracks() never duplicates and never removes a purchase

Design Decisions:
    - Bundle sessions are recognised by metadata bundle == "true" and grant
      every track; the webhook and the redirect path share entitled_tracks()
"""

from stoic_journal.core.domain_types import (
    Track, PaymentIntentStatus, CheckoutPaymentStatus,
)
from stoic_journal.core.repository_protocols import (
    PaymentIntentRecord, CheckoutSessionRecord,
)

BUNDLE_FLAG = "true"


def validate_payment_intent(
    intent: PaymentIntentRecord, user_id: str, track: Track,
) -> dict | None:
    """Rule: succeeded + metadata matches requester. Pure."""
    if intent.status != PaymentIntentStatus.SUCCEEDED.value:
        return {
            "status": "error",
            "error_code": "PAYMENT_NOT_COMPLETED",
            "message": "Payment not completed",
        }
    if (
        intent.metadata.get("user_id") != user_id
        or intent.metadata.get("track_name") != track.value
    ):
        return {
            "status": "error",
            "error_code": "PAYMENT_METADATA_MISMATCH",
            "message": "Payment intent metadata mismatch",
        }
    return None


def session_owner(session: CheckoutSessionRecord) -> str | None:
    return session.metadata.get("user_id") or session.client_reference_id


def is_bundle(metadata: dict[str, str]) -> bool:
    return str(metadata.get("bundle", "")).lower() == BUNDLE_FLAG


def validate_checkout_session(
    session: CheckoutSessionRecord, user_id: str, track: Track,
) -> dict | None:
    """Rule: paid + owned by requester + for this track. Pure."""
    error = _validate_paid_and_owned(session, user_id)
    if error:
        return error
    if session.metadata.get("track_name") != track.value:
        return {
            "status": "error",
            "error_code": "PAYMENT_METADATA_MISMATCH",
            "message": "Checkout session metadata mismatch",
        }
    return None


def validate_bundle_session(
    session: CheckoutSessionRecord, user_id: str,
) -> dict | None:
    """Rule: paid + owned by requester + flagged as bundle. Pure."""
    error = _validate_paid_and_owned(session, user_id)
    if error:
        return error
    if not is_bundle(session.metadata):
        return {
            "status": "error",
            "error_code": "NOT_A_BUNDLE",
            "message": "Checkout session is not a bundle purchase",
        }
    return None


def entitled_tracks(metadata: dict[str, str]) -> list[Track]:
    """Tracks a verified processor object pays for, from its metadata."""
    if is_bundle(metadata):
        return list(Track)
    track = Track.parse(metadata.get("track_name"))
    return [track] if track else []


def credit_tracks(
    purchases: list[str], tracks: list[Track],
) -> tuple[list[str], list[str]]:
    """Return (new purchase list, names actually added). Idempotent."""
    updated = list(purchases)
    added: list[str] = []
    for track in tracks:
        if track.value not in updated:
            updated.append(track.value)
            added.append(track.value)
    return updated, added


def _validate_paid_and_owned(
    session: CheckoutSessionRecord, user_id: str,
) -> dict | None:
    if session.payment_status != CheckoutPaymentStatus.PAID.value:
        return {
            "status": "error",
            "error_code": "PAYMENT_NOT_COMPLETED",
            "message": "Payment not completed",
        }
    if session_owner(session) != user_id:
        return {
            "status": "error",
            "error_code": "PAYMENT_METADATA_MISMATCH",
            "message": "Checkout session belongs to another user",
        }
    return None
