"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - Track is the single source of truth for the four purchasable programs
    - Track.value is the display name used in purchases, profiles and journal keys
    - Track.prompt_id is the upper-case identifier used for prompt content
    - TRACK_LENGTH_DAYS (30) bounds every day number

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - NewType for ids: zero runtime cost, full type-checker support
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
PaymentId = NewType("PaymentId", str)


# ─── Constants ───────────────────────────────────────────────────

TRACK_LENGTH_DAYS: int = 30


# ─── Enums ───────────────────────────────────────────────────────

class Track(str, Enum):
    """Purchasable 30-day programs."""
    MONEY = "Money"
    RELATIONSHIPS = "Relationships"
    DISCIPLINE = "Discipline"
    EGO = "Ego"

    @property
    def prompt_id(self) -> str:
        return self.value.upper()

    @classmethod
    def parse(cls, value: object) -> "Track | None":
        """Exact display-name match. Returns None for anything else."""
        if not isinstance(value, str):
            return None
        for track in cls:
            if track.value == value:
                return track
        return None

    @classmethod
    def from_prompt_id(cls, value: object) -> "Track | None":
        """Case-insensitive match against the upper-case prompt identifier."""
        if not isinstance(value, str):
            return None
        upper = value.upper()
        for track in cls:
            if track.prompt_id == upper:
                return track
        return None


class PaymentIntentStatus(str, Enum):
    """Processor payment intent states this service reacts to."""
    SUCCEEDED = "succeeded"
    PROCESSING = "processing"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    CANCELED = "canceled"


class CheckoutPaymentStatus(str, Enum):
    """Processor checkout session payment states."""
    PAID = "paid"
    UNPAID = "unpaid"
    NO_PAYMENT_REQUIRED = "no_payment_required"


class WebhookEventType(str, Enum):
    """Processor webhook events that credit entitlement."""
    PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
