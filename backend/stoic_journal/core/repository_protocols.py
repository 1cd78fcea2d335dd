"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from infrastructure: dependency arrows point inward only
    - Every external collaborator (store, identity provider, payment processor)
      is reached through a Protocol defined here
    - Processor objects cross the boundary as plain frozen records, never SDK types

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do IO; core functions that consume the
      records stay synchronous and pure
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class AuthUser:
    """Identity-provider user as seen by this service."""
    id: str
    email: str | None = None
    name: str | None = None
    created_at: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class PaymentIntentRecord:
    """Processor payment intent, reduced to the fields reconciliation reads."""
    id: str
    status: str
    amount: int
    currency: str
    metadata: dict[str, str] = field(default_factory=dict)
    client_secret: str | None = None


@dataclass(frozen=True)
class CheckoutSessionRecord:
    """Processor hosted-checkout session."""
    id: str
    payment_status: str
    metadata: dict[str, str] = field(default_factory=dict)
    client_reference_id: str | None = None


@dataclass(frozen=True)
class WebhookEvent:
    """Signature-verified processor event."""
    id: str
    type: str
    object_id: str
    object_type: str
    metadata: dict[str, str] = field(default_factory=dict)
    status: str | None = None
    client_reference_id: str | None = None


# ─── Protocols ───────────────────────────────────────────────────

class KeyValueStore(Protocol):
    """Contract for the generic JSON key-value store: implemented by shell."""
    async def get(self, key: str) -> Any | None: ...
    async def set(self, key: str, value: Any) -> None: ...
    async def delete(self, key: str) -> None: ...


class IdentityProvider(Protocol):
    """Contract for the external identity provider: implemented by shell."""
    async def get_user(self, access_token: str) -> AuthUser: ...
    async def create_user(
        self, email: str, password: str, full_name: str,
    ) -> AuthUser: ...


class PaymentGateway(Protocol):
    """Contract for the external payment processor: implemented by shell."""
    async def create_payment_intent(
        self,
        *,
        amount: int,
        currency: str,
        metadata: dict[str, str],
        description: str,
    ) -> PaymentIntentRecord: ...
    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentRecord: ...
    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionRecord: ...
    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent: ...
