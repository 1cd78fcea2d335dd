"""Test doubles for the external collaborators.

FakeIdentityProvider, FakePaymentGateway and InMemoryStore satisfy the
protocols in core/repository_protocols.py structurally (no inheritance).
"""

import asyncio
import copy

from stoic_journal.core.errors import (
    AuthenticationError,
    DatabaseError,
    EmailAlreadyRegisteredError,
    PaymentError,
    PaymentProcessorError,
)
from stoic_journal.core.repository_protocols import (
    AuthUser, CheckoutSessionRecord, PaymentIntentRecord, WebhookEvent,
)

ALICE = AuthUser(id="user-alice", email="alice@example.com", name="Alice")
BOB = AuthUser(id="user-bob", email="bob@example.com", name="Bob")
ALICE_HEADERS = {"Authorization": "Bearer token-alice"}
BOB_HEADERS = {"Authorization": "Bearer token-bob"}
VALID_SIGNATURE = "t=1,v1=valid"
ADMIN_TOKEN = "admin-secret"


class FakeIdentityProvider:

    def __init__(self):
        self.tokens = {"token-alice": ALICE, "token-bob": BOB}
        self.registered = {ALICE.email, BOB.email}
        self.created: list[AuthUser] = []

    async def get_user(self, access_token: str) -> AuthUser:
        user = self.tokens.get(access_token)
        if user is None:
            raise AuthenticationError("Unauthorized")
        return user

    async def create_user(self, email: str, password: str, full_name: str) -> AuthUser:
        if email in self.registered:
            raise EmailAlreadyRegisteredError()
        user = AuthUser(
            id=f"user-{len(self.created) + 1}", email=email, name=full_name,
            created_at="2026-01-01T00:00:00+00:00",
        )
        self.registered.add(email)
        self.created.append(user)
        return user


class FakePaymentGateway:
    """Processor objects are registered up front; lookups of unknown ids fail
    the way the real gateway maps "No such ..." responses."""

    def __init__(self):
        self.intents: dict[str, PaymentIntentRecord] = {}
        self.sessions: dict[str, CheckoutSessionRecord] = {}
        self.created_intents: list[dict] = []
        self.next_event: WebhookEvent | None = None
        self.outage = False

    def add_intent(self, intent_id: str, user_id: str, track: str, status: str = "succeeded"):
        self.intents[intent_id] = PaymentIntentRecord(
            id=intent_id, status=status, amount=400, currency="usd",
            metadata={"user_id": user_id, "track_name": track},
        )

    def add_session(
        self, session_id: str, metadata: dict, payment_status: str = "paid",
        client_reference_id: str | None = None,
    ):
        self.sessions[session_id] = CheckoutSessionRecord(
            id=session_id, payment_status=payment_status, metadata=metadata,
            client_reference_id=client_reference_id,
        )

    async def create_payment_intent(self, *, amount, currency, metadata, description):
        self._check_outage()
        intent_id = f"pi_{len(self.created_intents) + 1}"
        self.created_intents.append({
            "amount": amount, "currency": currency,
            "metadata": metadata, "description": description,
        })
        return PaymentIntentRecord(
            id=intent_id, status="requires_payment_method", amount=amount,
            currency=currency, metadata=metadata,
            client_secret=f"{intent_id}_secret_abc",
        )

    async def retrieve_payment_intent(self, payment_intent_id):
        self._check_outage()
        if payment_intent_id not in self.intents:
            raise PaymentProcessorError("No such payment_intent", "invalid_request")
        return self.intents[payment_intent_id]

    async def retrieve_checkout_session(self, session_id):
        self._check_outage()
        if session_id not in self.sessions:
            raise PaymentProcessorError("No such checkout.session", "invalid_request")
        return self.sessions[session_id]

    def construct_webhook_event(self, payload, signature):
        if signature != VALID_SIGNATURE or self.next_event is None:
            raise PaymentError(
                "Invalid webhook signature or payload", "INVALID_WEBHOOK_SIGNATURE",
            )
        return self.next_event

    def _check_outage(self):
        if self.outage:
            raise PaymentProcessorError("Transient failure after 2 retries", "connection_error")


class InMemoryStore:
    """Dict-backed KeyValueStore. Yields to the loop on every call so
    unsynchronized read-modify-write cycles interleave."""

    def __init__(self):
        self.data: dict = {}

    async def get(self, key):
        await asyncio.sleep(0)
        return copy.deepcopy(self.data.get(key))

    async def set(self, key, value):
        await asyncio.sleep(0)
        self.data[key] = copy.deepcopy(value)

    async def delete(self, key):
        self.data.pop(key, None)


class FailingStore:
    """Every call fails like an unreachable database."""

    async def get(self, key):
        raise DatabaseError("Connection or operational error", "execute")

    async def set(self, key, value):
        raise DatabaseError("Connection or operational error", "execute")

    async def delete(self, key):
        raise DatabaseError("Connection or operational error", "execute")
