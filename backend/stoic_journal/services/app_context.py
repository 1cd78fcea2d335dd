"""Application Context: the explicit bundle of collaborators request handlers use.

Invariants:
    - Built once per app (lifespan or test fixture), stored on app.state.context
    - Handlers reach collaborators only through this object, never module globals
    - One UserLockRegistry shared by every service that mutates user records
"""

from dataclasses import dataclass, field

from stoic_journal.config import Settings
from stoic_journal.core.repository_protocols import (
    IdentityProvider, KeyValueStore, PaymentGateway,
)
from stoic_journal.core.user_locks import UserLockRegistry
from stoic_journal.infrastructure.database import DatabaseSessionManager
from stoic_journal.services.journal_service import JournalService
from stoic_journal.services.payment_reconciliation import PaymentReconciler
from stoic_journal.services.profile_service import ProfileService
from stoic_journal.services.prompt_library import PromptLibrary
from stoic_journal.services.purchase_ledger import PurchaseLedger


@dataclass
class AppContext:
    settings: Settings
    store: KeyValueStore
    identity: IdentityProvider
    payments: PaymentGateway
    db_manager: DatabaseSessionManager | None = None
    locks: UserLockRegistry = field(default_factory=UserLockRegistry)

    def __post_init__(self) -> None:
        self.ledger = PurchaseLedger(self.store, self.locks)
        self.profiles = ProfileService(self.store, self.ledger, self.locks)
        self.journal = JournalService(self.store, self.locks)
        self.prompts = PromptLibrary(self.store)
        self.reconciler = PaymentReconciler(
            self.payments,
            self.ledger,
            self.store,
            price_cents=self.settings.track_price_cents,
            currency=self.settings.track_currency,
        )
