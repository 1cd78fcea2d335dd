"""Payment Schemas: intent creation and the three confirmation paths."""

from pydantic import BaseModel, ConfigDict, Field

from stoic_journal.schemas.journal import TrackRequest


class ProcessPaymentIntentRequest(TrackRequest):
    payment_intent_id: str | None = Field(None, alias="paymentIntentId")


class DirectPurchaseRequest(TrackRequest):
    session_id: str | None = Field(None, alias="sessionId")


class BundlePurchaseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(None, alias="sessionId")
