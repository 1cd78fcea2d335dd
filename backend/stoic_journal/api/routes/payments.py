"""Payment Routes: intent creation, three confirmation paths, webhook, public config.

Invariants:
    - Every confirmation path verifies with the processor before crediting
    - Confirmation routes are idempotent: a repeated call reports the track as
      already owned instead of crediting twice
    - The webhook route needs no bearer token; the processor signature is the
      only credential it accepts
"""

import logging

from fastapi import APIRouter, Depends, Header, Request

from stoic_journal.api.dependencies import get_context, get_current_user, parse_track
from stoic_journal.core.errors import ConfigurationError
from stoic_journal.core.repository_protocols import AuthUser
from stoic_journal.schemas.journal import TrackRequest
from stoic_journal.schemas.payments import (
    BundlePurchaseRequest, DirectPurchaseRequest, ProcessPaymentIntentRequest,
)
from stoic_journal.services.app_context import AppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["payments"])
config_router = APIRouter(prefix="/api/v1/stripe", tags=["payments"])


@config_router.get("/config")
async def stripe_config(context: AppContext = Depends(get_context)):
    """Publishable key for the browser payment form."""
    publishable_key = context.settings.stripe_publishable_key
    if not publishable_key:
        raise ConfigurationError("Stripe not configured")
    return {"publishableKey": publishable_key}


@router.post("/create-intent")
async def create_intent(
    body: TrackRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(body.track_name)
    client_secret = await context.reconciler.create_intent(user, track)
    return {"success": True, "client_secret": client_secret}


@router.post("/process-payment-intent")
async def process_payment_intent(
    body: ProcessPaymentIntentRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(body.track_name)
    return await context.reconciler.confirm_payment_intent(
        user, body.payment_intent_id or "", track,
    )


@router.post("/direct-purchase")
async def direct_purchase(
    body: DirectPurchaseRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(body.track_name)
    return await context.reconciler.process_direct_purchase(
        user, body.session_id or "", track,
    )


@router.post("/process-bundle-purchase")
async def process_bundle_purchase(
    body: BundlePurchaseRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    return await context.reconciler.process_bundle_purchase(
        user, body.session_id or "",
    )


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    stripe_signature: str = Header("", alias="Stripe-Signature"),
    context: AppContext = Depends(get_context),
):
    """Processor-driven crediting; source of truth when the redirect loses the id."""
    payload = await request.body()
    return await context.reconciler.handle_webhook(payload, stripe_signature)
