"""Stoic Journal API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map StoicJournalError to structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Collaborators built in the lifespan into one AppContext on app.state;
      a prebuilt context (tests, scripts) is used as-is
    - /api/v1/dev routes exist only when settings.enable_dev_routes is true
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stoic_journal.api.error_handlers import register_error_handlers
from stoic_journal.api.routes import (
    auth, dev, health, journal, payments, profile, prompts, purchases,
)
from stoic_journal.config import Settings, get_settings
from stoic_journal.infrastructure.database import init_db
from stoic_journal.infrastructure.kv_store import SqlKeyValueStore
from stoic_journal.infrastructure.observability import setup_logging
from stoic_journal.infrastructure.stripe_gateway import ResilientStripeGateway
from stoic_journal.infrastructure.supabase_identity import SupabaseIdentityProvider
from stoic_journal.services.app_context import AppContext

logger = logging.getLogger(__name__)


def build_context(settings: Settings) -> AppContext:
    """Wire production collaborators from settings."""
    db_manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    return AppContext(
        settings=settings,
        store=SqlKeyValueStore(db_manager),
        identity=SupabaseIdentityProvider(
            settings.supabase_url,
            settings.supabase_anon_key,
            settings.supabase_service_role_key,
            timeout_seconds=settings.identity_timeout_seconds,
        ),
        payments=ResilientStripeGateway(
            settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            max_retries=settings.stripe_max_retries,
            base_delay_ms=settings.stripe_base_delay_ms,
            max_delay_ms=settings.stripe_max_delay_ms,
        ),
        db_manager=db_manager,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    owns_context = getattr(app.state, "context", None) is None
    if owns_context:
        app.state.context = build_context(settings)
    logger.info("Stoic Journal API started")
    yield
    logger.info("Stoic Journal API shutting down")
    if owns_context:
        context: AppContext = app.state.context
        await context.identity.aclose()
        if context.db_manager:
            await context.db_manager.dispose()


def create_app(
    settings: Settings | None = None, context: AppContext | None = None,
) -> FastAPI:
    settings = settings or (context.settings if context else get_settings())
    app = FastAPI(title="Stoic Journal API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Admin-Token"],
        max_age=600,
    )

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(purchases.router)
    app.include_router(payments.router)
    app.include_router(payments.config_router)
    app.include_router(journal.router)
    app.include_router(prompts.router)
    app.include_router(prompts.admin_router)
    if settings.enable_dev_routes:
        app.include_router(dev.router)

    register_error_handlers(app)
    return app


app = create_app()
