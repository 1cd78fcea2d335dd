"""Auth Routes: account creation through the identity provider.

Invariants:
    - Signup needs no bearer token
    - A user created upstream always gets a profile and an empty purchase ledger;
      if that write fails the response is 500 PROFILE_SETUP_FAILED
"""

import logging

from fastapi import APIRouter, Depends

from stoic_journal.api.dependencies import get_context
from stoic_journal.core.errors import (
    DatabaseError, ErrorCategory, ErrorSeverity, StoicJournalError,
)
from stoic_journal.schemas.auth import SignupRequest
from stoic_journal.services.app_context import AppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/signup")
async def signup(
    body: SignupRequest, context: AppContext = Depends(get_context),
):
    """Create the identity-provider user, then seed profile and purchases."""
    user = await context.identity.create_user(
        body.email, body.password, body.full_name,
    )
    try:
        await context.profiles.create_initial(user.id)
    except DatabaseError as e:
        logger.error(
            f"Profile setup failed after signup: {e.message}",
            extra={"user_id": user.id},
        )
        raise StoicJournalError(
            "User created but profile setup failed",
            "PROFILE_SETUP_FAILED",
            ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL,
            http_status=500,
        )
    logger.info("Signup completed", extra={"user_id": user.id})
    return {"success": True, "user": user.to_dict()}
