"""Development Routes: entitlement bypass for manual testing.

Invariants:
    - Router is only registered when settings.enable_dev_routes is true
    - Granting is idempotent, like every other credit path
"""

import logging

from fastapi import APIRouter, Depends

from stoic_journal.api.dependencies import get_context, get_current_user, parse_track
from stoic_journal.core.repository_protocols import AuthUser
from stoic_journal.schemas.journal import TrackRequest
from stoic_journal.services.app_context import AppContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/dev", tags=["dev"])


@router.post("/grant-track")
async def grant_track(
    body: TrackRequest,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    track = parse_track(body.track_name)
    purchases, added = await context.ledger.credit(user.id, [track])
    if not added:
        return {"success": True, "message": "Track already owned", "purchases": purchases}
    logger.warning(
        "Track granted without payment", extra={"user_id": user.id, "track": track.value},
    )
    return {
        "success": True,
        "message": f"Successfully granted {track.value} track for development",
        "purchases": purchases,
        "track": track.value,
    }
