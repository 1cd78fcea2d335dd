"""Purchase Routes: the caller's owned tracks."""

from fastapi import APIRouter, Depends

from stoic_journal.api.dependencies import get_context, get_current_user
from stoic_journal.core.repository_protocols import AuthUser
from stoic_journal.services.app_context import AppContext

router = APIRouter(prefix="/api/v1/purchases", tags=["purchases"])


@router.get("")
async def list_purchases(
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    purchases = await context.ledger.list_for_display(user.id)
    return {"success": True, "purchases": purchases}
