"""Profile Routes: read (lazily created) and update the caller's profile."""

from fastapi import APIRouter, Depends

from stoic_journal.api.dependencies import get_context, get_current_user
from stoic_journal.core.repository_protocols import AuthUser
from stoic_journal.schemas.profile import ProfileUpdate
from stoic_journal.services.app_context import AppContext

router = APIRouter(prefix="/api/v1/user", tags=["profile"])


@router.get("/profile")
async def get_profile(
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    """Profile plus identity data. Degrades to a default profile on store failure."""
    read = await context.profiles.get_or_create(user.id)
    response = {"user": user.to_dict(), "profile": read.profile}
    if read.warning:
        response["warning"] = read.warning
    return response


@router.put("/profile")
async def update_profile(
    body: ProfileUpdate,
    user: AuthUser = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    profile = await context.profiles.update(user.id, body.onboarding_completed)
    return {"success": True, "profile": profile}
