"""Request Dependencies: context, authenticated user, admin gate, track parsing.

Invariants:
    - Every authenticated route resolves the user through the identity provider
    - Authorization header must be "Bearer <token>"; anything else is 401
    - Admin routes compare X-Admin-Token in constant time; unset token disables them
"""

import secrets

from fastapi import Depends, Header, Request

from stoic_journal.core.domain_types import Track
from stoic_journal.core.errors import (
    AdminAuthorizationError, AuthenticationError, InvalidTrackError,
)
from stoic_journal.core.repository_protocols import AuthUser
from stoic_journal.services.app_context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_current_user(
    authorization: str | None = Header(None),
    context: AppContext = Depends(get_context),
) -> AuthUser:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("Invalid authorization header")
    return await context.identity.get_user(token)


def require_admin(
    x_admin_token: str | None = Header(None),
    context: AppContext = Depends(get_context),
) -> None:
    expected = context.settings.admin_token
    if not expected or not x_admin_token or not secrets.compare_digest(
        x_admin_token, expected,
    ):
        raise AdminAuthorizationError()


def parse_track(track_name: object) -> Track:
    """Resolve a display name ("Money") or raise INVALID_TRACK."""
    track = Track.parse(track_name)
    if track is None:
        raise InvalidTrackError(track_name)
    return track
