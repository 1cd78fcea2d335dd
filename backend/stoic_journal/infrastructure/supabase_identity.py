"""Supabase Identity Provider: IdentityProvider over the Supabase Auth (GoTrue) REST API.

Invariants:
    - Token verification uses the anon key; user creation uses the service-role key
    - 401/403 from token verification -> AuthenticationError (never 5xx)
    - Duplicate email on signup -> EmailAlreadyRegisteredError
    - Network failures and unexpected statuses -> IdentityProviderError
    - Access tokens are never logged

Design Decisions:
    - Plain httpx against the REST API instead of a full SDK: two endpoints used
    - One AsyncClient per provider, closed by the lifespan
"""

import logging

import httpx

from stoic_journal.core.errors import (
    AuthenticationError,
    EmailAlreadyRegisteredError,
    IdentityProviderError,
    ValidationError,
)
from stoic_journal.core.repository_protocols import AuthUser

logger = logging.getLogger(__name__)


def _auth_user(payload: dict) -> AuthUser:
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=payload["id"],
        email=payload.get("email"),
        name=metadata.get("name"),
        created_at=payload.get("created_at"),
    )


def _error_message(response: httpx.Response) -> tuple[str, str]:
    """Return (error_code, message) from a GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return "", response.text
    if not isinstance(body, dict):
        return "", str(body)
    message = (
        body.get("msg") or body.get("message")
        or body.get("error_description") or body.get("error") or ""
    )
    return str(body.get("error_code") or body.get("code") or ""), str(message)


class SupabaseIdentityProvider:
    """Verifies access tokens and creates users through Supabase Auth."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        service_role_key: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._anon_key = anon_key
        self._service_role_key = service_role_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/auth/v1",
            timeout=timeout_seconds,
            transport=transport,
        )

    async def get_user(self, access_token: str) -> AuthUser:
        try:
            response = await self._client.get(
                "/user",
                headers={
                    "apikey": self._anon_key,
                    "Authorization": f"Bearer {access_token}",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise IdentityProviderError("token verification unavailable") from e

        if response.status_code in (401, 403):
            raise AuthenticationError("Unauthorized")
        if response.status_code != 200:
            _, message = _error_message(response)
            logger.error(
                f"Unexpected identity response {response.status_code}: {message}",
            )
            raise IdentityProviderError("token verification failed")

        payload = response.json()
        if not payload or not payload.get("id"):
            raise AuthenticationError("Unauthorized")
        return _auth_user(payload)

    async def create_user(
        self, email: str, password: str, full_name: str,
    ) -> AuthUser:
        try:
            response = await self._client.post(
                "/admin/users",
                headers={
                    "apikey": self._service_role_key,
                    "Authorization": f"Bearer {self._service_role_key}",
                },
                json={
                    "email": email,
                    "password": password,
                    "user_metadata": {"name": full_name},
                    # No email server configured: accounts are confirmed on creation
                    "email_confirm": True,
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable during signup: {e}")
            raise IdentityProviderError("signup unavailable") from e

        if response.status_code in (200, 201):
            return _auth_user(response.json())

        code, message = _error_message(response)
        if (
            code == "email_exists"
            or "already been registered" in message
            or "User already registered" in message
        ):
            raise EmailAlreadyRegisteredError()
        if "Invalid email" in message or code == "email_address_invalid":
            raise ValidationError("Please enter a valid email address", "email")
        if "Password" in message or code == "weak_password":
            raise ValidationError(
                "Password does not meet security requirements", "password",
            )
        logger.error(f"Unexpected signup failure {response.status_code}: {message}")
        raise IdentityProviderError(f"signup failed ({response.status_code})")

    async def aclose(self) -> None:
        await self._client.aclose()
