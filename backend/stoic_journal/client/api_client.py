"""Stoic Journal API Client: async httpx wrapper for every endpoint.

Invariants:
    - Every call sends "Authorization: Bearer <access_token>"
    - Non-2xx responses raise ApiRequestError carrying status, code and message
    - Request bodies use the camelCase keys the server aliases
"""

import logging

import httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class ApiRequestError(Exception):
    """Server answered with an error envelope (or something unparseable)."""

    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message


class StoicJournalClient:
    """Authenticated client for one user session."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + API_PREFIX,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "StoicJournalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ─── Profile & purchases ─────────────────────────────────────

    async def get_profile(self) -> dict:
        return await self._request("GET", "/user/profile")

    async def update_profile(self, onboarding_completed: bool) -> dict:
        return await self._request(
            "PUT", "/user/profile",
            json={"onboarding_completed": onboarding_completed},
        )

    async def get_purchases(self) -> list[str]:
        result = await self._request("GET", "/purchases")
        return result.get("purchases") or []

    # ─── Payments ────────────────────────────────────────────────

    async def create_payment_intent(self, track_name: str) -> str:
        result = await self._request(
            "POST", "/payments/create-intent", json={"trackName": track_name},
        )
        return result["client_secret"]

    async def process_payment_intent(self, payment_intent_id: str, track_name: str) -> dict:
        return await self._request(
            "POST", "/payments/process-payment-intent",
            json={"paymentIntentId": payment_intent_id, "trackName": track_name},
        )

    async def process_direct_purchase(self, track_name: str, session_id: str) -> dict:
        return await self._request(
            "POST", "/payments/direct-purchase",
            json={"trackName": track_name, "sessionId": session_id},
        )

    async def process_bundle_purchase(self, session_id: str) -> dict:
        return await self._request(
            "POST", "/payments/process-bundle-purchase",
            json={"sessionId": session_id},
        )

    # ─── Journal ─────────────────────────────────────────────────

    async def start_track(self, track_name: str) -> dict:
        return await self._request(
            "POST", "/journal/start-track", json={"trackName": track_name},
        )

    async def list_entries(self, track_name: str) -> list[dict]:
        result = await self._request("GET", f"/journal/entries/{track_name}")
        return result.get("entries") or []

    async def save_entry(self, track_name: str, day: int, entry_text: str) -> dict:
        result = await self._request(
            "POST", "/journal/entry",
            json={"trackName": track_name, "day": day, "entryText": entry_text},
        )
        return result["entry"]

    async def complete_day(self, track_name: str, day: int) -> dict:
        return await self._request(
            "POST", "/journal/complete-day",
            json={"trackName": track_name, "day": day},
        )

    async def get_prompts(self, track_id: str) -> dict:
        return await self._request("GET", f"/prompts/{track_id.upper()}")

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        response = await self._client.request(method, path, **kwargs)
        if response.is_success:
            return response.json()
        code, message = "HTTP_ERROR", response.reason_phrase
        try:
            error = response.json().get("error") or {}
            code = error.get("code", code)
            message = error.get("message", message)
        except (ValueError, AttributeError):
            pass
        logger.warning(f"{method} {path} failed: {response.status_code} {code}")
        raise ApiRequestError(response.status_code, code, message)
