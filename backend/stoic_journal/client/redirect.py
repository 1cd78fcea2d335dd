"""Payment Redirect: parse the query string the processor appends after checkout.

Invariants:
    - success/canceled/bundle are true only for the literal "true"
    - session_id falls back to a raw-URL scan when the query parser misses it
      (fragments and double-encoded redirects)
"""

import re
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

_SESSION_ID_PATTERN = re.compile(r"session_id=([^&\s#]+)")


@dataclass(frozen=True)
class PaymentRedirect:
    success: bool = False
    canceled: bool = False
    bundle: bool = False
    track: str | None = None
    session_id: str | None = None

    @classmethod
    def from_url(cls, url: str) -> "PaymentRedirect":
        params = parse_qs(urlsplit(url).query)

        def first(name: str) -> str | None:
            values = params.get(name)
            return values[0] if values else None

        session_id = first("session_id")
        if not session_id:
            match = _SESSION_ID_PATTERN.search(url)
            session_id = match.group(1) if match else None

        return cls(
            success=first("success") == "true",
            canceled=first("canceled") == "true",
            bundle=first("bundle") == "true",
            track=first("track") or None,
            session_id=session_id or None,
        )

    @property
    def is_payment_return(self) -> bool:
        return self.success or self.canceled
