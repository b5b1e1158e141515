"""
Authentication-related domain models.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Self


@dataclass(frozen=True, kw_only=True)
class Token:
    """
    Access token and its absolute expiry.

    Attributes:
        access_token: Bearer credential for authenticated requests.
        expires_at: Unix timestamp after which the token must be refreshed.
        refresh_token: Refresh credential returned with this token, if rotated.
    """

    access_token: str = field(repr=False)
    expires_at: float
    refresh_token: str | None = field(default=None, repr=False)

    @classmethod
    def from_response(cls, data: dict[str, Any], *, now: float | None = None) -> Self:
        """
        Build a token from a refresh response.

        Args:
            data: Response body with ``access_token`` and ``expires_in``.
            now: Current Unix time, defaults to ``time.time()``.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If ``expires_in`` is not an integer.
            TypeError: If ``expires_in`` is null.
        """
        now = time.time() if now is None else now
        return cls(
            access_token=data["access_token"],
            expires_at=now + int(data["expires_in"]),
            refresh_token=data.get("refresh_token") or None,
        )

    def is_expired(self, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return now >= self.expires_at


EXPIRED_TOKEN = Token(access_token="", expires_at=0)
