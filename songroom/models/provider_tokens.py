from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional


@dataclass
class ProviderTokens:
    """A user's linked provider account as held by the token store."""

    # Provider-side account id (Spotify user id)
    provider_id: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None  # epoch seconds

    def is_connected(self) -> bool:
        """Both the provider identity and an access token are present."""
        return bool(self.provider_id and self.access_token)

    def is_expired(self, buffer_seconds: int = 300, now: Optional[float] = None) -> bool:
        """Check if token is expired or expires within ``buffer_seconds``.

        An unknown expiry counts as expired.
        """
        if self.expires_at is None:
            return True
        current = time.time() if now is None else now
        return self.expires_at - current < buffer_seconds

    def time_until_expiry(self, now: Optional[float] = None) -> int:
        """Get seconds until token expires (negative if already expired)."""
        if self.expires_at is None:
            return 0
        current = time.time() if now is None else now
        return int(self.expires_at - current)


@dataclass
class RefreshedToken:
    """Result of a successful refresh."""

    access_token: str
    expires_at: int
