"""Single-use, time-limited download tokens for paid editing deliverables.

Tokens live in process memory only. They are bound to the storage keys that
existed when the token was minted and are removed on first successful
redemption. Unknown, used and expired tokens are indistinguishable to the
caller.
"""

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from domain.errors import InvalidTokenError, NotFoundError

from .models import parse_deliverable

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 3600


@dataclass
class DownloadToken:
    token: str
    email: str
    files: Dict[str, Optional[str]]
    expires_at: datetime


class DownloadTokenStore:
    """In-memory token registry.

    Args:
        clock: Returns the current (timezone-aware) time
        ttl_seconds: Token lifetime
    """

    def __init__(self, clock, ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS):
        self.clock = clock
        self.ttl = timedelta(seconds=ttl_seconds)
        self._tokens: Dict[str, DownloadToken] = {}
        self._lock = threading.Lock()

    def issue(self, email: str, files: Dict[str, Optional[str]]) -> DownloadToken:
        token = DownloadToken(
            token=secrets.token_hex(32),
            email=email,
            files=dict(files),
            expires_at=self.clock() + self.ttl,
        )
        with self._lock:
            self._tokens[token.token] = token
        return token

    def redeem(self, token: str, kind: str) -> str:
        """Consume the token and return the storage key for kind.

        Raises:
            InvalidTokenError: Token unknown, already used or expired
            NotFoundError: No file of this kind bound to the token (the
                token is discarded as well)
        """
        now = self.clock()
        with self._lock:
            entry = self._tokens.get(token)
            if entry is None or now >= entry.expires_at:
                self._tokens.pop(token, None)
                raise InvalidTokenError("Invalid or expired token")

            try:
                storage_key = entry.files.get(parse_deliverable(kind).value)
            except ValueError:
                storage_key = None
            del self._tokens[token]

        if not storage_key:
            raise NotFoundError("File not found")
        return storage_key

    def sweep(self) -> int:
        """Remove expired tokens. Returns number removed."""
        now = self.clock()
        with self._lock:
            expired = [t for t, entry in self._tokens.items() if now >= entry.expires_at]
            for t in expired:
                del self._tokens[t]
        if expired:
            logger.info(f"Swept {len(expired)} expired download tokens")
        return len(expired)

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: str) -> bool:
        return token in self._tokens
