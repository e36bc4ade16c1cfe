"""
Keyed storage for user tokens saved by the auth callback.

``TokenStore`` is the contract; the expiry policy lives in ``get`` so every
backend applies the same skew. ``InMemoryTokenStore`` keeps tokens in process
memory only and is a placeholder until a secret store (Key Vault, Redis) is
wired in: it is neither durable nor shared between instances.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

from .errors import ValidationError

logger = logging.getLogger(__name__)

EXPIRY_SKEW = timedelta(minutes=5)


def parse_expires_on(value: Union[str, int, float, datetime, None]) -> datetime:
    """
    Parse an expiry given as ISO-8601 text, epoch seconds or a datetime.

    Naive values are taken as UTC.

    Raises:
        ValidationError: If the value is missing or unparseable
    """
    if value is None or value == "":
        raise ValidationError("expiresOn is required")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            parsed = datetime.fromtimestamp(int(text), tz=timezone.utc)
        else:
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                raise ValidationError(f"expiresOn is not a valid date: {value}")
    else:
        raise ValidationError(f"expiresOn is not a valid date: {value}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class CachedToken:
    access_token: str
    expires_on: datetime
    refresh_token: Optional[str] = None
    scopes: List[str] = field(default_factory=list)
    saved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CachedToken":
        """Build a record from the auth callback body."""
        access_token = payload.get("accessToken")
        if not access_token:
            raise ValidationError("accessToken is required in the body")

        scopes = payload.get("scopes") or []
        if isinstance(scopes, str):
            scopes = scopes.split()

        return cls(
            access_token=access_token,
            refresh_token=payload.get("refreshToken"),
            expires_on=parse_expires_on(payload.get("expiresOn")),
            scopes=list(scopes),
        )

    def expires_within(self, window: timedelta, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expires_on - now < window


class TokenStore(ABC):
    """
    Per-user token storage.

    ``get`` returns the stored access token, or None when the entry is absent
    or expires within ``EXPIRY_SKEW``; an entry inside the skew is evicted.
    """

    @abstractmethod
    def _read(self, user_id: str) -> Optional[CachedToken]:
        ...

    @abstractmethod
    def put(self, user_id: str, record: CachedToken) -> None:
        ...

    @abstractmethod
    def evict(self, user_id: str) -> None:
        ...

    def get(self, user_id: str, now: Optional[datetime] = None) -> Optional[str]:
        record = self._read(user_id)
        if record is None:
            return None

        if record.expires_within(EXPIRY_SKEW, now):
            logger.info(f"Token expired for user: {user_id}")
            self.evict(user_id)
            return None

        return record.access_token


class InMemoryTokenStore(TokenStore):
    """Process-local store. Unsynchronized, lost on restart."""

    def __init__(self):
        self._tokens: Dict[str, CachedToken] = {}

    def _read(self, user_id: str) -> Optional[CachedToken]:
        return self._tokens.get(user_id)

    def put(self, user_id: str, record: CachedToken) -> None:
        self._tokens[user_id] = record
        logger.info(f"Token saved for user: {user_id}")

    def evict(self, user_id: str) -> None:
        self._tokens.pop(user_id, None)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


_token_store: Optional[TokenStore] = None


def get_token_store() -> TokenStore:
    """Get the process-wide token store."""
    global _token_store
    if _token_store is None:
        _token_store = InMemoryTokenStore()
    return _token_store


def set_token_store(store: Optional[TokenStore]) -> None:
    """Replace the process-wide token store (None resets to a fresh in-memory one)."""
    global _token_store
    _token_store = store
