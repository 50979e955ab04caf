"""
================================================================================
Token Manager with Single-Flight Caching
================================================================================

Manages the Restful-Booker session token with:
    - One authentication call per cache fill, even under concurrent callers
    - Explicit refresh when a protected call reports an expired token
    - Optional cross-process sharing using filelock (pytest-xdist workers)

Restful-Booker tokens carry no expiry. Staleness is only visible as a 403
on a protected endpoint, after which callers invoke refresh().

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from filelock import FileLock
from loguru import logger

from .config_loader import ConfigLoader


AUTH_ENDPOINT = "/auth"

# Default shared cache location used when auth.shared_cache is enabled
TOKEN_CACHE_DIR = Path(__file__).parent.parent.parent.parent / ".token_cache"
TOKEN_CACHE_FILE = TOKEN_CACHE_DIR / "cache.json"


class AuthFailure(Exception):
    """Raised when the authentication call fails or returns no usable token."""
    pass


class TokenState(str, Enum):
    """Cache states."""
    EMPTY = "empty"
    CACHED = "cached"


class TokenManager:
    """
    Token cache for authorized booking calls.

    States:
        EMPTY  -> get_token() authenticates once and moves to CACHED
        CACHED -> get_token() returns the stored token, no network call

    refresh() always authenticates and overwrites the stored token.

    Usage:
        >>> token_manager = TokenManager(config)
        >>> token = token_manager.get_token()
        >>> token == token_manager.get_token()  # served from cache
        True
    """

    def __init__(
        self,
        config: ConfigLoader,
        transport: Optional[httpx.BaseTransport] = None,
        shared_cache: Optional[Path] = None,
    ) -> None:
        """
        Initialize token manager.

        Args:
            config: ConfigLoader instance for base URL and credentials
            transport: Optional httpx transport (in-process fake in tests)
            shared_cache: File shared between worker processes, or None
        """
        self.config = config
        self.transport = transport
        self.shared_cache = Path(shared_cache) if shared_cache else None
        self._token: Optional[str] = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: ConfigLoader,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "TokenManager":
        """Build a manager, enabling the shared cache when auth.shared_cache is set."""
        shared = TOKEN_CACHE_FILE if config.get_bool("auth.shared_cache", False) else None
        return cls(config, transport=transport, shared_cache=shared)

    @property
    def state(self) -> TokenState:
        with self._lock:
            return TokenState.CACHED if self._token else TokenState.EMPTY

    def get_token(self) -> str:
        """
        Return the cached token, authenticating first if the cache is empty.

        Concurrent callers on an empty cache wait for a single
        authentication call and all receive its token.

        Raises:
            AuthFailure: If authentication fails (nothing is cached)
        """
        with self._lock:
            if self._token is None:
                self._token = self._obtain_token(force=False)
            return self._token

    def refresh(self) -> str:
        """
        Authenticate unconditionally and replace the cached token.

        Raises:
            AuthFailure: If authentication fails (the previous token is dropped)
        """
        with self._lock:
            self._token = None
            self._token = self._obtain_token(force=True)
            logger.info("Token refreshed")
            return self._token

    def invalidate(self) -> None:
        """
        Invalidate current token.

        Forces next get_token() to authenticate again.
        """
        with self._lock:
            self._token = None
            if self.shared_cache is not None:
                clear_shared_cache(self.shared_cache)

    def _obtain_token(self, force: bool) -> str:
        """
        Fetch a token, going through the shared cache when configured.

        The file lock keeps worker processes from authenticating at the same
        time; a worker that finds a token written by another one adopts it
        unless a refresh was requested.
        """
        if self.shared_cache is None:
            return self._request_new_token()

        self.shared_cache.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(self.shared_cache.with_suffix(".lock"))):
            if not force:
                cached = self._load_cached_token()
                if cached:
                    logger.debug("Token adopted from shared cache")
                    return cached

            token = self._request_new_token()
            self._save_token_to_cache(token)
            return token

    def _request_new_token(self) -> str:
        """
        Request new token from authentication API.

        Returns:
            The token string from the response body
        """
        base_url = self.config.get_base_url().rstrip("/")
        credentials = {
            "username": self.config.get("auth.username"),
            "password": self.config.get("auth.password"),
        }
        timeout = self.config.get_float("api.timeout", 30)

        try:
            with httpx.Client(timeout=timeout, transport=self.transport) as client:
                response = client.post(
                    f"{base_url}{AUTH_ENDPOINT}",
                    json=credentials,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            raise AuthFailure(f"Failed to fetch token: {e}") from e

        if not response.is_success:
            raise AuthFailure(
                f"Authentication returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            body: Any = response.json()
        except ValueError as e:
            raise AuthFailure(f"Authentication response is not JSON: {response.text[:200]}") from e

        token = body.get("token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            message = "Authentication response has no token"
            reason = body.get("reason") if isinstance(body, dict) else None
            if reason:
                message += f" (reason: {reason})"
            raise AuthFailure(message)

        logger.info(f"Authenticated as {credentials['username']}")
        return token

    def _load_cached_token(self) -> Optional[str]:
        """Load token from file cache."""
        try:
            if self.shared_cache.exists():
                with open(self.shared_cache, "r", encoding="utf-8") as f:
                    data: Dict[str, Any] = json.load(f)
                token = data.get("token")
                return token if isinstance(token, str) and token else None
        except (json.JSONDecodeError, OSError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable token cache: {e}")
        return None

    def _save_token_to_cache(self, token: str) -> None:
        """Save token to file cache."""
        try:
            with open(self.shared_cache, "w", encoding="utf-8") as f:
                json.dump({"token": token}, f)
        except OSError as e:
            logger.warning(f"Failed to cache token: {e}")


def clear_shared_cache(cache_file: Path = TOKEN_CACHE_FILE) -> None:
    """
    Remove a shared token file so the next worker authenticates afresh.

    Holds the same file lock as token fetches; a file that is already gone
    is fine.
    """
    cache_file = Path(cache_file)
    if not cache_file.parent.exists():
        return
    with FileLock(str(cache_file.with_suffix(".lock"))):
        cache_file.unlink(missing_ok=True)
    logger.debug(f"Shared token cache cleared: {cache_file}")


__all__ = [
    "AuthFailure",
    "TOKEN_CACHE_FILE",
    "clear_shared_cache",
    "TokenManager",
    "TokenState",
]
