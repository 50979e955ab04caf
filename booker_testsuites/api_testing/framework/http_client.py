"""
================================================================================
HTTP Client with Allure Integration
================================================================================

The execution layer for booking API calls, featuring:
    - Request template composition (defaults + session cookie + call headers)
    - One-shot token refresh when an authorized call is rejected with 403
    - Rate limit (429) handling with Retry-After parsing
    - Comprehensive Allure reporting with cURL command generation
    - Transport errors surfaced as NetworkFailure (no automatic retry)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional

import allure
import httpx
from allure_commons.types import AttachmentType
from loguru import logger

from .config_loader import ConfigLoader
from .request_spec import RequestSpecFactory, RequestTemplate
from .token_manager import TokenManager


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

# Default retry settings (429 only)
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_BACKOFF = 0.5
DEFAULT_RETRY_MAX_WAIT = 5.0

SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie"}
SENSITIVE_FIELDS = ("password", "secret", "token", "authorization", "session")


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class RateLimitExceeded(HttpClientError):
    """Raised when rate limit is exceeded and all retries are exhausted."""
    pass


class NetworkFailure(HttpClientError):
    """Raised when the booking API cannot be reached."""
    pass


class HttpClient:
    """
    HTTP client for the booking API with built-in reporting.

    Features:
        - Default headers from the shared RequestTemplate
        - Session cookie for authorized calls, refreshed once on 403
        - Smart rate limit (429) handling with Retry-After header parsing
        - Full Allure reporting with request/response details
        - cURL command generation for easy reproduction

    Usage:
        >>> config = ConfigLoader()
        >>> with HttpClient(config, TokenManager(config)) as client:
        ...     response = client.get("/booking/1")
        ...     print(response.json())
    """

    def __init__(
        self,
        config: ConfigLoader,
        token_manager: Optional[TokenManager] = None,
        spec_factory: Optional[RequestSpecFactory] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize HTTP client with configuration.

        Args:
            config: Configuration loader instance
            token_manager: Token cache; required for authorized calls
            spec_factory: Shared request/response descriptors.
                          Creates a new one if None.
            transport: Optional httpx transport (in-process fake in tests)
        """
        self.config = config
        self.token_manager = token_manager
        self.spec_factory = spec_factory or RequestSpecFactory(config)
        self.transport = transport

        self.template: RequestTemplate = self.spec_factory.build_default_request()
        self.base_url = self.template.base_url
        self.retry_count = config.get_int("api.retry_count", DEFAULT_RETRY_COUNT)
        self.retry_backoff = config.get_float("api.retry_backoff", DEFAULT_RETRY_BACKOFF)
        self.retry_max_wait = config.get_float("api.retry_max_wait", DEFAULT_RETRY_MAX_WAIT)
        self.retry_on_forbidden = config.get_bool("auth.retry_on_forbidden", True)

        self.session: Optional[httpx.Client] = None

    def __enter__(self) -> "HttpClient":
        """Enter context manager - initialize HTTP session."""
        self.session = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.template.timeout),
            transport=self.transport,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - close HTTP session."""
        if self.session:
            self.session.close()
            self.session = None

    def request(
        self,
        method: str,
        url: str,
        authorized: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Execute HTTP request with Allure logging.

        Authorized requests carry the cached session token. If the API
        rejects it with 403 and auth.retry_on_forbidden is enabled, the token
        is refreshed and the request is sent once more.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, PATCH)
            url: Request URL (relative to base_url)
            authorized: Attach the session token cookie
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            httpx.Response object

        Raises:
            RateLimitExceeded: When rate limit retries are exhausted
            NetworkFailure: When the API cannot be reached
            AuthFailure: When a token cannot be obtained
        """
        if self.session is None:
            raise HttpClientError(
                "HttpClient must be used within a context manager. "
                "Use 'with HttpClient(config) as client:'"
            )
        if authorized and self.token_manager is None:
            raise HttpClientError("Authorized request requires a TokenManager")

        extra_headers = kwargs.pop("headers", None) or {}

        token = self.token_manager.get_token() if authorized else None
        response = self._send(method, url, token, extra_headers, kwargs)

        if authorized and response.status_code == 403 and self.retry_on_forbidden:
            logger.warning(f"{method} {url} rejected with 403. Refreshing token and retrying once")
            token = self.token_manager.refresh()
            response = self._send(method, url, token, extra_headers, kwargs)

        return response

    def _send(
        self,
        method: str,
        url: str,
        token: Optional[str],
        extra_headers: Dict[str, str],
        kwargs: Dict[str, Any],
    ) -> httpx.Response:
        template = self.template
        if token is not None:
            template = self.spec_factory.with_authorization(template, token)
        request_kwargs = dict(kwargs)
        request_kwargs["headers"] = template.merged_headers(extra_headers)

        attempts = max(self.retry_count, 0) + 1
        for attempt in range(attempts):
            try:
                response = self.session.request(method, url, **request_kwargs)
            except httpx.TransportError as e:
                logger.error(f"{method} {url} failed: {e}")
                raise NetworkFailure(f"{method} {url} failed: {e}") from e

            # Handle rate limiting
            if response.status_code == 429:
                if attempt + 1 == attempts:
                    break
                retry_after = self._parse_retry_after(response)
                logger.warning(
                    f"Rate limited (429). Waiting {retry_after}s before retry. "
                    f"Attempt {attempt + 1}/{attempts}"
                )
                time.sleep(retry_after)
                continue

            logger.debug(f"{method} {url} -> {response.status_code}")
            self._log_to_allure(method, url, request_kwargs, response)
            return response

        # If we get here, rate limit retries were exhausted
        raise RateLimitExceeded(
            f"Rate limit exceeded after {attempts} attempts"
        )

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute GET request."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute POST request."""
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute PUT request."""
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute PATCH request."""
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """Execute DELETE request."""
        return self.request("DELETE", url, **kwargs)

    def _parse_retry_after(self, response: httpx.Response) -> float:
        """
        Parse Retry-After header from 429 response.

        Returns:
            Wait time in seconds (capped at retry_max_wait)
        """
        retry_after = response.headers.get("Retry-After", "")

        try:
            wait_time = float(retry_after)
        except ValueError:
            wait_time = self.retry_backoff

        return min(wait_time, self.retry_max_wait)

    def _log_to_allure(
        self,
        method: str,
        url: str,
        kwargs: Dict[str, Any],
        response: httpx.Response,
    ) -> None:
        """
        Log HTTP request/response to Allure report.

        Attaches:
            - Request URL with query parameters
            - Request headers (redacted)
            - Request body (redacted, if present)
            - cURL command for reproduction
            - Response status
            - Response body (truncated if too long)
        """
        full_url = str(response.request.url)
        status_mark = "PASS" if response.status_code < 400 else "FAIL"
        step_title = f"[{status_mark}] {method} {url} -> {response.status_code}"

        with allure.step(step_title):
            allure.attach(
                full_url,
                name="Request URL",
                attachment_type=AttachmentType.TEXT
            )

            safe_headers = self._redact_headers(kwargs.get("headers", {}))
            if safe_headers:
                allure.attach(
                    json.dumps(safe_headers, ensure_ascii=False, indent=2),
                    name="Request Headers",
                    attachment_type=AttachmentType.JSON
                )

            safe_body = self._redact_body(kwargs.get("json"))
            if safe_body:
                allure.attach(
                    json.dumps(safe_body, ensure_ascii=False, indent=2),
                    name="Request Body",
                    attachment_type=AttachmentType.JSON
                )

            allure.attach(
                self._build_curl(method, full_url, safe_headers, safe_body),
                name="cURL Command",
                attachment_type=AttachmentType.TEXT
            )

            allure.attach(
                str(response.status_code),
                name="Response Status",
                attachment_type=AttachmentType.TEXT
            )

            try:
                response_content = json.dumps(
                    response.json(), ensure_ascii=False, indent=2
                )
            except ValueError:
                response_content = response.text or "<empty>"

            if len(response_content) > MAX_RESPONSE_LENGTH:
                response_content = (
                    f"{response_content[:MAX_RESPONSE_LENGTH]}\n\n"
                    f"... [Truncated, full length: {len(response_content)} chars] ..."
                )

            allure.attach(
                response_content,
                name="Response Body",
                attachment_type=AttachmentType.TEXT
            )

    def _redact_headers(self, headers: Dict[str, Any]) -> Dict[str, Any]:
        """
        Mask sensitive header values before logging.
        """
        masked = {}
        for key, value in headers.items():
            if key.lower() in SENSITIVE_HEADERS:
                masked[key] = "***MASKED***"
            else:
                masked[key] = value
        return masked

    def _redact_body(self, payload: Any) -> Any:
        """
        Recursively mask sensitive fields in request bodies.
        """
        if isinstance(payload, dict):
            redacted = {}
            for key, value in payload.items():
                if any(name in key.lower() for name in SENSITIVE_FIELDS):
                    redacted[key] = "***MASKED***"
                else:
                    redacted[key] = self._redact_body(value)
            return redacted
        if isinstance(payload, list):
            return [self._redact_body(item) for item in payload]
        return payload

    def _build_curl(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Dict[str, Any]],
    ) -> str:
        """
        Build cURL command for request reproduction.

        Headers and body must already be redacted.
        """
        parts = [f"curl -X {method}"]

        for key, value in headers.items():
            parts.append(f"-H '{key}: {value}'")

        if body:
            body_json = json.dumps(body, ensure_ascii=False)
            parts.append(f"-d '{body_json}'")

        parts.append(f"'{url}'")

        return " \\\n  ".join(parts)


__all__ = [
    "HttpClient",
    "HttpClientError",
    "NetworkFailure",
    "RateLimitExceeded",
]
