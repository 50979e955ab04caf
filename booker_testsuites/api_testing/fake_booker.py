"""
================================================================================
In-Process Restful-Booker Fake
================================================================================

A thread-safe, in-memory stand-in for the public Restful-Booker API, exposed
as an httpx.MockTransport. The suites run against it by default so they need
neither network access nor a shared demo server; set BOOKER_LIVE=1 to run
them against the real API instead.

Behaviour mirrors the public API:
    - POST /auth answers bad credentials with 200 {"reason": "Bad credentials"}
    - PUT/PATCH/DELETE need "Cookie: token=..." or HTTP Basic auth, else 403
    - Unknown ids: 404 on GET, 405 on PUT/PATCH/DELETE
    - POST /booking without "Accept: application/json" returns 418
    - DELETE answers 201 "Created"

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import base64
import itertools
import json
import re
import secrets
import threading
from typing import Any, Dict, List, Optional, Set

import httpx
from loguru import logger


DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "password123"

REQUIRED_BOOKING_FIELDS = ("firstname", "lastname", "totalprice", "depositpaid", "bookingdates")

_BOOKING_PATH = re.compile(r"^/booking/(?P<id>[^/]+)$")


def _json(status_code: int, body: Any) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json; charset=utf-8"},
    )


def _text(status_code: int, body: str) -> httpx.Response:
    return httpx.Response(
        status_code,
        text=body,
        headers={"Content-Type": "text/plain; charset=utf-8"},
    )


class FakeBookerApi:
    """
    In-memory booking store behind an httpx transport.

    Usage:
        >>> fake = FakeBookerApi()
        >>> client = httpx.Client(transport=fake.transport, base_url="https://booker.test")
        >>> client.get("/ping").status_code
        201
    """

    def __init__(
        self,
        username: str = DEFAULT_USERNAME,
        password: str = DEFAULT_PASSWORD,
    ) -> None:
        self.username = username
        self.password = password
        self.auth_calls = 0
        self._bookings: Dict[int, Dict[str, Any]] = {}
        self._tokens: Set[str] = set()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def booking_count(self) -> int:
        with self._lock:
            return len(self._bookings)

    def expire_tokens(self) -> None:
        """Forget every issued token, as the real API does on restart."""
        with self._lock:
            self._tokens.clear()
        logger.debug("Fake booker: all tokens expired")

    def seed(self, booking: Dict[str, Any]) -> int:
        """Store a wire-format booking directly and return its id."""
        with self._lock:
            booking_id = next(self._ids)
            self._bookings[booking_id] = dict(booking)
            return booking_id

    # ----------------------------------------------------------------------------
    # Routing
    # ----------------------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.rstrip("/") or "/"
        method = request.method

        if path == "/ping" and method == "GET":
            return _text(201, "Created")
        if path == "/auth" and method == "POST":
            return self._create_token(request)
        if path == "/booking":
            if method == "GET":
                return self._list_bookings(request)
            if method == "POST":
                return self._create_booking(request)

        match = _BOOKING_PATH.match(path)
        if match:
            try:
                booking_id = int(match.group("id"))
            except ValueError:
                return _text(404, "Not Found")
            if method == "GET":
                return self._get_booking(booking_id)
            if method in ("PUT", "PATCH", "DELETE"):
                if not self._is_authorized(request):
                    return _text(403, "Forbidden")
                if method == "PUT":
                    return self._update_booking(booking_id, request, partial=False)
                if method == "PATCH":
                    return self._update_booking(booking_id, request, partial=True)
                return self._delete_booking(booking_id)

        return _text(404, "Not Found")

    # ----------------------------------------------------------------------------
    # Handlers
    # ----------------------------------------------------------------------------

    def _create_token(self, request: httpx.Request) -> httpx.Response:
        body = self._body(request)
        with self._lock:
            self.auth_calls += 1
            if (
                isinstance(body, dict)
                and body.get("username") == self.username
                and body.get("password") == self.password
            ):
                token = secrets.token_hex(8)[:15]
                self._tokens.add(token)
                return _json(200, {"token": token})
        return _json(200, {"reason": "Bad credentials"})

    def _list_bookings(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        with self._lock:
            items = sorted(self._bookings.items())
        result: List[Dict[str, int]] = []
        for booking_id, booking in items:
            dates = booking.get("bookingdates") or {}
            if "firstname" in params and booking.get("firstname") != params["firstname"]:
                continue
            if "lastname" in params and booking.get("lastname") != params["lastname"]:
                continue
            if "checkin" in params and str(dates.get("checkin", "")) < params["checkin"]:
                continue
            if "checkout" in params and str(dates.get("checkout", "")) > params["checkout"]:
                continue
            result.append({"bookingid": booking_id})
        return _json(200, result)

    def _get_booking(self, booking_id: int) -> httpx.Response:
        with self._lock:
            booking = self._bookings.get(booking_id)
        if booking is None:
            return _text(404, "Not Found")
        return _json(200, booking)

    def _create_booking(self, request: httpx.Request) -> httpx.Response:
        if "application/json" not in request.headers.get("accept", ""):
            return _text(418, "I'm a Teapot")
        body = self._body(request)
        if not self._is_complete(body):
            return _text(500, "Internal Server Error")
        booking = self._normalize(body)
        with self._lock:
            booking_id = next(self._ids)
            self._bookings[booking_id] = booking
        return _json(200, {"bookingid": booking_id, "booking": booking})

    def _update_booking(
        self,
        booking_id: int,
        request: httpx.Request,
        partial: bool,
    ) -> httpx.Response:
        body = self._body(request)
        if not isinstance(body, dict) or (not partial and not self._is_complete(body)):
            return _text(400, "Bad Request")
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                return _text(405, "Method Not Allowed")
            updated = dict(current) if partial else {}
            updated.update(self._normalize(body))
            self._bookings[booking_id] = updated
        return _json(200, updated)

    def _delete_booking(self, booking_id: int) -> httpx.Response:
        with self._lock:
            if self._bookings.pop(booking_id, None) is None:
                return _text(405, "Method Not Allowed")
        return _text(201, "Created")

    # ----------------------------------------------------------------------------
    # Helpers
    # ----------------------------------------------------------------------------

    def _is_authorized(self, request: httpx.Request) -> bool:
        cookie = request.headers.get("cookie", "")
        for part in cookie.split(";"):
            name, _, value = part.strip().partition("=")
            if name == "token":
                with self._lock:
                    if value in self._tokens:
                        return True

        authorization = request.headers.get("authorization", "")
        if authorization.startswith("Basic "):
            try:
                decoded = base64.b64decode(authorization[6:]).decode("utf-8")
            except (ValueError, UnicodeDecodeError):
                return False
            return decoded == f"{self.username}:{self.password}"
        return False

    @staticmethod
    def _body(request: httpx.Request) -> Optional[Any]:
        try:
            return json.loads(request.content or b"null")
        except ValueError:
            return None

    @staticmethod
    def _is_complete(body: Any) -> bool:
        return isinstance(body, dict) and all(f in body for f in REQUIRED_BOOKING_FIELDS)

    @staticmethod
    def _normalize(body: Dict[str, Any]) -> Dict[str, Any]:
        """Keep only fields the real API stores."""
        allowed = REQUIRED_BOOKING_FIELDS + ("additionalneeds",)
        return {k: v for k, v in body.items() if k in allowed}


__all__ = ["FakeBookerApi"]
