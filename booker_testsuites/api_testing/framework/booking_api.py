"""
================================================================================
Booking API Client
================================================================================

Endpoint-level wrapper around HttpClient for Restful-Booker.

Endpoints:
    GET    /ping                  health check (201)
    POST   /auth                  create token
    GET    /booking               booking ids, optional filters
    GET    /booking/{id}          one booking
    POST   /booking               create booking
    PUT    /booking/{id}          full update (token required)
    PATCH  /booking/{id}          partial update (token required)
    DELETE /booking/{id}          delete (token required)

Methods return the raw httpx.Response so scenarios can assert on status
codes; parse_* helpers turn successful responses into models.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, List, Optional

import allure
import httpx

from .http_client import HttpClient
from .models import (
    AuthCredentials,
    BookingRecord,
    CreatedBooking,
    from_wire,
    to_wire,
)


BOOKING_ENDPOINT = "/booking"

# Query parameters accepted by GET /booking
BOOKING_FILTERS = ("firstname", "lastname", "checkin", "checkout")


class BookingApi:
    """
    Booking endpoints bound to one HttpClient.

    Usage:
        >>> api = BookingApi(http_client)
        >>> created = api.parse_created(api.create_booking(record))
        >>> api.get_booking(created.booking_id).status_code
        200
    """

    def __init__(self, client: HttpClient) -> None:
        self.client = client

    @allure.step("Ping the booking API")
    def ping(self) -> httpx.Response:
        return self.client.get("/ping")

    @allure.step("Create token")
    def create_token(self, credentials: AuthCredentials) -> httpx.Response:
        return self.client.post("/auth", json=to_wire(credentials))

    @allure.step("List booking ids")
    def list_booking_ids(self, **filters: Optional[str]) -> httpx.Response:
        """
        Args:
            **filters: Any of firstname, lastname, checkin, checkout
        """
        unknown = set(filters) - set(BOOKING_FILTERS)
        if unknown:
            raise ValueError(f"Unsupported booking filters: {sorted(unknown)}")
        params = {k: v for k, v in filters.items() if v is not None}
        return self.client.get(BOOKING_ENDPOINT, params=params)

    @allure.step("Get booking {booking_id}")
    def get_booking(self, booking_id: int) -> httpx.Response:
        return self.client.get(f"{BOOKING_ENDPOINT}/{booking_id}")

    @allure.step("Create booking")
    def create_booking(self, record: BookingRecord) -> httpx.Response:
        return self.client.post(BOOKING_ENDPOINT, json=to_wire(record))

    @allure.step("Update booking {booking_id}")
    def update_booking(self, booking_id: int, record: BookingRecord) -> httpx.Response:
        return self.client.put(
            f"{BOOKING_ENDPOINT}/{booking_id}", json=to_wire(record), authorized=True
        )

    @allure.step("Partially update booking {booking_id}")
    def partial_update_booking(self, booking_id: int, record: BookingRecord) -> httpx.Response:
        """Send only the populated fields of record."""
        return self.client.patch(
            f"{BOOKING_ENDPOINT}/{booking_id}", json=to_wire(record), authorized=True
        )

    @allure.step("Delete booking {booking_id}")
    def delete_booking(self, booking_id: int) -> httpx.Response:
        return self.client.delete(f"{BOOKING_ENDPOINT}/{booking_id}", authorized=True)

    @staticmethod
    def parse_booking(response: httpx.Response) -> BookingRecord:
        return from_wire(BookingRecord, response.json())

    @staticmethod
    def parse_created(response: httpx.Response) -> CreatedBooking:
        return from_wire(CreatedBooking, response.json())

    @staticmethod
    def parse_booking_ids(response: httpx.Response) -> List[int]:
        body: Any = response.json()
        if not isinstance(body, list):
            raise ValueError(f"Expected a list of booking ids, got {type(body).__name__}")
        return [item["bookingid"] for item in body]


__all__ = [
    "BOOKING_ENDPOINT",
    "BookingApi",
]
