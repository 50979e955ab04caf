"""
================================================================================
API Testing Pytest Configuration
================================================================================

Shared fixtures and configuration for booking API automation tests.

Fixtures:
    - booker_fake: In-process Restful-Booker (None in live mode)
    - token_manager: Session-wide token cache
    - http_client: Configured HTTP client for API requests
    - booking_api: Booking endpoint wrapper
    - booking_factory / created_booking: Test data and teardown

Set BOOKER_LIVE=1 to run against the real API from config/config.yaml.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from typing import Generator, Optional

import httpx
import pytest
from loguru import logger

from ..fake_booker import FakeBookerApi
from ..framework import (
    BookingApi,
    BookingFactory,
    ConfigLoader,
    CreatedBooking,
    HttpClient,
    RequestSpecFactory,
    ResponseValidator,
    TokenManager,
)


def _live_mode() -> bool:
    return os.environ.get("BOOKER_LIVE", "").lower() in ("1", "true", "yes")


# =============================================================================
# Session-Scoped Fixtures (Shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def booker_fake(config: ConfigLoader) -> Optional[FakeBookerApi]:
    """
    Provide the in-process booking API, or None when running live.
    """
    if _live_mode():
        logger.info(f"Running against live API: {config.get_base_url()}")
        return None
    return FakeBookerApi(
        username=config.get("auth.username"),
        password=config.get("auth.password"),
    )


@pytest.fixture(scope="session")
def transport(booker_fake: Optional[FakeBookerApi]) -> Optional[httpx.BaseTransport]:
    return booker_fake.transport if booker_fake is not None else None


@pytest.fixture(scope="session")
def spec_factory(config: ConfigLoader) -> RequestSpecFactory:
    """Request template and response expectation, composed once per run."""
    return RequestSpecFactory(config)


@pytest.fixture(scope="session")
def token_manager(
    config: ConfigLoader,
    transport: Optional[httpx.BaseTransport],
) -> TokenManager:
    """Token cache shared by every test in the session."""
    return TokenManager.from_config(config, transport=transport)


@pytest.fixture(scope="session")
def validator(spec_factory: RequestSpecFactory) -> ResponseValidator:
    return ResponseValidator(spec_factory.build_default_response_expectation())


# =============================================================================
# Function-Scoped Fixtures (Fresh for each test)
# =============================================================================

@pytest.fixture
def http_client(
    config: ConfigLoader,
    token_manager: TokenManager,
    spec_factory: RequestSpecFactory,
    transport: Optional[httpx.BaseTransport],
) -> Generator[HttpClient, None, None]:
    """
    Provide configured HTTP client for API requests.

    Usage:
        def test_example(http_client):
            response = http_client.get("/booking/1")
            assert response.status_code == 200
    """
    with HttpClient(config, token_manager, spec_factory, transport=transport) as client:
        yield client


@pytest.fixture
def booking_api(http_client: HttpClient) -> BookingApi:
    return BookingApi(http_client)


# =============================================================================
# Test Data and Cleanup Fixtures
# =============================================================================

@pytest.fixture
def booking_factory(booking_api: BookingApi) -> Generator[BookingFactory, None, None]:
    """
    Booking data generator; tracked bookings are deleted after the test.

    Usage:
        def test_create(booking_api, booking_factory):
            created = booking_api.parse_created(booking_api.create_booking(record))
            booking_factory.track(created.booking_id, "booking", booking_api.delete_booking)
    """
    factory = BookingFactory()
    yield factory
    factory.cleanup_all()


@pytest.fixture
def created_booking(
    booking_api: BookingApi,
    booking_factory: BookingFactory,
) -> CreatedBooking:
    """A fresh booking that is removed again after the test."""
    response = booking_api.create_booking(booking_factory.create_valid())
    assert response.status_code == 200, f"Setup failed: {response.status_code} {response.text}"
    created = booking_api.parse_created(response)
    booking_factory.track(created.booking_id, "booking", booking_api.delete_booking)
    logger.debug(f"Created booking {created.booking_id} for test")
    return created


# =============================================================================
# Allure Reporting Hooks
# =============================================================================

def pytest_exception_interact(node, call, report):
    """Attach additional info on test failure."""
    import allure

    if report.failed:
        allure.attach(
            str(call.excinfo.value),
            name="Error Details",
            attachment_type=allure.attachment_type.TEXT
        )
