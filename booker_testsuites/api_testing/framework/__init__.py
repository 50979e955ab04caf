"""
================================================================================
API Testing Framework
================================================================================

Restful-Booker API automation framework components.

Modules:
    - config_loader: YAML configuration management
    - request_spec: Shared request template and response expectation
    - token_manager: Single-flight authentication token cache
    - http_client: HTTP client with token refresh and Allure logging
    - booking_api: Booking endpoint wrapper
    - models: Booking value objects and wire field mapping
    - response_validator: Aggregated response assertions
    - data_factory: Booking test data generation

Author: Automation Team
License: MIT
================================================================================
"""

from .booking_api import BookingApi
from .config_loader import ConfigLoader, ConfigLoadFailure, ConfigMissing, ConfigurationError
from .data_factory import BookingFactory
from .http_client import HttpClient, HttpClientError, NetworkFailure, RateLimitExceeded
from .models import AuthCredentials, BookingDates, BookingRecord, CreatedBooking, from_wire, to_wire
from .request_spec import RequestSpecFactory, RequestTemplate, ResponseExpectation
from .response_validator import AssertionFailure, ResponseValidator, ValidationRule, ValidationType
from .token_manager import AuthFailure, TokenManager, TokenState

__all__ = [
    "AssertionFailure",
    "AuthCredentials",
    "AuthFailure",
    "BookingApi",
    "BookingDates",
    "BookingFactory",
    "BookingRecord",
    "ConfigLoader",
    "ConfigLoadFailure",
    "ConfigMissing",
    "ConfigurationError",
    "CreatedBooking",
    "HttpClient",
    "HttpClientError",
    "NetworkFailure",
    "RateLimitExceeded",
    "RequestSpecFactory",
    "RequestTemplate",
    "ResponseExpectation",
    "ResponseValidator",
    "TokenManager",
    "TokenState",
    "ValidationRule",
    "ValidationType",
    "from_wire",
    "to_wire",
]
