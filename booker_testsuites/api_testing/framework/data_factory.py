"""
================================================================================
Test Data Factory
================================================================================

This module provides factory classes for generating booking test data.
It supports creating valid, partial, and invalid payloads for testing.

Features:
- Random data generation with reproducible seeds
- Unique surnames so parallel runs can filter their own bookings
- Cleanup tracking for automatic teardown

================================================================================
"""

import random
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from loguru import logger

from .models import BookingDates, BookingRecord, to_wire


# ================================================================================
# Data Models
# ================================================================================

@dataclass
class GeneratedData:
    """Container for created test data with cleanup metadata."""
    data: Any
    data_type: str
    created_at: datetime = field(default_factory=datetime.now)
    cleanup_handler: Optional[Callable[[Any], Any]] = None


# ================================================================================
# Factory Base
# ================================================================================

class DataFactoryBase:
    """
    Base class for test data factories.

    Provides common functionality for generating test data
    with automatic tracking and cleanup support.
    """

    # Prefix for all auto-generated test data
    PREFIX = "autotest"

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize factory with optional random seed.

        Args:
            seed: Random seed for reproducible data generation
        """
        self._random = random.Random(seed)
        self._generated_items: List[GeneratedData] = []

    def _generate_unique_id(self) -> str:
        return f"{self.PREFIX}{uuid4().hex[:8]}"

    def _random_choice(self, options: List[Any]) -> Any:
        return self._random.choice(options)

    def track(self, data: Any, data_type: str,
              cleanup_handler: Optional[Callable[[Any], Any]] = None) -> GeneratedData:
        """
        Track created data for later cleanup.

        Args:
            data: Identifier or payload of the created resource
            data_type: Type of data (e.g., "booking")
            cleanup_handler: Optional function to clean up this data

        Returns:
            GeneratedData object with tracking info
        """
        generated = GeneratedData(
            data=data,
            data_type=data_type,
            cleanup_handler=cleanup_handler
        )
        self._generated_items.append(generated)
        return generated

    def cleanup_all(self) -> None:
        """Clean up all tracked data in reverse order."""
        for item in reversed(self._generated_items):
            if item.cleanup_handler:
                try:
                    item.cleanup_handler(item.data)
                except Exception as e:
                    logger.warning(f"Cleanup failed for {item.data_type} {item.data}: {e}")

        self._generated_items.clear()

    @property
    def generated_count(self) -> int:
        """Return count of tracked items."""
        return len(self._generated_items)


# ================================================================================
# Booking Factory
# ================================================================================

class BookingFactory(DataFactoryBase):
    """
    Factory for generating booking test data.

    Supports creating bookings with various configurations
    for positive, negative, and edge case testing.
    """

    FIRST_NAMES = ["James", "Mary", "Sally", "Jim", "Eric", "Susan", "Mark"]
    ADDITIONAL_NEEDS = ["Breakfast", "Lunch", "Late checkout", "Extra pillows"]
    REQUIRED_FIELDS = ["firstname", "lastname", "totalprice", "depositpaid", "bookingdates"]

    def create_valid(self, **overrides: Any) -> BookingRecord:
        """
        Create a complete booking.

        Args:
            **overrides: BookingRecord attributes to set explicitly

        Returns:
            Valid BookingRecord
        """
        check_in = date.today() + timedelta(days=self._random.randint(1, 60))
        record = BookingRecord(
            first_name=self._random_choice(self.FIRST_NAMES),
            last_name=self._generate_unique_id(),
            total_price=self._random.randint(50, 1000),
            deposit_paid=self._random_choice([True, False]),
            booking_dates=BookingDates(
                check_in=check_in.isoformat(),
                check_out=(check_in + timedelta(days=self._random.randint(1, 14))).isoformat(),
            ),
            additional_needs=self._random_choice(self.ADDITIONAL_NEEDS),
        )
        return replace(record, **overrides)

    def create_minimal(self) -> BookingRecord:
        """Create booking with only required fields."""
        return replace(self.create_valid(), additional_needs=None)

    def create_with_missing_required(self, missing_field: str) -> Dict[str, Any]:
        """
        Create a wire payload with a required field missing.

        Args:
            missing_field: Wire name of required field to omit

        Returns:
            Invalid booking payload for negative testing
        """
        if missing_field not in self.REQUIRED_FIELDS:
            raise ValueError(f"'{missing_field}' is not a required booking field")
        data = to_wire(self.create_minimal())
        del data[missing_field]
        return data


__all__ = [
    "BookingFactory",
    "DataFactoryBase",
    "GeneratedData",
]
