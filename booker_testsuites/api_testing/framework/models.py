# ================================================================================
# Booking Data Models
# ================================================================================
#
# Value objects mirroring the Restful-Booker resource shapes.
#
# Attribute names follow Python conventions; the wire names used by the API
# live in the FieldMapping tables below, which to_wire() and from_wire()
# consult. Fields left as None are omitted from the wire form.
#
# ================================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Type, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class BookingDates:
    """Check-in / check-out dates as ISO strings (YYYY-MM-DD)."""
    check_in: Optional[str] = None
    check_out: Optional[str] = None


@dataclass(frozen=True)
class BookingRecord:
    """
    A booking as stored by the API.

    Every field is optional so the same type describes partial updates.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    total_price: Optional[int] = None
    deposit_paid: Optional[bool] = None
    booking_dates: Optional[BookingDates] = None
    additional_needs: Optional[str] = None


@dataclass(frozen=True)
class CreatedBooking:
    """Response of POST /booking."""
    booking_id: int
    booking: BookingRecord


@dataclass(frozen=True)
class AuthCredentials:
    """Request body of POST /auth."""
    username: str
    password: str


# ================================================================================
# Wire Field Mapping
# ================================================================================

@dataclass(frozen=True)
class FieldMapping:
    """
    Maps one attribute to its JSON key.

    Attributes:
        attribute: Python attribute name
        wire_name: JSON key on the wire
        nested: Model type of a nested object, if any
    """
    attribute: str
    wire_name: str
    nested: Optional[type] = None


WIRE_SCHEMAS: Dict[type, Tuple[FieldMapping, ...]] = {
    BookingDates: (
        FieldMapping("check_in", "checkin"),
        FieldMapping("check_out", "checkout"),
    ),
    BookingRecord: (
        FieldMapping("first_name", "firstname"),
        FieldMapping("last_name", "lastname"),
        FieldMapping("total_price", "totalprice"),
        FieldMapping("deposit_paid", "depositpaid"),
        FieldMapping("booking_dates", "bookingdates", nested=BookingDates),
        FieldMapping("additional_needs", "additionalneeds"),
    ),
    CreatedBooking: (
        FieldMapping("booking_id", "bookingid"),
        FieldMapping("booking", "booking", nested=BookingRecord),
    ),
    AuthCredentials: (
        FieldMapping("username", "username"),
        FieldMapping("password", "password"),
    ),
}


def _schema_for(cls: type) -> Tuple[FieldMapping, ...]:
    try:
        return WIRE_SCHEMAS[cls]
    except KeyError:
        raise TypeError(f"No wire mapping registered for {cls.__name__}") from None


def to_wire(value: Any) -> Dict[str, Any]:
    """
    Serialize a model into its JSON-ready dictionary.

    None attributes are omitted.
    """
    payload: Dict[str, Any] = {}
    for mapping in _schema_for(type(value)):
        attr = getattr(value, mapping.attribute)
        if attr is None:
            continue
        payload[mapping.wire_name] = to_wire(attr) if mapping.nested else attr
    return payload


def from_wire(cls: Type[T], payload: Any) -> T:
    """
    Build a model from a decoded JSON object.

    Keys without a mapping are ignored; missing keys become None.

    Raises:
        ValueError: If payload (or a nested object) is not a JSON object,
            or a required attribute is missing
    """
    if not isinstance(payload, dict):
        raise ValueError(
            f"Expected a JSON object for {cls.__name__}, got {type(payload).__name__}"
        )

    kwargs: Dict[str, Any] = {}
    for mapping in _schema_for(cls):
        if mapping.wire_name not in payload:
            continue
        raw = payload[mapping.wire_name]
        if mapping.nested is not None and raw is not None:
            raw = from_wire(mapping.nested, raw)
        kwargs[mapping.attribute] = raw

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Incomplete {cls.__name__} payload: {e}") from e


__all__ = [
    "AuthCredentials",
    "BookingDates",
    "BookingRecord",
    "CreatedBooking",
    "FieldMapping",
    "WIRE_SCHEMAS",
    "from_wire",
    "to_wire",
]
