import pytest

from booker_testsuites.api_testing.framework.models import (
    AuthCredentials,
    BookingDates,
    BookingRecord,
    CreatedBooking,
    from_wire,
    to_wire,
)


@pytest.fixture
def booking():
    return BookingRecord(
        first_name="James",
        last_name="Brown",
        total_price=150,
        deposit_paid=True,
        booking_dates=BookingDates(check_in="2024-01-15", check_out="2024-01-20"),
        additional_needs="Breakfast",
    )


def test_to_wire_uses_wire_names(booking):
    assert to_wire(booking) == {
        "firstname": "James",
        "lastname": "Brown",
        "totalprice": 150,
        "depositpaid": True,
        "bookingdates": {"checkin": "2024-01-15", "checkout": "2024-01-20"},
        "additionalneeds": "Breakfast",
    }


def test_round_trip_is_lossless(booking):
    assert from_wire(BookingRecord, to_wire(booking)) == booking


def test_absent_fields_are_omitted():
    partial = BookingRecord(first_name="Jim", deposit_paid=False)

    wire = to_wire(partial)

    assert wire == {"firstname": "Jim", "depositpaid": False}
    assert from_wire(BookingRecord, wire) == partial


def test_from_wire_ignores_unknown_keys(booking):
    wire = dict(to_wire(booking), bookingid=7, extra="ignored")
    assert from_wire(BookingRecord, wire) == booking


def test_from_wire_rejects_non_objects():
    with pytest.raises(ValueError, match="Expected a JSON object"):
        from_wire(BookingRecord, ["firstname"])
    with pytest.raises(ValueError, match="Expected a JSON object"):
        from_wire(BookingRecord, {"bookingdates": "2024-01-15"})


def test_created_booking_from_wire(booking):
    created = from_wire(CreatedBooking, {"bookingid": 42, "booking": to_wire(booking)})

    assert created.booking_id == 42
    assert created.booking == booking


def test_created_booking_requires_id():
    with pytest.raises(ValueError, match="Incomplete CreatedBooking"):
        from_wire(CreatedBooking, {"booking": {}})


def test_credentials_to_wire():
    assert to_wire(AuthCredentials("admin", "password123")) == {
        "username": "admin",
        "password": "password123",
    }


def test_unmapped_type_is_rejected():
    with pytest.raises(TypeError, match="No wire mapping"):
        to_wire(object())


def test_records_are_immutable(booking):
    with pytest.raises(AttributeError):
        booking.first_name = "Sally"
