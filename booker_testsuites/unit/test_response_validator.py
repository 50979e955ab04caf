import httpx
import pytest

from booker_testsuites.api_testing.framework.request_spec import ResponseExpectation
from booker_testsuites.api_testing.framework.response_validator import (
    AssertionFailure,
    ResponseValidator,
    ValidationRule,
    ValidationType,
    equals,
)


BOOKING = {
    "bookingid": 7,
    "booking": {
        "firstname": "James",
        "totalprice": 150,
        "depositpaid": True,
        "bookingdates": {"checkin": "2024-01-15", "checkout": "2024-01-20"},
    },
    "tags": ["vip", "late"],
}


def _json_response(status_code, body):
    return httpx.Response(
        status_code,
        json=body,
        request=httpx.Request("GET", "http://booker.test/booking/7"),
    )


@pytest.fixture
def validator():
    return ResponseValidator(ResponseExpectation(log_on_failure=False))


def test_all_rules_pass(validator):
    results = validator.validate(
        BOOKING,
        [
            ValidationRule("bookingid", ValidationType.TYPE_CHECK, "integer"),
            equals("booking.bookingdates.checkin", "2024-01-15"),
            ValidationRule("booking.totalprice", ValidationType.RANGE, {"min": 1, "max": 500}),
            ValidationRule("tags[1]", ValidationType.IN_LIST, ["late", "early"]),
            ValidationRule("booking.firstname", ValidationType.REGEX_MATCH, r"^[A-Z]"),
        ],
    )
    assert all(result.passed for result in results)


def test_boolean_is_not_an_integer(validator):
    [result] = validator.validate(
        BOOKING, [ValidationRule("booking.depositpaid", ValidationType.TYPE_CHECK, "integer")]
    )
    assert not result.passed


def test_missing_optional_field_passes(validator):
    [result] = validator.validate(
        BOOKING,
        [ValidationRule("booking.additionalneeds", ValidationType.IS_NOT_NULL, required=False)],
    )
    assert result.passed


def test_assert_response_reports_every_failure(validator):
    response = _json_response(201, BOOKING)

    with pytest.raises(AssertionFailure) as excinfo:
        validator.assert_response(
            response,
            expected_status=200,
            rules=[
                equals("booking.firstname", "Sally"),
                equals("booking.totalprice", 150),
                ValidationRule("booking.lastname", ValidationType.IS_NOT_NULL),
            ],
        )

    failure = excinfo.value
    assert isinstance(failure, AssertionError)
    assert failure.total == 5
    assert len(failure.failures) == 3
    assert failure.failures[0].startswith("status:")
    assert any("Sally" in message for message in failure.failures)
    assert any("Required field not found: booking.lastname" in message for message in failure.failures)


def test_assert_response_applies_default_expectation(validator):
    response = httpx.Response(
        200,
        text="Created",
        request=httpx.Request("DELETE", "http://booker.test/booking/7"),
    )

    with pytest.raises(AssertionFailure, match="content type"):
        validator.assert_response(response, expected_status=200)


def test_assert_response_non_json_body_with_rules(validator):
    response = httpx.Response(
        200,
        text="not json",
        headers={"Content-Type": "application/json"},
        request=httpx.Request("GET", "http://booker.test/booking/7"),
    )

    with pytest.raises(AssertionFailure, match="Not JSON"):
        validator.assert_response(response, rules=[equals("bookingid", 7)])


def test_assert_response_passes(validator):
    validator.assert_response(
        _json_response(200, BOOKING),
        expected_status=200,
        rules=[equals("bookingid", 7)],
    )


def test_validate_and_assert(validator):
    validator.validate_and_assert(BOOKING, [equals("bookingid", 7)])
    with pytest.raises(AssertionFailure, match="1/2 checks"):
        validator.validate_and_assert(
            BOOKING, [equals("bookingid", 7), equals("booking.firstname", "Jim")]
        )
