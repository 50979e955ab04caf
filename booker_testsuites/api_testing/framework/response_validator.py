# ================================================================================
# Response Validator
# ================================================================================
#
# This module validates booking API responses. Every configured check is
# evaluated before anything is reported, so one failed scenario shows the
# full set of mismatches instead of only the first.
#
# Key Features:
#   - Status code and default response expectation checks
#   - Field-level rules with dot-notation paths
#   - Aggregated failure reporting (AssertionFailure)
#   - Allure integration for test reporting
#
# ================================================================================

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

import allure
import httpx
from loguru import logger

from .request_spec import ResponseExpectation


class ValidationType(Enum):
    """Enumeration of supported validation types."""
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    CONTAINS = "contains"
    REGEX_MATCH = "regex_match"
    LENGTH_GREATER_THAN = "length_greater_than"
    TYPE_CHECK = "type_check"
    RANGE = "range"
    IN_LIST = "in_list"


@dataclass
class ValidationRule:
    """
    Represents a single validation rule to be applied to a response field.

    Attributes:
        field: The field path to validate (supports dot notation for nested fields)
        validation_type: The type of validation to perform
        expected: The expected value or pattern
        description: Human-readable description of the validation
        required: Whether the field must exist
    """
    field: str
    validation_type: ValidationType
    expected: Any = None
    description: str = ""
    required: bool = True


@dataclass
class ValidationResult:
    """
    Represents the result of a validation operation.

    Attributes:
        passed: Whether the validation passed
        rule: The validation rule that was applied
        actual_value: The actual value found in the response
        error_message: Error message if validation failed
    """
    passed: bool
    rule: ValidationRule
    actual_value: Any = None
    error_message: str = ""


class AssertionFailure(AssertionError):
    """Raised once per response with every failed check."""

    def __init__(self, failures: Sequence[str], total: int) -> None:
        self.failures = list(failures)
        self.total = total
        details = "\n".join(f"- {failure}" for failure in self.failures)
        super().__init__(
            f"Response validation failed ({len(self.failures)}/{total} checks):\n{details}"
        )


def equals(field: str, expected: Any) -> ValidationRule:
    """Shorthand for the most common rule."""
    return ValidationRule(field, ValidationType.EQUAL, expected)


class ResponseValidator:
    """
    Response validator for booking API tests.

    Example:
        validator = ResponseValidator(expectation)
        validator.assert_response(
            response,
            expected_status=200,
            rules=[
                ValidationRule("bookingid", ValidationType.TYPE_CHECK, "integer"),
                equals("booking.firstname", "James"),
            ],
        )
    """

    def __init__(self, expectation: Optional[ResponseExpectation] = None):
        """
        Initialize the response validator.

        Args:
            expectation: Default checks applied by assert_response
        """
        self.expectation = expectation
        self._validation_handlers = {
            ValidationType.EQUAL: self._validate_equal,
            ValidationType.NOT_EQUAL: self._validate_not_equal,
            ValidationType.IS_NULL: self._validate_is_null,
            ValidationType.IS_NOT_NULL: self._validate_is_not_null,
            ValidationType.CONTAINS: self._validate_contains,
            ValidationType.REGEX_MATCH: self._validate_regex_match,
            ValidationType.LENGTH_GREATER_THAN: self._validate_length_greater_than,
            ValidationType.TYPE_CHECK: self._validate_type_check,
            ValidationType.RANGE: self._validate_range,
            ValidationType.IN_LIST: self._validate_in_list,
        }

    def validate(
        self,
        response_data: Any,
        rules: Iterable[ValidationRule]
    ) -> List[ValidationResult]:
        """
        Validate response data against a list of validation rules.

        Args:
            response_data: The parsed JSON response data
            rules: Validation rules to apply

        Returns:
            List of ValidationResult objects, one for each rule
        """
        results = []

        for rule in rules:
            result = self._apply_rule(response_data, rule)
            results.append(result)

            log_msg = f"{rule.description or rule.field}: {'ok' if result.passed else 'FAILED'}"
            if result.passed:
                logger.debug(log_msg)
            else:
                logger.warning(f"{log_msg} - {result.error_message}")

        return results

    def assert_response(
        self,
        response: httpx.Response,
        expected_status: Optional[int] = None,
        rules: Iterable[ValidationRule] = (),
        expectation: Optional[ResponseExpectation] = None,
    ) -> None:
        """
        Run every check on a response, then raise once if any failed.

        Checks, in order: status code, default expectation, field rules.
        Field rules are skipped only when the body is not JSON.

        Raises:
            AssertionFailure: Listing every failed check
        """
        expectation = expectation or self.expectation
        rules = list(rules)
        failures: List[str] = []
        total = len(rules)

        if expected_status is not None:
            total += 1
            if response.status_code != expected_status:
                failures.append(
                    f"status: Expected {expected_status}, got {response.status_code}"
                )

        if expectation is not None:
            total += 1
            failures.extend(expectation.check(response))

        if rules:
            try:
                data = response.json()
            except ValueError:
                failures.append(f"body: Not JSON: {response.text[:200]!r}")
            else:
                for result in self.validate(data, rules):
                    if not result.passed:
                        failures.append(f"{result.rule.field}: {result.error_message}")

        self._attach_validation_summary(total, failures)

        if failures:
            raise AssertionFailure(failures, total)

    def validate_and_assert(
        self,
        response_data: Any,
        rules: Iterable[ValidationRule],
    ) -> None:
        """
        Validate decoded data and raise if any rule fails.

        Raises:
            AssertionFailure: If any validation rule fails
        """
        results = self.validate(response_data, rules)
        failures = [
            f"{r.rule.field}: {r.error_message}" for r in results if not r.passed
        ]
        self._attach_validation_summary(len(results), failures)
        if failures:
            raise AssertionFailure(failures, len(results))

    def _apply_rule(
        self,
        response_data: Any,
        rule: ValidationRule
    ) -> ValidationResult:
        """Apply a single validation rule to the response data."""
        try:
            actual_value = self._get_nested_value(response_data, rule.field)
        except (KeyError, IndexError, TypeError):
            if rule.required:
                return ValidationResult(
                    passed=False,
                    rule=rule,
                    error_message=f"Required field not found: {rule.field}"
                )
            return ValidationResult(passed=True, rule=rule)

        handler = self._validation_handlers[rule.validation_type]
        try:
            passed, error_message = handler(actual_value, rule.expected)
        except (TypeError, ValueError, AttributeError) as e:
            passed, error_message = False, f"Validation error: {e}"

        return ValidationResult(
            passed=passed,
            rule=rule,
            actual_value=actual_value,
            error_message=error_message
        )

    def _get_nested_value(self, data: Any, key_path: str) -> Any:
        """
        Get a value from nested data using dot notation.

        Args:
            data: The decoded JSON to search
            key_path: Dot-separated path (e.g., "booking.bookingdates.checkin"),
                      list items as "items[0]"

        Raises:
            KeyError: If the path doesn't exist
        """
        current = data
        if not key_path:
            return current

        for key in key_path.split('.'):
            array_match = re.match(r'(\w+)\[(\d+)\]$', key)
            if array_match:
                current = current[array_match.group(1)][int(array_match.group(2))]
            else:
                current = current[key]

        return current

    # Validation handlers
    def _validate_equal(self, actual: Any, expected: Any) -> tuple:
        passed = actual == expected
        error = "" if passed else f"Expected '{expected}', got '{actual}'"
        return passed, error

    def _validate_not_equal(self, actual: Any, expected: Any) -> tuple:
        passed = actual != expected
        error = "" if passed else f"Expected not equal to '{expected}'"
        return passed, error

    def _validate_is_null(self, actual: Any, expected: Any) -> tuple:
        passed = actual is None
        error = "" if passed else f"Expected null, got '{actual}'"
        return passed, error

    def _validate_is_not_null(self, actual: Any, expected: Any) -> tuple:
        passed = actual is not None
        error = "" if passed else "Expected non-null value, got null"
        return passed, error

    def _validate_contains(self, actual: Any, expected: Any) -> tuple:
        passed = expected in str(actual)
        error = "" if passed else f"'{actual}' does not contain '{expected}'"
        return passed, error

    def _validate_regex_match(self, actual: Any, expected: str) -> tuple:
        try:
            passed = re.match(expected, str(actual)) is not None
        except re.error as e:
            return False, f"Invalid regex pattern: {e}"
        error = "" if passed else f"'{actual}' does not match pattern '{expected}'"
        return passed, error

    def _validate_length_greater_than(self, actual: Any, expected: int) -> tuple:
        actual_len = len(actual) if hasattr(actual, '__len__') else 0
        passed = actual_len > expected
        error = "" if passed else f"Expected length > {expected}, got {actual_len}"
        return passed, error

    def _validate_type_check(self, actual: Any, expected: str) -> tuple:
        """Validate value type. Booleans never count as numbers."""
        type_map = {
            'string': str,
            'integer': int,
            'number': (int, float),
            'boolean': bool,
            'array': list,
            'object': dict,
            'null': type(None),
        }
        expected_type = type_map.get(expected.lower())
        if expected_type is None:
            return False, f"Unknown type: {expected}"

        passed = isinstance(actual, expected_type)
        if isinstance(actual, bool) and expected.lower() in ('integer', 'number'):
            passed = False
        error = "" if passed else f"Expected type {expected}, got {type(actual).__name__}"
        return passed, error

    def _validate_range(self, actual: Any, expected: Dict) -> tuple:
        min_val = expected.get('min')
        max_val = expected.get('max')

        if min_val is not None and actual < min_val:
            return False, f"Value {actual} is less than minimum {min_val}"
        if max_val is not None and actual > max_val:
            return False, f"Value {actual} is greater than maximum {max_val}"
        return True, ""

    def _validate_in_list(self, actual: Any, expected: List) -> tuple:
        passed = actual in expected
        error = "" if passed else f"'{actual}' not in {expected}"
        return passed, error

    def _attach_validation_summary(self, total: int, failures: List[str]) -> None:
        """Attach validation summary to Allure report."""
        summary_lines = [
            f"Total Checks: {total}",
            f"Passed: {total - len(failures)}",
            f"Failed: {len(failures)}",
        ]
        if failures:
            summary_lines += ["", "Failures:", "-" * 40] + failures

        allure.attach(
            "\n".join(summary_lines),
            name="Validation Summary",
            attachment_type=allure.attachment_type.TEXT
        )


__all__ = [
    "AssertionFailure",
    "ResponseValidator",
    "ValidationResult",
    "ValidationRule",
    "ValidationType",
    "equals",
]
