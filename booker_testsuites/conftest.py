"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the root pytest configuration for the entire test suite.
It registers common markers and tags tests by directory.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - cosmetic or rarely used paths"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests simulating user flows"
    )
    config.addinivalue_line(
        "markers", "bdd: Gherkin scenarios bound with pytest-bdd"
    )
    config.addinivalue_line(
        "markers", "unit: Framework unit tests, no API involved"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "api: API-specific tests"
    )
    config.addinivalue_line(
        "markers", "auth: Tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "booking: Tests related to booking management"
    )
    config.addinivalue_line(
        "markers", "requires_external: Tests requiring external services"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify collected test items.

    Adds directory-based markers so runs can be filtered with -m.
    """
    for item in items:
        if "api_testing" in str(item.path):
            item.add_marker(pytest.mark.api)

        if "unit" in str(item.path):
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Restful-Booker API Automation Suite",
        "=" * 60,
        "",
    ]
