"""Restful-Booker API tests and framework."""
