"""
Test suites package.

This repository keeps `booker_testsuites` importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - CI/CD module imports

Credentials in config/config.yaml are the public Restful-Booker demo values.
"""
