"""
Pick Risk Test Suite

This package contains unit tests, integration tests, and fixtures
for the Pick Risk engine.

Run tests with:
    pytest tests/
    pytest tests/test_engine.py -v
    pytest tests/test_engine.py::TestTiers -v
"""
