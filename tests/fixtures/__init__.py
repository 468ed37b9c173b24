"""Shared fixtures for the Pick Risk test suite."""
