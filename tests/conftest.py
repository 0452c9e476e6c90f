"""Shared pytest configuration."""

pytest_plugins = ["dynacache.testing.fixtures"]
