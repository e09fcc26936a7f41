"""Test helpers for exporter tests."""

from .fakes import FakeRouterClient, build_fixture_client

__all__ = ["FakeRouterClient", "build_fixture_client"]
