"""Test fixtures: fake platform sources and a recording tracking API."""

from tests.fixtures.fakes import BASE_URL, ApiRecorder, FakePlatform

__all__ = [
    "BASE_URL",
    "ApiRecorder",
    "FakePlatform",
]
