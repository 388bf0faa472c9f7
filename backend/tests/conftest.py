# backend/tests/conftest.py
import pytest

from tests.fakes import InMemorySessionStore


@pytest.fixture
def store():
    return InMemorySessionStore()
