from unittest.mock import MagicMock

import pytest

from src.timetable.backend import SupabaseClient


@pytest.fixture
def http() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(http: MagicMock) -> SupabaseClient:
    return SupabaseClient("https://demo.supabase.co/", "anon-key", timeout=5, http=http)
