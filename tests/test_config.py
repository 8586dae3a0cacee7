from collections.abc import Iterator

import pytest
from pydantic import ValidationError

from src.timetable.backend import SupabaseClient
from src.timetable.config import TimetableConfig, get_config, reset_config


@pytest.fixture(autouse=True)
def fresh_config() -> Iterator[None]:
    reset_config()
    yield
    reset_config()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://xyz.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("REFRESH_INTERVAL_SECONDS", "30")

    config = get_config()
    assert config.supabase_url == "https://xyz.supabase.co"
    assert config.refresh_interval_seconds == 30
    assert config.supabase_configured
    assert get_config() is config

    client = SupabaseClient.from_config(config)
    assert client.url == "https://xyz.supabase.co"


def test_defaults() -> None:
    config = TimetableConfig(_env_file=None, supabase_url="", supabase_anon_key="")
    assert config.grid_first_hour == 7
    assert config.grid_last_hour == 24
    assert config.hour_height_px == 80
    assert config.max_session_age_hours == 24
    assert not config.supabase_configured


def test_grid_last_hour_range() -> None:
    with pytest.raises(ValidationError):
        TimetableConfig(_env_file=None, grid_last_hour=25)

