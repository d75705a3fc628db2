"""Shared test fixtures."""

import json
import sqlite3
from pathlib import Path

import pytest
import yaml

from kiwi.config.schema import KiwiConfig
from kiwi.storage.database import connect, run_migrations

FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    """Keep a developer's real API key out of the tests."""
    monkeypatch.delenv("KIWI_API_KEY", raising=False)


@pytest.fixture
def current_payload() -> dict:
    with open(FIXTURE_DIR / "owm_current_auckland.json") as f:
        return json.load(f)


@pytest.fixture
def forecast_payload() -> dict:
    with open(FIXTURE_DIR / "owm_forecast_auckland.json") as f:
        return json.load(f)


@pytest.fixture
def tmp_db(tmp_path: Path) -> sqlite3.Connection:
    """A migrated SQLite database in a temp directory."""
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def default_config() -> KiwiConfig:
    return KiwiConfig()


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "api": {"api_key": "test-key", "base_url": "https://owm.test/data/2.5"},
        "forecast": {"day_timezone": "utc"},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
