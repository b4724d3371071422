"""Fixtures for the HTTP API tests."""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from modelviz.config import Settings
from modelviz.types import Environment


@pytest.fixture
def api_settings(tmp_path: Path) -> Settings:
    return Settings(
        environment=Environment.TESTING,
        db_path=tmp_path / "api.db",
        api_version="9.9.9",
    )


@pytest.fixture
def client(api_settings: Settings) -> Generator[TestClient, None, None]:
    """Test client with the lifespan (and so the metrics service) running."""
    with TestClient(create_app(api_settings)) as test_client:
        yield test_client
