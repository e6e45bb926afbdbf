"""
Shared pytest fixtures.

Each client fixture builds a fresh app with its own environment and clears
the cached Settings before and after, so auth-enabled and open-mode tests
never see each other's configuration.
"""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from ecofinds_quality.core.config import get_settings
from ecofinds_quality.schemas.blur import BlurConfig


def _build_client(monkeypatch: pytest.MonkeyPatch, **env: str) -> Iterator[TestClient]:
    base = {"API_KEY": "", "RATE_LIMIT_ENABLED": "false", "LOG_JSON": "false"}
    base.update(env)
    for key, value in base.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()

    from ecofinds_quality.main import create_app

    with TestClient(create_app(), raise_server_exceptions=False) as c:
        yield c
    get_settings.cache_clear()


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """Open-mode client: no API key, no rate limiting."""
    yield from _build_client(monkeypatch)


@pytest.fixture
def authed_client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """Client with API_KEY=test-secret enforced."""
    yield from _build_client(monkeypatch, API_KEY="test-secret")


@pytest.fixture
def small_batch_client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    yield from _build_client(monkeypatch, MAX_BATCH_SIZE="2")


@pytest.fixture
def config() -> BlurConfig:
    # Synthetic test images are small; keep the advisory minimum out of the way.
    return BlurConfig(min_image_size=1)
