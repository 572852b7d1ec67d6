"""
Eval-suite conftest: live checks against the real catalog API.

These tests hit the network and need CATALOG_API_TOKEN (and usually
CATALOG_API_URL) in the environment. Without a token the whole suite is
skipped. Run them manually:

    uv run pytest tests/evals -v -m slow -s
"""

from __future__ import annotations

import os

import pytest

from backend.baserow import CatalogApiClient
from backend.config import CatalogConfig


@pytest.fixture(scope="session")
def live_config() -> CatalogConfig:
    if not os.getenv("CATALOG_API_TOKEN"):
        pytest.skip("CATALOG_API_TOKEN is not set; skipping live catalog checks")
    return CatalogConfig.from_env()


@pytest.fixture(scope="session")
def live_client(live_config: CatalogConfig) -> CatalogApiClient:
    return CatalogApiClient(live_config)
