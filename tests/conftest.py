"""
Shared test configuration and fixtures.

Every test runs against a temporary config.yaml (selected through
CONFIG_PATH) whose store points at a small two-dimensional collection.
Test-type-specific fixtures live in tests/unit/conftest.py and
tests/integration/conftest.py.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from tests.factories import SAMPLE_DOCUMENTS, write_config

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path

EMBEDDINGS_URL = "http://embeddings.test"


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    """Write the sample collection to a temporary JSON file."""
    path = tmp_path / "embeddings.json"
    path.write_text(json.dumps(SAMPLE_DOCUMENTS))
    return path


@pytest.fixture(autouse=True)
def test_config_file(
    tmp_path: Path,
    store_file: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[Path, None, None]:
    """Point CONFIG_PATH at a temporary config and reset the settings cache."""
    from visual_search.config import clear_settings_cache  # noqa: PLC0415

    config_path = write_config(
        tmp_path / "config.yaml",
        embeddings_url=EMBEDDINGS_URL,
        store_path=store_file,
    )
    monkeypatch.setenv("CONFIG_PATH", str(config_path))

    clear_settings_cache()
    yield config_path
    clear_settings_cache()
