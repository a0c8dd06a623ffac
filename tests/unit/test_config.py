"""
Unit tests for configuration management.

Tests YAML loading, Settings validation, and sensitive data redaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from pydantic import ValidationError

from tests.factories import write_config
from visual_search.config import (
    REDACTION_MARKER,
    ConfigurationError,
    Settings,
    clear_settings_cache,
    get_safe_config,
    get_settings,
    is_sensitive_key,
    load_yaml_config,
    redact_sensitive_values,
)

if TYPE_CHECKING:
    from pathlib import Path


def valid_config() -> dict[str, Any]:
    return {
        "service": {"name": "visual-search", "version": "0.1.0"},
        "embeddings": {
            "url": "http://localhost:8000",
            "timeout_seconds": 30.0,
            "connect_timeout_seconds": 5.0,
        },
        "store": {"path": "data/embeddings.json", "embedding_dimension": None, "auto_load": True},
        "search": {"default_k": 5, "max_k": 50},
        "server": {
            "host": "0.0.0.0",
            "port": 5000,
            "log_level": "info",
            "cors_origins": ["*"],
        },
        "static": {"enabled": True, "directory": "public"},
    }


@pytest.mark.unit
class TestLoadYamlConfig:
    """Tests for YAML configuration loading."""

    def test_load_valid_config(self, test_config_file: Path) -> None:
        """Valid YAML file loads successfully."""
        result = load_yaml_config(test_config_file)

        assert result["service"]["name"] == "visual-search"
        assert result["embeddings"]["url"] == "http://embeddings.test"

    def test_missing_file_raises_error(self, tmp_path: Path) -> None:
        """Missing config file raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_yaml_config(tmp_path / "does_not_exist.yaml")

    def test_empty_file_raises_error(self, tmp_path: Path) -> None:
        """Empty config file raises ConfigurationError."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        with pytest.raises(ConfigurationError, match="empty"):
            load_yaml_config(config_file)

    def test_invalid_yaml_raises_error(self, tmp_path: Path) -> None:
        """Malformed YAML raises ConfigurationError."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigurationError):
            load_yaml_config(config_file)

    def test_non_dict_yaml_raises_error(self, tmp_path: Path) -> None:
        """YAML that is not a mapping raises ConfigurationError."""
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- item1\n- item2")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_yaml_config(config_file)


@pytest.mark.unit
class TestSettings:
    """Tests for Settings validation."""

    def test_valid_config_creates_settings(self) -> None:
        """Valid configuration creates Settings instance."""
        settings = Settings(**valid_config())

        assert settings.embeddings.url == "http://localhost:8000"
        assert settings.store.embedding_dimension is None
        assert settings.search.default_k == 5

    def test_missing_section_fails(self) -> None:
        """Every section is required."""
        config = valid_config()
        del config["store"]

        with pytest.raises(ValidationError):
            Settings(**config)

    def test_missing_value_fails(self) -> None:
        """Every value is required, including nullable ones."""
        config = valid_config()
        del config["store"]["embedding_dimension"]

        with pytest.raises(ValidationError):
            Settings(**config)

    def test_extra_field_fails(self) -> None:
        """Unknown keys are rejected."""
        config = valid_config()
        config["search"]["threshold"] = 0.5

        with pytest.raises(ValidationError):
            Settings(**config)

    @pytest.mark.parametrize(
        ("section", "key", "value"),
        [
            ("search", "default_k", 0),
            ("search", "max_k", -1),
            ("embeddings", "timeout_seconds", 0),
            ("store", "embedding_dimension", 0),
        ],
    )
    def test_out_of_range_values_fail(self, section: str, key: str, value: Any) -> None:
        """Counts, timeouts and dimensions must be positive."""
        config = valid_config()
        config[section][key] = value

        with pytest.raises(ValidationError):
            Settings(**config)


@pytest.mark.unit
class TestGetSettings:
    """Tests for cached settings loading."""

    def test_reads_config_path_from_environment(self) -> None:
        """CONFIG_PATH selects the file."""
        settings = get_settings()

        assert settings.embeddings.url == "http://embeddings.test"

    def test_settings_are_cached(self) -> None:
        """Repeated calls return the same instance."""
        assert get_settings() is get_settings()

    def test_invalid_settings_raise_configuration_error(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Validation failures surface as ConfigurationError."""
        config_file = tmp_path / "partial.yaml"
        config_file.write_text("service:\n  name: x\n  version: '1'\n")
        monkeypatch.setenv("CONFIG_PATH", str(config_file))
        clear_settings_cache()

        with pytest.raises(ConfigurationError, match="validation failed"):
            get_settings()

    def test_default_k_above_max_k_fails(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """default_k may not exceed max_k."""
        config_file = write_config(
            tmp_path / "bounds.yaml",
            embeddings_url="http://embeddings.test",
            store_path=tmp_path / "embeddings.json",
            default_k=20,
            max_k=10,
        )
        monkeypatch.setenv("CONFIG_PATH", str(config_file))
        clear_settings_cache()

        with pytest.raises(ConfigurationError, match="default_k"):
            get_settings()


@pytest.mark.unit
class TestRedaction:
    """Tests for sensitive value redaction."""

    @pytest.mark.parametrize("key", ["api_key", "password", "AUTH_TOKEN", "client_secret"])
    def test_sensitive_keys_detected(self, key: str) -> None:
        assert is_sensitive_key(key) is True

    @pytest.mark.parametrize("key", ["url", "host", "embedding_dimension", "auto_load"])
    def test_regular_keys_not_sensitive(self, key: str) -> None:
        assert is_sensitive_key(key) is False

    def test_nested_values_are_redacted(self) -> None:
        """Redaction walks nested mappings and lists of mappings."""
        data = {
            "embeddings": {"url": "http://x", "api_key": "abc"},
            "extra": [{"token": "t"}, "plain"],
        }

        result = redact_sensitive_values(data, REDACTION_MARKER)

        assert result["embeddings"] == {"url": "http://x", "api_key": REDACTION_MARKER}
        assert result["extra"] == [{"token": REDACTION_MARKER}, "plain"]
        assert data["embeddings"]["api_key"] == "abc"

    def test_safe_config_contains_all_sections(self) -> None:
        """The redacted dump keeps every section."""
        safe = get_safe_config()

        assert set(safe) == {"service", "embeddings", "store", "search", "server", "static"}
