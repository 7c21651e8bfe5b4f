"""Tests for YAML configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import SecretStr, ValidationError

from streamverse.core.config import DEFAULT_SOURCES, LoggingConfig, Settings

# Point CONFIG_FILE at a nonexistent path so only built-in defaults apply.
_NO_FILE = Path("/nonexistent/config.yml")


class TestSettingsDefaults:
    def test_defaults_load(self) -> None:
        with patch("streamverse.core.config.CONFIG_FILE", _NO_FILE):
            s = Settings()
            assert s.app.name == "StreamVerse"
            assert s.app.debug is True
            assert s.llm.provider == "anthropic"

    def test_sources_default(self) -> None:
        with patch("streamverse.core.config.CONFIG_FILE", _NO_FILE):
            s = Settings()
            assert s.sources == ["vidsrc_to", "vidsrc_pro", "superembed", "vidking"]
            # Each instance gets its own copy
            assert s.sources is not DEFAULT_SOURCES

    def test_nested_access(self) -> None:
        with patch("streamverse.core.config.CONFIG_FILE", _NO_FILE):
            s = Settings()
            assert s.app.version == "0.1.0"
            assert s.app.environment == "development"
            assert s.app.hostname == "localhost"
            assert s.app.allowed_origins == []
            assert s.logging.level == "info"
            assert s.server.host == "0.0.0.0"
            assert s.server.port == 8484
            assert s.llm.model == "claude-3-5-sonnet-20241022"
            assert s.tmdb.base_url == "https://api.themoviedb.org/3"
            assert s.playback.max_sessions == 500
            assert s.playback.ttl_seconds == 3600
            assert s.extraction.ffmpeg_location is None


class TestYamlFile:
    def test_values_loaded_from_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            "server:\n  port: 9000\nsources:\n  - vidking\n  - vidsrc_to\nllm:\n  provider: openai\n  model: gpt-4o-mini\n"
        )
        with patch("streamverse.core.config.CONFIG_FILE", config_file):
            s = Settings()
        assert s.server.port == 9000
        assert s.sources == ["vidking", "vidsrc_to"]
        assert s.llm.provider == "openai"
        assert s.llm.model == "gpt-4o-mini"

    def test_empty_sources_list_is_kept(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("sources: []\n")
        with patch("streamverse.core.config.CONFIG_FILE", config_file):
            s = Settings()
        assert s.sources == []

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("server:\n  port: 9000\n")
        monkeypatch.setenv("SERVER__PORT", "9100")
        with patch("streamverse.core.config.CONFIG_FILE", config_file):
            s = Settings()
        assert s.server.port == 9100

    def test_invalid_provider_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("llm:\n  provider: gemini\n")
        with patch("streamverse.core.config.CONFIG_FILE", config_file):
            with pytest.raises(ValidationError):
                Settings()

    @pytest.mark.parametrize("body", ["playback:\n  max_sessions: 0\n", "playback:\n  ttl_seconds: 0\n"])
    def test_non_positive_playback_limits_rejected(self, tmp_path: Path, body: str) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text(body)
        with patch("streamverse.core.config.CONFIG_FILE", config_file):
            with pytest.raises(ValidationError):
                Settings()


class TestSecretStrFields:
    def test_llm_api_key_is_secret(self) -> None:
        with patch("streamverse.core.config.CONFIG_FILE", _NO_FILE):
            s = Settings(llm={"provider": "anthropic", "api_key": "sk-test-key"})  # type: ignore[arg-type]
            assert isinstance(s.llm.api_key, SecretStr)
            assert s.llm.api_key.get_secret_value() == "sk-test-key"
            assert "sk-test-key" not in repr(s.llm.api_key)

    def test_tmdb_api_key_is_secret(self) -> None:
        with patch("streamverse.core.config.CONFIG_FILE", _NO_FILE):
            s = Settings(tmdb={"api_key": "tmdb-key-123"})  # type: ignore[arg-type]
            assert isinstance(s.tmdb.api_key, SecretStr)
            assert s.tmdb.api_key.get_secret_value() == "tmdb-key-123"

    def test_secret_fields_default_to_none(self) -> None:
        with patch("streamverse.core.config.CONFIG_FILE", _NO_FILE):
            s = Settings()
            assert s.llm.api_key is None
            assert s.tmdb.api_key is None


class TestLogLevelNormalization:
    def test_uppercase(self) -> None:
        c = LoggingConfig(level="INFO")  # type: ignore[arg-type]
        assert c.level == "info"

    def test_warn_to_warning(self) -> None:
        c = LoggingConfig(level="warn")  # type: ignore[arg-type]
        assert c.level == "warning"

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="verbose")  # type: ignore[arg-type]
