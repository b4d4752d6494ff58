"""Tests for inkline.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the INKLINE_ prefix.
- The OPENAI_API_KEY credential and its startup requirement.
- Automatic upload directory creation on initialisation.
- Pydantic validation constraints (port range, positive limits, literals).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from inkline.core.config import ConfigurationError, InklineConfig


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable that could leak into a default-value test."""
    for name in (
        "OPENAI_API_KEY",
        "INKLINE_OPENAI_API_KEY",
        "INKLINE_MAX_UPLOAD_BYTES",
        "INKLINE_COMPRESSION_POLICY",
        "INKLINE_STRICT_MEDIA_TYPES",
        "INKLINE_REQUEST_TIMEOUT_SECONDS",
        "INKLINE_SERVER_PORT",
        "INKLINE_GENERATION_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Verify that InklineConfig provides sensible defaults."""

    def test_default_upload_limit_is_8mb(self, clean_env, temp_dir: Path):
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.max_upload_bytes == 8 * 1024 * 1024

    def test_default_policy_is_adaptive(self, clean_env, temp_dir: Path):
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.compression_policy == "adaptive"
        assert cfg.strict_media_types is True

    def test_default_timeout_is_two_minutes(self, clean_env, temp_dir: Path):
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.request_timeout_seconds == 120

    def test_default_model(self, clean_env, temp_dir: Path):
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.generation_model == "gpt-image-1"

    def test_default_api_key_is_unset(self, clean_env, temp_dir: Path):
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.openai_api_key is None


class TestConfigEnvironment:
    """Verify environment variable loading."""

    def test_prefixed_override(self, clean_env, temp_dir: Path):
        clean_env.setenv("INKLINE_MAX_UPLOAD_BYTES", "1024")
        clean_env.setenv("INKLINE_COMPRESSION_POLICY", "fixed")
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.max_upload_bytes == 1024
        assert cfg.compression_policy == "fixed"

    def test_openai_api_key_from_environment(self, clean_env, temp_dir: Path):
        clean_env.setenv("OPENAI_API_KEY", "sk-from-env")
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.require_api_key() == "sk-from-env"

    def test_prefixed_api_key_is_accepted(self, clean_env, temp_dir: Path):
        clean_env.setenv("INKLINE_OPENAI_API_KEY", "sk-prefixed")
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        assert cfg.require_api_key() == "sk-prefixed"

    def test_api_key_is_not_echoed(self, temp_dir: Path):
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir), openai_api_key="sk-secret")
        assert "sk-secret" not in repr(cfg)

    def test_missing_api_key_raises(self, clean_env, temp_dir: Path):
        cfg = InklineConfig(_env_file=None, upload_dir=str(temp_dir))
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            cfg.require_api_key()


class TestConfigDirectoryCreation:
    """Verify that InklineConfig creates the upload directory."""

    def test_upload_dir_created(self, test_config: InklineConfig):
        assert test_config.upload_dir.exists()
        assert test_config.upload_dir.is_dir()

    def test_creates_nested_directories(self, temp_dir: Path):
        deep = temp_dir / "a" / "b" / "uploads"
        cfg = InklineConfig(_env_file=None, upload_dir=str(deep))
        assert cfg.upload_dir.exists()


class TestConfigValidation:
    """Verify Pydantic validation constraints on config fields."""

    def test_invalid_port_too_low(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            InklineConfig(_env_file=None, upload_dir=str(temp_dir), server_port=80)

    def test_non_positive_upload_limit(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            InklineConfig(_env_file=None, upload_dir=str(temp_dir), max_upload_bytes=0)

    def test_unknown_policy(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            InklineConfig(_env_file=None, upload_dir=str(temp_dir), compression_policy="lossless")

    def test_non_positive_timeout(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            InklineConfig(_env_file=None, upload_dir=str(temp_dir), request_timeout_seconds=0)
