# -*- coding: utf-8 -*-
"""Tests for EmailCompatibilityConfig and the config singleton."""

import pytest

from mailcompat.config import (
    EmailCompatibilityConfig,
    get_config,
    reset_config,
    set_config,
)
from mailcompat.exceptions import ConfigurationError


class TestDefaults:
    """Tests for default values."""

    def test_default_thresholds(self):
        """Defaults match the documented scoring constants."""
        cfg = EmailCompatibilityConfig()

        assert cfg.critical_score_threshold == 50
        assert cfg.warning_score_threshold == 90
        assert cfg.high_support_threshold == 75
        assert cfg.medium_support_threshold == 40
        assert (cfg.critical_penalty, cfg.warning_penalty, cfg.suggestion_penalty) == (10, 3, 1)
        assert cfg.max_text_length == 1000

    def test_defaults_validate(self):
        """The default configuration is consistent."""
        EmailCompatibilityConfig().validate()


class TestFromEnv:
    """Tests for environment overrides."""

    def test_int_override(self, monkeypatch):
        """MC_ integers override defaults."""
        monkeypatch.setenv("MC_WARNING_PENALTY", "5")
        assert EmailCompatibilityConfig.from_env().warning_penalty == 5

    def test_bool_override(self, monkeypatch):
        """Booleans accept true/1/yes and treat anything else as false."""
        monkeypatch.setenv("MC_ENABLE_METRICS", "no")
        monkeypatch.setenv("MC_ENABLE_PROVENANCE", "YES")

        cfg = EmailCompatibilityConfig.from_env()
        assert cfg.enable_metrics is False
        assert cfg.enable_provenance is True

    def test_invalid_int_falls_back(self, monkeypatch, caplog):
        """Unparseable integers keep the default and log a warning."""
        monkeypatch.setenv("MC_MAX_TEXT_LENGTH", "lots")

        with caplog.at_level("WARNING", logger="mailcompat.config"):
            cfg = EmailCompatibilityConfig.from_env()

        assert cfg.max_text_length == 1000
        assert "MC_MAX_TEXT_LENGTH" in caplog.text

    def test_log_level(self, monkeypatch):
        """Strings are taken verbatim."""
        monkeypatch.setenv("MC_LOG_LEVEL", "DEBUG")
        assert EmailCompatibilityConfig.from_env().log_level == "DEBUG"


class TestValidate:
    """Tests for consistency checks."""

    @pytest.mark.parametrize("overrides", [
        {"critical_score_threshold": 90, "warning_score_threshold": 90},
        {"medium_support_threshold": 80, "high_support_threshold": 75},
        {"warning_score_threshold": 120},
        {"suggestion_penalty": -1},
        {"max_text_length": -5},
        {"log_level": "LOUD"},
    ])
    def test_inconsistent_values(self, overrides):
        """Inconsistent settings raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            EmailCompatibilityConfig(**overrides).validate()

    def test_error_context(self):
        """The offending value is reported in the context."""
        with pytest.raises(ConfigurationError) as exc_info:
            EmailCompatibilityConfig(safe_feature_min_score=-1).validate()
        assert exc_info.value.context == {"safe_feature_min_score": -1}


class TestSingleton:
    """Tests for the global config accessors."""

    def test_get_config_is_cached(self):
        """Repeated calls return the same object."""
        assert get_config() is get_config()

    def test_set_and_reset(self):
        """set_config installs, reset_config clears."""
        cfg = EmailCompatibilityConfig(max_text_length=10)
        set_config(cfg)
        assert get_config() is cfg

        reset_config()
        assert get_config() is not cfg
        assert get_config().max_text_length == 1000

    def test_env_read_on_first_access(self, monkeypatch):
        """The singleton is built from the environment."""
        monkeypatch.setenv("MC_CRITICAL_PENALTY", "20")
        reset_config()
        assert get_config().critical_penalty == 20
