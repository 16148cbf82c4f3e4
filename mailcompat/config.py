# -*- coding: utf-8 -*-
"""
Email Compatibility Engine Configuration

Centralized configuration for the compatibility engine covering:
- Compliance checker severity thresholds (critical / warning score cut-offs)
- Support level bucket thresholds (high / medium)
- Safe and problematic feature score defaults
- Overall score penalties per issue severity
- Content length limit for text blocks
- Metrics, provenance, and logging toggles

All settings can be overridden via environment variables with the
``MC_`` prefix (e.g. ``MC_CRITICAL_SCORE_THRESHOLD``).

Example:
    >>> from mailcompat.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.critical_score_threshold, cfg.warning_penalty)
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

from mailcompat.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "MC_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# EmailCompatibilityConfig
# ---------------------------------------------------------------------------


@dataclass
class EmailCompatibilityConfig:
    """Complete configuration for the email compatibility engine.

    Attributes:
        critical_score_threshold: Support scores below this raise CRITICAL issues.
        warning_score_threshold: Support scores below this (and at or above
            the critical threshold) raise WARNING issues.
        high_support_threshold: Minimum score for the ``high`` bucket.
        medium_support_threshold: Minimum score for the ``medium`` bucket.
        safe_feature_min_score: Default minimum score for safe features.
        problematic_feature_max_score: Default maximum score for problematic features.
        critical_penalty: Overall score deduction per critical issue.
        warning_penalty: Overall score deduction per warning.
        suggestion_penalty: Overall score deduction per suggestion.
        max_text_length: Text content longer than this raises a suggestion.
        enable_metrics: Whether the service records Prometheus metrics.
        enable_provenance: Whether the service records provenance entries.
        log_level: Logging level for the compatibility engine.
    """

    # -- Checker severity thresholds -----------------------------------------
    critical_score_threshold: int = 50
    warning_score_threshold: int = 90

    # -- Support buckets -----------------------------------------------------
    high_support_threshold: int = 75
    medium_support_threshold: int = 40

    # -- Feature query defaults ----------------------------------------------
    safe_feature_min_score: int = 75
    problematic_feature_max_score: int = 40

    # -- Overall score penalties ---------------------------------------------
    critical_penalty: int = 10
    warning_penalty: int = 3
    suggestion_penalty: int = 1

    # -- Content checks ------------------------------------------------------
    max_text_length: int = 1000

    # -- Observability -------------------------------------------------------
    enable_metrics: bool = True
    enable_provenance: bool = True

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check that thresholds and penalties are mutually consistent.

        Raises:
            ConfigurationError: If a threshold is outside 0-100, the
                critical threshold is not below the warning threshold,
                the medium bucket is not below the high bucket, or a
                penalty is negative, or the log level is not recognised.
        """
        scores = {
            "critical_score_threshold": self.critical_score_threshold,
            "warning_score_threshold": self.warning_score_threshold,
            "high_support_threshold": self.high_support_threshold,
            "medium_support_threshold": self.medium_support_threshold,
            "safe_feature_min_score": self.safe_feature_min_score,
            "problematic_feature_max_score": self.problematic_feature_max_score,
        }
        for name, value in scores.items():
            if not 0 <= value <= 100:
                raise ConfigurationError(
                    f"{name} must be between 0 and 100",
                    context={name: value},
                )

        if self.critical_score_threshold >= self.warning_score_threshold:
            raise ConfigurationError(
                "critical_score_threshold must be below warning_score_threshold",
                context={
                    "critical_score_threshold": self.critical_score_threshold,
                    "warning_score_threshold": self.warning_score_threshold,
                },
            )

        if self.medium_support_threshold >= self.high_support_threshold:
            raise ConfigurationError(
                "medium_support_threshold must be below high_support_threshold",
                context={
                    "medium_support_threshold": self.medium_support_threshold,
                    "high_support_threshold": self.high_support_threshold,
                },
            )

        for name in ("critical_penalty", "warning_penalty", "suggestion_penalty"):
            if getattr(self, name) < 0:
                raise ConfigurationError(
                    f"{name} must not be negative",
                    context={name: getattr(self, name)},
                )

        if self.max_text_length < 0:
            raise ConfigurationError(
                "max_text_length must not be negative",
                context={"max_text_length": self.max_text_length},
            )

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}",
                context={"log_level": self.log_level},
            )

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> EmailCompatibilityConfig:
        """Build an EmailCompatibilityConfig from environment variables.

        Every field can be overridden via ``MC_<FIELD_UPPER>``.
        Boolean values accept ``true/1/yes`` (case-insensitive).
        Integer values are parsed via ``int()``.

        Returns:
            Populated EmailCompatibilityConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _bool(name: str, default: bool) -> bool:
            val = _env(name)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        config = cls(
            # Checker severity thresholds
            critical_score_threshold=_int(
                "CRITICAL_SCORE_THRESHOLD", cls.critical_score_threshold,
            ),
            warning_score_threshold=_int(
                "WARNING_SCORE_THRESHOLD", cls.warning_score_threshold,
            ),
            # Support buckets
            high_support_threshold=_int(
                "HIGH_SUPPORT_THRESHOLD", cls.high_support_threshold,
            ),
            medium_support_threshold=_int(
                "MEDIUM_SUPPORT_THRESHOLD", cls.medium_support_threshold,
            ),
            # Feature query defaults
            safe_feature_min_score=_int(
                "SAFE_FEATURE_MIN_SCORE", cls.safe_feature_min_score,
            ),
            problematic_feature_max_score=_int(
                "PROBLEMATIC_FEATURE_MAX_SCORE",
                cls.problematic_feature_max_score,
            ),
            # Penalties
            critical_penalty=_int("CRITICAL_PENALTY", cls.critical_penalty),
            warning_penalty=_int("WARNING_PENALTY", cls.warning_penalty),
            suggestion_penalty=_int(
                "SUGGESTION_PENALTY", cls.suggestion_penalty,
            ),
            # Content checks
            max_text_length=_int("MAX_TEXT_LENGTH", cls.max_text_length),
            # Observability
            enable_metrics=_bool("ENABLE_METRICS", cls.enable_metrics),
            enable_provenance=_bool(
                "ENABLE_PROVENANCE", cls.enable_provenance,
            ),
            # Logging
            log_level=_str("LOG_LEVEL", cls.log_level),
        )

        logger.info(
            "EmailCompatibilityConfig loaded: severity=[critical<%d warning<%d], "
            "buckets=[high>=%d medium>=%d], penalties=[C=%d W=%d S=%d], "
            "max_text=%d, metrics=%s, provenance=%s",
            config.critical_score_threshold,
            config.warning_score_threshold,
            config.high_support_threshold,
            config.medium_support_threshold,
            config.critical_penalty,
            config.warning_penalty,
            config.suggestion_penalty,
            config.max_text_length,
            config.enable_metrics,
            config.enable_provenance,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[EmailCompatibilityConfig] = None
_config_lock = threading.Lock()


def get_config() -> EmailCompatibilityConfig:
    """Return the singleton EmailCompatibilityConfig, creating from env if needed.

    Uses double-checked locking for thread safety with minimal
    contention on the hot path.

    Returns:
        EmailCompatibilityConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = EmailCompatibilityConfig.from_env()
    return _config_instance


def set_config(config: EmailCompatibilityConfig) -> None:
    """Replace the singleton EmailCompatibilityConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("EmailCompatibilityConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "EmailCompatibilityConfig",
    "get_config",
    "set_config",
    "reset_config",
]
