# -*- coding: utf-8 -*-
"""
Email Compatibility Service Setup

Provides ``configure_email_compatibility(config)`` and ``get_service()``
for wiring the compatibility engine into a host application.

The EmailCompatibilityService facade bundles:
    - SupportQueryService (statistics, filters, summaries, workarounds)
    - ComplianceChecker (template checks)
    - ProvenanceTracker (SHA-256 audit trail)
    - Running statistics and Prometheus metrics

Example:
    >>> from mailcompat.setup import configure_email_compatibility
    >>> service = configure_email_compatibility()
    >>> report = service.check_template([{"type": "text"}])
    >>> service.get_statistics().total_checks
    1
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from mailcompat import metrics
from mailcompat.compliance_checker import ComplianceChecker
from mailcompat.config import EmailCompatibilityConfig, get_config
from mailcompat.exceptions import EmailCompatibilityError, InvalidTemplateError
from mailcompat.models import (
    CompatibilityInfo,
    CompatibilityReport,
    CompatibilityServiceStatistics,
    EmailClient,
    FeatureCategory,
    FeatureQuery,
    SupportMatrixRow,
    SupportStatistics,
    SupportSummary,
    TemplateNode,
)
from mailcompat.provenance import ProvenanceTracker
from mailcompat.support_query import SupportQueryService

logger = logging.getLogger(__name__)

_singleton_lock = threading.Lock()
_singleton_instance: Optional["EmailCompatibilityService"] = None


def _error_type(exc: Exception) -> str:
    if isinstance(exc, InvalidTemplateError):
        return "invalid_template"
    if isinstance(exc, EmailCompatibilityError):
        return "compatibility"
    return "unknown"


# ===================================================================
# EmailCompatibilityService facade
# ===================================================================


class EmailCompatibilityService:
    """Unified facade over the email compatibility engine.

    Every template check updates running statistics, and records metrics
    and a provenance entry when those are enabled in the configuration.
    Failures are counted and re-raised unchanged.

    Attributes:
        config: EmailCompatibilityConfig instance.
        query_service: SupportQueryService instance.
        checker: ComplianceChecker instance.
        provenance: ProvenanceTracker instance.

    Example:
        >>> service = EmailCompatibilityService()
        >>> service.startup()
        >>> service.get_feature_statistics("display").score
        50
    """

    def __init__(
        self,
        config: Optional[EmailCompatibilityConfig] = None,
        database: Optional[Mapping[str, CompatibilityInfo]] = None,
    ) -> None:
        """Initialize the service facade.

        Args:
            config: Optional configuration. Uses global config if None.
            database: Optional knowledge base override.
        """
        self.config = config or get_config()
        self.query_service = SupportQueryService(database=database, config=self.config)
        self.checker = ComplianceChecker(
            query_service=self.query_service, config=self.config,
        )
        self.provenance = ProvenanceTracker()

        self._stats = CompatibilityServiceStatistics()
        self._stats_lock = threading.Lock()
        self._score_total = 0
        self._errors = 0
        self._started = False

        logger.info("EmailCompatibilityService facade created")

    # ------------------------------------------------------------------
    # Template checks
    # ------------------------------------------------------------------

    def check_template(
        self,
        nodes: Sequence[Union[TemplateNode, Mapping[str, Any]]],
    ) -> CompatibilityReport:
        """Check a template tree and record the outcome.

        Args:
            nodes: Top-level template nodes.

        Returns:
            CompatibilityReport from the checker.

        Raises:
            InvalidTemplateError: If a node cannot be parsed.
        """
        start = time.monotonic()
        try:
            report = self.checker.check_template(nodes)
        except Exception as exc:
            self._record_error(exc)
            raise

        issues = report.issues
        with self._stats_lock:
            self._stats.total_checks += 1
            self._stats.total_nodes_checked += report.nodes_checked
            self._stats.total_issues += report.total_issues
            self._stats.total_critical += len(issues.critical)
            self._stats.total_warnings += len(issues.warnings)
            self._stats.total_suggestions += len(issues.suggestions)
            if not report.safe_to_export:
                self._stats.blocked_exports += 1
            self._score_total += report.overall_score
            self._stats.avg_overall_score = round(
                self._score_total / self._stats.total_checks, 2,
            )
            check_number = self._stats.total_checks

        if self.config.enable_provenance:
            self.provenance.record(
                entity_type="template_check",
                entity_id=f"check-{check_number}",
                action="check",
                data_hash=report.provenance_hash,
            )

        if self.config.enable_metrics:
            metrics.record_check("safe" if report.safe_to_export else "blocked")
            metrics.record_issues("critical", len(issues.critical))
            metrics.record_issues("warning", len(issues.warnings))
            metrics.record_issues("suggestion", len(issues.suggestions))
            metrics.record_overall_score(report.overall_score)
            metrics.record_nodes_checked(report.nodes_checked)
            metrics.record_processing_duration(
                "check_template", time.monotonic() - start,
            )

        return report

    # ------------------------------------------------------------------
    # Feature queries
    # ------------------------------------------------------------------

    def get_feature_statistics(self, feature: str) -> Optional[SupportStatistics]:
        """Support statistics for one feature, or None if untracked."""
        self._record_query("statistics")
        return self.query_service.compute_statistics(feature)

    def query_features(
        self,
        query: Optional[FeatureQuery] = None,
        **filters: Any,
    ) -> List[CompatibilityInfo]:
        """Filtered feature lookup; see SupportQueryService.query_features."""
        self._record_query("filter")
        return self.query_service.query_features(query, **filters)

    def get_support_summary(self, feature: str) -> Optional[SupportSummary]:
        self._record_query("summary")
        return self.query_service.get_support_summary(feature)

    def get_workarounds(
        self,
        feature: str,
        target: Optional[Union[EmailClient, str]] = None,
    ) -> List[str]:
        self._record_query("workarounds")
        return self.query_service.get_workarounds(feature, target)

    def build_support_matrix(
        self,
        category: Optional[Union[FeatureCategory, str]] = None,
        search: Optional[str] = None,
    ) -> List[SupportMatrixRow]:
        self._record_query("matrix")
        return self.query_service.build_support_matrix(category, search)

    # ------------------------------------------------------------------
    # Statistics and health
    # ------------------------------------------------------------------

    def get_statistics(self) -> CompatibilityServiceStatistics:
        """Snapshot of the running statistics."""
        with self._stats_lock:
            return self._stats.model_copy()

    def health_check(self) -> Dict[str, Any]:
        """Perform a health check on the service.

        Returns:
            Health status dict.
        """
        return {
            "status": "healthy" if self._started else "not_started",
            "service": "email-compatibility",
            "started": self._started,
            "features": len(self.query_service.get_all_features()),
            "provenance_entries": self.provenance.entry_count,
            "provenance_valid": self.provenance.verify_global_chain(),
        }

    def get_provenance(self) -> ProvenanceTracker:
        return self.provenance

    def get_metrics(self) -> Dict[str, Any]:
        """Get service metrics summary.

        Returns:
            Dictionary with service metric summaries.
        """
        stats = self.get_statistics()
        with self._stats_lock:
            errors = self._errors
        return {
            "metrics_enabled": self.config.enable_metrics,
            "started": self._started,
            "total_checks": stats.total_checks,
            "total_nodes_checked": stats.total_nodes_checked,
            "total_issues": stats.total_issues,
            "blocked_exports": stats.blocked_exports,
            "avg_overall_score": stats.avg_overall_score,
            "total_feature_queries": stats.total_feature_queries,
            "processing_errors": errors,
            "provenance_entries": self.provenance.entry_count,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def startup(self) -> None:
        """Validate configuration and start the service.

        Safe to call multiple times.

        Raises:
            ConfigurationError: If the configuration is inconsistent.
        """
        if self._started:
            logger.debug("EmailCompatibilityService already started; skipping")
            return

        logger.info("EmailCompatibilityService starting up...")
        self.config.validate()
        logging.getLogger("mailcompat").setLevel(self.config.log_level.upper())
        self._started = True
        logger.info("EmailCompatibilityService startup complete")

    def shutdown(self) -> None:
        """Stop the service. Statistics and provenance are kept."""
        if not self._started:
            return

        self._started = False
        logger.info("EmailCompatibilityService shut down")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _record_query(self, query_type: str) -> None:
        with self._stats_lock:
            self._stats.total_feature_queries += 1
        if self.config.enable_metrics:
            metrics.record_feature_query(query_type)

    def _record_error(self, exc: Exception) -> None:
        with self._stats_lock:
            self._errors += 1
        error_type = _error_type(exc)
        logger.warning("Template check failed (%s): %s", error_type, exc)
        if self.config.enable_metrics:
            metrics.record_processing_error(error_type)


# ===================================================================
# Thread-safe singleton access
# ===================================================================


def configure_email_compatibility(
    config: Optional[EmailCompatibilityConfig] = None,
) -> EmailCompatibilityService:
    """Create, start and install the process-wide service.

    Args:
        config: Optional configuration. Uses global config if None.

    Returns:
        The started EmailCompatibilityService.
    """
    global _singleton_instance

    service = EmailCompatibilityService(config=config)
    service.startup()

    with _singleton_lock:
        _singleton_instance = service

    logger.info("Email compatibility service configured")
    return service


def get_service() -> EmailCompatibilityService:
    """Get or create the singleton EmailCompatibilityService.

    Returns:
        The singleton service, started on first creation.
    """
    global _singleton_instance
    if _singleton_instance is None:
        with _singleton_lock:
            if _singleton_instance is None:
                service = EmailCompatibilityService()
                service.startup()
                _singleton_instance = service
    return _singleton_instance


def reset_service() -> None:
    """Drop the singleton (primarily for test teardown)."""
    global _singleton_instance
    with _singleton_lock:
        _singleton_instance = None


__all__ = [
    "EmailCompatibilityService",
    "configure_email_compatibility",
    "get_service",
    "reset_service",
]
