# -*- coding: utf-8 -*-
"""
Prometheus Metrics - Email Compatibility Engine

7 Prometheus metrics for compatibility service monitoring.

Metrics:
    1. mc_checks_total (Counter, labels: outcome)
    2. mc_issues_found_total (Counter, labels: severity)
    3. mc_overall_score (Histogram, buckets: 0-100)
    4. mc_processing_duration_seconds (Histogram, labels: operation)
    5. mc_nodes_checked_total (Counter)
    6. mc_feature_queries_total (Counter, labels: query_type)
    7. mc_processing_errors_total (Counter, labels: error_type)
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Template checks by export outcome
mc_checks_total = Counter(
    "mc_checks_total",
    "Total template compatibility checks",
    labelnames=["outcome"],
)

# 2. Issues found by severity
mc_issues_found_total = Counter(
    "mc_issues_found_total",
    "Total compatibility issues found",
    labelnames=["severity"],
)

# 3. Overall compatibility score distribution
mc_overall_score = Histogram(
    "mc_overall_score",
    "Overall template compatibility score",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)

# 4. Processing duration by operation
mc_processing_duration_seconds = Histogram(
    "mc_processing_duration_seconds",
    "Compatibility engine processing duration in seconds",
    labelnames=["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# 5. Template nodes checked
mc_nodes_checked_total = Counter(
    "mc_nodes_checked_total",
    "Total template nodes checked",
)

# 6. Feature queries by type
mc_feature_queries_total = Counter(
    "mc_feature_queries_total",
    "Total feature support queries",
    labelnames=["query_type"],
)

# 7. Processing errors by type
mc_processing_errors_total = Counter(
    "mc_processing_errors_total",
    "Total compatibility engine processing errors",
    labelnames=["error_type"],
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_check(outcome: str) -> None:
    """Record a completed template check.

    Args:
        outcome: Export gate outcome (safe, blocked).
    """
    mc_checks_total.labels(outcome=outcome).inc()


def record_issues(severity: str, count: int) -> None:
    """Record issues found for one severity.

    Args:
        severity: Issue severity (critical, warning, suggestion).
        count: Number of issues; zero is ignored.
    """
    if count <= 0:
        return
    mc_issues_found_total.labels(severity=severity).inc(count)


def record_overall_score(score: float) -> None:
    """Record an overall compatibility score observation (0 - 100)."""
    mc_overall_score.observe(score)


def record_processing_duration(operation: str, duration: float) -> None:
    """Record processing duration for an operation.

    Args:
        operation: Operation type (check_template, query_features, etc.).
        duration: Duration in seconds.
    """
    mc_processing_duration_seconds.labels(operation=operation).observe(duration)


def record_nodes_checked(count: int) -> None:
    if count > 0:
        mc_nodes_checked_total.inc(count)


def record_feature_query(query_type: str) -> None:
    """Record a feature support query.

    Args:
        query_type: Query kind (statistics, filter, summary, workarounds, matrix).
    """
    mc_feature_queries_total.labels(query_type=query_type).inc()


def record_processing_error(error_type: str) -> None:
    """Record a processing error event.

    Args:
        error_type: Error classification (invalid_template, unknown, ...).
    """
    mc_processing_errors_total.labels(error_type=error_type).inc()


__all__ = [
    # Metric objects
    "mc_checks_total",
    "mc_issues_found_total",
    "mc_overall_score",
    "mc_processing_duration_seconds",
    "mc_nodes_checked_total",
    "mc_feature_queries_total",
    "mc_processing_errors_total",
    # Helpers
    "record_check",
    "record_issues",
    "record_overall_score",
    "record_processing_duration",
    "record_nodes_checked",
    "record_feature_query",
    "record_processing_error",
]
