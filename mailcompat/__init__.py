# -*- coding: utf-8 -*-
"""
mailcompat: Email Client Compatibility Engine
==============================================

Knowledge base and analysis engine for how email clients support CSS and
HTML features. It supports:

- A static per-client support catalog for 19 email clients
- Support statistics (weighted score and level bucket) per feature
- Filtered feature queries, workaround lookup and platform summaries
- A feature-by-client support matrix
- Template checks producing severity-classified issues, an overall
  score and an export gate
- SHA-256 provenance chain tracking for checks
- 7 Prometheus metrics for observability
- Thread-safe configuration with MC_ env prefix

Key Components:
    - config: EmailCompatibilityConfig with MC_ env prefix
    - knowledge_base: Static compatibility dataset
    - support_query: Statistics and query engine
    - compliance_checker: Template checking engine
    - provenance: SHA-256 chain-hashed audit trail
    - metrics: Prometheus metrics
    - setup: EmailCompatibilityService facade

Example:
    >>> from mailcompat import ComplianceChecker
    >>> report = ComplianceChecker().check_template([
    ...     {"type": "container", "style": {"position": "absolute"}},
    ... ])
    >>> print(report.overall_score, report.safe_to_export)
    97 True
"""

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from mailcompat.config import (
    EmailCompatibilityConfig,
    get_config,
    set_config,
    reset_config,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------
from mailcompat.exceptions import (
    EmailCompatibilityError,
    InvalidTemplateError,
    ConfigurationError,
)

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
from mailcompat.models import (
    ALL_EMAIL_CLIENTS,
    EMAIL_CLIENT_LABELS,
    CLIENT_PLATFORM_MAP,
    PLATFORM_GROUP_CLIENTS,
    EmailClient,
    SupportLevel,
    FeatureCategory,
    LevelBucket,
    PlatformGroup,
    ClientPlatform,
    IssueSeverity,
    IssueCategory,
    ScoreRating,
    PropertySupport,
    CompatibilityInfo,
    SupportStatistics,
    FeatureSupport,
    FeatureQuery,
    SupportSummary,
    SupportMatrixRow,
    TemplateNode,
    CompatibilityIssue,
    IssuesBySeverity,
    CompatibilityReport,
    CompatibilityServiceStatistics,
)

# ---------------------------------------------------------------------------
# Knowledge base
# ---------------------------------------------------------------------------
from mailcompat.knowledge_base import (
    COMPATIBILITY_DATABASE,
    get_all_features,
    get_feature_info,
    get_features_by_category,
    has_feature,
)

# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------
from mailcompat.support_query import SupportQueryService, worst_support_level
from mailcompat.compliance_checker import ComplianceChecker

# ---------------------------------------------------------------------------
# Provenance and service facade
# ---------------------------------------------------------------------------
from mailcompat.provenance import ProvenanceTracker
from mailcompat.setup import (
    EmailCompatibilityService,
    configure_email_compatibility,
    get_service,
    reset_service,
)

__all__ = [
    "__version__",
    # Configuration
    "EmailCompatibilityConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Exceptions
    "EmailCompatibilityError",
    "InvalidTemplateError",
    "ConfigurationError",
    # Constants
    "ALL_EMAIL_CLIENTS",
    "EMAIL_CLIENT_LABELS",
    "CLIENT_PLATFORM_MAP",
    "PLATFORM_GROUP_CLIENTS",
    "COMPATIBILITY_DATABASE",
    # Enumerations
    "EmailClient",
    "SupportLevel",
    "FeatureCategory",
    "LevelBucket",
    "PlatformGroup",
    "ClientPlatform",
    "IssueSeverity",
    "IssueCategory",
    "ScoreRating",
    # Models
    "PropertySupport",
    "CompatibilityInfo",
    "SupportStatistics",
    "FeatureSupport",
    "FeatureQuery",
    "SupportSummary",
    "SupportMatrixRow",
    "TemplateNode",
    "CompatibilityIssue",
    "IssuesBySeverity",
    "CompatibilityReport",
    "CompatibilityServiceStatistics",
    # Knowledge base
    "get_all_features",
    "get_feature_info",
    "get_features_by_category",
    "has_feature",
    # Engines
    "SupportQueryService",
    "worst_support_level",
    "ComplianceChecker",
    # Provenance and service
    "ProvenanceTracker",
    "EmailCompatibilityService",
    "configure_email_compatibility",
    "get_service",
    "reset_service",
]
