# -*- coding: utf-8 -*-
"""
Email Compatibility Data Models

Pydantic v2 data models for the email-client compatibility engine. Defines
the closed email client catalog, support levels, knowledge-base entries,
derived support statistics, template nodes, and the severity-classified
issue report produced by the compliance checker.

Enumerations (9):
    - EmailClient, SupportLevel, FeatureCategory, LevelBucket,
      PlatformGroup, ClientPlatform, IssueSeverity, IssueCategory,
      ScoreRating

Knowledge base models (2):
    - PropertySupport, CompatibilityInfo

Query models (5):
    - SupportStatistics, FeatureSupport, FeatureQuery, SupportSummary,
      SupportMatrixRow

Checker models (4):
    - TemplateNode, CompatibilityIssue, IssuesBySeverity,
      CompatibilityReport

Service models (1):
    - CompatibilityServiceStatistics
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# =============================================================================
# Enumerations
# =============================================================================


class EmailClient(str, Enum):
    """Email clients tracked by the knowledge base.

    Covers desktop Outlook builds, webmail services, and mobile mail
    applications. The catalog is closed and never extended at runtime.
    """

    OUTLOOK_2016_WIN = "outlook-2016-win"
    OUTLOOK_2019_WIN = "outlook-2019-win"
    OUTLOOK_2021_WIN = "outlook-2021-win"
    OUTLOOK_365_WIN = "outlook-365-win"
    OUTLOOK_2016_MAC = "outlook-2016-mac"
    OUTLOOK_2019_MAC = "outlook-2019-mac"
    OUTLOOK_365_MAC = "outlook-365-mac"
    OUTLOOK_WEB = "outlook-web"
    GMAIL_WEBMAIL = "gmail-webmail"
    YAHOO_WEBMAIL = "yahoo-webmail"
    AOL_WEBMAIL = "aol-webmail"
    APPLE_MAIL_IOS = "apple-mail-ios"
    APPLE_MAIL_IPADOS = "apple-mail-ipados"
    APPLE_MAIL_MACOS = "apple-mail-macos"
    GMAIL_IOS = "gmail-ios"
    GMAIL_ANDROID = "gmail-android"
    SAMSUNG_EMAIL = "samsung-email"
    OUTLOOK_IOS = "outlook-ios"
    OUTLOOK_ANDROID = "outlook-android"


class SupportLevel(str, Enum):
    """How well an email client renders a feature."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"
    UNKNOWN = "unknown"


class FeatureCategory(str, Enum):
    """Human-readable grouping of tracked CSS features.

    POSITIONING is part of the catalog but the built-in knowledge base has
    no entries in it; positioning is covered by a checker rule instead.
    """

    LAYOUT = "Layout"
    TYPOGRAPHY = "Typography"
    COLORS = "Colors & Backgrounds"
    SPACING = "Spacing"
    BORDERS = "Borders"
    VISUAL_EFFECTS = "Visual Effects"
    POSITIONING = "Positioning"
    DISPLAY = "Display"
    IMAGES = "Images"
    OTHER = "Other"


class LevelBucket(str, Enum):
    """Coarse support bucket derived from a feature's support score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class PlatformGroup(str, Enum):
    """Named client sub-groups used for worst-case support summaries."""

    DESKTOP_MAIL_WINDOWS = "desktop-mail-windows"
    DESKTOP_MAIL_MAC = "desktop-mail-mac"
    WEBMAIL = "webmail"
    MOBILE_IOS = "mobile-ios"
    MOBILE_ANDROID = "mobile-android"


class ClientPlatform(str, Enum):
    """Platform family of each email client."""

    DESKTOP_OUTLOOK = "Desktop - Outlook"
    DESKTOP_OTHER = "Desktop - Other"
    WEBMAIL = "Webmail"
    MOBILE_IOS = "Mobile - iOS"
    MOBILE_ANDROID = "Mobile - Android"
    MOBILE_OTHER = "Mobile - Other"


class IssueSeverity(str, Enum):
    """Severity of a compatibility issue.

    CRITICAL issues block export; WARNING issues should be fixed but are
    not blocking; SUGGESTION issues are optional improvements.
    """

    CRITICAL = "critical"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class IssueCategory(str, Enum):
    """Area of the template an issue belongs to."""

    CSS = "css"
    HTML = "html"
    IMAGES = "images"
    ACCESSIBILITY = "accessibility"
    STRUCTURE = "structure"
    CONTENT = "content"


class ScoreRating(str, Enum):
    """Display band for an overall compatibility score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


# ---------------------------------------------------------------------------
# Catalog constants
# ---------------------------------------------------------------------------

#: Every email client in catalog order.
ALL_EMAIL_CLIENTS: Tuple[EmailClient, ...] = tuple(EmailClient)

#: Human-readable client labels.
EMAIL_CLIENT_LABELS: Dict[EmailClient, str] = {
    EmailClient.OUTLOOK_2016_WIN: "Outlook 2016 (Windows)",
    EmailClient.OUTLOOK_2019_WIN: "Outlook 2019 (Windows)",
    EmailClient.OUTLOOK_2021_WIN: "Outlook 2021 (Windows)",
    EmailClient.OUTLOOK_365_WIN: "Outlook 365 (Windows)",
    EmailClient.OUTLOOK_2016_MAC: "Outlook 2016 (Mac)",
    EmailClient.OUTLOOK_2019_MAC: "Outlook 2019 (Mac)",
    EmailClient.OUTLOOK_365_MAC: "Outlook 365 (Mac)",
    EmailClient.OUTLOOK_WEB: "Outlook.com",
    EmailClient.GMAIL_WEBMAIL: "Gmail (Webmail)",
    EmailClient.YAHOO_WEBMAIL: "Yahoo Mail",
    EmailClient.AOL_WEBMAIL: "AOL Mail",
    EmailClient.APPLE_MAIL_IOS: "Apple Mail (iOS)",
    EmailClient.APPLE_MAIL_IPADOS: "Apple Mail (iPadOS)",
    EmailClient.APPLE_MAIL_MACOS: "Apple Mail (macOS)",
    EmailClient.GMAIL_IOS: "Gmail (iOS)",
    EmailClient.GMAIL_ANDROID: "Gmail (Android)",
    EmailClient.SAMSUNG_EMAIL: "Samsung Email",
    EmailClient.OUTLOOK_IOS: "Outlook (iOS)",
    EmailClient.OUTLOOK_ANDROID: "Outlook (Android)",
}

#: Platform family of each client.
CLIENT_PLATFORM_MAP: Dict[EmailClient, ClientPlatform] = {
    EmailClient.OUTLOOK_2016_WIN: ClientPlatform.DESKTOP_OUTLOOK,
    EmailClient.OUTLOOK_2019_WIN: ClientPlatform.DESKTOP_OUTLOOK,
    EmailClient.OUTLOOK_2021_WIN: ClientPlatform.DESKTOP_OUTLOOK,
    EmailClient.OUTLOOK_365_WIN: ClientPlatform.DESKTOP_OUTLOOK,
    EmailClient.OUTLOOK_2016_MAC: ClientPlatform.DESKTOP_OUTLOOK,
    EmailClient.OUTLOOK_2019_MAC: ClientPlatform.DESKTOP_OUTLOOK,
    EmailClient.OUTLOOK_365_MAC: ClientPlatform.DESKTOP_OUTLOOK,
    EmailClient.OUTLOOK_WEB: ClientPlatform.WEBMAIL,
    EmailClient.GMAIL_WEBMAIL: ClientPlatform.WEBMAIL,
    EmailClient.YAHOO_WEBMAIL: ClientPlatform.WEBMAIL,
    EmailClient.AOL_WEBMAIL: ClientPlatform.WEBMAIL,
    EmailClient.APPLE_MAIL_IOS: ClientPlatform.MOBILE_IOS,
    EmailClient.APPLE_MAIL_IPADOS: ClientPlatform.MOBILE_IOS,
    EmailClient.APPLE_MAIL_MACOS: ClientPlatform.DESKTOP_OTHER,
    EmailClient.GMAIL_IOS: ClientPlatform.MOBILE_IOS,
    EmailClient.GMAIL_ANDROID: ClientPlatform.MOBILE_ANDROID,
    EmailClient.SAMSUNG_EMAIL: ClientPlatform.MOBILE_ANDROID,
    EmailClient.OUTLOOK_IOS: ClientPlatform.MOBILE_IOS,
    EmailClient.OUTLOOK_ANDROID: ClientPlatform.MOBILE_ANDROID,
}

#: Members of each worst-case summary group.
PLATFORM_GROUP_CLIENTS: Dict[PlatformGroup, Tuple[EmailClient, ...]] = {
    PlatformGroup.DESKTOP_MAIL_WINDOWS: (
        EmailClient.OUTLOOK_2016_WIN,
        EmailClient.OUTLOOK_2019_WIN,
        EmailClient.OUTLOOK_2021_WIN,
        EmailClient.OUTLOOK_365_WIN,
    ),
    PlatformGroup.DESKTOP_MAIL_MAC: (
        EmailClient.OUTLOOK_2016_MAC,
        EmailClient.OUTLOOK_2019_MAC,
        EmailClient.OUTLOOK_365_MAC,
    ),
    PlatformGroup.WEBMAIL: (
        EmailClient.OUTLOOK_WEB,
        EmailClient.GMAIL_WEBMAIL,
        EmailClient.YAHOO_WEBMAIL,
        EmailClient.AOL_WEBMAIL,
    ),
    PlatformGroup.MOBILE_IOS: (
        EmailClient.APPLE_MAIL_IOS,
        EmailClient.GMAIL_IOS,
        EmailClient.OUTLOOK_IOS,
    ),
    PlatformGroup.MOBILE_ANDROID: (
        EmailClient.GMAIL_ANDROID,
        EmailClient.SAMSUNG_EMAIL,
        EmailClient.OUTLOOK_ANDROID,
    ),
}

#: Worst-case precedence, worst first.
WORST_CASE_PRECEDENCE: Tuple[SupportLevel, ...] = (
    SupportLevel.NONE,
    SupportLevel.PARTIAL,
    SupportLevel.UNKNOWN,
    SupportLevel.FULL,
)

#: Lower bound (inclusive) of each score rating band, best first.
SCORE_RATING_BOUNDS: Tuple[Tuple[ScoreRating, int], ...] = (
    (ScoreRating.EXCELLENT, 90),
    (ScoreRating.GOOD, 70),
    (ScoreRating.FAIR, 50),
    (ScoreRating.POOR, 0),
)


# =============================================================================
# Knowledge base models
# =============================================================================


class PropertySupport(BaseModel):
    """Support record for one feature in one email client.

    Attributes:
        level: Support level in this client.
        version: Version information, e.g. "Supported since Outlook 2019".
        notes: Caveats or known issues.
        workarounds: Recommended workarounds or alternatives.
        reference: Link to documentation.
    """

    model_config = ConfigDict(frozen=True)

    level: SupportLevel
    version: Optional[str] = None
    notes: Tuple[str, ...] = ()
    workarounds: Tuple[str, ...] = ()
    reference: Optional[str] = None


class CompatibilityInfo(BaseModel):
    """Compatibility entry for one feature across the whole client catalog.

    The support map must cover every catalog client; a partial map is
    rejected at construction time.
    """

    model_config = ConfigDict(frozen=True)

    feature: str = Field(..., min_length=1, description="Unique feature name")
    category: FeatureCategory
    description: str = ""
    support: Dict[EmailClient, PropertySupport]
    general_notes: Tuple[str, ...] = ()
    safe_alternatives: Tuple[str, ...] = ()

    @field_validator("support")
    @classmethod
    def _covers_catalog(
        cls, v: Dict[EmailClient, PropertySupport],
    ) -> Dict[EmailClient, PropertySupport]:
        missing = [c.value for c in ALL_EMAIL_CLIENTS if c not in v]
        if missing:
            raise ValueError(
                f"support map is missing clients: {', '.join(missing)}"
            )
        return v


# =============================================================================
# Query models
# =============================================================================


class SupportStatistics(BaseModel):
    """Derived support statistics for one feature. Never persisted."""

    feature: str
    total_targets: int = Field(ge=0)
    full_count: int = Field(ge=0)
    partial_count: int = Field(ge=0)
    none_count: int = Field(ge=0)
    unknown_count: int = Field(ge=0)
    score: int = Field(ge=0, le=100)
    level_bucket: LevelBucket


class FeatureSupport(BaseModel):
    """A feature paired with its support record for one client."""

    feature: str
    support: PropertySupport


class FeatureQuery(BaseModel):
    """Composable feature filters. All set filters are ANDed."""

    model_config = ConfigDict(extra="forbid")

    category: Optional[FeatureCategory] = None
    min_score: Optional[int] = Field(default=None, ge=0, le=100)
    level_bucket: Optional[LevelBucket] = None
    target: Optional[EmailClient] = None
    search: Optional[str] = None


class SupportSummary(BaseModel):
    """Worst-case support level per platform group for one feature."""

    feature: str
    desktop_mail_windows: SupportLevel
    desktop_mail_mac: SupportLevel
    webmail: SupportLevel
    mobile_ios: SupportLevel
    mobile_android: SupportLevel

    def level_for(self, group: PlatformGroup) -> SupportLevel:
        """Return the summarised level for a platform group."""
        return getattr(self, PlatformGroup(group).value.replace("-", "_"))


class SupportMatrixRow(BaseModel):
    """One feature row of the client support matrix."""

    feature: str
    category: FeatureCategory
    levels: Dict[EmailClient, SupportLevel]
    statistics: SupportStatistics


# =============================================================================
# Checker models
# =============================================================================


class TemplateNode(BaseModel):
    """One node of the document tree handed in by the host application.

    ``style`` and ``attributes`` are disjoint maps: style checks read the
    former, image/accessibility/content checks read the latter. Both
    default to empty. The host's ``styles``/``props`` keys are accepted
    as aliases.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = ""
    type: str
    style: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("style", "styles"),
    )
    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("attributes", "props"),
    )
    children: List["TemplateNode"] = Field(default_factory=list)

    @field_validator("style", "attributes", "children", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any, info: Any) -> Any:
        if v is None:
            return [] if info.field_name == "children" else {}
        return v


class CompatibilityIssue(BaseModel):
    """A single compatibility, accessibility, or content problem."""

    id: str
    severity: IssueSeverity
    category: IssueCategory
    component_id: str
    component_type: str
    property: Optional[str] = None
    value: Optional[str] = None
    message: str
    details: Optional[str] = None
    auto_fix_available: bool = False
    suggested_fix: Optional[str] = None
    affected_clients: Optional[int] = None
    support_score: Optional[int] = None


class IssuesBySeverity(BaseModel):
    """Issues partitioned by severity."""

    critical: List[CompatibilityIssue] = Field(default_factory=list)
    warnings: List[CompatibilityIssue] = Field(default_factory=list)
    suggestions: List[CompatibilityIssue] = Field(default_factory=list)

    def all(self) -> List[CompatibilityIssue]:
        """Return every issue, critical first, then warnings, then suggestions."""
        return [*self.critical, *self.warnings, *self.suggestions]


class CompatibilityReport(BaseModel):
    """Aggregate result of checking a document tree.

    Attributes:
        overall_score: 0-100 score after severity penalties.
        total_issues: Number of issues across all severities.
        issues: Issues grouped by severity.
        components_checked: Number of top-level nodes passed in.
        nodes_checked: Number of nodes visited across the whole tree.
        timestamp: When the check ran (UTC).
        safe_to_export: True when there are no critical issues.
        provenance_hash: SHA-256 over the deterministic report content.
    """

    overall_score: int = Field(ge=0, le=100)
    total_issues: int = Field(ge=0)
    issues: IssuesBySeverity
    components_checked: int = Field(ge=0)
    nodes_checked: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=_utcnow)
    safe_to_export: bool
    provenance_hash: str = ""

    @property
    def rating(self) -> ScoreRating:
        """Display band for the overall score."""
        for rating, lower in SCORE_RATING_BOUNDS:
            if self.overall_score >= lower:
                return rating
        return ScoreRating.POOR

    def to_summary(self) -> Dict[str, Any]:
        """Compact summary used by batch and API callers."""
        return {
            "score": self.overall_score,
            "safe_to_export": self.safe_to_export,
            "issue_count": self.total_issues,
        }


# =============================================================================
# Service models
# =============================================================================


class CompatibilityServiceStatistics(BaseModel):
    """Running totals kept by the service facade."""

    total_checks: int = 0
    total_nodes_checked: int = 0
    total_issues: int = 0
    total_critical: int = 0
    total_warnings: int = 0
    total_suggestions: int = 0
    blocked_exports: int = 0
    avg_overall_score: float = 0.0
    total_feature_queries: int = 0


TemplateNode.model_rebuild()


__all__ = [
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
    # Constants
    "ALL_EMAIL_CLIENTS",
    "EMAIL_CLIENT_LABELS",
    "CLIENT_PLATFORM_MAP",
    "PLATFORM_GROUP_CLIENTS",
    "WORST_CASE_PRECEDENCE",
    "SCORE_RATING_BOUNDS",
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
]
