# -*- coding: utf-8 -*-
"""Tests for mailcompat data models."""

import pytest
from pydantic import ValidationError

from mailcompat.models import (
    ALL_EMAIL_CLIENTS,
    CLIENT_PLATFORM_MAP,
    EMAIL_CLIENT_LABELS,
    PLATFORM_GROUP_CLIENTS,
    WORST_CASE_PRECEDENCE,
    CompatibilityIssue,
    CompatibilityReport,
    EmailClient,
    IssueCategory,
    IssuesBySeverity,
    IssueSeverity,
    PlatformGroup,
    ScoreRating,
    SupportLevel,
    SupportStatistics,
    TemplateNode,
)


def _issue(issue_id, severity):
    return CompatibilityIssue(
        id=issue_id,
        severity=severity,
        category=IssueCategory.CSS,
        component_id="c1",
        component_type="container",
        message="msg",
    )


def _report(score, critical=0):
    issues = IssuesBySeverity(
        critical=[_issue(f"issue-{n}", IssueSeverity.CRITICAL) for n in range(critical)],
    )
    return CompatibilityReport(
        overall_score=score,
        total_issues=critical,
        issues=issues,
        components_checked=1,
        safe_to_export=critical == 0,
    )


class TestCatalog:
    """Tests for the client catalog constants."""

    def test_catalog_is_complete(self):
        """Every client has a label and a platform."""
        assert len(ALL_EMAIL_CLIENTS) == 19
        assert set(EMAIL_CLIENT_LABELS) == set(ALL_EMAIL_CLIENTS)
        assert set(CLIENT_PLATFORM_MAP) == set(ALL_EMAIL_CLIENTS)

    def test_platform_groups(self):
        """Group membership matches the summary definitions."""
        assert len(PLATFORM_GROUP_CLIENTS[PlatformGroup.DESKTOP_MAIL_WINDOWS]) == 4
        assert len(PLATFORM_GROUP_CLIENTS[PlatformGroup.DESKTOP_MAIL_MAC]) == 3
        assert EmailClient.AOL_WEBMAIL in PLATFORM_GROUP_CLIENTS[PlatformGroup.WEBMAIL]
        assert EmailClient.APPLE_MAIL_IPADOS not in PLATFORM_GROUP_CLIENTS[PlatformGroup.MOBILE_IOS]

    def test_precedence_worst_first(self):
        """NONE is the worst level, FULL the best."""
        assert WORST_CASE_PRECEDENCE[0] == SupportLevel.NONE
        assert WORST_CASE_PRECEDENCE[-1] == SupportLevel.FULL

    def test_client_values(self):
        """Client identifiers are stable strings."""
        assert EmailClient("outlook-2016-win") is EmailClient.OUTLOOK_2016_WIN
        assert EmailClient.GMAIL_WEBMAIL == "gmail-webmail"


class TestTemplateNode:
    """Tests for template node parsing."""

    def test_defaults(self):
        """Only the type is required."""
        node = TemplateNode(type="text")

        assert node.id == ""
        assert node.style == {}
        assert node.attributes == {}
        assert node.children == []

    def test_aliases(self):
        """Host ``styles``/``props`` keys map to style/attributes."""
        node = TemplateNode.model_validate({
            "type": "image",
            "styles": {"width": "100px"},
            "props": {"alt": "x"},
        })

        assert node.style == {"width": "100px"}
        assert node.attributes == {"alt": "x"}

    def test_nested_children(self):
        """Children are parsed recursively."""
        node = TemplateNode.model_validate({
            "type": "container",
            "children": [{"type": "text", "children": [{"type": "text"}]}],
        })
        assert node.children[0].children[0].type == "text"

    def test_unknown_keys_ignored(self):
        """Extra host fields do not break parsing."""
        node = TemplateNode.model_validate({"type": "text", "locked": True})
        assert node.type == "text"

    def test_type_required(self):
        """A node without a type is invalid."""
        with pytest.raises(ValidationError):
            TemplateNode.model_validate({"id": "x"})


class TestStatistics:
    """Tests for statistics validation."""

    def test_score_bounds(self):
        """Scores above 100 are rejected."""
        with pytest.raises(ValidationError):
            SupportStatistics(
                feature="x", total_targets=1, full_count=1, partial_count=0,
                none_count=0, unknown_count=0, score=101, level_bucket="high",
            )


class TestReport:
    """Tests for report helpers."""

    @pytest.mark.parametrize("score,rating", [
        (100, ScoreRating.EXCELLENT),
        (90, ScoreRating.EXCELLENT),
        (89, ScoreRating.GOOD),
        (70, ScoreRating.GOOD),
        (50, ScoreRating.FAIR),
        (49, ScoreRating.POOR),
        (0, ScoreRating.POOR),
    ])
    def test_rating_bands(self, score, rating):
        """Score bands map to display ratings."""
        assert _report(score).rating == rating

    def test_to_summary(self):
        """Summary carries score, gate and issue count."""
        assert _report(80, critical=2).to_summary() == {
            "score": 80,
            "safe_to_export": False,
            "issue_count": 2,
        }

    def test_all_orders_by_severity(self):
        """Flattened issues run critical, warnings, suggestions."""
        issues = IssuesBySeverity(
            critical=[_issue("issue-3", IssueSeverity.CRITICAL)],
            warnings=[_issue("issue-1", IssueSeverity.WARNING)],
            suggestions=[_issue("issue-2", IssueSeverity.SUGGESTION)],
        )
        assert [i.id for i in issues.all()] == ["issue-3", "issue-1", "issue-2"]

    def test_json_dump(self):
        """Reports serialize to JSON-safe dicts."""
        data = _report(100).model_dump(mode="json")

        assert isinstance(data["timestamp"], str)
        assert data["issues"] == {"critical": [], "warnings": [], "suggestions": []}
