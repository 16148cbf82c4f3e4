# -*- coding: utf-8 -*-
"""Tests for SupportQueryService.

Covers:
- Support statistics (counts, weighted score, level bucket)
- Safe / problematic feature lists
- Per-client lookups and workarounds
- Filtered queries, platform summaries and the support matrix
"""

import pytest
from pydantic import ValidationError

from mailcompat.config import EmailCompatibilityConfig
from mailcompat.models import (
    ClientPlatform,
    EmailClient,
    FeatureCategory,
    FeatureQuery,
    LevelBucket,
    PlatformGroup,
    SupportLevel,
)
from mailcompat.support_query import SupportQueryService, worst_support_level


# ==============================================================================
# Statistics
# ==============================================================================

class TestComputeStatistics:
    """Tests for per-feature statistics."""

    def test_border_radius(self, query_service):
        """15 of 19 clients round corners: score 79, high bucket."""
        stats = query_service.compute_statistics("border-radius")

        assert stats.total_targets == 19
        assert stats.full_count == 15
        assert stats.none_count == 4
        assert stats.score == 79
        assert stats.level_bucket == LevelBucket.HIGH

    def test_box_shadow_partial_weighting(self, query_service):
        """Partial support counts half."""
        stats = query_service.compute_statistics("box-shadow")

        assert stats.full_count == 14
        assert stats.partial_count == 1
        assert stats.score == 76

    def test_display_is_medium(self, query_service):
        """All-partial display scores exactly 50."""
        stats = query_service.compute_statistics("display")

        assert stats.partial_count == 19
        assert stats.score == 50
        assert stats.level_bucket == LevelBucket.MEDIUM

    def test_full_support_scores_100(self, query_service):
        """Universally supported features score 100."""
        stats = query_service.compute_statistics("color")
        assert stats.score == 100
        assert stats.level_bucket == LevelBucket.HIGH

    def test_unknown_feature(self, query_service):
        """Untracked features yield None."""
        assert query_service.compute_statistics("unknown-feature") is None

    def test_counts_sum_to_total(self, query_service):
        """Level counts always add up to the number of clients."""
        for feature in query_service.get_all_features():
            stats = query_service.compute_statistics(feature)
            counts = (
                stats.full_count + stats.partial_count
                + stats.none_count + stats.unknown_count
            )
            assert counts == stats.total_targets
            assert 0 <= stats.score <= 100

    def test_all_unknown_bucket(self, custom_query_service):
        """A feature nobody has tested is in the unknown bucket."""
        stats = custom_query_service.compute_statistics("mystery")

        assert stats.unknown_count == 19
        assert stats.score == 0
        assert stats.level_bucket == LevelBucket.UNKNOWN

    def test_unknown_excluded_from_denominator(self, custom_query_service):
        """One full and one none among known clients gives 50."""
        stats = custom_query_service.compute_statistics("half-known")

        assert stats.unknown_count == 17
        assert stats.score == 50
        assert stats.level_bucket == LevelBucket.MEDIUM

    def test_bucket_follows_config(self):
        """Bucket thresholds come from configuration."""
        cfg = EmailCompatibilityConfig(high_support_threshold=80)
        service = SupportQueryService(config=cfg)

        assert service.compute_statistics("border-radius").level_bucket == LevelBucket.MEDIUM


# ==============================================================================
# Safe / problematic
# ==============================================================================

class TestFeatureLists:
    """Tests for score-threshold feature lists."""

    def test_safe_features_sorted_descending(self, query_service):
        """Safe features meet the threshold and are best first."""
        safe = query_service.get_safe_features()
        scores = [s.score for s in safe]

        assert scores == sorted(scores, reverse=True)
        assert all(score >= 75 for score in scores)
        names = {s.feature for s in safe}
        assert "color" in names
        assert "display" not in names

    def test_problematic_features_sorted_ascending(self, query_service):
        """Problematic features are worst first."""
        problematic = query_service.get_problematic_features(max_score=60)

        assert [s.feature for s in problematic] == ["display", "transform"]

    def test_no_problematic_features_by_default(self, query_service):
        """The built-in dataset has nothing scoring 40 or below."""
        assert query_service.get_problematic_features() == []


# ==============================================================================
# Client lookups and workarounds
# ==============================================================================

class TestClientLookups:
    """Tests for per-client queries."""

    def test_support_for_target(self, query_service):
        """Plain string identifiers are accepted."""
        record = query_service.get_support_for_target("border-radius", "outlook-2019-win")
        assert record.level == SupportLevel.NONE

    def test_support_for_unknown_target(self, query_service):
        """Unknown clients and features yield None."""
        assert query_service.get_support_for_target("border-radius", "lotus-notes") is None
        assert query_service.get_support_for_target("unknown-feature", "gmail-ios") is None

    def test_target_supported_features(self, query_service):
        """Every feature is paired with the client's record."""
        pairs = query_service.get_target_supported_features(EmailClient.GMAIL_IOS)

        assert len(pairs) == len(query_service.get_all_features())
        assert query_service.get_target_supported_features("lotus-notes") == []

    def test_targets_by_platform(self, query_service):
        """Platform families resolve to their clients."""
        android = query_service.get_targets_by_platform(ClientPlatform.MOBILE_ANDROID)

        assert android == [
            EmailClient.GMAIL_ANDROID,
            EmailClient.SAMSUNG_EMAIL,
            EmailClient.OUTLOOK_ANDROID,
        ]
        assert query_service.get_targets_by_platform("Mobile - Other") == []

    def test_target_label(self, query_service):
        """Labels fall back to the raw identifier."""
        assert query_service.get_target_label("samsung-email") == "Samsung Email"
        assert query_service.get_target_label("lotus-notes") == "lotus-notes"


class TestWorkarounds:
    """Tests for workaround collection."""

    def test_unknown_feature(self, query_service):
        """Untracked features have no workarounds."""
        assert query_service.get_workarounds("unknown-feature") == []

    def test_target_workarounds_follow_alternatives(self, query_service):
        """Safe alternatives first, then the client's own workarounds."""
        assert query_service.get_workarounds("margin", "outlook-2016-win") == [
            "Use padding instead",
            "Use empty <td> for spacing",
            "Use spacer tables/cells",
        ]

    def test_all_clients_deduplicated(self, custom_query_service):
        """Workarounds repeated across clients appear once."""
        workarounds = custom_query_service.get_workarounds("patchy")

        assert workarounds == ["Use a table", "Inline it"]
        assert len(workarounds) == len(set(workarounds))

    def test_no_duplicates_in_dataset(self, query_service):
        """No feature returns a duplicated workaround."""
        for feature in query_service.get_all_features():
            workarounds = query_service.get_workarounds(feature)
            assert len(workarounds) == len(set(workarounds))

    def test_position_has_no_workarounds(self, query_service):
        """Positioning is not in the dataset, so the query layer knows nothing about it."""
        assert query_service.get_workarounds("position") == []
        assert query_service.get_workarounds("position", "outlook-2016-win") == []
        assert query_service.get_support_summary("position") is None
        assert query_service.query_features(category=FeatureCategory.POSITIONING) == []


# ==============================================================================
# Queries, summaries and matrix
# ==============================================================================

class TestQueryFeatures:
    """Tests for filtered queries."""

    def test_no_filters_returns_everything(self, query_service):
        """An empty query matches every feature."""
        assert len(query_service.query_features()) == len(query_service.get_all_features())

    def test_category_filter(self, query_service):
        """Category strings are accepted."""
        results = query_service.query_features(category="Borders")
        assert {i.feature for i in results} == {"border-radius", "border"}

    def test_filters_are_anded(self, query_service):
        """Search and bucket combine."""
        results = query_service.query_features(
            FeatureQuery(search="SHADOW", level_bucket=LevelBucket.MEDIUM),
        )
        assert [i.feature for i in results] == ["text-shadow"]

    def test_min_score(self, query_service):
        """Minimum score excludes weaker features."""
        results = query_service.query_features(min_score=100)
        assert "border-radius" not in {i.feature for i in results}
        assert "color" in {i.feature for i in results}

    def test_target_excludes_unsupported(self, query_service):
        """Features a client does not support at all are dropped."""
        results = query_service.query_features(target="outlook-2016-win")
        names = {i.feature for i in results}

        assert "border-radius" not in names
        assert "margin" in names

    @pytest.mark.parametrize("filters", [
        {"target": "lotus-notes"},
        {"category": "Animations"},
        {"level_bucket": "excellent"},
        {"category": "Borders", "target": "lotus-notes"},
    ])
    def test_unrecognised_filter_values_match_nothing(self, query_service, filters):
        """Values outside the catalogs return an empty list instead of raising."""
        assert query_service.query_features(**filters) == []

    def test_enum_members_accepted_as_filters(self, query_service):
        """Enum members resolve the same as their string values."""
        by_member = query_service.query_features(
            category=FeatureCategory.BORDERS, target=EmailClient.GMAIL_IOS,
        )
        by_value = query_service.query_features(category="Borders", target="gmail-ios")

        assert [i.feature for i in by_member] == [i.feature for i in by_value]
        assert [i.feature for i in by_member] == ["border-radius", "border"]

    def test_unknown_filter_rejected(self, query_service):
        """Misspelled filter names fail validation."""
        with pytest.raises(ValidationError):
            query_service.query_features(catgory="Borders")


class TestSummaries:
    """Tests for worst-case summaries and the matrix."""

    def test_worst_support_level(self):
        """NONE beats PARTIAL beats UNKNOWN beats FULL."""
        assert worst_support_level([SupportLevel.FULL, SupportLevel.UNKNOWN]) == SupportLevel.UNKNOWN
        assert worst_support_level([SupportLevel.UNKNOWN, SupportLevel.PARTIAL]) == SupportLevel.PARTIAL
        assert worst_support_level([SupportLevel.PARTIAL, SupportLevel.NONE]) == SupportLevel.NONE
        assert worst_support_level([]) == SupportLevel.FULL

    def test_border_radius_summary(self, query_service):
        """Windows Outlook is the weak platform for rounded corners."""
        summary = query_service.get_support_summary("border-radius")

        assert summary.desktop_mail_windows == SupportLevel.NONE
        assert summary.desktop_mail_mac == SupportLevel.FULL
        assert summary.webmail == SupportLevel.FULL
        assert summary.level_for(PlatformGroup.MOBILE_IOS) == SupportLevel.FULL

    def test_summary_unknown_feature(self, query_service):
        """Untracked features have no summary."""
        assert query_service.get_support_summary("unknown-feature") is None

    def test_support_matrix(self, query_service):
        """Matrix rows carry per-client levels and statistics."""
        rows = query_service.build_support_matrix(category=FeatureCategory.BORDERS)

        assert [row.feature for row in rows] == ["border-radius", "border"]
        assert len(rows[0].levels) == 19
        assert rows[0].levels[EmailClient.OUTLOOK_365_WIN] == SupportLevel.NONE
        assert rows[0].statistics.score == 79

    def test_support_matrix_search(self, query_service):
        """Matrix search filters by feature name."""
        rows = query_service.build_support_matrix(search="font")
        assert {row.feature for row in rows} == {"font-family", "font-size", "font-weight"}
