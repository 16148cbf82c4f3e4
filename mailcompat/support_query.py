# -*- coding: utf-8 -*-
"""
Support Query Service - derived statistics and multi-dimensional queries
over the email client compatibility knowledge base.

Computes per-feature support statistics (weighted score plus a coarse
level bucket), answers filtered feature queries (category, score, bucket,
client, name search), collects workarounds, and summarises worst-case
support across named platform groups.

Scoring:
    score = round_half_up(100 * (full * 1.0 + partial * 0.5)
                          / max(total - unknown, 1))

    Clients with an UNKNOWN level are excluded from the denominator;
    clients with NONE stay in it and pull the score down.

Nothing is cached: every call recomputes from the knowledge base.

Example:
    >>> from mailcompat.support_query import SupportQueryService
    >>> service = SupportQueryService()
    >>> stats = service.compute_statistics("border-radius")
    >>> print(stats.score, stats.level_bucket)
    79 LevelBucket.HIGH
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from mailcompat.config import EmailCompatibilityConfig, get_config
from mailcompat.knowledge_base import COMPATIBILITY_DATABASE
from mailcompat.models import (
    ALL_EMAIL_CLIENTS,
    CLIENT_PLATFORM_MAP,
    EMAIL_CLIENT_LABELS,
    PLATFORM_GROUP_CLIENTS,
    WORST_CASE_PRECEDENCE,
    ClientPlatform,
    CompatibilityInfo,
    EmailClient,
    FeatureCategory,
    FeatureQuery,
    FeatureSupport,
    LevelBucket,
    PropertySupport,
    SupportLevel,
    SupportMatrixRow,
    SupportStatistics,
    SupportSummary,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SupportQueryService",
    "worst_support_level",
]

_PRECEDENCE_RANK = {level: rank for rank, level in enumerate(WORST_CASE_PRECEDENCE)}

# Keyword filters resolved against their enumeration before building a FeatureQuery
_ENUM_FILTERS: Dict[str, Type[Enum]] = {
    "category": FeatureCategory,
    "level_bucket": LevelBucket,
    "target": EmailClient,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def _coerce_enum(enum_cls: Type[Enum], value: Any) -> Optional[Enum]:
    """Return the member of ``enum_cls`` for ``value`` or None if it is not one."""
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _coerce_client(target: Union[EmailClient, str]) -> Optional[EmailClient]:
    """Return the catalog member for ``target`` or None if it is not one."""
    return _coerce_enum(EmailClient, target)


def _dedupe(items: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(items))


def _worse(current: SupportLevel, candidate: SupportLevel) -> SupportLevel:
    if _PRECEDENCE_RANK[candidate] < _PRECEDENCE_RANK[current]:
        return candidate
    return current


def worst_support_level(levels: Iterable[SupportLevel]) -> SupportLevel:
    """Fold levels to the single worst one.

    Precedence is ``WORST_CASE_PRECEDENCE``: NONE, then PARTIAL, then
    UNKNOWN, then FULL. An empty input folds to FULL.

    Args:
        levels: Support levels to combine.

    Returns:
        The worst level present.
    """
    return reduce(_worse, levels, SupportLevel.FULL)


# ---------------------------------------------------------------------------
# SupportQueryService
# ---------------------------------------------------------------------------


class SupportQueryService:
    """Statistics and query layer over the compatibility knowledge base.

    Stateless apart from its references to the (read-only) database and
    configuration, so one instance can be shared freely.

    Attributes:
        _database: Feature name to CompatibilityInfo mapping.
        _config: Engine configuration (bucket thresholds, query defaults).

    Example:
        >>> service = SupportQueryService()
        >>> service.get_workarounds("margin", "outlook-2016-win")
        ['Use padding instead', 'Use empty <td> for spacing', 'Use spacer tables/cells']
    """

    def __init__(
        self,
        database: Optional[Mapping[str, CompatibilityInfo]] = None,
        config: Optional[EmailCompatibilityConfig] = None,
    ) -> None:
        """Initialize SupportQueryService.

        Args:
            database: Knowledge base mapping. Defaults to the built-in dataset.
            config: Optional configuration. Uses global config if None.
        """
        self._database = COMPATIBILITY_DATABASE if database is None else database
        self._config = config or get_config()
        logger.info(
            "SupportQueryService initialized: features=%d, buckets=[high>=%d medium>=%d]",
            len(self._database),
            self._config.high_support_threshold,
            self._config.medium_support_threshold,
        )

    # ------------------------------------------------------------------
    # Direct lookups
    # ------------------------------------------------------------------

    def get_all_features(self) -> List[str]:
        """Return every feature name in the knowledge base."""
        return list(self._database)

    def has_feature(self, feature: str) -> bool:
        """Check whether a feature has compatibility data."""
        return feature in self._database

    def get_feature_info(self, feature: str) -> Optional[CompatibilityInfo]:
        """Return the knowledge base entry for a feature, or None."""
        return self._database.get(feature)

    def get_support_for_target(
        self,
        feature: str,
        target: Union[EmailClient, str],
    ) -> Optional[PropertySupport]:
        """Return one client's support record for a feature.

        Args:
            feature: Feature name (e.g. ``border-radius``).
            target: Email client identifier.

        Returns:
            PropertySupport, or None if the feature or client is unknown.
        """
        info = self.get_feature_info(feature)
        client = _coerce_client(target)
        if info is None or client is None:
            return None
        return info.support.get(client)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def compute_statistics(self, feature: str) -> Optional[SupportStatistics]:
        """Calculate support statistics for a feature.

        Counts clients per support level, derives the weighted score
        (full=1.0, partial=0.5) over the clients with known support,
        and assigns the level bucket.

        Args:
            feature: Feature name.

        Returns:
            SupportStatistics, or None if the feature is not tracked.
        """
        info = self.get_feature_info(feature)
        if info is None:
            return None

        counts = {level: 0 for level in SupportLevel}
        for record in info.support.values():
            counts[record.level] += 1

        total = len(info.support)
        full = counts[SupportLevel.FULL]
        partial = counts[SupportLevel.PARTIAL]
        unknown = counts[SupportLevel.UNKNOWN]

        denominator = max(total - unknown, 1)
        score = _round_half_up(100 * (full * 1.0 + partial * 0.5) / denominator)

        stats = SupportStatistics(
            feature=feature,
            total_targets=total,
            full_count=full,
            partial_count=partial,
            none_count=counts[SupportLevel.NONE],
            unknown_count=unknown,
            score=score,
            level_bucket=self._bucket(score, unknown == total),
        )
        logger.debug(
            "Statistics for %s: score=%d bucket=%s full=%d partial=%d none=%d unknown=%d",
            feature, score, stats.level_bucket.value, full, partial,
            stats.none_count, unknown,
        )
        return stats

    def _bucket(self, score: int, all_unknown: bool) -> LevelBucket:
        if all_unknown:
            return LevelBucket.UNKNOWN
        if score >= self._config.high_support_threshold:
            return LevelBucket.HIGH
        if score >= self._config.medium_support_threshold:
            return LevelBucket.MEDIUM
        return LevelBucket.LOW

    def _all_statistics(self) -> List[SupportStatistics]:
        return [
            stats for stats in map(self.compute_statistics, self._database)
            if stats is not None
        ]

    def get_safe_features(
        self, min_score: Optional[int] = None,
    ) -> List[SupportStatistics]:
        """Return features scoring at least ``min_score``, best first.

        Args:
            min_score: Minimum support score (default from config, 75).

        Returns:
            Statistics sorted by descending score.
        """
        if min_score is None:
            min_score = self._config.safe_feature_min_score
        safe = [s for s in self._all_statistics() if s.score >= min_score]
        return sorted(safe, key=lambda s: s.score, reverse=True)

    def get_problematic_features(
        self, max_score: Optional[int] = None,
    ) -> List[SupportStatistics]:
        """Return features scoring at most ``max_score``, worst first.

        Args:
            max_score: Maximum support score (default from config, 40).

        Returns:
            Statistics sorted by ascending score.
        """
        if max_score is None:
            max_score = self._config.problematic_feature_max_score
        problematic = [s for s in self._all_statistics() if s.score <= max_score]
        return sorted(problematic, key=lambda s: s.score)

    # ------------------------------------------------------------------
    # Client-oriented queries
    # ------------------------------------------------------------------

    def get_target_supported_features(
        self, target: Union[EmailClient, str],
    ) -> List[FeatureSupport]:
        """Pair every feature with its support record for one client.

        NONE-level records are included; callers filter as needed.
        """
        client = _coerce_client(target)
        if client is None:
            return []
        return [
            FeatureSupport(feature=feature, support=info.support[client])
            for feature, info in self._database.items()
            if client in info.support
        ]

    def get_workarounds(
        self,
        feature: str,
        target: Optional[Union[EmailClient, str]] = None,
    ) -> List[str]:
        """Collect workarounds for a feature.

        Safe alternatives come first, followed by the given client's
        workarounds, or every client's workarounds when no client is given.

        Args:
            feature: Feature name.
            target: Optional email client identifier.

        Returns:
            De-duplicated workaround strings; empty for unknown features.
        """
        info = self.get_feature_info(feature)
        if info is None:
            return []

        workarounds: List[str] = list(info.safe_alternatives)
        if target is not None:
            support = self.get_support_for_target(feature, target)
            if support is not None:
                workarounds.extend(support.workarounds)
        else:
            for support in info.support.values():
                workarounds.extend(support.workarounds)

        return _dedupe(workarounds)

    def get_targets_by_platform(
        self, platform: Union[ClientPlatform, str],
    ) -> List[EmailClient]:
        """Return the clients belonging to a platform family."""
        platform = ClientPlatform(platform)
        return [
            client for client in ALL_EMAIL_CLIENTS
            if CLIENT_PLATFORM_MAP[client] == platform
        ]

    def get_target_label(self, target: Union[EmailClient, str]) -> str:
        """Human-readable label for a client, or the raw identifier."""
        client = _coerce_client(target)
        if client is not None and client in EMAIL_CLIENT_LABELS:
            return EMAIL_CLIENT_LABELS[client]
        return target.value if isinstance(target, EmailClient) else str(target)

    # ------------------------------------------------------------------
    # Filtered queries
    # ------------------------------------------------------------------

    def query_features(
        self,
        query: Optional[FeatureQuery] = None,
        **filters: Any,
    ) -> List[CompatibilityInfo]:
        """Filter features by category, score, bucket, client and name.

        Filters may be passed as a FeatureQuery or as keyword arguments
        (``category``, ``min_score``, ``level_bucket``, ``target``,
        ``search``). All set filters are intersected. A category, bucket
        or client value outside its catalog matches nothing.

        Returns:
            Matching entries in knowledge base order.

        Raises:
            ValidationError: If a keyword is not a known filter name.
        """
        if query is None:
            resolved = dict(filters)
            for name, enum_cls in _ENUM_FILTERS.items():
                value = resolved.get(name)
                if value is None:
                    continue
                member = _coerce_enum(enum_cls, value)
                if member is None:
                    logger.debug("Unrecognised %s filter %r matches no features", name, value)
                    return []
                resolved[name] = member
            query = FeatureQuery(**resolved)

        results = list(self._database.values())

        if query.category is not None:
            results = [i for i in results if i.category == query.category]

        if query.level_bucket is not None or query.min_score is not None:
            filtered = []
            for info in results:
                stats = self.compute_statistics(info.feature)
                if stats is None:
                    continue
                if query.level_bucket is not None and stats.level_bucket != query.level_bucket:
                    continue
                if query.min_score is not None and stats.score < query.min_score:
                    continue
                filtered.append(info)
            results = filtered

        if query.target is not None:
            results = [
                i for i in results
                if query.target in i.support
                and i.support[query.target].level != SupportLevel.NONE
            ]

        if query.search:
            needle = query.search.lower()
            results = [i for i in results if needle in i.feature.lower()]

        logger.debug("Feature query %s matched %d features", query, len(results))
        return results

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def get_support_summary(self, feature: str) -> Optional[SupportSummary]:
        """Worst-case support per platform group for a feature.

        Args:
            feature: Feature name.

        Returns:
            SupportSummary, or None if the feature is not tracked.
        """
        info = self.get_feature_info(feature)
        if info is None:
            return None

        levels = {
            group.value.replace("-", "_"): worst_support_level(
                info.support[client].level
                for client in clients
                if client in info.support
            )
            for group, clients in PLATFORM_GROUP_CLIENTS.items()
        }
        return SupportSummary(feature=feature, **levels)

    def build_support_matrix(
        self,
        category: Optional[Union[FeatureCategory, str]] = None,
        search: Optional[str] = None,
    ) -> List[SupportMatrixRow]:
        """Build the feature-by-client support matrix.

        Args:
            category: Optional category filter.
            search: Optional case-insensitive feature name filter.

        Returns:
            One row per matching feature with per-client levels and statistics.
        """
        rows: List[SupportMatrixRow] = []
        for info in self.query_features(category=category, search=search):
            stats = self.compute_statistics(info.feature)
            if stats is None:
                continue
            rows.append(SupportMatrixRow(
                feature=info.feature,
                category=info.category,
                levels={client: record.level for client, record in info.support.items()},
                statistics=stats,
            ))
        return rows
