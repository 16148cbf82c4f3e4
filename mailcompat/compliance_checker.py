# -*- coding: utf-8 -*-
"""
Compliance Checker Engine - email template validation against the client
compatibility knowledge base.

Walks a template tree and applies per-node checks, producing
severity-classified issues and an aggregate report with an overall score
and an export gate.

Per-node checks (in order):
    1. Style support   - risky CSS properties scored against the knowledge
                         base, plus fixed rules for flex/grid display and
                         non-static positioning
    2. Image           - alt text, explicit dimensions, absolute src URL
    3. Accessibility   - buttons and links need text content
    4. Content         - very long text blocks

Scoring:
    overall = clamp(100 - 10 * critical - 3 * warnings - 1 * suggestions, 0, 100)
    safe_to_export = no critical issues

Issue ids (``issue-<n>``) come from a counter created per top-level call
and threaded through the walk, so they are unique across the whole report
and the checker holds no per-call state.

Example:
    >>> from mailcompat.compliance_checker import ComplianceChecker
    >>> checker = ComplianceChecker()
    >>> report = checker.check_template([
    ...     {"id": "hero", "type": "container", "style": {"display": "flex"}},
    ... ])
    >>> report.safe_to_export
    False
"""

from __future__ import annotations

import hashlib
import itertools
import json
import logging
import time
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, Union

from pydantic import ValidationError

from mailcompat.config import EmailCompatibilityConfig, get_config
from mailcompat.exceptions import InvalidTemplateError
from mailcompat.models import (
    CompatibilityIssue,
    CompatibilityReport,
    IssueCategory,
    IssuesBySeverity,
    IssueSeverity,
    TemplateNode,
)
from mailcompat.support_query import SupportQueryService

logger = logging.getLogger(__name__)

__all__ = [
    "ComplianceChecker",
    "RISKY_STYLE_PROPERTIES",
    "AUTO_FIXABLE_PROPERTIES",
]


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Style properties commonly unsupported in email clients.
RISKY_STYLE_PROPERTIES: tuple = (
    "display",
    "position",
    "float",
    "z-index",
    "transform",
    "animation",
    "transition",
    "box-shadow",
    "text-shadow",
    "opacity",
    "flex",
    "flex-direction",
    "flex-wrap",
    "justify-content",
    "align-items",
    "grid",
    "grid-template-columns",
    "grid-gap",
)

#: Properties an exporter can convert automatically.
AUTO_FIXABLE_PROPERTIES = frozenset({
    "display",
    "flex",
    "grid",
    "flex-direction",
    "justify-content",
    "align-items",
})

_FLEX_GRID_PROPERTIES = frozenset({
    "flex",
    "flex-direction",
    "flex-wrap",
    "justify-content",
    "align-items",
    "grid",
    "grid-template-columns",
    "grid-gap",
})
_MODERN_DISPLAY_VALUES = frozenset({"flex", "grid"})

_ABSOLUTE_URL_PREFIXES = ("http://", "https://")
_INTERACTIVE_TYPES = frozenset({"button", "link"})

# Fixed figures for the display/position rules
_FLEX_GRID_AFFECTED_CLIENTS = 15
_FLEX_GRID_SUPPORT_SCORE = 20
_POSITION_AFFECTED_CLIENTS = 12
_POSITION_SUPPORT_SCORE = 35

_FIX_TABLE_LAYOUT = "Convert to a table-based layout; the exporter can do this automatically"
_FIX_BOX_SHADOW = "Use border or background colors instead, or use conditional comments for Outlook"
_FIX_BORDER_RADIUS = (
    "Consider using VML for rounded corners in Outlook, "
    "or accept square corners in older clients"
)
_FIX_POSITION = "Use table-based layout with nested tables for positioning"
_FIX_GENERIC = "Review compatibility guide for alternative approaches"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize(value: Any) -> str:
    return str(value).strip().lower()


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _suggested_fix(prop: str, value: Any) -> str:
    """Pick advisory fix text for a risky property."""
    if prop in _FLEX_GRID_PROPERTIES:
        return _FIX_TABLE_LAYOUT
    if prop == "display" and _normalize(value) in _MODERN_DISPLAY_VALUES:
        return _FIX_TABLE_LAYOUT
    if prop == "box-shadow":
        return _FIX_BOX_SHADOW
    if prop == "border-radius":
        return _FIX_BORDER_RADIUS
    if prop == "position":
        return _FIX_POSITION
    return _FIX_GENERIC


class _IssueFactory:
    """Builds issues with sequential ids for one top-level check."""

    def __init__(self) -> None:
        self._ids: Iterator[int] = itertools.count(1)

    def create(self, node: TemplateNode, **fields: Any) -> CompatibilityIssue:
        return CompatibilityIssue(
            id=f"issue-{next(self._ids)}",
            component_id=node.id,
            component_type=node.type,
            **fields,
        )


# ---------------------------------------------------------------------------
# ComplianceChecker Engine
# ---------------------------------------------------------------------------


class ComplianceChecker:
    """Template compatibility validator.

    Runs style-support, image, accessibility and content checks on every
    node of a template tree and aggregates the issues into a
    CompatibilityReport. Mapping input is built into nodes bottom-up and
    the walk is iterative, so tree depth is bounded only by memory for
    dict and TemplateNode input alike.

    Attributes:
        _query: SupportQueryService used for feature statistics.
        _config: Engine configuration (thresholds, penalties, limits).

    Example:
        >>> checker = ComplianceChecker()
        >>> report = checker.check_template([])
        >>> assert report.overall_score == 100 and report.safe_to_export
    """

    def __init__(
        self,
        query_service: Optional[SupportQueryService] = None,
        config: Optional[EmailCompatibilityConfig] = None,
    ) -> None:
        """Initialize ComplianceChecker.

        Args:
            query_service: Statistics provider. Built from ``config`` if None.
            config: Optional configuration. Uses global config if None.
        """
        self._config = config or get_config()
        self._query = query_service or SupportQueryService(config=self._config)
        logger.info(
            "ComplianceChecker initialized: critical<%d, warning<%d, max_text=%d",
            self._config.critical_score_threshold,
            self._config.warning_score_threshold,
            self._config.max_text_length,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check_template(
        self,
        nodes: Sequence[Union[TemplateNode, Mapping[str, Any]]],
    ) -> CompatibilityReport:
        """Check a template tree for compatibility issues.

        Args:
            nodes: Top-level nodes, as TemplateNode instances or mappings.

        Returns:
            CompatibilityReport for the whole tree.

        Raises:
            InvalidTemplateError: If a node cannot be parsed.
        """
        start = time.monotonic()
        roots = self._coerce_nodes(nodes)
        factory = _IssueFactory()

        all_issues: List[CompatibilityIssue] = []
        nodes_checked = 0
        stack: List[TemplateNode] = list(reversed(roots))
        while stack:
            node = stack.pop()
            nodes_checked += 1
            all_issues.extend(self.check_node(node, factory))
            stack.extend(reversed(node.children))

        critical = [i for i in all_issues if i.severity == IssueSeverity.CRITICAL]
        warnings = [i for i in all_issues if i.severity == IssueSeverity.WARNING]
        suggestions = [i for i in all_issues if i.severity == IssueSeverity.SUGGESTION]

        overall_score = self.calculate_overall_score(
            len(critical), len(warnings), len(suggestions),
        )
        issues = IssuesBySeverity(
            critical=critical, warnings=warnings, suggestions=suggestions,
        )

        provenance_hash = self._compute_provenance(
            issues, overall_score, len(roots), nodes_checked,
        )

        report = CompatibilityReport(
            overall_score=overall_score,
            total_issues=len(all_issues),
            issues=issues,
            components_checked=len(roots),
            nodes_checked=nodes_checked,
            safe_to_export=not critical,
            provenance_hash=provenance_hash,
        )

        elapsed_ms = (time.monotonic() - start) * 1000.0
        logger.info(
            "Template check: nodes=%d, issues=%d [C=%d W=%d S=%d], score=%d, "
            "safe=%s, time=%.1fms",
            nodes_checked, len(all_issues), len(critical), len(warnings),
            len(suggestions), overall_score, report.safe_to_export, elapsed_ms,
        )
        return report

    def check_node(
        self,
        node: TemplateNode,
        factory: Optional[_IssueFactory] = None,
    ) -> List[CompatibilityIssue]:
        """Run every per-node check on a single node (children excluded).

        Args:
            node: Node to check.
            factory: Issue factory of the enclosing check. A fresh one is
                used when checking a node on its own.

        Returns:
            Issues in check order: style, image, accessibility, content.
        """
        factory = factory or _IssueFactory()
        issues: List[CompatibilityIssue] = []
        issues.extend(self._check_style_support(node, factory))
        if node.type == "image":
            issues.extend(self._check_image(node, factory))
        issues.extend(self._check_accessibility(node, factory))
        issues.extend(self._check_content(node, factory))
        if issues:
            logger.debug(
                "Node %s (%s): %d issues", node.id, node.type, len(issues),
            )
        return issues

    def calculate_overall_score(
        self,
        critical_count: int,
        warning_count: int,
        suggestion_count: int,
    ) -> int:
        """Overall compatibility score after severity penalties, in [0, 100]."""
        score = (
            100
            - critical_count * self._config.critical_penalty
            - warning_count * self._config.warning_penalty
            - suggestion_count * self._config.suggestion_penalty
        )
        return max(0, min(100, score))

    # ------------------------------------------------------------------
    # Input coercion
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce_nodes(
        nodes: Sequence[Union[TemplateNode, Mapping[str, Any]]],
    ) -> List[TemplateNode]:
        coerced: List[TemplateNode] = []
        for index, node in enumerate(nodes or []):
            if isinstance(node, TemplateNode):
                coerced.append(node)
                continue
            try:
                coerced.append(ComplianceChecker._build_tree(node, index))
            except ValidationError as exc:
                raise InvalidTemplateError(
                    "Template node could not be parsed",
                    context={"index": index, "errors": exc.error_count()},
                ) from exc
        return coerced

    @staticmethod
    def _build_tree(root: Any, index: int) -> TemplateNode:
        """Build a TemplateNode tree from nested mappings without recursion.

        Children are built before their parent, so every model_validate
        call only ever sees finished TemplateNode children and nesting
        depth is bounded by memory, not by the validator.

        Args:
            root: Top-level node mapping.
            index: Position of ``root`` in the template, for error context.

        Returns:
            The validated root node.

        Raises:
            InvalidTemplateError: If a mapping is its own ancestor.
            ValidationError: If any node fails validation.
        """
        built: Dict[int, TemplateNode] = {}
        on_path: Set[int] = set()
        stack: List[Tuple[Any, bool]] = [(root, False)]

        while stack:
            item, expanded = stack.pop()
            key = id(item)

            if isinstance(item, TemplateNode):
                continue
            if not isinstance(item, Mapping):
                built[key] = TemplateNode.model_validate(item)
                continue

            children = item.get("children")
            nested = children if isinstance(children, (list, tuple)) else ()

            if not expanded:
                if key in on_path:
                    raise InvalidTemplateError(
                        "Template contains a cyclic reference",
                        context={"index": index},
                    )
                if key in built:
                    continue
                on_path.add(key)
                stack.append((item, True))
                stack.extend((child, False) for child in reversed(nested))
                continue

            on_path.discard(key)
            fields = dict(item)
            if nested:
                fields["children"] = [
                    child if isinstance(child, TemplateNode) else built[id(child)]
                    for child in nested
                ]
            built[key] = TemplateNode.model_validate(fields)

        return built[id(root)]

    # ------------------------------------------------------------------
    # Style support
    # ------------------------------------------------------------------

    def _check_style_support(
        self, node: TemplateNode, factory: _IssueFactory,
    ) -> List[CompatibilityIssue]:
        issues: List[CompatibilityIssue] = []
        style = node.style

        for prop in RISKY_STYLE_PROPERTIES:
            value = style.get(prop)
            if _is_blank(value):
                continue

            scored = self._score_driven_issue(node, factory, prop, value)
            if scored is not None:
                issues.append(scored)

            if prop == "display" and _normalize(value) in _MODERN_DISPLAY_VALUES:
                issues.append(factory.create(
                    node,
                    severity=IssueSeverity.CRITICAL,
                    category=IssueCategory.CSS,
                    property="display",
                    value=str(value),
                    message=f'CSS "{value}" layout is not supported in email clients',
                    details=(
                        "Most email clients do not support modern CSS layout "
                        "methods like flexbox and grid. Use table-based layouts instead."
                    ),
                    auto_fix_available=True,
                    suggested_fix=_suggested_fix("display", value),
                    affected_clients=_FLEX_GRID_AFFECTED_CLIENTS,
                    support_score=_FLEX_GRID_SUPPORT_SCORE,
                ))

            if prop == "position" and _normalize(value) != "static":
                issues.append(factory.create(
                    node,
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.CSS,
                    property="position",
                    value=str(value),
                    message=f'CSS position "{value}" is not reliably supported in email clients',
                    details=(
                        "Positioned elements (absolute, relative, fixed) are not "
                        "supported in most email clients, especially Outlook."
                    ),
                    auto_fix_available=False,
                    suggested_fix=_suggested_fix("position", value),
                    affected_clients=_POSITION_AFFECTED_CLIENTS,
                    support_score=_POSITION_SUPPORT_SCORE,
                ))

        return issues

    def _score_driven_issue(
        self,
        node: TemplateNode,
        factory: _IssueFactory,
        prop: str,
        value: Any,
    ) -> Optional[CompatibilityIssue]:
        stats = self._query.compute_statistics(prop)
        if stats is None:
            return None

        if stats.score < self._config.critical_score_threshold:
            severity = IssueSeverity.CRITICAL
            message = (
                f'CSS property "{prop}" has poor email client support ({stats.score}%)'
            )
            details = (
                f"Only {stats.full_count} of {stats.total_targets} email clients fully "
                "support this property. This may cause broken layouts or be "
                "completely ignored."
            )
        elif stats.score < self._config.warning_score_threshold:
            severity = IssueSeverity.WARNING
            message = (
                f'CSS property "{prop}" has limited email client support ({stats.score}%)'
            )
            details = (
                f"{stats.full_count} of {stats.total_targets} email clients fully "
                "support this property. Consider using email-safe alternatives."
            )
        else:
            return None

        return factory.create(
            node,
            severity=severity,
            category=IssueCategory.CSS,
            property=prop,
            value=str(value),
            message=message,
            details=details,
            auto_fix_available=prop in AUTO_FIXABLE_PROPERTIES,
            suggested_fix=_suggested_fix(prop, value),
            affected_clients=stats.total_targets - stats.full_count,
            support_score=stats.score,
        )

    # ------------------------------------------------------------------
    # Image
    # ------------------------------------------------------------------

    def _check_image(
        self, node: TemplateNode, factory: _IssueFactory,
    ) -> List[CompatibilityIssue]:
        issues: List[CompatibilityIssue] = []
        attrs = node.attributes

        if _is_blank(attrs.get("alt")):
            issues.append(factory.create(
                node,
                severity=IssueSeverity.WARNING,
                category=IssueCategory.ACCESSIBILITY,
                property="alt",
                message="Image is missing alt text",
                details=(
                    "Alt text is important for accessibility and displays when "
                    "images are blocked by email clients."
                ),
                auto_fix_available=True,
                suggested_fix="Add descriptive alt text for this image",
            ))

        for dimension in ("width", "height"):
            if not attrs.get(dimension):
                issues.append(factory.create(
                    node,
                    severity=IssueSeverity.SUGGESTION,
                    category=IssueCategory.IMAGES,
                    property=dimension,
                    message=f"Image is missing explicit {dimension} attribute",
                    details=(
                        f"Setting explicit {dimension} helps email clients render "
                        "images correctly and prevents layout shifts."
                    ),
                    auto_fix_available=False,
                    suggested_fix=f"Add {dimension} attribute to the image",
                ))

        src = attrs.get("src")
        if not _is_blank(src) and not str(src).startswith(_ABSOLUTE_URL_PREFIXES):
            issues.append(factory.create(
                node,
                severity=IssueSeverity.CRITICAL,
                category=IssueCategory.IMAGES,
                property="src",
                value=str(src),
                message="Image uses relative URL instead of absolute URL",
                details=(
                    "Email clients require absolute URLs (starting with http:// "
                    "or https://) for images to display correctly."
                ),
                auto_fix_available=False,
                suggested_fix="Use an absolute URL for the image source",
            ))

        return issues

    # ------------------------------------------------------------------
    # Accessibility
    # ------------------------------------------------------------------

    def _check_accessibility(
        self, node: TemplateNode, factory: _IssueFactory,
    ) -> List[CompatibilityIssue]:
        if node.type not in _INTERACTIVE_TYPES:
            return []

        attrs = node.attributes
        if attrs.get("text") or attrs.get("children") or node.children:
            return []

        return [factory.create(
            node,
            severity=IssueSeverity.WARNING,
            category=IssueCategory.ACCESSIBILITY,
            message=f"{node.type} is missing accessible text content",
            details="Interactive elements should have descriptive text for screen readers.",
            auto_fix_available=False,
            suggested_fix="Add descriptive text to the element",
        )]

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def _check_content(
        self, node: TemplateNode, factory: _IssueFactory,
    ) -> List[CompatibilityIssue]:
        if node.type != "text":
            return []

        content = node.attributes.get("content")
        if not content or len(str(content)) <= self._config.max_text_length:
            return []

        return [factory.create(
            node,
            severity=IssueSeverity.SUGGESTION,
            category=IssueCategory.CONTENT,
            message="Text content is very long",
            details=(
                "Long blocks of text can be difficult to read in email. "
                "Consider breaking it into smaller sections."
            ),
            auto_fix_available=False,
            suggested_fix="Break long text into shorter paragraphs or sections",
        )]

    # ------------------------------------------------------------------
    # Provenance
    # ------------------------------------------------------------------

    @staticmethod
    def _compute_provenance(
        issues: IssuesBySeverity,
        overall_score: int,
        components_checked: int,
        nodes_checked: int,
    ) -> str:
        """SHA-256 over the report content, excluding the timestamp."""
        payload: Dict[str, Any] = {
            "overall_score": overall_score,
            "components_checked": components_checked,
            "nodes_checked": nodes_checked,
            "issues": issues.model_dump(mode="json"),
        }
        serialized = json.dumps(payload, sort_keys=True, default=str)
        return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
