# -*- coding: utf-8 -*-
"""
Email Client Compatibility Knowledge Base

Read-only registry mapping a CSS feature name to its compatibility entry
(category, description, support record for every catalog client, general
notes, safe alternatives). Data compiled from caniemail.com, Email on Acid
and Litmus documentation.

The dataset is built once at import time and exposed through a
``MappingProxyType``; no mutation API exists.

The ``Positioning`` category deliberately has no entries. ``position`` is
not tracked here: the compliance checker flags any non-static
``position`` with its own rule, so dataset lookups for it come back empty
(``get_feature_info("position")`` is None, ``get_features_by_category``
for ``FeatureCategory.POSITIONING`` is ``[]``, and the query layer returns
no workarounds for it).

Example:
    >>> from mailcompat.knowledge_base import get_feature_info
    >>> info = get_feature_info("border-radius")
    >>> info.support["outlook-2016-win"].level
    <SupportLevel.NONE: 'none'>
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from mailcompat.models import (
    ALL_EMAIL_CLIENTS,
    PLATFORM_GROUP_CLIENTS,
    CompatibilityInfo,
    EmailClient,
    FeatureCategory,
    PlatformGroup,
    PropertySupport,
    SupportLevel,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Support record builders
# ---------------------------------------------------------------------------


def full_support(notes: Optional[Iterable[str]] = None) -> PropertySupport:
    """Build a FULL support record, optionally with notes."""
    return PropertySupport(level=SupportLevel.FULL, notes=tuple(notes or ()))


def partial_support(
    notes: Iterable[str],
    workarounds: Optional[Iterable[str]] = None,
) -> PropertySupport:
    """Build a PARTIAL support record with notes and optional workarounds."""
    return PropertySupport(
        level=SupportLevel.PARTIAL,
        notes=tuple(notes),
        workarounds=tuple(workarounds or ()),
    )


def no_support(workarounds: Optional[Iterable[str]] = None) -> PropertySupport:
    """Build a NONE support record with optional workarounds."""
    return PropertySupport(
        level=SupportLevel.NONE,
        notes=("Not supported",),
        workarounds=tuple(workarounds or ()),
    )


def unknown_support(notes: Optional[Iterable[str]] = None) -> PropertySupport:
    """Build an UNKNOWN support record for untested clients."""
    return PropertySupport(level=SupportLevel.UNKNOWN, notes=tuple(notes or ()))


def support_map(
    default: PropertySupport,
    overrides: Optional[Mapping[EmailClient, PropertySupport]] = None,
) -> Dict[EmailClient, PropertySupport]:
    """Fill every catalog client with ``default`` then apply ``overrides``.

    Args:
        default: Record used for clients without an override.
        overrides: Per-client records.

    Returns:
        Support map covering the whole catalog.
    """
    support = {client: default for client in ALL_EMAIL_CLIENTS}
    if overrides:
        support.update(overrides)
    return support


def _for_clients(
    clients: Iterable[EmailClient], record: PropertySupport,
) -> Dict[EmailClient, PropertySupport]:
    return {client: record for client in clients}


_OUTLOOK_WINDOWS = PLATFORM_GROUP_CLIENTS[PlatformGroup.DESKTOP_MAIL_WINDOWS]
_OUTLOOK_MAC = PLATFORM_GROUP_CLIENTS[PlatformGroup.DESKTOP_MAIL_MAC]
_APPLE_MAIL = (
    EmailClient.APPLE_MAIL_IOS,
    EmailClient.APPLE_MAIL_IPADOS,
    EmailClient.APPLE_MAIL_MACOS,
)
_GMAIL = (
    EmailClient.GMAIL_WEBMAIL,
    EmailClient.GMAIL_IOS,
    EmailClient.GMAIL_ANDROID,
)


# ---------------------------------------------------------------------------
# Dataset
# ---------------------------------------------------------------------------

_ENTRIES: List[CompatibilityInfo] = [
    # -- Borders -------------------------------------------------------------
    CompatibilityInfo(
        feature="border-radius",
        category=FeatureCategory.BORDERS,
        description="Rounds the corners of an element",
        general_notes=(
            "Outlook (Windows) using Word rendering engine does not support border-radius",
            "Works well in most modern email clients",
        ),
        safe_alternatives=("Use rounded corner images for critical design elements",),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS,
            no_support(["Use VML rounded rectangles", "Use background images"]),
        )),
    ),
    CompatibilityInfo(
        feature="border",
        category=FeatureCategory.BORDERS,
        description="Sets border width, style, and color",
        general_notes=("Excellent support", "Safe to use everywhere"),
        support=support_map(full_support()),
    ),
    # -- Visual effects ------------------------------------------------------
    CompatibilityInfo(
        feature="box-shadow",
        category=FeatureCategory.VISUAL_EFFECTS,
        description="Adds shadow effects around an element",
        general_notes=(
            "Poor support across email clients",
            "Outlook (Windows) does not support",
            "Consider if shadows are essential to design",
        ),
        safe_alternatives=(
            "Use border for subtle depth",
            "Use background images with shadows",
        ),
        support=support_map(full_support(), {
            **_for_clients(
                _OUTLOOK_WINDOWS,
                no_support(["Use border for definition", "Use images with shadows"]),
            ),
            EmailClient.GMAIL_WEBMAIL: partial_support(
                ["May be stripped in some Gmail configurations"],
            ),
        }),
    ),
    CompatibilityInfo(
        feature="text-shadow",
        category=FeatureCategory.VISUAL_EFFECTS,
        description="Adds shadow effects to text",
        general_notes=(
            "Ignored by Outlook (Windows) and the Gmail apps",
            "Never rely on a shadow for text legibility",
        ),
        safe_alternatives=("Use sufficient color contrast instead of shadows",),
        support=support_map(full_support(), {
            **_for_clients(
                _OUTLOOK_WINDOWS,
                no_support(["Ensure text contrast without the shadow"]),
            ),
            **_for_clients(
                _GMAIL,
                no_support(["Ensure text contrast without the shadow"]),
            ),
        }),
    ),
    CompatibilityInfo(
        feature="opacity",
        category=FeatureCategory.VISUAL_EFFECTS,
        description="Sets the transparency level of an element",
        general_notes=("Outlook (Windows) renders elements fully opaque",),
        safe_alternatives=("Use pre-blended solid colors",),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS,
            no_support(["Use a solid color that matches the blended result"]),
        )),
    ),
    CompatibilityInfo(
        feature="transform",
        category=FeatureCategory.VISUAL_EFFECTS,
        description="Rotates, scales, skews, or translates an element",
        general_notes=(
            "Stripped by Outlook (Windows), Outlook.com and Gmail",
            "Treat transforms as progressive enhancement only",
        ),
        safe_alternatives=("Use pre-rendered images for rotated or scaled content",),
        support=support_map(full_support(), {
            **_for_clients(
                _OUTLOOK_WINDOWS,
                no_support(["Use pre-rendered images"]),
            ),
            **_for_clients(_GMAIL, no_support(["Use pre-rendered images"])),
            EmailClient.OUTLOOK_WEB: no_support(["Use pre-rendered images"]),
            EmailClient.YAHOO_WEBMAIL: partial_support(
                ["2D transforms only"], ["Use pre-rendered images"],
            ),
            EmailClient.AOL_WEBMAIL: partial_support(
                ["2D transforms only"], ["Use pre-rendered images"],
            ),
        }),
    ),
    # -- Colors & backgrounds ------------------------------------------------
    CompatibilityInfo(
        feature="background-image",
        category=FeatureCategory.COLORS,
        description="Sets a background image for an element",
        general_notes=(
            "Outlook (Windows) blocks by default unless using VML",
            "Gmail may strip in some cases",
            "Always provide background-color fallback",
        ),
        safe_alternatives=("Use <img> tags instead", "Use solid background-color"),
        support=support_map(
            full_support(["Always provide background-color fallback"]),
            {
                **_for_clients(_OUTLOOK_WINDOWS, partial_support(
                    ["Requires VML for support"],
                    ["Use VML background images", "Use solid background-color fallback"],
                )),
                EmailClient.GMAIL_WEBMAIL: partial_support(
                    ["May be stripped", "Use background-color fallback"],
                    ["Use <img> with text overlay"],
                ),
            },
        ),
    ),
    CompatibilityInfo(
        feature="background-color",
        category=FeatureCategory.COLORS,
        description="Sets the background color of an element",
        general_notes=("Excellent support across all email clients", "Safe to use everywhere"),
        support=support_map(full_support()),
    ),
    # -- Spacing -------------------------------------------------------------
    CompatibilityInfo(
        feature="padding",
        category=FeatureCategory.SPACING,
        description="Sets the padding (inner spacing) of an element",
        general_notes=(
            "Good support across email clients",
            "Best applied to <td> elements in table-based layouts",
        ),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS, full_support(["Works best on <td> elements"]),
        )),
    ),
    CompatibilityInfo(
        feature="margin",
        category=FeatureCategory.SPACING,
        description="Sets the margin (outer spacing) of an element",
        general_notes=(
            "Support varies by email client",
            "Avoid for critical spacing - use padding or table cells instead",
        ),
        safe_alternatives=("Use padding instead", "Use empty <td> for spacing"),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS,
            partial_support(
                ["Limited support", "May not work as expected"],
                ["Use padding instead", "Use spacer tables/cells"],
            ),
        )),
    ),
    # -- Display -------------------------------------------------------------
    CompatibilityInfo(
        feature="display",
        category=FeatureCategory.DISPLAY,
        description="Sets the display type of an element",
        general_notes=(
            "Only basic values supported (block, inline, table, table-cell)",
            "Flexbox and Grid not supported in emails",
            "Use table-based layouts for email",
        ),
        safe_alternatives=("Use <table> for layouts instead of flex/grid",),
        support=support_map(
            partial_support(
                ["Flex and Grid not supported"],
                ["Use <table> elements for layout"],
            ),
            {
                **_for_clients(_OUTLOOK_WINDOWS, partial_support(
                    ["Only supports: block, inline, table, table-cell, none"],
                    ["Use <table> elements for layout"],
                )),
                **_for_clients(_APPLE_MAIL, partial_support(
                    ["Flex and Grid not recommended"],
                    ["Use <table> elements for cross-client compatibility"],
                )),
            },
        ),
    ),
    CompatibilityInfo(
        feature="float",
        category=FeatureCategory.LAYOUT,
        description="Places an element to the left or right of its container",
        general_notes=(
            "Outlook (Windows) ignores float on most elements",
            "Use align attributes on tables for side-by-side content",
        ),
        safe_alternatives=("Use align=\"left\" / align=\"right\" on tables",),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS,
            partial_support(
                ["Only honoured on images and tables"],
                ["Use the align attribute instead"],
            ),
        )),
    ),
    # -- Typography ----------------------------------------------------------
    CompatibilityInfo(
        feature="color",
        category=FeatureCategory.TYPOGRAPHY,
        description="Sets the text color",
        general_notes=("Excellent support across all email clients", "Safe to use everywhere"),
        support=support_map(full_support()),
    ),
    CompatibilityInfo(
        feature="font-family",
        category=FeatureCategory.TYPOGRAPHY,
        description="Sets the font family",
        general_notes=(
            "Good support with web-safe fonts",
            "Web fonts (custom fonts) have limited support",
            "Always include fallback fonts",
        ),
        safe_alternatives=(
            "Use web-safe fonts: Arial, Helvetica, Times New Roman, Georgia, Courier",
            'Include fallback stack: "Custom Font", Arial, sans-serif',
        ),
        support=support_map(
            full_support(["Supports web fonts with @font-face"]),
            {
                **_for_clients(_OUTLOOK_WINDOWS, full_support(
                    ["Web-safe fonts recommended", "Always include fallbacks"],
                )),
                EmailClient.YAHOO_WEBMAIL: full_support(["Web fonts may be stripped"]),
                EmailClient.AOL_WEBMAIL: full_support(["Web fonts may be stripped"]),
                EmailClient.SAMSUNG_EMAIL: full_support(["Web-safe fonts recommended"]),
            },
        ),
    ),
    CompatibilityInfo(
        feature="font-size",
        category=FeatureCategory.TYPOGRAPHY,
        description="Sets the font size",
        general_notes=("Excellent support", "Use px or pt units for consistency"),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS, full_support(["Use px or pt units"]),
        )),
    ),
    CompatibilityInfo(
        feature="font-weight",
        category=FeatureCategory.TYPOGRAPHY,
        description="Sets the weight (boldness) of the font",
        general_notes=("Excellent support", "Numeric weights may round to bold or normal"),
        support=support_map(full_support()),
    ),
    CompatibilityInfo(
        feature="text-align",
        category=FeatureCategory.TYPOGRAPHY,
        description="Sets the horizontal alignment of text",
        general_notes=("Excellent support", "Safe to use everywhere"),
        support=support_map(full_support()),
    ),
    CompatibilityInfo(
        feature="text-decoration",
        category=FeatureCategory.TYPOGRAPHY,
        description="Sets underline, overline, or line-through on text",
        general_notes=("Excellent support", "Useful for removing link underlines"),
        support=support_map(full_support()),
    ),
    CompatibilityInfo(
        feature="line-height",
        category=FeatureCategory.TYPOGRAPHY,
        description="Sets the line height (spacing between lines)",
        general_notes=("Good support", "Use unitless values or px for best results"),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS, full_support(["Use unitless values or px"]),
        )),
    ),
    # -- Images --------------------------------------------------------------
    CompatibilityInfo(
        feature="width",
        category=FeatureCategory.IMAGES,
        description="Sets the width of an element",
        general_notes=(
            "Good support",
            "For images, use both width attribute and CSS",
            "Use max-width for responsive images",
        ),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS, full_support(["Use width attribute on images"]),
        )),
    ),
    CompatibilityInfo(
        feature="height",
        category=FeatureCategory.IMAGES,
        description="Sets the height of an element",
        general_notes=(
            "Good support on images and table cells",
            "Outlook (Windows) ignores CSS height on most block elements",
        ),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS,
            partial_support(
                ["CSS height ignored on block elements"],
                ["Use the height attribute on images and cells"],
            ),
        )),
    ),
    CompatibilityInfo(
        feature="max-width",
        category=FeatureCategory.IMAGES,
        description="Sets the maximum width of an element",
        general_notes=(
            "Good support for responsive emails",
            "Essential for mobile-friendly images",
        ),
        support=support_map(full_support(), _for_clients(
            _OUTLOOK_WINDOWS,
            partial_support(
                ["Limited support", "Use width instead for Outlook"],
                ["Use fixed width for Outlook, max-width for others"],
            ),
        )),
    ),
]

COMPATIBILITY_DATABASE: Mapping[str, CompatibilityInfo] = MappingProxyType(
    {entry.feature: entry for entry in _ENTRIES}
)

logger.debug(
    "Compatibility knowledge base loaded: %d features", len(COMPATIBILITY_DATABASE),
)


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


def get_all_features() -> List[str]:
    """Return every feature name in the knowledge base."""
    return list(COMPATIBILITY_DATABASE)


def get_feature_info(name: str) -> Optional[CompatibilityInfo]:
    """Return the entry for ``name`` or None when it is not tracked."""
    return COMPATIBILITY_DATABASE.get(name)


def get_features_by_category(category: FeatureCategory) -> List[CompatibilityInfo]:
    """Return all entries in a category."""
    return [
        info for info in COMPATIBILITY_DATABASE.values()
        if info.category == category
    ]


def has_feature(name: str) -> bool:
    """Check whether ``name`` has compatibility data."""
    return name in COMPATIBILITY_DATABASE


__all__ = [
    "COMPATIBILITY_DATABASE",
    "full_support",
    "partial_support",
    "no_support",
    "unknown_support",
    "support_map",
    "get_all_features",
    "get_feature_info",
    "get_features_by_category",
    "has_feature",
]
