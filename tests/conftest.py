# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

import os

import pytest

from mailcompat.compliance_checker import ComplianceChecker
from mailcompat.config import EmailCompatibilityConfig, reset_config, set_config
from mailcompat.knowledge_base import (
    full_support,
    no_support,
    partial_support,
    support_map,
    unknown_support,
)
from mailcompat.models import CompatibilityInfo, EmailClient, FeatureCategory
from mailcompat.setup import EmailCompatibilityService, reset_service
from mailcompat.support_query import SupportQueryService


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate every test from MC_ variables and installed singletons."""
    for name in list(os.environ):
        if name.startswith("MC_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    reset_service()
    yield
    reset_config()
    reset_service()


@pytest.fixture
def config():
    """Default configuration, installed as the global config."""
    cfg = EmailCompatibilityConfig()
    set_config(cfg)
    return cfg


@pytest.fixture
def query_service(config):
    """Query service over the built-in knowledge base."""
    return SupportQueryService(config=config)


@pytest.fixture
def checker(query_service, config):
    """Compliance checker over the built-in knowledge base."""
    return ComplianceChecker(query_service=query_service, config=config)


@pytest.fixture
def service(config):
    """Started service facade with metrics and provenance enabled."""
    svc = EmailCompatibilityService(config=config)
    svc.startup()
    yield svc
    svc.shutdown()


@pytest.fixture
def custom_database():
    """Small knowledge base exercising every support level."""
    entries = [
        CompatibilityInfo(
            feature="mystery",
            category=FeatureCategory.OTHER,
            description="Never tested anywhere",
            support=support_map(unknown_support(["Not yet tested"])),
        ),
        CompatibilityInfo(
            feature="half-known",
            category=FeatureCategory.OTHER,
            support=support_map(unknown_support(), {
                EmailClient.GMAIL_WEBMAIL: full_support(),
                EmailClient.OUTLOOK_2016_WIN: no_support(["Use a table"]),
            }),
        ),
        CompatibilityInfo(
            feature="patchy",
            category=FeatureCategory.LAYOUT,
            safe_alternatives=("Use a table",),
            support=support_map(
                partial_support(["Mostly works"], ["Use a table", "Inline it"]),
                {EmailClient.SAMSUNG_EMAIL: no_support(["Use a table"])},
            ),
        ),
    ]
    return {entry.feature: entry for entry in entries}


@pytest.fixture
def custom_query_service(custom_database, config):
    """Query service over the small custom knowledge base."""
    return SupportQueryService(database=custom_database, config=config)
