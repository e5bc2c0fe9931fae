"""
Shared test configuration for ReadQuarry.
"""

import logging

import pytest
import structlog

from readquarry.config import ExtractionConfig
from readquarry.extractor import ContentSanitizer, ContentScorer, ElementClassifier, MainContentLocator
from readquarry.pipeline import ExtractionPipeline
from tests.helpers import parse

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: End-to-end extraction over full documents")
    config.addinivalue_line("markers", "property: Property-based tests driven by hypothesis")


# ============================================================================
# Component Fixtures
# ============================================================================


@pytest.fixture
def config() -> ExtractionConfig:
    return ExtractionConfig()


@pytest.fixture
def classifier(config) -> ElementClassifier:
    return ElementClassifier(config)


@pytest.fixture
def scorer(config, classifier) -> ContentScorer:
    return ContentScorer(config, classifier)


@pytest.fixture
def locator(config, classifier) -> MainContentLocator:
    return MainContentLocator(config, classifier)


@pytest.fixture
def sanitizer() -> ContentSanitizer:
    return ContentSanitizer()


@pytest.fixture
def pipeline(config) -> ExtractionPipeline:
    return ExtractionPipeline(config)


@pytest.fixture
def soup():
    """Parse an HTML string with html.parser."""
    return parse


@pytest.fixture
def restore_logging():
    """Undo global logging configuration made by a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
