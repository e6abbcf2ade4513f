"""
Shared test configuration for PostHarvest.
"""

from typing import Callable

import httpx
import pytest

from postharvest.config.config import Config, CrawlerConfig, ExtractionSettings, RenderingConfig
from postharvest.crawler.http_client import PageFetcher
from postharvest.extractor.classifier import MediaClassifier


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


@pytest.fixture
def extraction_settings() -> ExtractionSettings:
    return ExtractionSettings()


@pytest.fixture
def classifier() -> MediaClassifier:
    return MediaClassifier(min_url_length=30)


@pytest.fixture
def unconfigured_config() -> Config:
    """Configuration without a rendering credential."""
    return Config(rendering=RenderingConfig(api_key=None))


@pytest.fixture
def configured_config() -> Config:
    return Config(rendering=RenderingConfig(api_key="test-token", timeout=5.0, selector_timeout=1.0))


@pytest.fixture
def fetcher_factory() -> Callable[[httpx.AsyncBaseTransport], PageFetcher]:
    """Build a PageFetcher over a mock transport."""

    def make(transport: httpx.AsyncBaseTransport) -> PageFetcher:
        return PageFetcher(CrawlerConfig(timeout=5.0), transport=transport)

    return make
