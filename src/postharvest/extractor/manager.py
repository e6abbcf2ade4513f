"""
ExtractorManager for PostHarvest.

Runs the extraction strategies in a configurable cascade, strictly one after
another, and returns the first result that carries content.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from postharvest.config.config import Config
from postharvest.crawler.http_client import PageFetcher
from postharvest.errors import AllStrategiesFailedError, ExtractionError
from postharvest.observability.metrics import METRICS
from postharvest.security.validation import validate_post_url

from .classifier import MediaClassifier
from .demo import demo_content
from .models import ExtractedContent
from .protocols import Extractor
from .rendered_extractor import RenderedDomExtractor
from .script_extractor import ScriptPayloadExtractor
from .static_extractor import StaticHtmlExtractor

logger = structlog.get_logger(__name__)


class ExtractorManager:
    """
    Manages the cascade of extraction strategies.

    Features:
    - Configurable strategy order
    - URL validation before any network activity
    - Per-strategy failures logged and swallowed, never retried
    - Demo mode that bypasses the cascade entirely
    - Performance metrics tracking
    """

    def __init__(
        self,
        config: Config,
        extractors: Optional[Sequence[Extractor]] = None,
        fetcher: Optional[PageFetcher] = None,
    ) -> None:
        """
        Initialize the ExtractorManager.

        Args:
            config: Application configuration; the rendering credential is read from here only
            extractors: Explicit strategy list, overriding ``cascade_order``
            fetcher: Page fetcher shared by the HTTP-based strategies
        """
        self.config = config
        self.settings = config.extraction
        self.logger = logger.bind(component="ExtractorManager")

        if extractors is None:
            extractors = self._build_cascade(fetcher or PageFetcher(config.crawler))
        self._extractors: List[Extractor] = list(extractors)
        if not self._extractors:
            raise ValueError("ExtractorManager needs at least one extraction strategy")

        self._extraction_metrics: Dict[str, Dict[str, float]] = {
            extractor.name: {"attempts": 0, "successes": 0, "total_time": 0.0} for extractor in self._extractors
        }

    def _build_cascade(self, fetcher: PageFetcher) -> List[Extractor]:
        classifier = MediaClassifier(min_url_length=self.settings.min_url_length)
        available: Dict[str, Extractor] = {
            "rendered": RenderedDomExtractor(self.settings, self.config.rendering, classifier),
            "static": StaticHtmlExtractor(self.settings, fetcher, classifier),
            "script": ScriptPayloadExtractor(self.settings, fetcher, classifier),
        }
        return [available[name] for name in self.settings.cascade_order]

    @property
    def cascade_order(self) -> List[str]:
        return [extractor.name for extractor in self._extractors]

    async def extract(self, url: str, demo_mode: bool = False) -> ExtractedContent:
        """
        Extract a post, trying each strategy in order until one succeeds.

        Args:
            url: Raw post URL as supplied by the caller
            demo_mode: Return the fixed demo payload without touching the network

        Returns:
            ExtractedContent from the first successful strategy

        Raises:
            InvalidInputError: If ``url`` is malformed or not on the target domain
            AllStrategiesFailedError: If every strategy failed
        """
        url = validate_post_url(url, target_domain=self.settings.target_domain)

        if demo_mode:
            self.logger.info("Serving demo content", url=url)
            return demo_content()

        self.logger.info("Starting extraction cascade", url=url, cascade_order=self.cascade_order)

        failures: List[Tuple[str, str]] = []
        for extractor in self._extractors:
            name = extractor.name
            start_time = time.time()
            self._extraction_metrics[name]["attempts"] += 1
            METRICS["strategy_attempts"].labels(strategy=name).inc()

            try:
                self.logger.debug("Attempting extraction", strategy=name, url=url)
                result = await extractor.extract(url)
            except ExtractionError as e:
                self._record_failure(name, url, e, start_time, failures)
                continue
            except Exception as e:
                self._record_failure(name, url, e, start_time, failures, unexpected=True)
                continue

            extraction_time = time.time() - start_time
            self._extraction_metrics[name]["total_time"] += extraction_time
            self._extraction_metrics[name]["successes"] += 1
            METRICS["extraction_duration_seconds"].labels(strategy=name).observe(extraction_time)
            METRICS["strategy_success"].labels(strategy=name).inc()

            self.logger.info(
                "Extraction completed",
                strategy=name,
                url=url,
                extraction_time=extraction_time,
                text_length=len(result.text),
                images=len(result.images),
                videos=len(result.videos),
                documents=len(result.documents),
            )
            return result

        METRICS["extractions_failed"].inc()
        self.logger.warning("All extraction strategies failed", url=url, failures=failures)
        raise AllStrategiesFailedError(url, failures)

    def _record_failure(
        self,
        name: str,
        url: str,
        error: Exception,
        start_time: float,
        failures: List[Tuple[str, str]],
        unexpected: bool = False,
    ) -> None:
        extraction_time = time.time() - start_time
        error_type = type(error).__name__
        self._extraction_metrics[name]["total_time"] += extraction_time
        METRICS["extraction_duration_seconds"].labels(strategy=name).observe(extraction_time)
        METRICS["strategy_failures"].labels(strategy=name, error_type=error_type).inc()
        failures.append((name, str(error) or error_type))

        log = self.logger.error if unexpected else self.logger.warning
        log(
            "Extraction strategy failed",
            event_type="strategy_failed",
            strategy=name,
            url=url,
            error=str(error),
            error_type=error_type,
            exc_info=unexpected,
        )

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """
        Get extraction performance metrics.

        Returns:
            Dictionary of metrics per strategy
        """
        metrics = {}

        for name, raw_metrics in self._extraction_metrics.items():
            attempts = raw_metrics["attempts"]
            successes = raw_metrics["successes"]
            total_time = raw_metrics["total_time"]

            metrics[name] = {
                "attempts": attempts,
                "successes": successes,
                "success_rate": successes / attempts if attempts > 0 else 0.0,
                "total_time": total_time,
                "avg_time": total_time / attempts if attempts > 0 else 0.0,
            }

        return metrics
