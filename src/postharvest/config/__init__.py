from .config import (
    Config,
    CrawlerConfig,
    ExtractionSettings,
    MonitoringConfig,
    RenderingConfig,
    WebUIConfig,
    load_config,
)

__all__ = [
    "Config",
    "CrawlerConfig",
    "ExtractionSettings",
    "MonitoringConfig",
    "RenderingConfig",
    "WebUIConfig",
    "load_config",
]
