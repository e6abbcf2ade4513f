"""
Configuration management for PostHarvest using Pydantic.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

KNOWN_STRATEGIES = ("rendered", "static", "script")

# --- Nested Configuration Models ---


class CrawlerConfig(BaseModel):
    """Direct HTTP fetch configuration."""

    timeout: float = Field(default=15.0, description="HTTP request timeout in seconds.")
    referer: str = Field(
        default="https://www.linkedin.com/",
        description="Referer sent with page fetches and proxied media requests.",
    )
    include_mobile: bool = Field(default=False, description="Rotate mobile browser fingerprints as well.")
    proxy_chunk_size: int = Field(default=64 * 1024, description="Chunk size for streamed proxy responses.")


class RenderingConfig(BaseModel):
    """Remote headless-browser rendering service configuration."""

    api_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("BROWSERLESS_API_KEY") or None,
        description="Browserless API token. Without it the rendered strategy skips itself.",
    )
    endpoint: str = Field(
        default="wss://production-sfo.browserless.io",
        description="Browserless CDP websocket endpoint.",
    )
    timeout: float = Field(default=30.0, gt=0, description="Overall navigation timeout in seconds.")
    selector_timeout: float = Field(default=10.0, gt=0, description="Bound on waiting for the content selector.")
    wait_selector: str = Field(
        default=".feed-shared-update-v2, .update-components-text, article, main",
        description="Selector whose presence signals that post content has rendered.",
    )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def cdp_url(self) -> str:
        """Websocket URL including the token."""
        separator = "&" if "?" in self.endpoint else "?"
        return f"{self.endpoint}{separator}token={self.api_key}"


class ExtractionSettings(BaseModel):
    """Configuration for the extraction cascade."""

    target_domain: str = Field(default="linkedin.com", description="Domain token every post URL must contain.")
    cdn_origin: str = Field(
        default="https://media.licdn.com",
        description="Origin prefixed to partial media paths found in script payloads.",
    )
    cascade_order: List[str] = Field(
        default=list(KNOWN_STRATEGIES), description="Order of strategies to try in cascade"
    )
    static_image_limit: int = Field(default=10, ge=1, description="Maximum images kept by the static strategy.")
    min_url_length: int = Field(default=30, ge=1, description="Candidate URLs this short or shorter are rejected.")
    max_structured_nodes: int = Field(
        default=10_000, ge=1, description="Node budget for walking one structured-data block."
    )
    placeholder_text: str = Field(default="No text content found in this post.")

    @field_validator("cascade_order")
    @classmethod
    def validate_cascade_order(cls, v: List[str]) -> List[str]:
        """Ensure cascade order is non-empty, known, and free of repeats."""
        if not v:
            raise ValueError("cascade_order must contain at least one strategy")
        unknown = [name for name in v if name not in KNOWN_STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown strategies {unknown}. Available strategies: {list(KNOWN_STRATEGIES)}")
        if len(set(v)) != len(v):
            raise ValueError("cascade_order must not list a strategy twice")
        return v


class WebUIConfig(BaseModel):
    """Configuration for the HTTP API."""

    host: str = Field(default="127.0.0.1", description="Host for the web server.")
    port: int = Field(default=8000, description="Port for the web server.")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"])


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")
    web_ui: WebUIConfig = Field(default_factory=WebUIConfig)

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "PostHarvest"
    version: str = "0.1.0"
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    rendering: RenderingConfig = Field(default_factory=RenderingConfig)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="POSTHARVEST_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "postharvest.yaml", current_dir / "postharvest.yml"):
        if path.exists():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from an explicit path, a discovered file, or defaults."""
    config_path = path or find_config_file()
    if config_path:
        return Config.from_yaml(config_path)
    return Config()
