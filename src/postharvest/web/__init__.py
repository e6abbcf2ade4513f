"""HTTP API for post extraction, media proxying and ZIP download."""

from __future__ import annotations

from .main import create_app, run_web_server

__all__ = ["create_app", "run_web_server"]
