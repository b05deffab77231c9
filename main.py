"""ASGI entrypoint for running the Web Analyzer API with Uvicorn."""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the webanalyzer package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from webanalyzer.api.app import create_app  # noqa: E402  (import after path setup)
from webanalyzer.config import AnalyzerConfig  # noqa: E402


def _load_config() -> AnalyzerConfig:
    config_path = os.environ.get("WEBANALYZER_CONFIG")
    base = AnalyzerConfig.from_file(config_path) if config_path else None
    return AnalyzerConfig.from_env(base)


app = create_app(_load_config())

__all__ = ("app",)
