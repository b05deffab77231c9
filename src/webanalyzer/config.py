"""Configuration model and helpers for the web analyzer."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError

__all__ = ["AnalyzerConfig", "DEFAULT_CONFIG_PATH", "DEFAULT_USER_AGENT", "ENV_PREFIX"]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "analyzer.json"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; WebAnalyzer-Bot/1.0; content summary fetcher)"
ENV_PREFIX = "WEBANALYZER_"


class AnalyzerConfig(BaseModel):
    """Settings shared by the fetcher, the analysis pipeline and the API."""

    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for a page before the fetch fails with a timeout",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Self-identifying User-Agent header sent with every request",
    )
    words_per_minute: int = Field(default=200, gt=0, description="Reading speed used for reading time")
    summary_length: int = Field(
        default=300,
        gt=0,
        description="Number of characters kept in the summary before the ellipsis is appended",
    )
    max_key_points: int = Field(default=5, ge=1, le=5, description="Upper bound on extracted key points")
    store_path: Path | None = Field(
        default=None,
        description=(
            "JSON file used to persist analyses. "
            "When omitted, analyses are kept in memory for the lifetime of the process."
        ),
    )
    persist_metrics: bool = Field(
        default=True,
        description=(
            "Whether word count and reading time are stored with the record so that "
            "cached responses include them."
        ),
    )

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "AnalyzerConfig":
        """Load configuration data from a JSON file."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Configuration file not found: {config_path}") from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in configuration file: {config_path}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Configuration file is invalid: {config_path}\n{exc}") from exc

    @classmethod
    def from_env(
        cls,
        base: "AnalyzerConfig" | None = None,
        *,
        prefix: str = ENV_PREFIX,
        environ: Dict[str, str] | None = None,
    ) -> "AnalyzerConfig":
        """Return ``base`` (or the defaults) overlaid with ``WEBANALYZER_*`` variables.

        ``WEBANALYZER_REQUEST_TIMEOUT=5`` overrides ``request_timeout`` and so on.
        Values are validated by pydantic, so malformed numbers raise ``ValueError``.
        """

        env = os.environ if environ is None else environ
        data: Dict[str, Any] = base.model_dump() if base is not None else {}

        for name in cls.model_fields:
            raw = env.get(f"{prefix}{name.upper()}")
            if raw is None or not raw.strip():
                continue
            data[name] = raw.strip()

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid {prefix}* environment configuration\n{exc}") from exc

    def dump(self, path: Path | str | None = None) -> None:
        """Persist the configuration back to disk as JSON."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
