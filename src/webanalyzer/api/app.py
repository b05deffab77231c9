"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from webanalyzer.api.routes import router
from webanalyzer.config import AnalyzerConfig
from webanalyzer.services.analyzer import WebsiteAnalyzer
from webanalyzer.storage import AnalysisStore, create_store


def create_app(
    config: AnalyzerConfig | None = None,
    store: AnalysisStore | None = None,
    analyzer: WebsiteAnalyzer | None = None,
) -> FastAPI:
    """Build the application around an explicitly supplied configuration.

    Without arguments the configuration is read from ``WEBANALYZER_*``
    environment variables.
    """

    resolved_config = config or AnalyzerConfig.from_env()
    resolved_analyzer = analyzer or WebsiteAnalyzer(
        resolved_config, store if store is not None else create_store(resolved_config)
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            resolved_analyzer.close()

    app = FastAPI(
        title="Web Analyzer",
        description="Fetch a page and return its title, summary and key points",
        lifespan=lifespan,
    )
    app.state.config = resolved_config
    app.state.analyzer = resolved_analyzer
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
