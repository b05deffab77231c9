"""API routes exposing the website analyzer."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from webanalyzer.errors import AnalysisError, ErrorKind
from webanalyzer.models import AnalysisRecord, AnalysisRequest, AnalysisResponse
from webanalyzer.services.analyzer import WebsiteAnalyzer
from webanalyzer.storage import DEFAULT_RECENT_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()


def get_analyzer(request: Request) -> WebsiteAnalyzer:
    """Return the analyzer attached to the running application."""

    return request.app.state.analyzer


def _parse_analysis_request(payload: Dict[str, Any] | None) -> AnalysisRequest:
    url = (payload or {}).get("url")
    if url is None or (isinstance(url, str) and not url.strip()):
        raise HTTPException(status_code=400, detail="URL is required")

    try:
        return AnalysisRequest.model_validate(payload)
    except ValidationError as exc:
        error = AnalysisError(ErrorKind.INVALID_URL, url=str(url))
        raise HTTPException(status_code=error.kind.status_code, detail=error.to_dict()) from exc


@router.post("/web/analyze", response_model=AnalysisResponse, response_model_exclude_none=True)
async def analyze_website(
    request: Request,
    payload: Dict[str, Any] | None = Body(default=None),
) -> AnalysisResponse:
    """Analyse a page, returning the stored result when the URL was seen before."""

    analysis_request = _parse_analysis_request(payload)

    analyzer = get_analyzer(request)
    try:
        return await run_in_threadpool(analyzer.analyze, analysis_request.url)
    except AnalysisError as exc:
        logger.warning("Analysis of %s failed: %s", analysis_request.url, exc.kind.value)
        raise HTTPException(status_code=exc.kind.status_code, detail=exc.to_dict()) from exc


@router.get("/web/recent", response_model=List[AnalysisRecord], response_model_exclude_none=True)
async def list_recent_analyses(request: Request, limit: int = DEFAULT_RECENT_LIMIT) -> List[AnalysisRecord]:
    """Return the most recently stored analyses, newest first."""

    if limit < 1:
        raise HTTPException(status_code=400, detail="limit must be a positive integer")

    analyzer = get_analyzer(request)
    try:
        return await run_in_threadpool(analyzer.recent, limit)
    except ValueError as exc:
        logger.exception("Failed to load recent analyses")
        raise HTTPException(status_code=500, detail="Failed to fetch recent analyses") from exc
