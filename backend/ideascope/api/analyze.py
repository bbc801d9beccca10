"""
IdeaScope Backend — Analysis API (POST /api/analyze-idea)

Runs the competitor + market-gap pipeline for one idea and returns the
camelCase analysis, trimmed to the requested analysis type.
"""

import asyncio
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from ideascope.api.deps import get_orchestrator, limiter
from ideascope.config import generate_error_code, log, settings
from ideascope.models import AnalyzeRequest
from ideascope.orchestrator import Orchestrator

router = APIRouter(prefix="/api", tags=["analysis"])

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The caller went away before the pipeline finished."""


async def _run_until_disconnect(request: Request, coro):
    """
    Await `coro` as a task, cancelling it if the client disconnects first.

    Raises:
        ClientDisconnected: The request was abandoned; the task has been cancelled.
    """
    task = asyncio.ensure_future(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


@router.post("/analyze-idea")
@limiter.limit(settings.analyze_rate_limit)
async def analyze_idea(
    request: Request,
    body: AnalyzeRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Response:
    """
    POST /api/analyze-idea

    Body: { idea?, form?, analysisType? }
    Returns the AnalysisResult (camelCase). The pipeline itself never fails;
    fallbacks are reported in `fallbackFlags`.
    """
    idea = body.idea_text()
    if not idea:
        return JSONResponse(status_code=400, content={"error": "Idea is required"})

    start_ms = time.perf_counter()
    log("INFO", "analysis requested", analysis_type=body.analysis_type, idea_length=len(idea))
    try:
        result = await _run_until_disconnect(request, orchestrator.run(idea, body.analysis_type))
    except ClientDisconnected:
        log("WARN", "client disconnected, analysis cancelled", analysis_type=body.analysis_type)
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except Exception as e:
        code = generate_error_code()
        log("ERROR", "analysis failed", error=str(e), error_code=code)
        return JSONResponse(
            status_code=500,
            content={"error": "Something went wrong while analysing your idea.", "error_code": code},
        )

    log(
        "INFO",
        "analysis completed",
        analysis_type=body.analysis_type,
        competitors=len(result.competitors),
        duration_ms=int((time.perf_counter() - start_ms) * 1000),
    )
    return JSONResponse(content=result.to_response(body.analysis_type))
