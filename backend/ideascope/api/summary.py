"""
IdeaScope Backend — Summary API (POST /api/summary)

Formats a finished validation as markdown plus its email-ready HTML.
"""

from fastapi import APIRouter

from ideascope.config import log
from ideascope.models import SummaryRequest, SummaryResponse
from ideascope.summary import render_summary

router = APIRouter(prefix="/api", tags=["summary"])


@router.post("/summary", response_model=SummaryResponse)
async def summarize(body: SummaryRequest) -> SummaryResponse:
    """POST /api/summary"""
    summary = render_summary(body)
    log("INFO", "summary rendered", competitors=len(body.competitors), markdown_length=len(summary.markdown))
    return summary
