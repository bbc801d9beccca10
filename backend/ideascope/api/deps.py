"""
IdeaScope Backend — Shared API Dependencies

Per-IP rate limiter and the process-wide pipeline orchestrator.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ideascope.orchestrator import Orchestrator

# Rate limiter: per-IP, applied per-endpoint via decorator
limiter = Limiter(key_func=get_remote_address)


def get_orchestrator(request: Request) -> Orchestrator:
    """The orchestrator built by create_app() (tests override this dependency)."""
    return request.app.state.orchestrator
