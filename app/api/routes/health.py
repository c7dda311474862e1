from __future__ import annotations

import time
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.adapters.storage.base import AbstractTranscriptionRepository
from app.api.dependencies import get_repository

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    request: Request,
    repository: Annotated[AbstractTranscriptionRepository, Depends(get_repository)],
) -> JSONResponse:
    """Health check endpoint.

    Reports uptime and document store connectivity. Returns 503 when the
    store is unreachable so load balancers can take the instance out.
    """

    connected = await repository.ping()
    uptime = time.monotonic() - request.app.state.started_at

    body = {
        "success": True,
        "message": (
            "Server is healthy"
            if connected
            else "Server is running but database is disconnected"
        ),
        "data": {
            "status": "ok" if connected else "degraded",
            "uptime_seconds": round(uptime, 2),
            "database": {"connected": connected},
        },
    }
    return JSONResponse(status_code=200 if connected else 503, content=body)
