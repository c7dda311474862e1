from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.info import router as info_router
from app.api.routes.transcription import router as transcription_router

__all__ = ["health_router", "info_router", "transcription_router"]
