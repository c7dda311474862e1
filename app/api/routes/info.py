from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Info"])


@router.get("/info")
def api_info(request: Request) -> dict:
    """Describe the service and list its endpoints with absolute URLs."""

    base_url = str(request.base_url).rstrip("/")
    app = request.app
    return {
        "success": True,
        "message": "API information retrieved successfully",
        "data": {
            "name": app.title,
            "version": app.version,
            "docs": f"{base_url}{app.docs_url}",
            "endpoints": {
                "health": f"{base_url}/health",
                "transcription": {
                    "url": f"{base_url}/api/transcription",
                    "method": "POST",
                    "description": "Create a mock transcription",
                },
                "speechTranscription": {
                    "url": f"{base_url}/api/speech-transcription",
                    "method": "POST",
                    "description": "Create a transcription with the speech-to-text provider",
                },
                "transcriptions": {
                    "url": f"{base_url}/api/transcriptions",
                    "method": "GET",
                    "description": "List transcriptions from the last 30 days",
                },
            },
        },
    }
