import os

from fastapi import APIRouter
from fastapi.responses import FileResponse

from tubefetch.core.state import state
from tubefetch.i18n import i18n

STATIC_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "static")

router = APIRouter()


@router.get("/", include_in_schema=False)
async def root():
    """Client application shell"""
    return FileResponse(os.path.join(STATIC_DIR, "index.html"))


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    return {
        "status": i18n.get("health.status"),
        "ytdlp_version": state.ytdlp_version,
    }
