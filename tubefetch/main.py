import logging
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from tubefetch.api import download, health, info
from tubefetch.api.health import STATIC_DIR
from tubefetch.config.settings import config
from tubefetch.core.logging import setup_logging
from tubefetch.core.middleware import RequestIdMiddleware
from tubefetch.core.state import state
from tubefetch.i18n import i18n
from tubefetch.services.provider import provider
from tubefetch.utils.locale import get_locale

logger = logging.getLogger("tubefetch")

setup_logging(config.logging)

app = FastAPI(
    title=config.api.title,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    locale = get_locale(request.headers.get("accept-language"))
    return JSONResponse(status_code=400, content={"error": i18n.get("error.bad_request", locale=locale)})


# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(info.router, tags=["Info"])
app.include_router(download.router, tags=["Download"])
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.on_event("startup")
async def startup_event():
    # Reserved for on-disk downloads; no endpoint writes here
    downloads_dir = os.path.abspath(config.server.downloads_dir)
    os.makedirs(downloads_dir, exist_ok=True)
    state.downloads_dir = downloads_dir

    state.ytdlp_version = await provider.version()

    logger.info(f"tubefetch running at http://localhost:{config.server.port}")
    logger.info(f"Downloads directory: {downloads_dir}")
    logger.info(f"yt-dlp version: {state.ytdlp_version}")


def run():
    """Console entry point"""
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    run()
