import locale
import os
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fileserver.config.config import settings
from fileserver.errors import install_error_handlers
from fileserver.routers import files as files_router
from fileserver.routers import health

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("collation_locale_unavailable", lang=os.environ.get("LANG"))
    logger.info("startup", version=settings.app_version, cwd=os.getcwd(), default_path=settings.default_path)
    yield
    logger.info("shutdown")


app = FastAPI(
    title="fileserver",
    description="Remote file-manager backend exposing part of the host filesystem",
    version=settings.app_version,
    lifespan=lifespan,
)

install_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(files_router.router)


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured host and port."""
    uvicorn.run("fileserver.main:app", host=settings.host, port=settings.port, log_level=settings.log_level)
