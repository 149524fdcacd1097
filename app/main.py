import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.v1.router import api_router
from app.core.config import settings
from app.services.project_parser import GALLERY_URL_PREFIX

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup: report which integrations are usable
    settings.validate_integrations()
    logger.info("SolarLead API started (env=%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="SolarLead API",
    description="Solar lead capture, qualification and installation CRM",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")

if Path(settings.GALLERY_DIR).is_dir():
    app.mount(GALLERY_URL_PREFIX, StaticFiles(directory=settings.GALLERY_DIR), name="installations")


@app.get("/health")
async def health():
    return {"status": "ok", "service": "solarlead-api", "version": VERSION}
