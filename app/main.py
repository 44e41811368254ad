"""FastAPI application entrypoint."""

import logging
import shutil
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import init_db
from app.routers import templates

# ── Logging setup ────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await init_db()

    # ── Sync disk templates into DB ──────────────────────────────
    try:
        from app.database import async_session
        from app.services.template_service import sync_templates_from_disk
        async with async_session() as session:
            result = await sync_templates_from_disk(session)
            if result["created"] or result["updated"]:
                logger.info("Template sync: %d created, %d updated",
                            len(result["created"]), len(result["updated"]))
    except Exception as exc:
        logger.warning("Template disk sync failed (non-fatal): %s", exc)

    if not shutil.which(settings.typst_binary):
        logger.warning(
            "Typst binary '%s' not found on PATH; compile requests will fail.",
            settings.typst_binary,
        )

    yield


app = FastAPI(
    title="Contract Builder",
    description="Legal contract templates compiled to PDF with Typst",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3001"],  # web app dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(templates.router, prefix="/api/templates", tags=["templates"])


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "contract-builder",
        "typst": {
            "binary": settings.typst_binary,
            "installed": shutil.which(settings.typst_binary) is not None,
        },
    }
