"""
farmwise.api.main — FastAPI application entry point
====================================================

Run with::

    uvicorn farmwise.api.main:app --reload --port 5000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from farmwise.api.auth import router as auth_router  # noqa: E402
from farmwise.api.deps import get_config, get_engine  # noqa: E402
from farmwise.api.routes.admin import router as admin_router  # noqa: E402
from farmwise.api.routes.challenges import router as challenges_router  # noqa: E402
from farmwise.api.routes.community import router as community_router  # noqa: E402
from farmwise.api.routes.leaderboard import router as leaderboard_router  # noqa: E402
from farmwise.api.routes.rewards import router as rewards_router  # noqa: E402
from farmwise.api.routes.users import router as users_router  # noqa: E402
from farmwise.errors import FarmwiseError  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Origins allowed to call the API from a browser.

    ``CORS_ALLOW_ORIGINS`` (comma-separated) wins; otherwise the web
    client's ``client_url`` from the loaded config.
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "")
    origins = [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]
    return origins or [get_config().client_url.rstrip("/")]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the engine before the first request so a bad DATABASE_URL fails fast."""
    engine = get_engine()
    logger.info(
        "FarmWise API up (db=%s, points/level=%d)",
        engine.url.get_backend_name(), get_config().points_per_level,
    )
    yield
    engine.dispose()
    logger.info("FarmWise API stopped")



app = FastAPI(
    title="FarmWise API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FarmwiseError)
async def farmwise_error_handler(request: Request, exc: FarmwiseError) -> JSONResponse:
    """Render typed service failures as ``{"detail", "code"}``."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Mount routers
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(challenges_router, prefix="/api")
app.include_router(leaderboard_router, prefix="/api")
app.include_router(rewards_router, prefix="/api")
app.include_router(community_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok", "message": "FarmWise API is running"}
