"""
MathGrade v1.0 - Main Application
FastAPI app. Mounts the grading router, CORS and health checks.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mathgrade.config import CORS_ORIGINS, LOG_LEVEL, MATCHING_MODE, PORT

logger = logging.getLogger("mathgrade")

VERSION = "1.0.0"


# ─── Lifespan (startup/shutdown) ─────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    logger.info(f"MathGrade v{VERSION} ready (default matching mode: {MATCHING_MODE})")
    yield
    logger.info("Shutting down")


# ─── App ─────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="MathGrade v1.0",
    description="Math answer-equivalence grading",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
from mathgrade.routers import attempts
app.include_router(attempts.router)


# Health check (both /health and /healthz)
@app.get("/health")
@app.get("/healthz")
async def health():
    return {"status": "ok", "version": VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
