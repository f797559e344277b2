"""
ReviewGate FastAPI Application — Deterministic JS/TS code review.

  POST /analyze        → review one source text, store it, return the Review
  POST /analyze/files  → review a change set of several files
  GET  /reviews        → recent review summaries
  GET  /reviews/{id}   → one stored review
  GET  /health         → {"status": "ok", ...}
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reviewgate.api.routes.analyze import router as analyze_router
from reviewgate.api.routes.health import router as health_router
from reviewgate.api.routes.reviews import router as reviews_router
from reviewgate.config import settings
from reviewgate.errors import ReviewGateError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("reviewgate")

app = FastAPI(
    title="ReviewGate",
    description="Deterministic static review engine for JavaScript/TypeScript",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReviewGateError)
async def review_gate_error_handler(request: Request, exc: ReviewGateError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request body", "detail": exc.errors()},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(analyze_router)
app.include_router(reviews_router)
app.include_router(health_router)
