# coach_backend/main.py

"""FastAPI application: routers, lifespan and the error envelope.

Run locally with:
    uvicorn coach_backend.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from coach_backend.api.analysis.routes import router as analysis_router
from coach_backend.api.checkin.routes import router as checkin_router
from coach_backend.config import settings
from coach_backend.domain.errors import CheckInError
from coach_backend.infrastructure.db import bootstrap

logging.basicConfig(
    level=settings().log_level,
    format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("coach_backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Coach backend starting")
    await bootstrap.init_engine(settings())
    yield
    await bootstrap.dispose_engine()
    logger.info("Coach backend shut down")


app = FastAPI(title="Coach Check-in Backend", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(checkin_router, prefix="/api")
app.include_router(analysis_router, prefix="/api")


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}

# ───────────────────────── error envelope ───────────────────────── #

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


@app.exception_handler(CheckInError)
async def checkin_error_handler(request: Request, exc: CheckInError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind.value}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.kind.value}: {exc.message}")
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"Invalid {field}" if field else "Invalid request"
    return _error(400, message)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, "An unexpected error occurred")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("coach_backend.main:app", host="127.0.0.1", port=8000, reload=True)
