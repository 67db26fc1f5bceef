"""Main FastAPI application."""
import logging

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from ikpa.api import score, ubuntu
from ikpa.config import DEFAULT_CORS_ORIGINS, get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Ikpa Scoring API",
    description="Cash Flow Score and Ubuntu dependency ratio API",
    version="1.0.0",
    debug=settings.debug,
)

allowed_origins = settings.cors_origins or DEFAULT_CORS_ORIGINS.copy()
cors_allow_all = settings.cors_allow_all or "*" in allowed_origins

if cors_allow_all:
    cors_kwargs = {
        "allow_origins": ["*"],
        "allow_origin_regex": None,
        "allow_credentials": False,
    }
else:
    cors_kwargs = {
        "allow_origins": allowed_origins,
        "allow_origin_regex": settings.cors_origin_regex,
        "allow_credentials": True,
    }

app.add_middleware(
    CORSMiddleware,
    allow_methods=["*"],
    allow_headers=["*"],
    **cors_kwargs,
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Ikpa Scoring API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/favicon.ico")
async def favicon():
    return Response(status_code=204)


app.include_router(
    score.router,
    prefix=f"/api/{settings.api_version}/score",
    tags=["score"]
)

app.include_router(
    ubuntu.router,
    prefix=f"/api/{settings.api_version}/ubuntu",
    tags=["ubuntu"]
)
