"""
FastAPI service for the Indonesian Address Parser.

REST API for address resolution with:
- Single and batch resolution endpoints
- Learning state stats, export and import
- Runtime settings and gazetteer reload
- Swagger documentation, health checks, CORS support
"""

import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from alamat_parser import (
    AddressResolver,
    GazetteerLoadError,
    LearningSnapshot,
    LearningStats,
    ResolverConfig,
    ResolveResult,
    __version__,
)
from alamat_parser.schemas import (
    BatchResolveRequest,
    BatchResolveResponse,
    GazetteerUploadRequest,
    HealthResponse,
    ResolveRequest,
    ResolveResponse,
    SettingsRequest,
    SettingsResponse,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Global resolver instance
resolver: AddressResolver | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resolver on startup."""
    global resolver

    config = ResolverConfig.from_env()
    gazetteer_path = os.getenv("GAZETTEER_PATH")

    if gazetteer_path and Path(gazetteer_path).exists():
        logger.info(f"Loading gazetteer from {gazetteer_path}")
        resolver = AddressResolver.from_csv(gazetteer_path, config=config)
    else:
        logger.info("GAZETTEER_PATH not set or missing, using bundled sample gazetteer")
        resolver = AddressResolver.with_sample_gazetteer(config=config)

    yield

    # Cleanup
    resolver = None


# Create FastAPI app
app = FastAPI(
    title="Indonesian Address Parser API",
    description="""
    API for resolving free-text Indonesian addresses into administrative components.

    ## Features
    - **Gazetteer lookup**: province, regency/city, district and village, narrowest match wins
    - **Typo tolerance**: misspelled province names resolved by Levenshtein similarity
    - **Self-learning**: corrections inferred from low-confidence parses are applied to later ones

    ## Example
    ```json
    POST /resolve
    {"address": "Jl. Kebon Melati No. 5, Tanah Abang, Jakarta Pusat 10120"}
    ```
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
    return response


def _require_resolver() -> AddressResolver:
    if resolver is None:
        raise HTTPException(status_code=503, detail="Resolver not initialized")
    return resolver


# Health check endpoint
@app.get("/", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns service status and gazetteer size.
    """
    size = len(resolver.gazetteer) if resolver is not None else 0
    return HealthResponse(
        status="healthy",
        gazetteer_loaded=size > 0,
        gazetteer_size=size,
        version=__version__,
    )


# Resolve single address
@app.post("/resolve", response_model=ResolveResponse, tags=["Resolution"])
def resolve_address(request: ResolveRequest):
    """
    Resolve a single address.

    **Example Request:**
    ```json
    {"address": "Kebon Melati Tanah Abang Jakarta Pusat"}
    ```

    **Example Response:**
    ```json
    {
        "success": true,
        "result": {
            "success": true,
            "parsed": {"village": "Kebon Melati", "district": "Tanah Abang", "postal_code": "10120"},
            "confidence": 1.0
        },
        "inference_time_ms": 0.4
    }
    ```
    """
    return _require_resolver().resolve_with_timing(request.address)


# Batch resolve endpoint
@app.post("/resolve/batch", response_model=BatchResolveResponse, tags=["Resolution"])
def resolve_batch(request: BatchResolveRequest):
    """
    Resolve multiple addresses in a single request.

    **Limits:**
    - Maximum 100 addresses per request
    """
    engine = _require_resolver()

    if len(request.addresses) > 100:
        raise HTTPException(status_code=400, detail="Maximum 100 addresses per batch")

    return engine.resolve_batch(request.addresses)


# Simple GET endpoint for testing
@app.get("/resolve/{address:path}", response_model=ResolveResult, tags=["Resolution"])
def resolve_address_get(address: str):
    """
    Resolve address via GET request (for testing).

    Note: Use POST /resolve for production - this endpoint is for quick testing only.
    """
    return _require_resolver().resolve(address)


@app.get("/learning/stats", response_model=LearningStats, tags=["Learning"])
def learning_stats():
    """Counts of learned words, patterns, corrections and gazetteer size."""
    return _require_resolver().get_learning_stats()


@app.get("/learning/export", response_model=LearningSnapshot, tags=["Learning"])
def export_learning():
    """Full learning state snapshot."""
    return _require_resolver().export_learning_state()


@app.post("/learning/import", response_model=LearningStats, tags=["Learning"])
def import_learning(snapshot: LearningSnapshot):
    """Replace learning state with a previously exported snapshot."""
    engine = _require_resolver()
    engine.import_learning_state(snapshot)
    return engine.get_learning_stats()


@app.put("/settings", response_model=SettingsResponse, tags=["Settings"])
def update_settings(request: SettingsRequest):
    """Toggle learning and adjust the fuzzy match threshold."""
    engine = _require_resolver()

    if request.learning_enabled is not None:
        engine.set_learning_enabled(request.learning_enabled)
    if request.fuzzy_match_threshold is not None:
        engine.set_fuzzy_threshold(request.fuzzy_match_threshold)

    return SettingsResponse(
        learning_enabled=engine.config.learning_enabled,
        fuzzy_match_threshold=engine.config.fuzzy_match_threshold,
    )


@app.post("/gazetteer", response_model=HealthResponse, tags=["Gazetteer"])
def upload_gazetteer(request: GazetteerUploadRequest):
    """
    Replace the gazetteer with a CSV reference table.

    The previous gazetteer stays active if the upload cannot be parsed.
    """
    engine = _require_resolver()

    try:
        engine.load_csv_text(request.csv)
    except GazetteerLoadError as e:
        raise HTTPException(status_code=422, detail=str(e))

    size = len(engine.gazetteer)
    return HealthResponse(gazetteer_loaded=size > 0, gazetteer_size=size, version=__version__)


# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    uvicorn.run(app, host="0.0.0.0", port=port)
