"""
Owner Resolver — FastAPI Server
===============================

RESTful API for resolving property owners from scraped source documents.

Endpoints:
    POST /resolve           Resolve owners from a JSON source document
    POST /resolve/file      Upload a JSON source document file
    GET  /health            Health check / readiness

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Docs:
    http://localhost:8000/docs             # Swagger UI (auto-generated)
"""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, UploadFile
from pydantic import BaseModel

from owner_resolver import __version__
from owner_resolver.config import load_config
from owner_resolver.exceptions import OwnerResolutionError
from owner_resolver.pipeline import OwnerResolutionPipeline
from owner_resolver.sources import JsonCandidateSource, SourceDocument

load_dotenv()


# ─── Application Lifespan (pre-warm pipeline) ───────────────────────

_pipeline: OwnerResolutionPipeline | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the pipeline (config + compiled tables) once on startup."""
    global _pipeline  # noqa: PLW0603
    _pipeline = OwnerResolutionPipeline(load_config())
    yield
    _pipeline = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="Owner Resolver API",
    description=(
        "Turns noisy ownership strings scraped from public property records "
        "into deduplicated person/company owners grouped by transfer date, "
        "with an audit list of strings that could not be classified."
    ),
    version=__version__,
    lifespan=lifespan,
)


# ─── Request / Response Schemas ─────────────────────────────────────


class ResolveRequest(SourceDocument):
    """Request body for the /resolve endpoint."""

    model_config = {"json_schema_extra": {"example": {
        "property_id": "12-34-56-7890-0010",
        "current_owners": ["SMITH JOHN A & MARY B ET AL"],
        "transactions": [
            {"date": "03/15/2019", "grantee": "SMITH JOHN A & MARY B"},
            {"date": "07/01/2004", "grantee": "SUNSHINE HOLDINGS LLC"},
        ],
    }}}


class HealthResponse(BaseModel):
    status: str
    version: str
    name_order: str
    company_keywords_loaded: int


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_pipeline() -> OwnerResolutionPipeline:
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialised")
    return _pipeline


def _resolve(document: Any) -> dict:
    """Run one property through the pipeline; hard errors become HTTP 422."""
    pipeline = _get_pipeline()
    try:
        report = pipeline.run(JsonCandidateSource(document))
    except OwnerResolutionError as e:
        raise HTTPException(status_code=422, detail=e.to_error_object()) from e
    return report.to_output()


# ─── Endpoints ───────────────────────────────────────────────────────


@app.post(
    "/resolve",
    summary="Resolve owners from a JSON source document",
    tags=["Resolution"],
    responses={
        422: {"description": "Missing property identifier or malformed document"},
        503: {"description": "Pipeline not yet initialised"},
    },
)
def resolve_owners(request: ResolveRequest) -> dict:
    """Run the full resolution pipeline on one property's candidate strings.

    Returns `{"property_<id>": {"owners_by_date": {...}}, "invalid_owners": [...]}`
    where date keys are ISO dates ascending, then `unknown_date_N`, then `current`.
    """
    return _resolve(request.model_dump())


@app.post(
    "/resolve/file",
    summary="Resolve owners from an uploaded JSON file",
    tags=["Resolution"],
    responses={
        413: {"description": "File too large (max 1 MB)"},
        400: {"description": "File is not valid UTF-8 JSON"},
        422: {"description": "Missing property identifier or malformed document"},
        503: {"description": "Pipeline not yet initialised"},
    },
)
async def resolve_owners_file(file: UploadFile) -> dict:
    """Upload a `.json` source document (up to 1 MB)."""
    if file.size and file.size > 1_048_576:
        raise HTTPException(status_code=413, detail="File too large (max 1 MB)")

    content = await file.read()
    try:
        document = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded JSON")

    return await asyncio.to_thread(_resolve, document)


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Pipeline not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and configuration info."""
    pipeline = _get_pipeline()
    return HealthResponse(
        status="healthy",
        version=__version__,
        name_order=pipeline.config.name_order.value,
        company_keywords_loaded=len(pipeline.config.company_keywords),
    )
