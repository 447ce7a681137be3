from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import DEFAULT_APP_CONFIG
from .rankings.data_store import UniversityCollection, get_collection
from .rankings.errors import DataAccessError, FetchFailed, ValidationFailed
from .rankings.handler import get_rankings
from .rankings.models import ErrorResponse, RankingsQuery, RankingsResponse
from .rankings.validation import (
    VALID_REGIONS,
    VALID_SUBJECTS,
    VALID_WEIGHT_SUBJECTS,
    VALID_YEARS,
    WEIGHT_PARAM_PREFIX,
)

logging.basicConfig(
    level=DEFAULT_APP_CONFIG.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="University Rankings API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=DEFAULT_APP_CONFIG.cors_origins_list,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ── Error handlers ───────────────────────────────────────────────────────


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "message": str(exc)},
    )


@app.exception_handler(FetchFailed)
@app.exception_handler(DataAccessError)
async def fetch_failed_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to fetch rankings", "message": str(exc)},
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(collection: UniversityCollection = Depends(get_collection)) -> dict:
    return {
        "subjects": list(VALID_SUBJECTS),
        "weight_subjects": list(VALID_WEIGHT_SUBJECTS),
        "regions": list(VALID_REGIONS),
        "years": list(VALID_YEARS),
        "countries": collection.distinct("Country"),
    }


# ── Rankings ─────────────────────────────────────────────────────────────

router = APIRouter(prefix=DEFAULT_APP_CONFIG.api_prefix, tags=["rankings"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    500: {"model": ErrorResponse, "description": "Failed to fetch rankings"},
}


@router.get("", responses=_ERROR_RESPONSES)
def universities(collection: UniversityCollection = Depends(get_collection)) -> list[dict]:
    return collection.find({}).to_list()


@router.get("/rankings", response_model=RankingsResponse, responses=_ERROR_RESPONSES)
def rankings(
    request: Request,
    year: str | None = None,
    region: str | None = None,
    subject: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    weights: str | None = None,
    collection: UniversityCollection = Depends(get_collection),
) -> RankingsResponse:
    # weight_<SUBJECT> keys are open-ended, so collect them from the raw query string
    weight_params = {
        key: value
        for key, value in request.query_params.items()
        if key.startswith(WEIGHT_PARAM_PREFIX)
    }
    query = RankingsQuery(
        year=year,
        region=region,
        subject=subject,
        page=page,
        limit=limit,
        weights=weights,
        weight_params=weight_params,
    )
    return get_rankings(query, collection)


app.include_router(router)
