from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RankingsQuery(BaseModel):
    """Raw query parameters for ``GET /rankings``, before validation."""

    year: str | None = None
    region: str | None = None
    subject: str | None = None
    page: str | None = None
    limit: str | None = None
    weights: str | None = Field(
        default=None, description='JSON object string, e.g. {"AR": 60, "ER": 40}'
    )
    weight_params: dict[str, str] = Field(
        default_factory=dict,
        description="Individual weight_<SUBJECT> query parameters",
    )


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., alias="currentPage")
    total_pages: int = Field(..., alias="totalPages")
    total_items: int = Field(..., alias="totalItems")
    items_per_page: int = Field(..., alias="itemsPerPage")
    has_next_page: bool = Field(..., alias="hasNextPage")
    has_prev_page: bool = Field(..., alias="hasPrevPage")


class RankingFilters(BaseModel):
    year: str | None = None
    region: str | None = None
    subject: str | None = None
    weights: dict[str, float] | None = None


class RankingsResponse(BaseModel):
    data: list[dict[str, Any]]
    pagination: Pagination
    filters: RankingFilters


class ErrorResponse(BaseModel):
    error: str
    message: str
