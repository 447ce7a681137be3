from __future__ import annotations

import logging
import math
import re
import time
from typing import Any

from .data_store import ASCENDING, UniversityCollection
from .errors import FetchFailed
from .models import Pagination, RankingFilters, RankingsQuery, RankingsResponse
from .scoring import COMPOSITE_SCORE, OVERALL_SCORE, calculate_composite_score
from .validation import (
    rank_field,
    validate_pagination,
    validate_region,
    validate_subject,
    validate_weights,
    validate_year,
)

logger = logging.getLogger(__name__)


def build_filter(
    year: str | None,
    region: str | None,
    subject_field: str | None,
) -> dict[str, Any]:
    """Conjunction of the year, region and subject predicates that apply."""
    query: dict[str, Any] = {}
    if year:
        query[rank_field(year)] = {"$exists": True, "$ne": None}
    if region:
        query["Region"] = {"$regex": re.escape(region), "$options": "i"}
    if subject_field:
        query[subject_field] = {"$exists": True, "$ne": None}
    return query


def determine_sort_field(year: str | None, subject_field: str | None) -> str:
    """Year rank wins over subject score, which wins over Overall SCORE."""
    if year:
        return rank_field(year)
    if subject_field:
        return subject_field
    return OVERALL_SCORE


def build_pagination(total_items: int, page: int, limit: int) -> Pagination:
    total_pages = math.ceil(total_items / limit) if total_items else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def apply_composite_scores(
    records: list[dict[str, Any]],
    weights: dict[str, float],
) -> list[dict[str, Any]]:
    return [
        {**record, COMPOSITE_SCORE: calculate_composite_score(record, weights)}
        for record in records
    ]


def _composite_sort_key(record: dict[str, Any]) -> float:
    score = record.get(COMPOSITE_SCORE)
    return -math.inf if score is None else score


def get_rankings(
    query: RankingsQuery,
    collection: UniversityCollection,
) -> RankingsResponse:
    """Validate *query*, page through *collection* and shape the response.

    Raises ``ValidationFailed`` before the collection is touched when any
    parameter is invalid, and ``FetchFailed`` when the page or count query
    cannot be answered.
    """
    start_time = time.time()

    # --- Validation ---
    year = validate_year(query.year)
    region = validate_region(query.region)
    subject_field = validate_subject(query.subject)
    paging = validate_pagination(query.page, query.limit)
    weights = validate_weights(query.weights, query.weight_params)
    page, limit = paging["page"], paging["limit"]

    # --- Filter / sort ---
    store_filter = build_filter(year, region, subject_field)
    sort_field = determine_sort_field(year, subject_field)
    skip = (page - 1) * limit

    # --- Fetch ---
    try:
        records = (
            collection.find(store_filter)
            .sort(sort_field, ASCENDING)
            .skip(skip)
            .limit(limit)
            .to_list()
        )
        total = collection.count(store_filter)
    except Exception as exc:
        logger.exception("Error fetching rankings")
        raise FetchFailed(str(exc)) from exc

    # --- Composite scoring ---
    if weights:
        records = apply_composite_scores(records, weights)
        # Only the fetched page is reordered; counts are unaffected.
        if not year and not subject_field:
            records.sort(key=_composite_sort_key, reverse=True)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "rankings year=%s region=%s subject=%s weighted=%s page=%d limit=%d "
        "returned=%d total=%d in %.1fms",
        year, region, query.subject, bool(weights), page, limit,
        len(records), total, elapsed_ms,
    )

    return RankingsResponse(
        data=records,
        pagination=build_pagination(total, page, limit),
        filters=RankingFilters(
            year=year,
            region=region,
            subject=query.subject or None,
            weights=weights,
        ),
    )
