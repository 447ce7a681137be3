from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from ..rankings.validation import VALID_WEIGHT_SUBJECTS, VALID_YEARS, rank_field, score_field
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

IDENTITY_COLUMNS: List[str] = [
    "Index",
    "Name",
    "Country",
    "Region",
    "Size",
    "Focus",
    "Research",
    "Status",
]

RANK_COLUMNS: List[str] = [rank_field(y) for y in sorted(VALID_YEARS, reverse=True)]

SUBJECT_COLUMNS: List[str] = [
    col for s in VALID_WEIGHT_SUBJECTS for col in (score_field(s), f"{s} RANK")
]

CANONICAL_COLUMNS: List[str] = (
    IDENTITY_COLUMNS[:1] + RANK_COLUMNS + IDENTITY_COLUMNS[1:] + SUBJECT_COLUMNS + ["Overall SCORE"]
)

# Raw export headers seen in published ranking tables
COLUMN_ALIASES: dict[str, List[str]] = {
    "Name": ["Name", "Institution Name", "institution", "University"],
    "Country": ["Country", "Location", "Country/Territory"],
    "Region": ["Region", "region"],
    "Overall SCORE": ["Overall SCORE", "Overall", "Overall Score"],
    "2026 Rank": ["2026 Rank", "2026 RANK", "Rank 2026"],
    "2025 Rank": ["2025 Rank", "2025 RANK", "Rank 2025"],
}


def _parse_rank(value: object) -> float | None:
    """Parse rank cells like ``"12"``, ``"=12"`` or ``"601-650"`` to their leading number."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    raw = str(value).strip().lstrip("=+")
    if "-" in raw:
        raw = raw.split("-")[0].strip()
    try:
        return float(raw)
    except ValueError:
        return None


def _first_present(df: pd.DataFrame, candidates: List[str]) -> str | None:
    for col in candidates:
        if col in df.columns:
            return col
    return None


def normalize_rankings(raw: pd.DataFrame) -> pd.DataFrame:
    """Map a raw ranking table onto :data:`CANONICAL_COLUMNS`."""
    canonical = pd.DataFrame(index=raw.index)

    for column in CANONICAL_COLUMNS:
        source = _first_present(raw, COLUMN_ALIASES.get(column, [column]))
        canonical[column] = raw[source] if source else pd.NA

    if canonical["Index"].isna().all():
        canonical["Index"] = range(1, len(canonical) + 1)

    for column in RANK_COLUMNS:
        canonical[column] = canonical[column].apply(_parse_rank)

    numeric = [c for c in SUBJECT_COLUMNS if c.endswith(" SCORE")] + ["Overall SCORE"]
    for column in numeric:
        canonical[column] = pd.to_numeric(canonical[column], errors="coerce")

    canonical["Region"] = canonical["Region"].fillna("").astype(str).str.strip()
    return canonical[CANONICAL_COLUMNS]


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the ingestion pipeline.

    Steps:
    - Read the raw ranking export.
    - Map raw fields into the canonical university schema.
    - Persist cleaned data as CSV for the rankings API.
    """
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    raw = pd.read_csv(config.raw_path)
    canonical = normalize_rankings(raw)

    output_path = config.processed_path
    canonical.to_csv(output_path, index=False)
    logger.info("Wrote %d universities to %s", len(canonical), output_path)
    return output_path


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    path = run_ingestion()
    print(f"Ingestion complete. Processed data saved to: {path}")
