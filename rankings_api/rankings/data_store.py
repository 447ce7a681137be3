from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import pandas as pd

from ..config import DEFAULT_APP_CONFIG
from .errors import DataAccessError

logger = logging.getLogger(__name__)

ASCENDING = 1
DESCENDING = -1


def _to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert rows to plain dicts with ``None`` in place of NaN."""
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def _integer_ranks(df: pd.DataFrame) -> pd.DataFrame:
    """Cast whole-number rank/index columns to nullable ``Int64``.

    A rank column with any gap loads as float64, which would serve rank 1 as 1.0.
    """
    df = df.copy()
    for column in df.columns:
        name = str(column)
        if not (name == "Index" or name.lower().endswith(" rank")):
            continue
        values = df[column]
        if not pd.api.types.is_float_dtype(values):
            continue
        present = values.dropna()
        if (present % 1 == 0).all():
            df[column] = values.astype("Int64")
    return df


def _field_mask(df: pd.DataFrame, field: str, condition: Any) -> pd.Series:
    if field in df.columns:
        col = df[field]
    else:
        col = pd.Series(None, index=df.index, dtype=object)

    if not isinstance(condition, dict):
        condition = {"$eq": condition}

    mask = pd.Series(True, index=df.index)
    for op, operand in condition.items():
        if op == "$exists":
            present = col.notna()
            mask &= present if operand else ~present
        elif op == "$ne":
            if operand is None:
                mask &= col.notna()
            else:
                mask &= (col != operand).fillna(True).astype(bool)
        elif op == "$eq":
            if operand is None:
                mask &= col.isna()
            else:
                mask &= (col == operand).fillna(False).astype(bool)
        elif op == "$in":
            mask &= col.isin(list(operand)).astype(bool)
        elif op == "$regex":
            case = "i" not in condition.get("$options", "")
            try:
                matched = col.astype("string").str.contains(operand, case=case, regex=True, na=False)
            except re.error as exc:
                raise DataAccessError(f"Invalid regex for {field!r}: {exc}") from exc
            mask &= matched.astype(bool)
        elif op == "$options":
            continue
        else:
            raise DataAccessError(f"Unsupported query operator {op!r} on {field!r}")
    return mask


class RankingCursor:
    """Lazy query over a :class:`UniversityCollection`.

    ``sort``/``skip``/``limit`` only record options; rows are selected when
    :meth:`to_list` runs.
    """

    def __init__(self, collection: UniversityCollection, query: dict[str, Any]):
        self._collection = collection
        self._query = query
        self._sort: tuple[str, int] | None = None
        self._skip = 0
        self._limit: int | None = None

    def sort(self, field: str, direction: int = ASCENDING) -> RankingCursor:
        self._sort = (field, direction)
        return self

    def skip(self, n: int) -> RankingCursor:
        self._skip = max(0, n)
        return self

    def limit(self, n: int) -> RankingCursor:
        self._limit = n if n > 0 else None
        return self

    def to_list(self) -> list[dict[str, Any]]:
        df = self._collection.select(self._query)

        if self._sort and self._sort[0] in df.columns:
            field, direction = self._sort
            df = df.sort_values(
                field,
                ascending=direction >= 0,
                kind="mergesort",
                na_position="last",
            )

        df = df.iloc[self._skip:]
        if self._limit is not None:
            df = df.iloc[: self._limit]
        return _to_records(df)


class UniversityCollection:
    """Read-only document collection backed by a pandas DataFrame."""

    def __init__(self, df: pd.DataFrame):
        self._df = _integer_ranks(df)

    def __len__(self) -> int:
        return len(self._df)

    def select(self, query: dict[str, Any]) -> pd.DataFrame:
        mask = pd.Series(True, index=self._df.index)
        for field, condition in query.items():
            mask &= _field_mask(self._df, field, condition)
        return self._df.loc[mask]

    def find(self, query: dict[str, Any] | None = None) -> RankingCursor:
        return RankingCursor(self, dict(query or {}))

    def count(self, query: dict[str, Any] | None = None) -> int:
        return len(self.select(dict(query or {})))

    def distinct(self, field: str) -> list[Any]:
        if field not in self._df.columns:
            return []
        return sorted(self._df[field].dropna().unique().tolist())

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> UniversityCollection:
        return cls(pd.DataFrame.from_records(records))


def load_collection(path: Path) -> UniversityCollection:
    try:
        df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise DataAccessError(f"Could not load rankings data from {path}: {exc}") from exc
    logger.info("Loaded %d universities from %s", len(df), path)
    return UniversityCollection(df)


_collection: UniversityCollection | None = None


def get_collection() -> UniversityCollection:
    """Return the shared university collection, loading it on first call."""
    global _collection
    if _collection is None:
        _collection = load_collection(DEFAULT_APP_CONFIG.data_path)
    return _collection


def clear_collection() -> None:
    global _collection
    _collection = None
