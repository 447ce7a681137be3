"""
Configuration for the rankings data ingestion pipeline.
"""

from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class IngestionConfig:
    raw_data_dir: Path = _DATA_DIR / "raw"
    processed_data_dir: Path = _DATA_DIR / "processed"
    raw_filename: str = "rankings.csv"
    processed_filename: str = "universities.csv"

    @property
    def raw_path(self) -> Path:
        return self.raw_data_dir / self.raw_filename

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
