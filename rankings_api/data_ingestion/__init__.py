"""
Rankings data ingestion package.

Responsibilities:
- Read a raw university-ranking export (CSV).
- Normalize it into the canonical university record schema.
- Persist the processed dataset locally for the rankings API.
"""
