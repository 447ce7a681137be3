"""
University rankings query engine.

Responsibilities:
- Validate and normalise client query parameters (year, region, subject, pagination, weights).
- Build a document-store filter and sort order from the validated parameters.
- Page through the university collection and count matching records.
- Blend subject scores into an optional client-weighted composite score.
"""
