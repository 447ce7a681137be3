from __future__ import annotations


class RankingsError(Exception):
    """Base class for errors surfaced by the rankings endpoint."""


class ValidationFailed(RankingsError):
    """Client supplied a malformed or unrecognised query parameter (HTTP 400)."""


class InvalidSubject(ValidationFailed):
    pass


class InvalidRegion(ValidationFailed):
    pass


class InvalidYear(ValidationFailed):
    pass


class InvalidPage(ValidationFailed):
    pass


class InvalidLimit(ValidationFailed):
    pass


class InvalidWeightsFormat(ValidationFailed):
    pass


class InvalidWeightSubjects(ValidationFailed):
    pass


class InvalidWeightValues(ValidationFailed):
    pass


class WeightsNotNormalized(ValidationFailed):
    pass


class FetchFailed(RankingsError):
    """The data store could not answer the page or count query (HTTP 500)."""


class DataAccessError(Exception):
    """Raised by the collection when a query cannot be executed."""
