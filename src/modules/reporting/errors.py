"""Exception hierarchy for the reporting engine.

Every stage is fail-fast: these propagate to the caller unchanged.
"""


class ReportingError(Exception):
    """Base class for all reporting failures."""


class ValidationError(ReportingError, ValueError):
    """A report configuration or input record is malformed."""


class NotFoundError(ReportingError, LookupError):
    """A report id (or artifact) does not exist."""


class DataSourceError(ReportingError):
    """The data source failed to return records."""


class UnsupportedFormatError(ReportingError):
    """Export was requested for a format with no serializer."""


class SerializationError(ReportingError):
    """A serializer failed to render or write its artifact."""


class NotAvailableError(ReportingError):
    """The host exposes no share capability."""
