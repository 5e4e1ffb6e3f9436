"""fakeaudit exception types."""


class FakeAuditError(Exception):
    """Base class for run-level failures."""


class CatalogError(FakeAuditError):
    """A pattern catalog file could not be loaded or contains invalid rules."""


class ReportWriteError(FakeAuditError):
    """The report output location is not writable."""
