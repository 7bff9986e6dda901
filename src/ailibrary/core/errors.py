class LibraryError(Exception):
    """Base error for all user-facing library exceptions."""


class ConfigurationError(LibraryError):
    """Raised when configuration is invalid or incomplete."""


class ValidationError(LibraryError):
    """Raised when model invariants fail."""


class ResourceNotFoundError(LibraryError):
    """Raised when a resource id does not exist in the catalog."""


class DatastoreError(LibraryError):
    """Raised when a select/insert/update/delete call against the datastore fails."""


class SpreadsheetError(LibraryError):
    """Raised when a workbook cannot be read."""


class CsvImportError(LibraryError):
    """Raised when pasted or uploaded CSV text cannot be previewed."""


class EmptyCsvError(CsvImportError):
    """Raised when CSV text has no data rows below the header."""


class NoValidRowsError(CsvImportError):
    """Raised when no CSV row carries both a title and a link."""


class ImportCancelled(LibraryError):
    """Raised when an operator interrupts an import before it commits."""
