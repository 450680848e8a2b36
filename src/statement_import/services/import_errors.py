"""
Exceptions raised by statement import.

Only unreadable files and store failures are errors. A file that does not
look like a statement, or a row with a bad date or amount, is not: those
degrade to an empty result, a skipped row, or a zero amount.
"""


class StatementImportError(Exception):
    """Base class for statement import failures."""
    pass


class UnreadableFileError(StatementImportError):
    """Raised when uploaded bytes cannot be read as statement text."""
    pass


class StoreOperationError(StatementImportError):
    """
    Raised when an existence check or write batch fails.

    Batches committed before the failure stay committed; re-running the same
    import is safe because duplicates are detected by fingerprint.
    """

    def __init__(self, message: str, imported_before_failure: int = 0):
        super().__init__(message)
        self.imported_before_failure = imported_before_failure
