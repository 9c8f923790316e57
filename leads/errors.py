"""
Errors raised by the lead import pipeline.

Every stage raises one of these; the importer and the upload orchestrator
catch them and turn ``message`` into the user-facing session error.
"""


class LeadImportError(Exception):
    """
    Base class for import failures.

    Attributes:
        message: Human-readable error description, safe to show to the user
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IntakeError(LeadImportError):
    """Raised when a file is rejected before parsing (wrong type, too large)."""
    pass


class ParseError(LeadImportError):
    """Raised when the file cannot be read as delimited text."""
    pass


class RowCountError(LeadImportError):
    """
    Raised when the parsed row count is outside the accepted range.

    Attributes:
        row_count: Number of data rows found in the file
        limit: Maximum rows allowed per import
    """

    def __init__(self, message: str, row_count: int, limit: int):
        super().__init__(message)
        self.row_count = row_count
        self.limit = limit


class EmptyFileError(RowCountError):
    """Raised when the file holds a header row but no data rows."""
    pass


class RowLimitError(RowCountError):
    """Raised when the file holds more rows than one import accepts."""
    pass


class MappingValidationError(LeadImportError):
    """Raised when the mapping cannot produce a usable batch (no email column)."""
    pass
