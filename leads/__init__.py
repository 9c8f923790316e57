"""
Lead import module.

Handles taking a CSV export, mapping its columns to lead fields, and sending
the result to the ingestion service.
"""

from .errors import (
    EmptyFileError,
    IntakeError,
    LeadImportError,
    MappingValidationError,
    ParseError,
    RowCountError,
    RowLimitError,
)
from .fields import LeadField
from .importer import LeadImporter
from .inference import infer_field, infer_mappings
from .intake import ImportFile, ImportLimits, check_file
from .mapping import ColumnMapping, MappingModel
from .orchestrator import UploadOrchestrator, build_payload
from .parser import ParsedTable, check_row_count, parse_csv
from .session import DedupConfig, ImportSession, InvalidTransition, SessionState, apply_event
from .transformer import LeadRecord, RowIssue, ensure_email_mapped, preflight, transform_rows

__all__ = [
    "LeadImporter",
    "ImportFile",
    "ImportLimits",
    "check_file",
    "ParsedTable",
    "parse_csv",
    "check_row_count",
    "LeadField",
    "infer_field",
    "infer_mappings",
    "ColumnMapping",
    "MappingModel",
    "LeadRecord",
    "RowIssue",
    "transform_rows",
    "ensure_email_mapped",
    "preflight",
    "DedupConfig",
    "ImportSession",
    "SessionState",
    "InvalidTransition",
    "apply_event",
    "UploadOrchestrator",
    "build_payload",
    "LeadImportError",
    "IntakeError",
    "ParseError",
    "RowCountError",
    "EmptyFileError",
    "RowLimitError",
    "MappingValidationError",
]
