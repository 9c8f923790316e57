"""
Row transformer - turns raw CSV rows into lead records using the current
column mapping.

The transformer never drops a row: one LeadRecord comes out for every row
that goes in, even when the email cell is blank. Whether a row is usable is
decided by the ingestion service; ``preflight`` only reports likely problems.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .errors import MappingValidationError
from .fields import RECORD_FIELDS, LeadField
from .mapping import MappingModel
from .parser import RawRow

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class LeadRecord:
    """A lead ready for the ingestion service."""
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    job_title: Optional[str] = None
    website: Optional[str] = None
    linkedin_url: Optional[str] = None
    location: Optional[str] = None
    custom_fields: Dict[str, str] = field(default_factory=dict)
    original_row_data: RawRow = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Request representation: unset fields are left out entirely."""
        data: Dict = {}
        if self.email:
            data["email"] = self.email

        for lead_field in RECORD_FIELDS:
            if lead_field is LeadField.EMAIL:
                continue
            value = getattr(self, lead_field.value)
            if value is not None:
                data[lead_field.value] = value

        if self.custom_fields:
            data["custom_fields"] = dict(self.custom_fields)
        data["original_row_data"] = dict(self.original_row_data)
        return data


@dataclass(frozen=True)
class RowIssue:
    """A problem spotted in one row, for display only."""
    row: int  # 1-based data row number
    message: str


def transform_row(row: RawRow, mapping: MappingModel) -> LeadRecord:
    """
    Map one raw row onto a LeadRecord.

    Columns are applied in header order, so when several columns target the
    same field the last one with a value wins.
    """
    record = LeadRecord(original_row_data=dict(row))

    for column in mapping:
        target = column.target_field
        if target is LeadField.DO_NOT_IMPORT:
            continue

        value = row.get(column.source_column, "")
        if not value:
            continue

        if target is LeadField.CUSTOM_VARIABLE:
            record.custom_fields[column.source_column] = value
        else:
            setattr(record, target.value, value)

    return record


def transform_rows(rows: Sequence[RawRow], mapping: MappingModel) -> List[LeadRecord]:
    """Transform every row; the output always has the same length as the input."""
    records = [transform_row(row, mapping) for row in rows]
    logger.debug("Transformed %d rows into lead records", len(records))
    return records


def ensure_email_mapped(mapping: MappingModel) -> None:
    """
    Upload gate: at least one column must map to email.

    Raises:
        MappingValidationError: If no column maps to email
    """
    if not mapping.has_email():
        raise MappingValidationError("Email field must be mapped to proceed")


def preflight(records: Sequence[LeadRecord]) -> List[RowIssue]:
    """
    Report rows the ingestion service is likely to refuse.

    Checks for a missing email, a malformed email, and an email repeated
    earlier in the same file. Nothing is removed.
    """
    issues: List[RowIssue] = []
    seen: Dict[str, int] = {}

    for row_num, record in enumerate(records, start=1):
        email = record.email.strip()

        if not email:
            issues.append(RowIssue(row_num, "Missing email address"))
            continue

        if not EMAIL_REGEX.match(email):
            issues.append(RowIssue(row_num, f"Invalid email format ({email})"))
            continue

        key = email.lower()
        if key in seen:
            issues.append(RowIssue(
                row_num, f"Duplicate email in file ({email}), first seen in row {seen[key]}"
            ))
        else:
            seen[key] = row_num

    return issues
