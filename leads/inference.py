"""
Mapping inference - guesses a lead field for each CSV header.

Matching is case-insensitive substring matching evaluated in a fixed
priority order; the first rule that matches wins. A header such as
"Company Phone" therefore infers phone, because the phone rule is checked
before the company rule.
"""

import logging
import re
from typing import List, Sequence, Tuple

from .fields import LeadField
from .intake import SAMPLE_SIZE
from .mapping import ColumnMapping, MappingModel
from .parser import RawRow

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s\-]+")

# (field, keywords) pairs checked after the name rules, in priority order
KEYWORD_RULES: Tuple[Tuple[LeadField, Tuple[str, ...]], ...] = (
    (LeadField.PHONE, ("phone", "mobile", "telephone", "tel")),
    (LeadField.COMPANY_NAME, ("company", "organization", "insurance_provider", "provider")),
    (LeadField.JOB_TITLE, ("job", "title", "position", "role")),
    (LeadField.WEBSITE, ("website", "url")),
    (LeadField.LINKEDIN_URL, ("linkedin",)),
    (LeadField.LOCATION, ("location", "city", "address")),
)


def normalize_header(header: str) -> str:
    """Lowercase, strip, and fold spaces/hyphens to underscores."""
    return _SEPARATORS.sub("_", header.strip().lower())


def infer_field(header: str) -> LeadField:
    """Guess the lead field for a single header."""
    name = normalize_header(header)

    if "email" in name:
        return LeadField.EMAIL

    if "first" in name and "name" in name:
        return LeadField.FIRST_NAME
    if "last" in name and "name" in name:
        return LeadField.LAST_NAME
    if name == "name" or "client_name" in name or "contact_person" in name:
        return LeadField.FULL_NAME

    for field, keywords in KEYWORD_RULES:
        if any(keyword in name for keyword in keywords):
            return field

    return LeadField.DO_NOT_IMPORT


def collect_samples(header: str, rows: Sequence[RawRow], sample_size: int = SAMPLE_SIZE) -> Tuple[str, ...]:
    """Non-empty values of ``header`` from the first ``sample_size`` rows."""
    values = (row.get(header, "") for row in rows[:sample_size])
    return tuple(v for v in values if v)


def infer_mappings(
    headers: List[str],
    rows: Sequence[RawRow],
    sample_size: int = SAMPLE_SIZE,
) -> MappingModel:
    """Build the initial mapping model for a freshly parsed file."""
    mappings = tuple(
        ColumnMapping(
            source_column=header,
            target_field=infer_field(header),
            sample_values=collect_samples(header, rows, sample_size),
        )
        for header in headers
    )

    model = MappingModel(mappings)
    logger.info(
        "Inferred mapping for %d columns (%d to import)",
        len(mappings), len(model.summary()),
    )
    logger.debug("Inferred mapping: %s", model.summary())
    return model
