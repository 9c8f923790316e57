"""
Canonical lead fields a CSV column can be mapped to.
"""

from enum import Enum


class LeadField(Enum):
    """Target for a CSV column."""
    DO_NOT_IMPORT = "do_not_import"
    EMAIL = "email"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    FULL_NAME = "full_name"  # split into first/last by the ingestion service
    PHONE = "phone"
    COMPANY_NAME = "company_name"
    JOB_TITLE = "job_title"
    WEBSITE = "website"
    LINKEDIN_URL = "linkedin_url"
    LOCATION = "location"
    CUSTOM_VARIABLE = "custom_variable"

    @property
    def label(self) -> str:
        return FIELD_LABELS[self]

    @classmethod
    def coerce(cls, value) -> "LeadField":
        """Accept a LeadField or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown lead field: {value!r}") from None


# Labels shown in the column mapping picker
FIELD_LABELS = {
    LeadField.DO_NOT_IMPORT: "Do not import",
    LeadField.EMAIL: "Email",
    LeadField.FIRST_NAME: "First Name",
    LeadField.LAST_NAME: "Last Name",
    LeadField.FULL_NAME: "Full Name (Auto-split)",
    LeadField.PHONE: "Phone",
    LeadField.COMPANY_NAME: "Company Name",
    LeadField.JOB_TITLE: "Job Title",
    LeadField.WEBSITE: "Website",
    LeadField.LINKEDIN_URL: "LinkedIn",
    LeadField.LOCATION: "Location",
    LeadField.CUSTOM_VARIABLE: "Custom Variable",
}

# Fields that land directly on a LeadRecord attribute
RECORD_FIELDS = tuple(
    f for f in LeadField
    if f not in (LeadField.DO_NOT_IMPORT, LeadField.CUSTOM_VARIABLE)
)
