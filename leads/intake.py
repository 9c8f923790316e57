"""
File intake - type and size checks before any row is read.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import IntakeError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSION = ".csv"
MAX_FILE_BYTES = 10 * 1024 * 1024  # 10 MiB
MAX_ROWS = 1000
SAMPLE_SIZE = 4


@dataclass(frozen=True)
class ImportLimits:
    """
    Hard limits applied to a single import.

    Can be initialized from environment variables:
        limits = ImportLimits.from_env()
    """
    max_file_bytes: int = MAX_FILE_BYTES
    max_rows: int = MAX_ROWS
    sample_size: int = SAMPLE_SIZE

    @classmethod
    def from_env(cls) -> "ImportLimits":
        """
        Load limits from environment variables.

        Environment variables:
            LEAD_IMPORT_MAX_FILE_BYTES: Optional size ceiling (default: 10 MiB)
            LEAD_IMPORT_MAX_ROWS: Optional row ceiling (default: 1000)
        """
        return cls(
            max_file_bytes=int(os.environ.get("LEAD_IMPORT_MAX_FILE_BYTES", MAX_FILE_BYTES)),
            max_rows=int(os.environ.get("LEAD_IMPORT_MAX_ROWS", MAX_ROWS)),
        )


@dataclass(frozen=True)
class ImportFile:
    """A single user-supplied file: name, raw bytes and declared size."""
    name: str
    content: bytes
    size: int

    @classmethod
    def from_bytes(cls, name: str, content: bytes) -> "ImportFile":
        return cls(name=name, content=content, size=len(content))

    @classmethod
    def from_path(cls, filepath) -> "ImportFile":
        """Read a file from disk."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"CSV file not found: {filepath}")

        return cls.from_bytes(filepath.name, filepath.read_bytes())


def check_file(file: ImportFile, limits: ImportLimits = ImportLimits()) -> None:
    """
    Reject a file that is not a CSV or is too large.

    Raises:
        IntakeError: With a user-facing message
    """
    if not file.name.lower().endswith(ALLOWED_EXTENSION):
        logger.warning("Rejected %s: not a CSV file", file.name)
        raise IntakeError("Please upload a CSV file")

    if file.size > limits.max_file_bytes:
        logger.warning(
            "Rejected %s: %d bytes exceeds %d byte limit",
            file.name, file.size, limits.max_file_bytes,
        )
        raise IntakeError(
            f"File size exceeds {_format_limit(limits.max_file_bytes)} limit. "
            "Please upload a smaller file."
        )


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for display, e.g. '12 KB'."""
    return f"{round(size_bytes / 1024)} KB"


def _format_limit(size_bytes: int) -> str:
    mib = 1024 * 1024
    if size_bytes >= mib and size_bytes % mib == 0:
        return f"{size_bytes // mib}MB"
    return format_file_size(size_bytes)
