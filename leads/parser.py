"""
Tabular parser - turns CSV bytes into header-keyed rows.

Rows are keyed by header string, never by position, so every row carries
every header and column order comes only from the header row.
"""

import csv
import io
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .errors import EmptyFileError, ParseError, RowLimitError
from .intake import ImportLimits

logger = logging.getLogger(__name__)

RawRow = Dict[str, str]

CANDIDATE_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_CHARS = 64 * 1024


@dataclass(frozen=True)
class ParsedTable:
    """Result of a complete parse."""
    headers: List[str]
    rows: List[RawRow]

    @property
    def row_count(self) -> int:
        return len(self.rows)


def normalize_headers(raw_headers: List[str]) -> List[str]:
    """
    Strip headers and make them unique.

    Blank headers become Column_<n>; repeats get a _1, _2... suffix.
    """
    headers: List[str] = []
    seen: Dict[str, int] = {}

    for i, raw in enumerate(raw_headers, start=1):
        header = (raw or "").strip() or f"Column_{i}"

        if header in seen:
            seen[header] += 1
            candidate = f"{header}_{seen[header]}"
            while candidate in seen:
                seen[header] += 1
                candidate = f"{header}_{seen[header]}"
            header = candidate

        seen[header] = 0
        headers.append(header)

    return headers


def detect_delimiter(text: str) -> str:
    """Guess the delimiter from the start of the file, defaulting to comma."""
    sample = text[:SNIFF_SAMPLE_CHARS]
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _reader(text: str, delimiter: str):
    # a single cell may be as long as the whole file
    if csv.field_size_limit() < len(text):
        csv.field_size_limit(len(text))
    return csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)


def _is_blank(cells: List[str]) -> bool:
    return all(not (cell or "").strip() for cell in cells)


def iter_rows(
    text: str,
    delimiter: str = ",",
    headers: Optional[List[str]] = None,
) -> Iterator[RawRow]:
    """
    Stream rows from CSV text.

    The first non-empty record is the header row unless ``headers`` is given.
    Fully empty lines are skipped.

    Raises:
        ParseError: If the text is not valid delimited data or has no header row
    """
    reader = _reader(text, delimiter)

    try:
        if headers is None:
            for record in reader:
                if record and not _is_blank(record):
                    headers = normalize_headers(record)
                    break
            else:
                raise ParseError("CSV file has no headers")

        width = len(headers)
        for record in reader:
            if not record or _is_blank(record):
                continue

            if len(record) > width:
                logger.warning(
                    "Line %d has %d cells but only %d headers; extra cells dropped",
                    reader.line_num, len(record), width,
                )

            cells = record[:width] + [""] * (width - len(record))
            yield dict(zip(headers, cells))

    except csv.Error as e:
        logger.warning("CSV parsing error at line %d: %s", reader.line_num, e)
        raise ParseError("Error parsing CSV file. Please check the file format.") from e


def read_headers(text: str, delimiter: str = ",") -> List[str]:
    """Return the normalized header row."""
    reader = _reader(text, delimiter)
    try:
        for record in reader:
            if record and not _is_blank(record):
                return normalize_headers(record)
    except csv.Error as e:
        raise ParseError("Error parsing CSV file. Please check the file format.") from e

    raise ParseError("CSV file has no headers")


def decode(content: bytes, encoding: str = "utf-8-sig") -> str:
    """Decode file bytes, tolerating an Excel BOM."""
    try:
        return content.decode(encoding)
    except UnicodeDecodeError as e:
        raise ParseError("File encoding not supported. Please use UTF-8.") from e


def parse_csv(content: bytes, encoding: str = "utf-8-sig") -> ParsedTable:
    """
    Parse a whole CSV file.

    The full result is collected before returning; callers never see a
    partial row list.

    Args:
        content: Raw file bytes
        encoding: File encoding (default handles Excel exports)

    Returns:
        ParsedTable with headers in file order and rows in file order

    Raises:
        ParseError: If the file cannot be decoded or parsed
    """
    text = decode(content, encoding)
    delimiter = detect_delimiter(text)

    headers = read_headers(text, delimiter)
    rows = list(iter_rows(text, delimiter))

    logger.info("Parsed %d rows with %d columns (delimiter=%r)", len(rows), len(headers), delimiter)
    return ParsedTable(headers=headers, rows=rows)


def check_row_count(row_count: int, limits: ImportLimits = ImportLimits()) -> None:
    """
    Enforce the per-import row bounds.

    Raises:
        EmptyFileError: If there are no data rows
        RowLimitError: If there are more rows than the limit allows
    """
    if row_count == 0:
        raise EmptyFileError(
            "The CSV file appears to be empty. Please check your file and try again.",
            row_count=row_count,
            limit=limits.max_rows,
        )

    if row_count > limits.max_rows:
        raise RowLimitError(
            f"Your CSV contains {row_count:,} rows, but the maximum allowed is "
            f"{limits.max_rows:,} leads per import. Please split your file into smaller batches.",
            row_count=row_count,
            limit=limits.max_rows,
        )
