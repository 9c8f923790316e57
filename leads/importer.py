"""
Lead Importer - CSV upload with column mapping and duplicate-checked ingestion.

Designed for arbitrary spreadsheet exports: headers are matched to lead
fields heuristically, the user corrects the guess, and the batch is sent to
the ingestion service in a single request.

Usage:
    from leads import LeadImporter, ImportFile

    importer = LeadImporter()
    session = importer.load_file(ImportFile.from_path("leads.csv"))
    importer.set_mapping("Notes", "custom_variable")
    session = importer.upload()

    print(session.error or importer.completion_message())
"""

import logging
from typing import List, Optional, Union

from ingestion import LeadIngestionClient

from .errors import LeadImportError
from .fields import LeadField
from .inference import infer_mappings
from .intake import ImportFile, ImportLimits, check_file, format_file_size
from .orchestrator import UploadOrchestrator
from .parser import check_row_count, parse_csv
from .session import (
    DedupChanged,
    DedupConfig,
    FileAccepted,
    FileRejected,
    ImportSession,
    MappingChanged,
    Parsed,
    Reset,
    SessionState,
    apply_event,
)
from .transformer import LeadRecord, RowIssue, preflight, transform_rows

logger = logging.getLogger(__name__)


class LeadImporter:
    """
    Drives a single import session from file to upload.

    Features:
    - Rejects non-CSV and oversized files before reading them
    - Enforces the per-import row bounds before any mapping is computed
    - Infers the column mapping once, then accepts user corrections
    - Refuses to upload without an email column
    - Keeps the mapping intact after a failed upload so it can be retried

    Stage failures end up in ``session.error``; they are not raised.
    """

    def __init__(
        self,
        client: Optional[LeadIngestionClient] = None,
        limits: Optional[ImportLimits] = None,
    ):
        """
        Initialize the importer.

        Args:
            client: Ingestion service client. If None, loads from environment.
            limits: Size limits. If None, loads from environment.
        """
        self.client = client or LeadIngestionClient.from_env()
        self.limits = limits or ImportLimits.from_env()
        self.orchestrator = UploadOrchestrator(self.client)
        self.session = ImportSession()

    def load_file(self, file: ImportFile) -> ImportSession:
        """
        Check, parse and map a file.

        Returns the session in ``mapped`` state on success, ``rejected`` with
        an error message otherwise. Any previous session is discarded first.
        """
        if self.session.state is not SessionState.IDLE:
            self.session = apply_event(self.session, Reset())

        try:
            check_file(file, self.limits)
        except LeadImportError as e:
            self.session = apply_event(self.session, FileRejected(e.message))
            return self.session

        self.session = apply_event(self.session, FileAccepted(file.name, file.size))

        try:
            table = parse_csv(file.content)
            check_row_count(table.row_count, self.limits)
        except LeadImportError as e:
            logger.warning("Import of %s rejected: %s", file.name, e.message)
            self.session = apply_event(self.session, FileRejected(e.message))
            return self.session

        mapping = infer_mappings(table.headers, table.rows, self.limits.sample_size)
        self.session = apply_event(self.session, Parsed(tuple(table.headers), tuple(table.rows), mapping))

        logger.info(
            "Loaded %s (%s, %d rows)",
            file.name, format_file_size(file.size), table.row_count,
        )
        return self.session

    def set_mapping(self, source_column: str, target: Union[LeadField, str]) -> ImportSession:
        """Point one column at a different lead field."""
        self.session = apply_event(self.session, MappingChanged(source_column, target))
        return self.session

    def set_dedup(
        self,
        campaigns: Optional[bool] = None,
        lists: Optional[bool] = None,
        workspace: Optional[bool] = None,
    ) -> ImportSession:
        """Toggle duplicate-check scopes; None leaves a flag unchanged."""
        current = self.session.dedup
        dedup = DedupConfig(
            campaigns=current.campaigns if campaigns is None else campaigns,
            lists=current.lists if lists is None else lists,
            workspace=current.workspace if workspace is None else workspace,
        )
        self.session = apply_event(self.session, DedupChanged(dedup))
        return self.session

    def preview(self) -> List[LeadRecord]:
        """Lead records the current mapping would produce."""
        return transform_rows(self.session.rows, self.session.mapping)

    def issues(self) -> List[RowIssue]:
        """Rows the ingestion service is likely to refuse."""
        return preflight(self.preview())

    def upload(self) -> ImportSession:
        """Send the batch; see UploadOrchestrator for failure handling."""
        self.session = self.orchestrator.upload(self.session)
        return self.session

    def reset(self) -> ImportSession:
        """Discard the session and start over."""
        self.session = apply_event(self.session, Reset())
        return self.session

    def completion_message(self) -> Optional[str]:
        if self.session.state is not SessionState.COMPLETE:
            return None
        return (
            f"Successfully imported {self.session.imported_count} leads "
            f"from {self.session.file_name}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Import leads from CSV")
    parser.add_argument("filepath", help="Path to CSV file")
    parser.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="COLUMN=FIELD",
        help="Override the inferred field for a column (repeatable)",
    )
    parser.add_argument("--no-campaign-check", action="store_true", help="Skip duplicate check across campaigns")
    parser.add_argument("--no-list-check", action="store_true", help="Skip duplicate check across lists")
    parser.add_argument("--no-workspace-check", action="store_true", help="Skip duplicate check within the workspace")
    parser.add_argument("--dry-run", action="store_true", help="Show mapping and issues, don't upload")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    try:
        file = ImportFile.from_path(args.filepath)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1

    with LeadIngestionClient.from_env() as client:
        importer = LeadImporter(client=client)
        session = importer.load_file(file)

        if session.state is not SessionState.MAPPED:
            print(f"Error: {session.error}")
            return 1

        for override in args.map:
            column, sep, field = override.partition("=")
            if not sep:
                print(f"Error: --map expects COLUMN=FIELD, got {override!r}")
                return 1
            try:
                importer.set_mapping(column.strip(), field.strip())
            except ValueError as e:
                print(f"Error: {e}")
                return 1

        importer.set_dedup(
            campaigns=not args.no_campaign_check,
            lists=not args.no_list_check,
            workspace=not args.no_workspace_check,
        )

        print(f"{session.file_name} - {format_file_size(session.file_size_bytes)}, {session.total_rows} rows")
        print(importer.session.mapping.to_frame().to_string(index=False))

        issues = importer.issues()
        if issues:
            print(f"\n{len(issues)} rows may be refused (first 5):")
            for issue in issues[:5]:
                print(f"  Row {issue.row}: {issue.message}")

        if args.dry_run:
            return 0

        session = importer.upload()
        if session.state is not SessionState.COMPLETE:
            print(f"Failed to upload leads: {session.error}")
            return 1

        print(importer.completion_message())

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
