"""
Upload orchestrator - packages the transformed batch into one request to the
ingestion service and folds the answer back into the session.
"""

import logging
from typing import Dict, Sequence

from ingestion import IngestionAPIError, LeadIngestionClient

from .errors import MappingValidationError
from .mapping import MappingModel
from .session import (
    DedupConfig,
    ImportSession,
    InvalidTransition,
    MappingInvalid,
    SessionState,
    UploadFailed,
    UploadStarted,
    UploadSucceeded,
    apply_event,
)
from .transformer import LeadRecord, ensure_email_mapped, transform_rows

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Import failed"
DEFAULT_FILE_NAME = "unknown.csv"


def build_payload(
    records: Sequence[LeadRecord],
    mapping: MappingModel,
    file_name: str,
    dedup: DedupConfig,
) -> Dict:
    """Assemble the import request body."""
    return {
        "leads": [record.to_dict() for record in records],
        "columnMapping": mapping.summary(),
        "fileName": file_name or DEFAULT_FILE_NAME,
        "duplicateChecks": dedup.to_dict(),
    }


class UploadOrchestrator:
    """
    Runs the upload step for a mapped session.

    Failures never escape: they come back as a ``mapped`` session whose
    ``error`` holds the message, with rows, mapping and dedup flags intact so
    the user can fix things and retry.
    """

    def __init__(self, client: LeadIngestionClient):
        self.client = client

    def upload(self, session: ImportSession) -> ImportSession:
        if session.state is not SessionState.MAPPED:
            raise InvalidTransition(f"Cannot upload in state {session.state.value!r}")

        try:
            ensure_email_mapped(session.mapping)
        except MappingValidationError as e:
            logger.warning("Upload blocked for %s: %s", session.file_name, e.message)
            return apply_event(session, MappingInvalid(e.message))

        session = apply_event(session, UploadStarted())

        records = transform_rows(session.rows, session.mapping)
        payload = build_payload(records, session.mapping, session.file_name, session.dedup)

        try:
            response = self.client.import_leads(payload)
        except IngestionAPIError as e:
            logger.error("Upload of %s failed: %s", session.file_name, e)
            return apply_event(session, UploadFailed(e.message or GENERIC_FAILURE_MESSAGE))
        except Exception as e:
            logger.exception("Unexpected error uploading %s", session.file_name)
            return apply_event(session, UploadFailed(str(e) or GENERIC_FAILURE_MESSAGE))

        if not response.success:
            logger.error(
                "Ingestion service rejected %s: %s (status=%s)",
                session.file_name, response.message, response.status_code,
            )
            return apply_event(session, UploadFailed(response.message or GENERIC_FAILURE_MESSAGE))

        logger.info("Imported %d leads from %s", len(records), session.file_name)
        return apply_event(session, UploadSucceeded(imported_count=len(records), result=response.data))
