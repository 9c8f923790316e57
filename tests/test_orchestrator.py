"""
Tests for the upload step: payload shape, the email gate, and how service
answers are folded back into the session.
"""
import pytest

from ingestion import IngestionAPIError, IngestionResponse
from leads import (
    ColumnMapping,
    DedupConfig,
    ImportSession,
    InvalidTransition,
    LeadField,
    MappingModel,
    SessionState,
    UploadOrchestrator,
    apply_event,
    build_payload,
    transform_rows,
)
from leads.session import FileAccepted, MappingChanged, Parsed
from tests.utils.fakes import FakeIngestionClient

ROWS = (
    {"Email": "a@x.io", "Phone": "1", "Notes": "hi"},
    {"Email": "b@x.io", "Phone": "", "Notes": ""},
)


def _session(notes=LeadField.CUSTOM_VARIABLE, email=LeadField.EMAIL):
    mapping = MappingModel((
        ColumnMapping("Email", email),
        ColumnMapping("Phone", LeadField.PHONE),
        ColumnMapping("Notes", notes),
    ))
    session = apply_event(ImportSession(), FileAccepted("leads.csv", 64))
    return apply_event(session, Parsed(("Email", "Phone", "Notes"), ROWS, mapping))


def test_build_payload_shape():
    session = _session(notes=LeadField.DO_NOT_IMPORT)
    records = transform_rows(session.rows, session.mapping)

    payload = build_payload(records, session.mapping, "leads.csv", DedupConfig(campaigns=False))

    assert payload["fileName"] == "leads.csv"
    assert payload["columnMapping"] == {"Email": "email", "Phone": "phone"}
    assert payload["duplicateChecks"] == {"campaigns": False, "lists": True, "workspace": True}
    assert payload["leads"][0] == {
        "email": "a@x.io",
        "phone": "1",
        "original_row_data": {"Email": "a@x.io", "Phone": "1", "Notes": "hi"},
    }
    assert len(payload["leads"]) == 2


def test_successful_upload_completes_session():
    client = FakeIngestionClient(IngestionResponse(success=True, data={"created": 2}))

    session = UploadOrchestrator(client).upload(_session())

    assert session.state is SessionState.COMPLETE
    assert session.imported_count == 2
    assert session.result == {"created": 2}
    assert len(client.payloads) == 1
    assert client.payloads[0]["leads"][0]["custom_fields"] == {"Notes": "hi"}


def test_gate_blocks_upload_without_email_column():
    client = FakeIngestionClient()

    session = UploadOrchestrator(client).upload(_session(email=LeadField.DO_NOT_IMPORT))

    assert client.payloads == []
    assert session.state is SessionState.MAPPED
    assert session.error == "Email field must be mapped to proceed"


def test_server_failure_message_is_shown_verbatim():
    client = FakeIngestionClient(IngestionResponse(success=False, message="duplicate workspace"))
    before = _session()

    session = UploadOrchestrator(client).upload(before)

    assert session.state is SessionState.MAPPED
    assert session.error == "duplicate workspace"
    assert session.mapping == before.mapping
    assert session.rows == before.rows
    # edits remain available
    edited = apply_event(session, MappingChanged("Notes", "do_not_import"))
    assert edited.mapping.get("Notes").target_field is LeadField.DO_NOT_IMPORT


def test_failure_without_message_uses_generic_text():
    client = FakeIngestionClient(IngestionResponse(success=False))

    session = UploadOrchestrator(client).upload(_session())

    assert session.error == "Import failed"


def test_transport_error_keeps_session_for_retry():
    client = FakeIngestionClient(error=IngestionAPIError("Request timed out: read timeout"))

    session = UploadOrchestrator(client).upload(_session())

    assert session.state is SessionState.MAPPED
    assert session.error == "Request timed out: read timeout"


def test_unexpected_exception_is_contained():
    client = FakeIngestionClient(error=RuntimeError("socket closed"))

    session = UploadOrchestrator(client).upload(_session())

    assert session.state is SessionState.MAPPED
    assert session.error == "socket closed"


def test_upload_requires_mapped_session():
    with pytest.raises(InvalidTransition):
        UploadOrchestrator(FakeIngestionClient()).upload(ImportSession())
