import pytest

from leads import ImportFile, ImportLimits, IntakeError, check_file
from leads.intake import MAX_FILE_BYTES, format_file_size


def test_csv_file_within_limit_is_accepted():
    check_file(ImportFile.from_bytes("leads.csv", b"Email\na@b.co\n"))


def test_extension_check_is_case_insensitive():
    check_file(ImportFile.from_bytes("LEADS.CSV", b"Email\na@b.co\n"))


@pytest.mark.parametrize("name", ["leads.xlsx", "leads.txt", "leads.csv.bak", "leads"])
def test_non_csv_file_is_rejected(name):
    with pytest.raises(IntakeError) as exc:
        check_file(ImportFile.from_bytes(name, b"Email\na@b.co\n"))

    assert exc.value.message == "Please upload a CSV file"


def test_oversized_file_is_rejected_without_reading_rows():
    """Size is checked on the declared size alone."""
    big = ImportFile(name="big.csv", content=b"", size=MAX_FILE_BYTES + 1)

    with pytest.raises(IntakeError) as exc:
        check_file(big)

    assert "10MB" in exc.value.message


def test_file_exactly_at_size_limit_is_accepted():
    check_file(ImportFile(name="edge.csv", content=b"", size=MAX_FILE_BYTES))


def test_limits_from_env(monkeypatch):
    monkeypatch.setenv("LEAD_IMPORT_MAX_ROWS", "50")
    monkeypatch.setenv("LEAD_IMPORT_MAX_FILE_BYTES", "2048")

    limits = ImportLimits.from_env()

    assert limits.max_rows == 50
    assert limits.max_file_bytes == 2048
    assert limits.sample_size == 4


def test_from_path_reads_name_and_size(tmp_path):
    path = tmp_path / "export.csv"
    path.write_bytes(b"Email\nx@y.io\n")

    file = ImportFile.from_path(path)

    assert file.name == "export.csv"
    assert file.size == len(b"Email\nx@y.io\n")


def test_from_path_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ImportFile.from_path(tmp_path / "nope.csv")


def test_format_file_size():
    assert format_file_size(10 * 1024) == "10 KB"
    assert format_file_size(0) == "0 KB"
