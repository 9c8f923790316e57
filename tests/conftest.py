"""
Shared fixtures for the lead import tests.
"""

import pytest

from leads import ImportFile
from tests.utils.fakes import build_csv


@pytest.fixture
def notes_csv():
    """Three leads with an Email, Phone and free-text Notes column."""
    return ImportFile.from_bytes(
        "contacts.csv",
        build_csv(
            ["Email", "Phone", "Notes"],
            [
                ["ana@acme.io", "555-0100", "met at expo"],
                ["ben@globex.com", "555-0101", "warm intro"],
                ["cy@initech.com", "", "call back Tuesday"],
            ],
        ),
    )
