"""Tests for PIN authentication and PIN changes."""

from __future__ import annotations

import pytest

from campuslife.auth import authenticate, change_pin
from campuslife.document import Document
from campuslife.errors import AuthenticationError, AuthorizationError, NotFoundError, ValidationError

from .conftest import STUDENT_ID


def test_authenticate_with_default_pin(doc: Document) -> None:
    user = authenticate(doc, "mike@college.edu", "0000")
    assert user.id == STUDENT_ID


def test_missing_pin_entry_uses_default(doc: Document) -> None:
    del doc.pins[STUDENT_ID]

    assert authenticate(doc, "MIKE@college.edu", "0000").id == STUDENT_ID
    assert authenticate(doc, "mike@college.edu", "1111", default_pin="1111").id == STUDENT_ID


def test_unknown_email(doc: Document) -> None:
    with pytest.raises(NotFoundError, match="User not found"):
        authenticate(doc, "nobody@college.edu", "0000")


def test_wrong_pin(doc: Document) -> None:
    with pytest.raises(AuthenticationError, match="Invalid PIN") as excinfo:
        authenticate(doc, "mike@college.edu", "1234")
    assert isinstance(excinfo.value, AuthorizationError)


def test_malformed_pin(doc: Document) -> None:
    with pytest.raises(ValidationError):
        authenticate(doc, "mike@college.edu", "00a0")


def test_change_pin(doc: Document) -> None:
    change_pin(doc, STUDENT_ID, "0000", "2468", "2468")

    assert doc.pins[STUDENT_ID] == "2468"
    assert authenticate(doc, "mike@college.edu", "2468").id == STUDENT_ID


@pytest.mark.parametrize(
    ("current", "new", "confirm", "error", "message"),
    [
        ("0000", "1234", "4321", ValidationError, "New PINs do not match"),
        ("0000", "123", "123", ValidationError, "PIN must be exactly 4 digits"),
        ("9999", "1234", "1234", AuthenticationError, "Current PIN is incorrect"),
    ],
)
def test_change_pin_errors(doc: Document, current: str, new: str, confirm: str, error: type, message: str) -> None:
    with pytest.raises(error, match=message):
        change_pin(doc, STUDENT_ID, current, new, confirm)
    assert doc.pins[STUDENT_ID] == "0000"
