"""Identifier rules shared by signup, signin and the user model."""

from __future__ import annotations

import pytest
from filevault.services.identity import validate_identifier
from filevault.services.identity.validation import IDENTIFIER_ERROR


@pytest.mark.parametrize(
    ("raw", "kind", "value"),
    [
        ("a@b.com", "email", "a@b.com"),
        ("  A@B.Com  ", "email", "a@b.com"),
        ("first.last+tag@sub.example.org", "email", "first.last+tag@sub.example.org"),
        ("+34 600 123 456", "phone", "+34 600 123 456"),
        ("555-123-4567", "phone", "555-123-4567"),
        ("0123456789", "phone", "0123456789"),
    ],
)
def test_valid_identifiers(raw, kind, value):
    check = validate_identifier(raw)
    assert check.ok
    assert check.kind == kind
    assert check.value == value


@pytest.mark.parametrize("raw", ["", "   ", "a@b", "user@", "123456789", "abc-def-ghij", None, 42])
def test_invalid_identifiers(raw):
    check = validate_identifier(raw)
    assert not check.ok
    assert check.kind is None
    assert check.error == IDENTIFIER_ERROR
