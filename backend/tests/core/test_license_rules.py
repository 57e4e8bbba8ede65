"""License rules tests — input validation and compare-and-set builders."""

from datetime import datetime, timezone

import pytest

from app.core.errors import InvalidInputError
from app.core.license_rules import (
    validate_code,
    validate_email,
    is_redeemed,
    redemption_predicate,
    redemption_mutation,
)


def test_validate_code_accepts_non_empty_string():
    assert validate_code("ABC123") == "ABC123"


@pytest.mark.parametrize("code", ["", None, 123, ["ABC123"], {"code": "x"}])
def test_validate_code_rejects_empty_or_non_string(code):
    with pytest.raises(InvalidInputError) as exc_info:
        validate_code(code)
    assert exc_info.value.field == "code"
    assert exc_info.value.http_status == 400


def test_is_redeemed_reads_used_flag():
    assert is_redeemed({"used": True}) is True
    assert is_redeemed({"used": False}) is False
    assert is_redeemed({}) is False


def test_redemption_predicate_requires_unused():
    assert redemption_predicate() == {"used": False}


def test_redemption_mutation_sets_used_and_used_at_only():
    now = datetime(2026, 5, 1, tzinfo=timezone.utc)
    mutation = redemption_mutation(now)
    assert mutation.set_fields == {"used": True, "used_at": now}
    assert mutation.append == {}


def test_validate_email_normalizes():
    assert validate_email("  Client@Example.COM ") == "client@example.com"


@pytest.mark.parametrize("email", [None, "", "   ", "not-an-email", 42])
def test_validate_email_rejects_invalid(email):
    with pytest.raises(InvalidInputError):
        validate_email(email)
