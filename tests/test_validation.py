# tests/test_validation.py
from __future__ import annotations

import sys
from pathlib import Path
from datetime import date, timedelta
from typing import Any

# This is a standard way to make the package importable
# without having to install the project in editable mode.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from partner_kyc.validation import (
    required,
    required_if,
    one_of,
    match_pattern,
    max_length,
    min_length,
    must_be_true,
    is_within_date_range,
    not_in_future,
    IFSC_PATTERN,
    EMAIL_PATTERN,
    URL_PATTERN,
)

# Test data is just a dummy dict for context, as our validators require it.
FORM_DATA: dict[str, Any] = {}

def test_max_length_validator() -> None:
    """Tests the `max_length` validator."""
    validator = max_length(10, "Cannot exceed 10 characters.")

    # --- Passing Cases ---
    is_valid_under, _ = validator("12345", FORM_DATA)
    assert is_valid_under, "Should pass for a string under the limit"

    is_valid_exact, _ = validator("1234567890", FORM_DATA)
    assert is_valid_exact, "Should pass for a string at the exact limit"

    # --- Failing Cases ---
    is_invalid_over, msg = validator("12345678901", FORM_DATA)
    assert not is_invalid_over, "Should fail for a string over the limit"
    assert msg == "Cannot exceed 10 characters."

    # --- Edge Cases ---
    is_valid_none, _ = validator(None, FORM_DATA)
    assert is_valid_none, "Should pass for None (not its responsibility)"

def test_min_length_validator() -> None:
    """Phone numbers need at least 10 characters."""
    validator = min_length(10, "Phone number must be at least 10 digits.")

    assert validator("9876543210", FORM_DATA)[0], "Should pass at the exact minimum"
    assert validator("+919876543210", FORM_DATA)[0], "Should pass above the minimum"
    assert not validator("98765", FORM_DATA)[0], "Should fail below the minimum"
    assert not validator(" 98765432 ", FORM_DATA)[0], "Whitespace should not count towards the length"
    assert validator("", FORM_DATA)[0], "Should pass for an empty string (not its responsibility)"

def test_required_validator() -> None:
    """Tests the `required` validator for various empty/non-empty cases."""
    validator = required("This field is required.")

    # --- Failing Cases ---
    assert not validator(None, FORM_DATA)[0], "Should fail for None"
    assert not validator("", FORM_DATA)[0], "Should fail for empty string"
    assert not validator("   ", FORM_DATA)[0], "Should fail for whitespace-only string"
    assert not validator([], FORM_DATA)[0], "Should fail for empty list"

    # --- Passing Cases ---
    assert validator("some value", FORM_DATA)[0], "Should pass for a valid string"
    assert validator(0, FORM_DATA)[0], "Should pass for the number 0"
    assert validator(["item"], FORM_DATA)[0], "Should pass for a non-empty list"

def test_required_if_validator() -> None:
    """A field becomes mandatory only while its controlling answer matches."""
    validator = required_if('partner_type', ('Vendor', 'Both'), "Vendor industry type is required.")

    # --- Triggered ---
    is_valid, msg = validator(None, {'partner_type': 'Vendor'})
    assert not is_valid, "Should fail when the trigger value is selected and the field is empty"
    assert msg == "Vendor industry type is required."
    assert not validator("  ", {'partner_type': 'Both'})[0], "Whitespace is still empty"
    assert validator("Trader", {'partner_type': 'Both'})[0], "Should pass once filled"

    # --- Not triggered ---
    assert validator(None, {'partner_type': 'Customer'})[0], "Should pass for a non-trigger value"
    assert validator(None, {})[0], "Should pass when the controlling field is missing"

def test_one_of_validator() -> None:
    validator = one_of(["Vendor", "Customer", "Both"], "Please select a valid partner type.")

    assert validator("Customer", FORM_DATA)[0], "Should pass for a listed option"
    assert not validator("customer", FORM_DATA)[0], "Options are case-sensitive"
    assert not validator("Supplier", FORM_DATA)[0], "Should fail for an unlisted option"
    assert validator(None, FORM_DATA)[0], "Should pass for None (not its responsibility)"

def test_match_pattern_validator() -> None:
    """Tests the `match_pattern` validator with the IFSC pattern."""
    validator = match_pattern(IFSC_PATTERN, "Invalid IFSC code format.")

    # --- Passing Cases ---
    assert validator("SBIN0001234", FORM_DATA)[0], "Should pass for a valid IFSC code"
    assert validator("HDFC0ABC123", FORM_DATA)[0], "Branch part may be alphanumeric"

    # --- Failing Cases ---
    assert not validator("sbin0001234", FORM_DATA)[0], "Should fail for lower case"
    assert not validator("SBIN1001234", FORM_DATA)[0], "Fifth character must be zero"
    assert not validator("SBIN000123", FORM_DATA)[0], "Should fail for a code that is too short"

    # --- Edge Cases ---
    assert validator("", FORM_DATA)[0], "Should pass for an empty string (not its responsibility)"
    assert validator(None, FORM_DATA)[0], "Should pass for None (not its responsibility)"

def test_email_and_url_patterns() -> None:
    email = match_pattern(EMAIL_PATTERN, "bad email")
    assert email("accounts@acme.in", FORM_DATA)[0]
    assert not email("accounts@", FORM_DATA)[0]
    assert not email("acme.in", FORM_DATA)[0]

    url = match_pattern(URL_PATTERN, "bad url")
    assert url("https://acme.in", FORM_DATA)[0]
    assert url("http://www.acme.co.in/about", FORM_DATA)[0]
    assert not url("acme.in", FORM_DATA)[0], "A scheme is required"
    assert not url("ftp://acme.in", FORM_DATA)[0]

def test_must_be_true_validator() -> None:
    validator = must_be_true("You must accept the declaration.")

    assert validator(True, FORM_DATA)[0]
    assert not validator(False, FORM_DATA)[0]
    assert not validator(None, FORM_DATA)[0]
    assert not validator("true", FORM_DATA)[0], "Only a real boolean counts as acceptance"

def test_is_within_date_range_validator() -> None:
    """Tests the date range validator."""
    min_d = date(2020, 1, 1)
    max_d = date(2020, 12, 31)
    validator = is_within_date_range(min_date=min_d, max_date=max_d)

    # --- Passing Cases ---
    assert validator("2020-06-15", FORM_DATA)[0], "Should pass for a date in the middle of the range"
    assert validator("2020-01-01", FORM_DATA)[0], "Should pass for a date on the start boundary"
    assert validator("2020-12-31", FORM_DATA)[0], "Should pass for a date on the end boundary"
    assert validator(date(2020, 3, 1), FORM_DATA)[0], "Should accept date objects too"

    # --- Failing Cases ---
    assert not validator("2019-12-31", FORM_DATA)[0], "Should fail for a date before the range"
    assert not validator("2021-01-01", FORM_DATA)[0], "Should fail for a date after the range"

    is_valid, msg = validator("2020-02-30", FORM_DATA)
    assert not is_valid, "Should fail for an impossible date"
    assert msg == "Invalid date format."

def test_not_in_future_validator() -> None:
    validator = not_in_future()

    assert validator(date.today().isoformat(), FORM_DATA)[0], "Today is allowed"
    assert validator("2022-07-29", FORM_DATA)[0]
    assert not validator((date.today() + timedelta(days=1)).isoformat(), FORM_DATA)[0], "Tomorrow is not"
    assert validator(None, FORM_DATA)[0], "Should pass for None (not its responsibility)"
