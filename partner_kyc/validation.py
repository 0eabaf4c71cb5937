# partner_kyc/validation.py
from __future__ import annotations
import re
from re import Pattern
from typing import Any
from collections.abc import Callable, Collection
from datetime import date, datetime

# --- Type Aliases ---
ValidationResult = tuple[bool, str]
# The validator gets the value and the entire step data dict for context
ValidatorFunc = Callable[[Any | None, dict[str, Any]], ValidationResult]

# --- Regex Patterns (centralized) ---
EMAIL_PATTERN: Pattern[str] = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")
URL_PATTERN: Pattern[str] = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
IFSC_PATTERN: Pattern[str] = re.compile(r'^[A-Z]{4}0[A-Z0-9]{6}$')
DATE_FORMAT_STORAGE: str = '%Y-%m-%d'

# ===================================================================
# GENERIC VALIDATOR GENERATORS (Our Reusable Building Blocks)
# ===================================================================

def _is_blank(value: Any | None) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, dict)) and not value: # For dataframes
        return True
    return False

def required(message: str = "This field is required.") -> ValidatorFunc:
    """Ensures a value is not None, not an empty string, and not just whitespace."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if _is_blank(value):
            return False, message
        return True, ""
    return validator

def required_choice(message: str = "Please make a selection.") -> ValidatorFunc:
    """Ensures a value from a select/radio is not None or empty/whitespace."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None or (isinstance(value, str) and not value.strip()):
            return False, message
        return True, ""
    return validator

def required_if(other_key: str, trigger_values: Collection[str], message: str) -> ValidatorFunc:
    """
    Makes a field mandatory only while a sibling field holds one of
    `trigger_values`, e.g. the business email once "yes" is picked.
    """
    check = required(message)
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if form_data.get(other_key) not in trigger_values:
            return True, ""
        return check(value, form_data)
    return validator

def one_of(options: Collection[str], message: str) -> ValidatorFunc:
    """Ensures a selected value is one of the allowed options."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if _is_blank(value):
            return True, "" # Don't fail on empty values, that's `required`'s job.
        if value not in options:
            return False, message
        return True, ""
    return validator

def match_pattern(pattern: Pattern[str], message: str) -> ValidatorFunc:
    """Ensures a string value matches a regex pattern."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        # This validator should only run if the field is not empty.
        # Chain it with required() to validate non-empty fields.
        if not value or not isinstance(value, str):
            return True, ""
        if not pattern.match(value.strip()):
            return False, message
        return True, ""
    return validator

def max_length(limit: int, message: str) -> ValidatorFunc:
    """Ensures a string value is no longer than `limit` characters."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        if len(value.strip()) > limit:
            return False, message
        return True, ""
    return validator

def min_length(limit: int, message: str) -> ValidatorFunc:
    """Ensures a string value has at least `limit` characters."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        if len(value.strip()) < limit:
            return False, message
        return True, ""
    return validator

def must_be_true(message: str) -> ValidatorFunc:
    """For declaration checkboxes: only an explicit True passes."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is not True:
            return False, message
        return True, ""
    return validator

def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value), DATE_FORMAT_STORAGE).date()

def is_within_date_range(
    min_date: date | None = date(1900, 1, 1), max_date: date | None = None,
    message: str = "The selected date is outside the allowed range."
) -> ValidatorFunc:
    """Ensures a date string is within the specified min/max range."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value:
            return True, ''
        try:
            dt_object = _parse_date(value)
            if (min_date and dt_object < min_date) or \
               (max_date and dt_object > max_date):
                return False, message
        except ValueError:
            return False, "Invalid date format."
        return True, ''
    return validator

def not_in_future(message: str = "The date cannot be in the future.") -> ValidatorFunc:
    """Like `is_within_date_range`, but the upper bound is today at call time."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        return is_within_date_range(min_date=None, max_date=date.today(), message=message)(value, form_data)
    return validator
