# tests/test_navigation.py
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the `partner_kyc` package importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from partner_kyc.navigation import applicable_step_ids, calculate_next_step_id, calculate_prev_step_id
from partner_kyc.para import PLACE_DOMESTIC, PLACE_FOREIGN, partner_types
from partner_kyc.utils import StepId, SubmissionRecord


def make_record(partner_type: str | None, place: str | None) -> SubmissionRecord:
    return {'general': {'partner_type': partner_type, 'place_of_business': place}}

DOMESTIC_VENDOR = make_record('Vendor', PLACE_DOMESTIC)
DOMESTIC_CUSTOMER = make_record('Customer', PLACE_DOMESTIC)
FOREIGN_VENDOR = make_record('Vendor', PLACE_FOREIGN)
FOREIGN_CUSTOMER = make_record('Customer', PLACE_FOREIGN)

ALL_RECORDS: list[SubmissionRecord] = [{}] + [
    make_record(partner_type, place)
    for partner_type in partner_types
    for place in (PLACE_DOMESTIC, PLACE_FOREIGN)
]


def test_calculate_next_step() -> None:
    """Tests the logic for calculating the next step ID."""
    # Full sequence for a domestic vendor
    assert calculate_next_step_id(StepId.INSTRUCTIONS, DOMESTIC_VENDOR) == StepId.GENERAL
    assert calculate_next_step_id(StepId.GENERAL, DOMESTIC_VENDOR) == StepId.BANK_DETAILS
    assert calculate_next_step_id(StepId.TURNOVER, DOMESTIC_VENDOR) == StepId.SUBMITTER

    # From the last step
    assert calculate_next_step_id(StepId.SUBMITTER, DOMESTIC_VENDOR) == StepId.SUBMITTED, \
        "Should report completion after the submitter step"

def test_customer_skips_bank_details() -> None:
    assert calculate_next_step_id(StepId.GENERAL, DOMESTIC_CUSTOMER) == StepId.GST_DETAILS
    assert calculate_prev_step_id(StepId.GST_DETAILS, DOMESTIC_CUSTOMER) == StepId.GENERAL

def test_foreign_partner_skips_tax_steps() -> None:
    assert calculate_next_step_id(StepId.BANK_DETAILS, FOREIGN_VENDOR) == StepId.CONTACT_PERSON
    assert calculate_next_step_id(StepId.ADDRESS, FOREIGN_VENDOR) == StepId.SUBMITTER
    assert calculate_prev_step_id(StepId.SUBMITTER, FOREIGN_VENDOR) == StepId.ADDRESS
    assert calculate_prev_step_id(StepId.CONTACT_PERSON, FOREIGN_VENDOR) == StepId.BANK_DETAILS

    assert calculate_next_step_id(StepId.GENERAL, FOREIGN_CUSTOMER) == StepId.CONTACT_PERSON, \
        "A foreign customer skips bank, GST and turnover in one go"

def test_calculate_prev_step() -> None:
    """Tests the logic for calculating the previous step ID."""
    assert calculate_prev_step_id(StepId.BANK_DETAILS, DOMESTIC_VENDOR) == StepId.GENERAL

    # From the first step in sequence
    assert calculate_prev_step_id(StepId.INSTRUCTIONS, DOMESTIC_VENDOR) == StepId.INSTRUCTIONS, \
        "Should stay on the first step"
    assert calculate_prev_step_id(StepId.INSTRUCTIONS, {}) == StepId.INSTRUCTIONS

def test_navigation_from_a_step_that_no_longer_applies() -> None:
    """The user switched to Customer while sitting on the bank step."""
    assert calculate_next_step_id(StepId.BANK_DETAILS, DOMESTIC_CUSTOMER) == StepId.GST_DETAILS, \
        "Should move to the first applicable step after it"
    assert calculate_prev_step_id(StepId.BANK_DETAILS, DOMESTIC_CUSTOMER) == StepId.GENERAL, \
        "Should move to the last applicable step before it"

    assert calculate_next_step_id(StepId.TURNOVER, FOREIGN_VENDOR) == StepId.SUBMITTER
    assert calculate_prev_step_id(StepId.GST_DETAILS, FOREIGN_VENDOR) == StepId.BANK_DETAILS

def test_sequence_is_recomputed_from_the_record() -> None:
    record = make_record('Vendor', PLACE_DOMESTIC)
    assert calculate_next_step_id(StepId.GENERAL, record) == StepId.BANK_DETAILS

    record['general']['partner_type'] = 'Customer'
    assert calculate_next_step_id(StepId.GENERAL, record) == StepId.GST_DETAILS, \
        "Changing an earlier answer should change the route immediately"

@pytest.mark.parametrize('record', ALL_RECORDS)
def test_prev_undoes_next(record: SubmissionRecord) -> None:
    sequence = applicable_step_ids(record)
    for step_id in sequence[:-1]:
        following = calculate_next_step_id(step_id, record)
        assert calculate_prev_step_id(following, record) == step_id, \
            f"prev(next({step_id.name})) should return to {step_id.name}"
