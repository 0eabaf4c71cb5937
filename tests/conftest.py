# tests/conftest.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

# Make the `partner_kyc` package importable without installing it
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from partner_kyc.session_store import SessionStore
from partner_kyc.step_definitions import STEPS_BY_ID
from partner_kyc.step_validation import validate_step
from partner_kyc.utils import StepId

DATA_STEPS: tuple[StepId, ...] = (
    StepId.GENERAL, StepId.BANK_DETAILS, StepId.GST_DETAILS,
    StepId.CONTACT_PERSON, StepId.ADDRESS, StepId.TURNOVER,
)


@pytest.fixture
def step_inputs() -> dict[str, dict[str, Any]]:
    """Raw answers for every step of a domestic vendor-and-customer, all valid."""
    return {
        'general': {
            'has_business_email': 'yes',
            'business_email': 'accounts@acme.in',
            'partner_type': 'Both',
            'business_name': '  Acme Agro Pvt Ltd ',
            'ownership_type': 'Company',
            'website': 'https://acme.in',
            'vendor_industry_type': 'Dealership',
            'customer_industry_type': 'Feed Industry',
            'has_dealership_certificate': 'yes',
            'dealership_certificate': 'abc123_dealer.pdf',
            'place_of_business': 'Within India (Domestic)',
        },
        'bank_details': {
            'bank_account_name': 'Acme Agro Pvt Ltd',
            'account_number': '001234567890',
            'bank_name': 'State Bank of India',
            'ifsc_code': 'SBIN0001234',
            'document_type': 'Cancelled Cheque',
            'document': 'def456_cheque.png',
        },
        'gst_details': {
            'gst_type': 'Regular',
            'gst_number': '27AAACA1234A1Z5',
            'gst_certificate': 'aaa111_gst.pdf',
            'pan_number': 'AAACA1234A',
            'pan_document': 'bbb222_pan.png',
            'has_msme_udyog': 'no',
            'msme_udyog_number': '',
            'msme_udyog_certificate': None,
        },
        'contact_person': {
            'title': 'Ms.',
            'first_name': 'Priya',
            'last_name': 'Sharma',
            'designation': 'Accounts Manager',
            'country_code': '+91',
            'phone_number': '9876543210',
            'has_email': 'yes',
            'email': 'priya@acme.in',
        },
        'address': {
            'addresses': [{
                'address_type': 'Bill To',
                'address_line1': '12 MG Road',
                'address_line2': '',
                'city': 'Pune',
                'state': 'Maharashtra',
                'country': 'India',
                'pin_code': '411001',
            }],
        },
        'turnover': {
            'turnover_exceeding_ten_crore': 'no',
            'has_filed_itr': 'yes',
            'acknowledgement_no_2021': '123456789012345',
            'filing_date_2021': '2021-07-30',
            'acknowledgement_no_2022': '223456789012345',
            'filing_date_2022': '2022-07-29',
        },
        'submitter': {
            'title': 'Mr.',
            'first_name': 'Rahul',
            'last_name': 'Verma',
            'department': 'Finance',
            'designation': 'CFO',
            'email': 'rahul@acme.in',
            'accept_terms': True,
            'verification_code': '',
        },
    }


@pytest.fixture
def filled_store(step_inputs: dict[str, dict[str, Any]]) -> SessionStore:
    """A session that has passed every step before the submitter page."""
    store = SessionStore({})
    for step_id in DATA_STEPS:
        name = STEPS_BY_ID[step_id]['name']
        store.update(name, validate_step(step_id, step_inputs[name]))
    store.set_current_step(StepId.SUBMITTER)
    return store
