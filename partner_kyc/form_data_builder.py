from __future__ import annotations
from typing import Any, TypedDict, cast

from .step_definitions import STEPS_BY_ID, applicable_steps
from .utils import StepDefinition, StepId, SubmissionRecord

# ===================================================================
# 1. DEFINE THE "PRODUCT" - THE FLAT SUBMISSION ROW
# ===================================================================
# This is what the persistence collaborator receives. Every key is always
# present; a skipped step contributes None for each of its columns.

class AddressEntry(TypedDict):
    address_type: str
    address_line1: str
    address_line2: str | None
    city: str
    state: str
    country: str
    pin_code: str

class SubmissionPayload(TypedDict):
    # General
    has_business_email: str | None
    business_email: str | None
    business_name: str | None
    ownership_type: str | None
    partner_type: str | None
    website: str | None
    vendor_industry_type: str | None
    customer_industry_type: str | None
    has_dealership_certificate: str | None
    dealership_certificate: str | None
    place_of_business: str | None
    # Bank details
    bank_account_name: str | None
    account_number: str | None
    bank_name: str | None
    ifsc_code: str | None
    bank_document_type: str | None
    bank_document: str | None
    # GST, PAN & MSME
    gst_type: str | None
    gst_number: str | None
    gst_certificate: str | None
    pan_number: str | None
    pan_document: str | None
    has_msme_udyog: str | None
    msme_udyog_number: str | None
    msme_udyog_certificate: str | None
    # Contact person
    contact_title: str | None
    contact_first_name: str | None
    contact_last_name: str | None
    contact_designation: str | None
    country_code: str | None
    phone_number: str | None
    has_email: str | None
    contact_email: str | None
    # Addresses
    addresses: list[AddressEntry] | None
    # Turnover
    turnover_exceeding_ten_crore: str | None
    has_filed_itr: str | None
    acknowledgement_no_2021: str | None
    filing_date_2021: str | None
    acknowledgement_no_2022: str | None
    filing_date_2022: str | None
    acknowledgement_no_2023: str | None
    filing_date_2023: str | None
    # Submitter
    submitter_title: str | None
    submitter_name: str | None
    submitter_department: str | None
    submitter_designation: str | None
    submitter_email: str | None
    declaration: bool

PAYLOAD_FIELDS: tuple[str, ...] = tuple(SubmissionPayload.__annotations__)

# ===================================================================
# 2. DEFINE THE "BLUEPRINT" - WHERE EACH COLUMN COMES FROM
# ===================================================================
# payload column -> key inside that step's data

PAYLOAD_COLUMNS: dict[StepId, dict[str, str]] = {
    StepId.GENERAL: {
        'has_business_email': 'has_business_email',
        'business_email': 'business_email',
        'business_name': 'business_name',
        'ownership_type': 'ownership_type',
        'partner_type': 'partner_type',
        'website': 'website',
        'vendor_industry_type': 'vendor_industry_type',
        'customer_industry_type': 'customer_industry_type',
        'has_dealership_certificate': 'has_dealership_certificate',
        'dealership_certificate': 'dealership_certificate',
        'place_of_business': 'place_of_business',
    },
    StepId.BANK_DETAILS: {
        'bank_account_name': 'bank_account_name',
        'account_number': 'account_number',
        'bank_name': 'bank_name',
        'ifsc_code': 'ifsc_code',
        'bank_document_type': 'document_type',
        'bank_document': 'document',
    },
    StepId.GST_DETAILS: {
        'gst_type': 'gst_type',
        'gst_number': 'gst_number',
        'gst_certificate': 'gst_certificate',
        'pan_number': 'pan_number',
        'pan_document': 'pan_document',
        'has_msme_udyog': 'has_msme_udyog',
        'msme_udyog_number': 'msme_udyog_number',
        'msme_udyog_certificate': 'msme_udyog_certificate',
    },
    StepId.CONTACT_PERSON: {
        'contact_title': 'title',
        'contact_first_name': 'first_name',
        'contact_last_name': 'last_name',
        'contact_designation': 'designation',
        'country_code': 'country_code',
        'phone_number': 'phone_number',
        'has_email': 'has_email',
        'contact_email': 'email',
    },
    StepId.TURNOVER: {
        'turnover_exceeding_ten_crore': 'turnover_exceeding_ten_crore',
        'has_filed_itr': 'has_filed_itr',
        'acknowledgement_no_2021': 'acknowledgement_no_2021',
        'filing_date_2021': 'filing_date_2021',
        'acknowledgement_no_2022': 'acknowledgement_no_2022',
        'filing_date_2022': 'filing_date_2022',
        'acknowledgement_no_2023': 'acknowledgement_no_2023',
        'filing_date_2023': 'filing_date_2023',
    },
    StepId.SUBMITTER: {
        'submitter_title': 'title',
        'submitter_department': 'department',
        'submitter_designation': 'designation',
        'submitter_email': 'email',
    },
}

# ===================================================================
# 3. BUILD THE "FACTORY" - RECORD -> PAYLOAD
# ===================================================================

def _empty_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value:
        return None
    return value

def _address_entries(address_data: dict[str, Any]) -> list[AddressEntry]:
    return [
        AddressEntry(
            address_type=row['address_type'],
            address_line1=row['address_line1'],
            address_line2=_empty_to_none(row.get('address_line2')),
            city=row['city'],
            state=row['state'],
            country=row['country'],
            pin_code=row['pin_code'],
        )
        for row in address_data.get('addresses', [])
    ]

def submitter_full_name(submitter: dict[str, Any]) -> str | None:
    """First and last name joined by a space. Title and department get their own columns."""
    parts = [submitter.get('first_name'), submitter.get('last_name')]
    return ' '.join(part for part in parts if part) or None

def missing_steps(record: SubmissionRecord) -> list[StepDefinition]:
    """Applicable steps that collect data but have nothing in the record yet."""
    return [
        step_def for step_def in applicable_steps(record)
        if (step_def['fields'] or step_def['dataframes']) and step_def['name'] not in record
    ]

def assemble_payload(record: SubmissionRecord) -> SubmissionPayload:
    """
    Flattens the per-step record into one row. Data left over from a step
    that no longer applies (e.g. bank details of someone who switched to
    Customer) is replaced by None, so the row always matches the branch taken.
    """
    applicable = {step_def['id'] for step_def in applicable_steps(record)}

    def step_data(step_id: StepId) -> dict[str, Any]:
        if step_id not in applicable:
            return {}
        return record.get(STEPS_BY_ID[step_id]['name']) or {}

    payload: dict[str, Any] = {}
    for step_id, columns in PAYLOAD_COLUMNS.items():
        data = step_data(step_id)
        for column, source_key in columns.items():
            payload[column] = _empty_to_none(data.get(source_key))

    address_data = step_data(StepId.ADDRESS)
    payload['addresses'] = _address_entries(address_data) if address_data else None

    submitter = step_data(StepId.SUBMITTER)
    payload['submitter_name'] = submitter_full_name(submitter)
    payload['declaration'] = submitter.get('accept_terms') is True

    return cast(SubmissionPayload, {key: payload[key] for key in PAYLOAD_FIELDS})
