# partner_kyc/utils.py
from __future__ import annotations
from typing import (
    Any, TypedDict,
    TypeAlias,
)
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum

from .para import (
    yes_no, partner_types, ownership_types, vendor_industry_types,
    customer_industry_types, places_of_business, bank_document_types,
    gst_types, GST_REGISTERED_TYPES, titles, country_codes,
    address_types, countries
)
from .validation import ValidatorFunc

# ===================================================================
# 1. CORE DATA STRUCTURES & TYPE ALIASES
# ===================================================================

class StepId(IntEnum):
    """Ordinal identifiers for the wizard. SUBMITTED is terminal and has no page."""
    INSTRUCTIONS = 1
    GENERAL = 2
    BANK_DETAILS = 3
    GST_DETAILS = 4
    CONTACT_PERSON = 5
    ADDRESS = 6
    TURNOVER = 7
    SUBMITTER = 8
    SUBMITTED = 9

# Step slug -> that step's validated data
SubmissionRecord: TypeAlias = dict[str, dict[str, Any]]
# (controlling field key, values that make the field visible)
VisibilityRule: TypeAlias = tuple[str, tuple[str, ...]]

@dataclass(frozen=True)
class FormField:
    """Defines everything about a form field in one place."""
    key: str
    label: str
    ui_type: str = 'text'
    options: list[str] | dict[str, str] | None = None
    default_value: Any = ''
    include_day: bool = True
    row_schema: type | None = None
    max_length: int | None = None
    show_when: VisibilityRule | None = None

    def is_visible(self, step_data: dict[str, Any]) -> bool:
        if self.show_when is None:
            return True
        controlling_key, values = self.show_when
        return step_data.get(controlling_key) in values

DataframeColumnRules: TypeAlias = dict[str, list[ValidatorFunc]]

class FieldConfig(TypedDict):
    field: FormField
    validators: list[ValidatorFunc]

class DataframeConfig(TypedDict):
    field: FormField
    validators: DataframeColumnRules
    min_rows: int

class StepDefinition(TypedDict):
    id: StepId
    name: str
    title: str
    subtitle: str
    fields: list[FieldConfig]
    dataframes: list[DataframeConfig]
    is_applicable: Callable[[SubmissionRecord], bool]

# ===================================================================
# 2. THE APPLICATION SCHEMA (Single Source of Truth)
# ===================================================================

class AppSchema:
    """
    Defines all fields used in the application, grouped per step. Each field
    is an instance of the FormField dataclass, containing all its necessary
    metadata.
    """
    class General:
        HAS_BUSINESS_EMAIL = FormField(key='has_business_email', label='Do you have a business email ID?',
                                       ui_type='radio', options=yes_no, default_value=None)
        BUSINESS_EMAIL = FormField(key='business_email', label='Business email ID',
                                   show_when=('has_business_email', ('yes',)))
        PARTNER_TYPE = FormField(key='partner_type', label='Partner type', ui_type='select',
                                 options=partner_types, default_value=None)
        BUSINESS_NAME = FormField(key='business_name', label='Business name', max_length=120)
        OWNERSHIP_TYPE = FormField(key='ownership_type', label='Ownership type', ui_type='select',
                                   options=ownership_types, default_value=None)
        WEBSITE = FormField(key='website', label='Website (optional)')
        VENDOR_INDUSTRY_TYPE = FormField(key='vendor_industry_type', label='Vendor industry type', ui_type='radio',
                                         options=vendor_industry_types, default_value=None,
                                         show_when=('partner_type', ('Vendor', 'Both')))
        CUSTOMER_INDUSTRY_TYPE = FormField(key='customer_industry_type', label='Customer industry type', ui_type='radio',
                                           options=customer_industry_types, default_value=None,
                                           show_when=('partner_type', ('Customer', 'Both')))
        HAS_DEALERSHIP_CERTIFICATE = FormField(key='has_dealership_certificate', label='Do you have a dealership certificate?',
                                               ui_type='radio', options=yes_no, default_value=None,
                                               show_when=('vendor_industry_type', ('Dealership',)))
        DEALERSHIP_CERTIFICATE = FormField(key='dealership_certificate', label='Dealership certificate', ui_type='file',
                                           default_value=None, show_when=('has_dealership_certificate', ('yes',)))
        PLACE_OF_BUSINESS = FormField(key='place_of_business', label='Place of business', ui_type='radio',
                                      options=places_of_business, default_value=None)

    class BankDetails:
        BANK_ACCOUNT_NAME = FormField(key='bank_account_name', label='Bank account name')
        ACCOUNT_NUMBER = FormField(key='account_number', label='Account number', max_length=34)
        BANK_NAME = FormField(key='bank_name', label='Bank name')
        IFSC_CODE = FormField(key='ifsc_code', label='IFSC code', max_length=11)
        DOCUMENT_TYPE = FormField(key='document_type', label='Supporting document type', ui_type='radio',
                                  options=bank_document_types, default_value=None)
        DOCUMENT = FormField(key='document', label='Supporting document', ui_type='file', default_value=None)

    class GstDetails:
        GST_TYPE = FormField(key='gst_type', label='GST registration type', ui_type='select',
                             options=gst_types, default_value=None)
        GST_NUMBER = FormField(key='gst_number', label='GST number', max_length=15,
                               show_when=('gst_type', GST_REGISTERED_TYPES))
        GST_CERTIFICATE = FormField(key='gst_certificate', label='GST certificate', ui_type='file',
                                    default_value=None, show_when=('gst_type', GST_REGISTERED_TYPES))
        PAN_NUMBER = FormField(key='pan_number', label='PAN number', max_length=10)
        PAN_DOCUMENT = FormField(key='pan_document', label='PAN document', ui_type='file', default_value=None)
        HAS_MSME_UDYOG = FormField(key='has_msme_udyog', label='Are you registered under MSME/Udyog?',
                                   ui_type='radio', options=yes_no, default_value=None)
        MSME_UDYOG_NUMBER = FormField(key='msme_udyog_number', label='MSME/Udyog number',
                                      show_when=('has_msme_udyog', ('yes',)))
        MSME_UDYOG_CERTIFICATE = FormField(key='msme_udyog_certificate', label='MSME/Udyog certificate', ui_type='file',
                                           default_value=None, show_when=('has_msme_udyog', ('yes',)))

    class ContactPerson:
        TITLE = FormField(key='title', label='Title', ui_type='select', options=titles, default_value=None)
        FIRST_NAME = FormField(key='first_name', label='First name')
        LAST_NAME = FormField(key='last_name', label='Last name (optional)')
        DESIGNATION = FormField(key='designation', label='Designation')
        COUNTRY_CODE = FormField(key='country_code', label='Country code', ui_type='select',
                                 options=country_codes, default_value='+91')
        PHONE_NUMBER = FormField(key='phone_number', label='Phone number', max_length=15)
        HAS_EMAIL = FormField(key='has_email', label='Does the contact person have an email ID?',
                              ui_type='radio', options=yes_no, default_value=None)
        EMAIL = FormField(key='email', label='Email ID', show_when=('has_email', ('yes',)))

    class AddressRow:
        ADDRESS_TYPE = FormField(key='address_type', label='Address type', ui_type='select',
                                 options=address_types, default_value='Bill To')
        LINE1 = FormField(key='address_line1', label='Address line 1')
        LINE2 = FormField(key='address_line2', label='Address line 2 (optional)')
        CITY = FormField(key='city', label='City')
        STATE = FormField(key='state', label='State')
        COUNTRY = FormField(key='country', label='Country', ui_type='select', options=countries, default_value='India')
        PIN_CODE = FormField(key='pin_code', label='PIN / postal code', max_length=10)

    ADDRESSES = FormField(key='addresses', label='Address', ui_type='dataframe',
                          row_schema=AddressRow, default_value=[])

    class Turnover:
        EXCEEDS_TEN_CRORE = FormField(key='turnover_exceeding_ten_crore',
                                      label='Did your turnover exceed ₹10 crore in the last financial year?',
                                      ui_type='radio', options=yes_no, default_value=None)
        HAS_FILED_ITR = FormField(key='has_filed_itr', label='Have you filed income tax returns?',
                                  ui_type='radio', options=yes_no, default_value=None)
        ACK_2021 = FormField(key='acknowledgement_no_2021', label='Acknowledgement number, FY 2020-21',
                             show_when=('has_filed_itr', ('yes',)))
        DATE_2021 = FormField(key='filing_date_2021', label='Filing date, FY 2020-21', ui_type='date',
                              default_value=None, show_when=('has_filed_itr', ('yes',)))
        ACK_2022 = FormField(key='acknowledgement_no_2022', label='Acknowledgement number, FY 2021-22',
                             show_when=('has_filed_itr', ('yes',)))
        DATE_2022 = FormField(key='filing_date_2022', label='Filing date, FY 2021-22', ui_type='date',
                              default_value=None, show_when=('has_filed_itr', ('yes',)))
        ACK_2023 = FormField(key='acknowledgement_no_2023', label='Acknowledgement number, FY 2022-23 (optional)',
                             show_when=('has_filed_itr', ('yes',)))
        DATE_2023 = FormField(key='filing_date_2023', label='Filing date, FY 2022-23 (optional)', ui_type='date',
                              default_value=None, show_when=('has_filed_itr', ('yes',)))

    class Submitter:
        TITLE = FormField(key='title', label='Title', ui_type='select', options=titles, default_value=None)
        FIRST_NAME = FormField(key='first_name', label='First name')
        LAST_NAME = FormField(key='last_name', label='Last name (optional)')
        DEPARTMENT = FormField(key='department', label='Department')
        DESIGNATION = FormField(key='designation', label='Designation')
        EMAIL = FormField(key='email', label='Email ID (optional)')
        ACCEPT_TERMS = FormField(key='accept_terms', label='I declare that the information given above is true and correct.',
                                 ui_type='checkbox', default_value=False)
        VERIFICATION_CODE = FormField(key='verification_code', label='Enter the code shown above', max_length=6)

# ===================================================================
# 3. CENTRALIZED CONSTANTS & SESSION MANAGEMENT
# ===================================================================

SESSION_KEY: str = 'kyc_session'
CHALLENGE_KEY: str = 'challenge_code'
DRAFT_KEY: str = 'step_draft'
FORM_ATTEMPTED_SUBMISSION_KEY: str = 'form_attempted_submission'
CURRENT_STEP_ERRORS_KEY: str = 'current_step_errors'
LAST_CONFIRMATION_KEY: str = 'last_confirmation'

SESSION_TTL: timedelta = timedelta(hours=24)
MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
ALLOWED_UPLOAD_TYPES: dict[str, str] = {
    'application/pdf': 'pdf',
    'image/jpeg': 'jpeg',
    'image/png': 'png',
}
CHALLENGE_LENGTH: int = 6
# No 0/O or 1/I, they are too easy to confuse in the image
CHALLENGE_ALPHABET: str = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
