# partner_kyc/step_definitions.py
from __future__ import annotations

from .para import (
    partner_types, ownership_types, vendor_industry_types, customer_industry_types,
    places_of_business, bank_document_types, gst_types, GST_REGISTERED_TYPES,
    titles, address_types, PLACE_FOREIGN
)
from .utils import AppSchema, StepDefinition, StepId, SubmissionRecord
from .validation import (
    required, required_choice, required_if, one_of, match_pattern, max_length,
    min_length, must_be_true, not_in_future,
    EMAIL_PATTERN, URL_PATTERN, IFSC_PATTERN
)

YES: tuple[str, ...] = ('yes',)

G = AppSchema.General
B = AppSchema.BankDetails
T = AppSchema.GstDetails
C = AppSchema.ContactPerson
A = AppSchema.AddressRow
R = AppSchema.Turnover
S = AppSchema.Submitter

# ===================================================================
# APPLICABILITY RULES (which steps a partner has to go through)
# ===================================================================

def always(record: SubmissionRecord) -> bool:
    return True

def needs_bank_details(record: SubmissionRecord) -> bool:
    """Pure customers never receive payments, so they skip bank details."""
    return (record.get('general') or {}).get('partner_type') != 'Customer'

def is_domestic(record: SubmissionRecord) -> bool:
    """Parties registered outside India do not submit Indian tax or turnover details."""
    return (record.get('general') or {}).get('place_of_business') != PLACE_FOREIGN


STEPS_BY_ID: dict[StepId, StepDefinition] = {
    StepId.INSTRUCTIONS: {
        'id': StepId.INSTRUCTIONS, 'name': 'instructions', 'title': 'Instructions',
        'subtitle': 'Please read these instructions carefully before proceeding.',
        'fields': [], 'dataframes': [], 'is_applicable': always
    },
    StepId.GENERAL: {
        'id': StepId.GENERAL, 'name': 'general', 'title': 'General Information',
        'subtitle': 'Tell us who you are and how you do business with us.', 'is_applicable': always,
        'fields': [
            {'field': G.HAS_BUSINESS_EMAIL, 'validators': [required_choice("Please select whether you have a business email.")]},
            {'field': G.BUSINESS_EMAIL, 'validators': [
                required_if('has_business_email', YES, "Business email is required when 'Yes' is selected."),
                match_pattern(EMAIL_PATTERN, "Please enter a valid email address.")
            ]},
            {'field': G.PARTNER_TYPE, 'validators': [
                required_choice("Please select partner type."),
                one_of(partner_types, "Please select a valid partner type.")
            ]},
            {'field': G.BUSINESS_NAME, 'validators': [
                required("Business name is required."),
                max_length(120, "Business name cannot exceed 120 characters.")
            ]},
            {'field': G.OWNERSHIP_TYPE, 'validators': [
                required_choice("Please select ownership type."),
                one_of(ownership_types, "Please select a valid ownership type.")
            ]},
            {'field': G.WEBSITE, 'validators': [match_pattern(URL_PATTERN, "Please enter a valid URL (http:// or https://).")]},
            {'field': G.VENDOR_INDUSTRY_TYPE, 'validators': [
                required_if('partner_type', ('Vendor', 'Both'), "Vendor industry type is required."),
                one_of(vendor_industry_types, "Please select a valid vendor industry type.")
            ]},
            {'field': G.CUSTOMER_INDUSTRY_TYPE, 'validators': [
                required_if('partner_type', ('Customer', 'Both'), "Customer industry type is required."),
                one_of(customer_industry_types, "Please select a valid customer industry type.")
            ]},
            {'field': G.HAS_DEALERSHIP_CERTIFICATE, 'validators': [one_of(('yes', 'no'), "Please answer yes or no.")]},
            {'field': G.DEALERSHIP_CERTIFICATE, 'validators': [
                required_if('has_dealership_certificate', YES, "Dealership certificate is required.")
            ]},
            {'field': G.PLACE_OF_BUSINESS, 'validators': [
                required_choice("Please select your place of business."),
                one_of(places_of_business, "Please select a valid place of business.")
            ]},
        ],
        'dataframes': []
    },
    StepId.BANK_DETAILS: {
        'id': StepId.BANK_DETAILS, 'name': 'bank_details', 'title': 'Bank Details',
        'subtitle': 'The account we will use for payments to you.', 'is_applicable': needs_bank_details,
        'fields': [
            {'field': B.BANK_ACCOUNT_NAME, 'validators': [required("Bank account name is required.")]},
            {'field': B.ACCOUNT_NUMBER, 'validators': [required("Account number is required.")]},
            {'field': B.BANK_NAME, 'validators': [required("Bank name is required.")]},
            {'field': B.IFSC_CODE, 'validators': [
                required("IFSC code is required."),
                match_pattern(IFSC_PATTERN, "Invalid IFSC code format.")
            ]},
            {'field': B.DOCUMENT_TYPE, 'validators': [
                required_choice("Please select the supporting document type."),
                one_of(bank_document_types, "Please select a valid document type.")
            ]},
            {'field': B.DOCUMENT, 'validators': []},
        ],
        'dataframes': []
    },
    StepId.GST_DETAILS: {
        'id': StepId.GST_DETAILS, 'name': 'gst_details', 'title': 'GST, PAN & MSME',
        'subtitle': 'Tax registrations and supporting certificates.', 'is_applicable': is_domestic,
        'fields': [
            {'field': T.GST_TYPE, 'validators': [
                required_choice("Please select GST registration type."),
                one_of(gst_types, "Please select a valid GST registration type.")
            ]},
            {'field': T.GST_NUMBER, 'validators': [
                required_if('gst_type', GST_REGISTERED_TYPES, "GST number is required for Regular and Composite Supplier.")
            ]},
            {'field': T.GST_CERTIFICATE, 'validators': [
                required_if('gst_type', GST_REGISTERED_TYPES, "GST certificate is required for Regular and Composite Supplier.")
            ]},
            {'field': T.PAN_NUMBER, 'validators': [required("PAN number is required.")]},
            {'field': T.PAN_DOCUMENT, 'validators': [required("PAN document is required.")]},
            {'field': T.HAS_MSME_UDYOG, 'validators': [required_choice("Please select whether you have MSME/Udyog.")]},
            {'field': T.MSME_UDYOG_NUMBER, 'validators': [
                required_if('has_msme_udyog', YES, "MSME/Udyog number is required when 'Yes' is selected.")
            ]},
            {'field': T.MSME_UDYOG_CERTIFICATE, 'validators': [
                required_if('has_msme_udyog', YES, "MSME/Udyog certificate is required when 'Yes' is selected.")
            ]},
        ],
        'dataframes': []
    },
    StepId.CONTACT_PERSON: {
        'id': StepId.CONTACT_PERSON, 'name': 'contact_person', 'title': 'Contact Person',
        'subtitle': 'Who should we reach out to about this registration?', 'is_applicable': always,
        'fields': [
            {'field': C.TITLE, 'validators': [
                required_choice("Please select a title."),
                one_of(titles, "Please select a valid title.")
            ]},
            {'field': C.FIRST_NAME, 'validators': [required("First name is required.")]},
            {'field': C.LAST_NAME, 'validators': []},
            {'field': C.DESIGNATION, 'validators': [required("Designation is required.")]},
            {'field': C.COUNTRY_CODE, 'validators': [required_choice("Country code is required.")]},
            {'field': C.PHONE_NUMBER, 'validators': [
                required("Phone number is required."),
                min_length(10, "Phone number must be at least 10 digits.")
            ]},
            {'field': C.HAS_EMAIL, 'validators': [required_choice("Please select whether the contact person has an email.")]},
            {'field': C.EMAIL, 'validators': [
                required_if('has_email', YES, "Email is required when 'Yes' is selected."),
                match_pattern(EMAIL_PATTERN, "Please enter a valid email address.")
            ]},
        ],
        'dataframes': []
    },
    StepId.ADDRESS: {
        'id': StepId.ADDRESS, 'name': 'address', 'title': 'Address Details',
        'subtitle': 'Billing and shipping addresses. Add as many as you need.', 'is_applicable': always,
        'fields': [],
        'dataframes': [{
            'field': AppSchema.ADDRESSES,
            'min_rows': 1,
            'validators': {
                'address_type': [required_choice('Address type is required.'), one_of(address_types, 'Please select a valid address type.')],
                'address_line1': [required('Address line 1 is required.')],
                'address_line2': [],
                'city': [required('City is required.')],
                'state': [required('State is required.')],
                'country': [required('Country is required.')],
                'pin_code': [required('PIN / postal code is required.')],
            }
        }]
    },
    StepId.TURNOVER: {
        'id': StepId.TURNOVER, 'name': 'turnover', 'title': 'Turnover Declaration',
        'subtitle': 'Income tax return filings for the last completed financial years.', 'is_applicable': is_domestic,
        'fields': [
            {'field': R.EXCEEDS_TEN_CRORE, 'validators': [required_choice("Please select whether turnover exceeds 10 crore.")]},
            {'field': R.HAS_FILED_ITR, 'validators': [required_choice("Please select whether you have filed ITR.")]},
            {'field': R.ACK_2021, 'validators': [
                required_if('has_filed_itr', YES, "Acknowledgement number for FY 2020-21 is required.")
            ]},
            {'field': R.DATE_2021, 'validators': [
                required_if('has_filed_itr', YES, "Filing date for FY 2020-21 is required."),
                not_in_future()
            ]},
            {'field': R.ACK_2022, 'validators': [
                required_if('has_filed_itr', YES, "Acknowledgement number for FY 2021-22 is required.")
            ]},
            {'field': R.DATE_2022, 'validators': [
                required_if('has_filed_itr', YES, "Filing date for FY 2021-22 is required."),
                not_in_future()
            ]},
            # The current financial year may still be open, so these stay optional.
            {'field': R.ACK_2023, 'validators': []},
            {'field': R.DATE_2023, 'validators': [not_in_future()]},
        ],
        'dataframes': []
    },
    StepId.SUBMITTER: {
        'id': StepId.SUBMITTER, 'name': 'submitter', 'title': 'Submitter Details',
        'subtitle': 'Review your answers, sign the declaration and submit.', 'is_applicable': always,
        'fields': [
            {'field': S.TITLE, 'validators': [
                required_choice("Please select a title."),
                one_of(titles, "Please select a valid title.")
            ]},
            {'field': S.FIRST_NAME, 'validators': [required("First name is required.")]},
            {'field': S.LAST_NAME, 'validators': []},
            {'field': S.DEPARTMENT, 'validators': [required("Department is required.")]},
            {'field': S.DESIGNATION, 'validators': [required("Designation is required.")]},
            {'field': S.EMAIL, 'validators': [match_pattern(EMAIL_PATTERN, "Please enter a valid email address.")]},
            {'field': S.ACCEPT_TERMS, 'validators': [must_be_true("You must accept the declaration.")]},
            {'field': S.VERIFICATION_CODE, 'validators': [required("Verification code is required.")]},
        ],
        'dataframes': []
    },
}

# ===================================================================
# TABLE ACCESSORS
# ===================================================================

def all_steps() -> list[StepDefinition]:
    return [STEPS_BY_ID[step_id] for step_id in sorted(STEPS_BY_ID)]

def applicable_steps(record: SubmissionRecord) -> list[StepDefinition]:
    """The steps this record still has to pass through, in wizard order."""
    return [step_def for step_def in all_steps() if step_def['is_applicable'](record)]

def step_by_name(name: str) -> StepDefinition | None:
    return next((step_def for step_def in STEPS_BY_ID.values() if step_def['name'] == name), None)
