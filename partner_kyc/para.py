from typing import List

yes_no: dict[str, str] = {
    "yes": "Yes",
    "no": "No",
}

partner_types: List[str] = [
    "Vendor",
    "Customer",
    "Both",
]

ownership_types: List[str] = [
    "Company",
    "HUF",
    "Individual",
    "LLP",
    "Partnership",
    "Other",
]

vendor_industry_types: List[str] = [
    "Boiler Fuel Supplier",
    "Dealership",
    "Distributor",
    "Event Organizer / Exhibition",
    "Fish Supplier",
    "Lab",
    "Manufacturing Industry",
    "Retailer",
    "Service Industry",
    "Trader",
    "Transporter",
    "University",
]

customer_industry_types: List[str] = [
    "Agricultural Products",
    "Dealership",
    "Direct Consumer (Farmer/ End User)",
    "Distributor",
    "E-Commerce",
    "Feed Industry",
    "Leather",
    "Manufacturing",
    "Pharma",
    "Retailer",
    "Trading",
]

PLACE_DOMESTIC: str = "Within India (Domestic)"
PLACE_FOREIGN: str = "Outside India (Import/Export)"

places_of_business: List[str] = [
    PLACE_DOMESTIC,
    PLACE_FOREIGN,
]

bank_document_types: List[str] = [
    "Cancelled Cheque",
    "Scanned Passbook Copy (First Page)",
    "Bank Statement",
    "Letter Head (For Virtual Account)",
]

# Types that carry a GST number and certificate
GST_REGISTERED_TYPES: tuple[str, ...] = ("Regular", "Composite Supplier")

gst_types: List[str] = [
    *GST_REGISTERED_TYPES,
    "Unregistered",
    "Consumer",
]

titles: List[str] = [
    "Mr.",
    "Mrs.",
    "Ms.",
    "Dr.",
    "Prof.",
]

country_codes: dict[str, str] = {
    "+91": "+91 India",
    "+1": "+1 USA",
    "+44": "+44 UK",
    "+61": "+61 Australia",
    "+86": "+86 China",
}

address_types: List[str] = [
    "Bill To",
    "Ship To",
    "Both",
]

countries: List[str] = [
    "India",
    "United States",
    "United Kingdom",
    "Australia",
    "Canada",
]

# Documents the applicant should keep ready before starting
instruction_checklist: List[str] = [
    "Business Ownership Type (Company/Partnership/LLP/Individual)",
    "Bank details with a cancelled cheque, passbook copy or bank statement",
    "GST registration certificate (if registered)",
    "PAN card copy",
    "MSME/Udyog registration certificate (if applicable)",
    "Income tax return acknowledgements for the last two financial years",
]
