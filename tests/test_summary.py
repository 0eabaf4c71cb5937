# tests/test_summary.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import fitz

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from partner_kyc.challenge import render_challenge_png
from partner_kyc.form_data_builder import assemble_payload
from partner_kyc.session_store import SessionStore
from partner_kyc.summary import format_record_for_display, format_value, render_acknowledgement_pdf


def test_format_value() -> None:
    assert format_value(None) == "-"
    assert format_value("") == "-"
    assert format_value(True) == "Yes"
    assert format_value(["a", "b"]) == "a, b"
    assert format_value(42) == "42"

def test_review_summary_sections(filled_store: SessionStore) -> None:
    sections = format_record_for_display(filled_store.record())

    general = dict(sections['General Information'])
    assert general['Business name'] == 'Acme Agro Pvt Ltd'
    assert general['Do you have a business email ID?'] == 'Yes', "Choice keys are shown by their label"
    assert general['Dealership certificate'] == 'dealer.pdf', "The storage prefix is not shown"

    gst = dict(sections['GST, PAN & MSME'])
    assert 'MSME/Udyog number' not in gst, "Hidden follow-up questions are left out"

    addresses = dict(sections['Address Details'])
    assert addresses['Address #1'].startswith('Bill To, 12 MG Road')

def test_review_summary_skips_inapplicable_steps(filled_store: SessionStore) -> None:
    record = filled_store.record()
    record['general']['partner_type'] = 'Customer'
    sections = format_record_for_display(record)
    assert 'Bank Details' not in sections, "Stale bank details must not be shown to a customer"

def test_acknowledgement_pdf(filled_store: SessionStore) -> None:
    payload = assemble_payload(filled_store.record())
    pdf_bytes = render_acknowledgement_pdf(7, '2024-03-01T09:00:00+00:00', payload)

    assert pdf_bytes.startswith(b'%PDF')
    with fitz.open(stream=pdf_bytes, filetype='pdf') as doc:
        text = ''.join(page.get_text() for page in doc)
    assert 'Reference number: 7' in text
    assert 'Acme Agro Pvt Ltd' in text

def test_challenge_image_is_png() -> None:
    png: Any = render_challenge_png('A7X9K2', seed=1)
    assert png.startswith(b'\x89PNG')
