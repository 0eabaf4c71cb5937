# partner_kyc/summary.py
from __future__ import annotations
import logging
from typing import Any

import fitz

from .form_data_builder import PAYLOAD_COLUMNS, SubmissionPayload
from .step_definitions import STEPS_BY_ID, applicable_steps
from .utils import FormField, StepId, SubmissionRecord

logger = logging.getLogger(__name__)

SummarySections = dict[str, list[tuple[str, str]]]

FONT_NAME: str = "helv"
FONT_SIZE: int = 10
LINE_HEIGHT: float = 15.0
PAGE_MARGIN: float = 50.0


def format_value(value: Any) -> str:
    if value is None or value == '':
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list):
        return ", ".join(format_value(item) for item in value)
    return str(value)

def _format_field(field: FormField, value: Any) -> str:
    if field.ui_type == 'file' and isinstance(value, str) and '_' in value:
        return value.split('_', 1)[1]  # drop the storage prefix
    if isinstance(field.options, dict) and value in field.options:
        return field.options[value]
    return format_value(value)

def format_record_for_display(record: SubmissionRecord) -> SummarySections:
    """Section title -> (label, value) pairs for the review dialog. Hidden fields are left out."""
    sections: SummarySections = {}
    for step_def in applicable_steps(record):
        step_data = record.get(step_def['name'])
        if not step_data:
            continue
        rows: list[tuple[str, str]] = []
        for field_conf in step_def['fields']:
            field = field_conf['field']
            if field.key == 'verification_code' or not field.is_visible(step_data):
                continue
            rows.append((field.label, _format_field(field, step_data.get(field.key))))
        for df_conf in step_def['dataframes']:
            df_field = df_conf['field']
            for i, row in enumerate(step_data.get(df_field.key, [])):
                parts = [format_value(v) for v in row.values() if v]
                rows.append((f"{df_field.label} #{i + 1}", ", ".join(parts)))
        sections[step_def['title']] = rows
    return sections

def _payload_sections(payload: SubmissionPayload) -> SummarySections:
    sections: SummarySections = {}
    for step_id, columns in PAYLOAD_COLUMNS.items():
        rows = [(column.replace('_', ' ').capitalize(), format_value(payload[column]))  # type: ignore[literal-required]
                for column in columns]
        sections[STEPS_BY_ID[step_id]['title']] = rows
    addresses = payload['addresses'] or []
    sections[STEPS_BY_ID[StepId.ADDRESS]['title']] = [
        (f"{entry['address_type']} #{i + 1}",
         ", ".join(v for v in (entry['address_line1'], entry['address_line2'], entry['city'],
                               entry['state'], entry['country'], entry['pin_code']) if v))
        for i, entry in enumerate(addresses)
    ]
    sections[STEPS_BY_ID[StepId.SUBMITTER]['title']].insert(0, ("Submitter name", format_value(payload['submitter_name'])))
    sections[STEPS_BY_ID[StepId.SUBMITTER]['title']].append(("Declaration accepted", format_value(payload['declaration'])))
    return sections

def render_acknowledgement_pdf(record_id: int, submitted_at: str, payload: SubmissionPayload) -> bytes:
    """
    Renders a plain acknowledgement of a stored submission: reference number,
    timestamp and every submitted column grouped by section.
    """
    doc = fitz.open()
    try:
        page = doc.new_page()
        y = PAGE_MARGIN

        def insert(text: str, size: int = FONT_SIZE, indent: float = 0.0) -> None:
            nonlocal page, y
            if y > page.rect.height - PAGE_MARGIN:
                page = doc.new_page()
                y = PAGE_MARGIN
            page.insert_text((PAGE_MARGIN + indent, y), text, fontname=FONT_NAME, fontsize=size)
            y += LINE_HEIGHT if size <= FONT_SIZE else LINE_HEIGHT * 1.6

        insert("Partner KYC Submission Acknowledgement", size=16)
        insert(f"Reference number: {record_id}")
        insert(f"Submitted at: {submitted_at}")
        y += LINE_HEIGHT

        for title, rows in _payload_sections(payload).items():
            insert(title, size=12)
            for label, value in rows:
                insert(f"{label}: {value}", indent=12)
            y += LINE_HEIGHT / 2

        pdf_bytes = doc.tobytes(garbage=4, deflate=True)
        logger.info(f"Rendered acknowledgement for submission #{record_id} ({doc.page_count} page(s)).")
        return pdf_bytes
    finally:
        doc.close()
