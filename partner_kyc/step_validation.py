# partner_kyc/step_validation.py
from __future__ import annotations
import logging
from datetime import date
from typing import Any

from .errors import FieldError, FieldValidationError
from .step_definitions import STEPS_BY_ID
from .utils import DataframeConfig, FieldConfig, StepDefinition, StepId
from .validation import DATE_FORMAT_STORAGE, ValidatorFunc

logger = logging.getLogger(__name__)


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, date):  # datetime included
        return value.strftime(DATE_FORMAT_STORAGE)
    return value

def _validate_simple_field(field_key: str, validator_list: list[ValidatorFunc], form_data: dict[str, Any], errors: list[FieldError]) -> bool:
    value_to_validate = form_data.get(field_key)
    for validator_func in validator_list:
        is_valid, msg = validator_func(value_to_validate, form_data)
        if not is_valid:
            errors.append(FieldError(field_key, msg))
            return False
    return True

def _validate_dataframe_field(df_conf: DataframeConfig, form_data: dict[str, Any], errors: list[FieldError]) -> bool:
    dataframe_key = df_conf['field'].key
    dataframe_value = form_data.get(dataframe_key) or []
    if len(dataframe_value) < df_conf['min_rows']:
        errors.append(FieldError(dataframe_key, f"At least {df_conf['min_rows']} {df_conf['field'].label.lower()} is required."))
        return False

    is_dataframe_valid = True
    for row_index, row_data in enumerate(dataframe_value):
        for col_key, validator_list in df_conf['validators'].items():
            cell_value = row_data.get(col_key)
            for validator_func in validator_list:
                is_valid, msg = validator_func(cell_value, row_data)
                if not is_valid:
                    is_dataframe_valid = False
                    errors.append(FieldError(f"{dataframe_key}[{row_index}].{col_key}", msg))
                    break
    return is_dataframe_valid

def _visible_data(fields: list[FieldConfig], raw_input: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only the keys the step declares, stripped. A field hidden by its
    controlling answer is reset to None so a stale value cannot fail
    validation or leak into the record.
    """
    data: dict[str, Any] = {}
    for field_conf in fields:
        field = field_conf['field']
        data[field.key] = _clean(raw_input.get(field.key))
    for field_conf in fields:
        field = field_conf['field']
        if not field.is_visible(data):
            data[field.key] = None
    return data

def _rows(df_conf: DataframeConfig, raw_input: dict[str, Any]) -> list[dict[str, Any]]:
    columns = df_conf['validators'].keys()
    raw_rows = raw_input.get(df_conf['field'].key) or []
    return [{col: _clean(row.get(col)) for col in columns} for row in raw_rows]

def execute_step_validators(step_def: StepDefinition, form_data: dict[str, Any]) -> tuple[bool, list[FieldError]]:
    new_errors: list[FieldError] = []
    is_step_valid = True
    for field_conf in step_def.get('fields', []):
        if not field_conf['field'].is_visible(form_data):
            continue
        if not _validate_simple_field(field_conf['field'].key, field_conf['validators'], form_data, new_errors):
            is_step_valid = False
    for df_conf in step_def.get('dataframes', []):
        if not _validate_dataframe_field(df_conf, form_data, new_errors):
            is_step_valid = False
    return is_step_valid, new_errors

def validate_step(step_id: StepId, raw_input: dict[str, Any]) -> dict[str, Any]:
    """
    Validates one step's input and returns the cleaned data ready for the
    session record. Raises FieldValidationError listing every violated rule.
    """
    step_def = STEPS_BY_ID.get(step_id)
    if step_def is None:
        raise KeyError(f"Unknown step: {step_id!r}")

    data = _visible_data(step_def['fields'], raw_input)
    for df_conf in step_def['dataframes']:
        data[df_conf['field'].key] = _rows(df_conf, raw_input)

    all_valid, errors = execute_step_validators(step_def, data)
    if not all_valid:
        logger.info(f"Step '{step_def['name']}' rejected with {len(errors)} error(s).")
        raise FieldValidationError(errors)
    return data
