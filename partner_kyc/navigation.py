# partner_kyc/navigation.py
from __future__ import annotations

from .step_definitions import applicable_steps
from .utils import StepId, SubmissionRecord


def applicable_step_ids(record: SubmissionRecord) -> list[StepId]:
    """Recomputed on every call: earlier answers decide which steps remain."""
    return [step_def['id'] for step_def in applicable_steps(record)]

def calculate_next_step_id(current_step_id: StepId, record: SubmissionRecord) -> StepId:
    """Calculates the ID of the next step, or SUBMITTED after the last one."""
    step_sequence = applicable_step_ids(record)

    if current_step_id in step_sequence:
        current_index: int = step_sequence.index(current_step_id)
        if current_index < len(step_sequence) - 1:
            return step_sequence[current_index + 1]
        return StepId.SUBMITTED

    # The current step stopped applying (e.g. partner type changed), move on by ordinal.
    return next((step_id for step_id in step_sequence if step_id > current_step_id), StepId.SUBMITTED)

def calculate_prev_step_id(current_step_id: StepId, record: SubmissionRecord) -> StepId:
    """Calculates the ID of the previous step. Stays put on the first step."""
    step_sequence = applicable_step_ids(record)

    if current_step_id in step_sequence:
        current_index: int = step_sequence.index(current_step_id)
        return step_sequence[current_index - 1] if current_index > 0 else step_sequence[0]

    earlier = [step_id for step_id in step_sequence if step_id < current_step_id]
    return earlier[-1] if earlier else step_sequence[0]
