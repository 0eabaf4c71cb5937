# partner_kyc/submission.py
from __future__ import annotations
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .challenge import verify_challenge
from .database import SubmissionRepository
from .errors import ChallengeMismatchError, FieldError, FieldValidationError, SubmissionError
from .form_data_builder import SubmissionPayload, assemble_payload, missing_steps
from .session_store import SessionStore
from .step_validation import validate_step
from .utils import StepId

logger = logging.getLogger(__name__)

# Runs a blocking callable off the event loop, e.g. nicegui.run.io_bound
IoRunner = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class Confirmation:
    record_id: int
    submitted_at: datetime
    payload: SubmissionPayload


def prepare_submission(store: SessionStore, submitter_input: dict[str, Any]) -> SubmissionPayload:
    """
    Validate the submitter, check every earlier step is present, verify the
    code and build the payload. Every failure leaves the record in place so
    the user can fix the problem and press submit again.
    """
    submitter = validate_step(StepId.SUBMITTER, submitter_input)
    provided_code = submitter.pop('verification_code')
    store.update('submitter', submitter)

    record = store.record()
    incomplete = missing_steps(record)
    if incomplete:
        raise FieldValidationError([
            FieldError(step_def['name'], f"The '{step_def['title']}' section has not been completed.")
            for step_def in incomplete
        ])

    if not verify_challenge(store.current_challenge(), provided_code):
        store.issue_challenge()
        logger.info("Verification code mismatch, issued a new one.")
        raise ChallengeMismatchError()

    return assemble_payload(record)

def persist_submission(repository: SubmissionRepository, payload: SubmissionPayload) -> int:
    """The blocking insert. Touches nothing but the repository."""
    try:
        return repository.insert(payload)
    except Exception as e:
        logger.error(f"Submission for '{payload['business_name']}' failed: {e}", exc_info=True)
        raise SubmissionError(f"We could not save your submission, please try again. ({e})") from e

def complete_submission(store: SessionStore, record_id: int, payload: SubmissionPayload) -> Confirmation:
    store.clear()
    logger.info(f"Submission #{record_id} accepted.")
    return Confirmation(record_id=record_id, submitted_at=datetime.now(timezone.utc), payload=payload)

def submit_application(store: SessionStore, submitter_input: dict[str, Any],
                       repository: SubmissionRepository) -> Confirmation:
    payload = prepare_submission(store, submitter_input)
    record_id = persist_submission(repository, payload)
    return complete_submission(store, record_id, payload)

async def submit_application_async(store: SessionStore, submitter_input: dict[str, Any],
                                   repository: SubmissionRepository, io_bound: IoRunner) -> Confirmation:
    """
    Same pipeline for the web app. Only the insert is handed to `io_bound`;
    every session write stays on the calling event loop.
    """
    payload = prepare_submission(store, submitter_input)
    record_id = await io_bound(persist_submission, repository, payload)
    return complete_submission(store, record_id, payload)
