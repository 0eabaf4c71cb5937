# partner_kyc/session_store.py
from __future__ import annotations
import json
import logging
from collections.abc import Callable, MutableMapping
from datetime import datetime, timedelta, timezone
from typing import Any

from .challenge import generate_challenge_code
from .errors import StaleSessionError
from .utils import CHALLENGE_KEY, SESSION_KEY, SESSION_TTL, StepId, SubmissionRecord

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _snapshot(value: Any) -> Any:
    """A detached, JSON-safe copy. Fails early on values the storage cannot hold."""
    return json.loads(json.dumps(value))


class SessionStore:
    """
    The accumulating form record of one user, persisted into a mapping the
    caller owns. The web app hands in `app.storage.user`, tests a plain dict.

    Layout under SESSION_KEY:
        {'record': {step_name: data}, 'current_step': int, 'last_updated': iso8601}

    Anything older than `ttl` is dropped on read and the user starts over.
    """

    def __init__(self, storage: MutableMapping[str, Any], ttl: timedelta = SESSION_TTL,
                 clock: Callable[[], datetime] = _utcnow) -> None:
        self._storage = storage
        self._ttl = ttl
        self._clock = clock

    # --- persistence -------------------------------------------------

    def _read(self) -> dict[str, Any] | None:
        persisted = self._storage.get(SESSION_KEY)
        if persisted is None:
            return None
        age = self._clock() - datetime.fromisoformat(persisted['last_updated'])
        if age > self._ttl:
            raise StaleSessionError(f"Session last updated {age} ago exceeds TTL of {self._ttl}.")
        return persisted

    def _load(self) -> dict[str, Any] | None:
        try:
            return self._read()
        except StaleSessionError as e:
            logger.info(f"Discarding expired session: {e}")
            self.clear()
            return None

    def _persist(self, record: SubmissionRecord, current_step: StepId) -> None:
        self._storage[SESSION_KEY] = {
            'record': record,
            'current_step': int(current_step),
            'last_updated': self._clock().isoformat(),
        }

    # --- record ------------------------------------------------------

    def get(self) -> SubmissionRecord | None:
        persisted = self._load()
        if persisted is None:
            return None
        return _snapshot(persisted['record'])

    def record(self) -> SubmissionRecord:
        """Like get(), but an absent session reads as an empty record."""
        return self.get() or {}

    def update(self, step_name: str, data: dict[str, Any]) -> None:
        """Replaces one step's data wholesale and persists in the same call."""
        persisted = self._load()
        record: SubmissionRecord = _snapshot(persisted['record']) if persisted else {}
        current_step = StepId(persisted['current_step']) if persisted else StepId.INSTRUCTIONS
        record[step_name] = _snapshot(data)
        self._persist(record, current_step)
        logger.debug(f"Stored step '{step_name}' ({len(record)} step(s) in record).")

    def clear(self) -> None:
        self._storage.pop(SESSION_KEY, None)
        self._storage.pop(CHALLENGE_KEY, None)

    # --- position ----------------------------------------------------

    @property
    def current_step(self) -> StepId:
        persisted = self._load()
        return StepId(persisted['current_step']) if persisted else StepId.INSTRUCTIONS

    def set_current_step(self, step_id: StepId) -> None:
        persisted = self._load()
        record: SubmissionRecord = _snapshot(persisted['record']) if persisted else {}
        self._persist(record, step_id)

    # --- verification challenge --------------------------------------

    def issue_challenge(self) -> str:
        """Binds a fresh code to the session, replacing any earlier one."""
        code = generate_challenge_code()
        self._storage[CHALLENGE_KEY] = code
        return code

    def current_challenge(self) -> str | None:
        return self._storage.get(CHALLENGE_KEY)
