from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """One violated rule. `field` is a path such as 'business_email' or 'addresses[0].city'."""
    field: str
    message: str


class KycFormError(Exception):
    """Base class for every recoverable error raised by the intake form."""


class FieldValidationError(KycFormError):
    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        fields = ', '.join(error.field for error in errors)
        super().__init__(f"{len(errors)} field(s) failed validation: {fields}")

    def as_dict(self) -> dict[str, str]:
        """Field path -> message, the shape the page renderer reads."""
        return {error.field: error.message for error in self.errors}


class ChallengeMismatchError(KycFormError):
    def __init__(self) -> None:
        super().__init__("The verification code does not match. A new code has been issued.")


class SubmissionError(KycFormError):
    """The persistence collaborator rejected or failed the insert. The user may retry."""


class StaleSessionError(KycFormError):
    """A persisted session outlived its TTL."""


class UploadRejectedError(KycFormError):
    """An uploaded document is too large or of a type we do not accept."""
