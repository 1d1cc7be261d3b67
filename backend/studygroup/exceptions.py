"""Error types raised by the settings services.

`ValidationError` is field-scoped and recoverable: the HTTP layer turns
it into a structured per-field response. `NotFoundError` marks a
reference to a Tag or Zone that does not exist. Storage failures are
not wrapped here and propagate unchanged.
"""

from dataclasses import dataclass
from typing import Iterable, List

DUPLICATE_VALUE = 'DuplicateValue'
INVALID_FORMAT = 'InvalidFormat'
INVALID_LENGTH = 'InvalidLength'
TOO_LONG = 'TooLong'
MISMATCH = 'Mismatch'


@dataclass(frozen=True)
class FieldError:
    """A single rejected form field."""
    field: str
    code: str
    message: str

    def to_dict(self) -> dict:
        return {'field': self.field, 'code': self.code, 'message': self.message}


class SettingsError(Exception):
    """Base class for errors raised by the settings core."""


class ValidationError(SettingsError, ValueError):
    """One or more form fields failed validation; nothing was changed."""

    def __init__(self, errors: Iterable[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__('; '.join(f'{e.field}: {e.message}' for e in self.errors) or 'validation failed')

    def codes(self) -> dict:
        """Map of field name to error code, handy for callers and tests."""
        return {e.field: e.code for e in self.errors}


class NotFoundError(SettingsError, LookupError):
    """A referenced Tag or Zone does not exist."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f'{kind} not found: {key}')
