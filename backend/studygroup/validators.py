"""Field validators for the account settings forms.

Every validator is a plain function returning a list of `FieldError`;
an empty list means the value is acceptable. The uniqueness checks
issue a read-only query through the given repository and never
modify anything. Storage-level unique constraints remain in place
underneath these checks.
"""

import re
from typing import List, Optional

from .exceptions import (
    FieldError,
    DUPLICATE_VALUE,
    INVALID_FORMAT,
    INVALID_LENGTH,
    MISMATCH,
    TOO_LONG,
)
from .repositories import AccountRepository
from .schemas import PasswordForm, ProfileForm

NICKNAME_PATTERN = re.compile(r'^[ㄱ-ㅎ가-힣a-z0-9_-]{3,20}$')
BIO_MAX_LENGTH = 150
PROFILE_FIELD_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 50


def validate_nickname(repo: AccountRepository, candidate: str, exclude_account_id: Optional[int] = None) -> List[FieldError]:
    """Check nickname format, then that no other account already uses it.

    The account identified by `exclude_account_id` is allowed to keep
    its own nickname, so resubmitting an unchanged nickname passes.
    """
    if not candidate or not NICKNAME_PATTERN.match(candidate):
        return [FieldError('nickname', INVALID_FORMAT,
                           'nickname must be 3-20 characters of lowercase letters, digits, hangul, "_" or "-"')]
    existing = repo.get_by_nickname(candidate)
    if existing is not None and existing.id != exclude_account_id:
        return [FieldError('nickname', DUPLICATE_VALUE, 'the nickname you entered is not available')]
    return []


def validate_email(repo: AccountRepository, candidate: str) -> List[FieldError]:
    """Reject empty emails and ones already registered."""
    if not candidate or '@' not in candidate:
        return [FieldError('email', INVALID_FORMAT, 'a valid email address is required')]
    if repo.get_by_email(candidate) is not None:
        return [FieldError('email', DUPLICATE_VALUE, 'the email you entered is already registered')]
    return []


def validate_profile(form: ProfileForm) -> List[FieldError]:
    """Length limits for the editable profile fields."""
    errors = []
    if form.bio is not None and len(form.bio) > BIO_MAX_LENGTH:
        errors.append(FieldError('bio', TOO_LONG, f'bio must be at most {BIO_MAX_LENGTH} characters'))
    for name in ('url', 'occupation', 'location'):
        value = getattr(form, name)
        if value is not None and len(value) > PROFILE_FIELD_MAX_LENGTH:
            errors.append(FieldError(name, TOO_LONG, f'{name} must be at most {PROFILE_FIELD_MAX_LENGTH} characters'))
    return errors


def validate_password(form: PasswordForm) -> List[FieldError]:
    """Length of the new password and agreement with its confirmation."""
    if not PASSWORD_MIN_LENGTH <= len(form.new_password) <= PASSWORD_MAX_LENGTH:
        return [FieldError('new_password', INVALID_LENGTH,
                           f'password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters')]
    if form.new_password != form.new_password_confirm:
        return [FieldError('new_password_confirm', MISMATCH, 'the new passwords do not match')]
    return []
