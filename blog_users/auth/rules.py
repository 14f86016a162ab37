"""
Field rules for identity records.

Pure string predicates shared by the sign-up form and profile updates.
Each ``check_*`` raises :class:`~blog_users.errors.ValidationError` with the
message shown to the user.
"""

import re
from typing import Callable, Dict, Mapping

from blog_users.errors import ValidationError

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*")
# At least one digit, one symbol, one lowercase and one uppercase letter.
PASSWORD_PATTERN = re.compile(r'(?=.*\d)(?=.*[!@#$%^&*])(?=.*[a-z])(?=.*[A-Z]).{8,}')
NAME_PATTERN = re.compile(r'[a-zA-Z]+')

USERNAME_MIN_LENGTH = 6
USERNAME_MAX_LENGTH = 12

PASSWORD_POLICY_MESSAGE = (
    'Your password must contain a minimum of 8 letter, with at least a symbol, '
    'upper and lower case letters and a number'
)


def password_meets_policy(password: str) -> bool:
    return PASSWORD_PATTERN.fullmatch(password or '') is not None


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


def check_first_name(value: str) -> None:
    if not NAME_PATTERN.fullmatch((value or '').strip()):
        raise ValidationError('First Name must contain only alphabet character')


def check_last_name(value: str) -> None:
    if not NAME_PATTERN.fullmatch((value or '').strip()):
        raise ValidationError('Last Name must contain only alphabet character')


def check_user_name(value: str) -> None:
    if not USERNAME_MIN_LENGTH <= len(value or '') <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f'Username should be between {USERNAME_MIN_LENGTH} to {USERNAME_MAX_LENGTH} character'
        )


def check_email(value: str) -> None:
    if not EMAIL_PATTERN.fullmatch(value or ''):
        raise ValidationError('Please enter a valid email address')


def check_password(value: str) -> None:
    if not password_meets_policy(value):
        raise ValidationError(PASSWORD_POLICY_MESSAGE)


FIELD_CHECKS: Dict[str, Callable[[str], None]] = {
    'firstName': check_first_name,
    'lastName': check_last_name,
    'userName': check_user_name,
    'email': check_email,
    'password': check_password,
}


def validate_fields(fields: Mapping[str, str]) -> None:
    """Run the rule for every known field present in ``fields``."""
    for name, value in fields.items():
        check = FIELD_CHECKS.get(name)
        if check is not None:
            check(value)
