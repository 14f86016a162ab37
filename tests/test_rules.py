"""
Tests for the field rules shared by sign-up and profile updates.
"""

import pytest

from blog_users.auth.rules import (
    check_email,
    check_first_name,
    check_user_name,
    password_meets_policy,
    validate_fields,
)
from blog_users.errors import ValidationError


class TestPasswordPolicy:

    @pytest.mark.parametrize('password', ['Abcd123!', 'xY9$xxxxxx', 'P@ssw0rdLonger'])
    def test_accepts_compliant_passwords(self, password):
        assert password_meets_policy(password)

    @pytest.mark.parametrize('password', [
        'Abc12!',        # too short
        'abcd123!',      # no uppercase
        'ABCD123!',      # no lowercase
        'Abcdefg!',      # no digit
        'Abcd1234',      # no symbol
        '',
    ])
    def test_rejects_non_compliant_passwords(self, password):
        assert not password_meets_policy(password)


class TestFieldChecks:

    def test_username_length_bounds(self):
        check_user_name('abcdef')
        check_user_name('abcdefghijkl')
        with pytest.raises(ValidationError, match='between 6 to 12'):
            check_user_name('abcde')
        with pytest.raises(ValidationError):
            check_user_name('abcdefghijklm')

    def test_names_are_alphabetic(self):
        check_first_name(' Alice ')
        with pytest.raises(ValidationError, match='First Name'):
            check_first_name('Al1ce')

    def test_email_syntax(self):
        check_email('a@x.com')
        with pytest.raises(ValidationError, match='valid email'):
            check_email('not-an-email')

    def test_validate_fields_ignores_unknown_names(self):
        validate_fields({'firstName': 'Alice', 'somethingElse': '123'})
