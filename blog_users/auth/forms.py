"""
WTForms definitions for sign-up and log-in.

Field names match the document keys (``firstName``, ``userName``...), which
are also the names the profile form posts. Password fields never echo their
value back when a form is re-rendered.
"""

from flask_wtf import FlaskForm
from wtforms import EmailField, PasswordField, StringField
from wtforms import ValidationError as FieldValidationError
from wtforms.validators import DataRequired, EqualTo, Length

from blog_users.auth import rules
from blog_users.errors import ValidationError

MISSING_FIELDS = 'Please add all the fields!'


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def rule(check):
    """Adapt a ``rules.check_*`` function to a WTForms validator."""
    def _validate(form, field):
        try:
            check(field.data)
        except ValidationError as exc:
            raise FieldValidationError(exc.message)
    return _validate


def first_error(form) -> str:
    """
    The single message shown above a re-rendered form.

    A missing field wins; otherwise fields are consulted in the form's
    ``error_order`` when it has one, else in declaration order.
    """
    order = getattr(form, 'error_order', None)
    fields = [form[name] for name in order] if order else list(form)
    errors = [error for field in fields for error in field.errors]
    if MISSING_FIELDS in errors:
        return MISSING_FIELDS
    return errors[0] if errors else MISSING_FIELDS


class SignUpForm(FlaskForm):
    # Username length is reported before the other field rules.
    error_order = ('userName', 'firstName', 'lastName', 'email', 'password', 'confirmPassword')

    firstName = StringField(
        'First name',
        filters=[_strip],
        validators=[DataRequired(message=MISSING_FIELDS), rule(rules.check_first_name)],
        render_kw={'autocomplete': 'given-name'},
    )
    lastName = StringField(
        'Last name',
        filters=[_strip],
        validators=[DataRequired(message=MISSING_FIELDS), rule(rules.check_last_name)],
        render_kw={'autocomplete': 'family-name'},
    )
    userName = StringField(
        'Username',
        filters=[_strip],
        validators=[DataRequired(message=MISSING_FIELDS), rule(rules.check_user_name)],
        render_kw={'autocomplete': 'username'},
    )
    email = EmailField(
        'Email address',
        filters=[_strip],
        validators=[DataRequired(message=MISSING_FIELDS), rule(rules.check_email)],
        render_kw={'autocomplete': 'email'},
    )
    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message=MISSING_FIELDS),
            Length(max=128, message='Password is too long.'),
            rule(rules.check_password),
        ],
        render_kw={'autocomplete': 'new-password'},
    )
    confirmPassword = PasswordField(
        'Confirm password',
        validators=[
            DataRequired(message=MISSING_FIELDS),
            EqualTo('password', message='Password does not match'),
        ],
        render_kw={'autocomplete': 'new-password'},
    )


class LoginForm(FlaskForm):
    email = EmailField(
        'Email address',
        filters=[_strip],
        validators=[
            DataRequired(message=MISSING_FIELDS),
            # RFC 5321 limit on a full address.
            Length(max=254, message='Email address is too long.'),
        ],
        render_kw={'autofocus': True, 'autocomplete': 'email'},
    )
    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message=MISSING_FIELDS),
            Length(max=128, message='Password is too long.'),
        ],
        render_kw={'autocomplete': 'current-password'},
    )
