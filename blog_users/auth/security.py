"""
Credential verification and audit helpers.

verify_credentials always runs bcrypt, against a dummy hash when the email
is unknown, so response time does not reveal whether an account exists.
Failures of either kind raise the same InvalidCredentialsError.
"""

from typing import Optional

from flask import current_app, g, has_request_context, request

from blog_users.errors import InvalidCredentialsError
from blog_users.extensions import bcrypt
from blog_users.logging_config import audit_log, sanitize_log_value


def init_dummy_hash(app) -> None:
    """Hash a throwaway password at this app's configured cost factor."""
    app.extensions['dummy_hash'] = bcrypt.generate_password_hash('dummy_password_for_timing').decode('utf-8')


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode('utf-8')


def check_password(password_hash: str, password: str) -> bool:
    return bcrypt.check_password_hash(password_hash, password)


def verify_credentials(email: str, password: str):
    """
    Return the Identity registered under ``email`` if ``password`` matches.

    Raises:
        InvalidCredentialsError: unknown email or wrong password. The two
            cases are indistinguishable to the caller.
    """
    from blog_users.auth.models import find_by_email_or_username

    identity = find_by_email_or_username(email=email)

    if identity is None:
        check_password(current_app.extensions['dummy_hash'], password)
        raise InvalidCredentialsError()

    if not check_password(identity.password_hash, password):
        raise InvalidCredentialsError()

    return identity


# --- Audit ---

def get_request_context() -> dict:
    """IP, user agent and request id of the current request, for audit entries."""
    if not has_request_context():
        return {}
    return {
        'ip': request.remote_addr or 'unknown',
        'user_agent': sanitize_log_value(request.headers.get('User-Agent', 'unknown'), max_length=200),
        'request_id': g.get('request_id', 'unknown'),
    }


def log_signup(identity) -> None:
    audit_log(
        event='signup_success',
        message=f'Registered {sanitize_log_value(identity.user_name)}',
        email=identity.email,
        user_id=identity.id,
        **get_request_context(),
    )


def log_signup_failed(email: str, reason: str) -> None:
    audit_log(
        event='signup_failed',
        message=f'Registration failed for {sanitize_log_value(email)}: {reason}',
        email=email,
        reason=reason,
        **get_request_context(),
    )


def log_login_success(identity) -> None:
    audit_log(
        event='login_success',
        message=f'Successful login for {sanitize_log_value(identity.email)}',
        email=identity.email,
        user_id=identity.id,
        **get_request_context(),
    )


def log_login_failed(email: str, reason: str = 'invalid_credentials') -> None:
    audit_log(
        event='login_failed',
        message=f'Failed login for {sanitize_log_value(email)}: {reason}',
        email=email,
        reason=reason,
        **get_request_context(),
    )


def log_logout(user_id: Optional[str]) -> None:
    audit_log(
        event='logout',
        message='Logout',
        user_id=user_id,
        **get_request_context(),
    )


def log_token_rejected(reason: str) -> None:
    audit_log(
        event='token_rejected',
        message=f'Session token rejected: {reason}',
        reason=reason,
        **get_request_context(),
    )


def log_csrf_failure() -> None:
    audit_log(
        event='csrf_failure',
        message='CSRF token validation failed',
        **get_request_context(),
    )
