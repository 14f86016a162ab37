"""
Session tokens and viewer resolution.

A successful sign-up or log-in issues a signed JWT carrying the identity id
(``sub``), the email, ``iat`` and ``exp``. It travels in an HTTP-only
cookie named by TOKEN_COOKIE_NAME. A missing, tampered or expired token
makes the request anonymous; it never fails the request.

Views never read ambient state for the current user. ``with_viewer`` and
``login_required`` resolve the cookie and pass the result to the view as
the ``viewer`` keyword argument (an Identity, or None when anonymous).
"""

import time
from functools import wraps
from typing import Optional, Tuple

import jwt
from flask import current_app, flash, make_response, redirect, request, url_for

from blog_users.auth.models import Identity, find_by_id
from blog_users.auth.security import log_token_rejected


def _signing_key() -> str:
    return current_app.config.get('JWT_SECRET_KEY') or current_app.config['SECRET_KEY']


def issue_token(identity: Identity) -> str:
    now = int(time.time())
    claims = {
        'sub': identity.id,
        'email': identity.email,
        'iat': now,
        'exp': now + current_app.config['TOKEN_LIFETIME'],
    }
    return jwt.encode(claims, _signing_key(), algorithm=current_app.config['JWT_ALGORITHM'])


def decode_token(token: str) -> dict:
    """
    Verify signature and expiry.

    Raises:
        jwt.InvalidTokenError: bad signature, malformed, expired, or
            missing a required claim.
    """
    return jwt.decode(
        token,
        _signing_key(),
        algorithms=[current_app.config['JWT_ALGORITHM']],
        options={'require': ['sub', 'iat', 'exp']},
    )


def resolve_session(token: Optional[str]) -> Tuple[Optional[Identity], Optional[dict]]:
    """Return (identity, claims), or (None, None) for an anonymous request."""
    if not token:
        return None, None

    try:
        claims = decode_token(token)
    except jwt.ExpiredSignatureError:
        log_token_rejected('expired')
        return None, None
    except jwt.InvalidTokenError:
        log_token_rejected('invalid')
        return None, None

    identity = find_by_id(claims['sub'])
    if identity is None:
        log_token_rejected('unknown_identity')
        return None, None
    return identity, claims


def resolve_token(token: Optional[str]) -> Optional[Identity]:
    identity, _ = resolve_session(token)
    return identity


def needs_refresh(claims: dict) -> bool:
    return time.time() - claims['iat'] >= current_app.config['TOKEN_REFRESH_AFTER']


def set_token_cookie(response, token: str):
    response.set_cookie(
        current_app.config['TOKEN_COOKIE_NAME'],
        token,
        max_age=current_app.config['TOKEN_LIFETIME'],
        httponly=True,
        secure=current_app.config['TOKEN_COOKIE_SECURE'],
        samesite=current_app.config['TOKEN_COOKIE_SAMESITE'],
    )
    return response


def clear_token_cookie(response):
    response.delete_cookie(
        current_app.config['TOKEN_COOKIE_NAME'],
        httponly=True,
        secure=current_app.config['TOKEN_COOKIE_SECURE'],
        samesite=current_app.config['TOKEN_COOKIE_SAMESITE'],
    )
    return response


def _sets_token_cookie(response) -> bool:
    prefix = current_app.config['TOKEN_COOKIE_NAME'] + '='
    return any(header.startswith(prefix) for header in response.headers.getlist('Set-Cookie'))


# --- Decorators ---

def with_viewer(view):
    """
    Resolve the session cookie and call the view with ``viewer=``.

    A token past TOKEN_REFRESH_AFTER is replaced on the way out, unless the
    view already set or cleared the cookie itself.
    """
    @wraps(view)
    def decorated_function(*args, **kwargs):
        token = request.cookies.get(current_app.config['TOKEN_COOKIE_NAME'])
        viewer, claims = resolve_session(token)

        response = make_response(view(*args, viewer=viewer, **kwargs))

        if viewer is not None and needs_refresh(claims) and not _sets_token_cookie(response):
            set_token_cookie(response, issue_token(viewer))
        return response
    return decorated_function


def login_required(view):
    """Like with_viewer, but anonymous viewers are sent to the log-in page."""
    @wraps(view)
    def decorated_function(*args, viewer, **kwargs):
        if viewer is None:
            flash('Please log in to access this page.', 'info')
            return redirect(url_for('auth.log_in'))
        return view(*args, viewer=viewer, **kwargs)
    return with_viewer(decorated_function)
