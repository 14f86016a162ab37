"""
Authentication routes.

Sign-up and log-in re-render their form with a single error message on
failure. Log-in failures always read "Invalid email or password!" whether
the email is unknown or the password is wrong.
"""

import uuid

from flask import current_app, flash, g, redirect, render_template, request, url_for

from blog_users.auth import auth_bp
from blog_users.auth.forms import LoginForm, SignUpForm, first_error
from blog_users.auth.models import register
from blog_users.auth.security import (
    log_login_failed,
    log_login_success,
    log_logout,
    log_signup,
    log_signup_failed,
    verify_credentials,
)
from blog_users.auth.session import (
    clear_token_cookie,
    issue_token,
    resolve_token,
    set_token_cookie,
    with_viewer,
)
from blog_users.errors import DuplicateError, InvalidCredentialsError, StoreError
from blog_users.extensions import limiter


# --- Request Hooks ---

@auth_bp.before_app_request
def set_request_id() -> None:
    """Short per-request id for correlating audit entries."""
    g.request_id = str(uuid.uuid4())[:8]


# --- Routes ---

@auth_bp.route('/')
@with_viewer
def index(viewer):
    return render_template('home.html', viewer=viewer)


@auth_bp.route('/error')
@with_viewer
def error(viewer):
    return render_template('error.html', viewer=viewer)


@auth_bp.route('/sign-up', methods=['GET', 'POST'])
@limiter.limit(
    lambda: current_app.config.get('SIGNUP_RATE_LIMIT_IP', '5/minute'),
    methods=['POST'],
    error_message='Too many sign-up attempts. Please wait a moment and try again.',
)
@with_viewer
def sign_up(viewer):
    if viewer is not None:
        return redirect(url_for('auth.index'))

    form = SignUpForm()

    if request.method == 'GET':
        return render_template('auth/sign_up.html', form=form, error='')

    if not form.validate_on_submit():
        message = first_error(form)
        log_signup_failed(form.email.data or '', reason='validation')
        return render_template('auth/sign_up.html', form=form, error=message), 422

    try:
        identity = register(
            first_name=form.firstName.data,
            last_name=form.lastName.data,
            user_name=form.userName.data,
            email=form.email.data,
            password=form.password.data,
        )
    except DuplicateError as exc:
        log_signup_failed(form.email.data, reason=f'duplicate_{exc.field}')
        return render_template('auth/sign_up.html', form=form, error=exc.message), 422
    except StoreError as exc:
        current_app.logger.error('Registration failed: %s', exc.__cause__)
        return render_template('auth/sign_up.html', form=form, error=exc.message), 500

    log_signup(identity)
    response = redirect(url_for('auth.index'))
    return set_token_cookie(response, issue_token(identity))


@auth_bp.route('/log-in', methods=['GET', 'POST'])
@limiter.limit(
    lambda: current_app.config.get('LOGIN_RATE_LIMIT_IP', '10/minute'),
    methods=['POST'],
    error_message='Too many login attempts. Please wait a moment and try again.',
)
@with_viewer
def log_in(viewer):
    if viewer is not None:
        return redirect(url_for('auth.index'))

    form = LoginForm()

    if request.method == 'GET':
        return render_template('auth/log_in.html', form=form, error='')

    if not form.validate_on_submit():
        log_login_failed(form.email.data or '', reason='validation')
        return render_template('auth/log_in.html', form=form, error=first_error(form)), 401

    try:
        identity = verify_credentials(form.email.data, form.password.data)
    except InvalidCredentialsError as exc:
        log_login_failed(form.email.data)
        return render_template('auth/log_in.html', form=form, error=exc.message), 401
    except StoreError as exc:
        current_app.logger.error('Log-in lookup failed: %s', exc.__cause__)
        return render_template('auth/log_in.html', form=form, error=exc.message), 500

    log_login_success(identity)
    response = redirect(url_for('auth.index'))
    return set_token_cookie(response, issue_token(identity))


@auth_bp.route('/log-out', methods=['POST'])
def log_out():
    """Clear the session cookie. Safe to call when already logged out."""
    viewer = resolve_token(request.cookies.get(current_app.config['TOKEN_COOKIE_NAME']))
    log_logout(viewer.id if viewer else None)

    flash('You have been logged out successfully.', 'info')
    return clear_token_cookie(redirect(url_for('auth.index')))
