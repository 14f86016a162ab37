"""
Profile, author, dashboard and follow/unfollow routes.

All of them require a logged-in viewer. Missing identities on the page
routes redirect to the generic error page; follow/unfollow failures come
back as a 422 JSON body.
"""

from flask import current_app, jsonify, redirect, render_template, request, url_for

from blog_users.auth.session import login_required
from blog_users.errors import (
    DuplicateError,
    InvalidUpdateError,
    NotFoundError,
    StoreError,
    UserError,
    ValidationError,
)
from blog_users.users import users_bp
from blog_users.users.graph import follow, unfollow
from blog_users.users.profile import update_profile, view_author, view_dashboard, view_own_profile


def _render_profile(viewer, error='', status=200):
    page = view_own_profile(viewer.id)
    return render_template('users/read_profile.html', viewer=viewer, page=page, error=error), status


@users_bp.route('/read-profile', methods=['GET'])
@login_required
def read_profile(viewer):
    try:
        return _render_profile(viewer)
    except (NotFoundError, StoreError):
        return redirect(url_for('auth.error'))


@users_bp.route('/read-profile', methods=['POST'])
@login_required
def edit_profile(viewer):
    submitted = {k: v for k, v in request.form.items() if k != 'csrf_token'}

    try:
        update_profile(viewer.id, submitted)
    except InvalidUpdateError as exc:
        return _render_profile(viewer, error=exc.message, status=400)
    except (ValidationError, DuplicateError) as exc:
        return _render_profile(viewer, error=exc.message, status=422)
    except NotFoundError:
        return redirect(url_for('auth.error'))
    except StoreError as exc:
        current_app.logger.error('Profile update failed: %s', exc.__cause__)
        return render_template('errors/500.html'), 500

    return redirect(url_for('auth.index'))


@users_bp.route('/author/<author_id>')
@login_required
def author(viewer, author_id):
    if author_id == viewer.id:
        return redirect(url_for('users.dashboard'))

    try:
        page = view_author(viewer.id, author_id)
    except (NotFoundError, StoreError):
        return redirect(url_for('auth.error'))

    return render_template('users/author.html', viewer=viewer, page=page)


@users_bp.route('/dashboard')
@login_required
def dashboard(viewer):
    try:
        page = view_dashboard(viewer.id)
    except (NotFoundError, StoreError):
        return redirect(url_for('auth.error'))

    return render_template('users/dashboard.html', viewer=viewer, page=page)


@users_bp.route('/follow/<target_id>')
@login_required
def follow_author(viewer, target_id):
    try:
        follow(viewer.id, target_id)
    except UserError as exc:
        return jsonify(error=exc.message), 422
    return redirect(url_for('users.author', author_id=target_id))


@users_bp.route('/unfollow/<target_id>')
@login_required
def unfollow_author(viewer, target_id):
    try:
        unfollow(viewer.id, target_id)
    except UserError as exc:
        return jsonify(error=exc.message), 422
    return redirect(url_for('users.author', author_id=target_id))
