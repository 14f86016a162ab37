"""
Authentication blueprint: home, sign-up, log-in, log-out and the generic
error page.
"""

from flask import Blueprint

auth_bp = Blueprint(
    'auth',
    __name__,
    template_folder='../templates',
)

from blog_users.auth import routes  # noqa: E402, F401
