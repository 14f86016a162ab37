"""
Users blueprint: own profile, author pages, dashboard, follow/unfollow.
"""

from flask import Blueprint

users_bp = Blueprint(
    'users',
    __name__,
    template_folder='../templates',
)

from blog_users.users import routes  # noqa: E402, F401
