"""
Profile mutation and the read-only page assemblies.

A viewer who does not own an author page only ever sees that author's
Public posts (and Public liked posts).
"""

from dataclasses import dataclass
from typing import List, Mapping

from blog_users.auth import rules
from blog_users.auth.models import ALLOWED_UPDATES, Identity, get_identity, list_identities, update_fields
from blog_users.auth.security import get_request_context
from blog_users.errors import InvalidUpdateError
from blog_users.logging_config import audit_log
from blog_users.users.posts import Post, posts_by_author, posts_by_ids

# Submitted values that are trimmed before validation; passwords are not.
STRIPPED_FIELDS = ('firstName', 'lastName', 'userName', 'email')


@dataclass(frozen=True)
class ProfilePage:
    identity: Identity
    posts: List[Post]
    liked_posts: List[Post]


@dataclass(frozen=True)
class AuthorPage:
    author: Identity
    posts: List[Post]
    liked_posts: List[Post]
    viewer_follows: bool


@dataclass(frozen=True)
class Dashboard:
    identity: Identity
    posts: List[Post]
    liked_posts: List[Post]
    others: List[Identity]


def view_own_profile(identity_id: str) -> ProfilePage:
    identity = get_identity(identity_id)
    return ProfilePage(
        identity=identity,
        posts=posts_by_author(identity.id, public_only=False),
        liked_posts=posts_by_ids(identity.liked_posts, public_only=False),
    )


def view_author(viewer_id: str, author_id: str) -> AuthorPage:
    author = get_identity(author_id)
    public_only = viewer_id != author.id
    return AuthorPage(
        author=author,
        posts=posts_by_author(author.id, public_only=public_only),
        liked_posts=posts_by_ids(author.liked_posts, public_only=public_only),
        viewer_follows=author.is_followed_by(viewer_id),
    )


def view_dashboard(identity_id: str) -> Dashboard:
    identity = get_identity(identity_id)
    return Dashboard(
        identity=identity,
        posts=posts_by_author(identity.id, public_only=False),
        liked_posts=posts_by_ids(identity.liked_posts, public_only=False),
        others=list_identities(exclude_id=identity.id),
    )


def update_profile(identity_id: str, submitted: Mapping[str, str]) -> Identity:
    """
    Validate and apply a profile form submission to the owner's record.

    Unknown field names reject the whole submission. Blank values mean
    "leave unchanged". Every other value must pass the same rules as
    sign-up.

    Raises:
        InvalidUpdateError, ValidationError, DuplicateError,
        NotFoundError, StoreError
    """
    rejected = set(submitted) - ALLOWED_UPDATES
    if rejected:
        audit_log(
            event='profile_update_rejected',
            message='Profile update named unknown fields',
            user_id=identity_id,
            reason=','.join(sorted(rejected)),
            **get_request_context(),
        )
        raise InvalidUpdateError(rejected)

    updates = {}
    for name, value in submitted.items():
        if name in STRIPPED_FIELDS:
            value = (value or '').strip()
        if value:
            updates[name] = value

    rules.validate_fields(updates)
    identity = update_fields(identity_id, updates)

    audit_log(
        event='profile_updated',
        message='Profile updated',
        user_id=identity_id,
        reason=','.join(sorted(updates)),
        **get_request_context(),
    )
    return identity
