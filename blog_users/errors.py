"""
Error taxonomy for identity and social-graph operations.

Domain functions raise these; route handlers catch them at the boundary
and turn them into a re-rendered form, a JSON error body, or a redirect
to the generic error page. Store failures are never retried.
"""

from typing import Iterable, Optional


class UserError(Exception):
    """Base class for every error surfaced by the user-management core."""

    message = 'Oops something went wrong!'

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(UserError):
    """A field is missing or malformed."""

    message = 'Please add all the fields!'


class InvalidUpdateError(ValidationError):
    """A profile update named a field outside the allow-set."""

    message = 'invalid update property'

    def __init__(self, fields: Iterable[str]):
        self.fields = sorted(fields)
        super().__init__(f"invalid update property: {', '.join(self.fields)}")


class SelfFollowError(ValidationError):
    message = 'You cannot follow yourself'


class DuplicateError(UserError):
    """The username or email is already registered to another identity."""

    message = 'Username already taken!'

    def __init__(self, field: str = 'userName', message: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InvalidCredentialsError(UserError):
    # One message for unknown email and wrong password alike.
    message = 'Invalid email or password!'


class NotFoundError(UserError):
    message = 'User not found'


class StoreError(UserError):
    """Any failure reported by the document store."""
