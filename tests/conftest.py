"""
Pytest fixtures for the blog user-management test suite.

Every app gets its own in-memory mongomock client, so tests never share
store state:
- app/client: base test config (CSRF off, rate limiting off)
- csrf_app/csrf_client: CSRF enabled
- rate_limit_app/rate_limit_client: rate limiting enabled
"""

import mongomock
import pytest

from blog_users import create_app
from blog_users.config import CSRFTestConfig, RateLimitTestConfig, TestConfig

ALICE = {
    'firstName': 'Alice',
    'lastName': 'Liddell',
    'userName': 'alice01',
    'email': 'a@x.com',
    'password': 'Abcd123!',
    'confirmPassword': 'Abcd123!',
}

BOB = {
    'firstName': 'Bob',
    'lastName': 'Builder',
    'userName': 'bobbuilds',
    'email': 'bob@example.com',
    'password': 'Build3rs!',
    'confirmPassword': 'Build3rs!',
}


@pytest.fixture
def app():
    """Flask app with the base test configuration."""
    yield create_app(TestConfig, mongo_client=mongomock.MongoClient())


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def csrf_app():
    yield create_app(CSRFTestConfig, mongo_client=mongomock.MongoClient())


@pytest.fixture
def csrf_client(csrf_app):
    return csrf_app.test_client()


@pytest.fixture
def rate_limit_app():
    yield create_app(RateLimitTestConfig, mongo_client=mongomock.MongoClient())


@pytest.fixture
def rate_limit_client(rate_limit_app):
    return rate_limit_app.test_client()


def register_identity(app, fields):
    """Register straight through the credential store."""
    from blog_users.auth.models import register
    with app.app_context():
        return register(
            first_name=fields['firstName'],
            last_name=fields['lastName'],
            user_name=fields['userName'],
            email=fields['email'],
            password=fields['password'],
        )


@pytest.fixture
def alice(app):
    return register_identity(app, ALICE)


@pytest.fixture
def bob(app):
    return register_identity(app, BOB)


@pytest.fixture
def alice_client(app, alice):
    """Test client logged in as alice."""
    client = app.test_client()
    client.post('/log-in', data={'email': ALICE['email'], 'password': ALICE['password']})
    return client


def token_cookie(response):
    """Return the Set-Cookie header for the session token, or None."""
    for header in response.headers.getlist('Set-Cookie'):
        if header.startswith('token='):
            return header
    return None


def token_value(response):
    header = token_cookie(response)
    return header.split(';', 1)[0].split('=', 1)[1] if header else None
