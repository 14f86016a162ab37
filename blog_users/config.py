"""
Application configuration.

Config classes are loaded with ``app.config.from_object``. Tests pick a
subclass that switches individual controls on or off.
"""

import os
import secrets


class BaseConfig:
    """Shared configuration for all environments."""

    # --- Flask Core ---
    # Signs the Flask session cookie (flash messages, CSRF token).
    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_hex(32)

    # Sign-up and profile forms are well under 1KB.
    MAX_CONTENT_LENGTH = 16 * 1024  # 16KB

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # --- Session Token (JWT) ---
    # None means "sign with SECRET_KEY".
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')
    JWT_ALGORITHM = 'HS256'
    TOKEN_COOKIE_NAME = 'token'
    # Tokens carry an exp claim; an expired token resolves to anonymous.
    TOKEN_LIFETIME = 24 * 3600  # seconds
    # A valid token older than this is reissued on the next response.
    TOKEN_REFRESH_AFTER = 12 * 3600  # seconds
    TOKEN_COOKIE_SECURE = False
    TOKEN_COOKIE_SAMESITE = 'Lax'

    # --- bcrypt ---
    BCRYPT_LOG_ROUNDS = 12
    # Pre-hash with SHA-256 so passwords past bcrypt's 72-byte limit still verify.
    BCRYPT_HANDLE_LONG_PASSWORDS = True

    # --- Document Store ---
    MONGO_URI = os.environ.get('MONGO_URI', 'mongodb://localhost:27017')
    MONGO_DB_NAME = os.environ.get('MONGO_DB_NAME', 'blog')
    # Applied to server selection, connect and socket operations.
    MONGO_TIMEOUT_MS = int(os.environ.get('MONGO_TIMEOUT_MS', '5000'))
    # Follow/unfollow run inside a multi-document transaction when the
    # deployment supports it (replica set); otherwise a failed second edge
    # update reverses the first.
    MONGO_USE_TRANSACTIONS = os.environ.get('MONGO_USE_TRANSACTIONS') == '1'

    # --- Social Graph ---
    ALLOW_SELF_FOLLOW = False

    # --- Rate Limiting (flask-limiter) ---
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = 'memory://'
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_DEFAULT = '200/hour'
    LOGIN_RATE_LIMIT_IP = '10/minute'
    SIGNUP_RATE_LIMIT_IP = '5/minute'


class ProductionConfig(BaseConfig):
    """Production environment: secure cookies, explicit secret."""

    DEBUG = False
    TESTING = False

    SECRET_KEY = os.environ.get('SECRET_KEY')

    SESSION_COOKIE_SECURE = True
    TOKEN_COOKIE_SECURE = True

    @classmethod
    def init_app(cls, app):
        """Validate required configuration at startup."""
        if not cls.SECRET_KEY:
            raise RuntimeError(
                'SECRET_KEY environment variable is required in production. '
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: cookies over plain HTTP."""

    DEBUG = True
    SESSION_COOKIE_SECURE = False


class TestConfig(BaseConfig):
    """Test environment: fast bcrypt, CSRF and rate limiting off by default."""

    TESTING = True
    SECRET_KEY = 'test-secret-key-for-the-blog-users-suite'
    SESSION_COOKIE_SECURE = False
    # 4 rounds keeps each hash in the low milliseconds.
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    WTF_CSRF_ENABLED = False
    MONGO_DB_NAME = 'blog_test'


class RateLimitTestConfig(TestConfig):
    """Test config with rate limiting enabled."""

    RATELIMIT_ENABLED = True


class CSRFTestConfig(TestConfig):
    """Test config with CSRF protection enabled."""

    WTF_CSRF_ENABLED = True
