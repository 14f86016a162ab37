"""
Flask extension instances, created here and initialized in the app factory.
"""

from flask import current_app
from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect
from pymongo import MongoClient


class MongoStore:
    """
    Minimal Flask extension around a pymongo client.

    The client and database handle live in ``app.extensions['mongo']`` so
    several apps (one per test) can coexist in a process.
    """

    def init_app(self, app, client=None):
        if client is None:
            timeout = app.config['MONGO_TIMEOUT_MS']
            client = MongoClient(
                app.config['MONGO_URI'],
                serverSelectionTimeoutMS=timeout,
                connectTimeoutMS=timeout,
                socketTimeoutMS=timeout,
            )
        app.extensions['mongo'] = {
            'client': client,
            'db': client[app.config['MONGO_DB_NAME']],
        }

    @property
    def client(self):
        return current_app.extensions['mongo']['client']

    @property
    def db(self):
        return current_app.extensions['mongo']['db']


# Password hashing; cost factor comes from BCRYPT_LOG_ROUNDS.
bcrypt = Bcrypt()

# CSRF protection on all POST forms.
csrf = CSRFProtect()

# Per-IP limits on the log-in and sign-up endpoints.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri='memory://',
)

mongo = MongoStore()
