"""
Flask application factory.

Extension initialization order:
1. bcrypt: needed for the dummy hash and for registration
2. csrf: registers the before_request CSRF check
3. limiter: enforcement switched off when RATELIMIT_ENABLED is False
4. mongo: a pymongo client, or the one passed in by tests
"""

from flask import Flask, render_template

from blog_users.config import DevelopmentConfig


def create_app(config_class=None, mongo_client=None):
    """
    Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to DevelopmentConfig.
        mongo_client: Optional pymongo-compatible client. When omitted a
                      MongoClient is built from MONGO_URI.

    Returns:
        Configured Flask application instance.
    """
    if config_class is None:
        config_class = DevelopmentConfig

    app = Flask(
        __name__,
        static_folder='static',
        static_url_path='/static',
    )
    app.config.from_object(config_class)
    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    # --- Extensions ---
    from blog_users.extensions import bcrypt, csrf, limiter, mongo

    bcrypt.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    limiter.enabled = app.config.get('RATELIMIT_ENABLED', True)
    mongo.init_app(app, client=mongo_client)

    from blog_users.headers import init_security_headers
    init_security_headers(app)

    from blog_users.logging_config import setup_audit_logging
    setup_audit_logging(app)

    from blog_users.auth.security import init_dummy_hash
    with app.app_context():
        init_dummy_hash(app)

    # --- Blueprints ---
    from blog_users.auth import auth_bp
    from blog_users.users import users_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)

    # --- Error Handlers ---
    from flask_wtf.csrf import CSRFError
    from blog_users.auth.security import log_csrf_failure

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        """Expired or missing CSRF token: ask the user to resubmit."""
        log_csrf_failure()
        from flask import flash, redirect, url_for
        flash('Your form session has expired. Please try again.', 'warning')
        return redirect(url_for('auth.log_in'))

    @app.errorhandler(429)
    def handle_rate_limit(e):
        return render_template('errors/429.html'), 429

    @app.errorhandler(404)
    def handle_not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(413)
    def handle_request_too_large(e):
        return render_template('errors/413.html'), 413

    @app.errorhandler(500)
    def handle_server_error(e):
        """No stack traces or store details in the response."""
        return render_template('errors/500.html'), 500

    # --- Document Store ---
    from blog_users.auth.models import init_db
    init_db(app)

    return app
