"""
Security response headers, applied to every response via ``after_request``.

The Content-Security-Policy carries a fresh nonce per request; templates
read it as ``csp_nonce``.
"""

import secrets

from flask import Flask, g, request

# Headers whose value never changes between responses.
STATIC_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'camera=(), microphone=(), geolocation=(), payment=()',
    'Cross-Origin-Opener-Policy': 'same-origin',
    'Cross-Origin-Resource-Policy': 'same-origin',
    'X-Permitted-Cross-Domain-Policies': 'none',
}


def generate_csp_nonce() -> str:
    return secrets.token_urlsafe(32)


def build_csp(nonce: str) -> str:
    directives = [
        "default-src 'self'",
        f"script-src 'nonce-{nonce}'",
        f"style-src 'self' 'nonce-{nonce}'",
        "img-src 'self'",
        "frame-ancestors 'none'",
        "form-action 'self'",
        "base-uri 'self'",
        "object-src 'none'",
    ]
    return '; '.join(directives)


def init_security_headers(app: Flask) -> None:
    """Register the nonce and header hooks on the app."""

    @app.before_request
    def set_csp_nonce() -> None:
        g.csp_nonce = generate_csp_nonce()

    @app.context_processor
    def inject_csp_nonce() -> dict:
        return {'csp_nonce': g.get('csp_nonce', '')}

    @app.after_request
    def set_security_headers(response):
        response.headers['Content-Security-Policy'] = build_csp(g.get('csp_nonce', ''))
        for name, value in STATIC_HEADERS.items():
            response.headers[name] = value

        # HSTS breaks plain-HTTP local development.
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        # Profile and dashboard pages are per-user; never cache them.
        if not request.path.startswith('/static/'):
            response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
            response.headers['Pragma'] = 'no-cache'

        response.headers.pop('Server', None)
        response.headers.pop('X-Powered-By', None)
        return response
