"""
Tests for CSRF protection on the account forms.

Uses CSRFTestConfig which enables flask-wtf CSRFProtect.
"""

import re

from conftest import ALICE, token_cookie


def csrf_token_from(response):
    match = re.search(r'name="csrf_token"[^>]*value="([^"]+)"', response.data.decode())
    assert match, 'CSRF token not found in form'
    return match.group(1)


class TestCSRFProtection:

    def test_sign_up_without_token_is_rejected(self, csrf_client):
        response = csrf_client.post('/sign-up', data=ALICE, follow_redirects=True)
        assert b'form session has expired' in response.data
        assert b'Log in' in response.data

    def test_sign_up_with_token_succeeds(self, csrf_client):
        token = csrf_token_from(csrf_client.get('/sign-up'))
        response = csrf_client.post('/sign-up', data=dict(ALICE, csrf_token=token))
        assert response.status_code == 302
        assert token_cookie(response) is not None

    def test_profile_update_ignores_csrf_field_in_whitelist(self, csrf_app, csrf_client):
        token = csrf_token_from(csrf_client.get('/sign-up'))
        csrf_client.post('/sign-up', data=dict(ALICE, csrf_token=token))

        token = csrf_token_from(csrf_client.get('/read-profile'))
        response = csrf_client.post('/read-profile', data={'firstName': 'Alicia', 'csrf_token': token})
        assert response.status_code == 302

    def test_log_out_form_carries_token(self, csrf_client):
        token = csrf_token_from(csrf_client.get('/sign-up'))
        csrf_client.post('/sign-up', data=dict(ALICE, csrf_token=token))
        response = csrf_client.get('/dashboard')
        assert b'csrf_token' in response.data
