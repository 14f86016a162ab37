"""
Tests for profile viewing and editing, author pages and the dashboard.
"""

from datetime import datetime, timedelta, timezone

from bson import ObjectId

from blog_users.auth.models import get_identity, get_users
from blog_users.extensions import mongo

MISSING_ID = '0123456789abcdef01234567'


def add_post(app, author, title, status='Public', age_minutes=0):
    with app.app_context():
        result = mongo.db['blogs'].insert_one({
            'title': title,
            'author': ObjectId(author.id),
            'status': status,
            'createdAt': datetime.now(timezone.utc) - timedelta(minutes=age_minutes),
        })
    return str(result.inserted_id)


def like(app, identity, post_id):
    with app.app_context():
        get_users().update_one(
            {'_id': ObjectId(identity.id)},
            {'$addToSet': {'likedPosts': ObjectId(post_id)}},
        )


class TestReadProfile:

    def test_requires_login(self, client):
        response = client.get('/read-profile')
        assert response.status_code == 302
        assert '/log-in' in response.headers['Location']

    def test_shows_own_posts_including_private(self, app, alice, alice_client):
        add_post(app, alice, 'Public thoughts')
        add_post(app, alice, 'Secret draft', status='Private')
        response = alice_client.get('/read-profile')
        assert response.status_code == 200
        assert b'alice01' in response.data
        assert b'Public thoughts' in response.data
        assert b'Secret draft' in response.data


class TestEditProfile:

    def test_update_allowed_fields_redirects_home(self, app, alice, alice_client):
        response = alice_client.post('/read-profile', data={'firstName': 'Alicia', 'lastName': 'Smith'})
        assert response.status_code == 302
        with app.app_context():
            updated = get_identity(alice.id)
        assert updated.first_name == 'Alicia'
        assert updated.last_name == 'Smith'

    def test_unknown_field_rejected_and_record_unchanged(self, app, alice, alice_client):
        with app.app_context():
            before = get_users().find_one({'_id': ObjectId(alice.id)})

        response = alice_client.post('/read-profile', data={'firstName': 'Mallory', 'followers': 'x'})

        assert response.status_code == 400
        assert b'invalid update property' in response.data
        with app.app_context():
            assert get_users().find_one({'_id': ObjectId(alice.id)}) == before

    def test_blank_fields_leave_values_unchanged(self, app, alice, alice_client):
        response = alice_client.post('/read-profile', data={
            'firstName': 'Alicia', 'lastName': '', 'userName': '', 'email': '', 'password': '',
        })
        assert response.status_code == 302
        with app.app_context():
            updated = get_identity(alice.id)
        assert updated.last_name == 'Liddell'
        assert updated.password_hash == alice.password_hash

    def test_invalid_value_rejected(self, app, alice, alice_client):
        response = alice_client.post('/read-profile', data={'userName': 'abc'})
        assert response.status_code == 422
        assert b'Username should be between 6 to 12 character' in response.data
        with app.app_context():
            assert get_identity(alice.id).user_name == 'alice01'

    def test_taken_username_rejected(self, app, alice, bob, alice_client):
        response = alice_client.post('/read-profile', data={'userName': bob.user_name})
        assert response.status_code == 422
        assert b'Username already taken!' in response.data

    def test_password_change_allows_new_login(self, app, alice, alice_client):
        alice_client.post('/read-profile', data={'password': 'N3w!Passw'})
        fresh = app.test_client()
        response = fresh.post('/log-in', data={'email': alice.email, 'password': 'N3w!Passw'})
        assert response.status_code == 302

    def test_requires_login(self, client):
        response = client.post('/read-profile', data={'firstName': 'Alicia'})
        assert response.status_code == 302
        assert '/log-in' in response.headers['Location']


class TestAuthorPage:

    def test_non_owner_sees_only_public_posts(self, app, alice, bob, alice_client):
        add_post(app, bob, 'Bob in public')
        add_post(app, bob, 'Bob in private', status='Private')
        response = alice_client.get(f'/author/{bob.id}')
        assert response.status_code == 200
        assert b'Bob in public' in response.data
        assert b'Bob in private' not in response.data

    def test_non_owner_sees_only_public_liked_posts(self, app, alice, bob, alice_client):
        shown = add_post(app, alice, 'Liked and public')
        hidden = add_post(app, alice, 'Liked but private', status='Private')
        like(app, bob, shown)
        like(app, bob, hidden)
        response = alice_client.get(f'/author/{bob.id}')
        assert b'Liked and public' in response.data
        assert b'Liked but private' not in response.data

    def test_own_author_page_redirects_to_dashboard(self, alice, alice_client):
        response = alice_client.get(f'/author/{alice.id}')
        assert response.status_code == 302
        assert '/dashboard' in response.headers['Location']

    def test_unknown_author_redirects_to_error(self, alice_client):
        response = alice_client.get(f'/author/{MISSING_ID}')
        assert response.status_code == 302
        assert '/error' in response.headers['Location']

    def test_malformed_author_id_redirects_to_error(self, alice_client):
        response = alice_client.get('/author/not-an-id')
        assert response.status_code == 302
        assert '/error' in response.headers['Location']

    def test_anonymous_viewer_redirected_to_log_in(self, client, bob):
        response = client.get(f'/author/{bob.id}')
        assert response.status_code == 302
        assert '/log-in' in response.headers['Location']

    def test_error_page_renders(self, client):
        response = client.get('/error')
        assert response.status_code == 200
        assert b'Something went wrong' in response.data


class TestDashboard:

    def test_requires_login(self, client):
        response = client.get('/dashboard')
        assert response.status_code == 302
        assert '/log-in' in response.headers['Location']

    def test_lists_own_posts_newest_first(self, app, alice, alice_client):
        add_post(app, alice, 'Older post', age_minutes=10)
        add_post(app, alice, 'Newer draft', status='Private', age_minutes=1)
        html = alice_client.get('/dashboard').data.decode()
        assert html.index('Newer draft') < html.index('Older post')

    def test_lists_other_authors(self, alice, bob, alice_client):
        response = alice_client.get('/dashboard')
        assert b'@bobbuilds' in response.data

    def test_deleted_identity_is_treated_as_anonymous(self, app, alice, alice_client):
        with app.app_context():
            get_users().delete_one({'_id': ObjectId(alice.id)})
        response = alice_client.get('/dashboard')
        assert response.status_code == 302
        assert '/log-in' in response.headers['Location']
