"""
End-to-end tests for login, the access gate, password rotation and admin forms
"""
import pytest

from conftest import DEFAULT_PASSWORD, NEW_PASSWORD, login, redirect_target, rotate_password


def session_cookie_header(response):
    return next(h for h in response.headers.getlist('Set-Cookie') if h.startswith('sid='))


@pytest.fixture
def sleeps(monkeypatch):
    """Records failure delays instead of sleeping"""
    calls = []
    monkeypatch.setattr('auth.time.sleep', calls.append)
    return calls


class TestLogin:
    def test_admin_page_shows_login_with_default_hint(self, client):
        response = client.get('/admin')
        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert 'action="/admin/login"' in body
        assert DEFAULT_PASSWORD in body

    def test_missing_credentials(self, client):
        response = client.post('/admin/login', data={'username': 'creator'})
        assert redirect_target(response) == ('/admin', {'error': 'Missing credentials'})
        assert client.get_cookie('sid') is None

    def test_invalid_credentials(self, client):
        response = login(client, password='nope')
        assert redirect_target(response) == ('/admin', {'error': 'Invalid credentials'})
        assert client.get_cookie('sid') is None

        response = login(client, username='intruder')
        assert redirect_target(response) == ('/admin', {'error': 'Invalid credentials'})

    def test_failed_login_is_delayed(self, client, sleeps):
        from constants import LOGIN_FAILURE_DELAY

        login(client, password='nope')
        login(client, username='intruder')
        assert sleeps == [LOGIN_FAILURE_DELAY, LOGIN_FAILURE_DELAY]

    def test_missing_credentials_are_not_delayed(self, client, sleeps):
        client.post('/admin/login', data={'username': 'creator'})
        client.post('/admin/login', data={'password': DEFAULT_PASSWORD})
        assert sleeps == []

        login(client)
        assert sleeps == []

    def test_default_credentials_land_on_password_page(self, client):
        response = login(client)
        assert response.status_code == 302
        assert redirect_target(response) == ('/admin/password', {})

        cookie = session_cookie_header(response)
        assert 'HttpOnly' in cookie
        assert 'SameSite=Lax' in cookie
        assert 'Path=/' in cookie
        assert 'Max-Age=604800' in cookie
        assert 'Secure' not in cookie

    def test_cookie_is_secure_behind_tls_proxy(self, client):
        response = client.post(
            '/admin/login',
            data={'username': 'creator', 'password': DEFAULT_PASSWORD},
            headers={'X-Forwarded-Proto': 'https'},
        )
        assert 'Secure' in session_cookie_header(response)

    def test_login_records_client_details(self, app, client):
        client.post(
            '/admin/login',
            data={'username': 'creator', 'password': DEFAULT_PASSWORD},
            headers={'X-Forwarded-For': '203.0.113.7, 10.0.0.1', 'User-Agent': 'pytest-agent'},
        )
        with app.app_context():
            record = app.session_manager.lookup(client.get_cookie('sid').value)
            assert record.ip_address == '203.0.113.7'
            assert record.user_agent == 'pytest-agent'


class TestAccessGate:
    def test_unauthenticated_admin_action_redirects_to_login(self, client):
        response = client.post('/admin/videos', data={'title': 'Nope'})
        assert redirect_target(response) == ('/admin', {'error': 'Please login'})

        response = client.get('/admin/password')
        assert redirect_target(response) == ('/admin', {'error': 'Please login'})

    def test_pending_rotation_cannot_manage_content(self, app, client):
        from repositories.video_repository import VideoRepository

        login(client)
        response = client.post('/admin/videos', data={'title': 'Sneaky pack'})
        assert redirect_target(response) == ('/admin/password', {})

        response = client.get('/admin')
        assert redirect_target(response) == ('/admin/password', {})

        with app.app_context():
            assert VideoRepository.count() == 0

    def test_pending_rotation_sees_password_setup(self, client):
        login(client)
        response = client.get('/admin/password')
        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert 'Set up your password' in body
        assert 'name="current_password"' in body

    def test_unknown_or_expired_cookie_is_unauthenticated(self, app, client):
        client.set_cookie('sid', 'forged-token')
        response = client.get('/admin')
        assert 'action="/admin/login"' in response.get_data(as_text=True)


class TestPasswordRotation:
    def test_wrong_current_password(self, client):
        login(client)
        response = rotate_password(client, current='not it')
        assert redirect_target(response) == ('/admin/password', {'error': 'Current password is incorrect'})

    def test_wrong_current_password_is_delayed(self, client, sleeps):
        from constants import LOGIN_FAILURE_DELAY

        login(client)
        rotate_password(client, current='not it')
        assert sleeps == [LOGIN_FAILURE_DELAY]

    def test_mismatch_and_length(self, client):
        login(client)
        response = client.post(
            '/admin/password',
            data={'current_password': DEFAULT_PASSWORD, 'new_password': NEW_PASSWORD, 'confirm_password': 'other'},
        )
        assert redirect_target(response) == ('/admin/password', {'error': 'Passwords do not match'})

        response = rotate_password(client, new='short')
        assert redirect_target(response) == ('/admin/password', {'error': 'Password must be at least 12 characters'})

    def test_rotation_activates_session(self, admin_client):
        response = admin_client.get('/admin')
        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert 'action="/admin/videos"' in body
        assert 'action="/admin/logout"' in body

    def test_next_login_goes_to_dashboard(self, admin_client):
        admin_client.post('/admin/logout')
        response = login(admin_client, password=NEW_PASSWORD)
        assert redirect_target(response) == ('/admin', {})


class TestLogout:
    def test_logout_revokes_session(self, app, admin_client):
        old_sid = admin_client.get_cookie('sid').value

        response = admin_client.post('/admin/logout')
        assert redirect_target(response) == ('/admin', {})
        assert 'Max-Age=0' in session_cookie_header(response)

        with app.app_context():
            assert app.session_manager.lookup(old_sid) is None

        admin_client.set_cookie('sid', old_sid)
        response = admin_client.get('/admin')
        assert response.status_code == 200
        assert 'action="/admin/login"' in response.get_data(as_text=True)

    def test_logout_requires_session(self, client):
        response = client.post('/admin/logout')
        assert redirect_target(response) == ('/admin', {'error': 'Please login'})


class TestAdminForms:
    def test_create_update_delete_video(self, app, admin_client):
        from repositories.video_repository import VideoRepository

        response = admin_client.post('/admin/videos', data={
            'title': 'Immich Photo Server',
            'description': 'Self-hosted photos',
            'video_url': 'https://youtu.be/dQw4w9WgXcQ',
            'tags': 'photos, docker',
        })
        assert redirect_target(response) == ('/admin', {'flash': 'Video pack created'})

        with app.app_context():
            video = VideoRepository.get_by_slug('immich-photo-server')
            video_id = video.id
            assert video.tags == ['photos', 'docker']

        response = admin_client.post(f'/admin/videos/{video_id}', data={'title': 'Immich v2', 'tags': 'photos'})
        assert redirect_target(response) == ('/admin', {'flash': 'Changes saved'})
        with app.app_context():
            assert VideoRepository.get_by_id(video_id).title == 'Immich v2'

        response = admin_client.post(f'/admin/videos/{video_id}/delete')
        assert redirect_target(response) == ('/admin', {'flash': 'Video deleted'})
        with app.app_context():
            assert VideoRepository.get_by_id(video_id) is None

    def test_form_errors_become_redirect_messages(self, admin_client):
        response = admin_client.post('/admin/videos', data={'title': ''})
        assert redirect_target(response) == ('/admin', {'error': 'Title is required'})

        admin_client.post('/admin/videos', data={'title': 'Twin', 'slug': 'twin'})
        response = admin_client.post('/admin/videos', data={'title': 'Twin again', 'slug': 'twin'})
        path, params = redirect_target(response)
        assert path == '/admin'
        assert 'already taken' in params['error']

        response = admin_client.post('/admin/videos/9999', data={'title': 'Ghost'})
        path, params = redirect_target(response)
        assert 'not found' in params['error']

    def test_add_and_remove_assets(self, app, admin_client):
        from repositories.asset_repository import AssetRepository
        from repositories.video_repository import VideoRepository

        admin_client.post('/admin/videos', data={'title': 'Pack', 'slug': 'pack'})
        with app.app_context():
            video_id = VideoRepository.get_by_slug('pack').id

        response = admin_client.post(f'/admin/videos/{video_id}/assets', data={
            'label': 'docker-compose',
            'content': 'services:\r\n  app: {}\r\n',
        })
        assert redirect_target(response) == ('/admin', {'flash': 'Asset added'})

        response = admin_client.post(f'/admin/videos/{video_id}/assets', data={'label': 'empty'})
        assert redirect_target(response) == ('/admin', {'error': 'Provide content or a URL'})

        with app.app_context():
            assets = AssetRepository.get_by_video(video_id)
            assert [a.filename for a in assets] == ['docker-compose.txt']
            asset_id = assets[0].id

        response = admin_client.post(f'/admin/assets/{asset_id}/delete')
        assert redirect_target(response) == ('/admin', {'flash': 'Asset removed'})
        response = admin_client.post(f'/admin/assets/{asset_id}/delete')
        assert redirect_target(response) == ('/admin', {'flash': 'Asset removed'})

        with app.app_context():
            assert AssetRepository.count() == 0

    def test_store_failures_show_generic_message(self, monkeypatch, admin_client):
        from sqlalchemy.exc import OperationalError
        from repositories.video_repository import VideoRepository

        def broken(*args, **kwargs):
            raise OperationalError('INSERT INTO videos', {}, Exception('disk I/O error at /data/downloads.db'))

        monkeypatch.setattr(VideoRepository, 'create', broken)
        monkeypatch.setattr(VideoRepository, 'delete', broken)

        response = admin_client.post('/admin/videos', data={'title': 'Doomed'})
        assert redirect_target(response) == ('/admin', {'error': 'Failed to create video'})

        response = admin_client.post('/admin/videos/1/delete')
        path, params = redirect_target(response)
        assert params == {'error': 'Could not delete video'}
        assert 'disk I/O' not in response.headers['Location']
