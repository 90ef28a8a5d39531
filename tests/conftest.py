"""
Pytest fixtures and configuration for Resource Hub tests
"""
import os
import sys
from urllib.parse import parse_qs, urlparse

import pytest

# Add app directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'app'))

DEFAULT_USERNAME = 'creator'
DEFAULT_PASSWORD = 'changeme'
NEW_PASSWORD = 'correct horse battery staple'


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway data directory, no demo content"""
    from settings import load_settings

    config_file = tmp_path / 'resource-hub.config.yaml'
    config_file.write_text('storage:\n  seed_demo_content: false\n')
    return load_settings(config_path=str(config_file), environ={'DATA_DIR': str(tmp_path / 'data')})


@pytest.fixture
def app(settings):
    from app import create_app
    from db import close_db

    _app = create_app(settings, config_overrides={'TESTING': True, 'RATELIMIT_ENABLED': False})
    yield _app
    close_db(_app)


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def login(client, username=DEFAULT_USERNAME, password=DEFAULT_PASSWORD):
    return client.post('/admin/login', data={'username': username, 'password': password})


def rotate_password(client, current=DEFAULT_PASSWORD, new=NEW_PASSWORD):
    return client.post(
        '/admin/password',
        data={'current_password': current, 'new_password': new, 'confirm_password': new},
    )


def redirect_target(response):
    """(path, query dict) of a redirect's Location header"""
    location = urlparse(response.headers['Location'])
    return location.path, {k: v[0] for k, v in parse_qs(location.query).items()}


@pytest.fixture
def admin_client(client):
    """Client logged in with the password already rotated"""
    login(client)
    response = rotate_password(client)
    assert redirect_target(response) == ('/admin', {'flash': 'Password updated'})
    return client
