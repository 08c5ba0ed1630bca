"""Test configuration and fixtures for the storefront category engine."""

from datetime import datetime, timezone
from typing import Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy.pool import StaticPool

from storefront import create_app
from storefront.extensions import db
from storefront.models import User
from storefront.repositories.category import create_category


@pytest.fixture
def app() -> Generator[Flask, None, None]:
    """Create and configure a test Flask application."""
    # Use in-memory SQLite for each test
    test_config = {
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,  # Disable CSRF for testing
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'poolclass': StaticPool,
            'pool_pre_ping': True,
            'connect_args': {'check_same_thread': False}
        },
        'SECRET_KEY': 'test-secret-key',
        'RATELIMIT_ENABLED': False,  # Disable rate limiting for tests
        'CACHE_TYPE': 'SimpleCache',
        'CACHE_DEFAULT_TIMEOUT': 300,
        'CATEGORY_PAGE_SIZE': 10,
        'DEFAULT_CATEGORY_IMAGE': '/images/default-category.png',
    }

    app = create_app(test_config)

    with app.app_context():
        db.create_all()
        yield app

        # Cleanup
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def runner(app: Flask):
    """Create a test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture
def test_admin_user(app: Flask):
    """Create an admin account as mirrored from the auth service."""
    admin_user = User(
        username='testadmin',
        email='admin@example.com',
        is_admin=True,
        created_at=datetime.now(timezone.utc)
    )
    db.session.add(admin_user)
    db.session.commit()
    db.session.refresh(admin_user)
    yield admin_user


@pytest.fixture
def test_shopper(app: Flask):
    """Create a non-admin account."""
    user = User(username='shopper', email='shopper@example.com', is_admin=False)
    db.session.add(user)
    db.session.commit()
    db.session.refresh(user)
    yield user


def _login(client: FlaskClient, user: User) -> FlaskClient:
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def admin_client(client: FlaskClient, test_admin_user: User) -> FlaskClient:
    """Create a client with an authenticated admin session."""
    return _login(client, test_admin_user)


@pytest.fixture
def shopper_client(client: FlaskClient, test_shopper: User) -> FlaskClient:
    return _login(client, test_shopper)


def make_category(name: str, slug: str, parent=None, **extra):
    """Create a category through the repository."""
    return create_category(
        name=name,
        slug=slug,
        image=extra.pop('image', f'/images/{slug}.png'),
        parent_id=parent.id if parent is not None else None,
        **extra,
    )


@pytest.fixture
def category_factory(app: Flask):
    return make_category


@pytest.fixture
def category_tree(app: Flask) -> dict:
    """Electronics > TVs > OLED, Electronics > Audio, and a separate Home root."""
    electronics = make_category('Electronics', 'electronics', banner_image='/banners/electronics.jpg')
    tvs = make_category('TVs', 'tvs', parent=electronics)
    oled = make_category('OLED', 'oled', parent=tvs)
    audio = make_category('Audio', 'audio', parent=electronics, banner_image='/banners/audio.jpg')
    home = make_category('Home', 'home')
    return {
        'electronics': electronics,
        'tvs': tvs,
        'oled': oled,
        'audio': audio,
        'home': home,
    }
