"""
Pytest fixtures for PVZ backend tests.

Provides test database setup, pickup point / reception fixtures, and test client.
"""

import pytest

from pvz import create_app
from pvz.extensions import db
from pvz.services import pickup_point_service, reception_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOG_LEVEL': 'DEBUG',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def pickup_point(db_session):
    """Create a pickup point in Moscow."""
    return pickup_point_service.create_pickup_point("Москва")


@pytest.fixture(scope='function')
def other_pickup_point(db_session):
    """Create a second pickup point in Kazan."""
    return pickup_point_service.create_pickup_point("Казань")


@pytest.fixture(scope='function')
def open_reception(pickup_point):
    """Open a reception at the Moscow pickup point."""
    return reception_service.open_reception(pickup_point.id)
