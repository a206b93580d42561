"""
Shared pytest fixtures for the FleetHQ test suite.

All tests run against an in-memory SQLite database (TestingConfig).
A single app context is pushed for the whole session so that SQLAlchemy
objects remain attached throughout.  After each test, clean_db wipes all
rows so tests are fully independent.
"""
import pytest
from flask import g
from app import create_app
from extensions import db as _db


# ---------------------------------------------------------------------------
# Application / database lifecycle
# ---------------------------------------------------------------------------

@pytest.fixture(scope='session')
def app():
    """Create a test Flask application with an in-memory SQLite database."""
    application = create_app('testing')
    ctx = application.app_context()
    ctx.push()
    _db.create_all()
    yield application
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture(autouse=True)
def clean_db(app):
    """Wipe every table after each test so tests never share state."""
    yield
    _db.session.rollback()
    for table in reversed(_db.metadata.sorted_tables):
        _db.session.execute(table.delete())
    _db.session.commit()
    _db.session.expunge_all()
    # The session-wide app context is shared by every request, so drop the
    # user Flask-Login cached on g
    g.pop('_login_user', None)


# ---------------------------------------------------------------------------
# Common model helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def user(app):
    from models.users import User
    u = User(email='manager@example.com', name='Fleet Manager')
    u.set_password('TestPass1!')
    _db.session.add(u)
    _db.session.commit()
    return u


@pytest.fixture
def admin_user(app):
    from models.users import User
    u = User(email='admin@example.com', name='Site Admin', is_site_admin=True)
    u.set_password('TestPass1!')
    _db.session.add(u)
    _db.session.commit()
    return u


@pytest.fixture
def vehicle(app):
    from models.vehicles import Vehicle
    v = Vehicle(
        registration='KDA 123X',
        make='Toyota',
        model='Hilux',
        year=2019,
        fuel_type='Diesel',
        current_odometer=1000,
        service_interval_km=10000,
        next_service_due_km=11000,
    )
    _db.session.add(v)
    _db.session.commit()
    return v


@pytest.fixture
def client(app):
    g.pop('_login_user', None)
    return app.test_client()


@pytest.fixture
def logged_in_client(client, user):
    response = client.post('/login', json={'email': user.email, 'password': 'TestPass1!'})
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(client, admin_user):
    response = client.post('/login', json={'email': admin_user.email, 'password': 'TestPass1!'})
    assert response.status_code == 200
    return client

