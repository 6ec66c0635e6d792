"""
Root pytest configuration and fixtures for unit and integration tests.

Every test gets its own app and in-memory database. Route tests must not hold
an app context open across requests, otherwise Flask-Login's cached user in
`g` leaks between requests; data fixtures therefore build rows in a short
context and hand back detached, fully loaded instances.
"""
import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Test configuration
os.environ['FLASK_ENV'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['SESSION_SECRET'] = 'test-secret-key-for-testing-only-0123456789'


@pytest.fixture(scope='function')
def app():
    """Create and configure a test Flask application."""
    from app import create_app
    from models import db

    test_app = create_app({
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    })

    with test_app.app_context():
        db.create_all()

    yield test_app

    with test_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Database session inside an app context, for service-level tests."""
    from models import db

    with app.app_context():
        yield db.session
        db.session.rollback()
        db.session.remove()


def _detach(instance):
    from models import db

    db.session.refresh(instance)
    db.session.expunge(instance)
    return instance


@pytest.fixture(scope='function')
def make_user(app):
    """Factory for persisted users; returns detached instances."""
    from models import db, User

    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        n = counter['n']
        fields = {
            'google_id': f'google-{n}',
            'email': f'user{n}@example.com',
            'display_name': f'User {n}',
            'first_name': 'Test',
            'last_name': f'User{n}',
        }
        fields.update(overrides)
        with app.app_context():
            user = User(**fields)
            db.session.add(user)
            db.session.commit()
            return _detach(user)

    return _make


@pytest.fixture(scope='function')
def make_task(app):
    """Factory for persisted tasks; returns detached instances."""
    from models import db, Task, utcnow

    def _make(created_by, **overrides):
        stamp = overrides.pop('created_at', None) or utcnow()
        fields = {
            'title': 'Write the quarterly report',
            'description': 'Collect figures and draft the summary',
            'created_by_id': created_by.id,
            'created_at': stamp,
            'updated_at': stamp,
        }
        fields.update(overrides)
        with app.app_context():
            task = Task(**fields)
            db.session.add(task)
            db.session.commit()
            return _detach(task)

    return _make


@pytest.fixture(scope='function')
def test_user(make_user):
    """Create a test user."""
    return make_user(display_name='Alice Example', email='alice@example.com', google_id='google-alice')


@pytest.fixture(scope='function')
def other_user(make_user):
    return make_user(display_name='Bob Example', email='bob@example.com', google_id='google-bob')


@pytest.fixture(scope='function')
def login_as(client):
    """Put a user into the client's session the way Flask-Login stores it."""
    def _login(user):
        with client.session_transaction() as sess:
            sess['_user_id'] = user.id
            sess['_fresh'] = True
        return client

    return _login


@pytest.fixture(scope='function')
def authenticated_client(login_as, test_user):
    """Create an authenticated test client."""
    return login_as(test_user)


@pytest.fixture(scope='function')
def future_date():
    from models import utcnow
    return (utcnow() + timedelta(days=7)).date().isoformat()


@pytest.fixture(scope='function')
def valid_payload(future_date):
    return {
        'title': 'Prepare sprint demo',
        'description': 'Build slides and rehearse the walkthrough',
        'status': 'pending',
        'priority': 'high',
        'dueDate': future_date,
        'tags': 'demo, sprint',
    }
