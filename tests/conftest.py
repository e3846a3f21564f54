import pytest

from pawcare import create_app, db


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    """Database session for service-level tests"""
    with app.app_context():
        yield db.session
        db.session.rollback()


@pytest.fixture
def register(client):
    """Register a user and return the Authorization header for them"""

    def _register(email='owner@example.com', password='secret123', name='Owner'):
        response = client.post('/api/auth/register', json={'email': email, 'password': password, 'name': name})
        assert response.status_code == 201, response.get_json()
        return {'Authorization': f"Bearer {response.get_json()['token']}"}

    return _register


@pytest.fixture
def auth_headers(register):
    return register()
