import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from medibook.database import Base, get_db  # noqa: E402
from medibook.models import appointment, availability, user  # noqa: E402,F401
from medibook.routes.common import get_event_bus  # noqa: E402
from medibook.services.notifications import RecordingBus  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def client(db_engine, bus):
    from medibook.main import app

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = testing_session_local()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: bus
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Registers a user over HTTP and returns ``(user_id, auth_headers)``."""

    def _register(email: str, name: str, user_type: str = 'patient', **extra):
        payload = {
            'email': email,
            'password': 'pass-123',
            'name': name,
            'age': 40,
            'gender': 'other',
            'userType': user_type,
            **extra,
        }
        if user_type == 'doctor':
            payload.setdefault('specialization', 'General Practice')
        response = client.post('/api/auth/register', json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        return body['user']['id'], {'Authorization': f"Bearer {body['token']}"}

    return _register
