from datetime import datetime, timedelta, timezone

import jwt
import pytest

from medibook.auth import jwt_handler
from medibook.core import config

PATIENT = {
    'email': 'jane@example.test',
    'password': 's3cret-pass',
    'name': 'Jane Doe',
    'age': 31,
    'gender': 'female',
    'userType': 'patient',
}

DOCTOR = {
    'email': 'patel@clinic.test',
    'password': 'doc-pass',
    'name': 'Patel',
    'age': 48,
    'gender': 'male',
    'userType': 'doctor',
    'specialization': 'Cardiology',
}


@pytest.mark.parametrize('payload', [PATIENT, DOCTOR], ids=['patient', 'doctor'])
def test_register_then_login_yields_token_with_registered_role(client, payload) -> None:
    registered = client.post('/api/auth/register', json=payload)

    assert registered.status_code == 201
    assert registered.json()['message'] == 'User registered successfully'
    assert registered.json()['user']['userType'] == payload['userType']

    login = client.post('/api/auth/login', json={'email': payload['email'], 'password': payload['password']})

    assert login.status_code == 200
    body = login.json()
    assert body['message'] == 'Login successful'
    assert body['user'] == {
        'id': registered.json()['user']['id'],
        'email': payload['email'],
        'name': payload['name'],
        'userType': payload['userType'],
    }
    claims = jwt_handler.decode_access_token(body['token'])
    assert claims['userType'] == payload['userType']
    assert claims['id'] == body['user']['id']
    assert claims['email'] == payload['email']


def test_token_expires_after_twenty_four_hours(client) -> None:
    token = client.post('/api/auth/register', json=PATIENT).json()['token']

    claims = jwt_handler.decode_access_token(token)

    assert claims['exp'] - claims['iat'] == 24 * 60 * 60


def test_register_rejects_email_used_by_other_role(client) -> None:
    assert client.post('/api/auth/register', json=PATIENT).status_code == 201

    response = client.post('/api/auth/register', json={**DOCTOR, 'email': PATIENT['email']})

    assert response.status_code == 400
    assert response.json()['detail'] == 'User already exists with this email'


@pytest.mark.parametrize('missing', ['email', 'password', 'name', 'age', 'gender', 'userType'])
def test_register_rejects_missing_fields(client, missing) -> None:
    payload = {key: value for key, value in PATIENT.items() if key != missing}

    response = client.post('/api/auth/register', json=payload)

    assert response.status_code == 400


def test_register_doctor_requires_specialization(client) -> None:
    payload = {key: value for key, value in DOCTOR.items() if key != 'specialization'}

    response = client.post('/api/auth/register', json=payload)

    assert response.status_code == 400
    assert response.json()['detail'] == 'Specialization required for doctors'


def test_register_doctor_keeps_initial_slots(client) -> None:
    slots = [{'id': '1718000000000', 'startTime': '09:00', 'endTime': '10:00', 'dayOfWeek': 1}]
    doctor_id = client.post('/api/auth/register', json={**DOCTOR, 'availableSlots': slots}).json()['user']['id']

    response = client.get(f'/api/doctors/{doctor_id}')

    assert response.json()['availableSlots'] == slots


def test_login_rejects_wrong_password(client) -> None:
    client.post('/api/auth/register', json=PATIENT)

    response = client.post('/api/auth/login', json={'email': PATIENT['email'], 'password': 'wrong'})

    assert response.status_code == 401
    assert response.json()['detail'] == 'Invalid credentials'


def test_login_rejects_unknown_email(client) -> None:
    response = client.post('/api/auth/login', json={'email': 'ghost@example.test', 'password': 'x'})

    assert response.status_code == 401


def test_login_requires_email_and_password(client) -> None:
    response = client.post('/api/auth/login', json={'email': PATIENT['email']})

    assert response.status_code == 400
    assert response.json()['detail'] == 'Email and password are required'


def test_me_returns_token_identity(client) -> None:
    token = client.post('/api/auth/register', json=DOCTOR).json()['token']

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    assert response.json()['email'] == DOCTOR['email']
    assert response.json()['userType'] == 'doctor'


def test_missing_token_is_unauthorized(client) -> None:
    response = client.get('/api/auth/me')

    assert response.status_code == 401
    assert response.json()['detail'] == 'Access token required'


def test_token_signed_with_other_secret_is_forbidden(client) -> None:
    forged = jwt.encode({'id': 1, 'email': 'x@y.test', 'userType': 'doctor'}, 'other-secret', algorithm='HS256')

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {forged}'})

    assert response.status_code == 403
    assert response.json()['detail'] == 'Invalid or expired token'


def test_expired_token_is_forbidden(client) -> None:
    expired = jwt_handler.create_access_token(user_id=1, email='x@y.test', user_type='patient', expires_minutes=1)
    claims = jwt_handler.decode_access_token(expired)
    claims['exp'] = datetime.now(timezone.utc) - timedelta(minutes=5)
    token = jwt.encode(claims, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 403


def test_signed_token_with_non_numeric_id_is_forbidden(client) -> None:
    token = jwt.encode(
        {'id': 'abc', 'email': 'x@y.test', 'userType': 'patient'},
        config.JWT_SECRET_KEY,
        algorithm=config.JWT_ALGORITHM,
    )

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 403
    assert response.json()['detail'] == 'Invalid or expired token'
