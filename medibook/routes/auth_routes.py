from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import field_validator
from sqlalchemy.orm import Session

from medibook.auth import jwt_handler
from medibook.auth.dependencies import TokenIdentity, get_current_user
from medibook.database import get_db
from medibook.models.user import User
from medibook.routes.common import CamelModel, service_errors
from medibook.routes.doctor_routes import SlotPayload
from medibook.services import identity_service

router = APIRouter(tags=['auth'])


class RegisterRequest(CamelModel):
    email: str
    password: str
    name: str
    age: int
    gender: Literal['male', 'female', 'other']
    user_type: Literal['doctor', 'patient']
    specialization: str | None = None
    available_slots: list[SlotPayload] | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Email is required.')
        return normalized

    @field_validator('password', 'name')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError('Field is required.')
        return value

    @field_validator('age')
    @classmethod
    def validate_age(cls, value: int) -> int:
        # Matches the client, which treats 0 as "not given".
        if value <= 0:
            raise ValueError('Age is required.')
        return value


class LoginRequest(CamelModel):
    email: str = ''
    password: str = ''


class UserSummary(CamelModel):
    id: int
    email: str
    name: str | None = None
    user_type: str


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserSummary


def _auth_response(message: str, user: User) -> AuthResponse:
    token = jwt_handler.create_access_token(user_id=user.id, email=user.email, user_type=user.role)
    return AuthResponse(
        message=message,
        token=token,
        user=UserSummary(id=user.id, email=user.email, name=user.name, user_type=user.role),
    )


@router.post('/register', response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    with service_errors(db, 'Registration'):
        user = identity_service.register_user(
            db,
            email=data.email,
            password=data.password,
            name=data.name,
            age=data.age,
            gender=data.gender,
            user_type=data.user_type,
            specialization=data.specialization,
            available_slots=[slot.model_dump(by_alias=True) for slot in data.available_slots or []],
        )
    return _auth_response('User registered successfully', user)


@router.post('/login', response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    email = data.email.strip().lower()
    if not email or not data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Email and password are required',
        )

    with service_errors(db, 'Login'):
        user = identity_service.authenticate(db, email, data.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')
    return _auth_response('Login successful', user)


@router.get('/me')
def me(current_user: TokenIdentity = Depends(get_current_user)):
    return {'id': current_user.id, 'email': current_user.email, 'userType': current_user.user_type}
