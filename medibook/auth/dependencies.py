import logging
from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from medibook.auth import jwt_handler
from medibook.models.user import PATIENT_ROLE, USER_ROLES

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class TokenIdentity:
    """The caller as described by a verified access token."""

    id: int
    email: str
    user_type: str


def identity_from_token(token: str) -> TokenIdentity:
    """Decode a bearer token into an identity, raising ``jwt.InvalidTokenError``."""
    payload = jwt_handler.decode_access_token(token)
    user_id = payload.get("id")
    user_type = payload.get("userType")
    if user_id is None or user_type not in USER_ROLES:
        raise jwt.InvalidTokenError("Token payload is missing identity fields")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Token id is not a user id") from exc
    return TokenIdentity(id=user_id, email=payload.get("email", ""), user_type=user_type)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenIdentity:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")

    try:
        return identity_from_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected access token: %s", exc)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token") from exc


def require_patient(current_user: TokenIdentity = Depends(get_current_user)) -> TokenIdentity:
    if current_user.user_type != PATIENT_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Patient access required")
    return current_user
