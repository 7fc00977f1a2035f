# eventhire/core/security.py
from datetime import datetime, timedelta

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from eventhire.core.config import get_settings
from eventhire.db.base import get_db
from eventhire.db.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(data: dict, expires_minutes: int = None) -> str:
    settings = get_settings()
    to_encode = data.copy()
    minutes = expires_minutes or settings.access_token_expire_minutes
    to_encode["exp"] = datetime.utcnow() + timedelta(minutes=minutes)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    settings = get_settings()
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized to access this route",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        user_id = int(payload.get("sub"))
    except (jwt.PyJWTError, TypeError, ValueError):
        raise credentials_error

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise credentials_error
    if not user.is_active:
        raise HTTPException(status_code=401, detail="User account is deactivated")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin only")
    return current_user


def require_roles(*roles: str):
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"User role {current_user.role} is not authorized to access this route",
            )
        return current_user

    return dependency


def require_approved(*roles: str):
    """Role gate that also rejects vendors/waiters still pending admin approval."""
    role_dependency = require_roles(*roles)

    def dependency(current_user: User = Depends(role_dependency)) -> User:
        if not current_user.is_approved:
            raise HTTPException(status_code=403, detail="Account is pending approval")
        return current_user

    return dependency


RESET_PURPOSE = "password-reset"


def _hash_fingerprint(password_hash: str) -> str:
    return password_hash[-12:]


def create_reset_token(user: User) -> str:
    """Short-lived token that stops working once the password changes."""
    settings = get_settings()
    return create_access_token(
        {"sub": str(user.id), "purpose": RESET_PURPOSE, "fp": _hash_fingerprint(user.password_hash)},
        expires_minutes=settings.password_reset_expire_minutes,
    )


def user_from_reset_token(token: str, db: Session) -> User:
    settings = get_settings()
    invalid = HTTPException(status_code=400, detail="Invalid or expired reset token")
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        user_id = int(payload.get("sub"))
    except (jwt.PyJWTError, TypeError, ValueError):
        raise invalid
    if payload.get("purpose") != RESET_PURPOSE:
        raise invalid

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active or payload.get("fp") != _hash_fingerprint(user.password_hash):
        raise invalid
    return user
