from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventhire.db.base import get_db
from eventhire.db.models.user import User
from eventhire.core.config import Settings, get_settings
from eventhire.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    PasswordChange,
    ResetPasswordRequest,
    TokenResponse,
    UserCreate,
    UserProfileUpdate,
    UserResponse,
)
from eventhire.core.security import create_access_token, create_reset_token, get_current_user, user_from_reset_token
from eventhire.services import identity
from eventhire.services.notifications import PASSWORD_RESET, WELCOME, Notifier, get_notifier

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    user: UserCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    if identity.find_by_email(db, user.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = identity.create_identity(
        db,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        password=user.password,
        role=user.role,
    )

    approval_note = "" if new_user.is_approved else " An administrator will review it shortly."
    background_tasks.add_task(
        notifier.notify,
        WELCOME,
        new_user.email,
        {"name": new_user.first_name, "role": new_user.role, "approval_note": approval_note},
    )

    token = create_access_token({"sub": str(new_user.id)})
    return {"access_token": token, "token_type": "bearer", "user": new_user}


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = identity.authenticate(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": str(user.id)})
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return identity.update_identity(db, current_user, **payload.model_dump(exclude_unset=True))


@router.put("/password", response_model=TokenResponse)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = identity.change_password(db, current_user, payload.current_password, payload.new_password)
    token = create_access_token({"sub": str(user.id)})
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/forgot-password")
def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
):
    user = identity.find_by_email(db, payload.email)
    if user and user.is_active:
        token = create_reset_token(user)
        background_tasks.add_task(
            notifier.notify,
            PASSWORD_RESET,
            user.email,
            {"name": user.first_name, "reset_url": f"{settings.frontend_url}/reset-password/{token}"},
        )
    # same answer either way
    return {"message": "If that email is registered, a reset link has been sent"}


@router.post("/reset-password", response_model=TokenResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = user_from_reset_token(payload.token, db)
    identity.set_password(db, user, payload.password)
    token = create_access_token({"sub": str(user.id)})
    return {"access_token": token, "token_type": "bearer", "user": user}
