# eventhire/services/identity.py
"""Identity records, role profiles and the approval gate used by hiring."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from eventhire.core.config import Settings
from eventhire.core.errors import AlreadyApproved, InvalidCredentials, NotAvailable, NotFound
from eventhire.core.security import hash_password, verify_password
from eventhire.db.models.profile import VendorProfile, WaiterProfile
from eventhire.db.models.user import User

logger = logging.getLogger(__name__)


def find_identity(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def create_identity(db: Session, *, first_name: str, last_name: str, email: str, password: str,
                    phone: str = None, role: str = "user") -> User:
    """
    Create a person record. Vendors and waiters also get a blank role
    profile (zero counters) and start unapproved.
    """
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email.strip().lower(),
        phone=phone,
        password_hash=hash_password(password),
        role=role,
        is_approved=role in ("user", "admin"),
    )
    db.add(user)
    db.flush()

    if role == "vendor":
        db.add(VendorProfile(user_id=user.id))
    elif role == "waiter":
        db.add(WaiterProfile(user_id=user.id))

    db.commit()
    db.refresh(user)
    logger.info("Registered %s account %s (id=%s)", role, user.email, user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = find_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    if not user.is_active:
        return None
    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


def set_password(db: Session, user: User, password: str) -> User:
    user.password_hash = hash_password(password)
    db.commit()
    db.refresh(user)
    logger.info("Password changed for user %s", user.id)
    return user


def update_identity(db: Session, user: User, **fields) -> User:
    """Apply name and phone changes; ``None`` leaves a field as it is."""
    for field in ("first_name", "last_name", "phone"):
        value = fields.get(field)
        if value is not None:
            setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Profile details updated for user %s", user.id)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise InvalidCredentials("Current password is incorrect")
    return set_password(db, user, new_password)


def get_vendor_profile(db: Session, vendor_id: int) -> VendorProfile:
    profile = db.query(VendorProfile).filter(VendorProfile.id == vendor_id).first()
    if not profile:
        raise NotFound("Vendor not found")
    return profile


def get_waiter_profile(db: Session, waiter_id: int) -> WaiterProfile:
    profile = db.query(WaiterProfile).filter(WaiterProfile.id == waiter_id).first()
    if not profile:
        raise NotFound("Waiter not found")
    return profile


def own_vendor_profile(user: User) -> VendorProfile:
    if user.vendor_profile is None:
        raise NotFound("Vendor profile not found")
    return user.vendor_profile


def own_waiter_profile(user: User) -> WaiterProfile:
    if user.waiter_profile is None:
        raise NotFound("Waiter profile not found")
    return user.waiter_profile


def ensure_hireable(profile, label: str) -> None:
    owner = profile.user
    if not profile.is_available:
        raise NotAvailable(f"This {label} is currently not available")
    if not owner.is_active or not owner.is_approved:
        raise NotAvailable(f"This {label} is not approved for bookings")


def approve_user(db: Session, user_id: int) -> User:
    user = find_identity(db, user_id)
    if user.is_approved:
        raise AlreadyApproved("User is already approved")
    user.is_approved = True
    if user.profile is not None:
        user.profile.is_verified = True
    db.commit()
    db.refresh(user)
    logger.info("Approved %s account %s", user.role, user.id)
    return user


def toggle_active(db: Session, user_id: int) -> User:
    user = find_identity(db, user_id)
    user.is_active = not user.is_active
    db.commit()
    db.refresh(user)
    logger.info("User %s %s", user.id, "activated" if user.is_active else "deactivated")
    return user


def seed_admin(db: Session, settings: Settings) -> Optional[User]:
    if not (settings.admin_email and settings.admin_password):
        return None
    existing = find_by_email(db, settings.admin_email)
    if existing:
        return existing
    return create_identity(
        db,
        first_name="Platform",
        last_name="Admin",
        email=settings.admin_email,
        password=settings.admin_password,
        role="admin",
    )
