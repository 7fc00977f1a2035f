# eventhire/api/routes/admin.py
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional

from eventhire.db.base import get_db
from eventhire.db.models.profile import VendorProfile, WaiterProfile
from eventhire.db.models.rating import RatingTarget
from eventhire.db.models.user import ROLES, User
from eventhire.schemas.admin import (
    AdminDashboardResponse,
    AdminUserDetail,
    AggregateResponse,
    AnalyticsResponse,
    ReportedRatingsResponse,
    UserListItem,
    UserListResponse,
)
from eventhire.schemas.booking import OrderResponse
from eventhire.schemas.profile import VendorListResponse, WaiterListResponse
from eventhire.core.errors import NotFound
from eventhire.core.security import require_admin
from eventhire.services import booking, identity, rating as rating_service, reports
from eventhire.services.notifications import ACCOUNT_APPROVED, Notifier, get_notifier

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard", response_model=AdminDashboardResponse)
def dashboard(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return reports.admin_dashboard(db)


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return reports.platform_analytics(db)


# -------------------------
# Users
# -------------------------
@router.get("/users", response_model=UserListResponse)
def list_users(
    role: Optional[str] = Query(None, description="user/vendor/waiter/admin"),
    approved: Optional[bool] = Query(None),
    active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if role and role not in ROLES:
        raise HTTPException(status_code=400, detail=f"Unknown role: {role}")

    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if approved is not None:
        q = q.filter(User.is_approved == approved)
    if active is not None:
        q = q.filter(User.is_active == active)

    total = q.count()
    users = q.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {"total": total, "page": page, "limit": limit, "items": users}


@router.get("/users/{user_id}", response_model=AdminUserDetail)
def get_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    user = identity.find_identity(db, user_id)
    detail = AdminUserDetail.model_validate(user)
    detail.activity = reports.user_activity(db, user)
    return detail


@router.put("/users/{user_id}/approve", response_model=UserListItem)
def approve_user(
    user_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    notifier: Notifier = Depends(get_notifier),
):
    user = identity.approve_user(db, user_id)
    background_tasks.add_task(
        notifier.notify, ACCOUNT_APPROVED, user.email, {"name": user.first_name, "role": user.role}
    )
    return user


@router.put("/users/{user_id}/toggle-status", response_model=UserListItem)
def toggle_user_status(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return identity.toggle_active(db, user_id)


# -------------------------
# Vendor / waiter moderation
# -------------------------
def _profile_listing(db, model, status, search, sort_by, order, page, limit):
    if status and status not in reports.PROFILE_STATUSES:
        raise HTTPException(status_code=400, detail=f"Unknown status: {status}")
    if sort_by not in reports.PROFILE_SORTS:
        raise HTTPException(status_code=400, detail=f"Unknown sort: {sort_by}")
    items, total = reports.admin_profiles(
        db, model, status=status, search=search, sort_by=sort_by, order=order, page=page, per_page=limit
    )
    return {"total": total, "page": page, "limit": limit, "items": items}


@router.get("/vendors", response_model=VendorListResponse)
def list_vendors(
    status: Optional[str] = Query(None, description="verified/unverified"),
    search: Optional[str] = Query(None),
    sort_by: str = Query("date", description="date/rating"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return _profile_listing(db, VendorProfile, status, search, sort_by, order, page, limit)


@router.get("/waiters", response_model=WaiterListResponse)
def list_waiters(
    status: Optional[str] = Query(None, description="verified/unverified"),
    search: Optional[str] = Query(None),
    sort_by: str = Query("date", description="date/rating"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return _profile_listing(db, WaiterProfile, status, search, sort_by, order, page, limit)


# -------------------------
# Rating moderation
# -------------------------
@router.get("/ratings/reported", response_model=ReportedRatingsResponse)
def reported_ratings(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    items, total = rating_service.reported_ratings(db, page=page, per_page=limit)
    return {"total": total, "page": page, "limit": limit, "items": items}


@router.delete("/ratings/{rating_id}")
def remove_rating(rating_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    rating_service.retract_rating(db, rating_id, admin)
    return {"message": "Rating removed"}


@router.post("/aggregates/{kind}/{profile_id}", response_model=AggregateResponse)
def recompute_aggregate(
    kind: str,
    profile_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        target = RatingTarget(kind, profile_id)
    except ValueError:
        raise NotFound(f"Unknown profile kind: {kind}")
    profile = rating_service.recompute_aggregate(db, target)
    return {
        "kind": target.kind,
        "profile_id": profile.id,
        "average_rating": profile.average_rating,
        "attitude_rating": profile.attitude_rating if target.is_waiter else None,
        "total_ratings": profile.total_ratings,
    }


# -------------------------
# Orders
# -------------------------
@router.post("/orders/{order_id}/refund", response_model=OrderResponse)
def refund_order(order_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return booking.refund_order(db, order_id, admin)
