# eventhire/api/routes/vendors.py
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import Optional

from eventhire.db.base import get_db
from eventhire.db.models.profile import VendorProfile, vendor_categories
from eventhire.db.models.rating import RatingTarget
from eventhire.db.models.user import User
from eventhire.schemas.booking import (
    JobListResponse,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    VendorStatsResponse,
)
from eventhire.schemas.profile import VendorListResponse, VendorProfileResponse, VendorProfileUpdate
from eventhire.schemas.rating import RatingCreate, RatingResponse
from eventhire.core.security import require_approved, require_roles
from eventhire.services import booking, identity, rating as rating_service, reports
from eventhire.services.catalog import find_categories
from eventhire.services.notifications import BOOKING_CONFIRMED, BOOKING_RECEIVED, Notifier, get_notifier

router = APIRouter(prefix="/vendors", tags=["vendors"])


# --------------------------
# Public listing
# --------------------------
@router.get("", response_model=VendorListResponse)
def list_vendors(
    category_id: Optional[int] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    available: Optional[bool] = Query(None),
    city: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    db: Session = Depends(get_db),
):
    q = db.query(VendorProfile).filter(VendorProfile.is_verified.is_(True))
    if category_id:
        q = q.join(vendor_categories, vendor_categories.c.vendor_id == VendorProfile.id).filter(
            vendor_categories.c.category_id == category_id
        )
    if min_rating is not None:
        q = q.filter(VendorProfile.average_rating >= min_rating)
    if available is not None:
        q = q.filter(VendorProfile.is_available == available)
    if city:
        q = q.filter(VendorProfile.city.ilike(f"%{city}%"))

    total = q.count()
    items = (
        q.order_by(desc(VendorProfile.average_rating), desc(VendorProfile.total_transactions), VendorProfile.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {"total": total, "page": page, "limit": limit, "items": items}


# --------------------------
# Vendor self-service
# --------------------------
@router.get("/me", response_model=VendorProfileResponse)
def my_profile(current_user: User = Depends(require_roles("vendor"))):
    return identity.own_vendor_profile(current_user)


@router.put("/me", response_model=VendorProfileResponse)
def update_my_profile(
    payload: VendorProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("vendor")),
):
    profile = identity.own_vendor_profile(current_user)
    data = payload.model_dump(exclude_unset=True)
    category_ids = data.pop("category_ids", None)
    for field, value in data.items():
        setattr(profile, field, value)
    if category_ids is not None:
        profile.categories = find_categories(db, category_ids)
    db.commit()
    db.refresh(profile)
    return profile


@router.get("/orders", response_model=OrderListResponse)
def vendor_orders(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved("vendor")),
):
    profile = identity.own_vendor_profile(current_user)
    items, total = booking.list_orders(db, vendor_id=profile.id, status=status, page=page, per_page=limit)
    return {"total": total, "page": page, "limit": limit, "items": items}


@router.get("/orders/stats", response_model=VendorStatsResponse)
def vendor_stats(db: Session = Depends(get_db), current_user: User = Depends(require_approved("vendor"))):
    return reports.vendor_stats(db, identity.own_vendor_profile(current_user))


@router.get("/jobs", response_model=JobListResponse)
def vendor_jobs(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved("vendor")),
):
    profile = identity.own_vendor_profile(current_user)
    items, total = booking.list_jobs(db, vendor_id=profile.id, status=status, page=page, per_page=limit)
    return {"total": total, "page": page, "limit": limit, "items": items}


# --------------------------
# Single vendor, hire & rate
# --------------------------
@router.get("/{vendor_id}", response_model=VendorProfileResponse)
def get_vendor(vendor_id: int, db: Session = Depends(get_db)):
    return identity.get_vendor_profile(db, vendor_id)


@router.post("/{vendor_id}/hire", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def hire_vendor(
    vendor_id: int,
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("user")),
    notifier: Notifier = Depends(get_notifier),
):
    order = booking.create_order(db, current_user, vendor_id, payload)

    vendor = order.vendor
    details = {
        "order_id": order.id,
        "event_title": order.event_title,
        "event_date": order.event_date.isoformat(),
        "start_time": order.start_time,
        "end_time": order.end_time,
        "guest_count": order.guest_count,
        "quoted_price": order.quoted_price,
        "currency": order.currency,
        "vendor_name": vendor.business_name or vendor.user.full_name,
        "customer_name": current_user.full_name,
    }
    background_tasks.add_task(
        notifier.notify, BOOKING_CONFIRMED, current_user.email, {**details, "name": current_user.first_name}
    )
    background_tasks.add_task(
        notifier.notify, BOOKING_RECEIVED, vendor.user.email, {**details, "name": vendor.user.first_name}
    )
    return order


@router.post("/{vendor_id}/rate", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
def rate_vendor(
    vendor_id: int,
    payload: RatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("user")),
):
    return rating_service.submit_rating(
        db,
        current_user,
        RatingTarget.vendor(vendor_id),
        payload.rating,
        transaction_id=payload.transaction_id,
        attitude_rating=payload.attitude_rating,
        review=payload.review,
        breakdown=payload.breakdown.model_dump() if payload.breakdown else None,
    )
