# eventhire/api/routes/waiters.py
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import Optional

from eventhire.db.base import get_db
from eventhire.db.models.profile import WaiterProfile, waiter_expertise
from eventhire.db.models.rating import RatingTarget
from eventhire.db.models.user import User
from eventhire.schemas.booking import JobCreate, JobListResponse, JobResponse, WaiterStatsResponse
from eventhire.schemas.profile import WaiterListResponse, WaiterProfileResponse, WaiterProfileUpdate
from eventhire.schemas.rating import RatingCreate, RatingResponse
from eventhire.core.security import require_approved, require_roles
from eventhire.services import booking, identity, rating as rating_service, reports
from eventhire.services.catalog import find_expertise_list
from eventhire.services.notifications import JOB_OFFER, Notifier, get_notifier

router = APIRouter(prefix="/waiters", tags=["waiters"])


@router.get("", response_model=WaiterListResponse)
def list_waiters(
    expertise_id: Optional[int] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    min_attitude: Optional[float] = Query(None, ge=0, le=5),
    max_rate: Optional[float] = Query(None, ge=0),
    available: Optional[bool] = Query(None),
    city: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    db: Session = Depends(get_db),
):
    q = db.query(WaiterProfile).filter(WaiterProfile.is_verified.is_(True))
    if expertise_id:
        q = q.join(waiter_expertise, waiter_expertise.c.waiter_id == WaiterProfile.id).filter(
            waiter_expertise.c.expertise_id == expertise_id
        )
    if min_rating is not None:
        q = q.filter(WaiterProfile.average_rating >= min_rating)
    if min_attitude is not None:
        q = q.filter(WaiterProfile.attitude_rating >= min_attitude)
    if max_rate is not None:
        q = q.filter(WaiterProfile.hourly_rate <= max_rate)
    if available is not None:
        q = q.filter(WaiterProfile.is_available == available)
    if city:
        q = q.filter(WaiterProfile.city.ilike(f"%{city}%"))

    total = q.count()
    items = (
        q.order_by(desc(WaiterProfile.average_rating), desc(WaiterProfile.total_transactions), WaiterProfile.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {"total": total, "page": page, "limit": limit, "items": items}


@router.get("/me", response_model=WaiterProfileResponse)
def my_profile(current_user: User = Depends(require_roles("waiter"))):
    return identity.own_waiter_profile(current_user)


@router.put("/me", response_model=WaiterProfileResponse)
def update_my_profile(
    payload: WaiterProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("waiter")),
):
    profile = identity.own_waiter_profile(current_user)
    data = payload.model_dump(exclude_unset=True)
    expertise_ids = data.pop("expertise_ids", None)
    for field, value in data.items():
        setattr(profile, field, value)
    if expertise_ids is not None:
        profile.expertise = find_expertise_list(db, expertise_ids)
    db.commit()
    db.refresh(profile)
    return profile


@router.get("/jobs", response_model=JobListResponse)
def waiter_jobs(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved("waiter")),
):
    profile = identity.own_waiter_profile(current_user)
    items, total = booking.list_jobs(db, waiter_id=profile.id, status=status, page=page, per_page=limit)
    return {"total": total, "page": page, "limit": limit, "items": items}


@router.get("/jobs/stats", response_model=WaiterStatsResponse)
def waiter_stats(db: Session = Depends(get_db), current_user: User = Depends(require_approved("waiter"))):
    return reports.waiter_stats(db, identity.own_waiter_profile(current_user))


@router.get("/{waiter_id}", response_model=WaiterProfileResponse)
def get_waiter(waiter_id: int, db: Session = Depends(get_db)):
    return identity.get_waiter_profile(db, waiter_id)


@router.post("/{waiter_id}/hire", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def hire_waiter(
    waiter_id: int,
    payload: JobCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved("vendor")),
    notifier: Notifier = Depends(get_notifier),
):
    job = booking.create_job(db, current_user, waiter_id, payload)

    waiter_user = job.waiter.user
    vendor = job.vendor
    background_tasks.add_task(
        notifier.notify,
        JOB_OFFER,
        waiter_user.email,
        {
            "name": waiter_user.first_name,
            "vendor_name": vendor.business_name or current_user.full_name,
            "position": job.position,
            "work_date": job.work_date.isoformat(),
            "start_time": job.start_time,
            "end_time": job.end_time,
            "hourly_rate": job.hourly_rate,
            "total_amount": job.total_amount,
            "currency": job.currency,
        },
    )
    return job


@router.post("/{waiter_id}/rate", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
def rate_waiter(
    waiter_id: int,
    payload: RatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("vendor")),
):
    return rating_service.submit_rating(
        db,
        current_user,
        RatingTarget.waiter(waiter_id),
        payload.rating,
        transaction_id=payload.transaction_id,
        attitude_rating=payload.attitude_rating,
        review=payload.review,
        breakdown=payload.breakdown.model_dump() if payload.breakdown else None,
    )
