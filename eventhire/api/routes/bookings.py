# eventhire/api/routes/bookings.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from eventhire.db.base import get_db
from eventhire.db.models.user import User
from eventhire.schemas.booking import (
    JobResponse,
    JobStatusUpdate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from eventhire.core.security import get_current_user, require_roles
from eventhire.services import booking

router = APIRouter(tags=["bookings"])


# --------------------------
# Orders (user -> vendor)
# --------------------------
@router.get("/orders/me", response_model=OrderListResponse)
def my_orders(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("user")),
):
    items, total = booking.list_orders(db, user_id=current_user.id, status=status, page=page, per_page=limit)
    return {"total": total, "page": page, "limit": limit, "items": items}


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return booking.get_order_for_party(db, order_id, current_user)


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # outsiders get 404, not 403
    booking.get_order_for_party(db, order_id, current_user)
    return booking.transition_order(db, order_id, current_user, payload.status, reason=payload.reason)


# --------------------------
# Jobs (vendor -> waiter)
# --------------------------
@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return booking.get_job_for_party(db, job_id, current_user)


@router.put("/jobs/{job_id}/status", response_model=JobResponse)
def update_job_status(
    job_id: int,
    payload: JobStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    booking.get_job_for_party(db, job_id, current_user)
    return booking.transition_job(db, job_id, current_user, payload.status, decline_reason=payload.decline_reason)
