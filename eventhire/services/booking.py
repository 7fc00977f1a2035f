# eventhire/services/booking.py
"""
Booking engine: orders (user hires vendor) and jobs (vendor hires waiter).

Every status change goes through ``transition_order`` / ``transition_job``,
which check the fixed tables in ``transitions`` and write the status plus
any profile counter change in one commit. Orders and jobs are versioned
rows, so a concurrent change to the same record fails with
``ConcurrentUpdate`` instead of being applied against stale state.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from eventhire.core.errors import ConcurrentUpdate, InvalidTransition, NotAuthorized, NotFound
from eventhire.db.models.booking import Job, Order
from eventhire.db.models.user import User
from eventhire.services import transitions as t
from eventhire.services.catalog import find_event_type
from eventhire.services.identity import (
    ensure_hireable,
    get_vendor_profile,
    get_waiter_profile,
    own_vendor_profile,
)
from eventhire.services.statistics import increment_counter

logger = logging.getLogger(__name__)


def job_hours(start_time: str, end_time: str) -> float:
    """
    Absolute wall-clock difference between two same-day HH:MM times, in hours.
    "22:00" -> "02:00" is 20 hours, not 4: shifts never cross midnight.
    """
    start = _minutes(start_time)
    end = _minutes(end_time)
    return abs(end - start) / 60


def _minutes(value: str) -> int:
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def _commit_transition(db: Session, entity: str, entity_id: int) -> None:
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent update on %s %s, transition rejected", entity, entity_id)
        raise ConcurrentUpdate(f"{entity.capitalize()} was modified by another request, please retry")


# --------------------------
# Orders
# --------------------------

def create_order(db: Session, user: User, vendor_id: int, details) -> Order:
    if user.role != "user":
        raise NotAuthorized("Only users can book vendors")

    vendor = get_vendor_profile(db, vendor_id)
    ensure_hireable(vendor, "vendor")
    find_event_type(db, details.event_type_id)

    order = Order(
        user_id=user.id,
        vendor_id=vendor.id,
        event_type_id=details.event_type_id,
        event_title=details.event_title,
        event_description=details.event_description,
        event_date=details.event_date,
        start_time=details.start_time,
        end_time=details.end_time,
        venue_name=details.venue_name,
        venue_address=details.venue_address,
        guest_count=details.guest_count,
        special_requests=details.special_requests,
        quoted_price=details.quoted_price,
        currency=details.currency or vendor.currency,
        status=t.ORDER_PENDING,
    )
    db.add(order)
    # counted at creation whatever the eventual outcome
    increment_counter(db, vendor, "total_transactions")
    db.commit()
    db.refresh(order)

    logger.info("Order %s created: user %s -> vendor %s", order.id, user.id, vendor.id)
    return order


def get_order(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFound("Order not found")
    return order


def get_order_for_party(db: Session, order_id: int, actor: User) -> Order:
    order = get_order(db, order_id)
    if actor.role == "admin" or order.user_id == actor.id or order.vendor.user_id == actor.id:
        return order
    # don't leak existence to outsiders
    raise NotFound("Order not found")


def _authorize_order_transition(order: Order, actor: User, new_status: str) -> None:
    if actor.role == "admin":
        return
    if order.vendor.user_id == actor.id:
        return
    if order.user_id == actor.id and new_status == t.ORDER_CANCELLED:
        return
    raise NotAuthorized("Not authorized to change the status of this order")


def transition_order(db: Session, order_id: int, actor: User, new_status: str,
                     reason: Optional[str] = None) -> Order:
    order = get_order(db, order_id)
    _authorize_order_transition(order, actor, new_status)
    t.check_transition(t.ORDER_TRANSITIONS, "order", order.status, new_status)

    previous = order.status
    order.status = new_status

    if new_status == t.ORDER_CANCELLED:
        order.cancellation_reason = reason
        order.cancelled_by_id = actor.id
        order.cancelled_at = datetime.utcnow()

    if new_status == t.ORDER_COMPLETED:
        # completed is terminal, so this runs at most once per order
        increment_counter(db, order.vendor, "completed_transactions")

    _commit_transition(db, "order", order.id)
    db.refresh(order)
    logger.info("Order %s: %s -> %s by user %s", order.id, previous, new_status, actor.id)
    return order


def refund_order(db: Session, order_id: int, admin: User) -> Order:
    """Administrative override into ``refunded``; bypasses the transition table."""
    if admin.role != "admin":
        raise NotAuthorized("Only administrators can refund orders")
    order = get_order(db, order_id)
    if order.status not in t.REFUNDABLE_ORDER_STATUSES:
        raise InvalidTransition("order", order.status, t.ORDER_REFUNDED)

    previous = order.status
    order.status = t.ORDER_REFUNDED
    _commit_transition(db, "order", order.id)
    db.refresh(order)
    logger.warning("Order %s refunded by admin %s (was %s)", order.id, admin.id, previous)
    return order


def list_orders(db: Session, *, user_id: int = None, vendor_id: int = None,
                status: str = None, page: int = 1, per_page: int = 10):
    q = db.query(Order)
    if user_id is not None:
        q = q.filter(Order.user_id == user_id)
    if vendor_id is not None:
        q = q.filter(Order.vendor_id == vendor_id)
    if status:
        q = q.filter(Order.status == status)
    total = q.count()
    rows = q.order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return rows, total


# --------------------------
# Jobs
# --------------------------

def create_job(db: Session, vendor_user: User, waiter_id: int, details) -> Job:
    if vendor_user.role != "vendor":
        raise NotAuthorized("Only vendors can hire waiters")
    if not vendor_user.is_approved:
        raise NotAuthorized("Account is pending approval")

    vendor = own_vendor_profile(vendor_user)
    waiter = get_waiter_profile(db, waiter_id)
    ensure_hireable(waiter, "waiter")

    if details.order_id is not None:
        order = db.query(Order).filter(Order.id == details.order_id, Order.vendor_id == vendor.id).first()
        if not order:
            raise NotFound("Order not found or not owned by you")

    total_hours = job_hours(details.start_time, details.end_time)
    job = Job(
        vendor_id=vendor.id,
        waiter_id=waiter.id,
        order_id=details.order_id,
        position=details.position,
        responsibilities=details.responsibilities,
        instructions=details.instructions,
        dresscode=details.dresscode,
        work_date=details.work_date,
        start_time=details.start_time,
        end_time=details.end_time,
        hourly_rate=details.hourly_rate,
        total_hours=total_hours,
        total_amount=total_hours * details.hourly_rate,
        currency=details.currency or waiter.currency,
        status=t.JOB_PENDING,
    )
    db.add(job)
    # same policy as orders: counted when the offer is made
    increment_counter(db, waiter, "total_transactions")
    db.commit()
    db.refresh(job)

    logger.info("Job %s offered: vendor %s -> waiter %s (%.2f h)", job.id, vendor.id, waiter.id, total_hours)
    return job


def get_job(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFound("Job not found")
    return job


def get_job_for_party(db: Session, job_id: int, actor: User) -> Job:
    job = get_job(db, job_id)
    if actor.role == "admin" or job.waiter.user_id == actor.id or job.vendor.user_id == actor.id:
        return job
    raise NotFound("Job not found")


def _authorize_job_transition(job: Job, actor: User, new_status: str) -> None:
    if actor.role == "admin":
        return
    if job.waiter.user_id == actor.id:
        return
    if job.vendor.user_id == actor.id and new_status == t.JOB_CANCELLED:
        return
    raise NotAuthorized("Not authorized to change the status of this job")


def transition_job(db: Session, job_id: int, actor: User, new_status: str,
                   decline_reason: Optional[str] = None) -> Job:
    job = get_job(db, job_id)
    _authorize_job_transition(job, actor, new_status)
    t.check_transition(t.JOB_TRANSITIONS, "job", job.status, new_status)

    previous = job.status
    job.status = new_status
    now = datetime.utcnow()

    if new_status in (t.JOB_ACCEPTED, t.JOB_DECLINED):
        job.responded_at = now
        if new_status == t.JOB_DECLINED and decline_reason:
            job.decline_reason = decline_reason

    if new_status == t.JOB_COMPLETED:
        job.completed_at = now
        increment_counter(db, job.waiter, "completed_transactions")

    _commit_transition(db, "job", job.id)
    db.refresh(job)
    logger.info("Job %s: %s -> %s by user %s", job.id, previous, new_status, actor.id)
    return job


def list_jobs(db: Session, *, waiter_id: int = None, vendor_id: int = None,
              status: str = None, page: int = 1, per_page: int = 10):
    q = db.query(Job)
    if waiter_id is not None:
        q = q.filter(Job.waiter_id == waiter_id)
    if vendor_id is not None:
        q = q.filter(Job.vendor_id == vendor_id)
    if status:
        q = q.filter(Job.status == status)
    total = q.count()
    rows = q.order_by(Job.created_at.desc(), Job.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return rows, total
