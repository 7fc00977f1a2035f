# eventhire/services/reports.py
"""Read-only statistics for vendor/waiter dashboards and the admin view."""
from datetime import datetime, timedelta

from sqlalchemy import case, desc, func, or_
from sqlalchemy.orm import Session

from eventhire.db.models.booking import Job, Order
from eventhire.db.models.profile import VendorProfile, WaiterProfile
from eventhire.db.models.rating import Rating, RatingTarget
from eventhire.db.models.user import User
from eventhire.services.rating import star_breakdown
from eventhire.services.statistics import ceil_to_tenths

PROFILE_STATUSES = ("verified", "unverified")
PROFILE_SORTS = ("date", "rating")


def _status_summary(db: Session, model, amount_column, *filters) -> dict:
    rows = (
        db.query(model.status, func.count(model.id), func.coalesce(func.sum(amount_column), 0))
        .filter(*filters)
        .group_by(model.status)
        .all()
    )
    return {status: {"count": int(count), "amount": float(amount)} for status, count, amount in rows}


def vendor_stats(db: Session, vendor: VendorProfile) -> dict:
    target = RatingTarget.vendor(vendor.id)
    return {
        "total_transactions": vendor.total_transactions,
        "completed_transactions": vendor.completed_transactions,
        "completion_rate": vendor.completion_rate,
        "average_rating": vendor.average_rating,
        "total_ratings": vendor.total_ratings,
        "orders_by_status": _status_summary(db, Order, Order.quoted_price, Order.vendor_id == vendor.id),
        "rating_breakdown": star_breakdown(db, target),
    }


def waiter_stats(db: Session, waiter: WaiterProfile) -> dict:
    target = RatingTarget.waiter(waiter.id)
    return {
        "total_transactions": waiter.total_transactions,
        "completed_transactions": waiter.completed_transactions,
        "completion_rate": waiter.completion_rate,
        "average_rating": waiter.average_rating,
        "attitude_rating": waiter.attitude_rating,
        "total_ratings": waiter.total_ratings,
        "jobs_by_status": _status_summary(db, Job, Job.total_amount, Job.waiter_id == waiter.id),
        "rating_breakdown": star_breakdown(db, target),
        "attitude_breakdown": star_breakdown(db, target, "attitude_rating"),
    }


def admin_dashboard(db: Session) -> dict:
    now = datetime.utcnow()
    last_30 = now - timedelta(days=30)

    user_rows = (
        db.query(User.role, User.is_active, User.is_approved, func.count(User.id))
        .group_by(User.role, User.is_active, User.is_approved)
        .all()
    )
    user_counts = {}
    for role, is_active, is_approved, count in user_rows:
        entry = user_counts.setdefault(role, {"count": 0, "active": 0, "approved": 0})
        entry["count"] += int(count)
        if is_active:
            entry["active"] += int(count)
        if is_approved:
            entry["approved"] += int(count)

    pending_approvals = db.query(func.count(User.id)).filter(
        User.role.in_(("vendor", "waiter")),
        User.is_approved.is_(False),
        User.is_active.is_(True),
    ).scalar() or 0

    top_vendors = (
        db.query(VendorProfile)
        .order_by(desc(VendorProfile.average_rating), desc(VendorProfile.total_ratings))
        .limit(5)
        .all()
    )
    top_waiters = (
        db.query(WaiterProfile)
        .order_by(desc(WaiterProfile.average_rating), desc(WaiterProfile.total_ratings))
        .limit(5)
        .all()
    )

    return {
        "user_counts": user_counts,
        "orders_by_status": _status_summary(db, Order, Order.quoted_price),
        "jobs_by_status": _status_summary(db, Job, Job.total_amount),
        "new_users_last_30_days": db.query(func.count(User.id)).filter(User.created_at >= last_30).scalar() or 0,
        "new_orders_last_30_days": db.query(func.count(Order.id)).filter(Order.created_at >= last_30).scalar() or 0,
        "new_jobs_last_30_days": db.query(func.count(Job.id)).filter(Job.created_at >= last_30).scalar() or 0,
        "pending_approvals": int(pending_approvals),
        "total_ratings": db.query(func.count(Rating.id)).filter(Rating.is_active.is_(True)).scalar() or 0,
        "reported_ratings": db.query(func.count(Rating.id)).filter(Rating.is_reported.is_(True)).scalar() or 0,
        "top_vendors": top_vendors,
        "top_waiters": top_waiters,
    }


# --------------------------
# Admin drill-downs
# --------------------------

def _count(db: Session, column, *filters) -> int:
    return int(db.query(func.count(column)).filter(*filters).scalar() or 0)


def user_activity(db: Session, user: User) -> dict:
    """Per-role activity counters shown on the admin user detail page."""
    if user.role == "user":
        return {
            "total_bookings": _count(db, Order.id, Order.user_id == user.id),
            "completed_bookings": _count(db, Order.id, Order.user_id == user.id, Order.status == "completed"),
            "ratings_given": _count(db, Rating.id, Rating.reviewer_id == user.id, Rating.is_active.is_(True)),
        }
    if user.role == "vendor" and user.vendor_profile is not None:
        vendor_id = user.vendor_profile.id
        return {
            "total_orders": _count(db, Order.id, Order.vendor_id == vendor_id),
            "completed_orders": _count(db, Order.id, Order.vendor_id == vendor_id, Order.status == "completed"),
            "total_jobs": _count(db, Job.id, Job.vendor_id == vendor_id),
        }
    if user.role == "waiter" and user.waiter_profile is not None:
        waiter_id = user.waiter_profile.id
        return {
            "total_jobs": _count(db, Job.id, Job.waiter_id == waiter_id),
            "completed_jobs": _count(db, Job.id, Job.waiter_id == waiter_id, Job.status == "completed"),
            "ratings_received": _count(db, Rating.id, Rating.waiter_id == waiter_id, Rating.is_active.is_(True)),
        }
    return {}


def _month_key(year, month) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def platform_analytics(db: Session, now: datetime = None) -> dict:
    """Monthly registrations and bookings over the last year plus platform totals."""
    since = (now or datetime.utcnow()) - timedelta(days=365)
    year = func.extract("year", User.created_at)
    month = func.extract("month", User.created_at)
    registrations = (
        db.query(year, month, User.role, func.count(User.id))
        .filter(User.created_at >= since)
        .group_by(year, month, User.role)
        .order_by(year, month)
        .all()
    )

    year = func.extract("year", Order.created_at)
    month = func.extract("month", Order.created_at)
    bookings = (
        db.query(
            year,
            month,
            func.count(Order.id),
            func.coalesce(func.sum(Order.quoted_price), 0),
            func.coalesce(func.sum(case((Order.status == "completed", 1), else_=0)), 0),
        )
        .filter(Order.created_at >= since)
        .group_by(year, month)
        .order_by(year, month)
        .all()
    )

    rating_count, rating_total = (
        db.query(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0))
        .filter(Rating.is_active.is_(True))
        .one()
    )
    return {
        "monthly_registrations": [
            {"month": _month_key(y, m), "role": role, "count": int(count)}
            for y, m, role, count in registrations
        ],
        "monthly_bookings": [
            {"month": _month_key(y, m), "bookings": int(count), "revenue": float(revenue), "completed": int(done)}
            for y, m, count, revenue, done in bookings
        ],
        "platform_stats": {
            "total_revenue": float(
                db.query(func.coalesce(func.sum(Order.quoted_price), 0))
                .filter(Order.status == "completed")
                .scalar()
            ),
            "total_jobs": _count(db, Job.id),
            "total_ratings": int(rating_count),
            "average_platform_rating": ceil_to_tenths(int(rating_total), int(rating_count)),
        },
    }


def admin_profiles(db: Session, model, *, status: str = None, search: str = None, sort_by: str = "date",
                   order: str = "desc", page: int = 1, per_page: int = 20):
    """Vendor or waiter profiles for moderation, verified or not."""
    q = db.query(model)
    if status:
        q = q.filter(model.is_verified.is_(status == "verified"))
    if search:
        pattern = f"%{search}%"
        if model is VendorProfile:
            q = q.filter(or_(VendorProfile.business_name.ilike(pattern),
                             VendorProfile.business_description.ilike(pattern)))
        else:
            q = q.join(User, WaiterProfile.user_id == User.id).filter(
                or_(User.first_name.ilike(pattern), User.last_name.ilike(pattern), WaiterProfile.bio.ilike(pattern))
            )

    if sort_by == "rating":
        column = model.average_rating
        q = q.order_by(column.asc() if order == "asc" else column.desc(), model.id)
    else:
        q = q.order_by(model.created_at.desc(), model.id.desc())

    total = q.count()
    rows = q.offset((page - 1) * per_page).limit(per_page).all()
    return rows, total
