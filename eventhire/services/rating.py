# eventhire/services/rating.py
"""
Rating & aggregation engine.

A rating write and the recomputation of the rated profile's aggregate
share one commit. ``recompute_aggregate`` always rebuilds the numbers
from the active ratings, so calling it again (e.g. after a failed
commit) is harmless.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from eventhire.core.errors import (
    AggregateRecomputeError,
    AlreadyReported,
    AlreadyResponded,
    ConcurrentUpdate,
    DuplicateRating,
    InvalidRatingTarget,
    InvalidScore,
    NotAuthorized,
    NotEligible,
    NotFound,
)
from eventhire.db.models.booking import Job, Order
from eventhire.db.models.profile import VendorProfile
from eventhire.db.models.rating import BREAKDOWN_FIELDS, Rating, RatingTarget
from eventhire.db.models.user import User
from eventhire.services.statistics import ceil_to_tenths

logger = logging.getLogger(__name__)

COMPLETED = "completed"
DEFAULT_REPORT_REASON = "Inappropriate content"


def _profile_query(db: Session, target: RatingTarget, lock: bool = False):
    model = target.profile_model
    query = db.query(model).filter(model.id == target.profile_id)
    if lock:
        # row lock serialises aggregate writers on the same profile
        query = query.with_for_update().populate_existing()
    return query


def load_profile(db: Session, target: RatingTarget, lock: bool = False):
    profile = _profile_query(db, target, lock=lock).first()
    if not profile:
        raise NotFound(f"{target.kind.capitalize()} not found")
    return profile


# --------------------------
# Aggregates
# --------------------------

def _active_ratings(db: Session, target: RatingTarget):
    return db.query(Rating).filter(target.rating_column == target.profile_id, Rating.is_active.is_(True))


def _apply_aggregate(db: Session, target: RatingTarget, profile) -> None:
    count, total = (
        _active_ratings(db, target)
        .with_entities(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0))
        .one()
    )
    profile.total_ratings = int(count)
    profile.average_rating = ceil_to_tenths(int(total), int(count))

    if target.is_waiter:
        att_count, att_total = (
            _active_ratings(db, target)
            .filter(Rating.attitude_rating.isnot(None))
            .with_entities(func.count(Rating.id), func.coalesce(func.sum(Rating.attitude_rating), 0))
            .one()
        )
        profile.attitude_rating = ceil_to_tenths(int(att_total), int(att_count))


def recompute_aggregate(db: Session, target: RatingTarget):
    """
    Rebuild average_rating / attitude_rating / total_ratings for ``target``
    from its active ratings and commit. Raises AggregateRecomputeError if
    storage fails; the caller may simply call it again.
    """
    profile = load_profile(db, target, lock=True)
    try:
        _apply_aggregate(db, target, profile)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Aggregate recompute failed for %s %s: %s", target.kind, target.profile_id, exc)
        raise AggregateRecomputeError(
            f"Could not update rating statistics for {target.kind} {target.profile_id}"
        ) from exc
    db.refresh(profile)
    logger.info(
        "Recomputed %s %s: average=%s total=%s",
        target.kind, target.profile_id, profile.average_rating, profile.total_ratings,
    )
    return profile


# --------------------------
# Submission
# --------------------------

def _owns_transaction(target: RatingTarget, txn, reviewer: User) -> bool:
    if target.is_waiter:
        return txn.vendor.user_id == reviewer.id
    return txn.user_id == reviewer.id


def _transaction_target_id(target: RatingTarget, txn) -> int:
    return txn.waiter_id if target.is_waiter else txn.vendor_id


def _find_unrated_completed(db: Session, reviewer: User, target: RatingTarget):
    """Most recent completed transaction between reviewer and target without an active rating."""
    model = target.transaction_model
    q = db.query(model).filter(model.status == COMPLETED)
    if target.is_waiter:
        q = q.join(VendorProfile, Job.vendor_id == VendorProfile.id).filter(
            Job.waiter_id == target.profile_id, VendorProfile.user_id == reviewer.id
        )
    else:
        q = q.filter(Order.vendor_id == target.profile_id, Order.user_id == reviewer.id)

    rated = select(target.transaction_column).where(
        Rating.reviewer_id == reviewer.id,
        target.rating_column == target.profile_id,
        Rating.is_active.is_(True),
    )
    return q.filter(model.id.notin_(rated)).order_by(model.updated_at.desc(), model.id.desc()).first()


def _eligible_transaction(db: Session, reviewer: User, target: RatingTarget, transaction_id: Optional[int]):
    label = "vendors you have booked and completed services with" if not target.is_waiter \
        else "waiters you have hired and completed jobs with"

    if transaction_id is None:
        txn = _find_unrated_completed(db, reviewer, target)
        if txn is None:
            raise NotEligible(f"You can only rate {label}")
        return txn

    model = target.transaction_model
    txn = db.query(model).filter(model.id == transaction_id).first()
    if txn is None:
        raise NotFound(f"{model.__name__} not found")
    if _transaction_target_id(target, txn) != target.profile_id or not _owns_transaction(target, txn, reviewer):
        raise NotEligible(f"You can only rate {label}")
    if txn.status != COMPLETED:
        raise NotEligible(f"You can only rate {label}")
    return txn


def _check_score(name: str, value: int) -> None:
    if not 1 <= value <= 5:
        raise InvalidScore(f"{name} must be between 1 and 5")


def submit_rating(db: Session, reviewer: User, target: RatingTarget, score: int, *,
                  transaction_id: Optional[int] = None, attitude_rating: Optional[int] = None,
                  review: Optional[str] = None, breakdown: Optional[dict] = None) -> Rating:
    _check_score("rating", score)
    if attitude_rating is not None:
        _check_score("attitude_rating", attitude_rating)
    if not target.is_waiter and attitude_rating is not None:
        raise InvalidRatingTarget("Attitude rating applies to waiters only")
    breakdown = {k: v for k, v in (breakdown or {}).items() if v is not None}
    unknown = set(breakdown) - set(BREAKDOWN_FIELDS)
    if unknown:
        raise InvalidRatingTarget(f"Unknown breakdown fields: {', '.join(sorted(unknown))}")
    for name, value in breakdown.items():
        _check_score(name, value)

    profile = load_profile(db, target, lock=True)
    txn = _eligible_transaction(db, reviewer, target, transaction_id)

    existing = (
        _active_ratings(db, target)
        .filter(Rating.reviewer_id == reviewer.id, target.transaction_column == txn.id)
        .first()
    )
    if existing:
        raise DuplicateRating(f"You have already rated this {target.kind} for this {'job' if target.is_waiter else 'booking'}")

    rating = Rating.for_target(
        target,
        reviewer_id=reviewer.id,
        transaction_id=txn.id,
        rating=score,
        attitude_rating=attitude_rating,
        review=review,
        **breakdown,
    )
    db.add(rating)
    txn.is_rated = True

    try:
        # the partial unique index settles concurrent submissions
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateRating(f"You have already rated this {target.kind} for this transaction")
    except StaleDataError:
        logger.warning("%s %s changed while rating was submitted", target.transaction_model.__name__, txn.id)
        db.rollback()
        raise ConcurrentUpdate(
            f"{target.transaction_model.__name__} was modified by another request, please retry"
        )

    _apply_aggregate(db, target, profile)
    db.commit()
    db.refresh(rating)

    logger.info(
        "Rating %s by user %s on %s %s (%s %s): %s",
        rating.id, reviewer.id, target.kind, target.profile_id,
        target.transaction_model.__name__.lower(), txn.id, score,
    )
    return rating


# --------------------------
# Lifecycle
# --------------------------

def get_rating(db: Session, rating_id: int) -> Rating:
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if not rating:
        raise NotFound("Rating not found")
    return rating


def _rated_party_user_id(rating: Rating) -> int:
    return rating.rated_profile.user_id


def get_rating_for_viewer(db: Session, rating_id: int, viewer: User) -> Rating:
    """Reviewer, rated party and admins may view a rating, retracted or not."""
    rating = get_rating(db, rating_id)
    if viewer.role == "admin" or rating.reviewer_id == viewer.id or _rated_party_user_id(rating) == viewer.id:
        return rating
    raise NotAuthorized("Not authorized to view this rating")


def retract_rating(db: Session, rating_id: int, actor: User) -> Rating:
    rating = get_rating(db, rating_id)
    if actor.role != "admin" and rating.reviewer_id != actor.id:
        raise NotAuthorized("Not authorized to delete this rating")

    target = rating.target
    profile = load_profile(db, target, lock=True)
    rating.is_active = False
    db.flush()
    _apply_aggregate(db, target, profile)
    db.commit()
    db.refresh(rating)

    logger.info("Rating %s retracted by user %s", rating.id, actor.id)
    return rating


def respond_to_rating(db: Session, rating_id: int, responder: User, message: str) -> Rating:
    rating = get_rating(db, rating_id)
    if _rated_party_user_id(rating) != responder.id:
        raise NotAuthorized("Not authorized to respond to this rating")
    if rating.response_message:
        raise AlreadyResponded("You have already responded to this rating")

    rating.response_message = message
    rating.responded_at = datetime.utcnow()
    db.commit()
    db.refresh(rating)
    logger.info("Rating %s answered by user %s", rating.id, responder.id)
    return rating


def report_rating(db: Session, rating_id: int, reason: Optional[str] = None) -> Rating:
    rating = get_rating(db, rating_id)
    if rating.is_reported:
        raise AlreadyReported("Rating is already reported")

    rating.is_reported = True
    rating.report_reason = reason or DEFAULT_REPORT_REASON
    db.commit()
    db.refresh(rating)
    logger.info("Rating %s reported: %s", rating.id, rating.report_reason)
    return rating


# --------------------------
# Queries
# --------------------------

SORT_COLUMNS = {
    "date": Rating.created_at,
    "rating": Rating.rating,
}


def list_ratings(db: Session, target: RatingTarget, *, page: int = 1, limit: int = 10,
                 stars: Optional[int] = None, sort_by: str = "date", order: str = "desc"):
    q = _active_ratings(db, target)
    if stars is not None:
        q = q.filter(Rating.rating == stars)
    total = q.count()

    column = SORT_COLUMNS.get(sort_by, Rating.created_at)
    column = column.asc() if order == "asc" else column.desc()
    rows = q.order_by(column, Rating.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def star_breakdown(db: Session, target: RatingTarget, field: str = "rating") -> dict:
    column = getattr(Rating, field)
    rows = (
        _active_ratings(db, target)
        .filter(column.isnot(None))
        .with_entities(column, func.count(Rating.id))
        .group_by(column)
        .all()
    )
    counts = {star: 0 for star in range(5, 0, -1)}
    for star, count in rows:
        counts[int(star)] = int(count)
    return counts


def reported_ratings(db: Session, page: int = 1, per_page: int = 20):
    q = db.query(Rating).filter(Rating.is_reported.is_(True))
    total = q.count()
    rows = q.order_by(Rating.updated_at.desc(), Rating.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return rows, total
