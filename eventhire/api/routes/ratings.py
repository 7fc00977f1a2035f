# eventhire/api/routes/ratings.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from eventhire.db.base import get_db
from eventhire.db.models.rating import RatingTarget
from eventhire.db.models.user import User
from eventhire.schemas.rating import RatingListResponse, RatingReport, RatingRespond, RatingResponse
from eventhire.core.security import get_current_user
from eventhire.services import rating as rating_service

router = APIRouter(prefix="/ratings", tags=["ratings"])


def _rating_page(db: Session, target: RatingTarget, page: int, limit: int,
                 stars: Optional[int], sort_by: str, order: str) -> dict:
    profile = rating_service.load_profile(db, target)
    items, total = rating_service.list_ratings(
        db, target, page=page, limit=limit, stars=stars, sort_by=sort_by, order=order
    )
    result = {
        "total": total,
        "page": page,
        "limit": limit,
        "items": items,
        "rating_breakdown": rating_service.star_breakdown(db, target),
        "average_rating": profile.average_rating,
        "total_ratings": profile.total_ratings,
    }
    if target.is_waiter:
        result["attitude_breakdown"] = rating_service.star_breakdown(db, target, field="attitude_rating")
        result["attitude_rating"] = profile.attitude_rating
    return result


@router.get("/vendor/{vendor_id}", response_model=RatingListResponse)
def vendor_ratings(
    vendor_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    rating: Optional[int] = Query(None, ge=1, le=5),
    sort_by: str = Query("date", pattern="^(date|rating)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    return _rating_page(db, RatingTarget.vendor(vendor_id), page, limit, rating, sort_by, order)


@router.get("/waiter/{waiter_id}", response_model=RatingListResponse)
def waiter_ratings(
    waiter_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    rating: Optional[int] = Query(None, ge=1, le=5),
    sort_by: str = Query("date", pattern="^(date|rating)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    return _rating_page(db, RatingTarget.waiter(waiter_id), page, limit, rating, sort_by, order)


@router.get("/{rating_id}", response_model=RatingResponse)
def get_rating(rating_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return rating_service.get_rating_for_viewer(db, rating_id, current_user)


@router.delete("/{rating_id}")
def retract_rating(rating_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    rating_service.retract_rating(db, rating_id, current_user)
    return {"message": "Rating deleted successfully"}


@router.post("/{rating_id}/respond", response_model=RatingResponse)
def respond_to_rating(
    rating_id: int,
    payload: RatingRespond,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return rating_service.respond_to_rating(db, rating_id, current_user, payload.message)


@router.post("/{rating_id}/report")
def report_rating(
    rating_id: int,
    payload: Optional[RatingReport] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rating_service.report_rating(db, rating_id, payload.reason if payload else None)
    return {"message": "Rating reported successfully. Our team will review it."}
