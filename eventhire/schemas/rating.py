# eventhire/schemas/rating.py
from pydantic import BaseModel, Field, conint
from typing import Dict, List, Optional
from datetime import datetime


class RatingBreakdown(BaseModel):
    quality: Optional[conint(ge=1, le=5)] = None
    punctuality: Optional[conint(ge=1, le=5)] = None
    communication: Optional[conint(ge=1, le=5)] = None
    value: Optional[conint(ge=1, le=5)] = None
    professionalism: Optional[conint(ge=1, le=5)] = None

    class Config:
        from_attributes = True


class RatingCreate(BaseModel):
    transaction_id: Optional[int] = Field(
        default=None,
        description="Order id (vendor) or job id (waiter); defaults to the latest unrated completed one",
    )
    rating: conint(ge=1, le=5) = Field(..., description="Rating 1-5")
    attitude_rating: Optional[conint(ge=1, le=5)] = Field(default=None, description="Waiters only")
    review: Optional[str] = Field(default=None, max_length=500)
    breakdown: Optional[RatingBreakdown] = None


class RatingRespond(BaseModel):
    message: str = Field(..., min_length=1, max_length=500)


class RatingReport(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class RatingResponse(BaseModel):
    id: int
    reviewer_id: int
    vendor_id: Optional[int] = None
    waiter_id: Optional[int] = None
    order_id: Optional[int] = None
    job_id: Optional[int] = None
    rating: int
    attitude_rating: Optional[int] = None
    review: Optional[str] = None
    breakdown: RatingBreakdown
    overall_breakdown_rating: Optional[float] = None
    is_active: bool
    is_reported: bool
    response_message: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RatingListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: List[RatingResponse]
    rating_breakdown: Dict[int, int]
    attitude_breakdown: Optional[Dict[int, int]] = None
    average_rating: float
    attitude_rating: Optional[float] = None
    total_ratings: int


class RatingModerationItem(RatingResponse):
    report_reason: Optional[str] = None
