from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# --- ORDERS ---
class OrderCreate(BaseModel):
    event_type_id: int
    event_title: str = Field(..., min_length=1, max_length=100)
    event_description: Optional[str] = Field(default=None, max_length=1000)
    event_date: date
    start_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    end_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None
    guest_count: int = Field(..., ge=1)
    quoted_price: float = Field(..., ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    special_requests: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., description="confirmed, in-progress, completed or cancelled")
    reason: Optional[str] = Field(default=None, max_length=500, description="Cancellation reason")


class OrderResponse(BaseModel):
    id: int
    user_id: int
    vendor_id: int
    event_type_id: int
    event_title: str
    event_description: Optional[str] = None
    event_date: date
    start_time: str
    end_time: str
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None
    guest_count: int
    special_requests: Optional[str] = None
    quoted_price: float
    final_price: Optional[float] = None
    currency: str
    status: str
    cancellation_reason: Optional[str] = None
    cancelled_by_id: Optional[int] = None
    cancelled_at: Optional[datetime] = None
    is_rated: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: List[OrderResponse]


# --- JOBS ---
class JobCreate(BaseModel):
    order_id: Optional[int] = None
    position: str = Field(..., min_length=1, max_length=50)
    responsibilities: List[str] = []
    instructions: Optional[str] = None
    dresscode: Optional[str] = None
    work_date: date
    start_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    end_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    hourly_rate: float = Field(..., ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class JobStatusUpdate(BaseModel):
    status: str = Field(..., description="accepted, declined, in-progress, completed or cancelled")
    decline_reason: Optional[str] = Field(default=None, max_length=500)


class JobResponse(BaseModel):
    id: int
    vendor_id: int
    waiter_id: int
    order_id: Optional[int] = None
    position: str
    responsibilities: Optional[List[str]] = None
    instructions: Optional[str] = None
    dresscode: Optional[str] = None
    work_date: date
    start_time: str
    end_time: str
    hourly_rate: float
    total_hours: float
    total_amount: float
    currency: str
    status: str
    responded_at: Optional[datetime] = None
    decline_reason: Optional[str] = None
    completed_at: Optional[datetime] = None
    is_rated: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: List[JobResponse]


# --- STATS ---
class StatusSummary(BaseModel):
    count: int
    amount: float


class VendorStatsResponse(BaseModel):
    total_transactions: int
    completed_transactions: int
    completion_rate: int
    average_rating: float
    total_ratings: int
    orders_by_status: Dict[str, StatusSummary]
    rating_breakdown: Dict[int, int]


class WaiterStatsResponse(BaseModel):
    total_transactions: int
    completed_transactions: int
    completion_rate: int
    average_rating: float
    attitude_rating: float
    total_ratings: int
    jobs_by_status: Dict[str, StatusSummary]
    rating_breakdown: Dict[int, int]
    attitude_breakdown: Dict[int, int]
