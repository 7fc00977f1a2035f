# eventhire/schemas/admin.py
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime

from eventhire.schemas.booking import StatusSummary
from eventhire.schemas.profile import VendorProfileResponse, WaiterProfileResponse
from eventhire.schemas.rating import RatingModerationItem


class UserListItem(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    is_approved: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminUserDetail(UserListItem):
    phone: Optional[str] = None
    last_login: Optional[datetime] = None
    vendor_profile: Optional[VendorProfileResponse] = None
    waiter_profile: Optional[WaiterProfileResponse] = None
    activity: Dict[str, int] = {}


class UserListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: List[UserListItem]


class RoleCounts(BaseModel):
    count: int
    active: int
    approved: int


class TopPerformer(BaseModel):
    id: int
    user_id: int
    average_rating: float
    total_ratings: int
    completed_transactions: int

    class Config:
        from_attributes = True


class AdminDashboardResponse(BaseModel):
    user_counts: Dict[str, RoleCounts]
    orders_by_status: Dict[str, StatusSummary]
    jobs_by_status: Dict[str, StatusSummary]
    new_users_last_30_days: int
    new_orders_last_30_days: int
    new_jobs_last_30_days: int
    pending_approvals: int
    total_ratings: int
    reported_ratings: int
    top_vendors: List[TopPerformer]
    top_waiters: List[TopPerformer]


class ReportedRatingsResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: List[RatingModerationItem]


class AggregateResponse(BaseModel):
    kind: str
    profile_id: int
    average_rating: float
    attitude_rating: Optional[float] = None
    total_ratings: int


# --- analytics ---
class MonthlyRegistrations(BaseModel):
    month: str
    role: str
    count: int


class MonthlyBookings(BaseModel):
    month: str
    bookings: int
    revenue: float
    completed: int


class PlatformStats(BaseModel):
    total_revenue: float
    total_jobs: int
    total_ratings: int
    average_platform_rating: float


class AnalyticsResponse(BaseModel):
    monthly_registrations: List[MonthlyRegistrations]
    monthly_bookings: List[MonthlyBookings]
    platform_stats: PlatformStats
