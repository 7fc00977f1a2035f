# eventhire/schemas/profile.py
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import List, Optional

from eventhire.schemas.reference import ReferenceResponse


class OwnerSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    is_approved: bool

    class Config:
        from_attributes = True


# --- VENDOR ---
class VendorProfileUpdate(BaseModel):
    business_name: Optional[str] = Field(default=None, max_length=100)
    business_description: Optional[str] = Field(default=None, max_length=1000)
    category_ids: Optional[List[int]] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    city: Optional[str] = None
    state: Optional[str] = None
    years_of_experience: Optional[int] = Field(default=None, ge=0)
    is_available: Optional[bool] = None

    @model_validator(mode="after")
    def check_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price cannot be greater than max_price")
        return self


class VendorProfileResponse(BaseModel):
    id: int
    user_id: int
    user: OwnerSummary
    business_name: Optional[str] = None
    business_description: Optional[str] = None
    categories: List[ReferenceResponse] = []
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    currency: str
    city: Optional[str] = None
    state: Optional[str] = None
    years_of_experience: Optional[int] = None
    is_available: bool
    is_verified: bool
    average_rating: float
    total_ratings: int
    total_transactions: int
    completed_transactions: int
    completion_rate: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- WAITER ---
class WaiterProfileUpdate(BaseModel):
    bio: Optional[str] = Field(default=None, max_length=500)
    expertise_ids: Optional[List[int]] = None
    years_of_experience: Optional[int] = Field(default=None, ge=0)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    city: Optional[str] = None
    state: Optional[str] = None
    is_available: Optional[bool] = None


class WaiterProfileResponse(BaseModel):
    id: int
    user_id: int
    user: OwnerSummary
    bio: Optional[str] = None
    expertise: List[ReferenceResponse] = []
    years_of_experience: Optional[int] = None
    hourly_rate: Optional[float] = None
    currency: str
    city: Optional[str] = None
    state: Optional[str] = None
    is_available: bool
    is_verified: bool
    average_rating: float
    attitude_rating: float
    total_ratings: int
    total_transactions: int
    completed_transactions: int
    completion_rate: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VendorListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: List[VendorProfileResponse]


class WaiterListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: List[WaiterProfileResponse]
