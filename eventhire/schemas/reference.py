# eventhire/schemas/reference.py
from pydantic import BaseModel, Field
from typing import List, Optional


class ReferenceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    icon: Optional[str] = None


class ReferenceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    icon: Optional[str] = None
    is_active: Optional[bool] = None


class ReferenceResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class EventTypeCreate(ReferenceCreate):
    suggested_category_ids: List[int] = []


class EventTypeUpdate(ReferenceUpdate):
    suggested_category_ids: Optional[List[int]] = None


class EventTypeResponse(ReferenceResponse):
    suggested_categories: List[ReferenceResponse] = []
