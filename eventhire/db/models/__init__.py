# eventhire/db/models/__init__.py
# import every model so Base.metadata is complete before create_all()
from eventhire.db.models.user import User
from eventhire.db.models.reference import Category, Expertise, EventType
from eventhire.db.models.profile import VendorProfile, WaiterProfile
from eventhire.db.models.booking import Order, Job
from eventhire.db.models.rating import Rating, RatingTarget

__all__ = [
    "User",
    "Category",
    "Expertise",
    "EventType",
    "VendorProfile",
    "WaiterProfile",
    "Order",
    "Job",
    "Rating",
    "RatingTarget",
]
