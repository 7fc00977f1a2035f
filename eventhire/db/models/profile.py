# eventhire/db/models/profile.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Table, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from eventhire.db.base import Base

# association tables
vendor_categories = Table(
    "vendor_categories",
    Base.metadata,
    Column("vendor_id", Integer, ForeignKey("vendor_profiles.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)

waiter_expertise = Table(
    "waiter_expertise",
    Base.metadata,
    Column("waiter_id", Integer, ForeignKey("waiter_profiles.id", ondelete="CASCADE"), primary_key=True),
    Column("expertise_id", Integer, ForeignKey("expertise.id", ondelete="CASCADE"), primary_key=True),
)


def _completion_rate(total: int, completed: int) -> int:
    if not total:
        return 0
    return round(completed / total * 100)


class VendorProfile(Base):
    """Service-provider profile, 1:1 with a vendor identity."""
    __tablename__ = "vendor_profiles"
    __table_args__ = (
        CheckConstraint("average_rating >= 0 AND average_rating <= 5", name="ck_vendor_average_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    business_name = Column(String(100), nullable=True)
    business_description = Column(String(1000), nullable=True)
    min_price = Column(Float, nullable=True)
    max_price = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False, default="NGN")
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    years_of_experience = Column(Integer, nullable=True)

    is_available = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    # maintained by the rating engine only
    average_rating = Column(Float, nullable=False, default=0)
    total_ratings = Column(Integer, nullable=False, default=0)

    # maintained by the booking engine only
    total_transactions = Column(Integer, nullable=False, default=0)
    completed_transactions = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="vendor_profile")
    categories = relationship(
        "Category",
        secondary=vendor_categories,
        back_populates="vendors",
        lazy="selectin",
    )

    @property
    def completion_rate(self) -> int:
        return _completion_rate(self.total_transactions, self.completed_transactions)


class WaiterProfile(Base):
    """Gig-worker profile, 1:1 with a waiter identity."""
    __tablename__ = "waiter_profiles"
    __table_args__ = (
        CheckConstraint("average_rating >= 0 AND average_rating <= 5", name="ck_waiter_average_rating"),
        CheckConstraint("attitude_rating >= 0 AND attitude_rating <= 5", name="ck_waiter_attitude_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    bio = Column(String(500), nullable=True)
    years_of_experience = Column(Integer, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False, default="NGN")
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)

    is_available = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    average_rating = Column(Float, nullable=False, default=0)
    attitude_rating = Column(Float, nullable=False, default=0)
    total_ratings = Column(Integer, nullable=False, default=0)

    total_transactions = Column(Integer, nullable=False, default=0)
    completed_transactions = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="waiter_profile")
    expertise = relationship(
        "Expertise",
        secondary=waiter_expertise,
        back_populates="waiters",
        lazy="selectin",
    )

    @property
    def completion_rate(self) -> int:
        return _completion_rate(self.total_transactions, self.completed_transactions)
