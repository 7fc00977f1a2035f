# eventhire/db/models/rating.py
from dataclasses import dataclass

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, CheckConstraint, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from eventhire.db.base import Base
from eventhire.db.models.booking import Order, Job
from eventhire.db.models.profile import VendorProfile, WaiterProfile

BREAKDOWN_FIELDS = ("quality", "punctuality", "communication", "value", "professionalism")


@dataclass(frozen=True)
class RatingTarget:
    """
    Who a rating is about: Vendor(profile_id) or Waiter(profile_id).
    The kind also fixes which transaction type may back the rating
    (vendor <-> Order, waiter <-> Job).
    """
    kind: str
    profile_id: int

    VENDOR = "vendor"
    WAITER = "waiter"

    def __post_init__(self):
        if self.kind not in (self.VENDOR, self.WAITER):
            raise ValueError(f"Unknown rating target kind: {self.kind}")

    @classmethod
    def vendor(cls, profile_id: int) -> "RatingTarget":
        return cls(cls.VENDOR, profile_id)

    @classmethod
    def waiter(cls, profile_id: int) -> "RatingTarget":
        return cls(cls.WAITER, profile_id)

    @property
    def is_waiter(self) -> bool:
        return self.kind == self.WAITER

    @property
    def profile_model(self):
        return WaiterProfile if self.is_waiter else VendorProfile

    @property
    def transaction_model(self):
        return Job if self.is_waiter else Order

    @property
    def rating_column(self):
        return Rating.waiter_id if self.is_waiter else Rating.vendor_id

    @property
    def transaction_column(self):
        return Rating.job_id if self.is_waiter else Rating.order_id


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        # exactly one target, paired with the matching transaction type
        CheckConstraint(
            "(vendor_id IS NOT NULL AND order_id IS NOT NULL AND waiter_id IS NULL AND job_id IS NULL)"
            " OR (waiter_id IS NOT NULL AND job_id IS NOT NULL AND vendor_id IS NULL AND order_id IS NULL)",
            name="ck_ratings_single_target",
        ),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_rating_range"),
        CheckConstraint(
            "attitude_rating IS NULL OR attitude_rating BETWEEN 1 AND 5",
            name="ck_ratings_attitude_range",
        ),
        CheckConstraint("attitude_rating IS NULL OR waiter_id IS NOT NULL", name="ck_ratings_attitude_waiter_only"),
        # one active rating per (reviewer, target, transaction)
        Index(
            "uq_ratings_active_vendor_order",
            "reviewer_id", "vendor_id", "order_id",
            unique=True,
            sqlite_where=text("is_active AND vendor_id IS NOT NULL"),
            postgresql_where=text("is_active AND vendor_id IS NOT NULL"),
        ),
        Index(
            "uq_ratings_active_waiter_job",
            "reviewer_id", "waiter_id", "job_id",
            unique=True,
            sqlite_where=text("is_active AND waiter_id IS NOT NULL"),
            postgresql_where=text("is_active AND waiter_id IS NOT NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    vendor_id = Column(Integer, ForeignKey("vendor_profiles.id"), nullable=True, index=True)
    waiter_id = Column(Integer, ForeignKey("waiter_profiles.id"), nullable=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True)

    rating = Column(Integer, nullable=False)            # 1..5
    attitude_rating = Column(Integer, nullable=True)    # 1..5, waiters only
    review = Column(String(500), nullable=True)

    # optional detailed breakdown, each 1..5
    quality = Column(Integer, nullable=True)
    punctuality = Column(Integer, nullable=True)
    communication = Column(Integer, nullable=True)
    value = Column(Integer, nullable=True)
    professionalism = Column(Integer, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    is_reported = Column(Boolean, nullable=False, default=False)
    report_reason = Column(String, nullable=True)

    response_message = Column(String(500), nullable=True)
    responded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    reviewer = relationship("User", foreign_keys=[reviewer_id])
    vendor = relationship("VendorProfile", foreign_keys=[vendor_id])
    waiter = relationship("WaiterProfile", foreign_keys=[waiter_id])
    order = relationship("Order", foreign_keys=[order_id])
    job = relationship("Job", foreign_keys=[job_id])

    @classmethod
    def for_target(cls, target: RatingTarget, reviewer_id: int, transaction_id: int, **fields) -> "Rating":
        if target.is_waiter:
            return cls(reviewer_id=reviewer_id, waiter_id=target.profile_id, job_id=transaction_id, **fields)
        return cls(reviewer_id=reviewer_id, vendor_id=target.profile_id, order_id=transaction_id, **fields)

    @property
    def target(self) -> RatingTarget:
        if self.waiter_id is not None:
            return RatingTarget.waiter(self.waiter_id)
        return RatingTarget.vendor(self.vendor_id)

    @property
    def transaction_id(self) -> int:
        return self.job_id if self.waiter_id is not None else self.order_id

    @property
    def rated_profile(self):
        return self.waiter if self.waiter_id is not None else self.vendor

    @property
    def breakdown(self) -> dict:
        return {name: getattr(self, name) for name in BREAKDOWN_FIELDS}

    @property
    def overall_breakdown_rating(self):
        scores = [s for s in self.breakdown.values() if s]
        if not scores:
            return None
        return sum(scores) / len(scores)
