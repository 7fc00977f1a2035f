# eventhire/db/models/booking.py
from sqlalchemy import Column, Integer, String, ForeignKey, Date, Float, DateTime, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from eventhire.db.base import Base


class Order(Base):
    """Booking placed by a user with a vendor."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendor_profiles.id"), nullable=False, index=True)
    event_type_id = Column(Integer, ForeignKey("event_types.id"), nullable=False)

    # event details
    event_title = Column(String(100), nullable=False)
    event_description = Column(String(1000), nullable=True)
    event_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(8), nullable=False)   # literal HH:MM
    end_time = Column(String(8), nullable=False)
    venue_name = Column(String, nullable=True)
    venue_address = Column(String, nullable=True)
    guest_count = Column(Integer, nullable=False)
    special_requests = Column(String, nullable=True)

    # pricing
    quoted_price = Column(Float, nullable=False)
    final_price = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False, default="NGN")

    status = Column(String, nullable=False, default="pending", index=True)

    cancellation_reason = Column(String, nullable=True)
    cancelled_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    is_rated = Column(Boolean, nullable=False, default=False)

    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    # relationships
    user = relationship("User", foreign_keys=[user_id])
    vendor = relationship("VendorProfile", foreign_keys=[vendor_id])
    event_type = relationship("EventType", foreign_keys=[event_type_id])
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])


class Job(Base):
    """Work offer sent by a vendor to a waiter."""
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)

    vendor_id = Column(Integer, ForeignKey("vendor_profiles.id"), nullable=False, index=True)
    waiter_id = Column(Integer, ForeignKey("waiter_profiles.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)

    position = Column(String(50), nullable=False)
    responsibilities = Column(JSON, nullable=True)
    instructions = Column(String, nullable=True)
    dresscode = Column(String, nullable=True)

    # schedule
    work_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)

    # compensation, total_* are fixed at creation
    hourly_rate = Column(Float, nullable=False)
    total_hours = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="NGN")

    status = Column(String, nullable=False, default="pending", index=True)

    responded_at = Column(DateTime, nullable=True)
    decline_reason = Column(String, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    is_rated = Column(Boolean, nullable=False, default=False)

    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    vendor = relationship("VendorProfile", foreign_keys=[vendor_id])
    waiter = relationship("WaiterProfile", foreign_keys=[waiter_id])
    order = relationship("Order", foreign_keys=[order_id])
