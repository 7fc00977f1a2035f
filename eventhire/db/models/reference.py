# eventhire/db/models/reference.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Table, ForeignKey, func
from sqlalchemy.orm import relationship
from eventhire.db.base import Base

event_type_categories = Table(
    "event_type_categories",
    Base.metadata,
    Column("event_type_id", Integer, ForeignKey("event_types.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    """Vendor service category (catering, decoration, ...)."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    icon = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    vendors = relationship(
        "VendorProfile",
        secondary="vendor_categories",
        back_populates="categories",
        lazy="selectin",
    )


class Expertise(Base):
    """Waiter skill tag."""
    __tablename__ = "expertise"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    icon = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    waiters = relationship(
        "WaiterProfile",
        secondary="waiter_expertise",
        back_populates="expertise",
        lazy="selectin",
    )


class EventType(Base):
    __tablename__ = "event_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    icon = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    suggested_categories = relationship("Category", secondary=event_type_categories, lazy="selectin")
