# eventhire/db/models/user.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from eventhire.db.base import Base

ROLES = ("user", "vendor", "waiter", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user", server_default="user", index=True)

    # Account status
    is_active = Column(Boolean, nullable=False, default=True)
    # plain users are auto-approved, vendors/waiters wait for an admin
    is_approved = Column(Boolean, nullable=False, default=False, index=True)
    last_login = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor_profile = relationship("VendorProfile", back_populates="user", uselist=False)
    waiter_profile = relationship("WaiterProfile", back_populates="user", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def profile(self):
        if self.role == "vendor":
            return self.vendor_profile
        if self.role == "waiter":
            return self.waiter_profile
        return None
