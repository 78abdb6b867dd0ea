# bloodlink/models.py
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from .database import Base


class BloodType(str, enum.Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class Urgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Role(str, enum.Enum):
    DONOR = "donor"
    PATIENT = "patient"
    ADMIN = "admin"


# higher rank sorts first in discovery listings
URGENCY_RANK = {Urgency.HIGH.value: 3, Urgency.MEDIUM.value: 2, Urgency.LOW.value: 1}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    password_hash = Column(String(128), nullable=False)
    blood_type = Column(String(3), nullable=True)
    phone = Column(String(32), nullable=True)
    location = Column(String(100), nullable=True)
    role = Column(String(16), nullable=False, default=Role.DONOR.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    requests = relationship("BloodRequest", back_populates="owner")


class BloodRequest(Base):
    __tablename__ = "blood_requests"
    __table_args__ = (
        Index("ix_blood_requests_discovery", "blood_type", "urgency", "is_active"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    blood_type = Column(String(3), nullable=False)
    location = Column(String(100), nullable=False)
    contact = Column(String(50), nullable=False)
    urgency = Column(String(8), nullable=False, default=Urgency.MEDIUM.value)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    fulfillment_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owner = relationship("User", back_populates="requests")
