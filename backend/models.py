# backend/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Text, JSON, Float, Integer, Boolean
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class UTCDateTime(TypeDecorator):
    """DateTime that always comes back timezone-aware in UTC (SQLite drops tzinfo)"""
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    user_type = Column(String, nullable=False)  # consumer, provider
    phone = Column(String, default="")
    address = Column(String, default="")
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


class Service(Base):
    __tablename__ = "services"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    price = Column(Float, nullable=False)
    location = Column(String, default="")
    provider_id = Column(String, nullable=False, index=True)
    provider_name = Column(String, default="")
    images = Column(JSON, default=list)
    availability = Column(String, default="available")
    rating = Column(Float, default=0.0)
    review_count = Column(Integer, default=0)
    created_at = Column(UTCDateTime, nullable=False, index=True)
    updated_at = Column(UTCDateTime, nullable=False)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True, default=new_id)
    service_id = Column(String, nullable=False)
    customer_id = Column(String, nullable=False, index=True)
    provider_id = Column(String, nullable=False, index=True)
    # Snapshot of display fields at creation time
    customer_name = Column(String, default="")
    provider_name = Column(String, default="")
    service_title = Column(String, default="")
    price = Column(Float, default=0.0)
    scheduled_date = Column(String, nullable=False)
    scheduled_time = Column(String, nullable=False)
    address = Column(String, default="")
    phone = Column(String, default="")
    notes = Column(Text, default="")
    status = Column(String, default="pending")  # pending, confirmed, in-progress, completed, cancelled
    created_at = Column(UTCDateTime, nullable=False, index=True)
    updated_at = Column(UTCDateTime, nullable=False)


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(32), primary_key=True, default=new_id)
    chat_id = Column(String, nullable=False, index=True)
    sender_id = Column(String, nullable=False)
    sender_name = Column(String, default="")
    receiver_id = Column(String, default="")
    receiver_name = Column(String, default="")
    content = Column(Text, nullable=False)
    type = Column(String, default="text")
    is_ai = Column(Boolean, default=False)
    timestamp = Column(UTCDateTime, nullable=False, index=True)
    read = Column(Boolean, default=False)
