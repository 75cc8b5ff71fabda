# backend/schemas.py
from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, List, Any, Literal

UserType = Literal["consumer", "provider"]
BookingStatus = Literal["pending", "confirmed", "in-progress", "completed", "cancelled"]


class CamelModel(BaseModel):
    """Wire format is camelCase; Python attributes stay snake_case"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class DeleteResponse(BaseModel):
    message: str


# User schemas
class UserCreate(CamelModel):
    # Required fields are checked by the service so that a missing field
    # reports "Missing required fields" rather than a parser error
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    user_type: Optional[UserType] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    user_type: Optional[UserType] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    user_type: str
    phone: str = ""
    address: str = ""
    created_at: datetime
    updated_at: datetime


# Service (offering) schemas
class ServiceCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    location: Optional[str] = None
    provider_id: Optional[str] = None
    provider_name: Optional[str] = None
    images: Optional[List[str]] = None
    availability: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5, allow_inf_nan=False)
    review_count: Optional[int] = Field(None, ge=0)


class ServiceUpdate(ServiceCreate):
    pass


class ServiceFilters(CamelModel):
    category: Optional[str] = None
    provider_id: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    rating: Optional[float] = None
    location: Optional[str] = None


class ServiceResponse(CamelModel):
    id: str
    title: str
    description: str
    category: str
    price: float
    location: str = ""
    provider_id: str
    provider_name: str = ""
    images: List[str] = []
    availability: str = "available"
    rating: float = 0
    review_count: int = 0
    created_at: datetime
    updated_at: datetime


# Booking schemas
class BookingCreate(CamelModel):
    service_id: Optional[str] = None
    customer_id: Optional[str] = None
    provider_id: Optional[str] = None
    customer_name: Optional[str] = None
    provider_name: Optional[str] = None
    service_title: Optional[str] = None
    # Parsed leniently by the service: anything non-numeric becomes 0
    price: Optional[Any] = None
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[BookingStatus] = None


class BookingUpdate(CamelModel):
    service_id: Optional[str] = None
    customer_id: Optional[str] = None
    provider_id: Optional[str] = None
    customer_name: Optional[str] = None
    provider_name: Optional[str] = None
    service_title: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[BookingStatus] = None


class BookingResponse(CamelModel):
    id: str
    service_id: str
    customer_id: str
    provider_id: str
    customer_name: str = ""
    provider_name: str = ""
    service_title: str = ""
    price: float
    scheduled_date: str
    scheduled_time: str
    address: str = ""
    phone: str = ""
    notes: str = ""
    status: str
    created_at: datetime
    updated_at: datetime


# Message schemas
class MessageCreate(CamelModel):
    chat_id: Optional[str] = None
    sender_id: Optional[str] = None
    sender_name: Optional[str] = None
    receiver_id: Optional[str] = None
    receiver_name: Optional[str] = None
    content: Optional[str] = None
    type: str = "text"
    is_ai: bool = Field(False, alias="isAI")


class MessageResponse(CamelModel):
    id: str
    chat_id: str
    sender_id: str
    sender_name: str = ""
    receiver_id: str = ""
    receiver_name: str = ""
    content: str
    type: str
    is_ai: bool = Field(False, alias="isAI")
    timestamp: datetime
    read: bool


class AssistantTurnRequest(CamelModel):
    sender_id: Optional[str] = None
    sender_name: Optional[str] = None
    content: Optional[str] = None
    context: str = "general"
    chat_id: str = "ai-assistant"


# Assistant schemas
class ChatRequest(BaseModel):
    message: Optional[str] = None
    context: str = "general"


class ChatResponse(BaseModel):
    response: str
    timestamp: datetime


class SuggestRequest(BaseModel):
    description: Optional[str] = None
    location: str = ""


class SuggestResponse(BaseModel):
    suggestions: str
    timestamp: datetime


class HealthResponse(CamelModel):
    status: str
    demo_mode: bool
    datastore: str
    ai_status: str
    timestamp: datetime
