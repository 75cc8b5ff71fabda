# backend/booking_service.py
import logging
import math
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from errors import ValidationError, NotFoundError
from models import Booking, utcnow
from schemas import BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)


def parse_price(value: Any) -> float:
    """Lenient decimal parse; anything missing or non-numeric is 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if math.isfinite(price) else 0.0


class BookingService:
    """Bookings backed by the ``bookings`` table"""

    def __init__(self, db: Session):
        self.db = db

    def list(
        self,
        customer_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[Booking]:
        if not customer_id and not provider_id:
            raise ValidationError("userId or providerId is required")

        query = self.db.query(Booking)
        if customer_id:
            query = query.filter(Booking.customer_id == customer_id)
        if provider_id:
            query = query.filter(Booking.provider_id == provider_id)
        if status:
            query = query.filter(Booking.status == status)

        return query.order_by(Booking.created_at.desc()).all()

    def get(self, booking_id: str) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def create(self, data: BookingCreate) -> Booking:
        if (not data.service_id or not data.customer_id or not data.provider_id
                or not data.scheduled_date or not data.scheduled_time):
            raise ValidationError("Missing required fields")

        now = utcnow()
        booking = Booking(
            service_id=data.service_id,
            customer_id=data.customer_id,
            provider_id=data.provider_id,
            customer_name=data.customer_name or "",
            provider_name=data.provider_name or "",
            service_title=data.service_title or "",
            price=parse_price(data.price),
            scheduled_date=data.scheduled_date,
            scheduled_time=data.scheduled_time,
            address=data.address or "",
            phone=data.phone or "",
            notes=data.notes or "",
            status=data.status or "pending",
            created_at=now,
            updated_at=now
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Created booking {booking.id} for service {booking.service_id}")
        return booking

    def update(self, booking_id: str, data: BookingUpdate) -> Booking:
        booking = self.get(booking_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        # Any of the five statuses may follow any other
        if "status" in changes and changes["status"] != booking.status:
            logger.info(f"Booking {booking_id} status {booking.status} -> {changes['status']}")
        for key, value in changes.items():
            setattr(booking, key, value)
        booking.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def delete(self, booking_id: str):
        deleted = self.db.query(Booking).filter(Booking.id == booking_id).delete()
        self.db.commit()
        if deleted:
            logger.info(f"Deleted booking {booking_id}")
