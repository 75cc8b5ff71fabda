# backend/catalog_service.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Dict, Any

from sqlalchemy.orm import Session

from errors import ValidationError, NotFoundError
from models import Service, utcnow
from schemas import ServiceCreate, ServiceUpdate, ServiceFilters

logger = logging.getLogger(__name__)

MAX_RESULTS = 50

_DEMO_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _demo_service(index: int, title: str, description: str, category: str,
                  price: float, rating: float, provider_name: str, location: str) -> Dict[str, Any]:
    # Older entries further down the list keep the createdAt-descending order
    created = _DEMO_EPOCH - timedelta(days=index)
    return {
        "id": str(index),
        "title": title,
        "description": description,
        "category": category,
        "price": price,
        "location": location,
        "provider_id": f"demo-provider-{index}",
        "provider_name": provider_name,
        "images": ["/api/placeholder/300/200"],
        "availability": "available",
        "rating": rating,
        "review_count": 0,
        "created_at": created,
        "updated_at": created,
    }


DEMO_CATALOG: List[Dict[str, Any]] = [
    _demo_service(1, "Professional Plumbing Services", "Expert plumbing solutions for your home and business",
                  "plumbing", 75, 4.8, "John's Plumbing", "New York, NY"),
    _demo_service(2, "Electrical Installation & Repair", "Licensed electrician for all your electrical needs",
                  "electrical", 95, 4.9, "Spark Electric", "Los Angeles, CA"),
    _demo_service(3, "HVAC Maintenance & Repair", "Complete heating and cooling system services",
                  "hvac", 120, 4.7, "Climate Control Pro", "Chicago, IL"),
    _demo_service(4, "Professional House Cleaning", "Thorough cleaning services for your home",
                  "cleaning", 50, 4.6, "Clean & Shine", "Miami, FL"),
    _demo_service(5, "Interior & Exterior Painting", "High-quality painting services for any surface",
                  "painting", 85, 4.8, "Color Perfect Painters", "Seattle, WA"),
    _demo_service(6, "Flooring Installation & Repair", "Expert flooring solutions for all types",
                  "flooring", 150, 4.9, "Floor Masters", "Austin, TX"),
]


def matches_location(location: Optional[str], needle: str) -> bool:
    return bool(location) and needle.lower() in location.lower()


def filter_demo_catalog(filters: ServiceFilters) -> List[Dict[str, Any]]:
    """Apply the listing predicates to the in-memory sample catalog"""
    results = []
    for service in DEMO_CATALOG:
        if filters.category and service["category"] != filters.category:
            continue
        if filters.provider_id and service["provider_id"] != filters.provider_id:
            continue
        if filters.min_price is not None and service["price"] < filters.min_price:
            continue
        if filters.max_price is not None and service["price"] > filters.max_price:
            continue
        if filters.rating is not None and service["rating"] < filters.rating:
            continue
        if filters.location and not matches_location(service["location"], filters.location):
            continue
        results.append(dict(service))
    return results


class CatalogService:
    """Service offerings backed by the ``services`` table"""

    def __init__(self, db: Session):
        self.db = db

    def list(self, filters: ServiceFilters) -> List[Service]:
        query = self.db.query(Service)

        if filters.category:
            query = query.filter(Service.category == filters.category)
        if filters.provider_id:
            query = query.filter(Service.provider_id == filters.provider_id)
        if filters.min_price is not None:
            query = query.filter(Service.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Service.price <= filters.max_price)
        if filters.rating is not None:
            query = query.filter(Service.rating >= filters.rating)

        services = query.order_by(Service.created_at.desc()).limit(MAX_RESULTS).all()

        # Location is matched after the capped query, not in the database
        if filters.location:
            services = [s for s in services if matches_location(s.location, filters.location)]
        return services

    def get(self, service_id: str) -> Service:
        service = self.db.query(Service).filter(Service.id == service_id).first()
        if not service:
            raise NotFoundError("Service not found")
        return service

    def create(self, data: ServiceCreate) -> Service:
        if (not data.title or not data.description or not data.category
                or data.price is None or not data.provider_id):
            raise ValidationError("Missing required fields")

        now = utcnow()
        service = Service(
            title=data.title,
            description=data.description,
            category=data.category,
            price=data.price,
            location=data.location or "",
            provider_id=data.provider_id,
            provider_name=data.provider_name or "",
            images=list(data.images or []),
            availability=data.availability or "available",
            rating=data.rating if data.rating is not None else 0.0,
            review_count=data.review_count if data.review_count is not None else 0,
            created_at=now,
            updated_at=now
        )
        self.db.add(service)
        self.db.commit()
        self.db.refresh(service)
        logger.info(f"Created service {service.id} for provider {service.provider_id}")
        return service

    def update(self, service_id: str, data: ServiceUpdate) -> Service:
        service = self.get(service_id)
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(service, key, value)
        service.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(service)
        logger.info(f"Updated service {service_id}")
        return service

    def delete(self, service_id: str):
        deleted = self.db.query(Service).filter(Service.id == service_id).delete()
        self.db.commit()
        if deleted:
            logger.info(f"Deleted service {service_id}")
