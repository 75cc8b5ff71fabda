# backend/user_service.py
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ValidationError, NotFoundError, ConflictError
from models import User, utcnow
from schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """User directory backed by the ``users`` table"""

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[User]:
        return self.db.query(User).all()

    def get(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def create(self, data: UserCreate) -> User:
        if not data.email or not data.name or not data.user_type:
            raise ValidationError("Missing required fields")

        now = utcnow()
        user = User(
            email=data.email,
            name=data.name,
            user_type=data.user_type,
            phone=data.phone or "",
            address=data.address or "",
            created_at=now,
            updated_at=now
        )
        self.db.add(user)
        # The unique index on email is the only duplicate check
        self._commit_unique(data.email)
        self.db.refresh(user)
        logger.info(f"Created user {user.id} ({user.user_type})")
        return user

    def update(self, user_id: str, data: UserUpdate) -> User:
        user = self.get(user_id)
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        self._commit_unique(user.email)
        self.db.refresh(user)
        logger.info(f"Updated user {user_id}")
        return user

    def delete(self, user_id: str):
        deleted = self.db.query(User).filter(User.id == user_id).delete()
        self.db.commit()
        if deleted:
            logger.info(f"Deleted user {user_id}")

    def _commit_unique(self, email: str):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Rejected duplicate email {email}")
            raise ConflictError("User already exists") from e
