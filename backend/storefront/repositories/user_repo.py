from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.errors import DuplicateEmail
from storefront.models.user import User


def _is_email_conflict(exc: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed: users.email"; postgres names the index ix_users_email
    msg = str(exc.orig).lower()
    return "email" in msg and ("unique" in msg or "duplicate" in msg)


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def list(self, skip: int = 0, limit: int = 10) -> Tuple[List[User], int]:
        total = self.db.query(func.count(User.id)).scalar() or 0
        items = self.db.query(User).order_by(User.id).offset(skip).limit(limit).all()
        return items, total

    def create(self, name: str, email: str, password_hash: str, role: str) -> User:
        u = User(name=name, email=email.lower(), password_hash=password_hash, role=role)
        self.db.add(u)
        self._flush_unique()
        return u

    def update(self, user: User, fields: dict) -> User:
        for column, value in fields.items():
            setattr(user, column, value)
        self._flush_unique()
        return user

    def delete(self, user: User):
        self.db.delete(user)
        self.db.flush()

    def _flush_unique(self):
        # the unique index on email is the source of truth for duplicates,
        # including two registrations racing each other
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            if _is_email_conflict(e):
                raise DuplicateEmail() from e
            raise
