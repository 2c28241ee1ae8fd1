from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from storefront.db import Base
from storefront.rbac import Role


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    # argon2 digest, never the plaintext credential
    password_hash = Column(String(256), nullable=False)
    role = Column(String(16), nullable=False, default=Role.USER.value)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
