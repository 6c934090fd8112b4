"""Account domain models."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Uuid
from sqlalchemy.orm import relationship

from core.database import Base


class User(Base):
    """Authenticated identity. Owns exactly one Profile."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Status
    is_active = Column(Boolean, default=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    login_count = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )

    profile = relationship("Profile", back_populates="user", uselist=False)

    __table_args__ = (Index("ix_users_email_active", "email", "is_active"),)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
