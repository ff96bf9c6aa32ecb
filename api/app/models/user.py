"""
User Model
"""
from sqlalchemy import Column, String, DateTime, Uuid, func
from sqlalchemy.orm import relationship
import uuid

from app.utils.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    tracked_flights = relationship("TrackedFlight", back_populates="user")
    preferences = relationship("UserPreferences", back_populates="user", uselist=False)

    def __repr__(self):
        return f"<User {self.email}>"
