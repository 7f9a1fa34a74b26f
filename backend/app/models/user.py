"""User accounts that own jobs"""
import uuid

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.sql import func

from ..database import Base


class User(Base):
    """A registered user; recruiters own the jobs they post"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(200))
    role = Column(String(20), nullable=False, default="CANDIDATE")  # Role enum value

    created_at = Column(DateTime(timezone=True), server_default=func.now())
