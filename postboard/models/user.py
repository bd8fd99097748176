"""
User model for authentication and ownership.
"""
import uuid
from sqlalchemy import Column, String, DateTime
from datetime import datetime, timezone
from ..database import Base


def new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)  # stored lowercase
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
