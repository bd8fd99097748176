"""
Post model. Each row is a self-contained document: comments and likes are
embedded JSON lists owned by the post, and user references are plain ids.
"""
from sqlalchemy import Column, String, DateTime, Text, JSON
from datetime import datetime, timezone
from ..database import Base
from .user import new_id


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), nullable=False, index=True)
    title = Column(String(255), nullable=False, index=True)
    content = Column(Text, nullable=False)
    status = Column(String(50), nullable=True)  # opaque, no enforced transitions
    category = Column(JSON, default=list)
    image = Column(JSON, nullable=True)  # file_name, mime_type, file_size, file_path
    comments = Column(JSON, default=list)  # newest first: {id, text, user, created_at}
    likes = Column(JSON, default=list)  # {id, user}
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
