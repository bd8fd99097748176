from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class UserRef(BaseModel):
    id: str
    name: Optional[str] = None


class ImageMeta(BaseModel):
    file_name: str
    mime_type: str
    file_size: int
    file_path: str


class CommentCreate(BaseModel):
    text: Optional[str] = None


class CommentResponse(BaseModel):
    id: str
    text: str
    user: UserRef
    created_at: datetime


class LikeResponse(BaseModel):
    id: str
    user: UserRef


class PostResponse(BaseModel):
    id: str
    title: str
    content: str
    status: Optional[str] = None
    category: List[str] = []
    user: UserRef
    image: Optional[ImageMeta] = None
    created_at: datetime
    comments: List[CommentResponse] = []
    likes: List[LikeResponse] = []
