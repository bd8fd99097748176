"""
Post store: post documents with embedded comments and likes.

User references are kept as ids and resolved to display names by an explicit
lookup whenever posts are read back.
"""
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union
from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..logging_config import db_logger, timed
from ..models.post import Post
from ..models.user import User


def normalize_category(category: Union[None, str, List[str]]) -> List[str]:
    """Keep a submitted list as is; split a single value on commas.

    Each split piece is trimmed and then prefixed with one space, so
    ``"a, b,c"`` becomes ``[" a", " b", " c"]`` and an empty value becomes
    ``[" "]``. Only a missing category yields an empty list.
    """
    if category is None:
        return []
    if isinstance(category, str):
        category = [category]
    if len(category) != 1:
        return list(category)
    return [" " + part.strip() for part in category[0].split(",")]


def as_utc(value: Union[None, str, datetime]) -> Optional[datetime]:
    """Timestamps are stored in UTC; SQLite hands them back without an offset."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value is not None and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class PostStore:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------

    def _user_names(self, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = {uid for uid in user_ids if uid}
        if not ids:
            return {}
        rows = self.db.query(User.id, User.name).filter(User.id.in_(sorted(ids))).all()
        return {row.id: row.name for row in rows}

    @staticmethod
    def _referenced_users(posts: Iterable[Post]) -> List[str]:
        ids = []
        for post in posts:
            ids.append(post.user_id)
            ids.extend(c["user"] for c in post.comments or [])
            ids.extend(like["user"] for like in post.likes or [])
        return ids

    @staticmethod
    def _ref(user_id: str, names: Dict[str, str]) -> dict:
        return {"id": user_id, "name": names.get(user_id)}

    def _comments(self, comments: List[dict], names: Dict[str, str]) -> List[dict]:
        return [
            {
                "id": c["id"],
                "text": c["text"],
                "user": self._ref(c["user"], names),
                "created_at": as_utc(c["created_at"]),
            }
            for c in comments or []
        ]

    def _likes(self, likes: List[dict], names: Dict[str, str]) -> List[dict]:
        return [{"id": like["id"], "user": self._ref(like["user"], names)} for like in likes or []]

    def _to_dict(self, post: Post, names: Dict[str, str]) -> dict:
        return {
            "id": post.id,
            "title": post.title,
            "content": post.content,
            "status": post.status,
            "category": post.category or [],
            "user": self._ref(post.user_id, names),
            "image": post.image,
            "created_at": as_utc(post.created_at),
            "comments": self._comments(post.comments, names),
            "likes": self._likes(post.likes, names),
        }

    def resolve(self, post: Post) -> dict:
        return self._to_dict(post, self._user_names(self._referenced_users([post])))

    def resolve_comments(self, post: Post) -> List[dict]:
        names = self._user_names(c["user"] for c in post.comments or [])
        return self._comments(post.comments, names)

    def resolve_likes(self, post: Post) -> List[dict]:
        names = self._user_names(like["user"] for like in post.likes or [])
        return self._likes(post.likes, names)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    @timed(db_logger)
    def list_posts(self) -> List[dict]:
        """All posts, newest first, with user references resolved."""
        posts = self.db.query(Post).order_by(Post.created_at.desc()).all()
        names = self._user_names(self._referenced_users(posts))
        return [self._to_dict(p, names) for p in posts]

    def get(self, post_id: str) -> Optional[Post]:
        return self.db.query(Post).filter(Post.id == post_id).first()

    def title_exists(self, title: str) -> bool:
        return self.db.query(Post.id).filter(Post.title == title).first() is not None

    def create(
        self,
        user_id: str,
        title: str,
        content: str,
        status: Optional[str],
        category: List[str],
        image: dict,
    ) -> Post:
        post = Post(
            user_id=user_id,
            title=title,
            content=content,
            status=status,
            category=category,
            image=image,
            comments=[],
            likes=[],
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        db_logger.info("Created post", post_id=post.id, user_id=user_id)
        return post

    def update(
        self,
        post: Post,
        user_id: str,
        title: str,
        content: str,
        status: Optional[str],
        category: List[str],
        image: dict,
    ) -> Post:
        """Overwrite every mutable field; the editor becomes the owner."""
        post.user_id = user_id
        post.title = title
        post.content = content
        post.status = status
        post.category = category
        post.image = image
        self.db.commit()
        self.db.refresh(post)
        db_logger.info("Updated post", post_id=post.id, user_id=user_id)
        return post

    def delete(self, post: Post):
        post_id = post.id
        self.db.delete(post)
        self.db.commit()
        db_logger.info("Deleted post", post_id=post_id)

    # ------------------------------------------------------------------
    # Embedded comments and likes
    # ------------------------------------------------------------------
    # JSON columns are reassigned, never mutated in place, so that the
    # session sees the change.

    def add_comment(self, post: Post, user_id: str, text: str) -> dict:
        comment = {
            "id": uuid.uuid4().hex,
            "text": text,
            "user": user_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        post.comments = [comment] + list(post.comments or [])
        self.db.commit()
        return comment

    @staticmethod
    def find_comment(post: Post, comment_id: str) -> Optional[dict]:
        return next((c for c in post.comments or [] if c["id"] == comment_id), None)

    def remove_comment(self, post: Post, comment_id: str):
        post.comments = [c for c in post.comments or [] if c["id"] != comment_id]
        self.db.commit()

    @staticmethod
    def liked_by(post: Post, user_id: str) -> bool:
        return any(like["user"] == user_id for like in post.likes or [])

    def add_like(self, post: Post, user_id: str):
        post.likes = [{"id": uuid.uuid4().hex, "user": user_id}] + list(post.likes or [])
        self.db.commit()

    def remove_like(self, post: Post, user_id: str):
        post.likes = [like for like in post.likes or [] if like["user"] != user_id]
        self.db.commit()


def get_post_store(db: Session = Depends(get_db)) -> PostStore:
    return PostStore(db)
