from .auth import UserCreate, UserLogin, PasswordChange, UserResponse, Token
from .posts import CommentCreate, CommentResponse, LikeResponse, PostResponse

__all__ = [
    "UserCreate", "UserLogin", "PasswordChange", "UserResponse", "Token",
    "CommentCreate", "CommentResponse", "LikeResponse", "PostResponse",
]
