from .users import CredentialStore, get_credential_store
from .posts import PostStore, get_post_store, normalize_category

__all__ = [
    "CredentialStore",
    "get_credential_store",
    "PostStore",
    "get_post_store",
    "normalize_category",
]
