"""
Python client for the Postboard API: an HTTP wrapper plus a small
dispatch/reducer store that mirrors what the browser UI keeps in state.
"""
from .api import ApiClient, ApiError
from .store import ActionType, Store, root_reducer
from . import actions

__all__ = [
    "ApiClient",
    "ApiError",
    "ActionType",
    "Store",
    "root_reducer",
    "actions",
]
