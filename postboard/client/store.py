"""
Client-side state: action types, reducers and a dispatching store.

Plain actions are dicts with a ``type`` and an optional ``payload``; callables
dispatched to the store run as thunks with ``(dispatch, get_state, api)``.
"""
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class ActionType(str, Enum):
    # auth
    REGISTER_SUCCESS = "REGISTER_SUCCESS"
    REGISTER_FAIL = "REGISTER_FAIL"
    USER_LOADED = "USER_LOADED"
    AUTH_ERROR = "AUTH_ERROR"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAIL = "LOGIN_FAIL"
    LOGOUT = "LOGOUT"
    CHANGE_PASSWORD = "CHANGE_PASSWORD"
    CHANGE_PASSWORD_FAIL = "CHANGE_PASSWORD_FAIL"
    # posts
    GET_POSTS = "GET_POSTS"
    GET_POST = "GET_POST"
    ADD_POST = "ADD_POST"
    UPDATE_POST = "UPDATE_POST"
    DELETE_POST = "DELETE_POST"
    POST_ERROR = "POST_ERROR"
    ADD_COMMENT = "ADD_COMMENT"
    REMOVE_COMMENT = "REMOVE_COMMENT"
    UPDATE_LIKES = "UPDATE_LIKES"
    # alerts
    SET_ALERT = "SET_ALERT"
    REMOVE_ALERT = "REMOVE_ALERT"


Action = Dict[str, Any]


def initial_state() -> Dict[str, Any]:
    return {
        "auth": {
            "token": None,
            "is_authenticated": False,
            "loading": True,
            "user": None,
        },
        "post": {
            "posts": [],
            "post": None,
            "loading": True,
            "error": {},
        },
        "alert": [],
    }


def auth_reducer(state: Dict[str, Any], action: Action) -> Dict[str, Any]:
    kind = action["type"]
    payload = action.get("payload")

    if kind == ActionType.USER_LOADED:
        return {**state, "is_authenticated": True, "loading": False, "user": payload}
    if kind in (ActionType.REGISTER_SUCCESS, ActionType.LOGIN_SUCCESS):
        return {**state, "token": payload["token"], "is_authenticated": True, "loading": False}
    if kind == ActionType.CHANGE_PASSWORD:
        return {**state, "user": payload, "loading": False}
    if kind in (ActionType.REGISTER_FAIL, ActionType.AUTH_ERROR, ActionType.LOGIN_FAIL, ActionType.LOGOUT):
        return {**state, "token": None, "is_authenticated": False, "loading": False, "user": None}
    if kind == ActionType.CHANGE_PASSWORD_FAIL:
        return {**state, "loading": False}
    return state


def _replace_in_posts(posts: List[dict], post_id: str, **fields) -> List[dict]:
    return [{**p, **fields} if p["id"] == post_id else p for p in posts]


def post_reducer(state: Dict[str, Any], action: Action) -> Dict[str, Any]:
    kind = action["type"]
    payload = action.get("payload")

    if kind in (ActionType.GET_POSTS, ActionType.ADD_POST, ActionType.UPDATE_POST, ActionType.DELETE_POST):
        # the server answers every post mutation with the full list
        return {**state, "posts": payload, "loading": False}
    if kind == ActionType.GET_POST:
        return {**state, "post": payload, "loading": False}
    if kind in (ActionType.ADD_COMMENT, ActionType.REMOVE_COMMENT):
        post = state["post"]
        if post and post["id"] == payload["id"]:
            post = {**post, "comments": payload["comments"]}
        return {
            **state,
            "posts": _replace_in_posts(state["posts"], payload["id"], comments=payload["comments"]),
            "post": post,
            "loading": False,
        }
    if kind == ActionType.UPDATE_LIKES:
        return {
            **state,
            "posts": _replace_in_posts(state["posts"], payload["id"], likes=payload["likes"]),
            "loading": False,
        }
    if kind == ActionType.POST_ERROR:
        return {**state, "error": payload, "loading": False}
    return state


def alert_reducer(state: List[dict], action: Action) -> List[dict]:
    kind = action["type"]
    if kind == ActionType.SET_ALERT:
        return state + [action["payload"]]
    if kind == ActionType.REMOVE_ALERT:
        return [alert for alert in state if alert["id"] != action["payload"]]
    return state


def root_reducer(state: Dict[str, Any], action: Action) -> Dict[str, Any]:
    return {
        "auth": auth_reducer(state["auth"], action),
        "post": post_reducer(state["post"], action),
        "alert": alert_reducer(state["alert"], action),
    }


class Store:
    """Holds client state and routes actions through the reducer."""

    def __init__(self, api, reducer: Callable = root_reducer, state: Optional[Dict[str, Any]] = None):
        self.api = api
        self.reducer = reducer
        self._state = state if state is not None else initial_state()
        self._listeners: List[Callable[[], None]] = []

    def get_state(self) -> Dict[str, Any]:
        return self._state

    def dispatch(self, action):
        if callable(action):
            return action(self.dispatch, self.get_state, self.api)
        self._state = self.reducer(self._state, action)
        for listener in list(self._listeners):
            listener()
        return action

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
