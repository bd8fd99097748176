"""
Thunk creators mirroring the API endpoints.

Each returns a callable for ``Store.dispatch``. Failures are reported as
``danger`` alerts (one per server error message) plus a failure action;
they are never raised to the caller.
"""
import uuid
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from .api import ApiError
from .store import ActionType

ImageFile = Tuple[str, Any, str]  # (filename, bytes or file object, content type)


def set_alert(msg: str, alert_type: str) -> Dict[str, Any]:
    return {
        "type": ActionType.SET_ALERT,
        "payload": {"id": uuid.uuid4().hex, "msg": msg, "alert_type": alert_type},
    }


def remove_alert(alert_id: str) -> Dict[str, Any]:
    return {"type": ActionType.REMOVE_ALERT, "payload": alert_id}


def _alert_errors(dispatch, err: ApiError):
    for error in err.errors:
        dispatch(set_alert(error["msg"], "danger"))


def _failure(err: ApiError) -> Dict[str, Any]:
    return {"msg": err.status_text, "status": err.status_code}


# ============================================================
# AUTH
# ============================================================

def load_user():
    def thunk(dispatch, get_state, api):
        api.set_auth_token(get_state()["auth"]["token"])
        try:
            user = api.get("/api/auth")
        except ApiError:
            dispatch({"type": ActionType.AUTH_ERROR})
            return None
        dispatch({"type": ActionType.USER_LOADED, "payload": user})
        return user

    return thunk


def register(name: str, email: str, password: str, role: Optional[str] = None):
    """Create an account; the store switches to the new account's token."""
    def thunk(dispatch, get_state, api):
        try:
            data = api.post(
                "/api/users",
                json={"name": name, "email": email, "password": password, "role": role},
            )
        except ApiError as err:
            _alert_errors(dispatch, err)
            dispatch({"type": ActionType.REGISTER_FAIL})
            return False
        dispatch({"type": ActionType.REGISTER_SUCCESS, "payload": data})
        dispatch(set_alert("Successfully Registered", "success"))
        dispatch(load_user())
        return True

    return thunk


def login(email: str, password: str):
    def thunk(dispatch, get_state, api):
        try:
            data = api.post("/api/auth", json={"email": email, "password": password})
        except ApiError as err:
            _alert_errors(dispatch, err)
            dispatch({"type": ActionType.LOGIN_FAIL})
            return False
        dispatch({"type": ActionType.LOGIN_SUCCESS, "payload": data})
        dispatch(load_user())
        return True

    return thunk


def logout():
    def thunk(dispatch, get_state, api):
        api.set_auth_token(None)
        dispatch({"type": ActionType.LOGOUT})

    return thunk


def change_password(password: str, password2: str):
    def thunk(dispatch, get_state, api):
        try:
            user = api.put(
                "/api/users/change-password",
                json={"password": password, "password2": password2},
            )
        except ApiError as err:
            _alert_errors(dispatch, err)
            dispatch({"type": ActionType.CHANGE_PASSWORD_FAIL, "payload": _failure(err)})
            return False
        dispatch({"type": ActionType.CHANGE_PASSWORD, "payload": user})
        dispatch(set_alert("Successfully Password Updated", "success"))
        return True

    return thunk


# ============================================================
# POSTS
# ============================================================

def _post_form(title: str, content: str, status: Optional[str], category: Union[str, Iterable[str], None]):
    data = {"title": title, "content": content}
    if status is not None:
        data["status"] = status
    if category is not None:
        data["category"] = category if isinstance(category, str) else list(category)
    return data


def _post_request(method: str, url: str, success: ActionType, alert: Optional[str], **kwargs):
    def thunk(dispatch, get_state, api):
        try:
            data = api.request(method, url, **kwargs)
        except ApiError as err:
            _alert_errors(dispatch, err)
            dispatch({"type": ActionType.POST_ERROR, "payload": _failure(err)})
            return None
        dispatch({"type": success, "payload": data})
        if alert:
            dispatch(set_alert(alert, "success"))
        return data

    return thunk


def get_posts():
    return _post_request("GET", "/api/post", ActionType.GET_POSTS, None)


def get_post(post_id: str):
    return _post_request("GET", f"/api/post/{post_id}", ActionType.GET_POST, None)


def add_post(title: str, content: str, image: ImageFile, status: Optional[str] = None, category=None):
    return _post_request(
        "POST",
        "/api/post",
        ActionType.ADD_POST,
        "Post Created",
        data=_post_form(title, content, status, category),
        files={"image": image},
    )


def update_post(post_id: str, title: str, content: str, image: ImageFile, status: Optional[str] = None, category=None):
    return _post_request(
        "PUT",
        f"/api/post/{post_id}",
        ActionType.UPDATE_POST,
        "Post Updated",
        data=_post_form(title, content, status, category),
        files={"image": image},
    )


def delete_post(post_id: str):
    return _post_request("DELETE", f"/api/post/{post_id}", ActionType.DELETE_POST, "Post Removed")


def _embedded_request(method: str, url: str, post_id: str, success: ActionType, key: str, alert: Optional[str], **kwargs):
    def thunk(dispatch, get_state, api):
        try:
            items = api.request(method, url, **kwargs)
        except ApiError as err:
            _alert_errors(dispatch, err)
            dispatch({"type": ActionType.POST_ERROR, "payload": _failure(err)})
            return None
        dispatch({"type": success, "payload": {"id": post_id, key: items}})
        if alert:
            dispatch(set_alert(alert, "success"))
        return items

    return thunk


def add_comment(post_id: str, text: str):
    return _embedded_request(
        "POST", f"/api/post/comment/{post_id}", post_id,
        ActionType.ADD_COMMENT, "comments", "Comment Added",
        json={"text": text},
    )


def delete_comment(post_id: str, comment_id: str):
    return _embedded_request(
        "DELETE", f"/api/post/comment/{post_id}/{comment_id}", post_id,
        ActionType.REMOVE_COMMENT, "comments", "Comment Removed",
    )


def like_post(post_id: str):
    return _embedded_request("PUT", f"/api/post/like/{post_id}", post_id, ActionType.UPDATE_LIKES, "likes", None)


def unlike_post(post_id: str):
    return _embedded_request("PUT", f"/api/post/unlike/{post_id}", post_id, ActionType.UPDATE_LIKES, "likes", None)
