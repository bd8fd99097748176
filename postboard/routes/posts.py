"""
Post routes: CRUD with image upload, comments and likes.

Every post mutation answers with the refreshed list of all posts.
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import List, Optional

from ..auth import get_current_user_id
from ..responses import (
    bad_request,
    duplicate,
    field_error,
    guard,
    not_found,
    require,
    require_valid_id,
    unauthorized,
    validation_errors,
)
from ..schemas.posts import CommentCreate, CommentResponse, LikeResponse, PostResponse
from ..store.posts import PostStore, get_post_store, normalize_category
from ..uploads import ImageIngest, get_image_ingest

router = APIRouter(prefix="/api/post", tags=["posts"])

POST_FIELD_MESSAGES = {
    "title": "Title is required",
    "content": "Content is required",
}


def post_id_param(id: str) -> str:
    return require_valid_id(id)


def validate_post_form(title: Optional[str], content: Optional[str], image: Optional[UploadFile]):
    require({"title": title, "content": content}, POST_FIELD_MESSAGES)
    if image is None or not image.filename:
        validation_errors([field_error("Image is required", "image", "files")])


def load_post(store: PostStore, post_id: str):
    post = store.get(post_id)
    if not post:
        not_found("Post not found")
    return post


@router.get("", response_model=List[PostResponse])
def get_posts(
    user_id: str = Depends(get_current_user_id),
    store: PostStore = Depends(get_post_store),
):
    """Get all posts, newest first."""
    with guard("List posts"):
        return store.list_posts()


@router.get("/{id}", response_model=PostResponse)
def get_post(
    user_id: str = Depends(get_current_user_id),
    post_id: str = Depends(post_id_param),
    store: PostStore = Depends(get_post_store),
):
    """Get a single post by ID."""
    with guard("Get post", post_id=post_id):
        return store.resolve(load_post(store, post_id))


@router.post("", response_model=List[PostResponse])
def create_post(
    user_id: str = Depends(get_current_user_id),
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    category: Optional[List[str]] = Form(None),
    image: Optional[UploadFile] = File(None),
    store: PostStore = Depends(get_post_store),
    ingest: ImageIngest = Depends(get_image_ingest),
):
    """Create a post with its image, then return every post."""
    validate_post_form(title, content, image)

    with guard("Create post", user_id=user_id):
        if store.title_exists(title):
            duplicate("This post already exist")
        if not ingest.accepts(image):
            bad_request(ingest.rejection_message)

        image_meta = ingest.save(image)
        store.create(
            user_id=user_id,
            title=title,
            content=content,
            status=status,
            category=normalize_category(category),
            image=image_meta,
        )
        return store.list_posts()


@router.put("/{id}", response_model=List[PostResponse])
def update_post(
    user_id: str = Depends(get_current_user_id),
    post_id: str = Depends(post_id_param),
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    category: Optional[List[str]] = Form(None),
    image: Optional[UploadFile] = File(None),
    store: PostStore = Depends(get_post_store),
    ingest: ImageIngest = Depends(get_image_ingest),
):
    """Replace a post's fields and image; the editor becomes its owner."""
    validate_post_form(title, content, image)
    if not ingest.accepts(image):
        bad_request(ingest.rejection_message)

    with guard("Update post", post_id=post_id, user_id=user_id):
        post = load_post(store, post_id)
        previous = (post.image or {}).get("file_name")

        image_meta = ingest.save(image)
        if previous != image_meta["file_name"]:
            ingest.remove(previous)
        store.update(
            post,
            user_id=user_id,
            title=title,
            content=content,
            status=status,
            category=normalize_category(category),
            image=image_meta,
        )
        return store.list_posts()


@router.delete("/{id}", response_model=List[PostResponse])
def delete_post(
    user_id: str = Depends(get_current_user_id),
    post_id: str = Depends(post_id_param),
    store: PostStore = Depends(get_post_store),
    ingest: ImageIngest = Depends(get_image_ingest),
):
    """Delete a post and its stored image, then return every post."""
    with guard("Delete post", post_id=post_id, user_id=user_id):
        post = load_post(store, post_id)
        ingest.remove((post.image or {}).get("file_name"))
        store.delete(post)
        return store.list_posts()


# ============================================================
# COMMENTS
# ============================================================

@router.post("/comment/{id}", response_model=List[CommentResponse])
def add_comment(
    payload: CommentCreate,
    user_id: str = Depends(get_current_user_id),
    post_id: str = Depends(post_id_param),
    store: PostStore = Depends(get_post_store),
):
    """Comment on a post; the newest comment comes first."""
    require({"text": payload.text}, {"text": "Text is required"})

    with guard("Add comment", post_id=post_id, user_id=user_id):
        post = load_post(store, post_id)
        store.add_comment(post, user_id, payload.text)
        return store.resolve_comments(post)


@router.delete("/comment/{id}/{comment_id}", response_model=List[CommentResponse])
def delete_comment(
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    post_id: str = Depends(post_id_param),
    store: PostStore = Depends(get_post_store),
):
    """Delete a comment; only its author may do so."""
    with guard("Delete comment", post_id=post_id, comment_id=comment_id):
        post = load_post(store, post_id)
        comment = store.find_comment(post, comment_id)
        if not comment:
            not_found("Comment does not exist")
        if comment["user"] != user_id:
            unauthorized("User not authorized")

        store.remove_comment(post, comment_id)
        return store.resolve_comments(post)


# ============================================================
# LIKES
# ============================================================

@router.put("/like/{id}", response_model=List[LikeResponse])
def like_post(
    user_id: str = Depends(get_current_user_id),
    post_id: str = Depends(post_id_param),
    store: PostStore = Depends(get_post_store),
):
    """Like a post once per user."""
    with guard("Like post", post_id=post_id, user_id=user_id):
        post = load_post(store, post_id)
        if store.liked_by(post, user_id):
            bad_request("Post already liked")
        store.add_like(post, user_id)
        return store.resolve_likes(post)


@router.put("/unlike/{id}", response_model=List[LikeResponse])
def unlike_post(
    user_id: str = Depends(get_current_user_id),
    post_id: str = Depends(post_id_param),
    store: PostStore = Depends(get_post_store),
):
    """Withdraw the caller's like."""
    with guard("Unlike post", post_id=post_id, user_id=user_id):
        post = load_post(store, post_id)
        if not store.liked_by(post, user_id):
            bad_request("Post has not yet been liked")
        store.remove_like(post, user_id)
        return store.resolve_likes(post)
