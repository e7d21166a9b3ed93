from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from starterblog.core.config import Settings
from starterblog.core.storage import FileStorage
from starterblog.deps import get_current_user_id, get_db, get_settings, get_storage
from starterblog.modules.auth.schemas.auth import Message
from starterblog.modules.posts.schemas.post import Post as PostSchema, PostCreate, PostUpdate
from starterblog.modules.posts.services.post import (
    create_post, delete_post, get_posts, get_posts_by_category, get_user_posts,
    read_post, update_post,
)

# Get the logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="")


def _to_schema(post, storage: FileStorage) -> PostSchema:
    """Post response with the public URL of its thumbnail"""
    data = PostSchema.model_validate(post)
    data.thumbnail_url = storage.url(post.thumbnail)
    return data


@router.get("/", response_model=List[PostSchema])
@router.get("", response_model=List[PostSchema])
def read_posts(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> Any:
    """
    Retrieve all posts, most recently updated first.
    """
    return [_to_schema(post, storage) for post in get_posts(db)]


@router.post("/", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
def create_new_post(
    *,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user_id: str = Depends(get_current_user_id),
) -> Any:
    """
    Create new post with a thumbnail image.
    """
    post_in = PostCreate(title=title, category=category, description=description)
    post = create_post(
        db, storage, current_user_id, post_in, thumbnail, max_size=settings.MAX_THUMBNAIL_SIZE
    )
    return _to_schema(post, storage)


@router.get("/categories/{category}", response_model=List[PostSchema])
def read_category_posts(
    category: str,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> Any:
    """
    Get posts in a category, newest first.
    """
    return [_to_schema(post, storage) for post in get_posts_by_category(db, category)]


@router.get("/users/{user_id}", response_model=List[PostSchema])
def read_user_posts(
    user_id: str,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> Any:
    """
    Get posts by user ID, newest first.
    """
    return [_to_schema(post, storage) for post in get_user_posts(db, user_id)]


@router.get("/{post_id}", response_model=PostSchema)
def read_post_by_id(
    post_id: str,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> Any:
    """
    Get post by ID.
    """
    return _to_schema(read_post(db, post_id), storage)


@router.patch("/{post_id}", response_model=PostSchema)
def update_post_by_id(
    *,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
    post_id: str,
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user_id: str = Depends(get_current_user_id),
) -> Any:
    """
    Update a post. Only its creator may do this; the thumbnail is optional.
    """
    post_in = PostUpdate(title=title, category=category, description=description)
    post = update_post(
        db, storage, current_user_id, post_id, post_in, thumbnail,
        max_size=settings.MAX_THUMBNAIL_SIZE,
    )
    return _to_schema(post, storage)


@router.delete("/{post_id}", response_model=Message)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    post_id: str,
    current_user_id: str = Depends(get_current_user_id),
) -> Any:
    """
    Delete a post and its thumbnail, and decrement the creator's post count.
    """
    return {"message": delete_post(db, storage, current_user_id, post_id)}
