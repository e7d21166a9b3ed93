from typing import List, Optional
import logging

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from starterblog.core.config import settings
from starterblog.core.exceptions import ForbiddenError, NotFoundError, UpdateFailedError, ValidationError
from starterblog.core.storage import FileStorage, discard_file, get_upload_size
from starterblog.db.session import utcnow
from starterblog.modules.posts.models.post import Post
from starterblog.modules.posts.schemas.post import PostCategory, PostCreate, PostUpdate
from starterblog.modules.user_management.models.user import User
from starterblog.modules.user_management.services.user import read_user

logger = logging.getLogger("app")

MIN_DESCRIPTION_LENGTH = 12
CATEGORIES = {category.value for category in PostCategory}


def _check_category(category: str) -> None:
    if category not in CATEGORIES:
        raise ValidationError(f"{category} is not a valid category")


def _check_thumbnail_size(thumbnail: UploadFile, max_size: int) -> None:
    if get_upload_size(thumbnail) > max_size:
        raise ValidationError(
            f"Thumbnail too big. File should be less than {max_size / 1_000_000:g}MB"
        )


def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID"""
    logging.info(f"Getting post with ID: {post_id}")
    return db.query(Post).filter(Post.id == post_id).first()


def read_post(db: Session, post_id: str) -> Post:
    """Get post by ID or raise NotFoundError"""
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post


def get_posts(db: Session) -> List[Post]:
    """Get all posts, most recently updated first"""
    return db.query(Post).order_by(Post.updated_at.desc()).all()


def get_posts_by_category(db: Session, category: str) -> List[Post]:
    """Get posts in a category, newest first"""
    logging.info(f"Getting posts in category: {category}")
    return (
        db.query(Post)
        .filter(Post.category == category)
        .order_by(Post.created_at.desc())
        .all()
    )


def get_user_posts(db: Session, user_id: str) -> List[Post]:
    """Get posts by user ID, newest first"""
    logging.info(f"Getting posts for user ID: {user_id}")
    return (
        db.query(Post)
        .filter(Post.creator == user_id)
        .order_by(Post.created_at.desc())
        .all()
    )


def create_post(
    db: Session,
    storage: FileStorage,
    creator_id: str,
    post_in: PostCreate,
    thumbnail: Optional[UploadFile],
    max_size: Optional[int] = None,
) -> Post:
    """
    Create a post owned by creator_id.

    The thumbnail is stored first; the post row and the owner's counter are
    then written in a single transaction. If that transaction fails the
    stored thumbnail is removed again.
    """
    max_size = max_size or settings.MAX_THUMBNAIL_SIZE
    if not post_in.title or not post_in.category or not post_in.description or not thumbnail or not thumbnail.filename:
        raise ValidationError("Fill in all fields and choose a thumbnail")
    _check_category(post_in.category)
    _check_thumbnail_size(thumbnail, max_size)

    read_user(db, creator_id)

    filename = storage.save(thumbnail)
    post = Post(
        creator=creator_id,
        title=post_in.title,
        category=post_in.category,
        description=post_in.description,
        thumbnail=filename,
    )
    try:
        db.add(post)
        db.query(User).filter(User.id == creator_id).update(
            {User.posts: User.posts + 1}, synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        discard_file(storage, filename)
        raise

    db.refresh(post)
    logger.info(f"Created post {post.id} for user {creator_id}")
    return post


def update_post(
    db: Session,
    storage: FileStorage,
    user_id: str,
    post_id: str,
    post_in: PostUpdate,
    thumbnail: Optional[UploadFile] = None,
    max_size: Optional[int] = None,
) -> Post:
    """
    Edit a post's text fields and optionally replace its thumbnail.

    Only the creator may edit. A replacement thumbnail is stored before the
    row is updated and the previous file is removed only after the commit.
    """
    max_size = max_size or settings.MAX_THUMBNAIL_SIZE
    if not post_in.title or not post_in.category or len(post_in.description or "") < MIN_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Fill in all fields, description should be at least {MIN_DESCRIPTION_LENGTH} characters"
        )
    _check_category(post_in.category)

    post = read_post(db, post_id)
    if post.creator != user_id:
        raise ForbiddenError("Post couldn't be edited")

    has_thumbnail = bool(thumbnail and thumbnail.filename)
    if has_thumbnail:
        _check_thumbnail_size(thumbnail, max_size)

    values = {
        Post.title: post_in.title,
        Post.category: post_in.category,
        Post.description: post_in.description,
        Post.updated_at: utcnow(),
    }
    old_thumbnail = post.thumbnail
    new_thumbnail = None
    if has_thumbnail:
        new_thumbnail = storage.save(thumbnail)
        values[Post.thumbnail] = new_thumbnail

    try:
        updated = (
            db.query(Post)
            .filter(Post.id == post_id, Post.creator == user_id)
            .update(values, synchronize_session=False)
        )
        if not updated:
            raise UpdateFailedError("Couldn't update post")
        db.commit()
    except (SQLAlchemyError, UpdateFailedError):
        db.rollback()
        if new_thumbnail:
            discard_file(storage, new_thumbnail)
        raise

    if new_thumbnail:
        discard_file(storage, old_thumbnail)

    logger.info(f"Updated post {post_id}")
    db.refresh(post)
    return post


def delete_post(db: Session, storage: FileStorage, user_id: str, post_id: str) -> str:
    """
    Delete a post, decrement its creator's counter and remove the thumbnail.

    A thumbnail that is already gone from storage does not block deletion.
    """
    if not post_id:
        raise ValidationError("Post unavailable")

    post = read_post(db, post_id)
    if post.creator != user_id:
        raise ForbiddenError("Post couldn't be deleted")

    thumbnail = post.thumbnail
    try:
        db.delete(post)
        db.query(User).filter(User.id == user_id, User.posts > 0).update(
            {User.posts: User.posts - 1}, synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    discard_file(storage, thumbnail)

    logger.info(f"Deleted post {post_id}")
    return f"Post {post_id} deleted successfully"
