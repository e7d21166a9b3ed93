from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class PostCategory(str, Enum):
    AGRICULTURE = "Agriculture"
    BUSINESS = "Business"
    EDUCATION = "Education"
    ART = "Art"
    INVESTMENT = "Investment"
    UNCATEGORIZED = "Uncategorized"
    WEATHER = "Weather"


class PostBase(BaseModel):
    title: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class PostCreate(PostBase):
    pass


class PostUpdate(PostBase):
    pass


class Post(BaseModel):
    """Post model returned to client"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    creator: str
    title: str
    category: PostCategory
    description: str
    thumbnail: str
    thumbnail_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
