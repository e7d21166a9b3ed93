# Import all models here so Base.metadata knows about them
from starterblog.db.session import Base

from starterblog.modules.user_management.models.user import User
from starterblog.modules.posts.models.post import Post
