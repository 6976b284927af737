"""SQLAlchemy models read by the dashboard."""
from app.models.brand import Brand
from app.models.post import Post
from app.models.post_analytics import PostAnalytics
from app.models.social_account import SocialAccount

__all__ = [
    "Brand",
    "Post",
    "PostAnalytics",
    "SocialAccount",
]
