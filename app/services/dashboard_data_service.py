"""
Load raw dashboard rows (posts, post_analytics, social_accounts) for a user/brand
and convert them to engine records. No aggregation happens here.
"""
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.logging_config import get_logger
from app.metrics.date_ranges import DateRange
from app.metrics.filters import DashboardDataset
from app.metrics.records import AnalyticsSample, Post, SocialAccount
from app.models import Post as PostRow
from app.models import PostAnalytics, SocialAccount as SocialAccountRow
from app.models.post import VISIBLE_POST_STATUSES

logger = get_logger(__name__)


def post_record(row: PostRow) -> Post:
    return Post.model_validate({
        "id": row.id,
        "brand_id": row.brand_id,
        "content": row.content,
        "created_at": row.created_at,
        "metadata": row.metadata_ or {},
        "media_urls": row.media_urls or [],
    })


def sample_record(row: PostAnalytics, tz: Optional[tzinfo] = None) -> AnalyticsSample:
    """post_analytics.date is a timestamptz; its calendar day is taken in `tz`."""
    day = row.date
    if tz is not None and isinstance(day, datetime) and day.tzinfo is not None:
        day = day.astimezone(tz)
    return AnalyticsSample.model_validate({
        "post_id": row.post_id,
        "date": day,
        "likes": row.likes,
        "comments": row.comments,
        "shares": row.shares,
        "impressions": row.impressions,
        "metadata": row.metadata_ or {},
    })


def account_record(row: SocialAccountRow) -> SocialAccount:
    return SocialAccount.model_validate({
        "id": row.id,
        "platform": row.platform,
        "brand_id": row.brand_id,
        "account_name": row.account_name,
        "platform_specific_data": row.platform_specific_data or {},
    })


def _brand_uuid(brand: Optional[str]) -> Optional[UUID]:
    if brand is None or brand == "" or brand == "all":
        return None
    return UUID(str(brand))


async def load_dataset(
    db: AsyncSession,
    user_id: UUID,
    brand: Optional[str],
    date_range: Optional[DateRange] = None,
) -> DashboardDataset:
    """
    Fetch the user's visible posts, their analytics (within date_range when given)
    and active social accounts. brand "all" loads every brand.
    Sample days are taken in the range's timezone (DASHBOARD_TIMEZONE otherwise).
    Raises ValueError("invalid_brand_id") for a malformed brand id.
    """
    try:
        brand_id = _brand_uuid(brand)
    except ValueError:
        raise ValueError("invalid_brand_id")

    posts_q = select(PostRow).where(
        PostRow.user_id == user_id,
        PostRow.status.in_(VISIBLE_POST_STATUSES),
    )
    accounts_q = select(SocialAccountRow).where(
        SocialAccountRow.user_id == user_id,
        SocialAccountRow.is_active.is_(True),
    )
    if brand_id is not None:
        posts_q = posts_q.where(PostRow.brand_id == brand_id)
        accounts_q = accounts_q.where(SocialAccountRow.brand_id == brand_id)

    try:
        post_rows: List[PostRow] = list((await db.execute(posts_q)).scalars().all())
        sample_rows: List[PostAnalytics] = []
        if post_rows:
            samples_q = select(PostAnalytics).where(
                PostAnalytics.post_id.in_([p.id for p in post_rows]),
            )
            if date_range is not None:
                samples_q = samples_q.where(
                    PostAnalytics.date >= date_range.start,
                    PostAnalytics.date <= date_range.end,
                )
            sample_rows = list((await db.execute(samples_q.order_by(PostAnalytics.date))).scalars().all())
        account_rows: List[SocialAccountRow] = list((await db.execute(accounts_q)).scalars().all())
    except SQLAlchemyError as e:
        logger.warning("dashboard_data.load_fail", user_id=str(user_id), brand=brand, error=str(e))
        raise

    zone = date_range.start.tzinfo if date_range is not None else None
    if zone is None:
        zone = get_settings().tz

    counts: Dict[str, Any] = {
        "posts": len(post_rows),
        "samples": len(sample_rows),
        "accounts": len(account_rows),
    }
    logger.info("dashboard_data.loaded", user_id=str(user_id), brand=brand, **counts)
    return DashboardDataset(
        posts=[post_record(r) for r in post_rows],
        samples=[sample_record(r, zone) for r in sample_rows],
        accounts=[account_record(r) for r in account_rows],
    )
