"""
Engine input records: Post, AnalyticsSample, SocialAccount.

Loosely-typed metadata bags from the store are validated once here into explicit
optional-field structs. Numeric fields coerce None/garbage to 0 and clamp negatives
to 0; dates that cannot be parsed become None (filters drop them later).
"""
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.metrics.platforms import CanonicalPlatform, normalize

# AnalyticsSample has a field named `date`.
Day = date


def coerce_count(value: Any) -> int:
    """None/empty/unparsable -> 0; negative -> 0; floats truncated."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        n = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(n, 0)


def coerce_optional_count(value: Any) -> Optional[int]:
    """Like coerce_count but keeps None (absent) distinct from 0."""
    if value is None or value == "":
        return None
    return coerce_count(value)


def parse_instant(value: Any) -> Optional[datetime]:
    """Parse an ISO string/date/datetime into an aware datetime (naive = UTC). None on failure."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_day(value: Any) -> Optional[date]:
    """Parse a calendar day (YYYY-MM-DD, or the wall-clock date of an ISO instant). None on failure."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        instant = parse_instant(text)
        return instant.date() if instant else None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class PostMetadata(_Record):
    """Optional per-post fields that integrations stash in posts.metadata."""

    platform: Optional[str] = None
    followers: Optional[int] = None
    published_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("published_at", "publishedAt"),
    )
    content_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("content_type", "contentType"),
    )
    format: Optional[str] = None
    post_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("post_type", "postType"),
    )
    media_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("media_type", "mediaType"),
    )
    is_story: bool = Field(default=False, validation_alias=AliasChoices("is_story", "isStory"))
    is_reel: bool = Field(default=False, validation_alias=AliasChoices("is_reel", "isReel"))
    is_thread: bool = Field(default=False, validation_alias=AliasChoices("is_thread", "isThread"))

    @field_validator("followers", mode="before")
    @classmethod
    def _followers(cls, v: Any) -> Optional[int]:
        return coerce_optional_count(v)

    @field_validator("published_at", mode="before")
    @classmethod
    def _published_at(cls, v: Any) -> Optional[datetime]:
        return parse_instant(v)

    @field_validator("is_story", "is_reel", "is_thread", mode="before")
    @classmethod
    def _flags(cls, v: Any) -> bool:
        return bool(v)


class Post(_Record):
    """A published/scheduled post. Read-only from the engine's perspective."""

    id: str
    brand_id: Optional[str] = None
    content: str = ""
    created_at: Optional[datetime] = None
    platform: Optional[str] = None
    metadata: PostMetadata = Field(default_factory=PostMetadata)
    media_urls: List[str] = Field(default_factory=list)

    @field_validator("id", "brand_id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("content", mode="before")
    @classmethod
    def _content(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, v: Any) -> Optional[datetime]:
        return parse_instant(v)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, PostMetadata)) else {}

    @field_validator("media_urls", mode="before")
    @classmethod
    def _media_urls(cls, v: Any) -> List[str]:
        if not isinstance(v, (list, tuple)):
            return []
        return [str(u) for u in v if u]

    @property
    def raw_platform(self) -> Optional[str]:
        """Direct platform field; metadata.platform only when the direct field is absent."""
        if self.platform:
            return self.platform
        return self.metadata.platform

    @property
    def canonical_platform(self) -> CanonicalPlatform:
        return normalize(self.raw_platform)

    @property
    def posted_at(self) -> Optional[datetime]:
        """metadata.published_at when known, else created_at."""
        return self.metadata.published_at or self.created_at


class SampleMetadata(_Record):
    reach: Optional[int] = None
    clicks: Optional[int] = None
    views: Optional[int] = None
    country: Optional[str] = None
    gender: Optional[str] = None
    age_range: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("age_range", "ageRange"),
    )
    age: Optional[str] = None

    @field_validator("reach", "clicks", "views", mode="before")
    @classmethod
    def _counts(cls, v: Any) -> Optional[int]:
        return coerce_optional_count(v)

    @field_validator("country", "gender", "age_range", "age", mode="before")
    @classmethod
    def _labels(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)


class AnalyticsSample(_Record):
    """One daily analytics row for a post (post_analytics)."""

    post_id: Optional[str] = None
    date: Optional[Day] = None
    likes: int = 0
    comments: int = 0
    shares: int = 0
    impressions: int = 0
    metadata: SampleMetadata = Field(default_factory=SampleMetadata)

    @field_validator("post_id", mode="before")
    @classmethod
    def _post_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> Optional[Day]:
        return parse_day(v)

    @field_validator("likes", "comments", "shares", "impressions", mode="before")
    @classmethod
    def _counts(cls, v: Any) -> int:
        return coerce_count(v)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, SampleMetadata)) else {}

    @property
    def engagement(self) -> int:
        return self.likes + self.comments + self.shares


class AccountData(_Record):
    followers: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("followers", "followersCount", "followers_count"),
    )

    @field_validator("followers", mode="before")
    @classmethod
    def _followers(cls, v: Any) -> Optional[int]:
        return coerce_optional_count(v)


class SocialAccount(_Record):
    """Connected account snapshot (cumulative followers, not a delta)."""

    id: str
    platform: Optional[str] = None
    brand_id: Optional[str] = None
    account_name: Optional[str] = None
    platform_specific_data: AccountData = Field(default_factory=AccountData)

    @field_validator("id", "brand_id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("platform_specific_data", mode="before")
    @classmethod
    def _data(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, AccountData)) else {}

    @property
    def canonical_platform(self) -> CanonicalPlatform:
        return normalize(self.platform)

    @property
    def followers(self) -> int:
        return self.platform_specific_data.followers or 0
