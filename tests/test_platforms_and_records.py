"""
Tests for platform normalization and record coercion.
- normalize: case-insensitive, trimmed, twitter -> x, unknown fallback, idempotent.
- records: numeric coercion (None/negative/garbage -> 0), unparsable dates -> None, metadata aliases.
"""
from datetime import date, datetime, timezone

import pytest

from app.metrics.platforms import ALL_PLATFORMS, CanonicalPlatform, normalize, normalize_filter
from app.metrics.records import AnalyticsSample, Post, SocialAccount, coerce_count, parse_day


def test_normalize_twitter_is_x() -> None:
    """twitter (any case) is an alias for x."""
    assert normalize("Twitter") == CanonicalPlatform.X
    assert normalize("x") == CanonicalPlatform.X
    assert normalize("  TWITTER ") == CanonicalPlatform.X
    assert normalize("Twitter") == normalize("x") == "x"


def test_normalize_known_platforms() -> None:
    """Known names map to themselves, case-insensitive and trimmed."""
    assert normalize("Instagram") == CanonicalPlatform.INSTAGRAM
    assert normalize(" linkedin ") == CanonicalPlatform.LINKEDIN
    assert normalize("TikTok") == CanonicalPlatform.TIKTOK
    assert normalize("threads") == CanonicalPlatform.THREADS
    assert normalize("YouTube") == CanonicalPlatform.YOUTUBE
    assert normalize("facebook") == CanonicalPlatform.FACEBOOK


def test_normalize_unknown_and_empty() -> None:
    """None, empty and unrecognized names give unknown."""
    assert normalize(None) == CanonicalPlatform.UNKNOWN
    assert normalize("") == CanonicalPlatform.UNKNOWN
    assert normalize("   ") == CanonicalPlatform.UNKNOWN
    assert normalize("myspace") == CanonicalPlatform.UNKNOWN


@pytest.mark.parametrize("raw", ["Twitter", "x", "INSTAGRAM", "", None, "myspace", " threads ", "unknown"])
def test_normalize_idempotent(raw) -> None:
    """normalize(normalize(p)) == normalize(p)."""
    once = normalize(raw)
    assert normalize(once) == once
    assert normalize(once.value) == once


def test_normalize_filter_keeps_all() -> None:
    """Platform query values: all/empty stay all, others are normalized."""
    assert normalize_filter("all") == ALL_PLATFORMS
    assert normalize_filter("ALL") == ALL_PLATFORMS
    assert normalize_filter(None) == ALL_PLATFORMS
    assert normalize_filter("") == ALL_PLATFORMS
    assert normalize_filter("Twitter") == "x"


def test_coerce_count() -> None:
    """None/garbage -> 0, negatives clamp to 0, numeric strings parse."""
    assert coerce_count(None) == 0
    assert coerce_count("abc") == 0
    assert coerce_count(-5) == 0
    assert coerce_count("12") == 12
    assert coerce_count(7.9) == 7


def test_coerce_count_non_finite() -> None:
    """inf and nan (as floats or strings) are treated as garbage, not raised."""
    assert coerce_count(float("inf")) == 0
    assert coerce_count("-inf") == 0
    assert coerce_count(float("nan")) == 0
    s = AnalyticsSample.model_validate({"post_id": "p", "date": "2025-01-02", "impressions": "Infinity"})
    assert s.impressions == 0


def test_analytics_sample_coercion() -> None:
    """Null and negative counts become 0; date parses from ISO strings and instants."""
    s = AnalyticsSample.model_validate({
        "post_id": 1,
        "date": "2025-01-02T13:00:00Z",
        "likes": None,
        "comments": -3,
        "shares": "2",
        "impressions": 100,
    })
    assert s.post_id == "1"
    assert s.date == date(2025, 1, 2)
    assert (s.likes, s.comments, s.shares, s.impressions) == (0, 0, 2, 100)
    assert s.engagement == 2


def test_analytics_sample_unparsable_date_is_none() -> None:
    """An invalid calendar day is kept as None (filters drop it), not an error."""
    s = AnalyticsSample.model_validate({"post_id": "p", "date": "2025-02-30"})
    assert s.date is None
    s2 = AnalyticsSample.model_validate({"post_id": "p", "date": "not-a-date"})
    assert s2.date is None


def test_parse_day_rejects_trailing_garbage() -> None:
    """Only a full day or a full ISO instant parses."""
    assert parse_day("2025-01-05garbage") is None
    assert parse_day("2025-01-05 ") == date(2025, 1, 5)
    assert parse_day("2025-01-05T23:30:00+09:00") == date(2025, 1, 5)


def test_post_metadata_aliases_and_platform_precedence() -> None:
    """publishedAt alias parses; direct platform wins over metadata.platform."""
    post = Post.model_validate({
        "id": "p1",
        "created_at": "2025-01-01T08:00:00",
        "platform": "facebook",
        "metadata": {"platform": "instagram", "publishedAt": "2025-01-03T09:00:00Z", "followers": "1200"},
    })
    assert post.canonical_platform == CanonicalPlatform.FACEBOOK
    assert post.metadata.followers == 1200
    assert post.posted_at == datetime(2025, 1, 3, 9, 0, tzinfo=timezone.utc)
    assert post.created_at.tzinfo is not None

    nested = Post.model_validate({"id": "p2", "metadata": {"platform": "Twitter"}})
    assert nested.canonical_platform == CanonicalPlatform.X
    assert nested.posted_at is None


def test_post_metadata_non_dict_is_ignored() -> None:
    """A metadata value that is not an object degrades to empty metadata."""
    post = Post.model_validate({"id": "p1", "metadata": "oops", "content": None})
    assert post.metadata.platform is None
    assert post.content == ""


def test_social_account_followers_aliases() -> None:
    """followers / followersCount in platform_specific_data; absent -> 0."""
    a = SocialAccount.model_validate({"id": "a", "platform": "x", "platform_specific_data": {"followersCount": 42}})
    assert a.followers == 42
    b = SocialAccount.model_validate({"id": "b", "platform": "x", "platform_specific_data": None})
    assert b.followers == 0
