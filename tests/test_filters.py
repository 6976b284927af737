"""
Tests for record filters (date range, platform, brand) and filter_dataset.
- missing/unparsable dates are excluded, never defaulted to now.
- post platform: direct field first, metadata.platform only when the direct field is absent.
- filters are order-preserving and composable.
"""
from datetime import date, datetime, time, timezone

from app.metrics.date_ranges import DateRange
from app.metrics.filters import (
    DashboardDataset,
    filter_by_brand,
    filter_by_date_range,
    filter_by_platform,
    filter_dataset,
)
from app.metrics.records import AnalyticsSample, Post, SocialAccount

RANGE = DateRange(
    datetime(2025, 1, 1, tzinfo=timezone.utc),
    datetime.combine(date(2025, 1, 7), time.max, tzinfo=timezone.utc),
)


def _post(pid: str, created: str, platform=None, meta_platform=None, brand="b1") -> Post:
    metadata = {"platform": meta_platform} if meta_platform else {}
    return Post.model_validate({
        "id": pid,
        "brand_id": brand,
        "created_at": created,
        "platform": platform,
        "metadata": metadata,
    })


def test_filter_by_date_range_excludes_missing_and_unparsable() -> None:
    """Samples without a valid date are dropped; boundary days are kept."""
    samples = [
        AnalyticsSample.model_validate({"post_id": "a", "date": "2025-01-01"}),
        AnalyticsSample.model_validate({"post_id": "b", "date": None}),
        AnalyticsSample.model_validate({"post_id": "c", "date": "garbage"}),
        AnalyticsSample.model_validate({"post_id": "d", "date": "2025-01-07"}),
        AnalyticsSample.model_validate({"post_id": "e", "date": "2025-01-08"}),
    ]
    kept = filter_by_date_range(samples, RANGE, "date")
    assert [s.post_id for s in kept] == ["a", "d"]


def test_filter_by_date_range_on_instants_and_dicts() -> None:
    """Instants compare by instant; plain dict rows with ISO strings work too."""
    posts = [
        _post("in", "2025-01-07T23:00:00Z"),
        _post("out", "2025-01-08T00:00:01Z"),
        _post("none", None),
    ]
    assert [p.id for p in filter_by_date_range(posts, RANGE, "posted_at")] == ["in"]

    rows = [{"id": 1, "date": "2025-01-02"}, {"id": 2, "date": "nope"}, {"id": 3}]
    assert [r["id"] for r in filter_by_date_range(rows, RANGE, "date")] == [1]


def test_filter_by_platform_direct_then_nested() -> None:
    """metadata.platform is only consulted when the direct field is absent."""
    posts = [
        _post("direct-fb", "2025-01-02", platform="facebook", meta_platform="instagram"),
        _post("nested-ig", "2025-01-02", meta_platform="Instagram"),
        _post("nested-tw", "2025-01-02", meta_platform="twitter"),
    ]
    assert [p.id for p in filter_by_platform(posts, "instagram")] == ["nested-ig"]
    assert [p.id for p in filter_by_platform(posts, "x")] == ["nested-tw"]
    assert [p.id for p in filter_by_platform(posts, "Twitter")] == ["nested-tw"]
    assert [p.id for p in filter_by_platform(posts, "all")] == ["direct-fb", "nested-ig", "nested-tw"]


def test_filter_by_platform_on_dict_rows() -> None:
    """Dict rows: direct key first, nested metadata.platform second."""
    rows = [{"platform": "X"}, {"metadata": {"platform": "twitter"}}, {"metadata": None}]
    assert len(filter_by_platform(rows, "x")) == 2


def test_filter_by_brand() -> None:
    """brand "all" keeps everything; otherwise exact brand id."""
    accounts = [
        SocialAccount.model_validate({"id": "1", "platform": "x", "brand_id": "b1"}),
        SocialAccount.model_validate({"id": "2", "platform": "x", "brand_id": "b2"}),
    ]
    assert [a.id for a in filter_by_brand(accounts, "b2")] == ["2"]
    assert len(filter_by_brand(accounts, "all")) == 2
    assert len(filter_by_brand(accounts, None)) == 2


def test_filters_compose_and_preserve_order() -> None:
    """Chaining filters keeps input order."""
    posts = [
        _post("p3", "2025-01-03", platform="x", brand="b1"),
        _post("p1", "2025-01-01", platform="x", brand="b2"),
        _post("p2", "2025-01-02", platform="x", brand="b1"),
        _post("p0", "2024-12-30", platform="x", brand="b1"),
    ]
    out = filter_by_date_range(filter_by_platform(filter_by_brand(posts, "b1"), "x"), RANGE, "posted_at")
    assert [p.id for p in out] == ["p3", "p2"]


def test_filter_dataset_orphans_only_when_unscoped() -> None:
    """Orphan samples (no post) survive only without brand/platform filters."""
    dataset = DashboardDataset(
        posts=[_post("p1", "2025-01-02", platform="instagram")],
        samples=[
            AnalyticsSample.model_validate({"post_id": "p1", "date": "2025-01-02", "impressions": 10}),
            AnalyticsSample.model_validate({"post_id": "ghost", "date": "2025-01-03", "impressions": 5}),
        ],
    )
    unscoped = filter_dataset(dataset, RANGE)
    assert [s.post_id for s in unscoped.samples] == ["p1", "ghost"]

    scoped = filter_dataset(dataset, RANGE, platform="instagram")
    assert [s.post_id for s in scoped.samples] == ["p1"]
    assert scoped.platform == "instagram"


def test_filter_dataset_keeps_samples_of_posts_published_before_range() -> None:
    """A post from last month still contributes this range's analytics samples."""
    dataset = DashboardDataset(
        posts=[_post("old", "2024-12-01", platform="x")],
        samples=[AnalyticsSample.model_validate({"post_id": "old", "date": "2025-01-04", "impressions": 7})],
    )
    f = filter_dataset(dataset, RANGE, platform="twitter")
    assert f.posts == []
    assert [s.impressions for s in f.samples] == [7]
    assert "old" in f.posts_by_id
