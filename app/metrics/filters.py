"""
Record filters: date range, platform, brand. Pure and order-preserving.

The dashboard filters once (filter_dataset) and hands the same FilteredDataset to
every reducer (series builder, platform rollup, post table, demographics).
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, TypeVar

from app.metrics.date_ranges import DateRange
from app.metrics.platforms import ALL_PLATFORMS, normalize, normalize_filter
from app.metrics.records import AnalyticsSample, Post, SocialAccount, parse_instant

T = TypeVar("T")

ALL_BRANDS = "all"


def _is_all(value: Optional[str], sentinel: str) -> bool:
    return value is None or str(value).strip() == "" or str(value).strip().lower() == sentinel


def _item_get(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def filter_by_date_range(items: Iterable[T], date_range: DateRange, date_field: str) -> List[T]:
    """
    Keep items whose `date_field` falls inside the range (inclusive).
    Calendar days compare by day; instants compare by instant. Missing or
    unparsable values are dropped, never defaulted to now.
    """
    out: List[T] = []
    for item in items:
        value = _item_get(item, date_field)
        if isinstance(value, datetime):
            if date_range.contains(value):
                out.append(item)
        elif isinstance(value, date):
            if date_range.contains_day(value):
                out.append(item)
        elif isinstance(value, str):
            instant = parse_instant(value)
            if instant is not None and date_range.contains(instant):
                out.append(item)
    return out


def item_platform(item: Any) -> Optional[str]:
    """Direct `platform` first; nested metadata.platform only when the direct field is absent."""
    if isinstance(item, Post):
        return item.raw_platform
    direct = _item_get(item, "platform")
    if direct:
        return direct
    metadata = _item_get(item, "metadata")
    if metadata is None:
        return None
    return _item_get(metadata, "platform")


def filter_by_platform(items: Iterable[T], platform: Optional[str]) -> List[T]:
    """Keep items on the canonical platform; "all" keeps everything."""
    wanted = normalize_filter(platform)
    if wanted == ALL_PLATFORMS:
        return list(items)
    return [item for item in items if normalize(item_platform(item)).value == wanted]


def filter_by_brand(items: Iterable[T], brand_id: Optional[str]) -> List[T]:
    """Keep items of the brand; "all" keeps everything."""
    if _is_all(brand_id, ALL_BRANDS):
        return list(items)
    wanted = str(brand_id).strip()
    return [item for item in items if str(_item_get(item, "brand_id")) == wanted]


def filter_samples(
    samples: Iterable[AnalyticsSample],
    posts: Sequence[Post],
    keep_orphans: bool = True,
) -> List[AnalyticsSample]:
    """
    Keep samples whose owning post is in `posts`.
    Samples with no known post survive only when keep_orphans (no brand/platform filter).
    """
    known_ids = {p.id for p in posts}
    out: List[AnalyticsSample] = []
    for s in samples:
        if s.post_id in known_ids:
            out.append(s)
        elif keep_orphans:
            out.append(s)
    return out


@dataclass(frozen=True)
class DashboardDataset:
    """Raw rows for one request, already fetched from the store."""

    posts: Sequence[Post] = ()
    samples: Sequence[AnalyticsSample] = ()
    accounts: Sequence[SocialAccount] = ()


@dataclass(frozen=True)
class FilteredDataset:
    """Rows after brand + platform + date filtering."""

    date_range: DateRange
    platform: str
    brand: str
    posts: List[Post] = field(default_factory=list)
    samples: List[AnalyticsSample] = field(default_factory=list)
    accounts: List[SocialAccount] = field(default_factory=list)
    posts_by_id: Dict[str, Post] = field(default_factory=dict)


def filter_dataset(
    dataset: DashboardDataset,
    date_range: DateRange,
    platform: Optional[str] = ALL_PLATFORMS,
    brand: Optional[str] = ALL_BRANDS,
) -> FilteredDataset:
    """
    Apply brand, platform and date predicates once.
    Posts are dated by posted_at; samples by their calendar day. Samples follow
    their owning post's brand/platform. Accounts are snapshots, so they are
    filtered by brand and platform only.
    """
    wanted_platform = normalize_filter(platform)
    wanted_brand = ALL_BRANDS if _is_all(brand, ALL_BRANDS) else str(brand).strip()
    scoped = wanted_platform != ALL_PLATFORMS or wanted_brand != ALL_BRANDS

    scoped_posts = filter_by_platform(filter_by_brand(dataset.posts, wanted_brand), wanted_platform)
    posts = filter_by_date_range(scoped_posts, date_range, "posted_at")

    # Samples match every scoped post, including posts published before the range.
    dated_samples = filter_by_date_range(dataset.samples, date_range, "date")
    samples = filter_samples(dated_samples, scoped_posts, keep_orphans=not scoped)

    accounts = filter_by_platform(filter_by_brand(dataset.accounts, wanted_brand), wanted_platform)

    return FilteredDataset(
        date_range=date_range,
        platform=wanted_platform,
        brand=wanted_brand,
        posts=posts,
        samples=samples,
        accounts=accounts,
        posts_by_id={p.id: p for p in scoped_posts},
    )
