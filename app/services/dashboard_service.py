"""
Dashboard aggregation: one synchronous pass per request over already-fetched rows.

resolve range -> filter once -> (series builder, platform rollup, post table, demographics)
-> bucket keys -> projection. Nothing is cached or persisted.
"""
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

from app.config import get_settings
from app.logging_config import get_logger
from app.metrics.buckets import Granularity, generate_bucket_keys, parse_granularity
from app.metrics.date_ranges import DateRange, resolve
from app.metrics.demographics import Demographics, aggregate_demographics
from app.metrics.filters import DashboardDataset, FilteredDataset, filter_dataset
from app.metrics.growth import GrowthEstimator, estimator_for
from app.metrics.platforms import ALL_PLATFORMS
from app.metrics.projector import DashboardTotals, ProjectedSeries, engagement_rate, project
from app.metrics.rollup import PlatformRollup, connected_platforms, rollup_platforms
from app.metrics.scoring import PostRow, top_posts
from app.metrics.series_builder import build_series

logger = get_logger(__name__)


class MetricName(str, Enum):
    """Metric highlighted by the UI; also picks the value shown on platform cards."""

    FOLLOWERS = "followers"
    IMPRESSIONS = "impressions"
    ENGAGEMENT = "engagement"
    ENGAGEMENT_RATE = "engagement_rate"
    POSTS = "posts"
    NET_GROWTH = "net_growth"


@dataclass(frozen=True)
class DashboardQuery:
    platform: str = ALL_PLATFORMS
    brand: str = "all"
    metric: MetricName = MetricName.FOLLOWERS
    range_name: str = "last7"
    custom_from: Optional[str] = None
    custom_to: Optional[str] = None
    granularity: Union[str, Granularity] = Granularity.DAY


@dataclass(frozen=True)
class PlatformCard:
    platform: str
    value: float
    change: float


@dataclass
class DashboardResult:
    date_range: DateRange
    granularity: Granularity
    platform: str
    brand: str
    metric: MetricName
    bucket_keys: List[str]
    totals: DashboardTotals
    platforms: List[PlatformCard]
    connected: List[PlatformRollup]
    series: ProjectedSeries
    posts: List[PostRow]
    demographics: Demographics
    growth_source: str
    rollups: Dict[str, PlatformRollup] = field(default_factory=dict)


def card_value(r: PlatformRollup, metric: MetricName) -> float:
    if metric == MetricName.IMPRESSIONS:
        return r.impressions
    if metric == MetricName.ENGAGEMENT:
        return r.engagement
    if metric == MetricName.ENGAGEMENT_RATE:
        return engagement_rate(r.engagement, r.impressions)
    if metric == MetricName.POSTS:
        return r.post_count
    return r.followers


def totals_rollup(totals: DashboardTotals) -> PlatformRollup:
    """
    The "all" card mirrors the KPI totals, so samples without a known post
    (counted only when no filter is active) show there too.
    """
    return PlatformRollup(
        platform=ALL_PLATFORMS,
        followers=totals.followers,
        impressions=totals.impressions,
        engagement=totals.engagement,
        post_count=totals.posts,
    )


def compute_totals(filtered: FilteredDataset, rollups: Mapping[str, PlatformRollup]) -> DashboardTotals:
    """
    followers: sum of each platform's max snapshot.
    impressions/engagement: every filtered sample (orphans included).
    """
    return DashboardTotals(
        followers=sum(r.followers for r in rollups.values()),
        impressions=sum(s.impressions for s in filtered.samples),
        engagement=sum(s.engagement for s in filtered.samples),
        posts=len(filtered.posts),
    )


def platform_cards(
    connected: List[PlatformRollup],
    totals: DashboardTotals,
    metric: MetricName,
    estimator: GrowthEstimator,
) -> List[PlatformCard]:
    """One card per connected platform, preceded by the "all" aggregate."""
    cards = [
        PlatformCard(
            platform=ALL_PLATFORMS,
            value=card_value(totals_rollup(totals), metric),
            change=estimator.change_percent(ALL_PLATFORMS, metric.value),
        )
    ]
    for r in connected:
        cards.append(PlatformCard(
            platform=r.platform,
            value=card_value(r, metric),
            change=estimator.change_percent(r.platform, metric.value),
        ))
    return cards


def build_dashboard(
    dataset: DashboardDataset,
    query: DashboardQuery,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    follower_history: Optional[Mapping[str, int]] = None,
    platform_follower_history: Optional[Mapping[str, Mapping[str, int]]] = None,
    top_posts_limit: Optional[int] = None,
) -> DashboardResult:
    """
    Build every dashboard aggregate for one request.
    Raises InvalidDateRangeError for malformed/inverted custom ranges (no partial result).
    """
    settings = get_settings()
    zone = tz if tz is not None else settings.tz
    granularity = parse_granularity(query.granularity)
    metric = MetricName(query.metric)

    date_range = resolve(query.range_name, query.custom_from, query.custom_to, now=now, tz=zone)
    filtered = filter_dataset(dataset, date_range, platform=query.platform, brand=query.brand)
    logger.info(
        "dashboard.filtered",
        range=query.range_name,
        start=date_range.first_day.isoformat(),
        end=date_range.last_day.isoformat(),
        platform=filtered.platform,
        brand=filtered.brand,
        posts=len(filtered.posts),
        samples=len(filtered.samples),
        accounts=len(filtered.accounts),
    )

    series_map = build_series(filtered.samples, filtered.posts_by_id, granularity)
    rollups = rollup_platforms(
        filtered.posts,
        filtered.samples,
        filtered.accounts,
        posts_by_id=filtered.posts_by_id,
    )
    connected = connected_platforms(rollups.values())
    totals = compute_totals(filtered, rollups)

    estimator = estimator_for(follower_history, platform_follower_history)
    bucket_keys = generate_bucket_keys(date_range, granularity, max_buckets=settings.dashboard_max_series_buckets)
    series = project(bucket_keys, series_map, totals, estimator)

    limit = top_posts_limit if top_posts_limit is not None else settings.dashboard_top_posts_limit
    rows = top_posts(filtered.posts, filtered.samples, limit=limit)

    logger.info(
        "dashboard.built",
        granularity=granularity.value,
        buckets=len(bucket_keys),
        buckets_with_data=sum(1 for k in bucket_keys if k in series_map),
        connected_platforms=[r.platform for r in connected],
        growth_source=getattr(estimator, "name", type(estimator).__name__),
    )

    return DashboardResult(
        date_range=date_range,
        granularity=granularity,
        platform=filtered.platform,
        brand=filtered.brand,
        metric=metric,
        bucket_keys=bucket_keys,
        totals=totals,
        platforms=platform_cards(connected, totals, metric, estimator),
        connected=connected,
        series=series,
        posts=rows,
        demographics=aggregate_demographics(filtered.samples),
        growth_source=getattr(estimator, "name", type(estimator).__name__),
        rollups=rollups,
    )
