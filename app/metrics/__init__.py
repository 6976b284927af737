"""Metrics aggregation and time-series bucketing engine (pure, synchronous)."""
from app.metrics.buckets import Granularity, bucket_key, generate_bucket_keys
from app.metrics.date_ranges import DateRange, RangeName, resolve
from app.metrics.errors import InvalidDateRangeError, MetricsError
from app.metrics.filters import DashboardDataset, FilteredDataset, filter_dataset
from app.metrics.growth import (
    GrowthEstimator,
    RealGrowthEstimator,
    SeededMockEstimator,
    seeded_random,
)
from app.metrics.platforms import CanonicalPlatform, normalize
from app.metrics.projector import DashboardTotals, ProjectedSeries, engagement_rate, project
from app.metrics.records import AnalyticsSample, Post, SocialAccount
from app.metrics.rollup import PlatformRollup, rollup, rollup_platforms
from app.metrics.series_builder import Bucket, build_series

__all__ = [
    "AnalyticsSample",
    "Bucket",
    "CanonicalPlatform",
    "DashboardDataset",
    "DashboardTotals",
    "DateRange",
    "FilteredDataset",
    "Granularity",
    "GrowthEstimator",
    "InvalidDateRangeError",
    "MetricsError",
    "PlatformRollup",
    "Post",
    "ProjectedSeries",
    "RangeName",
    "RealGrowthEstimator",
    "SeededMockEstimator",
    "SocialAccount",
    "bucket_key",
    "build_series",
    "engagement_rate",
    "filter_dataset",
    "generate_bucket_keys",
    "normalize",
    "project",
    "resolve",
    "rollup",
    "rollup_platforms",
    "seeded_random",
]
