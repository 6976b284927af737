"""
Chart-ready series: join the bucket key list against the series map.

Buckets with no data get the period total spread evenly (flows) or the current
follower count (snapshot), so charts never show gaps or sudden zeros.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from app.metrics.growth import GrowthEstimator
from app.metrics.series_builder import Bucket


@dataclass(frozen=True)
class DashboardTotals:
    followers: int = 0
    impressions: int = 0
    engagement: int = 0
    posts: int = 0

    @property
    def engagement_rate(self) -> float:
        return engagement_rate(self.engagement, self.impressions)


@dataclass(frozen=True)
class SeriesPoint:
    date: str
    value: float


@dataclass
class ProjectedSeries:
    engagement: List[SeriesPoint] = field(default_factory=list)
    impressions: List[SeriesPoint] = field(default_factory=list)
    followers: List[SeriesPoint] = field(default_factory=list)
    net_growth: List[SeriesPoint] = field(default_factory=list)
    engagement_rate: List[SeriesPoint] = field(default_factory=list)

    def as_dict(self) -> Dict[str, List[SeriesPoint]]:
        return {
            "engagement": self.engagement,
            "impressions": self.impressions,
            "followers": self.followers,
            "net_growth": self.net_growth,
            "engagement_rate": self.engagement_rate,
        }


def engagement_rate(engagement: int, impressions: int) -> float:
    """engagement / impressions * 100, one decimal; 0 when impressions is 0."""
    if impressions <= 0:
        return 0.0
    return round(engagement / impressions * 100, 1)


def fallback_share(total: int, bucket_count: int) -> int:
    """floor(total / bucket_count); 0 for an empty series."""
    if bucket_count <= 0 or total <= 0:
        return 0
    return total // bucket_count


def project(
    bucket_keys: Sequence[str],
    series_map: Mapping[str, Bucket],
    totals: DashboardTotals,
    estimator: GrowthEstimator,
) -> ProjectedSeries:
    """
    One point per bucket key in each of the five series, in key order.

    engagement rate is computed from the bucket's own data only; a bucket
    without impressions (or without data) reports 0, never a fallback.
    """
    count = len(bucket_keys)
    impressions_share = fallback_share(totals.impressions, count)
    engagement_share = fallback_share(totals.engagement, count)

    out = ProjectedSeries()
    for key in bucket_keys:
        bucket = series_map.get(key)
        if bucket is not None:
            impressions = bucket.impressions
            engagement = bucket.engagement
            rate = engagement_rate(bucket.engagement, bucket.impressions)
        else:
            impressions = impressions_share
            engagement = engagement_share
            rate = 0.0

        followers = bucket.followers if bucket is not None and bucket.followers > 0 else totals.followers

        out.engagement.append(SeriesPoint(date=key, value=engagement))
        out.impressions.append(SeriesPoint(date=key, value=impressions))
        out.followers.append(SeriesPoint(date=key, value=followers))
        out.net_growth.append(SeriesPoint(date=key, value=estimator.net_growth(key, followers)))
        out.engagement_rate.append(SeriesPoint(date=key, value=rate))
    return out
