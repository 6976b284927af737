"""Fold analytics samples into per-bucket flow totals and follower snapshots."""
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

from app.metrics.buckets import Granularity, bucket_key
from app.metrics.records import AnalyticsSample, Post


@dataclass
class Bucket:
    key: str
    followers: int = 0
    impressions: int = 0
    engagement: int = 0
    sample_count: int = 0


def build_series(
    samples: Iterable[AnalyticsSample],
    posts: Union[Sequence[Post], Mapping[str, Post]],
    granularity: Union[str, Granularity] = Granularity.DAY,
) -> Dict[str, Bucket]:
    """
    Map bucket key -> Bucket.

    impressions and engagement (likes + comments + shares) are summed; followers is a
    snapshot, so the bucket keeps the max follower count seen on the owning posts.
    Samples without a matching post still count toward flows. Samples without a date
    are skipped. Inputs are not mutated.
    """
    posts_by_id: Mapping[str, Post]
    if isinstance(posts, Mapping):
        posts_by_id = posts
    else:
        posts_by_id = {p.id: p for p in posts}

    series: Dict[str, Bucket] = {}
    for sample in samples:
        if sample.date is None:
            continue
        key = bucket_key(sample.date, granularity)
        bucket = series.get(key)
        if bucket is None:
            bucket = series[key] = Bucket(key=key)
        bucket.impressions += sample.impressions
        bucket.engagement += sample.engagement
        bucket.sample_count += 1

        post: Optional[Post] = posts_by_id.get(sample.post_id) if sample.post_id else None
        if post is not None and post.metadata.followers:
            bucket.followers = max(bucket.followers, post.metadata.followers)
    return series
