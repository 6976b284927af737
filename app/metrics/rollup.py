"""Per-platform totals: max-of-snapshot followers, summed flows, post count."""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from app.metrics.platforms import CanonicalPlatform, normalize
from app.metrics.records import AnalyticsSample, Post, SocialAccount


@dataclass(frozen=True)
class PlatformRollup:
    platform: str
    followers: int = 0
    impressions: int = 0
    engagement: int = 0
    post_count: int = 0

    @property
    def connected(self) -> bool:
        """Heuristic used for the "connected platforms" list."""
        return self.followers > 0 or self.post_count > 0


def max_followers(accounts: Iterable[SocialAccount], platform: Union[str, CanonicalPlatform]) -> int:
    """Largest follower snapshot among the platform's accounts (duplicate rows never add up)."""
    wanted = normalize(platform)
    best = 0
    for account in accounts:
        if account.canonical_platform == wanted:
            best = max(best, account.followers)
    return best


def rollup(
    posts: Sequence[Post],
    samples: Iterable[AnalyticsSample],
    accounts: Iterable[SocialAccount],
    platform: Union[str, CanonicalPlatform],
    posts_by_id: Optional[Mapping[str, Post]] = None,
) -> PlatformRollup:
    """
    followers = max account snapshot; post_count = posts on the platform;
    impressions/engagement = sums over samples whose owning post is on the platform.
    posts_by_id resolves sample owners (defaults to `posts`).
    """
    wanted = normalize(platform)
    owners = posts_by_id if posts_by_id is not None else {p.id: p for p in posts}

    impressions = 0
    engagement = 0
    for sample in samples:
        owner = owners.get(sample.post_id) if sample.post_id else None
        if owner is None or owner.canonical_platform != wanted:
            continue
        impressions += sample.impressions
        engagement += sample.engagement

    return PlatformRollup(
        platform=wanted.value,
        followers=max_followers(accounts, wanted),
        impressions=impressions,
        engagement=engagement,
        post_count=sum(1 for p in posts if p.canonical_platform == wanted),
    )


def rollup_platforms(
    posts: Sequence[Post],
    samples: Sequence[AnalyticsSample],
    accounts: Sequence[SocialAccount],
    posts_by_id: Optional[Mapping[str, Post]] = None,
) -> Dict[str, PlatformRollup]:
    """Rollup for every canonical platform that appears in posts or accounts, in enum order."""
    seen = {p.canonical_platform for p in posts} | {a.canonical_platform for a in accounts}
    return {
        platform.value: rollup(posts, samples, accounts, platform, posts_by_id=posts_by_id)
        for platform in CanonicalPlatform
        if platform in seen
    }


def connected_platforms(rollups: Iterable[PlatformRollup]) -> List[PlatformRollup]:
    """Drop platforms with zero followers and zero posts."""
    return [r for r in rollups if r.connected]
