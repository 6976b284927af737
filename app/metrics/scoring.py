"""
Post table: per-post totals, simple score, and a benchmark-relative smart score.

smart_score compares a post against the brand's top 10 posts of the same platform
and post type (stories against stories, reels against reels):
  - relative part (0-70): log-scaled impressions 25%, log-scaled engagement 50%, linear rate 25%
  - absolute bonus (0-30) for objectively good engagement, rate and reach
  - benchmark bonus (0-10) for matching or beating the top benchmarks
Posts with engagement < 2 are capped at 40.
"""
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from app.metrics.projector import engagement_rate
from app.metrics.records import AnalyticsSample, Post, PostMetadata

BENCHMARK_TOP_N = 10
MIN_ENGAGEMENT_THRESHOLD = 5
MIN_IMPRESSIONS_THRESHOLD = 10
MIN_ENGAGEMENT_RATE_THRESHOLD = 0.5

SIMPLE_SCORE_CAP = 50
LOW_ENGAGEMENT_CAP = 40

VIDEO_MARKERS = (".mp4", ".mov", ".avi", ".webm", "video")


@dataclass(frozen=True)
class PostPerformance:
    platform: str
    post_type: str
    impressions: int
    engagement: int
    engagement_rate: float


@dataclass(frozen=True)
class Benchmarks:
    top_impressions: float = 0
    top_engagement: float = 0
    top_engagement_rate: float = 0
    avg_impressions: float = 0
    avg_engagement: float = 0
    avg_engagement_rate: float = 0


@dataclass(frozen=True)
class PostRow:
    post_id: str
    score: int
    smart_score: int
    engagement_rate: float
    engagement: int
    impressions: int
    date: Optional[str]
    content: str
    platform: str
    post_type: str


def detect_post_type(
    platform: str,
    metadata: Optional[PostMetadata] = None,
    media_urls: Optional[Sequence[str]] = None,
) -> str:
    """Explicit content type / format / post type wins; otherwise guess from platform and media."""
    metadata = metadata or PostMetadata()
    for explicit in (metadata.content_type, metadata.format, metadata.post_type):
        if explicit:
            return explicit.lower()

    p = (platform or "").lower()
    media_type = (metadata.media_type or "").lower()
    urls = [u.lower() for u in (media_urls or [])]
    media_count = len(urls)
    has_video = any(marker in u for u in urls for marker in VIDEO_MARKERS)

    if p == "instagram":
        if "story" in media_type or metadata.is_story:
            return "story"
        if "reel" in media_type or metadata.is_reel:
            return "reel"
        if media_count > 1:
            return "carousel"
        return "reel" if has_video else "feed"
    if p == "facebook":
        if "story" in media_type or metadata.is_story:
            return "story"
        return "video" if has_video else "feed"
    if p in ("x", "twitter"):
        return "thread" if metadata.is_thread or media_count > 4 else "post"
    if p == "tiktok":
        return "carousel" if media_count > 1 else "video"
    if p == "youtube":
        return "video"
    if p == "linkedin":
        return "post"

    if has_video:
        return "video"
    if media_count > 1:
        return "carousel"
    return "post"


def post_score(rate: float, engagement: int) -> int:
    """Simple weighted score: rate * 2 plus engagement volume (hundreds, max 30), capped at 50."""
    return min(SIMPLE_SCORE_CAP, int(math.floor(rate * 2 + min(engagement / 100, 30))))


def _composite(p: PostPerformance) -> float:
    return p.impressions * (p.engagement_rate / 100) + p.engagement


def calculate_benchmarks(posts: Iterable[PostPerformance], platform: str, post_type: str) -> Benchmarks:
    """Benchmarks from the top 10 posts of the platform + type, floored at minimum thresholds."""
    same = [
        p for p in posts
        if p.platform.lower() == platform.lower() and p.post_type.lower() == post_type.lower()
    ]
    if not same:
        return Benchmarks()
    top = sorted(same, key=_composite, reverse=True)[:BENCHMARK_TOP_N]
    n = len(top)
    return Benchmarks(
        top_impressions=max(max(p.impressions for p in top), MIN_IMPRESSIONS_THRESHOLD),
        top_engagement=max(max(p.engagement for p in top), MIN_ENGAGEMENT_THRESHOLD),
        top_engagement_rate=max(max(p.engagement_rate for p in top), MIN_ENGAGEMENT_RATE_THRESHOLD),
        avg_impressions=max(sum(p.impressions for p in top) / n, MIN_IMPRESSIONS_THRESHOLD),
        avg_engagement=max(sum(p.engagement for p in top) / n, MIN_ENGAGEMENT_THRESHOLD),
        avg_engagement_rate=max(sum(p.engagement_rate for p in top) / n, MIN_ENGAGEMENT_RATE_THRESHOLD),
    )


def _log_ratio(value: float, top: float) -> float:
    if top <= 0:
        return 0.0
    return min(1.0, math.log10(1 + value) / math.log10(1 + top))


def _absolute_bonus(p: PostPerformance) -> int:
    bonus = 0
    if p.engagement >= 20:
        bonus += 15
    elif p.engagement >= 10:
        bonus += 10
    elif p.engagement >= 5:
        bonus += 5

    if p.engagement_rate >= 5:
        bonus += 10
    elif p.engagement_rate >= 2:
        bonus += 5
    elif p.engagement_rate >= 1:
        bonus += 2

    if p.impressions >= 1000:
        bonus += 5
    elif p.impressions >= 500:
        bonus += 3
    elif p.impressions >= 100:
        bonus += 1
    return min(30, bonus)


def smart_score(post: PostPerformance, all_posts: Sequence[PostPerformance]) -> int:
    """0-100 score relative to the brand's best posts of the same type."""
    b = calculate_benchmarks(all_posts, post.platform, post.post_type)
    if b.top_impressions == 0 and b.top_engagement == 0 and b.top_engagement_rate == 0:
        return post_score(post.engagement_rate, post.engagement)

    rate_ratio = min(1.0, post.engagement_rate / b.top_engagement_rate) if b.top_engagement_rate > 0 else 0.0
    relative = (
        _log_ratio(post.impressions, b.top_impressions) * 0.25
        + _log_ratio(post.engagement, b.top_engagement) * 0.50
        + rate_ratio * 0.25
    ) * 70

    benchmark_bonus = 0
    if post.impressions >= b.top_impressions > 0:
        benchmark_bonus += 3
    if post.engagement >= b.top_engagement > 0:
        benchmark_bonus += 4
    if post.engagement_rate >= b.top_engagement_rate > 0:
        benchmark_bonus += 3
    benchmark_bonus = min(10, benchmark_bonus)

    score = relative + _absolute_bonus(post) + benchmark_bonus
    if post.engagement < 2:
        score = min(LOW_ENGAGEMENT_CAP, score)
    return int(round(min(100.0, max(0.0, score))))


def top_posts(
    posts: Sequence[Post],
    samples: Iterable[AnalyticsSample],
    limit: int = 10,
) -> List[PostRow]:
    """
    Table rows for the highest-scoring posts.
    Sorted by score, then engagement, then impressions (all descending).
    """
    flows: Dict[str, List[int]] = {p.id: [0, 0] for p in posts}
    for s in samples:
        acc = flows.get(s.post_id) if s.post_id else None
        if acc is None:
            continue
        acc[0] += s.impressions
        acc[1] += s.engagement

    perf: Mapping[str, PostPerformance] = {
        p.id: PostPerformance(
            platform=p.canonical_platform.value,
            post_type=detect_post_type(p.canonical_platform.value, p.metadata, p.media_urls),
            impressions=flows[p.id][0],
            engagement=flows[p.id][1],
            engagement_rate=engagement_rate(flows[p.id][1], flows[p.id][0]),
        )
        for p in posts
    }
    everything = list(perf.values())

    rows: List[PostRow] = []
    for p in posts:
        m = perf[p.id]
        posted = p.posted_at
        rows.append(PostRow(
            post_id=p.id,
            score=post_score(m.engagement_rate, m.engagement),
            smart_score=smart_score(m, everything),
            engagement_rate=m.engagement_rate,
            engagement=m.engagement,
            impressions=m.impressions,
            date=posted.date().isoformat() if posted else None,
            content=p.content,
            platform=m.platform,
            post_type=m.post_type,
        ))
    rows.sort(key=lambda r: (r.score, r.engagement, r.impressions), reverse=True)
    return rows[:max(limit, 0)]
