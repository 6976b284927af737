"""
Follower growth estimates for the net-growth series and platform "change" badges.

Historical follower deltas are not tracked for every account yet. Until they are,
SeededMockEstimator produces stable pseudo-random values (same seed, same value, in
any process) so charts do not jump between re-renders. RealGrowthEstimator is used
as soon as follower snapshots per bucket are available.
"""
from typing import Dict, Mapping, Optional, Protocol, runtime_checkable

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
_UINT32 = 0xFFFFFFFF

# SeededMockEstimator bounds: net growth in [-0.5%, +1.5%) of followers, change in [-5%, +15%).
MOCK_GROWTH_SCALE = 0.02
MOCK_GROWTH_OFFSET = 0.005
MOCK_CHANGE_SCALE = 20.0
MOCK_CHANGE_OFFSET = 5.0


def seeded_random(seed: str) -> float:
    """FNV-1a (32-bit) over the seed's characters, normalized to [0, 1)."""
    h = FNV_OFFSET_BASIS
    for ch in seed:
        h ^= ord(ch)
        h = (h * FNV_PRIME) & _UINT32
    return h / 2**32


def growth_rate(growth: int, followers: int) -> float:
    """Growth as a percentage of the previous follower count; 0 when there was none."""
    previous = followers - growth
    if previous <= 0:
        return 0.0
    return round(growth / previous * 100, 2)


@runtime_checkable
class GrowthEstimator(Protocol):
    def net_growth(self, bucket_key: str, followers: int) -> int:
        ...

    def change_percent(self, platform: str, metric: str) -> float:
        ...


class SeededMockEstimator:
    """Deterministic fallback when no follower history exists."""

    name = "seeded_mock"

    def net_growth(self, bucket_key: str, followers: int) -> int:
        r = seeded_random(f"growth:{bucket_key}")
        return int(round(followers * (r * MOCK_GROWTH_SCALE - MOCK_GROWTH_OFFSET)))

    def change_percent(self, platform: str, metric: str) -> float:
        r = seeded_random(f"change:{platform}:{metric}")
        return round(r * MOCK_CHANGE_SCALE - MOCK_CHANGE_OFFSET, 1)


class RealGrowthEstimator:
    """
    Growth from follower snapshots.

    history: bucket key -> total followers at that bucket.
    platform_history: platform -> (bucket key -> followers), for change badges.
    Missing buckets and the first snapshot report 0 growth. Growth is signed:
    a drop in followers reports a negative value.
    """

    name = "history"

    def __init__(
        self,
        history: Mapping[str, int],
        platform_history: Optional[Mapping[str, Mapping[str, int]]] = None,
    ) -> None:
        self._history: Dict[str, int] = dict(history)
        keys = sorted(self._history)
        self._previous: Dict[str, str] = dict(zip(keys[1:], keys))
        self._platform_history = {k: dict(v) for k, v in (platform_history or {}).items()}

    def net_growth(self, bucket_key: str, followers: int) -> int:
        previous = self._previous.get(bucket_key)
        if previous is None:
            return 0
        return self._history[bucket_key] - self._history[previous]

    def change_percent(self, platform: str, metric: str) -> float:
        snapshots = self._platform_history.get(platform)
        if snapshots is None and platform == "all":
            snapshots = self._history
        if not snapshots:
            return 0.0
        keys = sorted(snapshots)
        first, last = snapshots[keys[0]], snapshots[keys[-1]]
        return round(growth_rate(last - first, last), 1)


def estimator_for(
    history: Optional[Mapping[str, int]] = None,
    platform_history: Optional[Mapping[str, Mapping[str, int]]] = None,
) -> GrowthEstimator:
    """Real estimator when follower history was supplied, seeded mock otherwise."""
    if history:
        return RealGrowthEstimator(history, platform_history)
    return SeededMockEstimator()
