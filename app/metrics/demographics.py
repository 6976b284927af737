"""Audience demographics counted from analytics sample metadata."""
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List

from app.metrics.records import AnalyticsSample


@dataclass(frozen=True)
class NamedCount:
    name: str
    value: int


@dataclass(frozen=True)
class Demographics:
    countries: List[NamedCount] = field(default_factory=list)
    genders: List[NamedCount] = field(default_factory=list)
    ages: List[NamedCount] = field(default_factory=list)


def _ranked(counter: Counter) -> List[NamedCount]:
    # Counter.most_common keeps first-seen order among ties.
    return [NamedCount(name=name, value=value) for name, value in counter.most_common()]


def aggregate_demographics(samples: Iterable[AnalyticsSample]) -> Demographics:
    """One count per sample carrying country / gender / age (age_range preferred)."""
    countries: Counter = Counter()
    genders: Counter = Counter()
    ages: Counter = Counter()
    for s in samples:
        meta = s.metadata
        if meta.country:
            countries[meta.country] += 1
        if meta.gender:
            genders[meta.gender] += 1
        age = meta.age_range or meta.age
        if age:
            ages[age] += 1
    return Demographics(countries=_ranked(countries), genders=_ranked(genders), ages=_ranked(ages))
