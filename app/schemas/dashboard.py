"""Dashboard metrics response (KPI cards, platform cards, series, posts table)."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class DateRangeOut(BaseModel):
    """Resolved inclusive range."""

    name: str
    start: datetime
    end: datetime


class DashboardTotalsOut(BaseModel):
    """KPI card totals (honor the platform filter)."""

    followers: int = 0
    impressions: int = 0
    engagement: int = 0
    posts: int = 0
    engagement_rate: float = 0.0


class PlatformCardOut(BaseModel):
    platform: str
    value: float
    change: float = Field(..., description="Percent change badge")


class PlatformRollupOut(BaseModel):
    platform: str
    followers: int
    impressions: int
    engagement: int
    post_count: int


class SeriesPointOut(BaseModel):
    date: str = Field(..., description="Bucket key (YYYY-MM-DD, YYYY-MM or YYYY)")
    value: float


class DashboardSeriesOut(BaseModel):
    """Five aligned series, one point per bucket key."""

    engagement: List[SeriesPointOut]
    impressions: List[SeriesPointOut]
    followers: List[SeriesPointOut]
    net_growth: List[SeriesPointOut]
    engagement_rate: List[SeriesPointOut]


class PostRowOut(BaseModel):
    post_id: str
    score: int
    smart_score: int
    engagement_rate: float
    engagement: int
    impressions: int
    date: Optional[str] = None
    content: str
    platform: str
    post_type: str


class NamedCountOut(BaseModel):
    name: str
    value: int


class DemographicsOut(BaseModel):
    countries: List[NamedCountOut] = []
    genders: List[NamedCountOut] = []
    ages: List[NamedCountOut] = []


class DashboardResponse(BaseModel):
    """GET /api/dashboard/metrics."""

    range: DateRangeOut
    granularity: str
    platform: str
    brand: str
    metric: str
    bucket_keys: List[str]
    totals: DashboardTotalsOut
    platforms: List[PlatformCardOut]
    connected_platforms: List[PlatformRollupOut]
    series: DashboardSeriesOut
    posts: List[PostRowOut]
    demographics: DemographicsOut
    growth_source: str = Field(..., description="seeded_mock | history")
