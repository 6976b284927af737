"""Dashboard metrics API: KPI totals, platform cards, chart series, top posts."""
from dataclasses import asdict
from datetime import datetime
from typing import Awaitable, Callable, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.db import get_db
from app.logging_config import get_logger
from app.metrics.buckets import Granularity
from app.metrics.date_ranges import DateRange, RangeName, resolve
from app.metrics.errors import InvalidDateRangeError
from app.metrics.filters import DashboardDataset
from app.schemas.common import ErrorResponse
from app.schemas.dashboard import (
    DashboardResponse,
    DashboardSeriesOut,
    DashboardTotalsOut,
    DateRangeOut,
    DemographicsOut,
    NamedCountOut,
    PlatformCardOut,
    PlatformRollupOut,
    PostRowOut,
    SeriesPointOut,
)
from app.services.dashboard_data_service import load_dataset
from app.services.dashboard_service import (
    DashboardQuery,
    DashboardResult,
    MetricName,
    build_dashboard,
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])
logger = get_logger(__name__)

DatasetLoader = Callable[[AsyncSession, UUID, Optional[str], Optional[DateRange]], Awaitable[DashboardDataset]]


def get_dataset_loader() -> DatasetLoader:
    """Row loader dependency (overridable in tests)."""
    return load_dataset


def _points(points) -> list[SeriesPointOut]:
    return [SeriesPointOut(date=p.date, value=p.value) for p in points]


def to_response(result: DashboardResult, range_name: str) -> DashboardResponse:
    """Shape a DashboardResult for the chart/report consumers."""
    d = result.demographics
    return DashboardResponse(
        range=DateRangeOut(name=range_name, start=result.date_range.start, end=result.date_range.end),
        granularity=result.granularity.value,
        platform=result.platform,
        brand=result.brand,
        metric=result.metric.value,
        bucket_keys=result.bucket_keys,
        totals=DashboardTotalsOut(
            followers=result.totals.followers,
            impressions=result.totals.impressions,
            engagement=result.totals.engagement,
            posts=result.totals.posts,
            engagement_rate=result.totals.engagement_rate,
        ),
        platforms=[PlatformCardOut(platform=c.platform, value=c.value, change=c.change) for c in result.platforms],
        connected_platforms=[
            PlatformRollupOut(
                platform=r.platform,
                followers=r.followers,
                impressions=r.impressions,
                engagement=r.engagement,
                post_count=r.post_count,
            )
            for r in result.connected
        ],
        series=DashboardSeriesOut(**{name: _points(points) for name, points in result.series.as_dict().items()}),
        posts=[PostRowOut(**asdict(row)) for row in result.posts],
        demographics=DemographicsOut(
            countries=[NamedCountOut(name=c.name, value=c.value) for c in d.countries],
            genders=[NamedCountOut(name=c.name, value=c.value) for c in d.genders],
            ages=[NamedCountOut(name=c.name, value=c.value) for c in d.ages],
        ),
        growth_source=result.growth_source,
    )


@router.get(
    "/metrics",
    response_model=DashboardResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def get_dashboard_metrics(
    user_id: UUID = Query(..., description="User UUID"),
    platform: str = Query("all", description="Platform (twitter = x) or all"),
    brand: str = Query("all", description="Brand UUID or all"),
    metric: MetricName = Query(MetricName.FOLLOWERS, description="Metric highlighted by the UI"),
    range_name: RangeName = Query(RangeName.LAST_7, alias="range", description="last7 | last14 | last28 | lastMonth | custom"),
    date_from: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD (custom)"),
    date_to: Optional[str] = Query(None, alias="to", description="YYYY-MM-DD (custom)"),
    granularity: Granularity = Query(Granularity.DAY, description="day | week | month | year"),
    db: AsyncSession = Depends(get_db),
    loader: DatasetLoader = Depends(get_dataset_loader),
) -> DashboardResponse:
    """
    Aggregates for the analytics dashboard, recomputed on every call.
    Custom ranges with from > to (or malformed dates) return 422; nothing partial is returned.
    """
    settings = get_settings()
    now = datetime.now(settings.tz)
    try:
        date_range = resolve(range_name, date_from, date_to, now=now, tz=settings.tz)
    except InvalidDateRangeError as e:
        logger.info("dashboard.invalid_range", error=e.message, **e.extra)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    try:
        dataset = await loader(db, user_id, brand, date_range)
    except ValueError as e:
        if str(e) == "invalid_brand_id":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid brand id")
        raise

    query = DashboardQuery(
        platform=platform,
        brand=brand,
        metric=metric,
        range_name=range_name.value,
        custom_from=date_from,
        custom_to=date_to,
        granularity=granularity,
    )
    result = build_dashboard(dataset, query, now=now, tz=settings.tz)
    return to_response(result, range_name.value)
