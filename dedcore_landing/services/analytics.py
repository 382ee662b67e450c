"""
Subscriber analytics, computed on demand from the subscriber list.

Everything here is a pure function of the records and "now"; nothing is
cached between requests. "Local" dates and hours are taken in the
configured analytics timezone.

Two inherited quirks are kept as-is:

* the daily histogram only covers the trailing 30 days, while the
  hour-of-day histogram counts every subscriber it is given;
* the average daily signup rate divides by a fixed 30 days, not by the
  span actually observed.
"""
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional
import logging

from dedcore_landing.models.analytics import (
    AnalyticsSnapshot, DailyCount, DashboardSummary, HourlyCount, SourceCount
)
from dedcore_landing.models.subscriber import Subscriber, SubscriberStatus
from dedcore_landing.utils.timezone_utils import get_timezone, now_utc, to_local, to_utc

logger = logging.getLogger(__name__)

HISTORY_DAYS = 30
TOP_SOURCES_LIMIT = 5
RECENT_SIGNUPS_LIMIT = 5

def count_by_status(subscribers: List[Subscriber]) -> Dict[str, int]:
    active = sum(1 for s in subscribers if s.status == SubscriberStatus.ACTIVE)
    unsubscribed = sum(1 for s in subscribers if s.status == SubscriberStatus.UNSUBSCRIBED)
    return {"total": len(subscribers), "active": active, "unsubscribed": unsubscribed}

def signups_by_day(subscribers: List[Subscriber], now: datetime, tz, days: int = HISTORY_DAYS) -> List[DailyCount]:
    """
    Zero-filled calendar-date buckets for the `days` days ending today,
    oldest first. Older signups have no bucket and are dropped.
    """
    today = to_local(now, tz).date()
    buckets = {today - timedelta(days=offset): 0 for offset in range(days - 1, -1, -1)}
    for s in subscribers:
        signup_date = to_local(s.created_at, tz).date()
        if signup_date in buckets:
            buckets[signup_date] += 1
    return [DailyCount(date=d, count=c) for d, c in buckets.items()]

def signups_by_hour(subscribers: List[Subscriber], tz) -> List[HourlyCount]:
    """24 hour-of-day buckets over every subscriber given, not windowed."""
    hours = [0] * 24
    for s in subscribers:
        hours[to_local(s.created_at, tz).hour] += 1
    return [HourlyCount(hour=h, count=c) for h, c in enumerate(hours)]

def signups_by_source(subscribers: List[Subscriber]) -> List[SourceCount]:
    """Counts per raw source string, highest first; ties keep encounter order."""
    counts: Dict[str, int] = {}
    for s in subscribers:
        counts[s.source] = counts.get(s.source, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [SourceCount(source=source, count=count) for source, count in ranked]

def growth_rate(subscribers: List[Subscriber], now: datetime) -> float:
    """
    Week-over-week change in percent: signups in [now-7d, now] against
    signups in [now-14d, now-7d). Zero when the previous week had none.
    """
    now = to_utc(now)
    week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)

    current = 0
    previous = 0
    for s in subscribers:
        created = to_utc(s.created_at)
        if week_ago <= created <= now:
            current += 1
        elif two_weeks_ago <= created < week_ago:
            previous += 1

    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100

def average_daily_signups(active_count: int, days: int = HISTORY_DAYS) -> float:
    if active_count <= 0:
        return 0.0
    return round(active_count / days, 2)

def compute_analytics(
    subscribers: List[Subscriber],
    now: Optional[datetime] = None,
    timezone_name: Optional[str] = "UTC"
) -> AnalyticsSnapshot:
    """Build the full analytics snapshot for the admin analytics page."""
    now = now or now_utc()
    tz = get_timezone(timezone_name)
    counts = count_by_status(subscribers)

    snapshot = AnalyticsSnapshot(
        total_subscribers=counts["total"],
        active_subscribers=counts["active"],
        unsubscribed=counts["unsubscribed"],
        signups_by_day=signups_by_day(subscribers, now, tz),
        signups_by_hour=signups_by_hour(subscribers, tz),
        signups_by_source=signups_by_source(subscribers),
        growth_rate=growth_rate(subscribers, now),
        avg_daily_signups=average_daily_signups(counts["active"]),
    )
    logger.info(f"Analytics computed over {counts['total']} subscribers")
    return snapshot

def _local_midnight(day, tz) -> datetime:
    # Each date gets its own UTC offset, which differs across a DST change
    return tz.localize(datetime.combine(day, time.min))

def compute_dashboard_summary(
    subscribers: List[Subscriber],
    now: Optional[datetime] = None,
    timezone_name: Optional[str] = "UTC"
) -> DashboardSummary:
    """Headline numbers for the admin landing page."""
    now = now or now_utc()
    tz = get_timezone(timezone_name)

    local_now = to_local(now, tz)
    today = _local_midnight(local_now.date(), tz)
    week_ago = _local_midnight(local_now.date() - timedelta(days=7), tz)
    month_ago = _local_midnight(local_now.date() - timedelta(days=HISTORY_DAYS), tz)

    created = [to_utc(s.created_at) for s in subscribers]
    counts = count_by_status(subscribers)
    recent = sorted(subscribers, key=lambda s: to_utc(s.created_at), reverse=True)

    return DashboardSummary(
        total_subscribers=counts["total"],
        active_subscribers=counts["active"],
        unsubscribed=counts["unsubscribed"],
        today_signups=sum(1 for c in created if c >= today),
        this_week_signups=sum(1 for c in created if c >= week_ago),
        this_month_signups=sum(1 for c in created if c >= month_ago),
        top_sources=signups_by_source(subscribers)[:TOP_SOURCES_LIMIT],
        recent_signups=recent[:RECENT_SIGNUPS_LIMIT],
    )
