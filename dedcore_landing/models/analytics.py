from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List
import datetime

from dedcore_landing.models.subscriber import Subscriber

class CamelModel(BaseModel):
    """Serialized with camelCase keys for the admin UI"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class DailyCount(CamelModel):
    date: datetime.date
    count: int

class HourlyCount(CamelModel):
    hour: int
    count: int

class SourceCount(CamelModel):
    source: str
    count: int

class AnalyticsSnapshot(CamelModel):
    """Derived on every request, never persisted"""
    total_subscribers: int
    active_subscribers: int
    unsubscribed: int
    signups_by_day: List[DailyCount]
    signups_by_hour: List[HourlyCount]
    signups_by_source: List[SourceCount]
    growth_rate: float
    avg_daily_signups: float

class DashboardSummary(CamelModel):
    total_subscribers: int
    active_subscribers: int
    unsubscribed: int
    today_signups: int
    this_week_signups: int
    this_month_signups: int
    top_sources: List[SourceCount]
    recent_signups: List[Subscriber]

class DatabaseStatus(CamelModel):
    connected: bool
    table: str
    table_count: int
    total_records: int
    performance: str
    uptime: str
    error: str = ""
