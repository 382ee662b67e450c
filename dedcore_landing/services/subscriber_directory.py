"""Search, filtering and CSV export for the admin subscriber list."""
from datetime import datetime
from typing import List, Optional
import csv
import io

from dedcore_landing.models.subscriber import Subscriber
from dedcore_landing.utils.timezone_utils import now_utc, to_utc

CSV_HEADER = ["Email", "Source", "Status", "Created At"]

def filter_subscribers(
    subscribers: List[Subscriber],
    search: Optional[str] = None,
    status: Optional[str] = "all"
) -> List[Subscriber]:
    """Case-insensitive substring match on email or source, plus a status filter."""
    term = (search or "").strip().lower()
    status = status or "all"

    matched = []
    for s in subscribers:
        if term and term not in s.email.lower() and term not in s.source.lower():
            continue
        if status != "all" and s.status.value != status:
            continue
        matched.append(s)
    return matched

def subscribers_to_csv(subscribers: List[Subscriber]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for s in subscribers:
        created = to_utc(s.created_at).isoformat().replace("+00:00", "Z")
        writer.writerow([s.email, s.source, s.status.value, created])
    return buffer.getvalue()

def export_filename(now: Optional[datetime] = None) -> str:
    now = now or now_utc()
    return f"dedcore-subscribers-{now.date().isoformat()}.csv"
