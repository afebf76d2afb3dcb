"""Calendar-local date helpers."""
import os
from datetime import date, datetime
from typing import Optional

import pytz

CALENDAR_TIMEZONE = os.environ.get("CALENDAR_TIMEZONE", "UTC")


def calendar_today(timezone: Optional[str] = None) -> date:
    """Today's date in the calendar timezone, so "today" doesn't flip at UTC midnight."""
    tz = pytz.timezone(timezone or CALENDAR_TIMEZONE)
    return datetime.now(pytz.utc).astimezone(tz).date()
