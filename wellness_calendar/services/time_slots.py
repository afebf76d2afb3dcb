"""Day parts and time-of-day slots."""
from datetime import time
from enum import Enum
from typing import Dict, Iterable, List, Optional


class DayPart(str, Enum):
    EARLY_MORNING = "early_morning"
    LATE_MORNING = "late_morning"
    MIDDAY = "midday"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


ANYTIME = "anytime"

# (start hour, end hour, emoji); night wraps past midnight.
DAY_PART_HOURS = {
    DayPart.EARLY_MORNING: (5, 9, "🌅"),
    DayPart.LATE_MORNING: (9, 12, "☕"),
    DayPart.MIDDAY: (12, 15, "☀️"),
    DayPart.AFTERNOON: (15, 18, "🌤️"),
    DayPart.EVENING: (18, 22, "🌆"),
    DayPart.NIGHT: (22, 5, "🌙"),
}

DAY_PART_TIMES: Dict[DayPart, time] = {
    part: time(hour=start) for part, (start, _end, _emoji) in DAY_PART_HOURS.items()
}


def default_time_for(day_part: DayPart) -> time:
    """Default start time of a day part. Defined for every DayPart."""
    return DAY_PART_TIMES[DayPart(day_part)]


def time_slot_for(value: Optional[time]) -> str:
    """Classify a time of day into its slot; no time means 'anytime'."""
    if value is None:
        return ANYTIME
    for part, (start, end, _emoji) in DAY_PART_HOURS.items():
        if start > end:
            if value.hour >= start or value.hour < end:
                return part.value
        elif start <= value.hour < end:
            return part.value
    return ANYTIME


def group_by_time_slot(activities: Iterable) -> Dict[str, List]:
    """Bucket activities by the slot of their start_time, in day order."""
    grouped: Dict[str, List] = {part.value: [] for part in DayPart}
    grouped[ANYTIME] = []
    for activity in activities:
        grouped[time_slot_for(activity.start_time)].append(activity)
    return grouped
