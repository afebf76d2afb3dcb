"""Wellness calendar: activity recurrence engine and calendar API."""
from wellness_calendar.services.recurrence import MAX_OCCURRENCES, calculate_activation_end, generate_dates
from wellness_calendar.services.materializer import materialize_activities
from wellness_calendar.services.recurrence_groups import resolve_group_ids

__all__ = [
    "MAX_OCCURRENCES",
    "calculate_activation_end",
    "generate_dates",
    "materialize_activities",
    "resolve_group_ids",
]
