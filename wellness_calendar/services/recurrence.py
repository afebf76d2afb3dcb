"""
Recurrence engine.

Expands a start date and a RecurrenceRule into an ordered series of calendar
dates, and computes the last date of that series (the activation window end)
without building the list.

Every element is computed from the start date (element i = start + i * step),
so month-end clamping on one element never shifts the following ones.
"""
import calendar
from datetime import date, timedelta
from typing import List, Tuple

from wellness_calendar.schemas.recurrence import (
    EndCondition,
    RecurrenceRule,
    RecurrenceType,
    RecurrenceUnit,
)

# Hard ceiling on the length of any generated series.
MAX_OCCURRENCES = 365

_SIMPLE_UNITS = {
    RecurrenceType.DAILY: RecurrenceUnit.DAY,
    RecurrenceType.WEEKLY: RecurrenceUnit.WEEK,
    RecurrenceType.MONTHLY: RecurrenceUnit.MONTH,
}


def add_months(start: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    max_day = calendar.monthrange(year, month)[1]
    return start.replace(year=year, month=month, day=min(start.day, max_day))


def shift(start: date, unit: RecurrenceUnit, amount: int) -> date:
    """Return `start + amount * unit`."""
    if unit == RecurrenceUnit.DAY:
        return start + timedelta(days=amount)
    if unit == RecurrenceUnit.WEEK:
        return start + timedelta(weeks=amount)
    if unit == RecurrenceUnit.MONTH:
        return add_months(start, amount)
    return add_months(start, amount * 12)


def _step(rule: RecurrenceRule) -> Tuple[RecurrenceUnit, int]:
    if rule.type == RecurrenceType.CUSTOM:
        return rule.custom_unit, rule.custom_interval
    return _SIMPLE_UNITS[rule.type], 1


def _occurrence_limit(rule: RecurrenceRule) -> int:
    """Number of elements for count-bounded rules, clamped to MAX_OCCURRENCES."""
    if rule.type == RecurrenceType.NONE:
        return 1
    if rule.type in _SIMPLE_UNITS:
        return min(rule.count, MAX_OCCURRENCES)
    if rule.end_condition == EndCondition.COUNT:
        return min(rule.end_count, MAX_OCCURRENCES)
    return MAX_OCCURRENCES


def _date_bounded(rule: RecurrenceRule) -> bool:
    return (
        rule.type == RecurrenceType.CUSTOM
        and rule.end_condition == EndCondition.DATE
        and rule.end_date is not None
    )


def generate_dates(start_date: date, rule: RecurrenceRule) -> List[date]:
    """
    Expand a rule into its ordered date series.

    The series always starts with `start_date` and never holds more than
    MAX_OCCURRENCES elements. A custom rule ending by date keeps every date
    up to and including `end_date`; an end date before the start yields the
    start date alone.
    """
    dates = [start_date]
    if not rule.is_recurring:
        return dates

    unit, interval = _step(rule)
    limit = _occurrence_limit(rule)
    bounded = _date_bounded(rule)

    for i in range(1, limit):
        current = shift(start_date, unit, i * interval)
        if bounded and current > rule.end_date:
            break
        dates.append(current)
    return dates


def _last_index_on_or_before(start_date: date, unit: RecurrenceUnit, interval: int, end_date: date) -> int:
    """Largest i with start + i * interval * unit <= end_date (i >= 0)."""
    if end_date <= start_date:
        return 0
    if unit in (RecurrenceUnit.DAY, RecurrenceUnit.WEEK):
        step_days = interval * (7 if unit == RecurrenceUnit.WEEK else 1)
        return (end_date - start_date).days // step_days

    months_per_step = interval * (12 if unit == RecurrenceUnit.YEAR else 1)
    month_span = (end_date.year - start_date.year) * 12 + end_date.month - start_date.month
    index = max(month_span // months_per_step, 0)
    # Month-end clamping can put the estimate one step off in either direction.
    while index > 0 and shift(start_date, unit, index * interval) > end_date:
        index -= 1
    while shift(start_date, unit, (index + 1) * interval) <= end_date:
        index += 1
    return index


def calculate_activation_end(start_date: date, rule: RecurrenceRule) -> date:
    """
    Last date of the series `generate_dates` would produce, in closed form.

    Used to bound the active window of a preset.
    """
    if not rule.is_recurring:
        return start_date

    unit, interval = _step(rule)
    last_index = _occurrence_limit(rule) - 1
    if _date_bounded(rule):
        last_index = min(
            last_index,
            _last_index_on_or_before(start_date, unit, interval, rule.end_date),
        )
    return shift(start_date, unit, last_index * interval)


def is_clamped(rule: RecurrenceRule) -> bool:
    """True when the rule asks for more occurrences than MAX_OCCURRENCES allows."""
    if rule.type in _SIMPLE_UNITS:
        return rule.count > MAX_OCCURRENCES
    if rule.type == RecurrenceType.CUSTOM and rule.end_condition == EndCondition.COUNT:
        return rule.end_count > MAX_OCCURRENCES
    return False
