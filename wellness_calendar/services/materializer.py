"""
Activity materializer.

Turns generated dates plus an activity template into concrete Activity rows
and writes them to the database in fixed-size chunks.
"""
import os
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from wellness_calendar.models.activity import Activity
from wellness_calendar.services.time_slots import DayPart, default_time_for
from wellness_calendar.utils.logger import get_logger
from wellness_calendar.utils.metrics import metrics_collector

logger = get_logger("activity-materializer")

ACTIVITY_INSERT_CHUNK_SIZE = int(os.environ.get("ACTIVITY_INSERT_CHUNK_SIZE", "100"))


@dataclass(frozen=True)
class ActivityTemplateData:
    """Shared attributes copied onto every materialized activity."""
    title: str
    category: str = "leisure"
    impact_type: str = "neutral"
    duration_minutes: Optional[int] = None
    emoji: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[time] = None
    reminder_enabled: bool = False
    reminder_minutes_before: Optional[int] = None


@dataclass
class MaterializationResult:
    created: int
    total: int
    activities: List[Activity]
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def new_group_id() -> str:
    return str(uuid.uuid4())


def end_time_for(start_time: Optional[time], duration_minutes: Optional[int]) -> Optional[time]:
    """Start time plus duration, wrapping past midnight."""
    if start_time is None or not duration_minutes:
        return None
    end = datetime.combine(date.min, start_time) + timedelta(minutes=duration_minutes)
    return end.time()


def materialize_activities(
    dates: Sequence[date],
    template: ActivityTemplateData,
    day_part_times: Optional[Dict[DayPart, time]] = None,
    *,
    user_id: str,
    day_part: Optional[DayPart] = None,
    recurrence_group_id: Optional[str] = None,
    user_preset_id: Optional[str] = None,
    repetitions: int = 1,
) -> List[Activity]:
    """
    Build one planned Activity per date (times `repetitions`).

    All records share one group marker: the preset id when given, otherwise
    `recurrence_group_id`, otherwise a fresh group id as soon as more than
    one record is produced. A single one-off record stays ungrouped.
    `day_part_times` overrides the default start time of each day part.
    """
    start_time = template.start_time
    if start_time is None and day_part is not None:
        if day_part_times is None:
            start_time = default_time_for(day_part)
        else:
            start_time = day_part_times[DayPart(day_part)]
    end_time = end_time_for(start_time, template.duration_minutes)

    total = len(dates) * max(repetitions, 1)
    if user_preset_id is None and recurrence_group_id is None and total > 1:
        recurrence_group_id = new_group_id()

    records = []
    for occurrence_date in dates:
        for _ in range(max(repetitions, 1)):
            records.append(Activity(
                user_id=user_id,
                title=template.title,
                description=template.description,
                category=template.category,
                impact_type=template.impact_type,
                emoji=template.emoji,
                date=occurrence_date,
                start_time=start_time,
                end_time=end_time,
                duration_minutes=template.duration_minutes,
                reminder_enabled=template.reminder_enabled,
                reminder_minutes_before=template.reminder_minutes_before if template.reminder_enabled else None,
                status="planned",
                recurrence_group_id=None if user_preset_id else recurrence_group_id,
                user_preset_id=user_preset_id,
            ))
    return records


class ActivityBatchWriter:
    """Writes activities in chunks, committing each chunk on its own."""

    def __init__(self, session: Session, chunk_size: int = ACTIVITY_INSERT_CHUNK_SIZE):
        self.session = session
        self.chunk_size = max(chunk_size, 1)

    def insert_batch(self, records: List[Activity]) -> MaterializationResult:
        """
        Insert records chunk by chunk.

        A failing chunk is rolled back and stops the batch; chunks committed
        before it are kept, and the result reports how many made it.
        """
        created: List[Activity] = []
        total = len(records)
        with metrics_collector.time_operation("activity_batch_insert_seconds"):
            for offset in range(0, total, self.chunk_size):
                chunk = records[offset:offset + self.chunk_size]
                try:
                    self.session.add_all(chunk)
                    self.session.commit()
                except SQLAlchemyError as e:
                    self.session.rollback()
                    metrics_collector.activity_batch_failed()
                    logger.error(
                        "Activity chunk insert failed",
                        created=len(created),
                        total=total,
                        chunk_offset=offset,
                        error=str(e),
                    )
                    return MaterializationResult(created=len(created), total=total, activities=created, error=e)
                created.extend(chunk)

        for activity in created:
            self.session.refresh(activity)
        metrics_collector.activities_materialized(len(created))
        logger.info("Activities materialized", created=len(created), total=total)
        return MaterializationResult(created=len(created), total=total, activities=created)
