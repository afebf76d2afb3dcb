"""Activity schemas for the calendar API."""
from pydantic import BaseModel, ConfigDict, Field
import datetime as dt
from enum import Enum
from typing import Optional, List, Dict

from wellness_calendar.schemas.recurrence import RecurrenceRule
from wellness_calendar.services.time_slots import DayPart


CATEGORY_PATTERN = r"^[a-z_]{1,50}$"
IMPACT_PATTERN = r"^(positive|negative|neutral|mixed)$"
STATUS_PATTERN = r"^(planned|completed)$"


class MutationScope(str, Enum):
    """Which rows an edit or delete applies to."""
    SINGLE = "single"
    ALL = "all"


class ActivityCreate(BaseModel):
    """Schema for creating an activity, optionally repeated by a recurrence rule."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: str = Field(default="leisure", pattern=CATEGORY_PATTERN)
    impact_type: str = Field(default="neutral", pattern=IMPACT_PATTERN)
    emoji: Optional[str] = Field(None, max_length=16)
    date: dt.date
    start_time: Optional[dt.time] = None  # omitted for all-day activities
    day_part: Optional[DayPart] = None  # used when start_time is omitted
    duration_minutes: Optional[int] = Field(60, gt=0, le=24 * 60)
    reminder_enabled: bool = False
    reminder_minutes_before: Optional[int] = Field(None, ge=0)
    recurrence: RecurrenceRule = Field(default_factory=RecurrenceRule)


class ActivityUpdate(BaseModel):
    """Schema for updating an activity. Date and time only apply to a single occurrence."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, pattern=CATEGORY_PATTERN)
    impact_type: Optional[str] = Field(None, pattern=IMPACT_PATTERN)
    emoji: Optional[str] = Field(None, max_length=16)
    date: Optional[dt.date] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    reminder_enabled: Optional[bool] = None
    reminder_minutes_before: Optional[int] = Field(None, ge=0)
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)


class ActivityStatusUpdate(BaseModel):
    status: str = Field(..., pattern=STATUS_PATTERN)


class ActivityResponse(BaseModel):
    """Schema for activity API responses."""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    category: str
    impact_type: str
    emoji: Optional[str] = None
    date: dt.date
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    duration_minutes: Optional[int] = None
    reminder_enabled: bool = False
    reminder_minutes_before: Optional[int] = None
    status: str
    recurrence_group_id: Optional[str] = None
    user_preset_id: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityCreateResponse(BaseModel):
    activities: List[ActivityResponse]
    count: int
    recurrence_group_id: Optional[str] = None
    warnings: List[str] = []


class ActivityListResponse(BaseModel):
    activities: List[ActivityResponse]
    count: int


class ActivityDayResponse(BaseModel):
    date: dt.date
    slots: Dict[str, List[ActivityResponse]]
    count: int


class MutationResponse(BaseModel):
    """Result of a single or group-scoped edit/delete."""
    scope: MutationScope
    affected: int
    activity_ids: List[str]
    activities: List[ActivityResponse] = []
