"""Preset and template schemas."""
from pydantic import BaseModel, ConfigDict, Field
import datetime as dt
from typing import Optional, List

from wellness_calendar.schemas.activity import ActivityResponse, CATEGORY_PATTERN, IMPACT_PATTERN
from wellness_calendar.schemas.recurrence import RecurrenceRule
from wellness_calendar.services.time_slots import DayPart


class PresetActivity(BaseModel):
    """One entry of a preset: which template, when in the day, how long and how often."""
    template_id: str
    category: str = Field(..., pattern=CATEGORY_PATTERN)
    day_part: DayPart
    duration: int = Field(30, gt=0, le=24 * 60)
    repetitions: int = Field(1, ge=1, le=24)


class PresetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    emoji: Optional[str] = Field(None, max_length=16)
    tags: List[str] = Field(default_factory=list, max_length=12)
    activities: List[PresetActivity] = Field(default_factory=list)
    recurrence: RecurrenceRule = Field(default_factory=RecurrenceRule)


class PresetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    emoji: Optional[str] = Field(None, max_length=16)
    tags: Optional[List[str]] = Field(None, max_length=12)
    activities: Optional[List[PresetActivity]] = None
    recurrence: Optional[RecurrenceRule] = None
    is_archived: Optional[bool] = None


class PresetActivateRequest(BaseModel):
    start_date: Optional[dt.date] = None  # defaults to today in the calendar timezone


class PresetResponse(BaseModel):
    id: str
    user_id: str
    name: str
    emoji: Optional[str] = None
    tags: List[str] = []
    activities: List[PresetActivity] = []
    recurrence: RecurrenceRule
    is_active: bool
    is_archived: bool
    last_activated_at: Optional[dt.datetime] = None
    activation_start_date: Optional[dt.date] = None
    activation_end_date: Optional[dt.date] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_preset(cls, preset) -> "PresetResponse":
        return cls(
            id=preset.id,
            user_id=preset.user_id,
            name=preset.name,
            emoji=preset.emoji,
            tags=preset.tags or [],
            activities=preset.activities or [],
            recurrence=preset.recurrence_rule,
            is_active=preset.is_active,
            is_archived=preset.is_archived,
            last_activated_at=preset.last_activated_at,
            activation_start_date=preset.activation_start_date,
            activation_end_date=preset.activation_end_date,
            created_at=preset.created_at,
            updated_at=preset.updated_at,
        )


class PresetActivationResponse(BaseModel):
    preset: PresetResponse
    created: int
    activities: List[ActivityResponse] = []


class PresetDeactivationResponse(BaseModel):
    preset: PresetResponse
    removed: int


class TemplateCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: str = Field(default="leisure", pattern=CATEGORY_PATTERN)
    impact_type: str = Field(default="neutral", pattern=IMPACT_PATTERN)
    emoji: Optional[str] = Field(None, max_length=16)
    default_duration_minutes: int = Field(30, gt=0, le=24 * 60)


class TemplateResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    title: str
    category: str
    impact_type: str
    emoji: Optional[str] = None
    default_duration_minutes: int
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class BuiltinPresetActivity(BaseModel):
    category: str
    is_core: bool
    day_part: Optional[DayPart] = None  # None means anytime
    duration: int
    frequency: str
    count: int


class BuiltinPresetResponse(BaseModel):
    id: str
    name: str
    emoji: str
    activities: List[BuiltinPresetActivity]
