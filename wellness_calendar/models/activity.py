"""Activity model for SQLModel."""
from sqlmodel import SQLModel, Field
import datetime as dt
from typing import Optional
import uuid


class Activity(SQLModel, table=True):
    """A dated calendar activity, optionally part of a recurrence group or preset."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    user_id: str = Field(index=True, max_length=100)
    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    category: str = Field(default="leisure", max_length=50)
    impact_type: str = Field(default="neutral", max_length=20)  # positive, negative, neutral, mixed
    emoji: Optional[str] = Field(default=None, max_length=16)

    date: dt.date = Field(index=True)
    start_time: Optional[dt.time] = Field(default=None)  # null means anytime
    end_time: Optional[dt.time] = Field(default=None)
    duration_minutes: Optional[int] = Field(default=None)

    reminder_enabled: bool = Field(default=False)
    reminder_minutes_before: Optional[int] = Field(default=None)
    status: str = Field(default="planned", max_length=20)  # planned, completed

    # Group membership; at most one of the two is set
    recurrence_group_id: Optional[str] = Field(default=None, index=True, max_length=36)
    user_preset_id: Optional[str] = Field(default=None, index=True, max_length=36)

    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
    updated_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
