"""User preset model for SQLModel."""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime, date
from typing import List, Optional
import uuid

from wellness_calendar.schemas.recurrence import RecurrenceRule


class UserPreset(SQLModel, table=True):
    """Saved bundle of activity templates plus the recurrence rule used to activate it."""

    __tablename__ = "user_preset"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    user_id: str = Field(index=True, max_length=100)
    name: str = Field(max_length=100, min_length=1)
    emoji: Optional[str] = Field(default=None, max_length=16)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    activities: List[dict] = Field(default_factory=list, sa_column=Column(JSON))  # ordered preset entries

    # Stored recurrence settings, reused on every activation
    recurrence_type: str = Field(default="none", max_length=20)
    recurrence_count: int = Field(default=7)
    custom_interval: int = Field(default=1)
    custom_unit: str = Field(default="day", max_length=10)
    custom_end_type: str = Field(default="never", max_length=10)
    custom_end_date: Optional[date] = Field(default=None)
    custom_end_count: int = Field(default=30)

    is_active: bool = Field(default=False)
    is_archived: bool = Field(default=False)
    last_activated_at: Optional[datetime] = Field(default=None)
    activation_start_date: Optional[date] = Field(default=None)
    activation_end_date: Optional[date] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def recurrence_rule(self) -> RecurrenceRule:
        return RecurrenceRule(
            type=self.recurrence_type,
            count=self.recurrence_count,
            custom_interval=self.custom_interval,
            custom_unit=self.custom_unit,
            end_condition=self.custom_end_type,
            end_date=self.custom_end_date,
            end_count=self.custom_end_count,
        )

    def apply_rule(self, rule: RecurrenceRule):
        """Store a rule in the flat recurrence columns."""
        self.recurrence_type = rule.type.value
        self.recurrence_count = rule.count
        self.custom_interval = rule.custom_interval
        self.custom_unit = rule.custom_unit.value
        self.custom_end_type = rule.end_condition.value
        self.custom_end_date = rule.end_date
        self.custom_end_count = rule.end_count
