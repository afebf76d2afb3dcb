"""Recurrence rule schema for calendar activities."""
from datetime import date
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecurrenceType(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class RecurrenceUnit(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class EndCondition(str, Enum):
    NEVER = "never"
    DATE = "date"
    COUNT = "count"


def _to_camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


class RecurrenceRule(BaseModel):
    """
    Declarative description of how an activity repeats.

    `type` selects which fields govern generation: `count` for the simple
    types, the `custom_*`/`end_*` fields for `custom`. Counts and the
    interval are clamped to a minimum of 1 instead of being rejected.
    """

    model_config = ConfigDict(alias_generator=_to_camel, populate_by_name=True, frozen=True)

    type: RecurrenceType = RecurrenceType.NONE
    count: int = 7
    custom_interval: int = 1
    custom_unit: RecurrenceUnit = RecurrenceUnit.DAY
    end_condition: EndCondition = EndCondition.NEVER
    end_date: Optional[date] = None
    end_count: int = 30

    @field_validator("count", "custom_interval", "end_count", mode="before")
    @classmethod
    def clamp_to_one(cls, value):
        if value is None:
            return 1
        return max(int(value), 1)

    @property
    def is_recurring(self) -> bool:
        return self.type != RecurrenceType.NONE


class RecurrencePreviewRequest(BaseModel):
    """Body of the recurrence preview endpoint."""
    start_date: date
    rule: RecurrenceRule = Field(default_factory=RecurrenceRule)


class RecurrencePreviewResponse(BaseModel):
    dates: List[date]
    activation_end_date: date
    count: int
    warnings: List[str] = []
