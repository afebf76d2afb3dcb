"""Activity template model for SQLModel."""
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional
import uuid


class ActivityTemplate(SQLModel, table=True):
    """Reusable activity definition; system templates have no owner."""

    __tablename__ = "activity_template"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    user_id: Optional[str] = Field(default=None, index=True, max_length=100)
    title: str = Field(max_length=200, min_length=1)
    category: str = Field(default="leisure", max_length=50)
    impact_type: str = Field(default="neutral", max_length=20)
    emoji: Optional[str] = Field(default=None, max_length=16)
    default_duration_minutes: int = Field(default=30)
    created_at: datetime = Field(default_factory=datetime.utcnow)
