"""Activity templates and the built-in preset catalog."""
from sqlmodel import Session, select, or_
from typing import List, Optional

from wellness_calendar.models.template import ActivityTemplate
from wellness_calendar.services.materializer import ActivityTemplateData

# Templates available to every user. Ids are stable so presets can reference them.
SYSTEM_TEMPLATES = [
    {"id": "system-sleep", "title": "Sleep", "category": "sleep", "impact_type": "positive",
     "emoji": "😴", "default_duration_minutes": 480},
    {"id": "system-breakfast", "title": "Breakfast", "category": "nutrition", "impact_type": "positive",
     "emoji": "🍳", "default_duration_minutes": 30},
    {"id": "system-lunch", "title": "Lunch", "category": "nutrition", "impact_type": "positive",
     "emoji": "🍲", "default_duration_minutes": 45},
    {"id": "system-dinner", "title": "Dinner", "category": "nutrition", "impact_type": "positive",
     "emoji": "🍝", "default_duration_minutes": 45},
    {"id": "system-hydration", "title": "Glass of water", "category": "hydration", "impact_type": "positive",
     "emoji": "💧", "default_duration_minutes": 5},
    {"id": "system-coffee", "title": "Coffee break", "category": "nutrition", "impact_type": "neutral",
     "emoji": "☕", "default_duration_minutes": 15},
    {"id": "system-walk", "title": "Walk", "category": "exercise", "impact_type": "positive",
     "emoji": "🚶", "default_duration_minutes": 30},
    {"id": "system-journaling", "title": "Journaling", "category": "reflection", "impact_type": "positive",
     "emoji": "📓", "default_duration_minutes": 15},
]

BUILTIN_PRESETS = [
    {
        "id": "basic_needs",
        "name": "Basic Needs",
        "emoji": "🔋",
        "activities": [
            {"category": "sleep", "is_core": True, "day_part": "night", "duration": 480, "frequency": "daily", "count": 1},
            {"category": "nutrition", "is_core": True, "day_part": "early_morning", "duration": 30, "frequency": "daily", "count": 1},
            {"category": "nutrition", "is_core": True, "day_part": "midday", "duration": 45, "frequency": "daily", "count": 1},
            {"category": "nutrition", "is_core": True, "day_part": "evening", "duration": 45, "frequency": "daily", "count": 1},
            {"category": "hydration", "is_core": False, "day_part": None, "duration": 5, "frequency": "daily", "count": 8},
            {"category": "nutrition", "is_core": False, "day_part": "late_morning", "duration": 15, "frequency": "daily", "count": 2},
        ],
    },
    {"id": "routines", "name": "Routines & Habits", "emoji": "🔄", "activities": []},
    {"id": "development", "name": "Development", "emoji": "📈", "activities": []},
    {"id": "rest", "name": "Rest", "emoji": "🌿", "activities": []},
    {"id": "other", "name": "Other", "emoji": "✨", "activities": []},
]


def get_builtin_preset(preset_id: str) -> Optional[dict]:
    return next((preset for preset in BUILTIN_PRESETS if preset["id"] == preset_id), None)


def template_data(template: ActivityTemplate, duration_minutes: Optional[int] = None) -> ActivityTemplateData:
    """Shared activity attributes taken from a template, with an optional duration override."""
    return ActivityTemplateData(
        title=template.title,
        category=template.category,
        impact_type=template.impact_type,
        duration_minutes=duration_minutes or template.default_duration_minutes,
        emoji=template.emoji,
    )


class TemplateService:
    """Service class for activity template lookups."""

    def __init__(self, session: Session):
        self.session = session

    def list_for_user(self, user_id: str, category: Optional[str] = None) -> List[ActivityTemplate]:
        """System templates plus the user's own."""
        statement = select(ActivityTemplate).where(
            or_(ActivityTemplate.user_id.is_(None), ActivityTemplate.user_id == user_id)
        )
        if category:
            statement = statement.where(ActivityTemplate.category == category)
        statement = statement.order_by(ActivityTemplate.category.asc(), ActivityTemplate.title.asc())
        return list(self.session.exec(statement).all())

    def get_for_user(self, template_id: str, user_id: str) -> Optional[ActivityTemplate]:
        template = self.session.get(ActivityTemplate, template_id)
        if template is None or template.user_id not in (None, user_id):
            return None
        return template

    def create(self, user_id: str, **fields) -> ActivityTemplate:
        template = ActivityTemplate(user_id=user_id, **fields)
        self.session.add(template)
        self.session.commit()
        self.session.refresh(template)
        return template
