"""Preset service: saved activity bundles and their activation windows."""
from sqlmodel import Session, select
from typing import List, Optional, Tuple
from datetime import date, datetime

from wellness_calendar.events.dispatcher import ActivityEventDispatcher, activity_events
from wellness_calendar.models.activity import Activity
from wellness_calendar.models.preset import UserPreset
from wellness_calendar.schemas.recurrence import RecurrenceRule
from wellness_calendar.services.activity_service import ActivityService
from wellness_calendar.services.errors import MaterializationError, TemplateNotFoundError
from wellness_calendar.services.materializer import ActivityBatchWriter, materialize_activities
from wellness_calendar.services.recurrence import calculate_activation_end, generate_dates
from wellness_calendar.services.template_service import TemplateService, template_data
from wellness_calendar.utils.dates import calendar_today
from wellness_calendar.utils.logger import get_logger
from wellness_calendar.utils.metrics import metrics_collector

logger = get_logger("preset-service")


class PresetService:
    """Service class for preset CRUD, activation and deactivation."""

    def __init__(self, session: Session, dispatcher: ActivityEventDispatcher = activity_events):
        self.session = session
        self.dispatcher = dispatcher
        self.activities = ActivityService(session, dispatcher)
        self.templates = TemplateService(session)

    def create(
        self,
        user_id: str,
        name: str,
        activities: List[dict],
        rule: RecurrenceRule,
        emoji: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> UserPreset:
        self._check_templates(user_id, activities)
        preset = UserPreset(user_id=user_id, name=name, emoji=emoji, tags=tags or [], activities=activities)
        preset.apply_rule(rule)
        self.session.add(preset)
        self.session.commit()
        self.session.refresh(preset)
        return preset

    def list_for_user(self, user_id: str, include_archived: bool = False) -> List[UserPreset]:
        statement = select(UserPreset).where(UserPreset.user_id == user_id)
        if not include_archived:
            statement = statement.where(UserPreset.is_archived == False)  # noqa: E712
        statement = statement.order_by(UserPreset.created_at.desc())
        return list(self.session.exec(statement).all())

    def get_by_id(self, preset_id: str, user_id: str) -> Optional[UserPreset]:
        statement = (
            select(UserPreset)
            .where(UserPreset.id == preset_id)
            .where(UserPreset.user_id == user_id)
        )
        return self.session.exec(statement).first()

    def update(
        self,
        preset_id: str,
        user_id: str,
        name: Optional[str] = None,
        emoji: Optional[str] = None,
        tags: Optional[List[str]] = None,
        activities: Optional[List[dict]] = None,
        rule: Optional[RecurrenceRule] = None,
        is_archived: Optional[bool] = None,
    ) -> Optional[UserPreset]:
        """Update preset settings. An active preset keeps its materialized rows until reactivated."""
        preset = self.get_by_id(preset_id, user_id)
        if not preset:
            return None

        if name is not None:
            preset.name = name
        if emoji is not None:
            preset.emoji = emoji
        if tags is not None:
            preset.tags = tags
        if activities is not None:
            self._check_templates(user_id, activities)
            preset.activities = activities
        if rule is not None:
            preset.apply_rule(rule)
        if is_archived is not None:
            preset.is_archived = is_archived

        preset.updated_at = datetime.utcnow()
        self.session.commit()
        self.session.refresh(preset)
        return preset

    def delete(self, preset_id: str, user_id: str) -> bool:
        """Delete a preset together with any activities it materialized."""
        preset = self.get_by_id(preset_id, user_id)
        if not preset:
            return False

        self.activities.delete_for_preset(user_id, preset.id)
        self.session.delete(preset)
        self.session.commit()
        return True

    def _check_templates(self, user_id: str, activities: List[dict]):
        for entry in activities:
            if self.templates.get_for_user(entry["template_id"], user_id) is None:
                raise TemplateNotFoundError(entry["template_id"])

    def _materialize(self, preset: UserPreset, dates: List[date]) -> List[Activity]:
        records: List[Activity] = []
        for entry in preset.activities:
            template = self.templates.get_for_user(entry["template_id"], preset.user_id)
            if template is None:
                raise TemplateNotFoundError(entry["template_id"])
            records.extend(materialize_activities(
                dates,
                template_data(template, duration_minutes=entry.get("duration")),
                user_id=preset.user_id,
                day_part=entry["day_part"],
                user_preset_id=preset.id,
                repetitions=entry.get("repetitions", 1),
            ))
        return records

    def activate(
        self,
        preset_id: str,
        user_id: str,
        start_date: Optional[date] = None,
    ) -> Optional[Tuple[UserPreset, List[Activity]]]:
        """
        Materialize the preset's activities over its recurrence window.

        Every row already tagged with the preset is cleared first, including
        leftovers of an earlier failed activation, so the calendar only ever
        holds one window per preset. Raises MaterializationError on a failed
        insert; the preset stays inactive in that case.
        """
        preset = self.get_by_id(preset_id, user_id)
        if not preset:
            return None

        self.deactivate(preset_id, user_id)

        start_date = start_date or calendar_today()
        rule = preset.recurrence_rule
        dates = generate_dates(start_date, rule)
        records = self._materialize(preset, dates)

        result = ActivityBatchWriter(self.session).insert_batch(records)
        if result.created:
            self.dispatcher.activity_updated(
                user_id, "created", [a.id for a in result.activities], user_preset_id=preset.id
            )
        if not result.ok:
            logger.error(
                "Preset activation incomplete",
                preset_id=preset.id,
                created=result.created,
                total=result.total,
            )
            raise MaterializationError(result.created, result.total, result.error)

        preset.is_active = True
        preset.activation_start_date = start_date
        preset.activation_end_date = calculate_activation_end(start_date, rule)
        preset.last_activated_at = datetime.utcnow()
        preset.updated_at = preset.last_activated_at
        self.session.commit()
        self.session.refresh(preset)

        metrics_collector.preset_activated()
        logger.info(
            "Preset activated",
            preset_id=preset.id,
            user_id=user_id,
            activities=result.created,
            activation_start_date=preset.activation_start_date,
            activation_end_date=preset.activation_end_date,
        )
        return preset, result.activities

    def deactivate(self, preset_id: str, user_id: str) -> Optional[Tuple[UserPreset, int]]:
        """Remove every activity tagged with the preset and close its window."""
        preset = self.get_by_id(preset_id, user_id)
        if not preset:
            return None

        removed = self.activities.delete_for_preset(user_id, preset.id)
        preset.is_active = False
        preset.activation_start_date = None
        preset.activation_end_date = None
        preset.updated_at = datetime.utcnow()
        self.session.commit()
        self.session.refresh(preset)

        logger.info("Preset deactivated", preset_id=preset.id, user_id=user_id, removed=removed)
        return preset, removed
