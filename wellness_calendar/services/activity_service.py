"""Activity service for calendar activities and their recurrence groups."""
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from typing import Dict, List, Optional, Tuple
from datetime import date, datetime

from wellness_calendar.events.dispatcher import ActivityEventDispatcher, activity_events
from wellness_calendar.models.activity import Activity
from wellness_calendar.schemas.activity import MutationScope
from wellness_calendar.schemas.recurrence import RecurrenceRule
from wellness_calendar.services.errors import MaterializationError
from wellness_calendar.services.materializer import (
    ActivityBatchWriter,
    ActivityTemplateData,
    MaterializationResult,
    end_time_for,
    materialize_activities,
    new_group_id,
)
from wellness_calendar.services.recurrence import generate_dates
from wellness_calendar.services.recurrence_groups import group_key_for, group_patch, resolve_group_ids
from wellness_calendar.services.time_slots import DayPart, group_by_time_slot
from wellness_calendar.utils.logger import get_logger
from wellness_calendar.utils.metrics import metrics_collector

logger = get_logger("activity-service")


class ActivityService:
    """Service class for activity CRUD with single and group scope."""

    def __init__(self, session: Session, dispatcher: ActivityEventDispatcher = activity_events):
        self.session = session
        self.dispatcher = dispatcher

    def create(
        self,
        user_id: str,
        template: ActivityTemplateData,
        start_date: date,
        rule: RecurrenceRule,
        day_part: Optional[DayPart] = None,
    ) -> MaterializationResult:
        """
        Create one activity, or a whole recurrence group when the rule repeats.

        Raises MaterializationError when any chunk fails to insert.
        """
        dates = generate_dates(start_date, rule)
        group_id = new_group_id() if rule.is_recurring else None
        records = materialize_activities(
            dates,
            template,
            user_id=user_id,
            day_part=day_part,
            recurrence_group_id=group_id,
        )
        result = ActivityBatchWriter(self.session).insert_batch(records)
        if not result.ok:
            self._notify_created(user_id, result, recurrence_group_id=group_id)
            raise MaterializationError(result.created, result.total, result.error)

        logger.info(
            "Activities created",
            user_id=user_id,
            count=result.created,
            recurrence_type=rule.type.value,
            recurrence_group_id=group_id,
        )
        self._notify_created(user_id, result, recurrence_group_id=group_id)
        return result

    def _notify_created(self, user_id: str, result: MaterializationResult, **extra):
        if result.created:
            self.dispatcher.activity_updated(
                user_id, "created", [a.id for a in result.activities], **extra
            )

    def get_by_id(self, activity_id: str, user_id: str) -> Optional[Activity]:
        """Get a specific activity by ID, ensuring user ownership."""
        statement = (
            select(Activity)
            .where(Activity.id == activity_id)
            .where(Activity.user_id == user_id)
        )
        return self.session.exec(statement).first()

    def list_for_range(
        self,
        user_id: str,
        start: date,
        end: date,
        status: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Activity]:
        """Activities with dates in [start, end], ordered by date then time."""
        statement = (
            select(Activity)
            .where(Activity.user_id == user_id)
            .where(Activity.date >= start)
            .where(Activity.date <= end)
        )
        if status:
            statement = statement.where(Activity.status == status)
        if category:
            statement = statement.where(Activity.category == category)
        statement = statement.order_by(Activity.date.asc(), Activity.start_time.asc().nullsfirst())
        return list(self.session.exec(statement).all())

    def list_for_day_grouped(self, user_id: str, day: date) -> Dict[str, List[Activity]]:
        return group_by_time_slot(self.list_for_range(user_id, day, day))

    def group_members(self, activity: Activity) -> List[Activity]:
        """Every row in the activity's group for its owner; just the activity when ungrouped."""
        key = group_key_for(activity)
        if key is None:
            return [activity]
        column, value = key
        candidates = self.session.exec(
            select(Activity)
            .where(Activity.user_id == activity.user_id)
            .where(getattr(Activity, column) == value)
            .order_by(Activity.date.asc())
        ).all()
        ids = set(resolve_group_ids(activity.user_id, {column: value}, candidates))
        return [row for row in candidates if row.id in ids]

    def _targets(self, activity: Activity, scope: MutationScope) -> List[Activity]:
        if scope == MutationScope.ALL:
            return self.group_members(activity)
        return [activity]

    def _commit(self, action: str, **context):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Activity {action} failed", error=str(e), **context)
            raise

    def update(
        self,
        activity_id: str,
        user_id: str,
        patch: dict,
        scope: MutationScope = MutationScope.SINGLE,
    ) -> Optional[Tuple[Activity, List[Activity]]]:
        """
        Apply a patch to one activity or to its whole group.

        At group scope only shared attributes propagate; each row keeps its
        own date and times, and a patch with no shared attribute changes
        nothing. Returns (activity, affected rows) or None when the activity
        doesn't exist for this user.
        """
        activity = self.get_by_id(activity_id, user_id)
        if not activity:
            return None

        targets = self._targets(activity, scope)
        if scope == MutationScope.ALL and group_key_for(activity) is not None:
            patch = group_patch(patch)
            if not patch:
                return activity, []
            metrics_collector.group_mutation()

        now = datetime.utcnow()
        for row in targets:
            for key, value in patch.items():
                setattr(row, key, value)
            if "end_time" not in patch and ("start_time" in patch or "duration_minutes" in patch):
                row.end_time = end_time_for(row.start_time, row.duration_minutes)
            if not row.reminder_enabled:
                row.reminder_minutes_before = None
            row.updated_at = now

        self._commit("update", activity_id=activity_id, scope=scope.value, rows=len(targets))
        for row in targets:
            self.session.refresh(row)

        self.dispatcher.activity_updated(user_id, "updated", [row.id for row in targets], scope=scope.value)
        return activity, targets

    def delete(self, activity_id: str, user_id: str, scope: MutationScope = MutationScope.SINGLE) -> Optional[List[str]]:
        """Delete one activity or its whole group; returns the deleted ids, None if not found."""
        activity = self.get_by_id(activity_id, user_id)
        if not activity:
            return None

        targets = self._targets(activity, scope)
        if scope == MutationScope.ALL and group_key_for(activity) is not None:
            metrics_collector.group_mutation()

        ids = [row.id for row in targets]
        for row in targets:
            self.session.delete(row)
        self._commit("delete", activity_id=activity_id, scope=scope.value, rows=len(ids))

        logger.info("Activities deleted", user_id=user_id, count=len(ids), scope=scope.value)
        self.dispatcher.activity_updated(user_id, "deleted", ids, scope=scope.value)
        return ids

    def delete_for_preset(self, user_id: str, preset_id: str) -> int:
        """Remove every activity materialized from a preset. Commits."""
        rows = self.session.exec(
            select(Activity).where(Activity.user_id == user_id).where(Activity.user_preset_id == preset_id)
        ).all()
        ids = resolve_group_ids(user_id, {"user_preset_id": preset_id}, rows)
        for row in rows:
            if row.id in ids:
                self.session.delete(row)
        self._commit("preset cleanup", preset_id=preset_id, rows=len(ids))
        if ids:
            self.dispatcher.activity_updated(user_id, "deleted", ids, user_preset_id=preset_id)
        return len(ids)

    def set_status(self, activity_id: str, user_id: str, status: str) -> Optional[Activity]:
        """Set the status of a single occurrence."""
        activity = self.get_by_id(activity_id, user_id)
        if not activity:
            return None

        activity.status = status
        activity.updated_at = datetime.utcnow()
        self._commit("status update", activity_id=activity_id)
        self.session.refresh(activity)
        self.dispatcher.activity_updated(user_id, "status_changed", [activity.id], status=status)
        return activity

    def toggle_complete(self, activity_id: str, user_id: str) -> Optional[Activity]:
        """Toggle between planned and completed."""
        activity = self.get_by_id(activity_id, user_id)
        if not activity:
            return None
        status = "planned" if activity.status == "completed" else "completed"
        return self.set_status(activity_id, user_id, status)
