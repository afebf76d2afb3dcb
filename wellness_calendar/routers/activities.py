"""Activity router: calendar activities and recurrence groups."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional
from datetime import date

from wellness_calendar.schemas.activity import (
    ActivityCreate,
    ActivityCreateResponse,
    ActivityDayResponse,
    ActivityListResponse,
    ActivityResponse,
    ActivityStatusUpdate,
    ActivityUpdate,
    MutationResponse,
    MutationScope,
)
from wellness_calendar.services.activity_service import ActivityService
from wellness_calendar.services.materializer import ActivityTemplateData
from wellness_calendar.services.recurrence_groups import group_key_for, group_patch
from wellness_calendar.services.recurrence_validator import RecurrenceValidator
from wellness_calendar.middleware.auth import get_current_user, CurrentUser, ensure_same_user
from wellness_calendar.db.config import get_session
from sqlmodel import Session

router = APIRouter(tags=["Activities"])  # No prefix since main.py adds /api prefix

# Columns that can't be cleared through an update
NON_NULLABLE_FIELDS = {"title", "category", "impact_type", "date", "reminder_enabled", "status"}


def get_activity_service(session: Session = Depends(get_session)) -> ActivityService:
    """Dependency for getting ActivityService instance."""
    return ActivityService(session)


def _resolve_scope(service: ActivityService, activity_id: str, user_id: str, scope: Optional[MutationScope]) -> MutationScope:
    """
    Grouped activities need an explicit single/all choice; one-off
    activities are always single scope.
    """
    activity = service.get_by_id(activity_id, user_id)
    if not activity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    if group_key_for(activity) is None:
        return MutationScope.SINGLE
    if scope is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Activity belongs to a recurring series; choose scope=single or scope=all"
        )
    return scope


@router.post("/{user_id}/activities", response_model=ActivityCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    user_id: str,
    activity_data: ActivityCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """Create an activity; a recurrence rule expands it into a recurrence group."""
    ensure_same_user(user_id, current_user)

    validation = RecurrenceValidator.validate_rule(activity_data.date, activity_data.recurrence)
    if not validation["valid"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="; ".join(validation["errors"]))

    template = ActivityTemplateData(
        title=activity_data.title,
        category=activity_data.category,
        impact_type=activity_data.impact_type,
        duration_minutes=activity_data.duration_minutes,
        emoji=activity_data.emoji,
        description=activity_data.description,
        start_time=activity_data.start_time,
        reminder_enabled=activity_data.reminder_enabled,
        reminder_minutes_before=activity_data.reminder_minutes_before,
    )
    result = service.create(
        user_id=user_id,
        template=template,
        start_date=activity_data.date,
        rule=activity_data.recurrence,
        day_part=activity_data.day_part,
    )
    return ActivityCreateResponse(
        activities=[ActivityResponse.model_validate(a) for a in result.activities],
        count=result.created,
        recurrence_group_id=result.activities[0].recurrence_group_id if result.activities else None,
        warnings=validation["warnings"],
    )


@router.get("/{user_id}/activities", response_model=ActivityListResponse)
async def list_activities(
    user_id: str,
    start: date = Query(..., description="First date of the range (YYYY-MM-DD)"),
    end: date = Query(..., description="Last date of the range (YYYY-MM-DD)"),
    activity_status: Optional[str] = Query(None, alias="status", pattern=r"^(planned|completed)$"),
    category: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """List activities in a date range."""
    ensure_same_user(user_id, current_user)
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end must not be before start")

    activities = service.list_for_range(user_id, start, end, status=activity_status, category=category)
    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(a) for a in activities],
        count=len(activities),
    )


@router.get("/{user_id}/activities/day/{day}", response_model=ActivityDayResponse)
async def get_day(
    user_id: str,
    day: date,
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """A day's activities bucketed by time slot."""
    ensure_same_user(user_id, current_user)
    slots = {
        slot: [ActivityResponse.model_validate(a) for a in items]
        for slot, items in service.list_for_day_grouped(user_id, day).items()
    }
    return ActivityDayResponse(date=day, slots=slots, count=sum(len(items) for items in slots.values()))


@router.get("/{user_id}/activities/{activity_id}", response_model=ActivityResponse)
async def get_activity(
    user_id: str,
    activity_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """Get a specific activity by ID."""
    ensure_same_user(user_id, current_user)
    activity = service.get_by_id(activity_id, user_id)
    if not activity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return activity


@router.get("/{user_id}/activities/{activity_id}/group", response_model=ActivityListResponse)
async def get_activity_group(
    user_id: str,
    activity_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """Every activity in the same recurrence group or preset."""
    ensure_same_user(user_id, current_user)
    activity = service.get_by_id(activity_id, user_id)
    if not activity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    members = service.group_members(activity)
    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(a) for a in members],
        count=len(members),
    )


@router.put("/{user_id}/activities/{activity_id}", response_model=MutationResponse)
async def update_activity(
    user_id: str,
    activity_id: str,
    activity_data: ActivityUpdate,
    scope: Optional[MutationScope] = Query(None, description="single or all; required for recurring activities"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """Update one activity, or every activity in its group (dates and times stay per occurrence)."""
    ensure_same_user(user_id, current_user)
    scope = _resolve_scope(service, activity_id, user_id, scope)

    patch = {
        key: value
        for key, value in activity_data.model_dump(exclude_unset=True).items()
        if value is not None or key not in NON_NULLABLE_FIELDS
    }
    if scope == MutationScope.ALL and not group_patch(patch):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date, time and status can only be changed with scope=single"
        )
    result = service.update(activity_id, user_id, patch, scope=scope)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")

    _, targets = result
    return MutationResponse(
        scope=scope,
        affected=len(targets),
        activity_ids=[row.id for row in targets],
        activities=[ActivityResponse.model_validate(row) for row in targets],
    )


@router.delete("/{user_id}/activities/{activity_id}", response_model=MutationResponse)
async def delete_activity(
    user_id: str,
    activity_id: str,
    scope: Optional[MutationScope] = Query(None, description="single or all; required for recurring activities"),
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """Delete one activity or its whole group."""
    ensure_same_user(user_id, current_user)
    scope = _resolve_scope(service, activity_id, user_id, scope)

    deleted = service.delete(activity_id, user_id, scope=scope)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return MutationResponse(scope=scope, affected=len(deleted), activity_ids=deleted)


@router.patch("/{user_id}/activities/{activity_id}/status", response_model=ActivityResponse)
async def set_activity_status(
    user_id: str,
    activity_id: str,
    status_data: ActivityStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """Set the status of a single occurrence."""
    ensure_same_user(user_id, current_user)
    activity = service.set_status(activity_id, user_id, status_data.status)
    if not activity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return activity


@router.patch("/{user_id}/activities/{activity_id}/complete", response_model=ActivityResponse)
async def toggle_complete(
    user_id: str,
    activity_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    """Toggle activity completion status."""
    ensure_same_user(user_id, current_user)
    activity = service.toggle_complete(activity_id, user_id)
    if not activity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return activity
