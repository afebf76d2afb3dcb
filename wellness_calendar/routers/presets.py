"""Preset and template router."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional

from wellness_calendar.schemas.activity import ActivityResponse
from wellness_calendar.schemas.preset import (
    BuiltinPresetResponse,
    PresetActivateRequest,
    PresetActivationResponse,
    PresetCreate,
    PresetDeactivationResponse,
    PresetResponse,
    PresetUpdate,
    TemplateCreate,
    TemplateResponse,
)
from wellness_calendar.services.preset_service import PresetService
from wellness_calendar.services.recurrence_validator import RecurrenceValidator
from wellness_calendar.services.template_service import BUILTIN_PRESETS, TemplateService, get_builtin_preset
from wellness_calendar.utils.dates import calendar_today
from wellness_calendar.middleware.auth import get_current_user, CurrentUser, ensure_same_user
from wellness_calendar.db.config import get_session
from sqlmodel import Session

router = APIRouter(tags=["Presets"])


def get_preset_service(session: Session = Depends(get_session)) -> PresetService:
    """Dependency for getting PresetService instance."""
    return PresetService(session)


def get_template_service(session: Session = Depends(get_session)) -> TemplateService:
    """Dependency for getting TemplateService instance."""
    return TemplateService(session)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")


@router.get("/presets/builtin", response_model=List[BuiltinPresetResponse])
async def list_builtin_presets():
    """Built-in preset catalog."""
    return BUILTIN_PRESETS


@router.get("/presets/builtin/{preset_id}", response_model=BuiltinPresetResponse)
async def get_builtin(preset_id: str):
    preset = get_builtin_preset(preset_id)
    if not preset:
        raise _not_found()
    return preset


@router.get("/{user_id}/templates", response_model=List[TemplateResponse])
async def list_templates(
    user_id: str,
    category: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    service: TemplateService = Depends(get_template_service),
):
    """System templates plus the user's own."""
    ensure_same_user(user_id, current_user)
    return service.list_for_user(user_id, category=category)


@router.post("/{user_id}/templates", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    user_id: str,
    template_data: TemplateCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TemplateService = Depends(get_template_service),
):
    ensure_same_user(user_id, current_user)
    return service.create(user_id, **template_data.model_dump())


@router.get("/{user_id}/presets", response_model=List[PresetResponse])
async def list_presets(
    user_id: str,
    include_archived: bool = Query(False),
    current_user: CurrentUser = Depends(get_current_user),
    service: PresetService = Depends(get_preset_service),
):
    ensure_same_user(user_id, current_user)
    return [PresetResponse.from_preset(p) for p in service.list_for_user(user_id, include_archived)]


@router.post("/{user_id}/presets", response_model=PresetResponse, status_code=status.HTTP_201_CREATED)
async def create_preset(
    user_id: str,
    preset_data: PresetCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: PresetService = Depends(get_preset_service),
):
    """Save a preset: ordered template entries plus the recurrence rule used on activation."""
    ensure_same_user(user_id, current_user)
    preset = service.create(
        user_id=user_id,
        name=preset_data.name,
        emoji=preset_data.emoji,
        tags=preset_data.tags,
        activities=[a.model_dump(mode="json") for a in preset_data.activities],
        rule=preset_data.recurrence,
    )
    return PresetResponse.from_preset(preset)


@router.get("/{user_id}/presets/{preset_id}", response_model=PresetResponse)
async def get_preset(
    user_id: str,
    preset_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: PresetService = Depends(get_preset_service),
):
    ensure_same_user(user_id, current_user)
    preset = service.get_by_id(preset_id, user_id)
    if not preset:
        raise _not_found()
    return PresetResponse.from_preset(preset)


@router.put("/{user_id}/presets/{preset_id}", response_model=PresetResponse)
async def update_preset(
    user_id: str,
    preset_id: str,
    preset_data: PresetUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: PresetService = Depends(get_preset_service),
):
    """Update a preset. Changes apply to the calendar on the next activation."""
    ensure_same_user(user_id, current_user)
    activities = None
    if preset_data.activities is not None:
        activities = [a.model_dump(mode="json") for a in preset_data.activities]
    preset = service.update(
        preset_id,
        user_id,
        name=preset_data.name,
        emoji=preset_data.emoji,
        tags=preset_data.tags,
        activities=activities,
        rule=preset_data.recurrence,
        is_archived=preset_data.is_archived,
    )
    if not preset:
        raise _not_found()
    return PresetResponse.from_preset(preset)


@router.delete("/{user_id}/presets/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_preset(
    user_id: str,
    preset_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: PresetService = Depends(get_preset_service),
):
    """Delete a preset and the activities it materialized."""
    ensure_same_user(user_id, current_user)
    if not service.delete(preset_id, user_id):
        raise _not_found()


@router.post("/{user_id}/presets/{preset_id}/activate", response_model=PresetActivationResponse)
async def activate_preset(
    user_id: str,
    preset_id: str,
    activation: Optional[PresetActivateRequest] = None,
    current_user: CurrentUser = Depends(get_current_user),
    service: PresetService = Depends(get_preset_service),
):
    """Materialize the preset's activities over its recurrence window."""
    ensure_same_user(user_id, current_user)
    preset = service.get_by_id(preset_id, user_id)
    if not preset:
        raise _not_found()

    start_date = (activation.start_date if activation else None) or calendar_today()
    validation = RecurrenceValidator.validate_rule(start_date, preset.recurrence_rule)
    if not validation["valid"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="; ".join(validation["errors"]))

    preset, activities = service.activate(preset_id, user_id, start_date=start_date)
    return PresetActivationResponse(
        preset=PresetResponse.from_preset(preset),
        created=len(activities),
        activities=[ActivityResponse.model_validate(a) for a in activities],
    )


@router.post("/{user_id}/presets/{preset_id}/deactivate", response_model=PresetDeactivationResponse)
async def deactivate_preset(
    user_id: str,
    preset_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: PresetService = Depends(get_preset_service),
):
    """Remove the preset's activities from the calendar."""
    ensure_same_user(user_id, current_user)
    result = service.deactivate(preset_id, user_id)
    if not result:
        raise _not_found()
    preset, removed = result
    return PresetDeactivationResponse(preset=PresetResponse.from_preset(preset), removed=removed)
