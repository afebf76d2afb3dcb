"""Recurrence preview router."""
from fastapi import APIRouter, HTTPException, status

from wellness_calendar.schemas.recurrence import RecurrencePreviewRequest, RecurrencePreviewResponse
from wellness_calendar.services.recurrence import calculate_activation_end, generate_dates
from wellness_calendar.services.recurrence_validator import RecurrenceValidator

router = APIRouter(tags=["Recurrence"])


@router.post("/recurrence/preview", response_model=RecurrencePreviewResponse)
async def preview_recurrence(preview: RecurrencePreviewRequest):
    """Dates a rule would generate, without creating anything."""
    validation = RecurrenceValidator.validate_rule(preview.start_date, preview.rule)
    if not validation["valid"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="; ".join(validation["errors"]))

    dates = generate_dates(preview.start_date, preview.rule)
    return RecurrencePreviewResponse(
        dates=dates,
        activation_end_date=calculate_activation_end(preview.start_date, preview.rule),
        count=len(dates),
        warnings=validation["warnings"],
    )
