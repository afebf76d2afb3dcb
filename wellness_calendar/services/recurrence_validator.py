"""Recurrence Validator."""
from datetime import date
from typing import Dict, Any

from wellness_calendar.schemas.recurrence import EndCondition, RecurrenceRule, RecurrenceType
from wellness_calendar.services.recurrence import MAX_OCCURRENCES, calculate_activation_end, is_clamped


class RecurrenceValidator:
    """Validate recurrence rules before any dates are generated."""

    @staticmethod
    def validate_rule(start_date: date, rule: RecurrenceRule) -> Dict[str, Any]:
        """
        Validate a recurrence rule against the date it starts on.

        Args:
            start_date: First date of the series
            rule: Recurrence rule to validate

        Returns:
            Dict with validation result
        """
        result = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        if rule.type == RecurrenceType.CUSTOM and rule.end_condition == EndCondition.DATE:
            if rule.end_date is None:
                result["valid"] = False
                result["errors"].append("Custom recurrence ending by date requires an end date")
                return result

            if rule.end_date < start_date:
                result["valid"] = False
                result["errors"].append(
                    f"End date {rule.end_date.isoformat()} is before start date {start_date.isoformat()}"
                )
                return result

        if is_clamped(rule):
            result["warnings"].append(
                f"Recurrence limited to {MAX_OCCURRENCES} occurrences"
            )

        try:
            calculate_activation_end(start_date, rule)
        except (OverflowError, ValueError):
            result["valid"] = False
            result["errors"].append("Recurrence extends past the supported calendar range")

        return result
