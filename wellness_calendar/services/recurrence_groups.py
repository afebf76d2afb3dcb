"""Group membership rules for bulk edit and delete."""
from typing import Dict, Iterable, List, Optional, Tuple

# Attributes shared by every member of a group. Dates and times are
# per-occurrence and never propagate.
GROUP_PROPAGATED_FIELDS = (
    "title",
    "description",
    "category",
    "impact_type",
    "duration_minutes",
    "emoji",
    "reminder_enabled",
    "reminder_minutes_before",
)

GroupKey = Tuple[str, str]


def group_key_for(activity) -> Optional[GroupKey]:
    """(column, value) identifying the activity's group, or None for one-off activities."""
    if activity.recurrence_group_id:
        return ("recurrence_group_id", activity.recurrence_group_id)
    if activity.user_preset_id:
        return ("user_preset_id", activity.user_preset_id)
    return None


def resolve_group_ids(user_id: str, group_key: Dict[str, Optional[str]], rows: Iterable) -> List[str]:
    """
    Ids of the rows owned by `user_id` that belong to the group.

    `group_key` is either {"recurrence_group_id": ...} or {"user_preset_id": ...};
    a null key matches nothing.
    """
    if len(group_key) != 1:
        raise ValueError("group_key must name exactly one of recurrence_group_id, user_preset_id")
    column, value = next(iter(group_key.items()))
    if column not in ("recurrence_group_id", "user_preset_id"):
        raise ValueError(f"Unsupported group column: {column}")
    if not value:
        return []
    return [row.id for row in rows if row.user_id == user_id and getattr(row, column) == value]


def group_patch(patch: dict) -> dict:
    """Restrict an edit to the fields that propagate across a group."""
    return {key: value for key, value in patch.items() if key in GROUP_PROPAGATED_FIELDS}
