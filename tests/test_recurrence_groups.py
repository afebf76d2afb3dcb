"""Tests for group resolution and group-scoped edits through ActivityService."""

from datetime import date, time
from types import SimpleNamespace

import pytest
from sqlmodel import select

from wellness_calendar.models.activity import Activity
from wellness_calendar.schemas.activity import MutationScope
from wellness_calendar.schemas.recurrence import RecurrenceRule
from wellness_calendar.services.activity_service import ActivityService
from wellness_calendar.services.materializer import ActivityTemplateData
from wellness_calendar.services.recurrence_groups import (
    GROUP_PROPAGATED_FIELDS,
    group_key_for,
    group_patch,
    resolve_group_ids,
)
from wellness_calendar.utils.metrics import metrics_collector

from tests.conftest import OTHER_USER_ID, USER_ID

YOGA = ActivityTemplateData(title="Yoga", category="exercise", duration_minutes=45, emoji="🧘")


def row(row_id, user_id=USER_ID, recurrence_group_id=None, user_preset_id=None):
    return SimpleNamespace(
        id=row_id,
        user_id=user_id,
        recurrence_group_id=recurrence_group_id,
        user_preset_id=user_preset_id,
    )


ROWS = [
    row("a", recurrence_group_id="g1"),
    row("b", recurrence_group_id="g1"),
    row("c", recurrence_group_id="g2"),
    row("d", user_id=OTHER_USER_ID, recurrence_group_id="g1"),
    row("e", user_preset_id="p1"),
    row("f", user_preset_id="p1"),
    row("g"),
]


class TestResolveGroupIds:
    """Pure membership resolution."""

    def test_by_recurrence_group(self):
        assert resolve_group_ids(USER_ID, {"recurrence_group_id": "g1"}, ROWS) == ["a", "b"]

    def test_by_preset(self):
        assert resolve_group_ids(USER_ID, {"user_preset_id": "p1"}, ROWS) == ["e", "f"]

    def test_other_users_rows_excluded(self):
        assert resolve_group_ids(OTHER_USER_ID, {"recurrence_group_id": "g1"}, ROWS) == ["d"]

    @pytest.mark.parametrize("key", [{"recurrence_group_id": None}, {"user_preset_id": ""}])
    def test_null_key_matches_nothing(self, key):
        assert resolve_group_ids(USER_ID, key, ROWS) == []

    @pytest.mark.parametrize(
        "key",
        [{}, {"recurrence_group_id": "g1", "user_preset_id": "p1"}, {"title": "Yoga"}],
    )
    def test_invalid_key_rejected(self, key):
        with pytest.raises(ValueError):
            resolve_group_ids(USER_ID, key, ROWS)

    def test_group_key_prefers_recurrence_group(self):
        assert group_key_for(row("x", recurrence_group_id="g1")) == ("recurrence_group_id", "g1")
        assert group_key_for(row("y", user_preset_id="p1")) == ("user_preset_id", "p1")
        assert group_key_for(row("z")) is None

    def test_group_patch_drops_per_occurrence_fields(self):
        patch = {"title": "Stretch", "date": date(2024, 2, 1), "start_time": time(7), "status": "completed"}
        assert group_patch(patch) == {"title": "Stretch"}
        assert "date" not in GROUP_PROPAGATED_FIELDS


class TestGroupScopedMutations:
    """Edits and deletes against a real recurrence group."""

    @pytest.fixture
    def service(self, session, dispatcher):
        return ActivityService(session, dispatcher)

    @pytest.fixture
    def series(self, service):
        rule = RecurrenceRule(type="daily", count=5)
        return service.create(USER_ID, YOGA, date(2024, 1, 1), rule, day_part="early_morning").activities

    @pytest.fixture
    def unrelated(self, service):
        rule = RecurrenceRule(type="weekly", count=3)
        return service.create(USER_ID, YOGA, date(2024, 1, 1), rule).activities

    def test_update_all_keeps_dates_and_times(self, service, series):
        before = {a.id: (a.date, a.start_time) for a in series}

        _, targets = service.update(
            series[2].id,
            USER_ID,
            {"title": "Sunrise yoga", "date": date(2024, 3, 1), "start_time": time(11, 0)},
            scope=MutationScope.ALL,
        )

        assert len(targets) == 5
        for activity in targets:
            assert activity.title == "Sunrise yoga"
            assert (activity.date, activity.start_time) == before[activity.id]

    def test_update_single_touches_one_row(self, service, series):
        service.update(series[0].id, USER_ID, {"title": "Rest", "date": date(2024, 2, 1)})

        titles = {a.title for a in service.group_members(series[1])}
        assert titles == {"Yoga", "Rest"}
        assert service.get_by_id(series[0].id, USER_ID).date == date(2024, 2, 1)

    def test_duration_change_recomputes_end_time(self, service, series):
        _, targets = service.update(series[0].id, USER_ID, {"duration_minutes": 90}, scope=MutationScope.ALL)
        assert {a.end_time for a in targets} == {time(6, 30)}

    def test_delete_all_removes_only_the_group(self, service, session, series, unrelated):
        series_ids = sorted(a.id for a in series)
        deleted = service.delete(series[0].id, USER_ID, scope=MutationScope.ALL)

        assert sorted(deleted) == series_ids
        remaining = session.exec(select(Activity)).all()
        assert sorted(a.id for a in remaining) == sorted(a.id for a in unrelated)

    def test_delete_single_keeps_siblings(self, service, series):
        removed_id = series[1].id
        assert service.delete(removed_id, USER_ID) == [removed_id]
        assert len(service.group_members(series[0])) == 4

    def test_other_user_cannot_reach_group(self, service, series):
        assert service.update(series[0].id, OTHER_USER_ID, {"title": "x"}, scope=MutationScope.ALL) is None
        assert service.delete(series[0].id, OTHER_USER_ID, scope=MutationScope.ALL) is None

    def test_update_all_without_shared_fields_is_a_no_op(self, service, dispatcher, series):
        events = []
        dispatcher.subscribe(lambda event_type, payload: events.append(payload))

        _, targets = service.update(
            series[0].id, USER_ID, {"date": date(2024, 3, 1), "status": "completed"}, scope=MutationScope.ALL
        )

        assert targets == []
        assert events == []
        assert {a.status for a in service.group_members(series[0])} == {"planned"}
        assert metrics_collector.get_metrics()["counters"]["group_mutations_total"] == 0

    def test_mutations_notify_subscribers(self, service, dispatcher, series):
        events = []
        dispatcher.subscribe(lambda event_type, payload: events.append((event_type, payload)))

        service.update(series[0].id, USER_ID, {"emoji": "🌞"}, scope=MutationScope.ALL)
        service.delete(series[0].id, USER_ID, scope=MutationScope.ALL)

        assert [payload["action"] for _, payload in events] == ["updated", "deleted"]
        assert len(events[1][1]["activity_ids"]) == 5
        assert events[0][1]["scope"] == "all"

    def test_toggle_complete_round_trip(self, service, series):
        assert service.toggle_complete(series[0].id, USER_ID).status == "completed"
        assert service.toggle_complete(series[0].id, USER_ID).status == "planned"
        assert {a.status for a in service.group_members(series[0])} == {"planned"}
