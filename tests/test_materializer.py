"""Tests for day parts, activity materialization and chunked inserts."""

from datetime import date, time
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from wellness_calendar.models.activity import Activity
from wellness_calendar.schemas.recurrence import RecurrenceRule
from wellness_calendar.services.materializer import (
    ActivityBatchWriter,
    ActivityTemplateData,
    end_time_for,
    materialize_activities,
)
from wellness_calendar.services.recurrence import generate_dates
from wellness_calendar.services.time_slots import (
    ANYTIME,
    DAY_PART_TIMES,
    DayPart,
    default_time_for,
    group_by_time_slot,
    time_slot_for,
)
from wellness_calendar.utils.metrics import metrics_collector

from tests.conftest import USER_ID

WALK = ActivityTemplateData(
    title="Evening walk",
    category="exercise",
    impact_type="positive",
    duration_minutes=30,
    emoji="🚶",
)


class FlakySession:
    """Session stand-in whose n-th commit fails."""

    def __init__(self, fail_on_commit: int):
        self.fail_on_commit = fail_on_commit
        self.commits = 0
        self.rollbacks = 0
        self.pending = []
        self.stored = []

    def add_all(self, records):
        self.pending = list(records)

    def commit(self):
        self.commits += 1
        if self.commits == self.fail_on_commit:
            raise OperationalError("INSERT INTO activity", {}, Exception("payload too large"))
        self.stored.extend(self.pending)
        self.pending = []

    def rollback(self):
        self.rollbacks += 1
        self.pending = []

    def refresh(self, record):
        pass


# =============================================================================
# DAY PARTS
# =============================================================================


class TestDayParts:
    """Day-part lookup is total; slot classification wraps at night."""

    def test_every_day_part_has_a_time(self):
        assert set(DAY_PART_TIMES) == set(DayPart)
        for part in DayPart:
            assert isinstance(default_time_for(part), time)

    def test_default_times(self):
        assert default_time_for(DayPart.EARLY_MORNING) == time(5, 0)
        assert default_time_for("evening") == time(18, 0)
        assert default_time_for(DayPart.NIGHT) == time(22, 0)

    @pytest.mark.parametrize(
        "value,slot",
        [
            (None, ANYTIME),
            (time(5, 0), "early_morning"),
            (time(9, 30), "late_morning"),
            (time(12, 0), "midday"),
            (time(17, 59), "afternoon"),
            (time(21, 0), "evening"),
            (time(23, 15), "night"),
            (time(2, 0), "night"),
        ],
    )
    def test_time_slot_for(self, value, slot):
        assert time_slot_for(value) == slot

    def test_group_by_time_slot(self):
        items = [SimpleNamespace(start_time=time(6)), SimpleNamespace(start_time=None), SimpleNamespace(start_time=time(23))]
        grouped = group_by_time_slot(items)

        assert list(grouped) == [part.value for part in DayPart] + [ANYTIME]
        assert grouped["early_morning"] == [items[0]]
        assert grouped["night"] == [items[2]]
        assert grouped[ANYTIME] == [items[1]]


# =============================================================================
# MATERIALIZATION
# =============================================================================


class TestMaterializeActivities:
    """One record per generated date, sharing one group marker."""

    def test_records_share_group_and_template(self):
        dates = generate_dates(date(2024, 1, 1), RecurrenceRule(type="daily", count=5))
        records = materialize_activities(dates, WALK, user_id=USER_ID)

        assert len(records) == 5
        assert len({r.recurrence_group_id for r in records}) == 1
        assert records[0].recurrence_group_id is not None
        assert [r.date for r in records] == dates
        assert {(r.title, r.category, r.duration_minutes, r.emoji) for r in records} == {
            ("Evening walk", "exercise", 30, "🚶")
        }
        assert all(r.status == "planned" and r.user_id == USER_ID for r in records)

    def test_each_call_gets_a_fresh_group(self):
        dates = [date(2024, 1, 1), date(2024, 1, 2)]
        first = materialize_activities(dates, WALK, user_id=USER_ID)
        second = materialize_activities(dates, WALK, user_id=USER_ID)
        assert first[0].recurrence_group_id != second[0].recurrence_group_id

    def test_single_date_is_ungrouped(self):
        records = materialize_activities([date(2024, 1, 1)], WALK, user_id=USER_ID)
        assert records[0].recurrence_group_id is None
        assert records[0].user_preset_id is None

    def test_preset_id_replaces_group_id(self):
        records = materialize_activities(
            [date(2024, 1, 1), date(2024, 1, 2)], WALK, user_id=USER_ID, user_preset_id="preset-1"
        )
        assert {r.user_preset_id for r in records} == {"preset-1"}
        assert {r.recurrence_group_id for r in records} == {None}

    def test_day_part_sets_times(self):
        records = materialize_activities([date(2024, 1, 1)], WALK, user_id=USER_ID, day_part=DayPart.EVENING)
        assert records[0].start_time == time(18, 0)
        assert records[0].end_time == time(18, 30)

    def test_custom_day_part_mapping(self):
        mapping = dict(DAY_PART_TIMES)
        mapping[DayPart.EVENING] = time(19, 15)
        records = materialize_activities([date(2024, 1, 1)], WALK, mapping, user_id=USER_ID, day_part="evening")
        assert records[0].start_time == time(19, 15)

        default = materialize_activities([date(2024, 1, 2)], WALK, user_id=USER_ID, day_part="evening")
        assert default[0].start_time == time(18, 0)
        assert DAY_PART_TIMES[DayPart.EVENING] == time(18, 0)

    def test_template_start_time_wins_over_day_part(self):
        template = ActivityTemplateData(title="Yoga", start_time=time(7, 30), duration_minutes=45)
        records = materialize_activities([date(2024, 1, 1)], template, user_id=USER_ID, day_part="evening")
        assert records[0].start_time == time(7, 30)

    def test_repetitions_multiply_records_per_date(self):
        records = materialize_activities(
            [date(2024, 1, 1), date(2024, 1, 2)], WALK, user_id=USER_ID, repetitions=3
        )
        assert len(records) == 6
        assert [r.date for r in records].count(date(2024, 1, 2)) == 3

    def test_reminder_minutes_dropped_when_disabled(self):
        template = ActivityTemplateData(title="Meds", reminder_enabled=False, reminder_minutes_before=10)
        records = materialize_activities([date(2024, 1, 1)], template, user_id=USER_ID)
        assert records[0].reminder_minutes_before is None

    def test_end_time_wraps_midnight(self):
        assert end_time_for(time(22, 0), 480) == time(6, 0)
        assert end_time_for(None, 30) is None
        assert end_time_for(time(9, 0), None) is None


# =============================================================================
# CHUNKED INSERTS
# =============================================================================


class TestActivityBatchWriter:
    """Chunked inserts and partial failure reporting."""

    def _records(self, count):
        dates = generate_dates(date(2024, 1, 1), RecurrenceRule(type="daily", count=count))
        return materialize_activities(dates, WALK, user_id=USER_ID)

    def test_inserts_in_chunks(self, session, monkeypatch):
        commits = []
        original_commit = session.commit

        def counting_commit():
            commits.append(1)
            original_commit()

        monkeypatch.setattr(session, "commit", counting_commit)
        result = ActivityBatchWriter(session, chunk_size=100).insert_batch(self._records(250))

        assert result.ok
        assert (result.created, result.total) == (250, 250)
        assert len(commits) == 3
        assert len(session.exec(select(Activity)).all()) == 250
        assert metrics_collector.get_metrics()["counters"]["activities_materialized_total"] == 250

    def test_partial_failure_reports_created_count(self):
        flaky = FlakySession(fail_on_commit=2)
        result = ActivityBatchWriter(flaky, chunk_size=2).insert_batch(self._records(5))

        assert not result.ok
        assert (result.created, result.total) == (2, 5)
        assert len(flaky.stored) == 2
        assert flaky.rollbacks == 1
        assert flaky.commits == 2
        assert metrics_collector.get_metrics()["counters"]["activity_batches_failed_total"] == 1

    def test_first_chunk_failure_creates_nothing(self):
        flaky = FlakySession(fail_on_commit=1)
        result = ActivityBatchWriter(flaky, chunk_size=100).insert_batch(self._records(3))

        assert (result.created, result.total) == (0, 3)
        assert isinstance(result.error, OperationalError)

    def test_committed_chunks_stay_after_failure(self, session):
        records = self._records(5)
        records[2].title = None  # violates NOT NULL in the second chunk

        result = ActivityBatchWriter(session, chunk_size=2).insert_batch(records)

        assert (result.created, result.total) == (2, 5)
        stored = session.exec(select(Activity)).all()
        assert sorted(a.date for a in stored) == [date(2024, 1, 1), date(2024, 1, 2)]
