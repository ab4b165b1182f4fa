"""
Unit tests for ReviewScheduler.advance.

Covers the "easy" day ladder, the minute-based learning loop and the
defensive reset of unusable records. The clock is pinned so due dates
are exact.
"""

import pytest

from deutschmeister.errors import InvalidGrade
from deutschmeister.progress import ProgressRecord, Status
from deutschmeister.scheduler import MS_PER_DAY, Grade, ReviewScheduler, advance


class TestNewWord:
    def test_hard_on_new_word_uses_defaults(self, scheduler, now_ms):
        record = scheduler.advance(None, 3, "w1")

        assert record.item_id == "w1"
        assert record.interval == 1
        assert record.repetition == 0
        assert record.easiness_factor == 2.5
        assert record.mastery_count == 0
        assert record.due_at == now_ms + 300_000
        assert record.status is Status.LEARNING

    def test_easy_on_new_word_schedules_one_day(self, scheduler, now_ms):
        record = scheduler.advance(None, 5, "w1")

        assert record.interval == 1
        assert record.repetition == 1
        assert record.mastery_count == 1
        assert record.easiness_factor == pytest.approx(2.6)
        assert record.due_at == now_ms + MS_PER_DAY
        # A single "easy" is not graduation yet
        assert record.status is Status.LEARNING

    def test_module_level_advance_accepts_now(self, now_ms):
        record = advance(None, Grade.GOOD, "w1", now_ms=now_ms)
        assert record.due_at == now_ms + 20 * 60_000


class TestEasyLadder:
    def test_second_easy_jumps_to_six_days(self, scheduler, make_record, now_ms):
        prev = make_record(repetition=1, interval=1, easiness_factor=2.6, mastery_count=1)
        record = scheduler.advance(prev, 5, "w1")

        assert record.interval == 6
        assert record.repetition == 2
        assert record.status is Status.GRADUATED
        assert record.due_at == now_ms + 6 * MS_PER_DAY

    def test_third_easy_multiplies_by_easiness(self, scheduler, make_record, now_ms):
        prev = make_record(repetition=2, interval=6, easiness_factor=2.5)
        record = scheduler.advance(prev, 5, "w1")

        # Interval uses the factor from before this grading
        assert record.interval == 15
        assert record.repetition == 3
        assert record.easiness_factor == pytest.approx(2.6)
        assert record.due_at == now_ms + 15 * MS_PER_DAY

    def test_repetition_one_follows_ladder_not_multiplier(self, scheduler, make_record):
        prev = make_record(repetition=1, interval=6, easiness_factor=2.5)
        record = scheduler.advance(prev, 5, "w1")

        assert record.interval == 6
        assert record.repetition == 2

    def test_interval_rounds_half_up(self, scheduler, make_record):
        prev = make_record(repetition=3, interval=6, easiness_factor=2.75)
        record = scheduler.advance(prev, 5, "w1")
        assert record.interval == 17

    def test_repeated_easy_grows_interval_and_mastery(self, scheduler):
        record = None
        intervals = []
        for expected_mastery in range(1, 13):
            record = scheduler.advance(record, 5, "w1")
            intervals.append(record.interval)
            assert record.mastery_count == expected_mastery

        assert intervals[:2] == [1, 6]
        assert intervals == sorted(intervals)
        assert record.easiness_factor >= 1.3

    def test_easiness_never_below_floor(self, scheduler, make_record):
        prev = make_record(repetition=4, interval=10, easiness_factor=1.3)
        record = scheduler.advance(prev, 5, "w1")
        assert record.easiness_factor >= 1.3


class TestLearningLoop:
    @pytest.mark.parametrize(
        "grade,offset_ms",
        [(0, 60_000), (3, 300_000), (4, 1_200_000)],
    )
    def test_not_easy_resets_and_uses_minute_steps(self, scheduler, make_record, now_ms, grade, offset_ms):
        prev = make_record(repetition=4, interval=30, easiness_factor=2.2, mastery_count=5)
        record = scheduler.advance(prev, grade, "w1")

        assert record.repetition == 0
        assert record.interval == 1
        assert record.easiness_factor == 2.2
        assert record.due_at - now_ms == offset_ms
        assert record.status is Status.LEARNING

    def test_forgot_decrements_mastery(self, scheduler, make_record):
        prev = make_record(mastery_count=10)
        assert scheduler.advance(prev, 0, "w1").mastery_count == 9

    @pytest.mark.parametrize("grade", [3, 4])
    def test_hard_and_good_keep_mastery(self, scheduler, make_record, grade):
        prev = make_record(mastery_count=7)
        assert scheduler.advance(prev, grade, "w1").mastery_count == 7

    def test_forgot_mastery_floor_is_idempotent(self, scheduler):
        record = scheduler.advance(None, 0, "w1")
        for _ in range(3):
            record = scheduler.advance(record, 0, "w1")
            assert record.mastery_count == 0

    def test_easy_after_lapse_restarts_at_one_day(self, scheduler, make_record):
        prev = make_record(repetition=5, interval=40, easiness_factor=2.8, mastery_count=6)
        lapsed = scheduler.advance(prev, 4, "w1")
        record = scheduler.advance(lapsed, 5, "w1")

        assert record.interval == 1
        assert record.repetition == 1


class TestInvalidGrades:
    @pytest.mark.parametrize("grade", [1, 2, 6, -1, 5.0, "5", None, True])
    def test_out_of_contract_grade_is_rejected(self, scheduler, grade):
        with pytest.raises(InvalidGrade):
            scheduler.advance(None, grade, "w1")

    def test_invalid_grade_is_a_value_error(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.advance(None, 2, "w1")


class TestMalformedRecords:
    def test_negative_interval_resets_to_defaults(self, scheduler, make_record, now_ms):
        prev = make_record(interval=-3, repetition=4, mastery_count=8)
        record = scheduler.advance(prev, 3, "w1")

        assert record.mastery_count == 0
        assert record.easiness_factor == 2.5
        assert record.due_at == now_ms + 300_000

    def test_low_easiness_resets_before_easy(self, scheduler, make_record):
        prev = make_record(repetition=3, interval=20, easiness_factor=0.5, mastery_count=4)
        record = scheduler.advance(prev, 5, "w1")

        assert record.interval == 1
        assert record.repetition == 1
        assert record.mastery_count == 1
        assert record.easiness_factor == pytest.approx(2.6)

    def test_record_for_other_word_is_not_reused(self, scheduler, make_record):
        prev = make_record(item_id="w2", repetition=2, interval=6, mastery_count=3)
        record = scheduler.advance(prev, 5, "w1")

        assert record.item_id == "w1"
        assert record.mastery_count == 1


class TestClock:
    def test_clock_read_when_now_not_given(self):
        ticks = iter([1_000, 2_000])
        sched = ReviewScheduler(clock=lambda: next(ticks))

        first = sched.advance(None, 0, "w1")
        second = sched.advance(None, 0, "w1")

        assert first.due_at == 1_000 + 60_000
        assert second.due_at == 2_000 + 60_000

    def test_due_never_before_now(self, scheduler, make_record, now_ms):
        prev = make_record(due_at=now_ms + 90 * MS_PER_DAY)
        for grade in (0, 3, 4, 5):
            assert scheduler.advance(prev, grade, "w1").due_at > now_ms

    def test_advance_does_not_mutate_previous(self, scheduler, make_record):
        prev = make_record(repetition=2, interval=6)
        scheduler.advance(prev, 5, "w1")
        assert prev == ProgressRecord(
            item_id="w1",
            interval=6,
            repetition=2,
            easiness_factor=2.5,
            due_at=prev.due_at,
            mastery_count=0,
        )
