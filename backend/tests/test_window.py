"""查询时间窗口解析单元测试。"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import ValidationError
from app.services.window import (
    DATE_FORMAT_ERROR,
    PAIR_REQUIRED_ERROR,
    RANGE_ERROR,
    TIME_FORMAT_ERROR,
    QueryWindow,
    resolve_window,
    validate_date,
    validate_time,
)

SIX_HOURS = 6 * 3600


class TestDefaultWindow:
    def test_span_is_six_hours(self):
        window = resolve_window()
        assert window.end - window.start == SIX_HOURS

    def test_end_is_now(self):
        before = datetime.now(timezone.utc).timestamp()
        window = resolve_window()
        after = datetime.now(timezone.utc).timestamp()
        assert before - 1 <= window.end <= after + 1

    def test_fixed_now(self):
        now = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        window = resolve_window(now=now)
        assert window == QueryWindow(start=int(now.timestamp()) - SIX_HOURS, end=int(now.timestamp()))

    def test_naive_now_treated_as_utc(self):
        window = resolve_window(now=datetime(2024, 1, 1, 6, 0))
        assert window.end == int(datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc).timestamp())

    def test_custom_hours(self):
        window = resolve_window(hours=2)
        assert window.span == 2 * 3600

    def test_empty_strings_are_absent(self):
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert resolve_window("", "", now=now) == resolve_window(now=now)


class TestExplicitWindow:
    def test_start_is_given_instant(self):
        window = resolve_window("2024-01-01", "10:00")
        expected = int(datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc).timestamp())
        assert window.start == expected
        assert window.end == expected + SIX_HOURS

    def test_midnight(self):
        window = resolve_window("2024-02-29", "00:00")
        assert window.start == int(datetime(2024, 2, 29, tzinfo=timezone.utc).timestamp())

    def test_window_past_max_date(self):
        with pytest.raises(ValidationError) as exc:
            resolve_window("9999-12-31", "23:00")
        assert exc.value.message == RANGE_ERROR

    def test_window_ending_at_max_date(self):
        window = resolve_window("9999-12-31", "17:00")
        assert window.span == SIX_HOURS

    def test_window_crosses_day_boundary(self):
        window = resolve_window("2024-12-31", "23:59")
        end = datetime.fromtimestamp(window.end, tz=timezone.utc)
        assert end == datetime(2025, 1, 1, 5, 59, tzinfo=timezone.utc)


class TestLoneField:
    """只提供 date 或 time 其中之一。"""

    def test_date_only_uses_default(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert resolve_window("2024-01-01", None, now=now) == resolve_window(now=now)

    def test_time_only_uses_default(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert resolve_window(None, "10:00", now=now) == resolve_window(now=now)

    def test_malformed_date_still_fails_without_time(self):
        with pytest.raises(ValidationError) as exc:
            resolve_window("24-01-01", None)
        assert exc.value.message == DATE_FORMAT_ERROR

    def test_malformed_time_still_fails_without_date(self):
        with pytest.raises(ValidationError) as exc:
            resolve_window(None, "9:00")
        assert exc.value.message == TIME_FORMAT_ERROR

    def test_require_pair(self):
        with pytest.raises(ValidationError) as exc:
            resolve_window("2024-01-01", None, require_pair=True)
        assert exc.value.message == PAIR_REQUIRED_ERROR

    def test_require_pair_allows_neither(self):
        assert resolve_window(require_pair=True).span == SIX_HOURS


class TestValidation:
    @pytest.mark.parametrize("value", ["2024-13-40", "24-01-01", "2024-1-01", "2024/01/01", "2024-02-30", "2024-01-01 ", "abc"])
    def test_invalid_date(self, value):
        with pytest.raises(ValidationError) as exc:
            validate_date(value)
        assert "YYYY-MM-DD" in exc.value.message

    @pytest.mark.parametrize("value", ["25:61", "9:00", "24:00", "10:60", "10-00", "10:00:00"])
    def test_invalid_time(self, value):
        with pytest.raises(ValidationError) as exc:
            validate_time(value)
        assert "HH:mm" in exc.value.message

    def test_valid_date(self):
        assert validate_date("2024-01-01") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_valid_time(self):
        assert validate_time("23:59") == timedelta(hours=23, minutes=59)

    def test_date_checked_before_time(self):
        with pytest.raises(ValidationError) as exc:
            resolve_window("bad", "bad")
        assert exc.value.message == DATE_FORMAT_ERROR
