from datetime import date, datetime, timezone

from allertify.core.timezone import (
    format_in_timezone,
    local_date,
    local_midnight_utc,
    start_of_day_utc,
)

UTC = timezone.utc


def test_local_midnight_is_not_utc_midnight():
    assert local_midnight_utc(date(2025, 8, 19), "Asia/Jakarta") == datetime(2025, 8, 18, 17, 0, tzinfo=UTC)


def test_instants_around_local_midnight_fall_on_different_days():
    before = datetime(2025, 8, 18, 16, 59, 59, tzinfo=UTC)  # 23:59:59 local
    after = datetime(2025, 8, 18, 17, 0, 0, tzinfo=UTC)  # 00:00:00 local

    assert local_date(before, "Asia/Jakarta") == date(2025, 8, 18)
    assert local_date(after, "Asia/Jakarta") == date(2025, 8, 19)
    assert start_of_day_utc(before, "Asia/Jakarta") == datetime(2025, 8, 17, 17, 0, tzinfo=UTC)
    assert start_of_day_utc(after, "Asia/Jakarta") == datetime(2025, 8, 18, 17, 0, tzinfo=UTC)


def test_start_of_day_is_stable_within_a_local_day():
    morning = datetime(2025, 8, 18, 17, 30, tzinfo=UTC)
    night = datetime(2025, 8, 19, 16, 30, tzinfo=UTC)
    assert start_of_day_utc(morning, "Asia/Jakarta") == start_of_day_utc(night, "Asia/Jakarta")


def test_midnight_uses_offset_of_that_local_date_across_dst():
    # America/New_York switches to EDT at 02:00 on 2025-03-09
    assert local_midnight_utc(date(2025, 3, 9), "America/New_York") == datetime(2025, 3, 9, 5, 0, tzinfo=UTC)
    assert local_midnight_utc(date(2025, 3, 10), "America/New_York") == datetime(2025, 3, 10, 4, 0, tzinfo=UTC)


def test_day_after_dst_change_still_starts_at_local_midnight():
    late_evening = datetime(2025, 3, 10, 3, 59, tzinfo=UTC)  # 23:59 EDT on the 9th
    assert start_of_day_utc(late_evening, "America/New_York") == datetime(2025, 3, 9, 5, 0, tzinfo=UTC)


def test_naive_datetimes_are_read_as_utc():
    naive = datetime(2025, 8, 18, 17, 0, 0)
    assert local_date(naive, "Asia/Jakarta") == date(2025, 8, 19)


def test_format_in_timezone_includes_offset():
    instant = datetime(2025, 8, 19, 8, 10, 21, 123456, tzinfo=UTC)
    assert format_in_timezone(instant, "Asia/Jakarta") == "2025-08-19T15:10:21+07:00"
