from datetime import datetime

import pytest

from safepath.domain.models import Hazard
from safepath.hazards.time_window import (
    AlwaysActive,
    DailyWindow,
    MalformedWindow,
    SEASONAL_MONTHS,
    SeasonalWindow,
    is_active,
    parse_active_hours,
)


def _hazard(active_hours):
    return Hazard(id=99, type="construction", name="Test", lat=12.9, lon=79.8, radius_meters=100, active_hours=active_hours)


def test_all_day_is_always_active():
    h = _hazard("All day")
    for month in range(1, 13):
        for hour in (0, 6, 12, 23):
            assert is_active(h, datetime(2026, month, 1, hour, 59))


def test_daily_window_inclusive_bounds():
    h = _hazard("07:00-21:00")
    assert is_active(h, datetime(2026, 3, 1, 12, 0))
    assert not is_active(h, datetime(2026, 3, 1, 23, 0))
    assert is_active(h, datetime(2026, 3, 1, 7, 0))
    assert is_active(h, datetime(2026, 3, 1, 21, 0))
    assert not is_active(h, datetime(2026, 3, 1, 6, 59))
    assert not is_active(h, datetime(2026, 3, 1, 21, 1))


def test_monsoon_covers_june_through_october():
    h = _hazard("Monsoon")
    assert is_active(h, datetime(2026, 8, 15, 8, 0))
    assert not is_active(h, datetime(2026, 1, 15, 8, 0))
    active_months = {m for m in range(1, 13) if is_active(h, datetime(2026, m, 10))}
    assert active_months == set(SEASONAL_MONTHS) == {6, 7, 8, 9, 10}


@pytest.mark.parametrize("value", [None, "", "Sometimes", "7-21", "25:00-26:00", "07:60-08:00", "22:00-06:00"])
def test_malformed_windows_fail_closed(value):
    h = _hazard(value)
    for hour in range(24):
        assert not is_active(h, datetime(2026, 8, 1, hour, 30))


def test_parse_active_hours_variants():
    assert parse_active_hours("All day") == AlwaysActive()
    assert parse_active_hours("Monsoon") == SeasonalWindow()
    assert parse_active_hours(" 7:05 - 9:30 ") == DailyWindow(start_minute=7 * 60 + 5, end_minute=9 * 60 + 30)
    assert parse_active_hours("00:00-24:00") == DailyWindow(start_minute=0, end_minute=1440)

    overnight = parse_active_hours("22:00-06:00")
    assert isinstance(overnight, MalformedWindow)
    assert overnight.reason == "range crosses midnight"
