# tests/core/catalog/test_schedule.py
"""
Testes das janelas de manutenção (Schedule).
"""

from datetime import datetime, time

import pytest

try:
    from atlas_converge.core.catalog.schedule import Schedule, parse_range, parse_weekdays
except Exception as e:
    Schedule = None
    parse_range = None
    parse_weekdays = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing schedule module. Import error: {_IMPORT_ERR}")


def test_parse_range():
    _require_imports()
    assert parse_range("09:00 - 17:30") == (time(9, 0), time(17, 30))
    assert parse_range("2 - 4") == (time(2, 0), time(4, 0))


@pytest.mark.parametrize("text", ["09:00", "9:00 - 10:00 - 11:00", "nine - ten", "25:00 - 26:00"])
def test_parse_range_rejects_invalid(text):
    _require_imports()
    with pytest.raises(ValueError):
        parse_range(text)


def test_parse_weekdays():
    _require_imports()
    assert parse_weekdays(["Mon", "friday", 6]) == frozenset({0, 4, 6})
    with pytest.raises(ValueError):
        parse_weekdays(["funday"])
    with pytest.raises(ValueError):
        parse_weekdays([7])


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2026, 1, 16, 9, 0), True),
        (datetime(2026, 1, 16, 17, 0), True),
        (datetime(2026, 1, 16, 17, 1), False),
        (datetime(2026, 1, 16, 8, 59), False),
    ],
)
def test_range_bounds_are_inclusive(now, expected):
    _require_imports()
    assert Schedule.from_spec("office", range="09:00 - 17:00").matches(now) is expected


def test_range_wrapping_midnight():
    _require_imports()
    nightly = Schedule.from_spec("nightly", range="22:00 - 02:00")

    assert nightly.matches(datetime(2026, 1, 16, 23, 30))
    assert nightly.matches(datetime(2026, 1, 17, 1, 59))
    assert not nightly.matches(datetime(2026, 1, 16, 12, 0))


def test_weekday_restriction():
    _require_imports()
    weekend = Schedule.from_spec("weekend", weekday=["sat", "sun"])

    assert weekend.matches(datetime(2026, 1, 17, 12, 0))  # sábado
    assert not weekend.matches(datetime(2026, 1, 16, 12, 0))  # sexta-feira


def test_schedule_without_constraints_always_matches():
    _require_imports()
    assert Schedule("always").matches(datetime(2026, 1, 16, 3, 0))
