from microwave.timer.formatting import format_time


def test_format_time_boundaries() -> None:
    assert format_time(0) == "00:00.000"
    assert format_time(7) == "00:00.007"
    assert format_time(1000) == "00:01.000"
    assert format_time(60_000) == "01:00.000"
    assert format_time(90_500) == "01:30.500"


def test_format_time_minutes_never_roll_into_hours() -> None:
    assert format_time(3_600_000) == "60:00.000"
    assert format_time(6_000_000) == "100:00.000"


def test_format_time_truncates_instead_of_rounding() -> None:
    assert format_time(999) == "00:00.999"
    assert format_time(1999) == "00:01.999"
    assert format_time(59_999) == "00:59.999"
    assert format_time(119_999) == "01:59.999"
