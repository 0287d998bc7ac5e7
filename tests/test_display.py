from datetime import datetime, timezone

from isspass.display import NO_PASSES_MESSAGE, format_pass_time, format_pass_times
from isspass.models import PassWindow


def test_rise_datetime_is_utc():
    window = PassWindow(risetime=1000, duration=600)
    assert window.rise_datetime == datetime(1970, 1, 1, 0, 16, 40, tzinfo=timezone.utc)


def test_format_pass_time():
    window = PassWindow(risetime=1_600_000_000, duration=512)
    assert format_pass_time(window) == "Next pass at Sun Sep 13 2020 12:26:40 UTC for 512 seconds!"


def test_format_pass_times_keeps_order_and_handles_empty():
    windows = [PassWindow(risetime=2000, duration=1), PassWindow(risetime=1000, duration=2)]
    lines = format_pass_times(windows)
    assert [line.endswith(suffix) for line, suffix in zip(lines, ["1 seconds!", "2 seconds!"])] == [True, True]
    assert format_pass_times([]) == [NO_PASSES_MESSAGE]
