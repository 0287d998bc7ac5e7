"""Human readable rendering of pass windows."""
from __future__ import annotations

from typing import Iterable, List

from isspass.models import PassWindow

NO_PASSES_MESSAGE = "No upcoming ISS passes predicted for this location."


def format_pass_time(window: PassWindow) -> str:
    when = window.rise_datetime.strftime("%a %b %d %Y %H:%M:%S UTC")
    return f"Next pass at {when} for {window.duration} seconds!"


def format_pass_times(windows: Iterable[PassWindow]) -> List[str]:
    lines = [format_pass_time(window) for window in windows]
    return lines or [NO_PASSES_MESSAGE]
