from __future__ import annotations

import math
import re
from datetime import datetime, time

from src.domain.models import DeviationStatus, ScheduleDeviation

ON_TIME_TOLERANCE_MIN = 2

_TIME_RE = re.compile(
    r"^\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?P<meridiem>[AaPp][Mm])?\s*$"
)


def parse_scheduled_time(raw: str) -> time:
    """Parse a timetable entry such as "10:08 AM".

    Without an AM/PM suffix the value is read as 24-hour time.
    """

    m = _TIME_RE.match(raw or "")
    if not m:
        raise ValueError(f"Invalid scheduled time: {raw!r}")

    hour = int(m.group("hour"))
    minute = int(m.group("minute"))
    meridiem = (m.group("meridiem") or "").upper()

    if meridiem:
        if not (1 <= hour <= 12):
            raise ValueError(f"Invalid 12-hour time: {raw!r}")
        if meridiem == "PM" and hour < 12:
            hour += 12
        elif meridiem == "AM" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid scheduled time: {raw!r}")
    return time(hour=hour, minute=minute)


def classify_schedule_deviation(
    scheduled_time: str, predicted_arrival: datetime
) -> ScheduleDeviation:
    """Compare a predicted arrival with the timetable entry of the same day.

    The scheduled wall-clock time is placed on the predicted arrival's date and
    in its (naive or aware) timezone. More than two minutes behind is late,
    more than two minutes ahead is early.
    """

    sched = parse_scheduled_time(scheduled_time)
    scheduled_at = predicted_arrival.replace(
        hour=sched.hour, minute=sched.minute, second=0, microsecond=0
    )

    diff_min = (predicted_arrival - scheduled_at).total_seconds() / 60.0
    delta = math.floor(diff_min + 0.5)

    if delta > ON_TIME_TOLERANCE_MIN:
        status = DeviationStatus.LATE
    elif delta < -ON_TIME_TOLERANCE_MIN:
        status = DeviationStatus.EARLY
    else:
        status = DeviationStatus.ON_TIME
    return ScheduleDeviation(status=status, delta_minutes=int(delta))
