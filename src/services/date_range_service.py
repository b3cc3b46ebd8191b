"""
Date-range resolution for symbolic timeframes.

"this-*" periods run to the current instant (week/month/year to date) while
"last-*" periods cover the whole prior period.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Union

from models.query import DateRange, Timeframe

_ONE_DAY = timedelta(days=1)
_END_OF_DAY = _ONE_DAY - timedelta(milliseconds=1)


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _start_of_week(day: datetime) -> datetime:
    # Weeks start on Sunday; Python's weekday() is Monday=0 .. Sunday=6.
    return day - timedelta(days=(day.weekday() + 1) % 7)


def resolve_date_range(
    timeframe: Union[Timeframe, str, None],
    now: Optional[datetime] = None,
    custom: Optional[DateRange] = None,
) -> DateRange:
    """Map a timeframe keyword onto a concrete range relative to ``now`` (local time)."""
    now = now or datetime.now()
    today = _start_of_day(now)

    try:
        timeframe = Timeframe(timeframe) if timeframe is not None else Timeframe.THIS_MONTH
    except ValueError:
        timeframe = Timeframe.THIS_MONTH

    if timeframe is Timeframe.TODAY:
        return DateRange(start=today, end=today + _END_OF_DAY)

    if timeframe is Timeframe.YESTERDAY:
        yesterday = today - _ONE_DAY
        return DateRange(start=yesterday, end=yesterday + _END_OF_DAY)

    if timeframe is Timeframe.THIS_WEEK:
        return DateRange(start=_start_of_week(today), end=now)

    if timeframe is Timeframe.LAST_WEEK:
        start = _start_of_week(today) - timedelta(days=7)
        return DateRange(start=start, end=start + timedelta(days=6))

    if timeframe is Timeframe.LAST_MONTH:
        this_month_start = today.replace(day=1)
        last_month_end = this_month_start - _ONE_DAY
        return DateRange(start=last_month_end.replace(day=1), end=last_month_end)

    if timeframe is Timeframe.THIS_YEAR:
        return DateRange(start=today.replace(month=1, day=1), end=now)

    if timeframe is Timeframe.CUSTOM and custom is not None:
        return custom

    return DateRange(start=today.replace(day=1), end=now)
