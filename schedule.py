"""Calendar stepping for recurring rules.

Both the rollover processor and the forecast engine walk a rule's schedule
with step_date(), so they always agree on which dates a rule falls on.
"""

import calendar
from datetime import date, timedelta
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

from models.recurring_rule import Frequency

_STEPS = {
    Frequency.DAILY: timedelta(days=1),
    Frequency.WEEKLY: timedelta(days=7),
    # relativedelta clamps to the last day of shorter months (Jan 31 -> Feb 28/29)
    Frequency.MONTHLY: relativedelta(months=1),
    # and Feb 29 -> Feb 28 in non-leap years
    Frequency.YEARLY: relativedelta(years=1),
}


def step_date(d: date, frequency: Frequency) -> date:
    """Advance d by exactly one period of frequency.

    ONCE has no period: the date is returned unchanged.

    Raises:
        ValueError: If frequency is not a Frequency member.
    """
    if frequency == Frequency.ONCE:
        return d
    try:
        return d + _STEPS[frequency]
    except KeyError:
        raise ValueError(f"Unknown frequency: {frequency!r}") from None


def days_in_month(d: date) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def month_end(d: date) -> date:
    """Last calendar day of d's month."""
    return d.replace(day=days_in_month(d))


def iter_occurrences(
    start: date,
    frequency: Frequency,
    until: date,
    limit: Optional[int] = None,
) -> Iterator[date]:
    """Yield start and every following step of frequency up to until (inclusive).

    Stops after limit dates when limit is given. A ONCE schedule yields at
    most start itself.
    """
    current = start
    count = 0
    while current <= until:
        if limit is not None and count >= limit:
            return
        yield current
        count += 1
        if frequency == Frequency.ONCE:
            return
        current = step_date(current, frequency)
