"""
Cron triggers: compute the next fire time for a bound job.

Accepts standard 5-field cron as well as Quartz-style expressions:

    "0 9 * * 1-5"        minute hour day month weekday
    "0 0 2 * * ?"        second minute hour day month weekday
    "0 0 2 ? * MON *"    ... plus a trailing year field ("*" or "?" only)

Quartz expressions are rewritten into croniter's 6-field form (seconds
last), with "?" read as "*" and numeric weekdays shifted from Quartz
numbering (1=SUN..7=SAT) to cron numbering (0=SUN..6=SAT). As in Quartz,
one of day-of-month and day-of-week must be "?". A last-weekday item
such as "6L" (last Friday) becomes croniter's "L5".

Requires the `croniter` package.
"""

from __future__ import annotations

import re
from datetime import datetime

from croniter import croniter

from cronbind.core.errors import CronExpressionError

_WEEKDAY_NUMBER = re.compile(r"\d+")
_WEEKDAY_ITEM = re.compile(r"([^/#]*)(.*)")
_WEEKDAY_LAST = re.compile(r"(\d)L")


def normalize_cron(expression: str) -> str:
    """
    Rewrite a cron expression into the form croniter accepts.

    Raises:
        CronExpressionError: wrong field count, unsupported year field,
            both day fields set, or rejected by croniter
    """
    fields = expression.split()

    if len(fields) == 7:
        year = fields.pop()
        if year not in ("*", "?"):
            raise CronExpressionError(expression, details={"reason": "year field"})

    if len(fields) == 6:
        second, minute, hour, day, month, weekday = fields
        if day != "?" and weekday != "?":
            raise CronExpressionError(
                expression, details={"reason": "day-of-month and day-of-week both set"}
            )
        fields = [minute, hour, day, month, _quartz_weekday(weekday), second]
    elif len(fields) != 5:
        raise CronExpressionError(expression, details={"reason": "field count"})

    normalized = " ".join("*" if f == "?" else f for f in fields)
    if not croniter.is_valid(normalized):
        raise CronExpressionError(expression)
    return normalized


def _quartz_weekday(field: str) -> str:
    """Shift numeric weekdays down by one; step and nth (#) suffixes untouched."""
    parts = []
    for item in field.split(","):
        last = _WEEKDAY_LAST.fullmatch(item)
        if last:
            parts.append(f"L{int(last.group(1)) - 1}")
            continue
        head, tail = _WEEKDAY_ITEM.match(item).groups()
        head = _WEEKDAY_NUMBER.sub(lambda m: str(int(m.group()) - 1), head)
        parts.append(head + tail)
    return ",".join(parts)


class CronTrigger:
    """Fires on a cron schedule."""

    def __init__(self, expression: str) -> None:
        self._expression = expression
        self._normalized = normalize_cron(expression)

    @property
    def expression(self) -> str:
        return self._expression

    @property
    def description(self) -> str:
        return f"cron({self._expression})"

    def next_fire_time(self, after: datetime) -> datetime:
        """First fire time strictly after `after` (same tz as `after`)."""
        return croniter(self._normalized, after).get_next(datetime)
