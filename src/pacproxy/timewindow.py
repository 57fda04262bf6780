"""Time-window predicates: ``weekdayRange``, ``dateRange``, ``timeRange``.

Each predicate takes a variadic argument list whose meaning depends on its
length. A trailing ``"GMT"`` switches clock reads from local time to UTC
and is removed before the remaining arguments are interpreted.

Comparisons are made between naive wall-clock datetimes. Range bounds
(``date1``/``date2``) are always built from local time; only the moment
being tested is switched to its UTC reading under GMT. Field assignments
on the bounds normalise out-of-range values one field at a time, so
``dateRange("JUN", "SEP")`` ends at "September 31st", i.e. October 1st.
"""

import math
import re
from datetime import datetime, timedelta

from .clock import Clock, SystemClock
from .errors import PacUsageError

GMT = "GMT"

WEEKDAYS = ("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT")
MONTHS = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

# Values below this are days of the month, others are years
_DAY_LIMIT = 32

_INT_PREFIX_RE = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|\d+)")

_default_clock = SystemClock()


def weekday_index(name) -> int | None:
    """Position of name in WEEKDAYS (SUN is 0), or None."""
    try:
        return WEEKDAYS.index(name)
    except ValueError:
        return None


def month_index(name) -> int | None:
    """Position of name in MONTHS (JAN is 0), or None."""
    try:
        return MONTHS.index(name)
    except ValueError:
        return None


def parse_int(value) -> int | None:
    """Parse a leading integer the way JavaScript's ``parseInt`` does.

    Accepts ints, floats (truncated), and strings with optional leading
    whitespace, sign and ``0x`` prefix followed by digits. Trailing junk is
    ignored. Returns None where parseInt would return NaN.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    match = _INT_PREFIX_RE.match(value)
    if match is None:
        return None
    sign, digits = match.groups()
    number = int(digits, 16) if digits[:2].lower() == "0x" else int(digits)
    return -number if sign == "-" else number


def _to_number(value) -> int | float | None:
    """Numeric coercion for timeRange fields, like JavaScript's ``Number()``.

    Fractions are kept; the hour forms compare them as-is. Returns None for
    anything that is not a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return None
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return None


def _split_gmt(args: tuple) -> tuple[tuple, bool]:
    if args and args[-1] == GMT:
        return args[:-1], True
    return args, False


def _wall_clock(clock: Clock) -> tuple[datetime, datetime]:
    """Read the clock once; return (local, utc) naive wall-clock times."""
    now = clock.now()
    utc_offset = now.utcoffset() or timedelta(0)
    local = now.replace(tzinfo=None)
    return local, local - utc_offset


def _set_fields(moment: datetime, **fields) -> datetime:
    """Assign date/time fields, carrying overflow into the larger units.

    ``month`` is zero-based here (0 is January) and, like ``day``, may be
    out of range: ``month=-1`` is December of the previous year and
    ``day=31`` in a 30-day month is the first of the next month.
    """
    year = fields.get("year", moment.year)
    month = fields.get("month", moment.month - 1)
    day = fields.get("day", moment.day)
    hour = fields.get("hour", moment.hour)
    minute = fields.get("minute", moment.minute)
    second = fields.get("second", moment.second)

    year += month // 12
    month %= 12
    return datetime(year, month + 1, 1) + timedelta(
        days=day - 1,
        hours=hour,
        minutes=minute,
        seconds=second,
        microseconds=moment.microsecond,
    )


# =============================================================================
# weekdayRange
# =============================================================================


def weekday_range(*args, clock: Clock = _default_clock) -> bool:
    """True if today falls between two weekday names, inclusive.

    ``weekday_range("MON", "FRI")`` is a plain numeric range over
    SUN=0..SAT=6 and does not wrap: ``("FRI", "MON")`` never matches.
    With one name (or more than two), only that day matches.
    """
    args, is_gmt = _split_gmt(args)
    if not args:
        return False

    local, utc = _wall_clock(clock)
    # datetime.weekday() is Monday=0; PAC numbering is Sunday=0
    today = ((utc if is_gmt else local).weekday() + 1) % 7

    first = weekday_index(args[0])
    last = weekday_index(args[1]) if len(args) == 2 else first
    if first is None or last is None:
        return False
    return first <= today <= last


# =============================================================================
# dateRange
# =============================================================================


def _date_single(arg, local: datetime, utc: datetime, is_gmt: bool) -> bool:
    now = utc if is_gmt else local
    value = parse_int(arg)
    if value is None:
        return now.month - 1 == month_index(arg)
    if value < _DAY_LIMIT:
        return now.day == value
    return now.year == value


def _apply_date_arg(moment: datetime, arg) -> tuple[datetime, bool]:
    """Apply one dateRange argument to a bound; report if it was a day."""
    value = parse_int(arg)
    if value is None:
        month = month_index(arg)
        # An unknown month name behaves like month -1
        return _set_fields(moment, month=-1 if month is None else month), False
    if value < _DAY_LIMIT:
        return _set_fields(moment, day=value), True
    return _set_fields(moment, year=value), False


def _date_span(args: tuple, local: datetime, utc: datetime, is_gmt: bool) -> bool:
    start = datetime(local.year, 1, 1, 0, 0, 0)
    end = datetime(local.year, 12, 31, 23, 59, 59)
    middle = len(args) // 2

    month_implicit = False
    for arg in args[:middle]:
        start, is_day = _apply_date_arg(start, arg)
        if is_day:
            month_implicit = len(args) <= 2
    for arg in args[middle:]:
        end, _ = _apply_date_arg(end, arg)

    if month_implicit:
        start = _set_fields(start, month=local.month - 1)
        end = _set_fields(end, month=local.month - 1)

    now = utc if is_gmt else local
    return start <= now <= end


def date_range(*args, clock: Clock = _default_clock) -> bool:
    """True if today falls inside a date window.

    Arguments are day numbers (< 32), month names (``"JAN"``..``"DEC"``)
    or years, in the order day, month, year. One argument tests that
    field alone. Two or more are split in half into a start and an end
    specification; fields not given default to January 1st 00:00:00 and
    December 31st 23:59:59 of the current year. Two day numbers alone
    (``date_range(1, 15)``) refer to the current month.
    """
    args, is_gmt = _split_gmt(args)
    if not args:
        return False

    local, utc = _wall_clock(clock)
    if len(args) == 1:
        return _date_single(args[0], local, utc, is_gmt)
    try:
        return _date_span(args, local, utc, is_gmt)
    except (ValueError, OverflowError):
        # A bound fell outside the calendar datetime can represent
        return False


# =============================================================================
# timeRange
# =============================================================================


def _time_hour(args: tuple, hour: int) -> bool:
    return hour == _to_number(args[0])


def _time_hour_span(args: tuple, hour: int) -> bool:
    first, last = _to_number(args[0]), _to_number(args[1])
    if first is None or last is None:
        return False
    return first <= hour <= last


def _time_span(args: tuple, local: datetime, now: datetime) -> bool:
    """Hour/minute (4 args) or hour/minute/second (6 args) window."""
    numbers = [_to_number(arg) for arg in args]
    if any(number is None for number in numbers):
        return False
    # Date setters drop the fractional part
    values = [math.trunc(number) for number in numbers]

    if len(values) == 6:
        start = _set_fields(local, second=values[2])
        end = _set_fields(local, second=values[5])
    else:
        start, end = local, local

    middle = len(values) // 2
    start = _set_fields(start, hour=values[0])
    start = _set_fields(start, minute=values[1])
    end = _set_fields(end, hour=values[middle])
    end = _set_fields(end, minute=values[middle + 1])
    if middle == 2:
        end = _set_fields(end, second=59)

    return start <= now <= end


def time_range(*args, clock: Clock = _default_clock) -> bool:
    """True if the current time of day is inside a window.

    Accepted forms:
        time_range(hour)
        time_range(hour1, hour2)
        time_range(hour1, min1, hour2, min2)        # end inclusive to :59
        time_range(hour1, min1, sec1, hour2, min2, sec2)

    Raises:
        PacUsageError: For any other number of arguments
    """
    if not args:
        return False
    args, is_gmt = _split_gmt(args)

    local, utc = _wall_clock(clock)
    now = utc if is_gmt else local

    if len(args) == 1:
        return _time_hour(args, now.hour)
    if len(args) == 2:
        return _time_hour_span(args, now.hour)
    if len(args) in (4, 6):
        try:
            return _time_span(args, local, now)
        except (ValueError, OverflowError):
            return False
    raise PacUsageError(f"timeRange: bad number of arguments ({len(args)})")
