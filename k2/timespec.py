"""
Datetime and relative time expression parsing for read windows
"""
import calendar
import re
from datetime import datetime, timedelta, timezone


_UNITS = {
    'second': 'seconds',
    'sec': 'seconds',
    'minute': 'minutes',
    'min': 'minutes',
    'hour': 'hours',
    'day': 'days',
    'week': 'weeks',
    'month': 'months',
    'year': 'years',
}

_AMOUNT = r'(?P<n>\d+|an?)\s+(?P<unit>[a-z]+?)s?'
_PATTERNS = [
    (re.compile(rf'^{_AMOUNT}\s+ago$'), -1),
    (re.compile(rf'^{_AMOUNT}\s+(?:later|from\s+now|hence)$'), 1),
    (re.compile(rf'^in\s+{_AMOUNT}$'), 1),
]


def parse_datetime(text: str) -> datetime:
    """Parse an RFC 3339 datetime (YYYY-MM-DDTHH:MM:SS+ZZ:ZZ) into UTC"""
    value = text.strip()
    if value.endswith(('Z', 'z')):
        value = value[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"'{text}' is not an RFC 3339 datetime: {e}") from None
    if parsed.tzinfo is None:
        raise ValueError(f"'{text}' is missing a UTC offset")
    return parsed.astimezone(timezone.utc)


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamped to the last day of the month"""
    index = moment.month - 1 + months
    year, month = moment.year + index // 12, index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def parse_relative(text: str, now: datetime) -> datetime:
    """
    Resolve an expression like '1 hour ago', '2 days later',
    '4 months from now' or 'in 3 weeks' against now
    """
    value = ' '.join(text.strip().lower().split())
    if value == 'now':
        return now

    for pattern, sign in _PATTERNS:
        match = pattern.match(value)
        if not match:
            continue
        unit = _UNITS.get(match.group('unit'))
        if unit is None:
            raise ValueError(f"unknown time unit in '{text}'")
        n = match.group('n')
        amount = sign * (1 if n in ('a', 'an') else int(n))

        if unit == 'months':
            return add_months(now, amount)
        if unit == 'years':
            return add_months(now, 12 * amount)
        return now + timedelta(**{unit: amount})

    raise ValueError(f"cannot understand time expression '{text}'")


def to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)
