"""Calendar normalization: any timestamp -> a midnight-truncated day.

Weekdays follow the Sunday-first convention (Sunday=0 ... Saturday=6).
This is the only module that does day-of-week arithmetic.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum

from errors import InvalidDate

# Accepted after ISO 8601 fails
DATE_FORMATS = [
    "%m/%d/%Y",
    "%d-%b-%Y",
    "%b %d %Y",
]


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, d: date) -> "Weekday":
        # isoweekday: Monday=1 ... Sunday=7
        return cls(d.isoweekday() % 7)

    @property
    def short(self) -> str:
        return self.name[:3].title()


@dataclass(frozen=True)
class CalendarDay:
    date: date
    weekday: Weekday

    @classmethod
    def from_date(cls, d: date) -> "CalendarDay":
        return cls(date=d, weekday=Weekday.of(d))

    def isoformat(self) -> str:
        return self.date.isoformat()


def _parse_string(raw: str) -> datetime:
    """Try ISO 8601 first, then the legacy formats."""
    raw = raw.strip()
    if not raw:
        raise InvalidDate("Empty date string.")
    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise InvalidDate(f"Unparsable date: {raw!r}")


def _from_epoch_ms(value) -> datetime:
    try:
        return datetime.fromtimestamp(value / 1000)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidDate(f"Timestamp out of range: {value!r}") from exc


def _local_date(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def normalize(timestamp) -> CalendarDay:
    """Truncate a timestamp to its local calendar day.

    Accepts a CalendarDay, date, datetime, date string, or epoch
    milliseconds (int/float). Raises InvalidDate for anything else.
    """
    if isinstance(timestamp, CalendarDay):
        return timestamp
    if isinstance(timestamp, bool):
        raise InvalidDate(f"Not a timestamp: {timestamp!r}")
    if isinstance(timestamp, datetime):
        return CalendarDay.from_date(_local_date(timestamp))
    if isinstance(timestamp, date):
        return CalendarDay.from_date(timestamp)
    if isinstance(timestamp, (int, float)):
        return CalendarDay.from_date(_local_date(_from_epoch_ms(timestamp)))
    if isinstance(timestamp, str):
        return CalendarDay.from_date(_local_date(_parse_string(timestamp)))
    raise InvalidDate(f"Not a timestamp: {timestamp!r}")


def today() -> CalendarDay:
    return normalize(datetime.now())
