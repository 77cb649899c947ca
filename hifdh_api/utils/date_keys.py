# hifdh_api/utils/date_keys.py

import re
from datetime import date, datetime, timezone
from typing import Optional, Tuple

from dateutil import tz

from hifdh_api import config
from hifdh_api.errors import ValidationError

DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _civil_date(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> date:
    zone = tz.gettz(tz_name or config.class_timezone())
    if zone is None:
        raise ValueError(f"Unknown timezone: {tz_name or config.class_timezone()}")

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return now.astimezone(zone).date()


def format_week_key(d: date) -> str:
    iso_year, iso_week, _ = d.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def day_key(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> str:
    """Class-timezone civil date of `now` as YYYY-MM-DD."""
    return _civil_date(now, tz_name).isoformat()


def week_key(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> str:
    """ISO-8601 week (YYYY-Www) of the class-timezone civil date of `now`."""
    return format_week_key(_civil_date(now, tz_name))


def today_keys(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> Tuple[str, str]:
    # Both keys from one instant so a save straddling midnight stays coherent
    d = _civil_date(now, tz_name)
    return d.isoformat(), format_week_key(d)


def parse_day_key(value: Optional[str]) -> date:
    if not value or not DAY_KEY_RE.match(value.strip()):
        raise ValidationError(f"Invalid day key: {value!r}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid day key: {value!r}")


def week_key_of(value: str) -> str:
    return format_week_key(parse_day_key(value))


def diff_days_inclusive(start_key: str, end_key: str) -> int:
    start = parse_day_key(start_key)
    end = parse_day_key(end_key)
    return max(0, (end - start).days) + 1
