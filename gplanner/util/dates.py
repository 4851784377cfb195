# gplanner/util/dates.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional

from zoneinfo import ZoneInfo

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
# M/D/YYYY, M-D-YY, D.M.YYYY ... (month first unless the first part cannot be a month)
_SIMPLE_DATE_RE = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{2,4})$")
_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve "local", "UTC", an IANA name or a +HH:MM offset.

    Raises ValueError for identifiers that cannot be resolved.
    """
    s = (name or "").strip()
    low = s.lower()
    if not s or low in {"local", "system"}:
        return dt.datetime.now().astimezone().tzinfo or dt.timezone.utc
    if low in {"utc", "z", "gmt"}:
        return dt.timezone.utc

    m = _OFFSET_RE.match(s)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh, mm = int(hh_s), int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {s!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(sign * dt.timedelta(hours=hh, minutes=mm))

    try:
        return ZoneInfo(s)
    except (KeyError, ValueError, OSError) as ex:
        raise ValueError(f"Invalid timezone identifier: {s!r}") from ex


def today_iso(tz: Optional[str] = "local") -> str:
    return dt.datetime.now(tz=resolve_tz(tz)).date().isoformat()


def now_iso_utc() -> str:
    return dt.datetime.now(tz=dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_date(s: str) -> dt.date:
    """Strict yyyy-MM-dd parse (raises ValueError)."""
    return dt.datetime.strptime(s.strip(), "%Y-%m-%d").date()


def diff_in_days(from_iso: str, to_iso: str) -> int:
    """Whole calendar days from `from_iso` to `to_iso`.

    Tomorrow is 1, the same day is 0 and past dates are negative.
    """
    return (parse_iso_date(to_iso) - parse_iso_date(from_iso)).days


def add_days(base_iso: str, days: int) -> str:
    return (parse_iso_date(base_iso) + dt.timedelta(days=int(days))).isoformat()


def _valid_date(year: int, month: int, day: int) -> Optional[dt.date]:
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def normalize_date_input(value: Optional[str]) -> Optional[str]:
    """Best-effort normalisation of a user/CSV date to yyyy-MM-dd.

    Accepts yyyy-MM-dd, M/D/YYYY style dates (two-digit years are 20xx; day
    and month swap when the first part cannot be a month) and ISO-8601
    datetimes. Returns None for anything else.
    """
    s = (value or "").strip()
    if not s:
        return None

    m = _ISO_DATE_RE.match(s)
    if m:
        d = _valid_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        return d.isoformat() if d else None

    m = _SIMPLE_DATE_RE.match(s)
    if m:
        month, day, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if year < 100:
            year += 2000
        if month > 12 and day <= 12:
            month, day = day, month
        d = _valid_date(year, month, day)
        if d:
            return d.isoformat()

    iso = s[:-1] + "+00:00" if s.endswith(("Z", "z")) else s
    try:
        return dt.datetime.fromisoformat(iso).date().isoformat()
    except ValueError:
        return None


def format_mdy(iso_date: str) -> str:
    """yyyy-MM-dd -> MM/DD/YYYY (input returned unchanged if it is not a date)."""
    d = normalize_date_input(iso_date)
    if not d:
        return iso_date
    y, mo, da = d.split("-")
    return f"{mo}/{da}/{y}"
