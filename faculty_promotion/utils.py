import re
import calendar
from datetime import date, datetime, timedelta
from dateutil.relativedelta import relativedelta

from faculty_promotion.config import SERIAL_DATE_EPOCH

_DATE_PATTERN = re.compile(r"^(\d{4})[./-](\d{1,2})[./-](\d{1,2})")
_STRIP_PATTERN = re.compile(r"[^\d./-]")


def parse_flexible_date(value):
    """
    Parses a date cell from the roster or appointment sheets.

    Accepts date/datetime objects, 'YYYY.MM.DD', 'YYYY-MM-DD', 'YYYY/MM/DD'
    text (other characters are stripped first) and numeric spreadsheet
    serials. Returns None for anything else, including impossible dates.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    # Spreadsheet serial (days since 1899-12-30)
    if isinstance(value, (int, float)):
        try:
            return SERIAL_DATE_EPOCH + timedelta(days=int(value))
        except (OverflowError, ValueError):
            return None

    clean = _STRIP_PATTERN.sub("", str(value).strip())
    match = _DATE_PATTERN.match(clean)
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def months_between(start: date, end: date) -> int:
    """Inclusive month count: a month counts once its day-of-month is reached."""
    total = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day >= start.day:
        total += 1
    return total


def days_between(start: date, end: date) -> int:
    """Day count including both endpoints."""
    return (end - start).days + 1


def days_until(target: date, base: date):
    if not target or not base:
        return None
    return (target - base).days


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def get_month_end(dt: date) -> date:
    """Returns the last day of the month for a given date."""
    last_day = calendar.monthrange(dt.year, dt.month)[1]
    return date(dt.year, dt.month, last_day)


def add_years(dt: date, years: int) -> date:
    return dt + relativedelta(years=years)


def add_months(dt: date, months: int) -> date:
    return dt + relativedelta(months=months)


def format_date(value) -> str:
    """Formats as YYYY.MM.DD, '-' when missing."""
    dt = parse_flexible_date(value)
    if not dt:
        return "-"
    return dt.strftime("%Y.%m.%d")


def days_to_text(total_days) -> str:
    """
    Renders a day count as 'Y년 M개월 D일'.
    Display only: a year is 365 days and a month 30 days of the remainder.
    """
    if not total_days or total_days <= 0:
        return "-"

    years = total_days // 365
    remaining = total_days % 365
    months = remaining // 30
    days = remaining % 30

    parts = []
    if years > 0:
        parts.append(f"{years}년")
    if months > 0:
        parts.append(f"{months}개월")
    if days > 0:
        parts.append(f"{days}일")

    return " ".join(parts) or "-"


def describe_period(start, end) -> str:
    """
    Calendar-accurate length of an appointment for a ledger row,
    e.g. '3년 (36개월)' or '1년 2개월 (14개월)'.
    """
    start = parse_flexible_date(start)
    end = parse_flexible_date(end)
    if not start or not end:
        return "-"

    # Whole-month terms such as 2021.09.01 ~ 2024.08.31
    if start.day == 1 and end == get_month_end(end):
        total_months = (end.year - start.year) * 12 + (end.month - start.month) + 1
        years, months = divmod(total_months, 12)

        parts = []
        if years > 0:
            parts.append(f"{years}년")
        if months > 0:
            parts.append(f"{months}개월")
        if not parts:
            return "-"
        return f"{' '.join(parts)} ({total_months}개월)"

    rel = relativedelta(end + timedelta(days=1), start)
    years, months, days = rel.years, rel.months, rel.days

    parts = []
    if years > 0:
        parts.append(f"{years}년")
    if months > 0:
        parts.append(f"{months}개월")
    if days > 0 and years == 0:
        parts.append(f"{days}일")

    total_months = years * 12 + months
    if total_months > 0:
        return f"{' '.join(parts)} ({total_months}개월)"
    return " ".join(parts) or "-"
