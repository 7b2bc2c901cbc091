"""
Official promotion calendar.

Promotions are conferred only on April 1 and October 1. Documents are due
by the end of February for April and by August 31 for October.
"""
import logging
from datetime import date

from faculty_promotion.config import STALE_AFTER_LAPSED_ROUNDS
from faculty_promotion.utils import is_leap_year

logger = logging.getLogger(__name__)

APRIL = 4
OCTOBER = 10


def is_official_date(dt: date) -> bool:
    return dt.day == 1 and dt.month in (APRIL, OCTOBER)


def adjust_to_promotion_date(eligible_date):
    """Snaps a date to the first official promotion date on or after it."""
    if not eligible_date:
        return None

    year = eligible_date.year

    if is_official_date(eligible_date):
        return date(year, eligible_date.month, 1)
    if eligible_date.month < APRIL:
        return date(year, APRIL, 1)
    if eligible_date.month < OCTOBER:
        return date(year, OCTOBER, 1)
    return date(year + 1, APRIL, 1)


def next_official_date(promotion_date: date) -> date:
    """The official date following an official date."""
    if promotion_date.month == APRIL:
        return date(promotion_date.year, OCTOBER, 1)
    return date(promotion_date.year + 1, APRIL, 1)


def get_next_promotion_date(eligible_date, base_date: date):
    """
    Official promotion date a candidate is considered for in base_date's year.

    A lapsed eligibility (not selected at an earlier official date) rolls
    forward one official date at a time until it reaches base_date. Returns
    None when the result falls in a later year, or when more than
    STALE_AFTER_LAPSED_ROUNDS dates lapsed.
    """
    promotion_date = adjust_to_promotion_date(eligible_date)
    if not promotion_date:
        return None

    lapsed = 0
    while promotion_date < base_date:
        promotion_date = next_official_date(promotion_date)
        lapsed += 1

    if promotion_date.year > base_date.year:
        return None

    if lapsed > STALE_AFTER_LAPSED_ROUNDS:
        logger.debug("Eligibility %s lapsed %s official dates, treated as stale", eligible_date, lapsed)
        return None

    return promotion_date


def submission_deadline(promotion_date):
    """Last day to submit promotion documents for an official date."""
    if not promotion_date:
        return None
    if promotion_date.month == APRIL:
        return date(promotion_date.year, 2, 29 if is_leap_year(promotion_date.year) else 28)
    if promotion_date.month == OCTOBER:
        return date(promotion_date.year, 8, 31)
    return None


def get_next_promotion_period(base_date: date) -> dict:
    """
    Round currently being prepared: September to February works toward the
    April round, March to August toward the October round.
    """
    month = base_date.month
    year = base_date.year

    if month >= 9 or month <= 2:
        target_year = year + 1 if month >= 9 else year
        promotion_date = date(target_year, APRIL, 1)
        return {
            "period": "april",
            "promotion_date": promotion_date,
            "deadline": submission_deadline(promotion_date),
        }

    promotion_date = date(year, OCTOBER, 1)
    return {
        "period": "october",
        "promotion_date": promotion_date,
        "deadline": submission_deadline(promotion_date),
    }
