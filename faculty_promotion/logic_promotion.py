import logging
from collections import Counter
from datetime import date

from faculty_promotion.labels import NAME, RANK, canonical_rank, FULL_PROFESSOR
from faculty_promotion.logic_regime import classify_regime
from faculty_promotion.logic_eligibility import (
    promotion_rank_key,
    get_requirement,
    calculate_leave_months,
    get_promotion_eligible_date,
    years_in_current_rank,
)
from faculty_promotion.logic_calendar import get_next_promotion_date, submission_deadline
from faculty_promotion.logic_exceptions import check_exception, check_promotion_restrictions
from faculty_promotion.utils import days_until

logger = logging.getLogger(__name__)

# Marks an argument the caller did not compute
_UNSET = object()


def _base(base_date):
    return base_date or date.today()


def get_next_promotion_date_for(faculty: dict, ctx, base_date=None):
    appointments = ctx.appointments_for(faculty)
    eligible_date = get_promotion_eligible_date(faculty, appointments)
    return get_next_promotion_date(eligible_date, _base(base_date))


def is_promotion_candidate(faculty: dict, ctx, base_date=None, next_promotion_date=_UNSET, exception=None) -> bool:
    """
    A faculty member is a candidate when they hold a promotable rank, have an
    official date this cycle, no exception covers that date and no
    restriction applies.

    next_promotion_date and exception may be passed in when already
    evaluated; a passed None date is taken as final.
    """
    # 1. Rank (full professors are never candidates)
    if canonical_rank(faculty.get(RANK)) in (None, FULL_PROFESSOR):
        return False

    # 2. Official date this cycle
    if next_promotion_date is _UNSET:
        next_promotion_date = get_next_promotion_date_for(faculty, ctx, base_date)
    next_date = next_promotion_date
    if not next_date:
        return False

    # 3. Exceptions
    if exception is None:
        exception = check_exception(faculty, next_date, ctx.get_exceptions())
    if exception["has_exception"]:
        logger.debug("Excluded by exception: %s (%s)", faculty.get(NAME), exception.get("applies_to"))
        return False

    # 4. Restrictions
    if check_promotion_restrictions(faculty)["is_restricted"]:
        return False

    return True


def get_promotion_info(faculty: dict, ctx, base_date=None) -> dict:
    """Full promotion report for one faculty member as of base_date."""
    base_date = _base(base_date)
    appointments = ctx.appointments_for(faculty)

    regime = classify_regime(faculty, appointments)
    requirement = get_requirement(regime, promotion_rank_key(faculty.get(RANK)))
    eligible_date = get_promotion_eligible_date(faculty, appointments)
    next_promotion_date = get_next_promotion_date(eligible_date, base_date)
    deadline = submission_deadline(next_promotion_date)
    exception = check_exception(faculty, next_promotion_date, ctx.get_exceptions())

    return {
        "is_candidate": is_promotion_candidate(faculty, ctx, base_date, next_promotion_date, exception),
        "regime": regime,
        "current_rank": faculty.get(RANK),
        "years_in_rank": years_in_current_rank(faculty, base_date),
        "requirement": requirement,
        "leave_months": calculate_leave_months(appointments),
        "eligible_date": eligible_date,
        "next_promotion_date": next_promotion_date,
        "submission_deadline": deadline,
        "days_until_promotion": days_until(next_promotion_date, base_date),
        "days_until_deadline": days_until(deadline, base_date),
        "exception": exception,
        "restriction": check_promotion_restrictions(faculty),
    }


def calculate_all_promotions(roster, ctx, base_date=None) -> list:
    """
    Evaluates every faculty member and keeps the promotion candidates.
    A record that cannot be evaluated is logged and left out.
    """
    base_date = _base(base_date)
    roster = [faculty for faculty in roster or [] if isinstance(faculty, dict)]
    logger.debug("Evaluating %s faculty, by rank: %s", len(roster), dict(Counter(f.get(RANK) or "-" for f in roster)))

    results = []
    for faculty in roster:
        try:
            info = get_promotion_info(faculty, ctx, base_date)
        except Exception:
            logger.exception("Promotion evaluation failed for %s", faculty.get(NAME))
            continue
        if info["is_candidate"]:
            results.append({"faculty": faculty, "promotion_info": info})

    logger.info("Promotion candidates as of %s: %s of %s", base_date, len(results), len(roster))
    return results
