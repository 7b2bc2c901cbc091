import logging
from datetime import date

from faculty_promotion.labels import (
    NAME,
    RANK,
    RANK_APPROVAL_DATE,
    FIRST_HIRE_DATE,
    APPOINTMENT_TYPE,
    APPOINTMENT_END,
    LEAVE_START,
    LEAVE_END,
    LEAVE_YEARS,
    LEAVE_MONTHS,
    ASSISTANT_PROFESSOR,
    ASSOCIATE_PROFESSOR,
    FULL_PROFESSOR,
    LEAVE,
    get_field,
    canonical_rank,
    classify_appointment,
    appointment_start,
)
from faculty_promotion.history import only_records
from faculty_promotion.logic_regime import (
    TENURE_PRE_2012,
    TENURE_POST_2012,
    NON_TENURE,
    classify_regime,
    regime_hire_date,
)
from faculty_promotion.utils import (
    parse_flexible_date,
    months_between,
    add_years,
    add_months,
)

logger = logging.getLogger(__name__)

# Years in rank required before promotion, per regime.
# Post-2012 associate -> full is 7 years in the regulation; 8 is the rule applied in practice.
# Confirm with academic affairs together with config.STALE_AFTER_LAPSED_ROUNDS.
PROMOTION_REQUIREMENTS = {
    TENURE_PRE_2012: {
        ASSISTANT_PROFESSOR: {"next_rank": ASSOCIATE_PROFESSOR, "years": 4},
        ASSOCIATE_PROFESSOR: {"next_rank": FULL_PROFESSOR, "years": 5},
    },
    TENURE_POST_2012: {
        ASSISTANT_PROFESSOR: {"next_rank": ASSOCIATE_PROFESSOR, "years": 6},
        ASSOCIATE_PROFESSOR: {"next_rank": FULL_PROFESSOR, "years": 8},
    },
    # Non-tenure track has no route to full professor
    NON_TENURE: {
        ASSISTANT_PROFESSOR: {"next_rank": ASSOCIATE_PROFESSOR, "years": 6},
    },
}


def promotion_rank_key(rank_text):
    """'조교수' or '부교수' for ranks that can still be promoted, else None."""
    rank = canonical_rank(rank_text)
    if rank in (ASSISTANT_PROFESSOR, ASSOCIATE_PROFESSOR):
        return rank
    return None


def get_requirement(regime, rank_key):
    if not regime or not rank_key:
        return None
    requirement = PROMOTION_REQUIREMENTS.get(regime, {}).get(rank_key)
    return dict(requirement) if requirement else None


def _number(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def leave_months_for_record(record: dict) -> float:
    """
    Months one leave appointment adds to the promotion clock.
    Explicit duration fields win; otherwise the leave dates, then the
    appointment's own dates.
    """
    explicit = _number(record.get(LEAVE_YEARS)) * 12 + _number(record.get(LEAVE_MONTHS))
    if explicit:
        return explicit

    start = parse_flexible_date(record.get(LEAVE_START))
    end = parse_flexible_date(record.get(LEAVE_END))
    if start and end:
        return months_between(start, end)

    start = parse_flexible_date(appointment_start(record))
    end = parse_flexible_date(record.get(APPOINTMENT_END))
    if start and end:
        return months_between(start, end)

    return 0


def calculate_leave_months(appointments) -> float:
    """Total leave, in months, across an appointment history."""
    total = 0
    for record in only_records(appointments):
        if classify_appointment(record.get(APPOINTMENT_TYPE)) == LEAVE:
            total += leave_months_for_record(record)
    return total


def get_base_date(faculty: dict, appointments, regime, rank_key):
    """
    Date the years-in-rank clock starts from.
    Associate professors count from their current-rank approval when recorded.
    """
    if rank_key == ASSOCIATE_PROFESSOR:
        approval_date = parse_flexible_date(get_field(faculty, RANK_APPROVAL_DATE))
        if approval_date:
            return approval_date
    return regime_hire_date(faculty, appointments, regime)


def get_promotion_eligible_date(faculty: dict, appointments):
    """
    Evaluates the promotion eligibility date for one faculty member.
    Returns None when the regime, rank, requirement or base date is missing.
    """
    # 1. Regime
    regime = classify_regime(faculty, appointments)
    if not regime:
        return None

    # 2. Rank (full professor is terminal)
    rank_key = promotion_rank_key(faculty.get(RANK))
    if not rank_key:
        return None

    # 3. Requirement
    requirement = get_requirement(regime, rank_key)
    if not requirement:
        return None

    # 4. Base date
    base_date = get_base_date(faculty, appointments, regime, rank_key)
    if not base_date:
        return None

    eligible_date = add_years(base_date, requirement["years"])

    # 5. Leave of absence is not counted toward years in rank on the tenure track.
    # Non-tenure appointments are contract based and get no leave credit.
    leave_months = calculate_leave_months(appointments)
    if leave_months > 0:
        if regime != NON_TENURE:
            eligible_date = add_months(eligible_date, int(leave_months))
            logger.debug("Leave credit for %s: %s months -> %s", faculty.get(NAME), leave_months, eligible_date)
        else:
            logger.debug("Leave not credited for non-tenure %s: %s months", faculty.get(NAME), leave_months)

    return eligible_date


def years_in_current_rank(faculty: dict, base_date: date):
    """Approximate years served in the current rank as of base_date."""
    if ASSOCIATE_PROFESSOR in str(faculty.get(RANK) or ""):
        start = parse_flexible_date(get_field(faculty, RANK_APPROVAL_DATE)) or \
                parse_flexible_date(get_field(faculty, FIRST_HIRE_DATE))
    else:
        start = parse_flexible_date(get_field(faculty, FIRST_HIRE_DATE))

    if not start:
        return None

    return round((base_date - start).days / 365.25, 1)
