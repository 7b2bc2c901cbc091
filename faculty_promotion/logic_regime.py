import logging

from faculty_promotion.config import REGIME_CUTOFF
from faculty_promotion.history import sort_appointments
from faculty_promotion.labels import (
    RANK,
    NAME,
    FIRST_HIRE_DATE,
    APPOINTMENT_TYPE,
    APPOINTMENT_RANK,
    ASSISTANT_PROFESSOR,
    INITIAL_HIRE,
    get_field,
    classify_appointment,
    is_non_tenure,
    appointment_start,
)
from faculty_promotion.utils import parse_flexible_date

logger = logging.getLogger(__name__)

TENURE_PRE_2012 = "tenure_pre_2012"
TENURE_POST_2012 = "tenure_post_2012"
NON_TENURE = "non_tenure"


def _first_assistant_hire(appointments, non_tenure: bool):
    """
    Earliest initial-hire appointment at assistant-professor rank on the
    requested track. Earlier teaching-assistant or coach posts never match.
    """
    for record in sort_appointments(appointments):
        if classify_appointment(record.get(APPOINTMENT_TYPE)) != INITIAL_HIRE:
            continue
        rank = str(record.get(APPOINTMENT_RANK) or "")
        if ASSISTANT_PROFESSOR not in rank or is_non_tenure(rank) != non_tenure:
            continue
        hire_date = parse_flexible_date(appointment_start(record))
        if hire_date:
            return hire_date
    return None


def tenure_track_hire_date(faculty: dict, appointments):
    hire_date = _first_assistant_hire(appointments, non_tenure=False)
    if hire_date:
        return hire_date
    # Fall back to the roster's first full-time hire date
    return parse_flexible_date(get_field(faculty, FIRST_HIRE_DATE))


def non_tenure_hire_date(faculty: dict, appointments):
    hire_date = _first_assistant_hire(appointments, non_tenure=True)
    if hire_date:
        return hire_date
    return parse_flexible_date(get_field(faculty, FIRST_HIRE_DATE))


def classify_regime(faculty: dict, appointments):
    """
    Rule regime for a faculty member:
    non-tenure track, or tenure track hired before / from 2012-03-01.
    Returns None when no hire date can be found.
    """
    if is_non_tenure(faculty.get(RANK)):
        return NON_TENURE

    hire_date = tenure_track_hire_date(faculty, appointments)
    if not hire_date:
        logger.debug("No tenure-track hire date for %s", faculty.get(NAME))
        return None

    if hire_date < REGIME_CUTOFF:
        return TENURE_PRE_2012
    return TENURE_POST_2012


def regime_hire_date(faculty: dict, appointments, regime):
    """Hire date that starts the assistant-professor clock for a regime."""
    if regime == NON_TENURE:
        return non_tenure_hire_date(faculty, appointments)
    return tenure_track_hire_date(faculty, appointments)
