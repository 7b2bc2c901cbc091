import logging
from datetime import date

from faculty_promotion.config import (
    FACULTY_DATA_KEY,
    APPOINTMENT_DATA_KEY,
    EXCEPTIONS_KEY,
    SPECIAL_RECORDS_KEY,
)
from faculty_promotion.labels import (
    NAME,
    DEPARTMENT,
    appointment_start,
    faculty_key,
)
from faculty_promotion.utils import parse_flexible_date

logger = logging.getLogger(__name__)


class RecordsContext:
    """
    Data-access context handed to every engine operation.

    Holds a read cache over the key-value store. Writes made through the
    context invalidate the cache; anyone writing to the store directly must
    call invalidate() before the next evaluation.
    """

    def __init__(self, store):
        self.store = store
        self._cache = {}

    def invalidate(self):
        self._cache.clear()
        logger.debug("Records cache invalidated")

    def _cached(self, key, default_factory):
        if key not in self._cache:
            value = self.store.get(key)
            if value is not None and not isinstance(value, default_factory):
                logger.warning("Ignoring %s payload stored under %s", type(value).__name__, key)
                value = None
            if isinstance(value, list):
                value = only_records(value)
            self._cache[key] = value if value is not None else default_factory()
        return self._cache[key]

    def _write(self, key, value) -> bool:
        ok = self.store.set(key, value)
        self.invalidate()
        return ok

    # ---------------------------------------------------------------
    # Roster
    # ---------------------------------------------------------------

    def get_roster(self) -> list:
        return self._cached(FACULTY_DATA_KEY, list)

    def save_roster(self, roster: list) -> bool:
        return self._write(FACULTY_DATA_KEY, list(roster))

    def find_faculty(self, name, department):
        """Roster row by name; the department may be a shortened form."""
        for faculty in self.get_roster():
            if faculty.get(NAME) != name:
                continue
            faculty_dept = faculty.get(DEPARTMENT) or ""
            if faculty_dept == department or (department and department in faculty_dept):
                return faculty
        return None

    # ---------------------------------------------------------------
    # Appointment history
    # ---------------------------------------------------------------

    def get_appointment_data(self) -> dict:
        return self._cached(APPOINTMENT_DATA_KEY, dict)

    def get_appointments(self, name, department) -> list:
        entry = self.get_appointment_data().get(faculty_key(name, department))
        if not isinstance(entry, dict):
            return []
        appointments = entry.get("appointments")
        if not isinstance(appointments, list):
            return []
        return only_records(appointments)

    def appointments_for(self, faculty: dict) -> list:
        return self.get_appointments(faculty.get(NAME), faculty.get(DEPARTMENT))

    def save_appointments(self, name, department, appointments: list) -> bool:
        data = dict(self.get_appointment_data())
        data[faculty_key(name, department)] = {"appointments": list(appointments)}
        return self._write(APPOINTMENT_DATA_KEY, data)

    # ---------------------------------------------------------------
    # Exception & special-case records
    # ---------------------------------------------------------------

    def get_exceptions(self) -> list:
        return self._cached(EXCEPTIONS_KEY, list)

    def save_exceptions(self, exceptions: list) -> bool:
        return self._write(EXCEPTIONS_KEY, list(exceptions))

    def get_special_records(self) -> list:
        return self._cached(SPECIAL_RECORDS_KEY, list)

    def save_special_records(self, records: list) -> bool:
        return self._write(SPECIAL_RECORDS_KEY, list(records))


def only_records(items) -> list:
    """Drops stored entries that are not records (None, bare strings, lists)."""
    return [item for item in items or [] if isinstance(item, dict)]


def sort_appointments(appointments) -> list:
    """Chronological order by start date; stable, undated records first."""
    return sorted(
        only_records(appointments),
        key=lambda record: parse_flexible_date(appointment_start(record)) or date.min,
    )
