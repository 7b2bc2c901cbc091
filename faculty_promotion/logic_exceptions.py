import uuid
import logging
from datetime import datetime

from faculty_promotion.config import LEGACY_SPECIAL_RECORDS_KEY
from faculty_promotion.history import only_records
from faculty_promotion.labels import NAME, DEPARTMENT
from faculty_promotion.utils import parse_flexible_date

logger = logging.getLogger(__name__)

PERMANENT_EXCLUSION = "영구 제외"


def _matches(exception: dict, name, department) -> bool:
    if not exception.get("isActive"):
        return False
    if exception.get("name") != name:
        return False
    # Exceptions recorded without a department apply to every department
    return not exception.get("department") or exception.get("department") == department


def check_exception(faculty: dict, candidate_date, exceptions) -> dict:
    """
    Checks administrator exceptions for a candidate at one official date.

    An active exception without a promotion date excludes the person from
    every round; a dated one excludes only that exact date. The first
    matching record in storage order wins.
    """
    name = faculty.get(NAME)
    department = faculty.get(DEPARTMENT)

    for exception in only_records(exceptions):
        if not _matches(exception, name, department):
            continue

        if not exception.get("promotionDate"):
            return {
                "has_exception": True,
                "type": exception.get("type"),
                "reason": exception.get("reason"),
                "note": exception.get("note"),
                "applies_to": PERMANENT_EXCLUSION,
            }

        if candidate_date and parse_flexible_date(exception.get("promotionDate")) == candidate_date:
            return {
                "has_exception": True,
                "type": exception.get("type"),
                "reason": exception.get("reason"),
                "note": exception.get("note"),
                "applies_to": exception.get("promotionDate"),
            }

    return {"has_exception": False}


def check_promotion_restrictions(faculty: dict) -> dict:
    # Disciplinary holds are not tracked in the roster; nobody is restricted.
    return {"is_restricted": False, "reason": None}

# -------------------------------------------------------------------
# ADMINISTRATOR RECORDS
# -------------------------------------------------------------------

def _new_id() -> str:
    return uuid.uuid4().hex


def _stamp(record: dict) -> dict:
    record = dict(record)
    record["id"] = _new_id()
    record["addedDate"] = datetime.now().isoformat()
    return record


def add_exception(ctx, exception: dict) -> dict:
    """Stores a new exception record; active unless stated otherwise."""
    record = _stamp(exception)
    record.setdefault("isActive", True)
    exceptions = list(ctx.get_exceptions())
    exceptions.append(record)
    ctx.save_exceptions(exceptions)
    logger.info("Exception added for %s (%s)", record.get("name"), record.get("promotionDate") or PERMANENT_EXCLUSION)
    return record


def update_exception(ctx, exception_id, changes: dict) -> bool:
    exceptions = list(ctx.get_exceptions())
    for index, record in enumerate(exceptions):
        if record.get("id") == exception_id:
            exceptions[index] = {**record, **changes}
            ctx.save_exceptions(exceptions)
            return True
    return False


def delete_exception(ctx, exception_id) -> bool:
    exceptions = list(ctx.get_exceptions())
    remaining = [record for record in exceptions if record.get("id") != exception_id]
    if len(remaining) == len(exceptions):
        return False
    ctx.save_exceptions(remaining)
    return True


def add_special_record(ctx, record: dict) -> dict:
    record = _stamp(record)
    records = list(ctx.get_special_records())
    records.append(record)
    ctx.save_special_records(records)
    return record


def update_special_record(ctx, record_id, changes: dict) -> bool:
    records = list(ctx.get_special_records())
    for index, record in enumerate(records):
        if record.get("id") == record_id:
            records[index] = {**record, **changes}
            ctx.save_special_records(records)
            return True
    return False


def delete_special_record(ctx, record_id) -> bool:
    records = list(ctx.get_special_records())
    remaining = [record for record in records if record.get("id") != record_id]
    if len(remaining) == len(records):
        return False
    ctx.save_special_records(remaining)
    return True


def get_special_records_by_type(ctx, record_type) -> list:
    return [record for record in ctx.get_special_records() if record.get("type") == record_type]


def migrate_legacy_special_records(ctx):
    """
    Converts records kept under the old special-case key into the current
    format. The old payload is backed up and removed. Returns the new list,
    or None when there was nothing to migrate.
    """
    old_records = ctx.store.get(LEGACY_SPECIAL_RECORDS_KEY)
    if not isinstance(old_records, list) or not only_records(old_records):
        return None

    new_records = [
        {
            "id": _new_id(),
            "name": old.get("name"),
            "department": old.get("department"),
            "type": "promotion" if old.get("type") == "promotion" else "reappointment",
            "expectedDate": old.get("expectedDate") or "",
            "conclusion": old.get("conclusion") or "",
            "note": old.get("detail") or "",
            "addedDate": old.get("addedDate") or datetime.now().isoformat(),
        }
        for old in only_records(old_records)
    ]

    ctx.save_special_records(new_records)
    ctx.store.set(f"{LEGACY_SPECIAL_RECORDS_KEY}_backup", old_records)
    ctx.store.remove(LEGACY_SPECIAL_RECORDS_KEY)
    logger.info("Migrated %s legacy special-case records", len(new_records))
    return new_records
