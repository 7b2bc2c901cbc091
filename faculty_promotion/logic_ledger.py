"""
Working-period ledger for the special-management view.

Rebuilds a faculty member's service history row by row with two running
clocks: the promotion clock (all service except leave) and the reappointment
clock (service since the latest reappointment). Sick leave neither advances
nor resets either clock.
"""
import logging
import pandas as pd
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from functools import reduce
from typing import Optional, Tuple

from faculty_promotion.config import EXPECTED_PROMOTION_YEARS, EXPECTED_REAPPOINTMENT_YEARS
from faculty_promotion.history import only_records, sort_appointments
from faculty_promotion.labels import (
    RANK,
    EMPLOYMENT_STATUS,
    APPOINTMENT_TYPE,
    APPOINTMENT_END,
    ASSISTANT_PROFESSOR,
    ASSOCIATE_PROFESSOR,
    INITIAL_HIRE,
    REAPPOINTMENT,
    LEAVE,
    RETURN_FROM_LEAVE,
    SICK_LEAVE,
    ACTIVE_SERVICE,
    appointment_start,
    canonical_rank,
    classify_appointment,
    is_active_status,
)
from faculty_promotion.logic_eligibility import PROMOTION_REQUIREMENTS
from faculty_promotion.logic_regime import TENURE_POST_2012
from faculty_promotion.utils import (
    parse_flexible_date,
    days_between,
    days_to_text,
    describe_period,
    format_date,
    add_years,
)

logger = logging.getLogger(__name__)

SICK_LEAVE_NOTE = "병가는 재직 기간에 영향을 미치지 않음"
CURRENT_ROW_TYPE = "재직"
EXPECTED_ROW_TYPES = {"promotion": "승진 예정", "reappointment": "재임용 예정"}
EXPECTED = "expected"


@dataclass(frozen=True)
class LedgerState:
    """Accumulator carried through the chronological fold."""
    initial_date: Optional[date] = None
    last_reappointment_date: Optional[date] = None
    last_reappointment_end: Optional[date] = None
    promotion_days: int = 0
    reappointment_days: int = 0
    total_leave_days: int = 0
    promotion_leaves: Tuple[dict, ...] = ()
    reappointment_leaves: Tuple[dict, ...] = ()
    rows: Tuple[dict, ...] = field(default=())


def step(state: LedgerState, appointment: dict) -> LedgerState:
    """Applies one appointment record to the ledger."""
    raw_start = appointment_start(appointment)
    raw_end = appointment.get(APPOINTMENT_END)
    type_text = appointment.get(APPOINTMENT_TYPE) or ""
    category = classify_appointment(type_text)
    start = parse_flexible_date(raw_start)
    end = parse_flexible_date(raw_end)
    changes = {}

    if category == INITIAL_HIRE and not state.initial_date:
        changes["initial_date"] = start

    # A reappointment restarts the reappointment clock
    if category == REAPPOINTMENT:
        state = replace(
            state,
            last_reappointment_date=start,
            last_reappointment_end=end,
            reappointment_days=0,
            reappointment_leaves=(),
        )

    if category == LEAVE and start and end:
        leave_days = days_between(start, end)
        leave = {"type": type_text, "days": leave_days, "text": days_to_text(leave_days)}
        changes["total_leave_days"] = state.total_leave_days + leave_days
        changes["promotion_leaves"] = state.promotion_leaves + (leave,)
        if state.last_reappointment_date:
            changes["reappointment_leaves"] = state.reappointment_leaves + (leave,)

    duration = "-"
    if raw_start and raw_end and category != RETURN_FROM_LEAVE:
        duration = describe_period(start, end)

    promotion_countdown = "-"
    if category not in (RETURN_FROM_LEAVE, SICK_LEAVE, LEAVE) and start and end:
        changes["promotion_days"] = state.promotion_days + days_between(start, end)
        promotion_countdown = days_to_text(changes["promotion_days"])

    reappointment_countdown = "-"
    if (
        state.last_reappointment_date
        and category not in (RETURN_FROM_LEAVE, SICK_LEAVE, LEAVE)
        and start and end
        and start >= state.last_reappointment_date
    ):
        changes["reappointment_days"] = state.reappointment_days + days_between(start, end)
        reappointment_countdown = days_to_text(changes["reappointment_days"])

    if category == SICK_LEAVE:
        duration = SICK_LEAVE_NOTE

    row = {
        "start_date": format_date(raw_start),
        "end_date": format_date(raw_end),
        "type": type_text,
        "category": category,
        "duration": duration,
        "promotion_countdown": promotion_countdown,
        "reappointment_countdown": reappointment_countdown,
    }
    return replace(state, rows=state.rows + (row,), **changes)


def fold_appointments(appointments, state: Optional[LedgerState] = None) -> LedgerState:
    return reduce(step, sort_appointments(appointments), state or LedgerState())


def _leave_list(leave_periods) -> str:
    return ", ".join(f"{leave['type']} {leave['text']}" for leave in leave_periods)


def promotion_countdown_detail(initial_date, working_days, leave_periods, current_rank) -> str:
    """Promotion clock text with the leave-shifted promotion date."""
    working_text = days_to_text(working_days)
    if not initial_date:
        return working_text

    rank = ASSISTANT_PROFESSOR if canonical_rank(current_rank) == ASSISTANT_PROFESSOR else ASSOCIATE_PROFESSOR
    requirement = PROMOTION_REQUIREMENTS[TENURE_POST_2012][rank]
    years, next_rank = requirement["years"], requirement["next_rank"]

    original_date = add_years(initial_date, years)
    total_leave_days = sum(leave["days"] for leave in leave_periods)
    adjusted_date = original_date + timedelta(days=total_leave_days)

    if years * 365 - working_days <= 0:
        return f"{working_text} ({next_rank} 승진 요건 충족)"

    if total_leave_days > 0:
        return (
            f"{working_text}\n[{next_rank} 승진] 원래 {format_date(original_date)} 예정 → "
            f"휴직({_leave_list(leave_periods)})으로 {format_date(adjusted_date)}로 연기"
        )
    return f"{working_text}\n[{next_rank} 승진 예정: {format_date(adjusted_date)}]"


def reappointment_countdown_detail(reappointment_date, contract_end, working_days, leave_periods) -> str:
    """Reappointment clock text with the leave-extended contract expiry."""
    working_text = days_to_text(working_days)
    if not reappointment_date or not contract_end:
        return working_text

    total_leave_days = sum(leave["days"] for leave in leave_periods)
    if total_leave_days > 0:
        adjusted_end = contract_end + timedelta(days=total_leave_days)
        return (
            f"{working_text}\n[재임용] 원래 {format_date(contract_end)} 만료 → "
            f"휴직({_leave_list(leave_periods)})으로 {format_date(adjusted_end)}로 연장"
        )
    return f"{working_text}\n[재임용 만료: {format_date(contract_end)}]"


def _current_row(state: LedgerState, last_appointment: dict, current_rank, base_date: date):
    """Extends both clocks through base_date for faculty still in service."""
    last_category = classify_appointment(last_appointment.get(APPOINTMENT_TYPE))
    last_end = parse_flexible_date(last_appointment.get(APPOINTMENT_END))

    if last_category == RETURN_FROM_LEAVE:
        current_start = parse_flexible_date(appointment_start(last_appointment))
    elif last_end:
        current_start = last_end + timedelta(days=1)
    else:
        current_start = None

    if not current_start or current_start > base_date:
        return state

    days = days_between(current_start, base_date)
    promotion_days = state.promotion_days + days
    reappointment_days = state.reappointment_days + (days if state.last_reappointment_date else 0)

    if state.last_reappointment_date:
        reappointment_text = reappointment_countdown_detail(
            state.last_reappointment_date,
            state.last_reappointment_end,
            reappointment_days,
            state.reappointment_leaves,
        )
    else:
        reappointment_text = "-"

    row = {
        "start_date": format_date(current_start),
        "end_date": format_date(base_date),
        "type": CURRENT_ROW_TYPE,
        "category": ACTIVE_SERVICE,
        "duration": days_to_text(days),
        "promotion_countdown": promotion_countdown_detail(
            state.initial_date, promotion_days, state.promotion_leaves, current_rank
        ),
        "reappointment_countdown": reappointment_text,
        "is_current": True,
    }
    return replace(
        state,
        promotion_days=promotion_days,
        reappointment_days=reappointment_days,
        rows=state.rows + (row,),
    )


def _expected_row(state: LedgerState, expected_info: dict):
    """Projected promotion or reappointment term; stored data is untouched."""
    expected_type = expected_info.get("type")
    start = parse_flexible_date(expected_info.get("start_date"))
    end = parse_flexible_date(expected_info.get("end_date"))

    if start and not end:
        years = EXPECTED_PROMOTION_YEARS if expected_type == "promotion" else EXPECTED_REAPPOINTMENT_YEARS
        end = add_years(start, years) - timedelta(days=1)

    promotion_days = state.promotion_days
    reappointment_days = state.reappointment_days
    if start and end:
        period_days = days_between(start, end)
        promotion_days += period_days
        if state.last_reappointment_date or expected_type == "reappointment":
            reappointment_days += period_days

    return {
        "start_date": format_date(start),
        "end_date": format_date(end),
        "type": EXPECTED_ROW_TYPES.get(expected_type, EXPECTED_ROW_TYPES["reappointment"]),
        "category": EXPECTED,
        "duration": describe_period(start, end) if start and end else "-",
        "promotion_countdown": days_to_text(promotion_days),
        "reappointment_countdown": days_to_text(reappointment_days),
        "is_expected": True,
    }


def build_table_data(name, department, ctx, base_date=None, expected_info=None) -> dict:
    """
    Ledger rows and clock totals for one faculty member.

    expected_info: {"start_date", "end_date" (optional), "type": "promotion" | "reappointment"}
    """
    base_date = base_date or date.today()
    appointments = ctx.get_appointments(name, department)
    if not appointments:
        return {"rows": [], "summary": None}

    faculty = ctx.find_faculty(name, department)
    current_rank = faculty.get(RANK) if faculty else ASSISTANT_PROFESSOR

    ordered = sort_appointments(appointments)
    state = fold_appointments(ordered)

    if faculty and is_active_status(faculty.get(EMPLOYMENT_STATUS)):
        state = _current_row(state, ordered[-1], current_rank, base_date)

    rows = list(state.rows)
    logger.debug("Ledger for %s (%s): %s rows, %s leave days", name, department, len(rows), state.total_leave_days)
    if expected_info and expected_info.get("start_date"):
        rows.append(_expected_row(state, expected_info))

    return {
        "rows": rows,
        "summary": {
            "total_promotion_days": state.promotion_days,
            "total_promotion_text": days_to_text(state.promotion_days),
            "total_reappointment_days": state.reappointment_days,
            "total_reappointment_text": days_to_text(state.reappointment_days),
            "total_leave_days": state.total_leave_days,
        },
    }


def calculate_working_period(appointments, start_from=None, end_at=None, exclude_leave=True) -> dict:
    """Days worked between two dates; leave excluded unless asked otherwise, sick leave included."""
    if not appointments:
        return {"days": 0, "text": "-"}

    start_from = parse_flexible_date(start_from)
    end_at = parse_flexible_date(end_at) or date.today()

    total_days = 0
    for appointment in sort_appointments(appointments):
        start = parse_flexible_date(appointment_start(appointment))
        end = parse_flexible_date(appointment.get(APPOINTMENT_END)) or end_at
        category = classify_appointment(appointment.get(APPOINTMENT_TYPE))

        if not start:
            continue
        if start_from and start < start_from:
            continue
        if end > end_at:
            continue
        if exclude_leave and category == LEAVE:
            continue
        if category == RETURN_FROM_LEAVE:
            continue

        total_days += days_between(start, end)

    return {"days": total_days, "text": days_to_text(total_days)}


def calculate_reappointment_countdown(appointments, reappointment_date, current_date=None) -> str:
    """Service since a reappointment, net of leave taken after it."""
    reappointment_date = parse_flexible_date(reappointment_date)
    if not reappointment_date:
        return "-"
    current = parse_flexible_date(current_date) or date.today()

    leave_days = 0
    for appointment in only_records(appointments):
        start = parse_flexible_date(appointment_start(appointment))
        if not start or start < reappointment_date:
            continue
        if classify_appointment(appointment.get(APPOINTMENT_TYPE)) == LEAVE:
            end = parse_flexible_date(appointment.get(APPOINTMENT_END)) or current
            leave_days += days_between(start, end)

    return days_to_text(days_between(reappointment_date, current) - leave_days)


def ledger_to_frame(table_data: dict) -> pd.DataFrame:
    return pd.DataFrame(table_data.get("rows") or [])
