import pandas as pd
from collections import Counter
from datetime import date

from faculty_promotion.config import URGENT_DEADLINE_DAYS
from faculty_promotion.labels import (
    NAME,
    DEPARTMENT,
    RANK,
    ASSISTANT_PROFESSOR,
    ASSOCIATE_PROFESSOR,
    FULL_PROFESSOR,
    is_non_tenure,
)
from faculty_promotion.logic_calendar import APRIL, OCTOBER, get_next_promotion_period
from faculty_promotion.utils import format_date

FRAME_COLUMNS = [
    "Name", "Department", "Rank", "Regime", "Next Rank",
    "Eligible Date", "Promotion Date", "Submission Deadline", "Days Until Deadline",
]


def group_by_promotion_period(candidates) -> dict:
    groups = {"april": [], "october": []}
    for candidate in candidates:
        promotion_date = candidate["promotion_info"].get("next_promotion_date")
        if not promotion_date:
            continue
        if promotion_date.month == APRIL:
            groups["april"].append(candidate)
        elif promotion_date.month == OCTOBER:
            groups["october"].append(candidate)
    return groups


def group_by_track_and_path(candidates) -> dict:
    """
    Splits candidates by track and promotion path. Non-tenure faculty can
    only move from assistant to associate professor.
    """
    groups = {
        "tenure": {"assistant_to_associate": [], "associate_to_full": []},
        "non_tenure": {"assistant_to_associate": []},
    }

    for candidate in candidates:
        rank = str(candidate["faculty"].get(RANK) or "")
        requirement = candidate["promotion_info"].get("requirement") or {}
        next_rank = requirement.get("next_rank")

        if not is_non_tenure(rank):
            if ASSOCIATE_PROFESSOR in rank and next_rank == FULL_PROFESSOR:
                groups["tenure"]["associate_to_full"].append(candidate)
            elif ASSISTANT_PROFESSOR in rank and next_rank == ASSOCIATE_PROFESSOR:
                groups["tenure"]["assistant_to_associate"].append(candidate)
        elif ASSISTANT_PROFESSOR in rank and next_rank == ASSOCIATE_PROFESSOR:
            groups["non_tenure"]["assistant_to_associate"].append(candidate)

    return groups


def group_by_period_and_track(candidates) -> dict:
    periods = group_by_promotion_period(candidates)
    return {
        "april": group_by_track_and_path(periods["april"]),
        "october": group_by_track_and_path(periods["october"]),
    }


def calculate_statistics(candidates, base_date=None) -> dict:
    """Summary counts for a candidate list produced by calculate_all_promotions."""
    candidates = list(candidates or [])
    base_date = base_date or date.today()
    groups = group_by_promotion_period(candidates)

    # Deadline within URGENT_DEADLINE_DAYS and not yet past
    urgent = [
        c for c in candidates
        if c["promotion_info"].get("days_until_deadline") is not None
        and 0 <= c["promotion_info"]["days_until_deadline"] <= URGENT_DEADLINE_DAYS
    ]
    restricted = [
        c for c in candidates
        if (c["promotion_info"].get("restriction") or {}).get("is_restricted")
    ]

    return {
        "total": len(candidates),
        "april_count": len(groups["april"]),
        "october_count": len(groups["october"]),
        "urgent_count": len(urgent),
        "restricted_count": len(restricted),
        "next_period": get_next_promotion_period(base_date),
        "groups": groups,
        "groups_by_track": group_by_period_and_track(candidates),
        "urgent_candidates": urgent,
        "restricted_candidates": restricted,
    }


def count_by_rank(roster) -> dict:
    return dict(Counter((faculty.get(RANK) or "직급없음") for faculty in roster or []))


def candidates_to_frame(candidates) -> pd.DataFrame:
    """Tabular view of the candidate list, ordered by promotion date."""
    records = []
    for candidate in candidates or []:
        faculty = candidate["faculty"]
        info = candidate["promotion_info"]
        requirement = info.get("requirement") or {}
        records.append({
            "Name": faculty.get(NAME),
            "Department": faculty.get(DEPARTMENT),
            "Rank": faculty.get(RANK),
            "Regime": info.get("regime"),
            "Next Rank": requirement.get("next_rank"),
            "Eligible Date": format_date(info.get("eligible_date")),
            "Promotion Date": format_date(info.get("next_promotion_date")),
            "Submission Deadline": format_date(info.get("submission_deadline")),
            "Days Until Deadline": info.get("days_until_deadline"),
        })

    df = pd.DataFrame(records, columns=FRAME_COLUMNS)
    if not df.empty:
        df = df.sort_values(["Promotion Date", "Name"], kind="stable").reset_index(drop=True)
    return df
