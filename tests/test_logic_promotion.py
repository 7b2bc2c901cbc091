import pytest
from datetime import date

from faculty_promotion.config import FACULTY_DATA_KEY, APPOINTMENT_DATA_KEY, EXCEPTIONS_KEY
from faculty_promotion.logic_ledger import CURRENT_ROW_TYPE, build_table_data
from faculty_promotion.logic_regime import TENURE_POST_2012, NON_TENURE
from faculty_promotion.logic_exceptions import add_exception
from faculty_promotion.logic_promotion import (
    get_next_promotion_date_for,
    is_promotion_candidate,
    get_promotion_info,
    calculate_all_promotions,
)


def test_assistant_due_this_spring(ctx, make_faculty, base_date):
    faculty = make_faculty(first_hire="2020.01.15")
    info = get_promotion_info(faculty, ctx, base_date)

    assert info["is_candidate"] is True
    assert info["regime"] == TENURE_POST_2012
    assert info["requirement"] == {"next_rank": "부교수", "years": 6}
    assert info["eligible_date"] == date(2026, 1, 15)
    assert info["next_promotion_date"] == date(2026, 4, 1)
    assert info["submission_deadline"] == date(2026, 2, 28)
    assert info["days_until_promotion"] == 77
    assert info["days_until_deadline"] == 45
    assert info["leave_months"] == 0
    assert info["exception"] == {"has_exception": False}
    assert info["restriction"] == {"is_restricted": False, "reason": None}


def test_associate_with_leave_due_in_october(ctx, make_faculty, make_appointment, base_date):
    faculty = make_faculty(name="이영희", rank="부교수", first_hire="2012.09.01", rank_approval="2018.04.01")
    ctx.save_appointments("이영희", "교육학과", [
        make_appointment("출산휴직", "2020.03.01", "2020.04.30", rank="부교수"),
    ])
    info = get_promotion_info(faculty, ctx, base_date)

    assert info["leave_months"] == 2
    assert info["eligible_date"] == date(2026, 6, 1)
    assert info["next_promotion_date"] == date(2026, 10, 1)
    assert info["submission_deadline"] == date(2026, 8, 31)
    assert info["is_candidate"] is True


def test_full_professor_is_never_a_candidate(ctx, make_faculty, base_date):
    faculty = make_faculty(rank="교수", first_hire="2005.03.01", rank_approval="2015.03.01")
    info = get_promotion_info(faculty, ctx, base_date)
    assert info["is_candidate"] is False
    assert info["requirement"] is None
    assert info["next_promotion_date"] is None


def test_non_tenure_associate_has_no_path(ctx, make_faculty, base_date):
    faculty = make_faculty(rank="부교수(비정년트랙)", first_hire="2015.03.01", rank_approval="2020.03.01")
    info = get_promotion_info(faculty, ctx, base_date)
    assert info["regime"] == NON_TENURE
    assert info["requirement"] is None
    assert info["eligible_date"] is None
    assert info["is_candidate"] is False


def test_stale_eligibility_is_not_a_candidate(ctx, make_faculty, base_date):
    faculty = make_faculty(first_hire="2008.05.01")
    assert get_next_promotion_date_for(faculty, ctx, base_date) is None
    assert is_promotion_candidate(faculty, ctx, base_date) is False


def test_dated_exception_only_blocks_its_round(ctx, make_faculty):
    faculty = make_faculty(first_hire="2019.04.15")
    add_exception(ctx, {
        "name": "김철수", "department": "교육학과", "type": "승진 보류",
        "reason": "본인 요청", "promotionDate": "2025-10-01",
    })

    blocked = get_promotion_info(faculty, ctx, date(2025, 6, 1))
    assert blocked["next_promotion_date"] == date(2025, 10, 1)
    assert blocked["is_candidate"] is False
    assert blocked["exception"]["has_exception"] is True

    # Not selected in October: rolls to the next April, which the exception does not cover
    next_round = get_promotion_info(faculty, ctx, date(2026, 1, 14))
    assert next_round["next_promotion_date"] == date(2026, 4, 1)
    assert next_round["is_candidate"] is True


def test_permanent_exception_blocks_every_round(ctx, make_faculty, base_date):
    faculty = make_faculty(first_hire="2020.01.15")
    add_exception(ctx, {"name": "김철수", "department": "교육학과", "type": "영구", "reason": "퇴직 예정"})
    assert is_promotion_candidate(faculty, ctx, base_date) is False


def test_calculate_all_promotions(ctx, make_faculty, base_date):
    roster = [
        make_faculty(name="김철수", first_hire="2020.01.15"),
        make_faculty(name="박민수", rank="교수", first_hire="2005.03.01"),
        make_faculty(name="최지은", first_hire="2023.03.01"),
        "not a record",
        None,
        make_faculty(name="정하늘", first_hire="2020.07.01"),
    ]
    results = calculate_all_promotions(roster, ctx, base_date)

    assert [r["faculty"]["성명"] for r in results] == ["김철수", "정하늘"]
    assert results[1]["promotion_info"]["next_promotion_date"] == date(2026, 10, 1)


def test_calculate_all_promotions_skips_records_that_fail(ctx, make_faculty, base_date, monkeypatch):
    from faculty_promotion import logic_promotion

    original = logic_promotion.get_promotion_info

    def flaky(faculty, ctx, base_date=None):
        if faculty.get("성명") == "오류":
            raise ValueError("broken record")
        return original(faculty, ctx, base_date)

    monkeypatch.setattr(logic_promotion, "get_promotion_info", flaky)
    roster = [make_faculty(name="오류", first_hire="2020.01.15"), make_faculty(first_hire="2020.01.15")]
    results = calculate_all_promotions(roster, ctx, base_date)
    assert [r["faculty"]["성명"] for r in results] == ["김철수"]


def test_calculate_all_promotions_empty(ctx, base_date):
    assert calculate_all_promotions([], ctx, base_date) == []
    assert calculate_all_promotions(None, ctx, base_date) == []


@pytest.mark.parametrize("entry", [
    {"appointments": [None]},
    ["junk"],
    {"appointments": ["최초임용"]},
    {"appointments": "최초임용"},
    "junk",
])
def test_malformed_stored_history_is_ignored(ctx, store, make_faculty, base_date, entry):
    store.set(APPOINTMENT_DATA_KEY, {"김철수_교육학과": entry})
    ctx.invalidate()
    faculty = make_faculty(first_hire="2020.01.15")

    info = get_promotion_info(faculty, ctx, base_date)
    assert info["next_promotion_date"] == date(2026, 4, 1)
    assert info["is_candidate"] is True
    assert info["leave_months"] == 0
    assert build_table_data("김철수", "교육학과", ctx, base_date) == {"rows": [], "summary": None}


def test_valid_records_survive_next_to_junk(ctx, store, make_faculty, make_appointment, base_date):
    store.set(FACULTY_DATA_KEY, [None, "junk", make_faculty(first_hire="2017.01.15")])
    store.set(APPOINTMENT_DATA_KEY, {"김철수_교육학과": {"appointments": [
        None,
        make_appointment("최초임용", "2017.01.15", "2020.01.14"),
        "재임용",
        ["nested"],
    ]}})
    ctx.invalidate()

    faculty = ctx.find_faculty("김철수", "교육학과")
    assert get_promotion_info(faculty, ctx, base_date)["eligible_date"] == date(2023, 1, 15)

    table = build_table_data("김철수", "교육학과", ctx, base_date)
    assert [row["type"] for row in table["rows"]] == ["최초임용", CURRENT_ROW_TYPE]


def test_wrong_shaped_store_payloads_fall_back_to_empty(ctx, store, make_faculty, base_date):
    store.set(APPOINTMENT_DATA_KEY, ["junk"])
    store.set(EXCEPTIONS_KEY, {"name": "김철수"})
    ctx.invalidate()

    info = get_promotion_info(make_faculty(first_hire="2020.01.15"), ctx, base_date)
    assert info["is_candidate"] is True
    assert info["exception"] == {"has_exception": False}
    assert build_table_data("김철수", "교육학과", ctx, base_date) == {"rows": [], "summary": None}


def test_malformed_exception_entries_are_skipped(ctx, store, make_faculty, base_date):
    store.set(EXCEPTIONS_KEY, [
        None,
        "영구 제외",
        {"name": "김철수", "department": "교육학과", "reason": "퇴직 예정", "isActive": True},
    ])
    ctx.invalidate()

    info = get_promotion_info(make_faculty(first_hire="2020.01.15"), ctx, base_date)
    assert info["is_candidate"] is False
    assert info["exception"]["reason"] == "퇴직 예정"


def test_promotion_info_evaluates_once(ctx, make_faculty, base_date, monkeypatch):
    from faculty_promotion import logic_promotion

    calls = []
    original = logic_promotion.check_exception

    def counting_check(*args):
        calls.append(args)
        return original(*args)

    def no_recompute(*args, **kwargs):
        raise AssertionError("next promotion date evaluated twice")

    monkeypatch.setattr(logic_promotion, "check_exception", counting_check)
    monkeypatch.setattr(logic_promotion, "get_next_promotion_date_for", no_recompute)

    due = get_promotion_info(make_faculty(first_hire="2020.01.15"), ctx, base_date)
    stale = get_promotion_info(make_faculty(first_hire="2008.05.01"), ctx, base_date)

    assert due["is_candidate"] is True
    assert stale["next_promotion_date"] is None
    assert stale["is_candidate"] is False
    assert len(calls) == 2
