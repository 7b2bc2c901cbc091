from datetime import date

from faculty_promotion.config import APPOINTMENT_DATA_KEY
from faculty_promotion.history import sort_appointments


def test_store_round_trip_and_defaults(store):
    assert store.get("missing") is None
    assert store.get("missing", []) == []
    assert store.set("facultyData", [{"성명": "김철수"}]) is True
    assert store.get("facultyData") == [{"성명": "김철수"}]
    assert store.keys() == ["facultyData"]
    assert store.remove("facultyData") is True
    assert store.get("facultyData") is None


def test_store_serializes_dates_as_iso_text(store):
    store.set("promotionExceptions", [{"name": "김철수", "promotionDate": date(2025, 10, 1)}])
    assert store.get("promotionExceptions") == [{"name": "김철수", "promotionDate": "2025-10-01"}]


def test_store_rejects_unserializable_values(store):
    assert store.set("bad", {"value": object()}) is False
    assert store.get("bad") is None


def test_context_caches_until_invalidated(ctx, store, make_faculty):
    store.set("facultyData", [make_faculty(name="김철수")])
    assert len(ctx.get_roster()) == 1

    # Direct store writes are not visible until the cache is invalidated
    store.set("facultyData", [make_faculty(name="김철수"), make_faculty(name="이영희")])
    assert len(ctx.get_roster()) == 1
    ctx.invalidate()
    assert len(ctx.get_roster()) == 2


def test_context_writes_invalidate_cache(ctx, make_faculty, make_appointment):
    assert ctx.get_roster() == []
    ctx.save_roster([make_faculty()])
    assert len(ctx.get_roster()) == 1

    assert ctx.get_appointments("김철수", "교육학과") == []
    ctx.save_appointments("김철수", "교육학과", [make_appointment("최초임용", "2017.01.15")])
    assert len(ctx.get_appointments("김철수", "교육학과")) == 1
    assert ctx.store.get(APPOINTMENT_DATA_KEY)["김철수_교육학과"]["appointments"][0]["발령구분"] == "최초임용"


def test_appointments_for_uses_name_and_department(ctx, make_faculty, make_appointment):
    ctx.save_appointments("김철수", "교육학과", [make_appointment("최초임용", "2017.01.15")])
    assert len(ctx.appointments_for(make_faculty(department="교육학과"))) == 1
    assert ctx.appointments_for(make_faculty(department="수학과")) == []


def test_find_faculty_accepts_shortened_department(ctx, make_faculty):
    ctx.save_roster([make_faculty(name="김철수", department="사범대학 교육학과")])
    assert ctx.find_faculty("김철수", "교육학과") is not None
    assert ctx.find_faculty("김철수", "사범대학 교육학과") is not None
    assert ctx.find_faculty("김철수", "수학과") is None
    assert ctx.find_faculty("이영희", "교육학과") is None


def test_sort_appointments_is_stable_with_undated_first(make_appointment):
    first = make_appointment("재임용", "2020.03.01")
    second = make_appointment("승진", "2020.03.01")
    undated = make_appointment("기타", None)
    earlier = make_appointment("최초임용", "2017.03.01")

    ordered = sort_appointments([first, second, undated, earlier])
    assert ordered == [undated, earlier, first, second]


def test_context_ignores_wrong_shaped_payloads(ctx, store):
    store.set("facultyData", {"성명": "김철수"})
    store.set("appointmentData", ["junk"])
    store.set("promotionExceptions", [None, "x", {"name": "김철수"}])

    assert ctx.get_roster() == []
    assert ctx.get_appointment_data() == {}
    assert ctx.get_appointments("김철수", "교육학과") == []
    assert ctx.get_exceptions() == [{"name": "김철수"}]


def test_get_appointments_drops_non_records(ctx, store, make_appointment):
    hire = make_appointment("최초임용", "2017.01.15")
    store.set(APPOINTMENT_DATA_KEY, {
        "김철수_교육학과": {"appointments": [None, hire, "재임용"]},
        "이영희_수학과": ["junk"],
        "박민수_물리학과": {"appointments": "최초임용"},
    })

    assert ctx.get_appointments("김철수", "교육학과") == [hire]
    assert ctx.get_appointments("이영희", "수학과") == []
    assert ctx.get_appointments("박민수", "물리학과") == []
    assert sort_appointments([None, hire, "x"]) == [hire]
