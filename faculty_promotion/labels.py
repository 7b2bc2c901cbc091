"""
Field names and free-text matching rules for roster and appointment sheets.

Rank and appointment-type cells are labelled inconsistently in the source
sheets ('조교수(비정년트랙)', '조교수.(비정년트랙)', '신규 최초임용', ...), so
every rule here is substring containment. All matching lives in this module.
"""

# Roster (교원현황) fields
NAME = "성명"
DEPARTMENT = "소속"
RANK = "직급"
FIRST_HIRE_DATE = "전임교원\n최초임용일"
RANK_APPROVAL_DATE = "현직급\n승인일"
EMPLOYMENT_STATUS = "재직구분"

# Appointment (발령사항) fields
APPOINTMENT_TYPE = "발령구분"
APPOINTMENT_RANK = "발령직급"
APPOINTMENT_START_FIELDS = ("발령시작일", "발령일", "발령일자")
APPOINTMENT_END = "발령종료일"
LEAVE_START = "휴직시작일"
LEAVE_END = "휴직종료일"
LEAVE_YEARS = "휴직기간(년)"
LEAVE_MONTHS = "휴직기간(월)"

# Ranks
ASSISTANT_PROFESSOR = "조교수"
ASSOCIATE_PROFESSOR = "부교수"
FULL_PROFESSOR = "교수"
NON_TENURE_MARK = "비정년"
ACTIVE_STATUS_MARK = "재직"

# Appointment categories
INITIAL_HIRE = "initial_hire"
REAPPOINTMENT = "reappointment"
PROMOTION = "promotion"
LEAVE = "leave"
RETURN_FROM_LEAVE = "return_from_leave"
SICK_LEAVE = "sick_leave"
ACTIVE_SERVICE = "active_service"
OTHER = "other"

# First match wins
APPOINTMENT_CATEGORY_RULES = (
    ("최초임용", INITIAL_HIRE),
    ("재임용", REAPPOINTMENT),
    ("승진", PROMOTION),
    ("휴직", LEAVE),
    ("복직", RETURN_FROM_LEAVE),
    ("병가", SICK_LEAVE),
    ("재직", ACTIVE_SERVICE),
)

# '교수' is contained in both other ranks, so it must be checked last
RANK_RULES = (
    (ASSISTANT_PROFESSOR, ASSISTANT_PROFESSOR),
    (ASSOCIATE_PROFESSOR, ASSOCIATE_PROFESSOR),
    (FULL_PROFESSOR, FULL_PROFESSOR),
)


def _text(value) -> str:
    if value is None:
        return ""
    return str(value)


def get_field(record: dict, field_name: str):
    """
    Looks up a sheet field, tolerating header cells whose line breaks were
    dropped or exported as CRLF.
    """
    if not record:
        return None

    candidates = [
        field_name,
        field_name.replace("\r\n", "\n").replace("\n", ""),
        field_name.replace("\r\n", "\n").replace("\n", "\r\n"),
        field_name.replace("\r\n", "\n"),
        field_name.replace("\r\n", "\n").replace("\n", " "),
    ]
    for key in candidates:
        value = record.get(key)
        if value is not None:
            return value
    return None


def classify_appointment(type_text) -> str:
    text = _text(type_text)
    for keyword, category in APPOINTMENT_CATEGORY_RULES:
        if keyword in text:
            return category
    return OTHER


def canonical_rank(rank_text):
    """Returns '조교수', '부교수', '교수' or None."""
    text = _text(rank_text)
    for keyword, rank in RANK_RULES:
        if keyword in text:
            return rank
    return None


def is_non_tenure(rank_text) -> bool:
    return NON_TENURE_MARK in _text(rank_text)


def is_active_status(status_text) -> bool:
    return ACTIVE_STATUS_MARK in _text(status_text)


def appointment_start(record: dict):
    """Raw start-date cell, whichever of the start columns is filled."""
    for field_name in APPOINTMENT_START_FIELDS:
        value = record.get(field_name)
        if value:
            return value
    return None


def faculty_key(name, department) -> str:
    return f"{name}_{department}"
