import pytest
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from faculty_promotion.database import KeyValueStore, init_db
from faculty_promotion.history import RecordsContext
from faculty_promotion import labels


def faculty_record(name="김철수", department="교육학과", rank="조교수", first_hire=None,
                   rank_approval=None, status="재직"):
    return {
        labels.NAME: name,
        labels.DEPARTMENT: department,
        labels.RANK: rank,
        labels.FIRST_HIRE_DATE: first_hire,
        labels.RANK_APPROVAL_DATE: rank_approval,
        labels.EMPLOYMENT_STATUS: status,
    }


def appointment_record(kind, start, end=None, rank="조교수", **extra):
    record = {
        labels.APPOINTMENT_TYPE: kind,
        labels.APPOINTMENT_RANK: rank,
        "발령시작일": start,
        labels.APPOINTMENT_END: end,
    }
    record.update(extra)
    return record


@pytest.fixture
def store():
    """Key-value store on a private in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield KeyValueStore(session_factory)
    engine.dispose()


@pytest.fixture
def ctx(store):
    return RecordsContext(store)


@pytest.fixture
def make_faculty():
    return faculty_record


@pytest.fixture
def make_appointment():
    return appointment_record


@pytest.fixture
def base_date():
    return date(2026, 1, 14)
