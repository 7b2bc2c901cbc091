import json
import logging
from datetime import datetime
from sqlalchemy import create_engine, Column, String, Text, DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from faculty_promotion.config import DATABASE_URL, configure_logging

logger = logging.getLogger(__name__)

# Database Setup
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# -------------------------------------------------------------------
# KEY-VALUE MODEL
# -------------------------------------------------------------------

class KeyValueEntry(Base):
    __tablename__ = "key_value_store"
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False) # JSON document
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def _json_default(value):
    # Dates inside stored records are kept as ISO text
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class KeyValueStore:
    """
    JSON blob store for the roster, appointment history and exception
    records. Read failures return the default, write failures return False.
    """

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    def get(self, key: str, default=None):
        db = self.session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                return default
            return json.loads(entry.value)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning("Storage get error for %s: %s", key, e)
            return default
        finally:
            db.close()

    def set(self, key: str, value) -> bool:
        db = self.session_factory()
        try:
            payload = json.dumps(value, ensure_ascii=False, default=_json_default)
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                entry = KeyValueEntry(key=key)
                db.add(entry)
            entry.value = payload
            db.commit()
            return True
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.warning("Storage set error for %s: %s", key, e)
            db.rollback()
            return False
        finally:
            db.close()

    def remove(self, key: str) -> bool:
        db = self.session_factory()
        try:
            db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
            db.commit()
            return True
        except SQLAlchemyError as e:
            logger.warning("Storage remove error for %s: %s", key, e)
            db.rollback()
            return False
        finally:
            db.close()

    def keys(self):
        db = self.session_factory()
        try:
            return [row[0] for row in db.query(KeyValueEntry.key).order_by(KeyValueEntry.key).all()]
        except SQLAlchemyError as e:
            logger.warning("Storage key listing error: %s", e)
            return []
        finally:
            db.close()

# -------------------------------------------------------------------
# DB INITIALIZATION
# -------------------------------------------------------------------

def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)


if __name__ == "__main__":
    configure_logging()
    init_db()
    logger.info("Database initialized at %s", DATABASE_URL)
