import os
import logging
from datetime import date
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ===============================================
# Storage
# ===============================================

DATABASE_URL = os.getenv("FACULTY_PROMOTION_DB_URL", "sqlite:///faculty_promotion.db")

FACULTY_DATA_KEY = "facultyData"
APPOINTMENT_DATA_KEY = "appointmentData"
EXCEPTIONS_KEY = "promotionExceptions"
SPECIAL_RECORDS_KEY = "specialManagementRecords"
LEGACY_SPECIAL_RECORDS_KEY = "specialCaseRecords"

# ===============================================
# Rule Constants
# ===============================================

# Tenure-track hires before this date fall under the pre-2012 regulation
REGIME_CUTOFF = date(2012, 3, 1)

# Spreadsheet serial dates count days from 1899-12-30 (offset 25569 to 1970-01-01)
SERIAL_DATE_EPOCH = date(1899, 12, 30)

# Candidates whose submission deadline is this close are flagged urgent
URGENT_DEADLINE_DAYS = 30

# Lapsed eligibility is dropped as stale after this many missed official dates.
# Local policy, not in the regulation; confirm with academic affairs together
# with the 7 vs 8 year associate -> full rule in logic_eligibility.
STALE_AFTER_LAPSED_ROUNDS = 10

# Length of the projected ledger row when no end date is given
EXPECTED_PROMOTION_YEARS = 6
EXPECTED_REAPPOINTMENT_YEARS = 3

# ===============================================
# Logging
# ===============================================

LOG_LEVEL = os.getenv("FACULTY_PROMOTION_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"


def configure_logging(level=None):
    """Configure root logging for scripts and notebooks using the engine."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
