"""
Configuration: RAG thresholds, status labels, deadline calendar, constants.

RAG_LABELS maps each status value to the wording shown on cards and
legends. Thresholds apply to 0-100 scores end-to-end, including rollups.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# File paths: adjust these if the export moves
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent

WORKBOOK_FILE = DATA_DIR / "dashboard_export.xlsx"

# ---------------------------------------------------------------------------
# RAG thresholds (inclusive lower bounds, 0-100 scale)
# ---------------------------------------------------------------------------
RAG_GREEN_MIN = 70.0
RAG_AMBER_MIN = 40.0

SCORE_MIN = 0.0
SCORE_MAX = 100.0

RAG_LABELS: dict[str, str] = {
    "green": "On Track",
    "amber": "At Risk",
    "red": "Critical",
    "not-set": "Not Set",
}

# ---------------------------------------------------------------------------
# Reporting period & deadline
# ---------------------------------------------------------------------------
# Periods are calendar months keyed "YYYY-MM"
PERIOD_FORMAT = "%Y-%m"
PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

# Python weekday numbering: Monday=0 ... Friday=4
DEADLINE_WEEKDAY = 4
DEADLINE_WEEKDAY_NAME = "Friday"
DEADLINE_CUTOFF_HOUR = 23
DEADLINE_CUTOFF_MINUTE = 30
DEADLINE_CUTOFF_LABEL = "11:30 PM"

# ---------------------------------------------------------------------------
# Workbook import layout
# ---------------------------------------------------------------------------
OWNERS_SHEET = "Owners"
CUSTOMERS_SHEET = "Customers"
SCORES_SHEET = "Scores"

# Header cells used to locate the header row on each sheet
OWNERS_HEADER_SIGNATURE = {"id", "name", "email", "user_id"}
CUSTOMERS_HEADER_SIGNATURE = {"id", "name", "csm_id", "managed_services", "department_id"}
SCORES_HEADER_SIGNATURE = {"customer_id", "period", "value", "feature_id", "indicator_id"}

# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------
ADMIN_ALERT_LINK = "/data"
OWNER_REMINDER_LINK = "/csm/data-entry"
COMPLIANCE_LOG_ENTITY_NAME = "CSM Weekly Compliance"

# Presentation shows at most this many names per list before "+N more"
REPORT_NAME_LIMIT = 15
