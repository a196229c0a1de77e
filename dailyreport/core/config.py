import logging
from pydantic import field_validator
from pydantic_settings import BaseSettings

# --- DESIGNATIONS (closed enumeration) ---
DESIGNATIONS = [
    "ASSISTANT BRANCH MANAGER",
    "AREA SALES MANAGER",
    "BRANCH CREDIT MANAGER",
    "BUSINESS DEVELOPMENT EXECUTIVE",
    "BUSINESS DEVELOPMENT OFFICER",
    "BRANCH MANAGER",
    "SENIOR BRANCH MANAGER",
    "BRANCH OFFICER",
    "BRANCH OPERATIONS MANAGER",
    "BRANCH SALES MANAGER",
    "CUSTOMER SERVICE OFFICER",
    "RO-CASA",
    "ZONAL MANAGER",
    "DISTRICT HEAD",
    "SENIOR DISTRICT HEAD",
    "ASSISTANT DISTRICT HEAD",
    "SALES MANAGER-CASA",
    "SALES MANAGER-DDS",
    "SALES MANAGER-SMBG",
    "TL-CASA",
    "TL-DDS",
    "TL-SMBG",
    "FUNCTION",
    "ADMINISTRATOR",
]


class Settings(BaseSettings):
    """
    Application settings, read from the environment or a `.env` file.
    """
    SECRET_KEY: str = "daily-reporting-secret-change-me"
    LOG_LEVEL: str = "INFO"
    APP_TIMEZONE: str = "Asia/Kolkata"

    # Load the demo organisation when the app starts
    SEED_DEMO_DATA: bool = True

    # Null out reports_to_employee_code of direct reports when their manager is deleted
    CLEAR_DANGLING_REPORTS: bool = False

    # Designation given to imported rows whose designation is not recognised
    DEFAULT_DESIGNATION: str = "BRANCH OFFICER"

    # Passwords of the two system identities
    ADMIN_PASSWORD: str = "admin123"
    ZM_PASSWORD: str = "zm123"

    @field_validator("DEFAULT_DESIGNATION", mode="before")
    def check_default_designation(cls, v: str) -> str:
        v = str(v).strip().upper()
        if v not in DESIGNATIONS:
            raise ValueError(f"DEFAULT_DESIGNATION '{v}' is not a known designation")
        return v

    class Config:
        case_sensitive = True
        env_file = ".env"


# One settings object shared across the application
settings = Settings()


# --- LOGGING ---
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger("daily-reporting")


# --- CONSTANTS ---

# Sentinel for "unassigned" branch / zone / region / district
NA = "N/A"

# Records backing the two system identities
ADMIN_USER_ID = "admin-user-0"
ZONAL_MANAGER_USER_ID = "zm-user-0"

# Staff spreadsheet columns, in export order
STAFF_COLUMNS = [
    "Staff Name",
    "Employee Code",
    "Designation",
    "Branch Name",
    "District Name",
    "Zone",
    "Region",
    "Contact Number",
    "Managed Zones",
    "Managed Branches",
    "Reports To Employee Code",
]

BRANCH_COLUMNS = [
    "Branch Name",
    "Zone",
    "Region",
    "District Name",
    "Branch Manager Name",
    "Branch Manager Code",
    "Mobile Number",
]

ROLE_MAP = {
    "admin": "Administrator",
    "manager": "Manager",
    "user": "User",
}

# --- DAILY REPORTING METRICS ---

# Product metrics a staff member reports each day and projects ahead
METRIC_NAMES = [
    "DDS AMT", "DAM AMT", "MIS AMT", "FD AMT", "RD AMT", "SMBG AMT",
    "CUR-GOLD-AMT", "CUR-WEL-AMT", "SAVS-AMT", "INSU AMT", "TASC AMT", "SHARE AMT",
    "DDS AC", "DAM AC", "MIS AC", "FD AC", "RD AC", "SMBG AC",
    "CUR-GOLD-AC", "CUR-WEL-AC", "SAVS-AC", "NEW-SS/AGNT", "INSU AC", "TASC AC", "SHARE AC",
]

# Totals are always computed from the metrics above, never taken from input
TOTAL_ACCOUNTS = "TOTAL ACCOUNTS"
TOTAL_AMOUNTS = "TOTAL AMOUNTS"
GRAND_TOTAL_AC = "GRAND TOTAL AC"
GRAND_TOTAL_AMT = "GRAND TOTAL AMT"
TOTAL_METRIC_NAMES = [TOTAL_ACCOUNTS, TOTAL_AMOUNTS, GRAND_TOTAL_AC, GRAND_TOTAL_AMT]

ACHIEVEMENT_COLUMNS = ["Date", "Employee Code", "Staff Name", "Branch Name"] + METRIC_NAMES + TOTAL_METRIC_NAMES
