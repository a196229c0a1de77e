from datetime import datetime
from pytz import timezone

from .config import settings

# --- APP CONSTANTS ---
APP_TZ = timezone(settings.APP_TIMEZONE)


def now_local() -> datetime:
    return datetime.now(APP_TZ)


def export_filename(prefix: str, extension: str = "xlsx") -> str:
    """e.g. staff_export_20251020_234800.xlsx"""
    return f"{prefix}_{now_local().strftime('%Y%m%d_%H%M%S')}.{extension}"
