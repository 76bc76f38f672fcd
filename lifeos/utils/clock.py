"""
Single source of "now" for the services.

The pure scoring/parsing modules take the evaluation instant as a
parameter; request handlers read it here so the user's configured zone
decides where one calendar day ends and the next begins.
"""

from datetime import date, datetime

from lifeos.config import settings


def now_local() -> datetime:
    """Current instant as an aware datetime in the configured zone."""
    return datetime.now(settings.local_timezone())


def today_local() -> date:
    """Current calendar date in the configured zone."""
    return now_local().date()
