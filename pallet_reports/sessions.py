from typing import Any

from . import settings, utils
from .schemas import Session

REPORT_SESSIONS = [Session(code) for code in settings.SESSION_ORDER]


def classify_session(temperature: Any) -> Session:
    """
    Maps a temperature reading to its storage session.

    Blank readings count as 0 (frozen). Readings that are not numbers are
    UNCLASSIFIABLE and stay out of every session-filtered total. Each
    threshold is inclusive for the colder session: 0 is frozen, 10 is
    refrigerated.
    """
    if temperature is None or (isinstance(temperature, str) and not temperature.strip()):
        value = 0.0
    else:
        value = utils.parse_number(temperature)
        if value is None:
            return Session.UNCLASSIFIABLE

    if value <= settings.FROZEN_MAX_TEMPERATURE:
        return Session.FROZEN
    if value <= settings.REFRIGERATED_MAX_TEMPERATURE:
        return Session.REFRIGERATED
    return Session.DRY


def parse_session(value: Any) -> Session | None:
    """Session from a user-supplied code ("co", " RE "); None when blank or unknown."""
    if value is None:
        return None
    if isinstance(value, Session):
        return value
    code = str(value).strip().upper()
    if code in settings.SESSION_ORDER:
        return Session(code)
    return None
