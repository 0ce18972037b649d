import enum
from datetime import datetime


class SessionState(str, enum.Enum):
    NOT_YET_OPEN = "not_yet_open"
    OPEN = "open"
    CLOSED = "closed"


def session_state(quiz_session, now: datetime) -> SessionState:
    """
    Evaluate the session window against ``now``.

    There is no stored state: a session is NOT_YET_OPEN before ``open_from``,
    CLOSED once ``open_until`` (if set) has passed, and OPEN otherwise.
    Both window edges are inclusive.
    """
    if now < quiz_session.open_from:
        return SessionState.NOT_YET_OPEN

    if quiz_session.open_until is not None and now > quiz_session.open_until:
        return SessionState.CLOSED

    return SessionState.OPEN


def results_visible(quiz_session, now: datetime) -> bool:
    """
    Open-ended sessions show results straight away. Timed sessions hold
    them back until the session is CLOSED so early finishers cannot pass
    answers on to participants still working.
    """
    if quiz_session.open_until is None:
        return True
    return session_state(quiz_session, now) is SessionState.CLOSED
