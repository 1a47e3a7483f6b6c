"""
Access gate for the premium savings comparison
Tracks the one-time unlock flag and consumes payment completion markers
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, MutableMapping, Optional
from urllib.parse import parse_qsl, unquote_plus, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

ACCESS_KEY = 'roiCalculatorAccess'
ACCESS_VALUE = 'true'
COMPLETION_MARKER = 'session_id'


class AccessStatus(Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


class MemoryAccessStore:
    """Process-local key/value store"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str):
        self.values[key] = value


class SessionAccessStore:
    """
    Key/value store backed by a Flask session

    The session is marked permanent so the cookie outlives the browser
    session, standing in for durable browser storage.
    """

    def __init__(self, session: MutableMapping):
        self.session = session

    def get(self, key: str) -> Optional[str]:
        return self.session.get(key)

    def set(self, key: str, value: str):
        self.session.permanent = True
        self.session[key] = value


class AccessState:
    """Durable unlock flag with exactly two operations: load and set(True)"""

    def __init__(self, store):
        self.store = store

    def load(self) -> bool:
        return self.store.get(ACCESS_KEY) == ACCESS_VALUE

    def set(self, unlocked: bool):
        if not unlocked:
            raise ValueError("Access cannot be revoked once granted")
        self.store.set(ACCESS_KEY, ACCESS_VALUE)


@dataclass
class StartupResult:
    status: AccessStatus
    session_id: Optional[str]
    clean_url: str

    @property
    def unlocked(self) -> bool:
        return self.status == AccessStatus.UNLOCKED

    @property
    def marker_consumed(self) -> bool:
        return self.session_id is not None


def find_completion_marker(url: str) -> Optional[str]:
    """Return the non-empty session_id query value, if any"""
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == COMPLETION_MARKER and value:
            return value
    return None


def strip_completion_marker(url: str) -> str:
    """Remove session_id from the query string, leaving the other segments as written"""
    parts = urlsplit(url)
    segments = [
        segment
        for segment in parts.query.split('&')
        if unquote_plus(segment.partition('=')[0]) != COMPLETION_MARKER
    ]
    query = '&'.join(segments)
    return urlunsplit((parts.scheme, parts.netloc, parts.path or '/', query, parts.fragment))


class AccessGate:
    """
    Two-state gate: locked -> unlocked

    Unlocked is absorbing; nothing in this class moves back to locked.
    """

    def __init__(self, access: AccessState):
        self.access = access
        self.status = AccessStatus.LOCKED

    @property
    def unlocked(self) -> bool:
        return self.status == AccessStatus.UNLOCKED

    def startup(self, url: str) -> StartupResult:
        """
        Run the page-load checks against the entry address

        1. A previously stored flag unlocks immediately.
        2. A completion marker unlocks, persists the flag, and is stripped
           from the address returned as clean_url.
        """
        if self.access.load():
            self.status = AccessStatus.UNLOCKED

        session_id = find_completion_marker(url)
        if session_id is None:
            return StartupResult(self.status, None, url)

        self.access.set(True)
        self.status = AccessStatus.UNLOCKED
        logger.info("Savings comparison unlocked by checkout session %s", session_id)
        return StartupResult(self.status, session_id, strip_completion_marker(url))
