import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from .store import DocumentStore

ADMINS = "admins"


class AdminDirectory:
    """Admin accounts kept in the document store, passwords hashed."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _find(self, username: str) -> Optional[dict]:
        found = self.store.find(ADMINS, lambda d: d.get("username") == username)
        return found[0] if found else None

    def ensure_admin(self, username: str, password: str) -> None:
        """Create the account, or reset its password when it already exists."""
        pw_hash = generate_password_hash(password)
        existing = self._find(username)
        if existing is None:
            self.store.insert(ADMINS, {"username": username, "password_hash": pw_hash})
        elif not check_password_hash(existing.get("password_hash", ""), password):
            self.store.update(ADMINS, existing["id"], {"password_hash": pw_hash})

    def verify(self, username: Optional[str], password: Optional[str]) -> bool:
        if not isinstance(username, str) or not isinstance(password, str):
            return False
        if not (username and password):
            return False
        admin = self._find(username)
        if admin is None:
            return False
        return check_password_hash(admin.get("password_hash", ""), password)


@dataclass
class AdminSession:
    token: str
    username: str
    created_at: float = field(default_factory=time.time)


class SessionRegistry:
    """Logged-in admins. A session exists from login until logout."""

    def __init__(self) -> None:
        self._sessions: Dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def open(self, username: str) -> AdminSession:
        session = AdminSession(token=secrets.token_urlsafe(32), username=username)
        with self._lock:
            self._sessions[session.token] = session
        return session

    def get(self, token: Optional[str]) -> Optional[AdminSession]:
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def close(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            return self._sessions.pop(token, None) is not None
