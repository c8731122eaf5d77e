"""
Persisted login session for the command line.

A successful `login` records the authenticated user's id; later commands act
as that user until `logout`. Only the id is stored; the user record is always
re-read from the document, so a deleted user has no session.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..errors import PersistenceError
from ..util import utc_now_iso

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"


@dataclass(frozen=True)
class Session:
    user_id: str
    logged_in_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"userId": self.user_id, "loggedInAt": self.logged_in_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(user_id=str(data["userId"]), logged_in_at=str(data.get("loggedInAt", "")))


class SessionFile:
    def __init__(self, home: Path):
        self.path = home / SESSION_FILE

    def read(self) -> Session | None:
        if not self.path.exists():
            return None
        try:
            return Session.from_dict(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            # A broken session file just means "logged out"
            logger.error("Error getting current session from %s: %s", self.path, exc)
            self.clear()
            return None

    def write(self, user_id: str) -> Session:
        session = Session(user_id=user_id, logged_in_at=utc_now_iso())
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(session.to_dict()), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not write session to {self.path}: {exc}") from exc
        return session

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
