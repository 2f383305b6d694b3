import os
from datetime import datetime, timezone
from typing import Optional

from flask import session

from pagecycle.interfaces.SessionStore import SessionStore


class FlaskSession(SessionStore):
    """
    Session store on top of the signed cookie session of Flask.

    The user is authenticated when AUTH_IDENTITY_KEY is present in the session. The company,
    profile and language of the user are kept under cmp_id, pro_id and lan_id.
    """

    def __init__(self, default_company_id: int = 1, default_language_id: Optional[int] = None):
        self.identity_key = os.getenv("AUTH_IDENTITY_KEY", "user_id")
        self.default_company_id = default_company_id
        self.default_language_id = default_language_id
        self.started = False

    def start(self):
        session.setdefault("started_at", datetime.now(timezone.utc).isoformat())
        self.started = True

    def save(self):
        session["last_seen_at"] = datetime.now(timezone.utc).isoformat()
        session.modified = True

    def is_anonymous(self) -> bool:
        return not session.get(self.identity_key)

    @property
    def cmp_id(self) -> int:
        return session.get("cmp_id", self.default_company_id)

    @property
    def pro_id(self) -> Optional[int]:
        if self.is_anonymous():
            return None
        return session.get("pro_id")

    @property
    def lan_id(self) -> Optional[int]:
        return session.get("lan_id", self.default_language_id)
