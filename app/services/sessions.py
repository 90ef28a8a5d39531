"""
Session manager: opaque admin session tokens with an absolute TTL.

Expiry is lazy: a lookup that finds an expired record deletes it and reports
the session as absent. `sweep_expired` is called best-effort on every request
to keep the table small.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple

from constants import USER_AGENT_MAX_LENGTH
from repositories.session_repository import SessionRepository
from utils import ensure_utc, now_utc

logger = logging.getLogger("main")

# 32 bytes -> 256 bits of entropy
SESSION_TOKEN_BYTES = 32


@dataclass
class SessionRecord:
    id: str
    created_at: datetime
    expires_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class SessionStore:
    """Narrow storage interface the session manager depends on"""

    def add(self, record: SessionRecord):
        raise NotImplementedError

    def get(self, session_id: str):
        raise NotImplementedError

    def delete(self, session_id: str) -> bool:
        raise NotImplementedError

    def delete_expired(self, now: datetime) -> int:
        raise NotImplementedError


class SqlSessionStore(SessionStore):
    """Sessions table, through the repository"""

    def __init__(self, repository=SessionRepository):
        self.repository = repository

    def add(self, record: SessionRecord):
        return self.repository.create(
            id=record.id,
            created_at=record.created_at,
            expires_at=record.expires_at,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
        )

    def get(self, session_id: str):
        return self.repository.get_by_id(session_id)

    def delete(self, session_id: str) -> bool:
        return self.repository.delete(session_id)

    def delete_expired(self, now: datetime) -> int:
        return self.repository.delete_expired(now)


class MemorySessionStore(SessionStore):
    """Dict-backed store, for tests and tooling that should not touch the database"""

    def __init__(self):
        self.records: Dict[str, SessionRecord] = {}

    def add(self, record: SessionRecord):
        self.records[record.id] = record
        return record

    def get(self, session_id: str):
        return self.records.get(session_id)

    def delete(self, session_id: str) -> bool:
        return self.records.pop(session_id, None) is not None

    def delete_expired(self, now: datetime) -> int:
        expired = [sid for sid, record in self.records.items() if ensure_utc(record.expires_at) < now]
        for sid in expired:
            del self.records[sid]
        return len(expired)


class SessionManager:
    def __init__(self, store: SessionStore, ttl, clock=now_utc):
        self.store = store
        self.ttl = ttl
        self.clock = clock

    def create(self, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> Tuple[str, datetime]:
        now = self.clock()
        session_id = secrets.token_urlsafe(SESSION_TOKEN_BYTES)
        expires_at = now + self.ttl
        if user_agent:
            user_agent = user_agent[:USER_AGENT_MAX_LENGTH]
        self.store.add(
            SessionRecord(
                id=session_id,
                created_at=now,
                expires_at=expires_at,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        return session_id, expires_at

    def lookup(self, session_id: Optional[str]):
        if not session_id:
            return None
        record = self.store.get(session_id)
        if record is None:
            return None
        if ensure_utc(record.expires_at) < self.clock():
            logger.debug("Dropping expired session on lookup")
            self.store.delete(session_id)
            return None
        return record

    def revoke(self, session_id: Optional[str]):
        if not session_id:
            return
        self.store.delete(session_id)

    def sweep_expired(self) -> int:
        try:
            removed = self.store.delete_expired(self.clock())
        except Exception as e:
            # Housekeeping only, never fails the request
            logger.error(f"Failed to prune sessions: {e}")
            return 0
        if removed:
            logger.debug(f"Pruned {removed} expired sessions")
        return removed
