#!/usr/bin/env python3
"""
HTTP session sink.

Posts finished sessions to a FocusGuard-compatible server
(POST /api/sessions, reply {"id": N}).
"""

import logging
from typing import Dict, List, Optional

import requests

from ..core.models import SessionRecord
from .session_db import summarize_sessions

logger = logging.getLogger(__name__)


class HttpSessionSink:
    """SessionSink that stores records through a REST endpoint. No retries."""

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.endpoint = base_url.rstrip("/") + "/api/sessions"
        self.timeout = timeout
        self._http = session or requests.Session()

    def save(self, record: SessionRecord) -> Optional[int]:
        try:
            response = self._http.post(self.endpoint, json=record.to_dict(), timeout=self.timeout)
            response.raise_for_status()
            session_id = response.json().get("id")
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to save session to {self.endpoint}: {e}")
            return None

        logger.info(f"Posted session {session_id} to {self.endpoint}")
        return session_id

    def recent(self, limit: int = 50, subject: Optional[str] = None) -> List[SessionRecord]:
        """Fetch stored sessions from the server (newest first)."""
        try:
            response = self._http.get(self.endpoint, timeout=self.timeout)
            response.raise_for_status()
            records = [SessionRecord.from_dict(row) for row in response.json()]
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f"Failed to load sessions from {self.endpoint}: {e}")
            return []

        if subject:
            records = [r for r in records if r.subject == subject]
        return records[:limit]

    def summary(self, limit: int = 50) -> Dict:
        """Same aggregates as SessionDB.summary, over the server's sessions."""
        return summarize_sessions(self.recent(limit))

    def close(self):
        self._http.close()
