# Storage Layer - Session History and Persistence
from .session_db import SessionDB, summarize_sessions
from .http_sink import HttpSessionSink

__all__ = ["SessionDB", "HttpSessionSink", "summarize_sessions"]
