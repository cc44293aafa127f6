# Alert Output - speech and alarm sinks
from .voice import VoiceAlertSink, LoggingAlertSink

__all__ = ["VoiceAlertSink", "LoggingAlertSink"]
