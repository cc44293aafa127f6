#!/usr/bin/env python3
"""
Presence session tracker.

Turns a noisy per-frame "face present?" stream into timed state
transitions and a graded session record:

    UNKNOWN → PRESENT ⟷ (absence run) → WARNING → ABSENT
                  ↑__________________________________|
                        any present sample

Rules:
- Every sample adds the elapsed wall-clock delta (clamped at 0) to the
  present or absent bucket.
- An absence run is a contiguous stretch of absent samples. It is counted
  once, when its first sample arrives.
- warning_delay_sec into a run: speak the warning phrase, state WARNING.
- alarm_delay_sec into a run: start the alarm, state ABSENT. The alarm
  fires once per run; the state stays ABSENT until a present sample.
- A present sample closes the run. If the alarm was running it is stopped.
"""

import logging
import time
from typing import List, Optional

from ..core.config import PhraseTable, SubjectConfig, get_subject_config, PHRASE_PRESETS
from ..core.events import EventBus, EventType
from ..core.exceptions import SessionStateError
from ..core.models import (
    Alert, AlertKind, PresenceState, SessionAccumulator, SessionRecord, SessionStats
)
from ..core.protocols import AlertSink
from .grading import build_record, focus_percentage

logger = logging.getLogger(__name__)


def now_ms() -> float:
    """Current wall-clock time in milliseconds."""
    return time.time() * 1000


class SessionTracker:
    """
    Presence state machine for a single focus session.

    Not thread-safe: feed it from one frame callback. Alerts are returned
    from ingest() and also dispatched to the sink, if one is given.
    """

    def __init__(
        self,
        subject: str,
        config: Optional[SubjectConfig] = None,
        sink: Optional[AlertSink] = None,
        phrases: Optional[PhraseTable] = None,
        bus: Optional[EventBus] = None
    ):
        """
        Args:
            subject: Subject name, used for config lookup and the record
            config: Explicit thresholds (default: preset for subject)
            sink: Speech/alarm output
            phrases: Spoken phrases (default: "standard" preset)
            bus: Event bus for transition events
        """
        self.subject = subject
        self.config = config or get_subject_config(subject)
        self.sink = sink
        self.phrases = phrases or PHRASE_PRESETS["standard"]
        self.bus = bus

        self._acc: Optional[SessionAccumulator] = None
        self._record: Optional[SessionRecord] = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, timestamp_ms: Optional[float] = None) -> SessionAccumulator:
        """Begin the session. State starts as UNKNOWN."""
        if self._acc is not None:
            raise SessionStateError(f"Session for {self.subject!r} already started")

        ts = now_ms() if timestamp_ms is None else timestamp_ms
        self._acc = SessionAccumulator(session_start_ms=ts, last_sample_ms=ts)

        logger.info(
            f"Session started: {self.subject} (warning={self.config.warning_delay_sec}s, "
            f"alarm={self.config.alarm_delay_sec}s)"
        )
        self._publish(EventType.SESSION_STARTED, ts, subject=self.subject)
        return self._acc

    def pause(self, timestamp_ms: Optional[float] = None) -> None:
        """Stop accruing time. ingest() is a no-op until resume()."""
        acc = self._require_active()
        if acc.paused:
            return
        ts = now_ms() if timestamp_ms is None else timestamp_ms
        acc.paused = True
        acc.paused_at_ms = ts
        logger.debug(f"Session paused at {ts:.0f}")
        self._publish(EventType.SESSION_PAUSED, ts)

    def resume(self, timestamp_ms: Optional[float] = None) -> None:
        """
        Resume after pause().

        The paused interval is skipped: the next delta is measured from
        now, and a running absence run is shifted so its timers do not
        advance while paused.
        """
        acc = self._require_active()
        if not acc.paused:
            return
        ts = now_ms() if timestamp_ms is None else timestamp_ms
        paused_for = max(0.0, ts - acc.paused_at_ms)

        if acc.current_absence_started_at is not None:
            acc.current_absence_started_at += paused_for
        acc.last_sample_ms = ts
        acc.paused = False
        acc.paused_at_ms = None

        logger.debug(f"Session resumed after {paused_for / 1000:.1f}s")
        self._publish(EventType.SESSION_RESUMED, ts, paused_seconds=paused_for / 1000)

    def finalize(self, timestamp_ms: Optional[float] = None) -> SessionRecord:
        """
        End the session and produce its record.

        Terminal: the tracker rejects every later call.
        """
        acc = self._require_active()
        ts = now_ms() if timestamp_ms is None else timestamp_ms

        if acc.alarm_active:
            self._dispatch([Alert(kind=AlertKind.ALARM_STOP, timestamp_ms=ts)])
            acc.alarm_active = False

        record = build_record(self.subject, acc, ts)
        self._record = record

        logger.info(
            f"Session finalized: {record.subject} {record.duration_mins}min, "
            f"focus={record.focus_percentage}% ({record.grade.value}), "
            f"absences={record.absences_count}"
        )
        self._publish(EventType.SESSION_FINALIZED, ts, record=record.to_dict())
        return record

    # =========================================================================
    # SAMPLES
    # =========================================================================

    def ingest(self, present: bool, timestamp_ms: Optional[float] = None) -> List[Alert]:
        """
        Feed one detection result.

        Args:
            present: Whether a face was detected in this frame
            timestamp_ms: Wall-clock time of the frame

        Returns:
            Alerts raised by this sample (already sent to the sink)
        """
        acc = self._require_active()
        if acc.paused:
            return []

        ts = now_ms() if timestamp_ms is None else timestamp_ms
        delta_sec = max(0.0, ts - acc.last_sample_ms) / 1000
        acc.last_sample_ms = ts

        if present:
            alerts = self._on_present(acc, delta_sec, ts)
        else:
            alerts = self._on_absent(acc, delta_sec, ts)

        self._dispatch(alerts)
        return alerts

    def _on_present(self, acc: SessionAccumulator, delta_sec: float, ts: float) -> List[Alert]:
        acc.present_seconds += delta_sec
        alerts: List[Alert] = []
        previous = acc.state

        if previous != PresenceState.PRESENT:
            if acc.alarm_active:
                alerts.append(Alert(kind=AlertKind.ALARM_STOP, timestamp_ms=ts))
                alerts.extend(self._speech("recovered_from_alarm", ts))
                self._publish(EventType.ALARM_STOPPED, ts)
            elif acc.warning_fired:
                alerts.extend(self._speech("recovered_from_warning", ts))

        # A present sample always closes the absence run, even one that
        # never reached the warning threshold.
        acc.current_absence_started_at = None
        acc.warning_fired = False
        acc.alarm_active = False
        self._set_state(acc, PresenceState.PRESENT, ts)
        return alerts

    def _on_absent(self, acc: SessionAccumulator, delta_sec: float, ts: float) -> List[Alert]:
        acc.absent_seconds += delta_sec
        alerts: List[Alert] = []

        if not acc.in_absence_run:
            acc.current_absence_started_at = ts
            acc.absences_count += 1
            logger.debug(f"Absence #{acc.absences_count} started at {ts:.0f}")
            self._publish(EventType.ABSENCE_STARTED, ts, absences_count=acc.absences_count)

        elapsed = max(0.0, ts - acc.current_absence_started_at) / 1000

        # Alarm is checked first; past it the warning threshold is moot
        if elapsed >= self.config.alarm_delay_sec:
            if not acc.alarm_active:
                acc.alarm_active = True
                self._set_state(acc, PresenceState.ABSENT, ts)
                alerts.append(Alert(kind=AlertKind.ALARM_START, timestamp_ms=ts))
                alerts.extend(self._speech("alarm", ts))
                logger.info(f"Alarm: absent for {elapsed:.1f}s")
                self._publish(EventType.ALARM_STARTED, ts, elapsed_sec=elapsed)
        elif elapsed >= self.config.warning_delay_sec:
            # Never step back from ABSENT within the same run
            if not acc.warning_fired and not acc.alarm_active:
                acc.warning_fired = True
                self._set_state(acc, PresenceState.WARNING, ts)
                alerts.extend(self._speech("warning", ts))
                logger.info(f"Warning: absent for {elapsed:.1f}s")
                self._publish(EventType.WARNING_FIRED, ts, elapsed_sec=elapsed)

        return alerts

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require_active(self) -> SessionAccumulator:
        if self._acc is None:
            raise SessionStateError("Session not started; call start() first")
        if self._record is not None:
            raise SessionStateError("Session already finalized")
        return self._acc

    def _set_state(self, acc: SessionAccumulator, state: PresenceState, ts: float) -> None:
        if acc.state == state:
            return
        old = acc.state
        acc.state = state
        logger.debug(f"{self.subject}: {old.name} → {state.name}")
        self._publish(EventType.PRESENCE_CHANGED, ts, previous=old.value, state=state.value)

    def _speech(self, key: str, ts: float) -> List[Alert]:
        text = self.phrases.get(key)
        if not text:
            return []
        return [Alert(kind=AlertKind.SPEAK, phrase_key=key, text=text, timestamp_ms=ts)]

    def _dispatch(self, alerts: List[Alert]) -> None:
        """Fire-and-forget delivery. Sink failures are logged, not raised."""
        if self.sink is None:
            return
        for alert in alerts:
            try:
                if alert.kind == AlertKind.SPEAK:
                    self.sink.speak(alert.text)
                elif alert.kind == AlertKind.ALARM_START:
                    self.sink.play_alarm()
                elif alert.kind == AlertKind.ALARM_STOP:
                    self.sink.stop_alarm()
            except Exception as e:
                logger.error(f"Alert sink failed on {alert.kind.name}: {e}")

    def _publish(self, event_type: EventType, ts: float, **data) -> None:
        if self.bus is not None:
            self.bus.publish(event_type, source="session", timestamp_ms=ts, **data)

    # =========================================================================
    # INSPECTION
    # =========================================================================

    @property
    def state(self) -> PresenceState:
        return self._acc.state if self._acc else PresenceState.UNKNOWN

    @property
    def is_paused(self) -> bool:
        return bool(self._acc and self._acc.paused)

    @property
    def is_alarm_active(self) -> bool:
        return bool(self._acc and self._acc.alarm_active)

    @property
    def is_finalized(self) -> bool:
        return self._record is not None

    @property
    def accumulator(self) -> Optional[SessionAccumulator]:
        return self._acc

    @property
    def record(self) -> Optional[SessionRecord]:
        return self._record

    def elapsed_absence_sec(self, timestamp_ms: Optional[float] = None) -> float:
        """Seconds into the current absence run (0 when present)."""
        if self._acc is None or not self._acc.in_absence_run:
            return 0.0
        if timestamp_ms is None:
            timestamp_ms = self._acc.last_sample_ms
        return max(0.0, timestamp_ms - self._acc.current_absence_started_at) / 1000

    def stats(self) -> SessionStats:
        """
        Live snapshot for a HUD.

        Focus reads 100% before anything has been tracked, unlike the
        final record which reports 0.
        """
        acc = self._acc
        if acc is None:
            raise SessionStateError("Session not started; call start() first")
        total = acc.tracked_seconds
        target_sec = self.config.duration_target_min * 60
        return SessionStats(
            total_seconds=total,
            present_seconds=acc.present_seconds,
            absent_seconds=acc.absent_seconds,
            focus_percentage=focus_percentage(acc.present_seconds, acc.absent_seconds, empty=100.0),
            absences_count=acc.absences_count,
            session_start_ms=acc.session_start_ms,
            state=acc.state,
            elapsed_absence_sec=self.elapsed_absence_sec(),
            target_progress=min(1.0, total / target_sec),
        )
