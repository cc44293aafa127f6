#!/usr/bin/env python3
"""
FocusGuard configuration with validation.

All configs are frozen dataclasses for immutability.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Mapping, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# SUBJECTS
# =============================================================================

@dataclass(frozen=True)
class SubjectConfig:
    """Per-subject thresholds for a focus session."""
    duration_target_min: float = 180   # Planned session length
    warning_delay_sec: float = 20      # Absence before spoken warning
    alarm_delay_sec: float = 60        # Absence before looping alarm

    def __post_init__(self):
        if self.warning_delay_sec < 0:
            raise ValueError(f"warning_delay_sec must be >= 0, got {self.warning_delay_sec}")
        if self.warning_delay_sec >= self.alarm_delay_sec:
            raise ValueError(
                f"warning_delay_sec ({self.warning_delay_sec}) must be < "
                f"alarm_delay_sec ({self.alarm_delay_sec})"
            )
        if self.duration_target_min <= 0:
            raise ValueError(f"duration_target_min must be > 0, got {self.duration_target_min}")


DEFAULT_SUBJECT = "Self Study"

SUBJECT_PRESETS: Dict[str, SubjectConfig] = {
    "SQL": SubjectConfig(duration_target_min=120, warning_delay_sec=15, alarm_delay_sec=45),
    "Maths": SubjectConfig(duration_target_min=120, warning_delay_sec=10, alarm_delay_sec=30),
    "Physics": SubjectConfig(duration_target_min=120, warning_delay_sec=10, alarm_delay_sec=30),
    "Chemistry": SubjectConfig(duration_target_min=120, warning_delay_sec=10, alarm_delay_sec=30),
    DEFAULT_SUBJECT: SubjectConfig(duration_target_min=180, warning_delay_sec=20, alarm_delay_sec=60),
}


def get_subject_config(
    subject: Optional[str],
    subjects: Optional[Mapping[str, SubjectConfig]] = None
) -> SubjectConfig:
    """
    Look up a subject's config.

    Unknown subjects fall back to the "Self Study" preset; this is the
    documented behavior, not an error.
    """
    table = subjects if subjects is not None else SUBJECT_PRESETS
    if subject in table:
        return table[subject]
    logger.debug(f"Unknown subject {subject!r}, using {DEFAULT_SUBJECT!r}")
    return table.get(DEFAULT_SUBJECT, SUBJECT_PRESETS[DEFAULT_SUBJECT])


# =============================================================================
# SPEECH
# =============================================================================

@dataclass(frozen=True)
class PhraseTable:
    """Fixed phrases spoken on presence transitions. Empty string = silent."""
    warning: str = "Please come back to your desk."
    alarm: str = "You have been away too long. Get back to studying!"
    recovered_from_warning: str = "Welcome back."
    recovered_from_alarm: str = "Good, you are back. Let's keep going."

    def get(self, key: str) -> str:
        """Get phrase by key (warning, alarm, recovered_from_*)."""
        return getattr(self, key, "")


PHRASE_PRESETS: Dict[str, PhraseTable] = {
    "standard": PhraseTable(),
    "playful": PhraseTable(
        warning="Mumtaz will leave you if you stopped studying",
        alarm="Mumtaz will leave you if you stopped studying",
        recovered_from_warning="",
        recovered_from_alarm="Yeah I knew you love her",
    ),
}


@dataclass(frozen=True)
class VoiceConfig:
    """Voice output configuration."""
    rate: int = 150                 # Words per minute
    volume: float = 0.9             # 0.0 to 1.0
    alarm_text: str = "Alarm! Alarm!"
    alarm_interval_sec: float = 2.0  # Pause between alarm repeats

    def __post_init__(self):
        if not 0 <= self.volume <= 1:
            raise ValueError(f"volume must be 0-1, got {self.volume}")
        if self.alarm_interval_sec <= 0:
            raise ValueError(f"alarm_interval_sec must be > 0, got {self.alarm_interval_sec}")


# =============================================================================
# GESTURES
# =============================================================================

@dataclass(frozen=True)
class GestureConfig:
    """Gesture classification and air-writing configuration."""
    pinch_threshold: float = 0.05    # Normalized thumb-index distance
    color_cooldown_ms: float = 1000  # Between color cycles
    save_cooldown_ms: float = 2000   # Between image saves

    # Canvas
    undo_history_limit: int = 20     # Snapshots kept for undo
    erase_half_size: int = 40        # Eraser square is 2x this, in pixels
    default_thickness: int = 5
    min_thickness: int = 2
    max_thickness: int = 20
    cursor_radius: int = 10
    canvas_width: int = 1280
    canvas_height: int = 720

    def __post_init__(self):
        if not 0 < self.pinch_threshold < 1:
            raise ValueError(f"pinch_threshold must be 0-1, got {self.pinch_threshold}")
        if self.undo_history_limit < 1:
            raise ValueError(f"undo_history_limit must be >= 1, got {self.undo_history_limit}")
        if not self.min_thickness <= self.default_thickness <= self.max_thickness:
            raise ValueError(
                f"default_thickness must be within {self.min_thickness}-{self.max_thickness}, "
                f"got {self.default_thickness}"
            )


# =============================================================================
# APP CONFIG
# =============================================================================

@dataclass(frozen=True)
class FocusGuardConfig:
    """Complete application configuration."""
    subjects: Dict[str, SubjectConfig] = field(default_factory=lambda: dict(SUBJECT_PRESETS))
    gestures: GestureConfig = field(default_factory=GestureConfig)
    voice: VoiceConfig = field(default_factory=VoiceConfig)
    phrase_preset: str = "standard"

    # Perception
    camera_id: int = 0
    face_confidence: float = 0.5
    hand_confidence: float = 0.7

    # Persistence
    database_path: str = "focusguard.db"
    api_url: Optional[str] = None   # POST sessions here instead of sqlite

    def __post_init__(self):
        if self.phrase_preset not in PHRASE_PRESETS:
            raise ValueError(
                f"phrase_preset must be one of {sorted(PHRASE_PRESETS)}, got {self.phrase_preset!r}"
            )
        if not 0 <= self.face_confidence <= 1:
            raise ValueError(f"face_confidence must be 0-1, got {self.face_confidence}")
        if not 0 <= self.hand_confidence <= 1:
            raise ValueError(f"hand_confidence must be 0-1, got {self.hand_confidence}")

    @property
    def phrases(self) -> PhraseTable:
        return PHRASE_PRESETS[self.phrase_preset]

    def subject(self, name: Optional[str]) -> SubjectConfig:
        """Subject lookup with default fallback."""
        return get_subject_config(name, self.subjects)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FocusGuardConfig":
        """Create config from dictionary (e.g., YAML file)."""
        subjects = dict(SUBJECT_PRESETS)
        for name, values in (data.get("subjects") or {}).items():
            subjects[name] = SubjectConfig(**values)
        return cls(
            subjects=subjects,
            gestures=GestureConfig(**data.get("gestures", {})),
            voice=VoiceConfig(**data.get("voice", {})),
            phrase_preset=data.get("phrase_preset", "standard"),
            camera_id=data.get("camera_id", 0),
            face_confidence=data.get("face_confidence", 0.5),
            hand_confidence=data.get("hand_confidence", 0.7),
            database_path=data.get("database_path", "focusguard.db"),
            api_url=data.get("api_url"),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "FocusGuardConfig":
        """Load config from YAML file."""
        import yaml
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "subjects": {name: asdict(cfg) for name, cfg in self.subjects.items()},
            "gestures": asdict(self.gestures),
            "voice": asdict(self.voice),
            "phrase_preset": self.phrase_preset,
            "camera_id": self.camera_id,
            "face_confidence": self.face_confidence,
            "hand_confidence": self.hand_confidence,
            "database_path": self.database_path,
            "api_url": self.api_url,
        }
