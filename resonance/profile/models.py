from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import time


def _iso_now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _non_negative_int(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class SessionSummary:
    """
    Close-out record of ONE session, as reported by the client.
    """
    state: Optional[str] = None
    frequency: Optional[int] = None
    duration: float = 0.0
    outcome: Optional[str] = None
    interventions_used: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=_iso_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "state": self.state,
            "frequency": self.frequency,
            "duration": self.duration,
            "outcome": self.outcome,
            "interventionsUsed": list(self.interventions_used),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SessionSummary":
        frequency = raw.get("frequency")
        try:
            frequency = int(frequency) if frequency is not None else None
        except (TypeError, ValueError):
            frequency = None
        try:
            duration = float(raw.get("duration") or 0.0)
        except (TypeError, ValueError):
            duration = 0.0
        used = raw.get("interventionsUsed")
        return cls(
            state=_optional_str(raw.get("state")),
            frequency=frequency,
            duration=duration,
            outcome=_optional_str(raw.get("outcome")),
            interventions_used=[str(item) for item in used] if isinstance(used, list) else [],
            timestamp=str(raw.get("timestamp") or _iso_now()),
        )


@dataclass
class VoiceNote:
    text: str
    state: Optional[str] = None
    timestamp: str = field(default_factory=_iso_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "text": self.text,
            "state": self.state,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "VoiceNote":
        return cls(
            text=str(raw.get("text") or ""),
            state=_optional_str(raw.get("state")),
            timestamp=str(raw.get("timestamp") or _iso_now()),
        )


@dataclass
class UserProfile:
    """
    Durable behavioral aggregate for ONE identity.
    Sequences are append-only and counters never decrease.
    """
    sessions: List[SessionSummary] = field(default_factory=list)
    patterns: Dict[str, int] = field(default_factory=dict)
    effective_interventions: Dict[str, int] = field(default_factory=dict)
    voice_notes: List[VoiceNote] = field(default_factory=list)
    total_sessions: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessions": [item.to_dict() for item in self.sessions],
            "patterns": dict(self.patterns),
            "effectiveInterventions": dict(self.effective_interventions),
            "voiceNotes": [item.to_dict() for item in self.voice_notes],
            "totalSessions": self.total_sessions,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "UserProfile":
        if not isinstance(raw, dict):
            return cls()

        sessions_raw = raw.get("sessions") if isinstance(raw.get("sessions"), list) else []
        sessions = [SessionSummary.from_dict(item) for item in sessions_raw if isinstance(item, dict)]

        notes_raw = raw.get("voiceNotes") if isinstance(raw.get("voiceNotes"), list) else []
        notes = [VoiceNote.from_dict(item) for item in notes_raw if isinstance(item, dict)]

        patterns_raw = raw.get("patterns") if isinstance(raw.get("patterns"), dict) else {}
        effective_raw = (
            raw.get("effectiveInterventions") if isinstance(raw.get("effectiveInterventions"), dict) else {}
        )

        return cls(
            sessions=sessions,
            patterns={str(k): _non_negative_int(v) for k, v in patterns_raw.items()},
            effective_interventions={str(k): _non_negative_int(v) for k, v in effective_raw.items()},
            voice_notes=notes,
            total_sessions=len(sessions),
        )
