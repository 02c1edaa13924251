from dataclasses import dataclass, field
from typing import List, Optional
import time

from resonance.core.state import SessionPhase
from resonance.signals.interventions import FrequencyOffer


@dataclass
class SessionState:
    """
    Transient counters for ONE live connection.
    Never persisted directly; only a SessionSummary built from it is.
    """
    start_time: float
    started_at: float = field(default_factory=time.time)

    message_count: int = 0
    user_word_count: int = 0
    last_user_message: str = ""
    sound_enabled: Optional[bool] = None

    intervention_count: int = 0
    physical_interventions_used: List[str] = field(default_factory=list)

    phase: SessionPhase = SessionPhase.GREETING


@dataclass
class TurnUpdate:
    """
    Result of feeding one transcript into the session engine.
    """
    word_count: int
    is_long: bool
    is_repetitive: bool
    session_duration: float
    hints: List[str] = field(default_factory=list)

    @property
    def context(self) -> str:
        return "".join(f"\n\n{hint}" for hint in self.hints)


@dataclass
class ReplySignals:
    intervention: Optional[str] = None
    frequency_offer: Optional[FrequencyOffer] = None
