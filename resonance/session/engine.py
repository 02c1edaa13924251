import logging
import time
from typing import Callable, Optional

from resonance.core.state import SessionPhase
from resonance.profile.models import SessionSummary
from resonance.prompts import (
    HINT_CIRCLING,
    HINT_LONG_SESSION,
    HINT_TALKING_A_LOT,
    INTERVENTION_FOLLOW_UP_TEXT,
)
from resonance.session.state import ReplySignals, SessionState, TurnUpdate
from resonance.signals import rules
from resonance.signals.interventions import classify_frequency_offer, classify_intervention
from resonance.signals.speech import count_words, is_long_message, is_repetitive

logger = logging.getLogger("resonance.session.engine")


class SessionEngine:
    """
    State machine for ONE connection.

    greeting -> active -> intervening -> active ... -> closed

    Hints are decided in begin_turn() before the reply is generated;
    classification happens in record_reply() after it. Callers must keep
    that order.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.state = SessionState(start_time=clock())

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    def elapsed_seconds(self) -> float:
        return max(0.0, self._clock() - self.state.start_time)

    # -------------------------
    # TURN INPUT
    # -------------------------

    def begin_turn(self, transcript: str) -> TurnUpdate:
        state = self.state

        word_count = count_words(transcript)
        state.message_count += 1
        state.user_word_count += word_count
        session_duration = self.elapsed_seconds()

        long_message = is_long_message(word_count)
        repetitive = is_repetitive(transcript, state.last_user_message)

        hints: list[str] = []
        if long_message and state.intervention_count < rules.MAX_LOAD_HINTS:
            hints.append(HINT_TALKING_A_LOT)
            state.intervention_count += 1

        if repetitive and state.intervention_count < rules.MAX_SESSION_HINTS:
            hints.append(HINT_CIRCLING)
            state.intervention_count += 1

        # Not counted against the hint budget, so it can repeat every turn.
        if session_duration > rules.LONG_SESSION_SEC and state.intervention_count < rules.MAX_SESSION_HINTS:
            hints.append(HINT_LONG_SESSION)

        # Compare against the previous utterance first, then remember this one.
        state.last_user_message = transcript

        if state.phase == SessionPhase.GREETING:
            state.phase = SessionPhase.ACTIVE

        return TurnUpdate(
            word_count=word_count,
            is_long=long_message,
            is_repetitive=repetitive,
            session_duration=session_duration,
            hints=hints,
        )

    # -------------------------
    # REPLY CLASSIFICATION
    # -------------------------

    def record_reply(self, reply_text: str) -> ReplySignals:
        intervention = classify_intervention(reply_text)
        frequency_offer = classify_frequency_offer(reply_text)

        if intervention:
            self.state.physical_interventions_used.append(intervention)
            self.state.phase = SessionPhase.INTERVENING

        return ReplySignals(intervention=intervention, frequency_offer=frequency_offer)

    # -------------------------
    # LIFECYCLE SIGNALS
    # -------------------------

    def complete_intervention(self) -> str:
        if self.state.phase == SessionPhase.INTERVENING:
            self.state.phase = SessionPhase.ACTIVE
        return INTERVENTION_FOLLOW_UP_TEXT

    def record_sound_choice(self, enabled: bool) -> None:
        self.state.sound_enabled = bool(enabled)

    def build_summary(
        self,
        state: Optional[str],
        frequency: Optional[int],
        duration: float,
        outcome: Optional[str],
    ) -> SessionSummary:
        return SessionSummary(
            state=state,
            frequency=frequency,
            duration=duration,
            outcome=outcome,
            interventions_used=list(self.state.physical_interventions_used),
        )

    def close(self) -> None:
        self.state.phase = SessionPhase.CLOSED
        logger.info(
            "Session closed | messages=%s words=%s hints=%s interventions=%s",
            self.state.message_count,
            self.state.user_word_count,
            self.state.intervention_count,
            len(self.state.physical_interventions_used),
        )
