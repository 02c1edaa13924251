from __future__ import annotations

import logging
import time
from typing import Callable

from resonance.core.logger import log_event
from resonance.errors import MalformedMessage, ResonanceError
from resonance.pipeline.events import VoiceEventEmitter
from resonance.profile.aggregator import ProfileAggregator
from resonance.profile.models import VoiceNote
from resonance.prompts import GREETING_TEXT, build_reply_context
from resonance.schemas import (
    AudioMessage,
    InboundMessage,
    InterventionCompleteMessage,
    SaveNoteMessage,
    SessionCompleteMessage,
    SoundChoiceMessage,
    parse_inbound_message,
)
from resonance.services.base import VoiceServices
from resonance.session.registry import ConnectionContext
from resonance.system_metrics import increment_metric, record_turn_timing

logger = logging.getLogger("resonance.pipeline.turn")

# Messages whose only effect is a spoken reply; skipped once the client is gone.
_REPLY_MESSAGES = (AudioMessage, InterventionCompleteMessage)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


class TurnOrchestrator:
    """
    Runs every inbound message for ONE connection.

    An audio turn is strictly sequential:
    transcribe -> hints -> context -> reply -> classify -> speak.
    Any failure aborts only the current message and is reported as a
    single error event; the connection stays open.
    """

    def __init__(
        self,
        context: ConnectionContext,
        services: VoiceServices,
        aggregator: ProfileAggregator,
        emitter: VoiceEventEmitter,
        is_closing: Callable[[], bool] = lambda: False,
    ):
        self.context = context
        self.services = services
        self.aggregator = aggregator
        self.emitter = emitter
        self.is_closing = is_closing

    @property
    def engine(self):
        return self.context.engine

    def _log_event(self, event: str, **fields) -> None:
        log_event("turn", event, self.context, **fields)

    # -------------------------
    # ENTRY POINTS
    # -------------------------

    async def handle_text(self, raw: str) -> None:
        try:
            message = parse_inbound_message(raw)
        except MalformedMessage as exc:
            increment_metric("malformed_messages_total")
            logger.warning("Malformed message | connection_id=%s err=%s", self.context.connection_id, exc.message)
            await self.emitter.error(exc)
            return
        await self.dispatch(message)

    async def dispatch(self, message: InboundMessage) -> None:
        if self.is_closing() and isinstance(message, _REPLY_MESSAGES):
            # nobody is listening for the spoken reply anymore
            self._log_event("skipped_after_disconnect", message_type=message.type)
            return
        try:
            if isinstance(message, AudioMessage):
                await self.handle_audio(message)
            elif isinstance(message, InterventionCompleteMessage):
                await self.handle_intervention_complete(message)
            elif isinstance(message, SoundChoiceMessage):
                await self.handle_sound_choice(message)
            elif isinstance(message, SessionCompleteMessage):
                await self.handle_session_complete(message)
            elif isinstance(message, SaveNoteMessage):
                await self.handle_save_note(message)
            else:
                raise MalformedMessage()
        except ResonanceError as exc:
            increment_metric("turn_errors_total")
            logger.warning(
                "Message failed | connection_id=%s type=%s kind=%s err=%s",
                self.context.connection_id,
                getattr(message, "type", "unknown"),
                exc.kind,
                exc,
            )
            await self.emitter.error(exc)
        except Exception as exc:
            increment_metric("turn_errors_total")
            logger.exception(
                "Message failed unexpectedly | connection_id=%s type=%s err=%s",
                self.context.connection_id,
                getattr(message, "type", "unknown"),
                exc,
            )
            await self.emitter.error(ResonanceError())

    async def greet(self) -> None:
        if self.is_closing():
            return
        try:
            await self._speak(GREETING_TEXT)
            increment_metric("greetings_sent")
        except ResonanceError as exc:
            logger.warning("Greeting failed | connection_id=%s err=%s", self.context.connection_id, exc)
            await self.emitter.error(exc)

    # -------------------------
    # AUDIO TURN
    # -------------------------

    async def handle_audio(self, message: AudioMessage) -> None:
        turn_started = time.perf_counter()
        audio = message.decode_audio()

        stage_started = time.perf_counter()
        transcript = await self.services.stt.transcribe(audio)
        transcription_ms = _elapsed_ms(stage_started)
        await self.emitter.transcript(transcript)

        update = self.engine.begin_turn(transcript)
        profile_digest = self.aggregator.build_context_summary(self.context.identity)
        reply_context = build_reply_context(profile_digest, update.context)

        stage_started = time.perf_counter()
        reply = await self.services.replies.generate(transcript, list(self.context.history), reply_context)
        generation_ms = _elapsed_ms(stage_started)
        self.context.append_exchange(transcript, reply)

        await self.emitter.response(reply)

        signals = self.engine.record_reply(reply)
        if signals.intervention:
            increment_metric("interventions_emitted")
            await self.emitter.physical_intervention(signals.intervention, reply)
        if signals.frequency_offer:
            increment_metric("frequency_offers_emitted")
            await self.emitter.frequency_offer(signals.frequency_offer)

        stage_started = time.perf_counter()
        speech = await self.services.tts.synthesize(reply)
        synthesis_ms = _elapsed_ms(stage_started)
        await self.emitter.audio(speech)

        increment_metric("turns_total")
        timing = record_turn_timing(
            transcription_ms=transcription_ms,
            generation_ms=generation_ms,
            synthesis_ms=synthesis_ms,
            total_ms=_elapsed_ms(turn_started),
            word_count=update.word_count,
            session_duration_sec=update.session_duration,
        )
        self._log_event(
            "turn_complete",
            transcript=transcript,
            reply=reply,
            hints=len(update.hints),
            is_long=update.is_long,
            is_repetitive=update.is_repetitive,
            intervention=signals.intervention,
            frequency=signals.frequency_offer.hz if signals.frequency_offer else None,
            **timing,
        )

    # -------------------------
    # LIFECYCLE MESSAGES
    # -------------------------

    async def handle_intervention_complete(self, message: InterventionCompleteMessage) -> None:
        follow_up = self.engine.complete_intervention()
        self._log_event("intervention_complete", intervention=message.intervention, duration=message.duration)
        await self._speak(follow_up)

    async def handle_sound_choice(self, message: SoundChoiceMessage) -> None:
        self.engine.record_sound_choice(message.enabled)
        self._log_event("sound_choice", enabled=message.enabled, frequency=message.frequency)

    async def handle_session_complete(self, message: SessionCompleteMessage) -> None:
        summary = self.engine.build_summary(
            state=message.state,
            frequency=message.frequency,
            duration=float(message.duration or 0.0),
            outcome=message.outcome,
        )
        await self.aggregator.record_session_complete(self.context.identity, summary)
        increment_metric("sessions_completed")
        self._log_event(
            "session_complete",
            state=summary.state,
            outcome=summary.outcome,
            interventions=summary.interventions_used,
        )

    async def handle_save_note(self, message: SaveNoteMessage) -> None:
        await self.aggregator.record_note(self.context.identity, VoiceNote(text=message.text, state=message.state))
        increment_metric("notes_saved")
        self._log_event("note_saved", note=message.text, state=message.state)

    async def _speak(self, text: str) -> None:
        """Send a fixed reply and its audio. Never classified."""
        await self.emitter.response(text)
        speech = await self.services.tts.synthesize(text)
        await self.emitter.audio(speech)
