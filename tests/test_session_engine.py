from resonance.core.state import SessionPhase
from resonance.prompts import HINT_CIRCLING, HINT_LONG_SESSION, HINT_TALKING_A_LOT, INTERVENTION_FOLLOW_UP_TEXT
from resonance.session.engine import SessionEngine


LONG_TEXT = " ".join(["word"] * 101)
CIRCLING_TEXT = "everything keeps spinning around, nothing changes, always worried"


def test_begin_turn_counts_words_and_leaves_greeting(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    assert engine.phase == SessionPhase.GREETING

    update = engine.begin_turn("I feel stuck today")

    assert update.word_count == 4
    assert update.hints == []
    assert update.context == ""
    assert engine.state.message_count == 1
    assert engine.state.user_word_count == 4
    assert engine.state.last_user_message == "I feel stuck today"
    assert engine.phase == SessionPhase.ACTIVE


def test_long_message_hint_fires_once(fake_clock):
    engine = SessionEngine(clock=fake_clock)

    first = engine.begin_turn(LONG_TEXT)
    second = engine.begin_turn(LONG_TEXT.replace("word", "talk"))

    assert first.is_long is True
    assert first.hints == [HINT_TALKING_A_LOT]
    assert first.context == "\n\n" + HINT_TALKING_A_LOT
    assert second.is_long is True
    assert HINT_TALKING_A_LOT not in second.hints
    assert engine.state.intervention_count == 1


def test_circling_hint_compares_with_previous_utterance(fake_clock):
    engine = SessionEngine(clock=fake_clock)

    first = engine.begin_turn(CIRCLING_TEXT)
    second = engine.begin_turn(CIRCLING_TEXT)

    assert first.is_repetitive is False
    assert second.is_repetitive is True
    assert second.hints == [HINT_CIRCLING]
    assert engine.state.intervention_count == 1


def test_hint_budget_caps_every_hint(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    engine.begin_turn(CIRCLING_TEXT)
    engine.state.intervention_count = 2
    fake_clock.advance(901)

    update = engine.begin_turn(CIRCLING_TEXT)

    assert update.is_repetitive is True
    assert update.hints == []
    assert engine.state.intervention_count == 2


def test_long_session_hint_repeats_without_spending_budget(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    fake_clock.advance(900)
    assert engine.begin_turn("still here").hints == []

    fake_clock.advance(1)
    first = engine.begin_turn("still here")
    second = engine.begin_turn("yeah")

    assert first.hints == [HINT_LONG_SESSION]
    assert second.hints == [HINT_LONG_SESSION]
    assert engine.state.intervention_count == 0


def test_load_and_circling_hints_stack_in_order(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    text = CIRCLING_TEXT + " " + " ".join(["words"] * 101)
    engine.state.last_user_message = text

    update = engine.begin_turn(text)

    assert update.hints == [HINT_TALKING_A_LOT, HINT_CIRCLING]
    assert engine.state.intervention_count == 2


def test_record_reply_tracks_interventions_and_phase(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    engine.begin_turn("I'm frozen")

    signals = engine.record_reply("Want to shake it out? Just shake your hands hard for 20 seconds.")

    assert signals.intervention == "movement"
    assert signals.frequency_offer is None
    assert engine.state.physical_interventions_used == ["movement"]
    assert engine.phase == SessionPhase.INTERVENING

    assert engine.complete_intervention() == INTERVENTION_FOLLOW_UP_TEXT
    assert engine.phase == SessionPhase.ACTIVE


def test_record_reply_frequency_only_keeps_phase(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    engine.begin_turn("my thoughts are racing")

    signals = engine.record_reply("Want some 432Hz? Might help slow things down.")

    assert signals.intervention is None
    assert signals.frequency_offer.hz == 432
    assert engine.state.physical_interventions_used == []
    assert engine.phase == SessionPhase.ACTIVE


def test_build_summary_copies_interventions(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    engine.record_reply("Shake your hands.")

    summary = engine.build_summary(state="stuck", frequency=417, duration=60.0, outcome="helpful")
    engine.record_reply("Ten jumping jacks.")

    assert summary.interventions_used == ["movement"]
    assert engine.state.physical_interventions_used == ["movement", "movement"]


def test_sound_choice_and_close(fake_clock):
    engine = SessionEngine(clock=fake_clock)
    engine.record_sound_choice(True)
    assert engine.state.sound_enabled is True

    engine.close()
    assert engine.phase == SessionPhase.CLOSED
