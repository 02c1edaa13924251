import asyncio
import json

import pytest

from resonance.errors import PersistenceFailure
from resonance.profile.aggregator import ProfileAggregator
from resonance.profile.models import SessionSummary, UserProfile, VoiceNote
from resonance.profile.store import InMemoryProfileStore, JsonFileProfileStore


class FailingStore:
    def __init__(self):
        self.save_attempts = 0

    def load(self):
        raise PersistenceFailure("disk on fire")

    def save(self, payload):
        self.save_attempts += 1
        raise PersistenceFailure("disk on fire")


def _summary(state, outcome=None, used=None):
    return SessionSummary(state=state, duration=30.0, outcome=outcome, interventions_used=list(used or []))


def test_get_or_create_is_idempotent():
    aggregator = ProfileAggregator(InMemoryProfileStore())

    first = aggregator.get_or_create("user_a")
    second = aggregator.get_or_create("user_a")

    assert first is second
    assert first.total_sessions == 0
    assert aggregator.profile_count() == 1


@pytest.mark.asyncio
async def test_helpful_outcome_credits_every_listed_intervention():
    store = InMemoryProfileStore()
    aggregator = ProfileAggregator(store)

    await aggregator.record_session_complete("user_a", _summary("stuck", "helpful", ["movement", "movement"]))
    profile = await aggregator.record_session_complete("user_a", _summary("stuck", "not helpful", ["vagal"]))

    assert profile.total_sessions == 2
    assert profile.patterns == {"stuck": 2}
    assert profile.effective_interventions == {"movement": 2}
    assert store.payload["user_a"]["effectiveInterventions"] == {"movement": 2}
    assert store.payload["user_a"]["totalSessions"] == 2


@pytest.mark.asyncio
async def test_missing_state_is_not_a_pattern():
    aggregator = ProfileAggregator(InMemoryProfileStore())

    profile = await aggregator.record_session_complete("user_a", _summary(None))

    assert profile.total_sessions == 1
    assert profile.patterns == {}


def test_context_summary_empty_without_profile_or_sessions():
    aggregator = ProfileAggregator(InMemoryProfileStore())
    assert aggregator.build_context_summary("nobody") == ""

    aggregator.get_or_create("user_a").voice_notes.append(VoiceNote(text="hello"))
    assert aggregator.build_context_summary("user_a") == ""


@pytest.mark.asyncio
async def test_context_summary_top_two_patterns_keep_first_seen_on_ties():
    aggregator = ProfileAggregator(InMemoryProfileStore())
    for state in ("anxiety", "stuck", "anxiety", "fear"):
        await aggregator.record_session_complete("user_a", _summary(state))

    assert aggregator.build_context_summary("user_a") == "\n\nPatterns: anxiety (2x), stuck (1x)."


@pytest.mark.asyncio
async def test_saved_note_reaches_next_digest():
    aggregator = ProfileAggregator(InMemoryProfileStore())
    await aggregator.record_session_complete("user_a", _summary("anxiety", "helpful", ["cold_water"]))

    await aggregator.record_note("user_a", VoiceNote(text="First note", state="anxiety"))
    await aggregator.record_note("user_a", VoiceNote(text="Cold water helped.", state="anxiety"))

    digest = aggregator.build_context_summary("user_a")
    assert digest == '\n\nPatterns: anxiety (1x). They once said: "Cold water helped."'


@pytest.mark.asyncio
async def test_load_failure_starts_empty():
    aggregator = ProfileAggregator(FailingStore())

    loaded = await aggregator.load_all()

    assert loaded == 0
    assert aggregator.profile_count() == 0


@pytest.mark.asyncio
async def test_write_failure_keeps_memory_authoritative():
    store = FailingStore()
    aggregator = ProfileAggregator(store)

    profile = await aggregator.record_note("user_a", VoiceNote(text="still counts"))

    assert store.save_attempts == 1
    assert [note.text for note in profile.voice_notes] == ["still counts"]
    assert aggregator.profile_snapshot("user_a")["voiceNotes"][0]["text"] == "still counts"


@pytest.mark.asyncio
async def test_concurrent_mutations_coalesce_writes():
    store = InMemoryProfileStore()
    aggregator = ProfileAggregator(store)

    await asyncio.gather(
        aggregator.record_note("user_a", VoiceNote(text="one")),
        aggregator.record_note("user_a", VoiceNote(text="two")),
        aggregator.record_note("user_b", VoiceNote(text="three")),
    )

    assert store.save_count == 2
    assert [note["text"] for note in store.payload["user_a"]["voiceNotes"]] == ["one", "two"]
    assert store.payload["user_b"]["voiceNotes"][0]["text"] == "three"


@pytest.mark.asyncio
async def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "session_data.json"
    aggregator = ProfileAggregator(JsonFileProfileStore(path))
    await aggregator.record_session_complete("user_a", _summary("numb", "helpful", ["vagal"]))

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["user_a"]["patterns"] == {"numb": 1}
    assert on_disk["user_a"]["sessions"][0]["interventionsUsed"] == ["vagal"]
    assert not path.with_suffix(".tmp").exists()

    reloaded = ProfileAggregator(JsonFileProfileStore(path))
    assert await reloaded.load_all() == 1
    assert reloaded.build_context_summary("user_a") == "\n\nPatterns: numb (1x)."


@pytest.mark.asyncio
async def test_json_file_store_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "session_data.json"
    path.write_text("{not json", encoding="utf-8")

    aggregator = ProfileAggregator(JsonFileProfileStore(path))

    assert await aggregator.load_all() == 0
    assert aggregator.profile_count() == 0


def test_user_profile_from_dict_sanitizes_counters():
    profile = UserProfile.from_dict({
        "sessions": [{"state": "fear", "interventionsUsed": ["grounding"]}, "junk"],
        "patterns": {"fear": -3, "anger": "2"},
        "effectiveInterventions": {"grounding": "oops"},
        "voiceNotes": [{"text": "breathe"}],
        "totalSessions": 99,
    })

    assert profile.total_sessions == 1
    assert profile.patterns == {"fear": 0, "anger": 2}
    assert profile.effective_interventions == {"grounding": 0}
    assert profile.voice_notes[0].text == "breathe"
    assert profile.sessions[0].interventions_used == ["grounding"]
