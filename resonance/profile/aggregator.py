from __future__ import annotations

import asyncio
import logging
from typing import Any

from resonance.errors import PersistenceFailure
from resonance.profile.models import SessionSummary, UserProfile, VoiceNote
from resonance.profile.store import ProfileStore, build_profile_store

logger = logging.getLogger("resonance.profile.aggregator")

HELPFUL_OUTCOME = "helpful"
TOP_PATTERN_COUNT = 2


class ProfileAggregator:
    """
    Owns every UserProfile in the process.

    Reads are served from memory. Mutations bump a version and are flushed
    through a single writer; a flush that finds its version already on disk
    returns immediately, so concurrent mutations coalesce into one write.
    """

    def __init__(self, store: ProfileStore):
        self._store = store
        self._profiles: dict[str, UserProfile] = {}
        self._write_lock = asyncio.Lock()
        self._version = 0
        self._flushed_version = 0

    # -------------------------
    # LOAD
    # -------------------------

    async def load_all(self) -> int:
        try:
            payload = await asyncio.to_thread(self._store.load)
        except Exception as exc:
            logger.warning("Profile store load failed, starting empty | err=%s", exc)
            self._profiles = {}
            return 0

        loaded: dict[str, UserProfile] = {}
        for key, value in payload.items():
            if isinstance(key, str) and key.strip():
                loaded[key] = UserProfile.from_dict(value)
        self._profiles = loaded
        logger.info("Profile store loaded | profiles=%s", len(loaded))
        return len(loaded)

    # -------------------------
    # READ
    # -------------------------

    def get_or_create(self, identity: str) -> UserProfile:
        profile = self._profiles.get(identity)
        if profile is None:
            profile = UserProfile()
            self._profiles[identity] = profile
        return profile

    def profile_snapshot(self, identity: str) -> dict[str, Any] | None:
        profile = self._profiles.get(identity)
        return profile.to_dict() if profile is not None else None

    def profile_count(self) -> int:
        return len(self._profiles)

    def build_context_summary(self, identity: str) -> str:
        profile = self._profiles.get(identity)
        if profile is None or profile.total_sessions == 0:
            return ""

        digest = ""
        # sorted() is stable, so equal counts keep first-seen order
        top_patterns = sorted(profile.patterns.items(), key=lambda item: item[1], reverse=True)[:TOP_PATTERN_COUNT]
        if top_patterns:
            rendered = ", ".join(f"{state} ({count}x)" for state, count in top_patterns)
            digest = f"\n\nPatterns: {rendered}."

        if profile.voice_notes:
            recent = profile.voice_notes[-1]
            digest += f' They once said: "{recent.text}"'
        return digest

    # -------------------------
    # WRITE
    # -------------------------

    async def record_session_complete(self, identity: str, summary: SessionSummary) -> UserProfile:
        profile = self.get_or_create(identity)

        profile.sessions.append(summary)
        profile.total_sessions += 1

        if summary.state:
            profile.patterns[summary.state] = profile.patterns.get(summary.state, 0) + 1

        if summary.outcome == HELPFUL_OUTCOME:
            for category in summary.interventions_used:
                profile.effective_interventions[category] = profile.effective_interventions.get(category, 0) + 1

        self._version += 1
        await self._flush()
        return profile

    async def record_note(self, identity: str, note: VoiceNote) -> UserProfile:
        profile = self.get_or_create(identity)
        profile.voice_notes.append(note)

        self._version += 1
        await self._flush()
        return profile

    async def _flush(self) -> bool:
        async with self._write_lock:
            target_version = self._version
            if self._flushed_version >= target_version:
                return True

            payload = {identity: profile.to_dict() for identity, profile in self._profiles.items()}
            try:
                await asyncio.to_thread(self._store.save, payload)
            except PersistenceFailure as exc:
                logger.warning("Profile store write failed, keeping in memory | err=%s", exc)
                return False
            except Exception as exc:
                logger.exception("Profile store write failed unexpectedly | err=%s", exc)
                return False

            self._flushed_version = target_version
            return True


profile_aggregator = ProfileAggregator(build_profile_store())
