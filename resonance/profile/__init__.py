from resonance.profile.aggregator import ProfileAggregator, profile_aggregator
from resonance.profile.models import SessionSummary, UserProfile, VoiceNote
from resonance.profile.store import InMemoryProfileStore, JsonFileProfileStore, ProfileStore, build_profile_store

__all__ = [
    "ProfileAggregator",
    "profile_aggregator",
    "SessionSummary",
    "UserProfile",
    "VoiceNote",
    "InMemoryProfileStore",
    "JsonFileProfileStore",
    "ProfileStore",
    "build_profile_store",
]
