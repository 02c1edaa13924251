from resonance.services.base import ReplyGenerator, SpeechToText, TextToSpeech, VoiceServices
from resonance.services.factory import build_voice_services

__all__ = ["ReplyGenerator", "SpeechToText", "TextToSpeech", "VoiceServices", "build_voice_services"]
