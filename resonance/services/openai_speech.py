import logging

from openai import AsyncOpenAI

from resonance.core import config
from resonance.errors import ServiceUnavailable, SynthesisFailure, TranscriptionFailure
from resonance.services.base import bounded_call

logger = logging.getLogger("resonance.services.openai_speech")


class OpenAISpeechToText:
    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = config.STT_MODEL,
        timeout_sec: float = config.SERVICE_TIMEOUT_SEC,
    ):
        self.client = client or AsyncOpenAI(api_key=config.OPENAI_API_KEY or None)
        self.model = model
        self.timeout_sec = timeout_sec

    async def transcribe(self, audio: bytes) -> str:
        try:
            transcript = await bounded_call(
                self.client.audio.transcriptions.create(
                    model=self.model,
                    file=("speech.webm", audio),
                ),
                service="transcription",
                timeout_sec=self.timeout_sec,
            )
        except ServiceUnavailable:
            logger.warning("transcription timeout | timeout_sec=%s", self.timeout_sec)
            raise
        except Exception as exc:
            logger.warning("transcription failure | bytes=%s err=%s", len(audio or b""), exc)
            raise TranscriptionFailure() from exc

        return str(getattr(transcript, "text", "") or "").strip()


class OpenAITextToSpeech:
    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = config.TTS_MODEL,
        voice: str = config.TTS_VOICE,
        timeout_sec: float = config.SERVICE_TIMEOUT_SEC,
    ):
        self.client = client or AsyncOpenAI(api_key=config.OPENAI_API_KEY or None)
        self.model = model
        self.voice = voice
        self.timeout_sec = timeout_sec

    async def _speak(self, text: str) -> bytes:
        response = await self.client.audio.speech.create(
            model=self.model,
            voice=self.voice,
            input=text,
        )
        return await response.aread()

    async def synthesize(self, text: str) -> bytes:
        try:
            return await bounded_call(self._speak(text), service="speech", timeout_sec=self.timeout_sec)
        except ServiceUnavailable:
            logger.warning("speech timeout | timeout_sec=%s", self.timeout_sec)
            raise
        except Exception as exc:
            logger.warning("speech failure | chars=%s err=%s", len(text or ""), exc)
            raise SynthesisFailure() from exc
