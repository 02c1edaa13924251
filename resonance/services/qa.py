import asyncio

from resonance.errors import TranscriptionFailure


class QaSpeechToText:
    """QA clients send UTF-8 text in place of recorded audio."""

    async def transcribe(self, audio: bytes) -> str:
        await asyncio.sleep(0)
        try:
            return bytes(audio or b"").decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise TranscriptionFailure("QA mode expects UTF-8 text in the audio field.") from exc


class QaReplyGenerator:
    """Deterministic replies keyed on simple cues so every side channel can be exercised."""

    async def generate(self, transcript: str, history: list[dict], context: str) -> str:
        await asyncio.sleep(0)
        text = str(transcript or "").lower()
        if "frozen" in text or "stuck" in text:
            return "Want to shake it out? Just shake your hands hard for 20 seconds."
        if "racing" in text or "anxious" in text:
            return "Want some 432Hz? Might help slow things down."
        if "circling the same thing" in str(context or "").lower():
            return "We're going over the same ground. Want to try something different?"
        return "I hear you. Where do you feel that?"


class QaTextToSpeech:
    async def synthesize(self, text: str) -> bytes:
        await asyncio.sleep(0)
        return b""
