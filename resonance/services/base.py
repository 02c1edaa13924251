from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Protocol, TypeVar

from resonance.errors import ServiceUnavailable

logger = logging.getLogger("resonance.services")

T = TypeVar("T")


class SpeechToText(Protocol):
    async def transcribe(self, audio: bytes) -> str:
        ...


class ReplyGenerator(Protocol):
    async def generate(self, transcript: str, history: list[dict], context: str) -> str:
        ...


class TextToSpeech(Protocol):
    async def synthesize(self, text: str) -> bytes:
        ...


@dataclass
class VoiceServices:
    """
    Collaborators shared by every connection of the process.

    ``clients`` holds the vendor SDK clients behind them (each owns an HTTP
    connection pool); ``aclose`` releases them at shutdown.
    """
    stt: SpeechToText
    replies: ReplyGenerator
    tts: TextToSpeech
    clients: tuple = ()

    async def aclose(self) -> None:
        for client in self.clients:
            try:
                await client.close()
            except Exception as exc:
                logger.warning("Vendor client close failed | client=%s err=%s", type(client).__name__, exc)
        self.clients = ()


async def bounded_call(awaitable: Awaitable[T], service: str, timeout_sec: float) -> T:
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_sec)
    except asyncio.TimeoutError as exc:
        raise ServiceUnavailable(service, timeout_sec) from exc
