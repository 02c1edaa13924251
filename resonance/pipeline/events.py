from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Awaitable, Callable

from resonance.errors import ResonanceError
from resonance.signals.interventions import FrequencyOffer


SendFn = Callable[[dict], Awaitable[None]]


@dataclass
class VoiceEventEmitter:
    """Builds every server -> client payload; the transport lives behind send_fn."""

    send_fn: SendFn

    async def session(self, session_id: str, identity_token: str) -> None:
        await self.send_fn({
            "type": "session",
            "session_id": session_id,
            "identity_token": identity_token,
        })

    async def transcript(self, text: str) -> None:
        await self.send_fn({
            "type": "transcript",
            "text": text,
        })

    async def response(self, text: str) -> None:
        await self.send_fn({
            "type": "response",
            "text": text,
        })

    async def physical_intervention(self, intervention: str, instructions: str) -> None:
        await self.send_fn({
            "type": "physical_intervention",
            "intervention": intervention,
            "instructions": instructions,
        })

    async def frequency_offer(self, offer: FrequencyOffer) -> None:
        await self.send_fn({
            "type": "frequency_offer",
            "frequency": offer.hz,
            "description": offer.description,
            "state": offer.state,
        })

    async def audio(self, audio: bytes) -> None:
        await self.send_fn({
            "type": "audio",
            "audio": base64.b64encode(audio or b"").decode("ascii"),
        })

    async def error(self, exc: ResonanceError) -> None:
        await self.send_fn({
            "type": "error",
            "message": exc.message,
            "kind": exc.kind,
        })
