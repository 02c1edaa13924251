import base64
import binascii
import json
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, StrictBool, TypeAdapter, ValidationError

from resonance.errors import MalformedMessage


class AudioMessage(BaseModel):
    type: Literal["audio"]
    audio: str = Field(min_length=1)

    def decode_audio(self) -> bytes:
        try:
            return base64.b64decode(self.audio, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise MalformedMessage("Audio payload is not valid base64.") from exc


class InterventionCompleteMessage(BaseModel):
    type: Literal["intervention_complete"]
    intervention: str | None = None
    duration: float | None = None


class SoundChoiceMessage(BaseModel):
    type: Literal["sound_choice"]
    enabled: StrictBool
    frequency: int | None = None


class SessionCompleteMessage(BaseModel):
    type: Literal["session_complete"]
    state: str | None = None
    frequency: int | None = None
    duration: float | None = None
    outcome: str | None = None


class SaveNoteMessage(BaseModel):
    type: Literal["save_note"]
    text: str = Field(min_length=1)
    state: str | None = None


InboundMessage = Annotated[
    Union[
        AudioMessage,
        InterventionCompleteMessage,
        SoundChoiceMessage,
        SessionCompleteMessage,
        SaveNoteMessage,
    ],
    Field(discriminator="type"),
]

_inbound_adapter = TypeAdapter(InboundMessage)


def parse_inbound_message(raw: str) -> InboundMessage:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedMessage("Message is not valid JSON.") from exc

    if not isinstance(data, dict):
        raise MalformedMessage("Message must be a JSON object.")

    try:
        return _inbound_adapter.validate_python(data)
    except ValidationError as exc:
        message_type = str(data.get("type") or "").strip() or "unknown"
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != message_type)
        detail = f" ({location}: {first.get('msg')})" if location else ""
        raise MalformedMessage(f"Unrecognized or invalid '{message_type}' message{detail}.") from exc
