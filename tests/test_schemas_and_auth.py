import pytest
from jose import jwt

from resonance import auth
from resonance.errors import MalformedMessage
from resonance.schemas import (
    AudioMessage,
    SaveNoteMessage,
    SessionCompleteMessage,
    SoundChoiceMessage,
    parse_inbound_message,
)


def test_parse_inbound_message_routes_on_type():
    assert isinstance(parse_inbound_message('{"type": "audio", "audio": "aGk="}'), AudioMessage)
    assert isinstance(parse_inbound_message('{"type": "sound_choice", "enabled": false}'), SoundChoiceMessage)
    assert isinstance(parse_inbound_message('{"type": "save_note", "text": "ok"}'), SaveNoteMessage)

    message = parse_inbound_message('{"type": "session_complete", "state": null, "frequency": null, "duration": 12}')
    assert isinstance(message, SessionCompleteMessage)
    assert message.state is None
    assert message.duration == 12.0


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2, 3]",
        '{"audio": "aGk="}',
        '{"type": "dance"}',
        '{"type": "audio"}',
        '{"type": "audio", "audio": ""}',
        '{"type": "sound_choice", "enabled": "yes"}',
        '{"type": "save_note", "text": ""}',
    ],
)
def test_parse_inbound_message_rejects_malformed(raw):
    with pytest.raises(MalformedMessage) as exc_info:
        parse_inbound_message(raw)
    assert exc_info.value.kind == "malformed_message"


def test_audio_message_decodes_base64():
    assert parse_inbound_message('{"type": "audio", "audio": "aGk="}').decode_audio() == b"hi"


def test_identity_token_round_trip():
    identity = auth.new_identity()
    token = auth.issue_identity_token(identity)

    assert identity.startswith("user_")
    assert auth.resolve_identity(token) == (identity, True)


def test_foreign_or_missing_token_gets_fresh_identity():
    forged = jwt.encode({"sub": "user_victim"}, "someone-elses-secret", algorithm="HS256")

    identity, reused = auth.resolve_identity(forged)
    assert reused is False
    assert identity != "user_victim"

    identity, reused = auth.resolve_identity(None)
    assert reused is False
    assert identity.startswith("user_")
    assert auth.resolve_identity_from_token("garbage") is None
