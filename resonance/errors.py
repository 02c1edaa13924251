class ResonanceError(RuntimeError):
    """Base for failures that are reported to the client as an ``error`` event."""

    kind = "internal_error"
    default_message = "Something went wrong. Let's try that again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


class TranscriptionFailure(ResonanceError):
    kind = "transcription_failed"
    default_message = "I couldn't make that out. Could you say it again?"


class GenerationFailure(ResonanceError):
    kind = "generation_failed"
    default_message = "I lost my train of thought. Say that once more?"


class SynthesisFailure(ResonanceError):
    kind = "synthesis_failed"
    default_message = "I couldn't speak that reply out loud."


class ServiceUnavailable(ResonanceError):
    kind = "service_unavailable"

    def __init__(self, service: str, timeout_sec: float | None = None):
        self.service = str(service or "service")
        self.timeout_sec = timeout_sec
        super().__init__(f"The {self.service} service is not responding right now.")


class PersistenceFailure(ResonanceError):
    kind = "persistence_failed"
    default_message = "Saving your profile failed."


class MalformedMessage(ResonanceError):
    kind = "malformed_message"
    default_message = "That message could not be understood."
