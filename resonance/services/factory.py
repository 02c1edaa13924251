import logging

from resonance.core import config
from resonance.services.base import VoiceServices
from resonance.services.qa import QaReplyGenerator, QaSpeechToText, QaTextToSpeech

logger = logging.getLogger("resonance.services.factory")


def build_voice_services(qa_mode: bool | None = None) -> VoiceServices:
    """Return the collaborators for the process.

    QA mode (QA_MODE=true) swaps every vendor call for deterministic
    in-process fakes so the socket can be driven without API keys. Otherwise
    one AsyncOpenAI client backs both speech directions and one AsyncAnthropic
    client backs replies.
    """
    use_qa = config.QA_MODE if qa_mode is None else bool(qa_mode)
    logger.info("Building voice services | qa_mode=%s", use_qa)
    if use_qa:
        return VoiceServices(stt=QaSpeechToText(), replies=QaReplyGenerator(), tts=QaTextToSpeech())

    from anthropic import AsyncAnthropic
    from openai import AsyncOpenAI

    from resonance.services.anthropic_replies import AnthropicReplyGenerator
    from resonance.services.openai_speech import OpenAISpeechToText, OpenAITextToSpeech

    openai_client = AsyncOpenAI(api_key=config.OPENAI_API_KEY or None)
    anthropic_client = AsyncAnthropic(api_key=config.ANTHROPIC_API_KEY or None)

    return VoiceServices(
        stt=OpenAISpeechToText(client=openai_client),
        replies=AnthropicReplyGenerator(client=anthropic_client),
        tts=OpenAITextToSpeech(client=openai_client),
        clients=(openai_client, anthropic_client),
    )
