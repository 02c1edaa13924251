import logging

from anthropic import AsyncAnthropic

from resonance.core import config
from resonance.errors import GenerationFailure, ServiceUnavailable
from resonance.services.base import bounded_call

logger = logging.getLogger("resonance.services.anthropic_replies")


class AnthropicReplyGenerator:
    def __init__(
        self,
        client: AsyncAnthropic | None = None,
        model: str = config.REPLY_MODEL,
        max_tokens: int = config.REPLY_MAX_TOKENS,
        timeout_sec: float = config.SERVICE_TIMEOUT_SEC,
    ):
        self.client = client or AsyncAnthropic(api_key=config.ANTHROPIC_API_KEY or None)
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_sec = timeout_sec

    async def generate(self, transcript: str, history: list[dict], context: str) -> str:
        messages = [*history, {"role": "user", "content": transcript}]
        try:
            response = await bounded_call(
                self.client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=context,
                    messages=messages,
                ),
                service="reply",
                timeout_sec=self.timeout_sec,
            )
        except ServiceUnavailable:
            logger.warning("reply timeout | timeout_sec=%s", self.timeout_sec)
            raise
        except Exception as exc:
            logger.warning("reply failure | history=%s err=%s", len(history), exc)
            raise GenerationFailure() from exc

        parts = [getattr(block, "text", "") for block in (response.content or [])]
        reply = "".join(part for part in parts if part).strip()
        if not reply:
            raise GenerationFailure()
        return reply
