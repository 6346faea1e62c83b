import logging

from openai import AsyncOpenAI

from voicetwin.models import GenerationConfig, Role, Turn

logger = logging.getLogger("voicetwin.services.openai")


def to_openai_messages(history: list[Turn], question: str) -> list[dict]:
    messages = [
        {"role": "user" if turn.role is Role.USER else "assistant", "content": turn.text}
        for turn in history
    ]
    messages.append({"role": "user", "content": question})
    return messages


class OpenAIChatClient:
    """Chat completions backend. top_k has no OpenAI equivalent and is not sent."""

    def __init__(self, api_key: str, model_name: str = "gpt-4.1-mini", client: AsyncOpenAI | None = None):
        if not api_key and client is None:
            logger.error("OPENAI_API_KEY not set - answer generation will NOT work")
        self.client = client or AsyncOpenAI(api_key=api_key or "missing")
        self.model_name = model_name

    async def generate(self, history: list[Turn], question: str, config: GenerationConfig) -> str:
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=to_openai_messages(history, question),
            temperature=config.temperature,
            top_p=config.top_p,
            max_tokens=config.max_output_tokens,
        )
        if not response.choices:
            return ""
        return str(response.choices[0].message.content or "")
