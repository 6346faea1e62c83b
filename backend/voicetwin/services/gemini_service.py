import logging

import google.generativeai as genai

from voicetwin.models import GenerationConfig, Role, Turn

logger = logging.getLogger("voicetwin.services.gemini")


def to_gemini_history(turns: list[Turn]) -> list[dict]:
    return [
        {"role": "user" if turn.role is Role.USER else "model", "parts": [turn.text]}
        for turn in turns
    ]


class GeminiChatClient:
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash"):
        if not api_key:
            logger.error("GEMINI_API_KEY not set - answer generation will NOT work")
        genai.configure(api_key=api_key)
        self.model_name = model_name

    async def generate(self, history: list[Turn], question: str, config: GenerationConfig) -> str:
        model = genai.GenerativeModel(
            self.model_name,
            generation_config={
                "temperature": config.temperature,
                "top_p": config.top_p,
                "top_k": config.top_k,
                "max_output_tokens": config.max_output_tokens,
            },
        )
        chat = model.start_chat(history=to_gemini_history(history))
        response = await chat.send_message_async(question)
        # .text raises ValueError when the candidate was blocked or carries no parts
        try:
            return str(response.text or "")
        except ValueError as exc:
            logger.warning("Gemini returned no usable text | model=%s err=%s", self.model_name, exc)
            return ""
