# app/openai_client.py
import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from completion import CompletionFailure

logger = logging.getLogger(__name__)


class OpenAICompletionClient:
    def __init__(self, api_key: str, model_name: str = "gpt-4o"):
        self.client = OpenAI(api_key=api_key)
        self.model_name = model_name

    def complete(self, messages, *, temperature: float, max_tokens: Optional[int] = None) -> str:
        kwargs = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        try:
            resp = self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=temperature,
                **kwargs,
            )
        except OpenAIError as e:
            logger.error("OpenAI completion failed: %s", e)
            raise CompletionFailure(f"OpenAI completion failed: {e}") from e

        content = resp.choices[0].message.content
        return content.strip() if isinstance(content, str) else ""
