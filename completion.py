# app/completion.py
from typing import Dict, List, Optional, Protocol

import config

Message = Dict[str, str]


class CompletionFailure(RuntimeError):
    """Raised when the completion service is unreachable or returns an error."""


class CompletionClient(Protocol):
    def complete(
        self,
        messages: List[Message],
        *,
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> str:
        ...


def get_completion_client(provider: Optional[str] = None) -> CompletionClient:
    """Build the client for the configured LLM provider."""
    provider = (provider or config.LLM_PROVIDER).strip().lower()
    if provider == "gemini":
        from gemini import GeminiCompletionClient

        if not config.GEMINI_API_KEY:
            raise CompletionFailure("GEMINI_API_KEY is not set")
        return GeminiCompletionClient(api_key=config.GEMINI_API_KEY, model_name=config.GEMINI_MODEL)
    if provider == "openai":
        from openai_client import OpenAICompletionClient

        if not config.OPENAI_API_KEY:
            raise CompletionFailure("OPENAI_API_KEY is not set")
        return OpenAICompletionClient(api_key=config.OPENAI_API_KEY, model_name=config.OPENAI_MODEL)
    raise ValueError(f"Unsupported LLM_PROVIDER: {provider!r}")
