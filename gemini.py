# app/gemini.py
import logging
from typing import Dict, List, Optional

import google.generativeai as genai

from completion import CompletionFailure

logger = logging.getLogger(__name__)


def to_gemini_contents(messages: List[Dict[str, str]]):
    """Split chat messages into Gemini's system instruction and contents."""
    system_parts = []
    contents = []
    for message in messages:
        role = message["role"]
        if role == "system":
            system_parts.append(message["content"])
            continue
        contents.append({
            "role": "model" if role == "assistant" else "user",
            "parts": [message["content"]],
        })
    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


class GeminiCompletionClient:
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash"):
        genai.configure(api_key=api_key)
        self.model_name = model_name

    def complete(self, messages, *, temperature: float, max_tokens: Optional[int] = None) -> str:
        system_instruction, contents = to_gemini_contents(messages)
        model = genai.GenerativeModel(self.model_name, system_instruction=system_instruction)
        generation_config = genai.types.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
        try:
            response = model.generate_content(contents, generation_config=generation_config)
            return response.text.strip()
        except Exception as e:
            logger.error("Gemini completion failed: %s", e)
            raise CompletionFailure(f"Gemini completion failed: {e}") from e
