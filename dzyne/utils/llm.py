"""OpenAI chat wrapper for the design tools.

All generation tools ask for JSON and get a dict back.
"""

import json
import logging
from typing import Optional

from openai import OpenAI

from ..config import Config
from ..errors import LLMResponseError

logger = logging.getLogger(__name__)


class DesignLLM:
    """JSON-mode chat completions against the configured OpenAI model."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        self.api_key = api_key or Config.OPENAI_API_KEY or None
        self.model = model or Config.OPENAI_CHAT_MODEL
        self._client = OpenAI(api_key=self.api_key)

    def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> dict:
        """Run one chat completion and parse the reply as a JSON object."""
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=temperature,
            max_tokens=max_tokens,
        )

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise LLMResponseError("No response from AI")

        return self._parse_response(content.strip())

    def _parse_response(self, content: str) -> dict:
        # Models sometimes wrap JSON in markdown fences even in JSON mode
        if "```" in content:
            start = content.find("{")
            end = content.rfind("}") + 1
            if start != -1 and end > start:
                content = content[start:end]

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise LLMResponseError(f"Failed to parse LLM response as JSON: {e}")

        if not isinstance(data, dict):
            raise LLMResponseError("LLM response was not a JSON object")

        return data


_llm = None


def get_llm() -> DesignLLM:
    """Lazy-load the shared chat client."""
    global _llm
    if _llm is None:
        _llm = DesignLLM()
    return _llm
