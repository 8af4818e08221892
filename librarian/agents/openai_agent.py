"""
Remote chat strategy backed by the OpenAI chat completions API.
"""

import asyncio
from typing import Optional

import openai
from openai import AsyncOpenAI

from .agent import BaseResponder
from ..core.errors import ChatServiceError


class OpenAIResponder(BaseResponder):
    """Chat completions via AsyncOpenAI with a hard per-call timeout."""

    name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini",
                 timeout: float = 30.0, client: Optional[AsyncOpenAI] = None):
        super().__init__(model)
        self.timeout = timeout
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self.timeout, max_retries=0)
        return self._client

    async def complete(self, system_prompt: str, user_prompt: str,
                       temperature: float = 0.7, max_tokens: int = 400) -> str:
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model_name,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt}
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise ChatServiceError(f"Chat completion timed out after {self.timeout}s") from e
        except openai.OpenAIError as e:
            raise ChatServiceError(f"Chat completion failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ChatServiceError("Invalid response format from OpenAI") from e

        if not content or not content.strip():
            raise ChatServiceError("Empty completion from OpenAI")

        return content
