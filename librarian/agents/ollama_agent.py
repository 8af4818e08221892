"""
Remote chat strategy backed by a local Ollama server.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
import ollama

from .agent import BaseResponder
from ..core.errors import ChatServiceError


class OllamaResponder(BaseResponder):
    """
    Chat completions against an Ollama model.
    Useful for running the librarian fully on-premise.
    """

    name = "ollama"

    def __init__(self, model: str, host: Optional[str] = None, timeout: float = 30.0,
                 client: Optional[ollama.AsyncClient] = None):
        super().__init__(model)
        self.host = host
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> ollama.AsyncClient:
        if self._client is None:
            self._client = ollama.AsyncClient(host=self.host, timeout=self.timeout)
        return self._client

    async def complete(self, system_prompt: str, user_prompt: str,
                       temperature: float = 0.7, max_tokens: int = 400) -> str:
        try:
            response = await asyncio.wait_for(
                self.client.chat(
                    model=self.model_name,
                    messages=[
                        {'role': 'system', 'content': system_prompt},
                        {'role': 'user', 'content': user_prompt}
                    ],
                    options={
                        'temperature': temperature,
                        'num_predict': max_tokens
                    }
                ),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise ChatServiceError(f"Ollama chat timed out after {self.timeout}s") from e
        except (ollama.ResponseError, ollama.RequestError, ConnectionError, httpx.HTTPError) as e:
            raise ChatServiceError(f"Ollama model error: {e}") from e

        try:
            content = response['message']['content']
        except (KeyError, TypeError) as e:
            raise ChatServiceError("Invalid response format from Ollama") from e

        if not content or not content.strip():
            raise ChatServiceError("Empty completion from Ollama")

        return content

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status['host'] = self.host or 'default'
        return status
