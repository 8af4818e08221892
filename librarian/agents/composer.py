"""
Response composer: remote chat strategy first, rule-based fallback second.
The caller only ever sees the final text, never the remote failure.
"""

from typing import List, Optional

from .agent import SYSTEM_PROMPT, BaseResponder, ComposedReply, build_recommendation_prompt
from .rule_based import RuleBasedResponder
from ..core.config import CHAT_TEMPERATURE, GENERAL_MAX_TOKENS, RECOMMEND_MAX_TOKENS
from ..vector.types import ScoredBook
from util.logging import logger


class ResponseComposer:
    """Polymorphic over a {primary, fallback} responder pair."""

    def __init__(self, primary: Optional[BaseResponder] = None, fallback: Optional[RuleBasedResponder] = None,
                 temperature: float = CHAT_TEMPERATURE):
        self.primary = primary
        self.fallback = fallback or RuleBasedResponder()
        self.temperature = temperature

    async def recommend(self, user_query: str, books: List[ScoredBook]) -> ComposedReply:
        """Natural-language recommendation over the ranked candidates."""
        text = await self._try_primary(
            "composer.recommend",
            build_recommendation_prompt(user_query, books),
            RECOMMEND_MAX_TOKENS
        )
        if text is not None:
            return ComposedReply(text=text, provider=self.primary.name)

        return ComposedReply(
            text=self.fallback.recommend(user_query, books),
            provider=self.fallback.name,
            used_fallback=True
        )

    async def general_reply(self, user_query: str) -> ComposedReply:
        """Conversational reply when no candidate books are involved."""
        text = await self._try_primary("composer.general", user_query, GENERAL_MAX_TOKENS)
        if text is not None:
            return ComposedReply(text=text, provider=self.primary.name)

        return ComposedReply(
            text=self.fallback.general(user_query),
            provider=self.fallback.name,
            used_fallback=True
        )

    async def _try_primary(self, component: str, user_prompt: str, max_tokens: int) -> Optional[str]:
        if self.primary is None:
            return None

        try:
            return await self.primary.complete(
                SYSTEM_PROMPT,
                user_prompt,
                temperature=self.temperature,
                max_tokens=max_tokens
            )
        except Exception as e:
            logger.log_fallback(component, f"{type(e).__name__}: {e}")
            return None

    def get_status(self):
        return {
            "primary": self.primary.get_status() if self.primary else None,
            "fallback": self.fallback.name
        }
