"""
Responder interfaces and prompt construction for the AI librarian.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

from ..vector.types import ScoredBook

SYSTEM_PROMPT = """You are a friendly, knowledgeable library assistant. Use the retrieved book context provided to give grounded, natural recommendations. If you don't find a match in the library records, politely say so and suggest alternatives.

Guidelines:
1. Be conversational and engaging, like a helpful librarian
2. Recommend 3 to 5 specific books from the provided context
3. For each book, explain why it matches using its genre, author and description
4. Keep responses natural and human-like
5. If no books match well, ask the reader for more detail about what they want
6. Always be encouraging and positive about reading

Remember: you have access to the library's actual book collection through the provided context."""


@dataclass
class ComposedReply:
    """Final reply text plus which strategy produced it."""
    text: str
    provider: str
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "provider": self.provider,
            "used_fallback": self.used_fallback
        }


class BaseResponder(ABC):
    """Remote chat-completion strategy."""

    name = "abstract"

    def __init__(self, model_name: str):
        self.model_name = model_name

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str,
                       temperature: float = 0.7, max_tokens: int = 400) -> str:
        """
        Run one chat completion and return the first completion's text.

        Raises:
            ChatServiceError: on timeout, network error or malformed response
        """
        pass

    def get_status(self) -> Dict[str, Any]:
        return {
            "provider": self.name,
            "model": self.model_name
        }


def format_book_context(books: List[ScoredBook]) -> str:
    """Bulleted candidate list embedded in the recommendation prompt."""
    lines = []
    for index, hit in enumerate(books, start=1):
        book = hit.book
        lines.append(
            f"{index}. **{book.title}** by {book.author}\n"
            f"   Genre: {book.genre}\n"
            f"   Description: {book.description}\n"
            f"   Availability: {book.status.value}\n"
            f"   Relevance Score: {hit.similarity * 100:.1f}%"
        )
    return "\n\n".join(lines)


def build_recommendation_prompt(user_query: str, books: List[ScoredBook]) -> str:
    return f"""User Query: "{user_query}"

Retrieved Book Context from Library Database:
{format_book_context(books)}

Please provide a natural, conversational response that:
1. Acknowledges the user's request
2. Recommends specific books from the retrieved context
3. Explains why each recommended book matches their interests
4. Mentions the genre and key appeal of each book
5. Keeps the tone friendly and encouraging

If the retrieved books don't match well, politely explain this and ask for more details."""
