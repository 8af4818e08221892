"""
Deterministic rule-based responder.
Used whenever the remote chat strategy is unavailable, and as the only
responder when CHAT_PROVIDER=none.
"""

import re
from typing import List, Optional

from ..vector.types import ScoredBook

_WORD_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


class RuleBasedResponder:
    """
    Keyword-classified templates over the retrieved candidates.
    Same query and candidates always give the same text.
    """

    name = "rule_based"

    GENRE_KEYWORDS = ['fiction', 'mystery', 'romance', 'sci-fi', 'fantasy', 'thriller', 'biography', 'history', 'poetry']
    AUTHOR_KEYWORDS = ['author', 'writer', 'by', 'written']
    THEME_KEYWORDS = ['love', 'adventure', 'mystery', 'war', 'family', 'friendship', 'technology', 'nature']

    GREETING_KEYWORDS = ['hello', 'hi', 'hey', 'good morning', 'good afternoon', 'good evening']
    HELP_KEYWORDS = ['help', 'what can you do', 'how does this work', 'assist']
    THANKS_KEYWORDS = ['thanks', 'thank you', 'appreciate', 'grateful']

    RESPONSES = {
        "greeting": "Hello! I'm your library assistant. I can help you find great books based on your interests. What kind of books are you looking for today?",
        "help": "I can help you find books by genre, author, theme, or description. Just tell me what you're interested in, and I'll recommend some great reads!",
        "thanks": "You're welcome! I'm here to help you discover amazing books. Feel free to ask for more recommendations anytime!",
        "other": "I'd be happy to help you find the perfect book! Could you tell me more about what you're looking for? For example, you could mention a genre you enjoy, an author you like, or describe the type of story you want to read."
    }

    def recommend(self, user_query: str, books: List[ScoredBook]) -> str:
        """Numbered candidate list with an intro quoting the query and a classified closer."""
        if not books:
            return (
                f"I couldn't find specific books matching \"{user_query}\". "
                "Could you please provide more details about what you're looking for? "
                "For example, you could mention a specific genre, author, or theme you're interested in."
            )

        tokens = tokenize(user_query)

        response = f"Based on your request for \"{user_query}\", here are some great book recommendations:\n\n"
        for index, hit in enumerate(books, start=1):
            book = hit.book
            response += f"{index}. **{book.title}** by {book.author}\n"
            response += f"   Genre: {book.genre}\n"
            response += f"   {book.description}\n\n"

        return response + self._closing_sentence(tokens)

    def general(self, user_query: str) -> str:
        """One canned sentence per query category."""
        return self.RESPONSES[self.classify_general(user_query)]

    def classify_general(self, user_query: str) -> str:
        tokens = tokenize(user_query)
        if _matches(tokens, self.GREETING_KEYWORDS):
            return "greeting"
        if _matches(tokens, self.HELP_KEYWORDS):
            return "help"
        if _matches(tokens, self.THANKS_KEYWORDS):
            return "thanks"
        return "other"

    def _closing_sentence(self, tokens: List[str]) -> str:
        genre = self.extract_genre(tokens)
        if genre:
            return f"These books are perfect for someone interested in {genre}, so just ask if you'd like more {genre} picks!"
        if _matches(tokens, self.AUTHOR_KEYWORDS):
            return "I've included books from authors that match your preferences. Would you like more titles by any of them?"
        if _matches(tokens, self.THEME_KEYWORDS):
            return "These selections focus on the themes you mentioned. Would you like me to explore those themes further?"
        return "Would you like me to suggest more books in a specific category or help you find something else?"

    def extract_genre(self, tokens: List[str]) -> Optional[str]:
        """First genre keyword in query order, or None."""
        for token in tokens:
            if token in self.GENRE_KEYWORDS:
                return token
        return None


def tokenize(text: str) -> List[str]:
    """Lower-case words; hyphenated words such as sci-fi stay whole."""
    return _WORD_PATTERN.findall((text or "").lower())


def _matches(tokens: List[str], keywords: List[str]) -> bool:
    # multi-word keywords match as consecutive tokens
    joined = f" {' '.join(tokens)} "
    for keyword in keywords:
        if " " in keyword:
            if f" {keyword} " in joined:
                return True
        elif keyword in tokens:
            return True
    return False
