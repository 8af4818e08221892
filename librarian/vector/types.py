"""
Record types shared by the catalog, the embedding store and the similarity index.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class BookStatus(str, Enum):
    AVAILABLE = "available"
    BORROWED = "borrowed"
    LOST = "lost"
    MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class BookRecord:
    """Immutable snapshot of a catalog row."""

    id: int
    title: str
    author: str
    genre: str
    description: str
    status: BookStatus = BookStatus.AVAILABLE

    def embedding_text(self) -> str:
        """Concatenated text fields used to derive the book's embedding."""
        return f"{self.title} {self.author} {self.genre} {self.description}"

    def metadata(self) -> Dict[str, Any]:
        """Metadata persisted alongside the book's vector."""
        return {
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "status": self.status.value
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "description": self.description,
            "status": self.status.value
        }


@dataclass
class EmbeddingRecord:
    """Persisted vector for one catalog book."""

    book_id: int
    """Catalog book id, also the store key"""

    vector: List[float]
    """The embedding of the book's text fields"""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """title, author, genre, status, createdAt, updatedAt"""


@dataclass
class ScoredBook:
    """A search hit: catalog book plus its cosine similarity to the query."""

    book: BookRecord
    similarity: float

    def to_dict(self) -> Dict[str, Any]:
        data = self.book.to_dict()
        data["similarity"] = self.similarity
        return data


def coerce_status(value: Optional[str]) -> BookStatus:
    """Map a raw status column to BookStatus, defaulting unknown values to available."""
    try:
        return BookStatus((value or "available").lower())
    except ValueError:
        return BookStatus.AVAILABLE
