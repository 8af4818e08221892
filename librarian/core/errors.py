"""
Exception hierarchy for the retrieval core.
"""


class LibrarianError(Exception):
    """Base exception for librarian operations."""
    pass


class EmbeddingServiceError(LibrarianError):
    """Embedding service unreachable, timed out, or returned an unusable vector."""
    pass


class DimensionMismatchError(EmbeddingServiceError):
    """Embedding service returned a vector of the wrong length."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Expected embedding of dimension {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class ChatServiceError(LibrarianError):
    """Chat-completion service unreachable, timed out, or returned a malformed response."""
    pass


class StorageIOError(LibrarianError):
    """Durable embedding store could not be written."""
    pass


class InitializationFailedError(LibrarianError):
    """Index initialization did not produce a complete set of embeddings."""
    pass


class IndexNotReadyError(LibrarianError):
    """Search attempted before the index was successfully initialized."""
    pass
