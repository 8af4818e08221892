"""
Book catalog data access.
The catalog is the source of truth; the retrieval core only reads from it.
"""

import asyncio
import sqlite3
from typing import List, Optional

from .db import get_db, init_db
from ..vector.types import BookRecord, BookStatus, coerce_status
from util.logging import logger

_BOOK_COLUMNS = "id, title, author, genre, description, status"


def _row_to_book(row) -> BookRecord:
    return BookRecord(
        id=int(row["id"]),
        title=row["title"] or "",
        author=row["author"] or "",
        genre=row["genre"] or "",
        description=row["description"] or "",
        status=coerce_status(row["status"])
    )


def list_all_books(db_path: Optional[str] = None) -> List[BookRecord]:
    """All catalog books regardless of status, in id order."""
    with get_db(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT {_BOOK_COLUMNS} FROM books ORDER BY id")
        return [_row_to_book(row) for row in cursor.fetchall()]


def get_book_by_id(book_id: int, db_path: Optional[str] = None) -> Optional[BookRecord]:
    """Get a single book, or None when absent or on database error."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_BOOK_COLUMNS} FROM books WHERE id = ?", (book_id,))
            row = cursor.fetchone()
            return _row_to_book(row) if row else None
    except sqlite3.Error as e:
        logger.error(f"Failed to get book {book_id}: {e}")
        return None


def add_book(title: str, author: str, genre: str = "", description: str = "",
             status: BookStatus = BookStatus.AVAILABLE, db_path: Optional[str] = None) -> BookRecord:
    """Insert a book and return the stored record."""
    status = BookStatus(status)
    with get_db(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO books (title, author, genre, description, status) VALUES (?, ?, ?, ?, ?)",
            (title, author, genre, description, status.value)
        )
        conn.commit()
        book_id = cursor.lastrowid

    logger.log_operation("catalog.add_book", "success", {"book_id": book_id, "title": title})
    return BookRecord(id=book_id, title=title, author=author, genre=genre,
                      description=description, status=status)


def update_book_status(book_id: int, status: BookStatus, db_path: Optional[str] = None) -> bool:
    """Set a book's status. Returns False when the book does not exist."""
    status = BookStatus(status)
    with get_db(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("UPDATE books SET status = ? WHERE id = ?", (status.value, book_id))
        conn.commit()
        return cursor.rowcount > 0


def find_book_by_title(title: str, db_path: Optional[str] = None) -> Optional[BookRecord]:
    with get_db(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT {_BOOK_COLUMNS} FROM books WHERE title = ? ORDER BY id LIMIT 1", (title,))
        row = cursor.fetchone()
        return _row_to_book(row) if row else None


def count_books(db_path: Optional[str] = None) -> int:
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM books")
            return cursor.fetchone()[0]
    except sqlite3.Error as e:
        logger.error(f"Failed to count books: {e}")
        return 0


class SQLiteCatalog:
    """Async catalog collaborator for the retrieval service.

    SQLite calls run in a worker thread so the event loop is never blocked.
    """

    def __init__(self, db_path: Optional[str] = None, create_schema: bool = True):
        self.db_path = db_path
        if create_schema:
            init_db(db_path)

    async def list_all_books(self) -> List[BookRecord]:
        return await asyncio.to_thread(list_all_books, self.db_path)

    async def get_book_by_id(self, book_id: int) -> Optional[BookRecord]:
        return await asyncio.to_thread(get_book_by_id, book_id, self.db_path)
