#!/usr/bin/env python3
"""
Seed the catalog with sample books.
Books whose title already exists are skipped, so the script can be re-run.
"""

import argparse
import sys
from pathlib import Path

import dotenv
dotenv.load_dotenv()

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from librarian.core.catalog import add_book, find_book_by_title
from librarian.core.db import init_db
from librarian.vector.types import BookStatus

SAMPLE_BOOKS = [
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "genre": "Fiction",
        "description": "A story of the fabulously wealthy Jay Gatsby and his love for the beautiful Daisy Buchanan.",
        "status": BookStatus.AVAILABLE
    },
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Fiction",
        "description": "The story of young Scout Finch and her father Atticus in a racially divided Alabama town.",
        "status": BookStatus.AVAILABLE
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "genre": "Science Fiction",
        "description": "A dystopian novel about totalitarianism and surveillance society.",
        "status": BookStatus.BORROWED
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": "Romance",
        "description": "The story of Elizabeth Bennet and Mr. Darcy in Georgian-era England.",
        "status": BookStatus.AVAILABLE
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "genre": "Fantasy",
        "description": "The adventure of Bilbo Baggins, a hobbit who embarks on a quest with thirteen dwarves.",
        "status": BookStatus.AVAILABLE
    },
    {
        "title": "The Hound of the Baskervilles",
        "author": "Arthur Conan Doyle",
        "genre": "Mystery",
        "description": "Sherlock Holmes investigates the legend of a supernatural hound haunting a Dartmoor family.",
        "status": BookStatus.AVAILABLE
    },
    {
        "title": "Steve Jobs",
        "author": "Walter Isaacson",
        "genre": "Biography",
        "description": "The life of the Apple co-founder and his influence on personal technology.",
        "status": BookStatus.MAINTENANCE
    }
]


def seed(db_path=None) -> int:
    """Insert missing sample books, returning how many were added."""
    init_db(db_path)
    added = 0
    for book in SAMPLE_BOOKS:
        if find_book_by_title(book["title"], db_path=db_path):
            print(f"- Skipping '{book['title']}' (already in catalog)")
            continue
        add_book(db_path=db_path, **book)
        print(f"+ Added '{book['title']}' by {book['author']}")
        added += 1
    return added


def main():
    parser = argparse.ArgumentParser(description="Seed the library catalog with sample books")
    parser.add_argument("--db-path", default=None, help="SQLite catalog path (default: DB_PATH)")
    args = parser.parse_args()

    added = seed(args.db_path)
    print(f"Done: {added} book(s) added.")
    if added:
        print("Run scripts/rebuild_index.py or POST /api/chatbot/refresh-index to embed new books.")


if __name__ == "__main__":
    main()
