"""
Load the sample book catalogue into the ``books`` collection.

Usage:
    python -m bookstore_service.seed
"""

import sys
from typing import List, Optional, Sequence

from bookstore_service.cluster_manager import connect_to_cluster
from bookstore_service.logger import logger
from bookstore_service.models import Book, CollectionTarget

SAMPLE_BOOKS: List[Book] = [
    Book(title="To Kill a Mockingbird", author="Harper Lee", genre="Fiction",
         published_year=1960, price=12.99, in_stock=True, pages=336,
         publisher="J. B. Lippincott & Co."),
    Book(title="1984", author="George Orwell", genre="Dystopian",
         published_year=1949, price=10.99, in_stock=True, pages=328,
         publisher="Secker & Warburg"),
    Book(title="The Great Gatsby", author="F. Scott Fitzgerald", genre="Fiction",
         published_year=1925, price=9.99, in_stock=True, pages=180,
         publisher="Charles Scribner's Sons"),
    Book(title="Brave New World", author="Aldous Huxley", genre="Dystopian",
         published_year=1932, price=11.50, in_stock=False, pages=311,
         publisher="Chatto & Windus"),
    Book(title="The Hobbit", author="J.R.R. Tolkien", genre="Fantasy",
         published_year=1937, price=14.99, in_stock=True, pages=310,
         publisher="George Allen & Unwin"),
    Book(title="The Catcher in the Rye", author="J.D. Salinger", genre="Fiction",
         published_year=1951, price=8.99, in_stock=True, pages=224,
         publisher="Little, Brown and Company"),
    Book(title="Pride and Prejudice", author="Jane Austen", genre="Romance",
         published_year=1813, price=7.99, in_stock=True, pages=432,
         publisher="T. Egerton"),
    Book(title="The Lord of the Rings", author="J.R.R. Tolkien", genre="Fantasy",
         published_year=1954, price=19.99, in_stock=True, pages=1178,
         publisher="Allen & Unwin"),
    Book(title="Animal Farm", author="George Orwell", genre="Political Satire",
         published_year=1945, price=8.50, in_stock=False, pages=112,
         publisher="Secker & Warburg"),
    Book(title="The Alchemist", author="Paulo Coelho", genre="Fiction",
         published_year=1988, price=10.99, in_stock=True, pages=197,
         publisher="HarperOne"),
    Book(title="Moby Dick", author="Herman Melville", genre="Adventure",
         published_year=1851, price=12.50, in_stock=False, pages=635,
         publisher="Harper & Brothers"),
    Book(title="Wuthering Heights", author="Emily Brontë", genre="Gothic Fiction",
         published_year=1847, price=9.99, in_stock=True, pages=342,
         publisher="Thomas Cautley Newby"),
]


def insert_sample_books(
    target: Optional[CollectionTarget] = None,
    books: Sequence[Book] = SAMPLE_BOOKS,
    drop_existing: bool = True,
) -> int:
    """Insert *books* and return how many were written.

    With *drop_existing* the collection is emptied first so the seed can be
    rerun without duplicating titles.
    """
    target = target or CollectionTarget()
    client = connect_to_cluster(target.mongo_uri)
    try:
        collection = client[target.database_name][target.collection_name]
        if drop_existing:
            removed = collection.delete_many({}).deleted_count
            logger.info("Removed %d existing books from %s", removed, target.collection_name)
        if not books:
            return 0
        result = collection.insert_many([book.model_dump(exclude_none=True) for book in books])
    finally:
        client.close()

    inserted = len(result.inserted_ids)
    logger.info("Inserted %d books into %s.%s", inserted, target.database_name, target.collection_name)
    return inserted


def main() -> int:
    try:
        inserted = insert_sample_books()
    except Exception as e:
        logger.error("Seeding failed: %s", e)
        return 1
    print(f"Inserted {inserted} books.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
