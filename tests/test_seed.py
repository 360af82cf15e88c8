from unittest.mock import MagicMock, patch

import pytest

from bookstore_service import seed
from bookstore_service.models import Book


@pytest.fixture
def seed_client():
    client = MagicMock(name="MongoClient")
    with patch("bookstore_service.seed.connect_to_cluster", return_value=client):
        yield client


def test_sample_books_have_unique_titles():
    titles = [b.title for b in seed.SAMPLE_BOOKS]
    assert len(titles) == len(set(titles))


def test_insert_sample_books_replaces_collection(seed_client):
    collection = seed_client.__getitem__.return_value.__getitem__.return_value
    collection.insert_many.return_value = MagicMock(inserted_ids=list(range(len(seed.SAMPLE_BOOKS))))

    inserted = seed.insert_sample_books()

    collection.delete_many.assert_called_once_with({})
    (docs,), _ = collection.insert_many.call_args
    assert inserted == len(seed.SAMPLE_BOOKS)
    assert docs[1]["title"] == "1984"
    assert set(docs[1]) == {"title", "author", "genre", "published_year", "price",
                            "in_stock", "pages", "publisher"}
    seed_client.close.assert_called_once()


def test_insert_without_drop_omits_unset_fields(seed_client):
    collection = seed_client.__getitem__.return_value.__getitem__.return_value
    collection.insert_many.return_value = MagicMock(inserted_ids=[1])
    book = Book(title="Dune", author="Frank Herbert", genre="Science Fiction",
                published_year=1965, price=9.99)

    seed.insert_sample_books(books=[book], drop_existing=False)

    collection.delete_many.assert_not_called()
    (docs,), _ = collection.insert_many.call_args
    assert "pages" not in docs[0]


def test_insert_nothing(seed_client):
    assert seed.insert_sample_books(books=[], drop_existing=False) == 0
    seed_client.close.assert_called_once()
