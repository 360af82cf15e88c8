"""Test configuration and fixtures.

The unit tests patch out MongoClient and check which driver calls each
query makes; they say nothing about what a server returns. The result
properties (filter predicates, page concatenation, decade buckets, genre
averages, index idempotency) live in test_integration.py, which is skipped
unless MONGODB_TEST_URI points at a running server.
"""

from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId


@pytest.fixture
def mongo_client():
    """Mock MongoClient handed out by connect_to_cluster; no server needed."""
    client = MagicMock(name="MongoClient")
    with patch("bookstore_service.queries.connect_to_cluster", return_value=client):
        yield client


@pytest.fixture
def collection(mongo_client):
    """The collection returned by ``client[db][collection]``."""
    return mongo_client.__getitem__.return_value.__getitem__.return_value


@pytest.fixture
def fiction_books():
    return [
        {"_id": ObjectId(), "title": "The Great Gatsby", "author": "F. Scott Fitzgerald",
         "genre": "Fiction", "published_year": 1925, "price": 9.99, "in_stock": True},
        {"_id": ObjectId(), "title": "The Alchemist", "author": "Paulo Coelho",
         "genre": "Fiction", "published_year": 1988, "price": 10.99, "in_stock": True},
    ]
