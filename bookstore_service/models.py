from typing import Optional

from pydantic import BaseModel

from bookstore_service.config import COLLECTION_NAME, DATABASE_NAME, MONGODB_URI


class CollectionTarget(BaseModel):
    """Where a query runs: connection string, database and collection."""

    mongo_uri: str = MONGODB_URI
    database_name: str = DATABASE_NAME
    collection_name: str = COLLECTION_NAME


class Book(BaseModel):
    title: str
    author: str
    genre: str
    published_year: int
    price: float
    in_stock: bool = True
    pages: Optional[int] = None
    publisher: Optional[str] = None
