"""
Query façade for the ``books`` collection.

Every public function opens its own client, runs exactly one request
against the collection and closes the client again, whether the request
succeeds or raises. Driver errors propagate to the caller untouched.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.collection import Collection

from bookstore_service.cluster_manager import connect_to_cluster
from bookstore_service.logger import logger
from bookstore_service.models import CollectionTarget

# ---------------------- CONSTANTS ----------------------

DEFAULT_PER_PAGE = 5
DEFAULT_PROJECTION_FIELDS = ("title", "author", "price")

TITLE_INDEX = [("title", ASCENDING)]
AUTHOR_YEAR_INDEX = [("author", ASCENDING), ("published_year", ASCENDING)]

_DIRECTIONS = {
    ASCENDING: ASCENDING,
    DESCENDING: DESCENDING,
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}

Direction = Union[int, str]


# ---------------------- HELPERS ----------------------

@contextmanager
def _collection(target: Optional[CollectionTarget]) -> Iterator[Collection]:
    """Yield the target collection and always close the client afterwards."""
    target = target or CollectionTarget()
    client = connect_to_cluster(target.mongo_uri)
    try:
        yield client[target.database_name][target.collection_name]
    finally:
        client.close()


def _build_projection(fields: Sequence[str]) -> Dict[str, int]:
    """Convert field names into a projection that also hides ``_id``."""
    projection = {f: 1 for f in fields if f != "_id"}
    if not projection:
        raise ValueError("At least one field other than _id is required for a projection")
    projection["_id"] = 0
    return projection


def parse_direction(direction: Direction) -> int:
    """Normalise ``1``/``-1``/``"asc"``/``"desc"`` to a pymongo sort direction."""
    if isinstance(direction, bool):
        raise ValueError(f"Invalid sort direction: {direction!r}")
    key = direction.lower() if isinstance(direction, str) else direction
    try:
        return _DIRECTIONS[key]
    except (KeyError, TypeError):
        raise ValueError(f"Invalid sort direction: {direction!r}") from None


def _find(
    target: Optional[CollectionTarget],
    mongo_filter: Dict[str, Any],
    projection: Optional[Dict[str, int]] = None,
) -> List[Dict[str, Any]]:
    with _collection(target) as collection:
        return list(collection.find(mongo_filter, projection))


# ---------------------- BASIC CRUD ----------------------

def find_by_genre(genre: str, target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    books = _find(target, {"genre": genre})
    logger.info("find_by_genre — genre=%r: %d books", genre, len(books))
    return books


def find_by_author(author: str, target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    books = _find(target, {"author": author})
    logger.info("find_by_author — author=%r: %d books", author, len(books))
    return books


def find_published_after(year: int, target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    books = _find(target, {"published_year": {"$gt": year}})
    logger.info("find_published_after — year>%d: %d books", year, len(books))
    return books


def update_field(
    title: str,
    field: str,
    value: Any,
    target: Optional[CollectionTarget] = None,
) -> Dict[str, int]:
    """Set one field on the book with the given title.

    A title that matches nothing is not an error: both counts are zero.
    """
    with _collection(target) as collection:
        result = collection.update_one({"title": title}, {"$set": {field: value}})

    counts = {
        "matched_count": result.matched_count,
        "modified_count": result.modified_count,
    }
    logger.info("update_field — title=%r %s=%r: %s", title, field, value, counts)
    return counts


def update_price(title: str, new_price: float, target: Optional[CollectionTarget] = None) -> Dict[str, int]:
    return update_field(title, "price", new_price, target)


def delete_by_title(title: str, target: Optional[CollectionTarget] = None) -> Dict[str, int]:
    with _collection(target) as collection:
        result = collection.delete_one({"title": title})

    logger.info("delete_by_title — title=%r: %d deleted", title, result.deleted_count)
    return {"deleted_count": result.deleted_count}


# ---------------------- ADVANCED QUERIES ----------------------

def find_in_stock_after(year: int, target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    books = _find(target, {"in_stock": True, "published_year": {"$gt": year}})
    logger.info("find_in_stock_after — year>%d: %d books", year, len(books))
    return books


def find_projected(
    fields: Sequence[str] = DEFAULT_PROJECTION_FIELDS,
    target: Optional[CollectionTarget] = None,
) -> List[Dict[str, Any]]:
    """Return every book with only *fields* kept and ``_id`` removed."""
    books = _find(target, {}, _build_projection(fields))
    logger.info("find_projected — fields=%s: %d books", list(fields), len(books))
    return books


def sort_by_price(direction: Direction = ASCENDING, target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    sort_direction = parse_direction(direction)
    with _collection(target) as collection:
        books = list(collection.find().sort("price", sort_direction))

    logger.info("sort_by_price — direction=%d: %d books", sort_direction, len(books))
    return books


def _page_sort(sort_field: str) -> List[Tuple[str, int]]:
    # _id breaks ties so equal keys cannot straddle a page boundary
    keys = [(sort_field, ASCENDING)]
    if sort_field != "_id":
        keys.append(("_id", ASCENDING))
    return keys


def paginate(
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
    sort_field: Optional[str] = None,
    target: Optional[CollectionTarget] = None,
) -> List[Dict[str, Any]]:
    """Return one page of books using skip/limit.

    Without *sort_field* the order is whatever the server returns, so pages
    are only guaranteed to be disjoint when a stable sort key is given.
    """
    if per_page < 1:
        raise ValueError(f"per_page must be at least 1, got {per_page}")
    page = max(1, page)
    skip = (page - 1) * per_page

    with _collection(target) as collection:
        cursor = collection.find()
        if sort_field:
            cursor = cursor.sort(_page_sort(sort_field))
        books = list(cursor.skip(skip).limit(per_page))

    logger.info("paginate — page=%d per_page=%d: %d books", page, per_page, len(books))
    return books


# ---------------------- AGGREGATION PIPELINES ----------------------

def avg_price_by_genre_pipeline() -> List[Dict[str, Any]]:
    return [
        {"$group": {"_id": "$genre", "avg_price": {"$avg": "$price"}, "count": {"$sum": 1}}},
        {"$sort": {"_id": 1}},
    ]


def author_with_most_books_pipeline() -> List[Dict[str, Any]]:
    return [
        {"$group": {"_id": "$author", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
        {"$limit": 1},
    ]


def books_by_decade_pipeline() -> List[Dict[str, Any]]:
    # 1987 -> floor(198.7) * 10 -> 1980
    decade = {"$multiply": [{"$floor": {"$divide": ["$published_year", 10]}}, 10]}
    return [
        {"$project": {"decade": decade}},
        {"$group": {"_id": "$decade", "count": {"$sum": 1}}},
        {"$sort": {"_id": 1}},
    ]


def _aggregate(target: Optional[CollectionTarget], pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    with _collection(target) as collection:
        return list(collection.aggregate(pipeline))


def avg_price_by_genre(target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    """Average price and book count per genre, sorted by genre name."""
    groups = _aggregate(target, avg_price_by_genre_pipeline())
    logger.info("avg_price_by_genre — %d genres", len(groups))
    return groups


def author_with_most_books(target: Optional[CollectionTarget] = None) -> Optional[Dict[str, Any]]:
    """Return ``{"_id": author, "count": n}`` for the top author, or ``None``
    when the collection is empty. Ties are broken by server order."""
    groups = _aggregate(target, author_with_most_books_pipeline())
    top = groups[0] if groups else None
    logger.info("author_with_most_books — %s", top)
    return top


def books_by_decade(target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    groups = _aggregate(target, books_by_decade_pipeline())
    logger.info("books_by_decade — %d decades", len(groups))
    return groups


# ---------------------- INDEXES & EXPLAIN ----------------------

def create_indexes(target: Optional[CollectionTarget] = None) -> List[str]:
    """Ensure the ``title`` and ``(author, published_year)`` indexes exist.

    Creating an index that already exists with the same keys is a no-op on
    the server, so calling this repeatedly is safe.
    """
    with _collection(target) as collection:
        names = collection.create_indexes([IndexModel(TITLE_INDEX), IndexModel(AUTHOR_YEAR_INDEX)])

    logger.info("create_indexes — %s", names)
    return names


def list_indexes(target: Optional[CollectionTarget] = None) -> List[Dict[str, Any]]:
    """Describe every index on the books collection.

    Entries look like ``{"name": "title_1", "keys": [("title", 1)], "unique": False}``;
    after ``create_indexes`` the list holds ``_id_`` plus the two book indexes.
    """
    with _collection(target) as collection:
        raw_indexes = collection.index_information()

    return [
        {
            "name": name,
            "keys": info.get("key", []),
            "unique": info.get("unique", False),
        }
        for name, info in raw_indexes.items()
    ]


def explain_query(mongo_filter: Dict[str, Any], target: Optional[CollectionTarget] = None) -> Dict[str, Any]:
    """Run ``find(mongo_filter)`` in explain mode and return execution stats
    instead of documents."""
    target = target or CollectionTarget()
    with _collection(target) as collection:
        explain = collection.database.command(
            "explain",
            {"find": target.collection_name, "filter": mongo_filter},
            verbosity="executionStats",
        )

    stats = explain.get("executionStats", {})
    logger.info(
        "explain_query — filter=%s: examined %s docs, returned %s",
        mongo_filter, stats.get("totalDocsExamined"), stats.get("nReturned"),
    )
    return explain
