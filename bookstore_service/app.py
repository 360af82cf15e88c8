"""
FastAPI surface for the bookstore query catalogue.

Each endpoint maps onto one function in ``queries`` and runs against the
configured collection. Run with:

    uvicorn bookstore_service.app:app --reload
"""

from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from pymongo.errors import PyMongoError

from bookstore_service import queries
from bookstore_service.cluster_manager import ping
from bookstore_service.config import MONGODB_URI
from bookstore_service.logger import logger
from bookstore_service.response_formatter import (
    clean_document,
    clean_documents,
    summarise_explain,
)


app = FastAPI(title="Bookstore Query Service", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------- REQUEST MODELS ----------------------


class PriceUpdate(BaseModel):
    price: float


class ExplainRequest(BaseModel):
    filter: Dict[str, Any] = Field(default_factory=dict, description="find() filter to explain")


# ---------------------- HELPERS ----------------------


def _run(endpoint: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call a query function, mapping failures onto HTTP errors."""
    try:
        return fn(*args, **kwargs)
    except ValueError as e:
        logger.warning("%s rejected: %s", endpoint, e)
        raise HTTPException(status_code=400, detail=str(e))
    except ConnectionError as e:
        logger.error("%s connection error: %s", endpoint, e)
        raise HTTPException(status_code=503, detail=str(e))
    except PyMongoError as e:
        logger.error("%s query error: %s", endpoint, e)
        raise HTTPException(status_code=500, detail=f"Query execution error: {e}")


def _books(endpoint: str, fn: Callable[..., List[Dict[str, Any]]], *args: Any, **kwargs: Any) -> Dict[str, Any]:
    books = clean_documents(_run(endpoint, fn, *args, **kwargs))
    return {"result_count": len(books), "data": books}


# ---------------------- ENDPOINTS ----------------------


@app.get("/health")
def health():
    return _run("health", ping, MONGODB_URI)


@app.get("/books/genre/{genre}")
def books_by_genre(genre: str):
    return _books("books-by-genre", queries.find_by_genre, genre)


@app.get("/books/author/{author}")
def books_by_author(author: str):
    return _books("books-by-author", queries.find_by_author, author)


@app.get("/books/published-after/{year}")
def books_published_after(year: int):
    return _books("books-published-after", queries.find_published_after, year)


@app.get("/books/in-stock-after/{year}")
def books_in_stock_after(year: int):
    return _books("books-in-stock-after", queries.find_in_stock_after, year)


@app.get("/books/projection")
def books_projection(fields: Optional[List[str]] = Query(default=None)):
    return _books(
        "books-projection",
        queries.find_projected,
        fields or queries.DEFAULT_PROJECTION_FIELDS,
    )


@app.get("/books/sorted")
def books_sorted(direction: str = "asc"):
    return _books("books-sorted", queries.sort_by_price, direction)


@app.get("/books/page")
def books_page(
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    per_page: int = Query(default=queries.DEFAULT_PER_PAGE, ge=1, description="Results per page"),
    sort_field: Optional[str] = None,
):
    response = _books("books-page", queries.paginate, page, per_page, sort_field)
    response.update({"page": page, "per_page": per_page})
    return response


@app.patch("/books/{title}/price")
def update_book_price(title: str, request: PriceUpdate):
    counts = _run("update-price", queries.update_price, title, request.price)
    if counts["matched_count"] == 0:
        raise HTTPException(status_code=404, detail={"message": f"No book titled {title!r}", **counts})
    return counts


@app.delete("/books/{title}")
def delete_book(title: str):
    counts = _run("delete-book", queries.delete_by_title, title)
    if counts["deleted_count"] == 0:
        raise HTTPException(status_code=404, detail={"message": f"No book titled {title!r}", **counts})
    return counts


@app.get("/stats/avg-price-by-genre")
def stats_avg_price_by_genre():
    return {"data": clean_documents(_run("avg-price-by-genre", queries.avg_price_by_genre))}


@app.get("/stats/top-author")
def stats_top_author():
    return {"data": clean_document(_run("top-author", queries.author_with_most_books))}


@app.get("/stats/by-decade")
def stats_by_decade():
    return {"data": clean_documents(_run("by-decade", queries.books_by_decade))}


@app.post("/indexes")
def create_indexes():
    return {"created": _run("create-indexes", queries.create_indexes)}


@app.get("/indexes")
def get_indexes():
    return {"indexes": clean_documents(_run("get-indexes", queries.list_indexes))}


@app.post("/explain")
def explain(request: ExplainRequest):
    result = _run("explain", queries.explain_query, request.filter)
    return {"summary": summarise_explain(result), "explain": clean_document(result)}
