#!/usr/bin/env python3
"""
Bookstore queries — demo runner
===============================

Usage:
    MONGODB_URI="mongodb://localhost:27017" python -m bookstore_service.demo

Runs a handful of the catalogue queries against the configured collection
and prints the results. Seed the collection first with
``python -m bookstore_service.seed`` if it is empty.
"""

import json
import sys
from typing import Any

from bookstore_service import queries
from bookstore_service.config import MONGODB_URI
from bookstore_service.logger import logger
from bookstore_service.response_formatter import clean_documents, summarise_explain

SEPARATOR = "=" * 70


def show(title: str, value: Any) -> None:
    print(f"\n{SEPARATOR}")
    print(title)
    print(SEPARATOR)
    print(json.dumps(value, indent=2, ensure_ascii=False))


def run_demo() -> None:
    logger.info("Connecting to %s", MONGODB_URI)

    show("1) Fiction books", clean_documents(queries.find_by_genre("Fiction")))
    show("2) Books published after 2000", clean_documents(queries.find_published_after(2000)))
    show("3) Projection (title, author, price)", clean_documents(queries.find_projected()))
    show("4) Aggregation: average price by genre", clean_documents(queries.avg_price_by_genre()))
    show("5) Create indexes (title, author+published_year)", queries.create_indexes())
    show('6) Explain example query (title = "1984")',
         summarise_explain(queries.explain_query({"title": "1984"})))

    print("\nDemo complete. Import bookstore_service.queries to call specific functions as needed.")


def main() -> int:
    try:
        run_demo()
    except Exception as e:
        logger.error("Error in queries demo: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
