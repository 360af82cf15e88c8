from typing import Dict

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from bookstore_service.config import SERVER_SELECTION_TIMEOUT_MS
from bookstore_service.logger import logger


def connect_to_cluster(mongo_uri: str) -> MongoClient:
    """Create and test a MongoClient connection."""
    client = MongoClient(mongo_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)
    try:
        client.admin.command("ping")  # force connection test
    except ServerSelectionTimeoutError as e:
        client.close()
        raise ConnectionError(
            "Connection timed out. Check your MongoDB URI and network."
        ) from e
    except ConnectionFailure as e:
        client.close()
        raise ConnectionError("Failed to connect to MongoDB") from e
    except PyMongoError:
        # e.g. OperationFailure on bad credentials
        client.close()
        raise
    logger.debug("Connected to %s", mongo_uri)
    return client


def ping(mongo_uri: str) -> Dict[str, bool]:
    client = connect_to_cluster(mongo_uri)
    client.close()
    return {"ok": True}
