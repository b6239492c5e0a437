import logging
from typing import Optional

import pymongo
from bson.codec_options import CodecOptions
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

# upper bound for every single store call (connect/ping, find, insert)
STORE_TIMEOUT_SECONDS = 10


class StoreConnectionError(RuntimeError):
    pass


def connect_db(uri: str, timeout: float = STORE_TIMEOUT_SECONDS) -> MongoClient:
    """
    Open the process-wide MongoDB client and verify it with a ping.
    Any failure raises StoreConnectionError; there is no retry, the caller
    is expected to abort startup.
    """
    if not uri:
        raise StoreConnectionError("MONGO_URI is not set")

    client: Optional[MongoClient] = None
    try:
        client = MongoClient(uri, serverSelectionTimeoutMS=int(timeout * 1000))
        with pymongo.timeout(timeout):
            client.admin.command("ping")
    except (PyMongoError, ValueError) as e:
        logger.critical("Could not connect to MongoDB: %s", e)
        if client is not None:
            client.close()
        raise StoreConnectionError(str(e)) from e

    logger.info("✅ Connected to MongoDB")
    return client


def get_collection(client: MongoClient, db_name: str, collection_name: str) -> Collection:
    # embedded documents come back as plain dicts
    codec_options = CodecOptions(document_class=dict)
    return client.get_database(db_name, codec_options=codec_options).get_collection(collection_name)
