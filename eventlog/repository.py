import logging
from typing import List

import pymongo
from bson import ObjectId
from bson.errors import InvalidDocument, InvalidId
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from .models import EventLog, EventLogIn, Envelope, success, failure
from .store import STORE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_BAD_REQUEST = 400
HTTP_INTERNAL_SERVER_ERROR = 500

# value used when an id string cannot be decoded; never matches a stored record
ZERO_OBJECT_ID = ObjectId(b"\x00" * 12)


class RecordNotFound(LookupError):
    pass


class EventLogRepository:
    """
    Record access over one collection handle.
    Every operation returns an Envelope; store and validation errors never
    escape to the caller.
    """

    def __init__(self, collection, timeout: float = STORE_TIMEOUT_SECONDS):
        self.collection = collection
        self.timeout = timeout

    def get_one(self, event_log_id: str) -> Envelope:
        try:
            oid = ObjectId(event_log_id)
        except (InvalidId, TypeError):
            # an undecodable id is looked up as the zero id and ends up as a plain miss
            logger.warning(f"Could not decode event log id {event_log_id!r}, using zero id")
            oid = ZERO_OBJECT_ID

        try:
            with pymongo.timeout(self.timeout):
                doc = self.collection.find_one({"id": oid})
            if doc is None:
                raise RecordNotFound("no documents in result")
            event_log = EventLog.from_document(doc)
        except (PyMongoError, RecordNotFound, ValidationError) as e:
            logger.error(f"Lookup of event log id={event_log_id} failed: {e}")
            return failure(HTTP_INTERNAL_SERVER_ERROR, str(e))

        return success(HTTP_OK, event_log.model_dump())

    def get_all(self) -> Envelope:
        event_logs: List[dict] = []
        try:
            with pymongo.timeout(self.timeout):
                cursor = self.collection.find({})
                try:
                    for doc in cursor:
                        try:
                            event_logs.append(EventLog.from_document(doc).model_dump())
                        except ValidationError as e:
                            logger.error(f"Stored event log _id={doc.get('_id')} failed to decode: {e}")
                            return failure(HTTP_INTERNAL_SERVER_ERROR, f"error parsing top level data: {e}")
                finally:
                    cursor.close()
        except PyMongoError as e:
            logger.error(f"Listing event logs failed: {e}")
            return failure(HTTP_INTERNAL_SERVER_ERROR, str(e))

        return success(HTTP_OK, event_logs)

    def create(self, payload: bytes) -> Envelope:
        # covers malformed JSON, non-object bodies, excessive nesting and missing fields
        try:
            inbound = EventLogIn.model_validate_json(payload)
        except ValidationError as e:
            return failure(HTTP_BAD_REQUEST, str(e))

        new_event_log = EventLog(
            id=str(ObjectId()),
            created=inbound.created,
            event_name=inbound.event_name,
            event_details=inbound.event_details,
        )

        try:
            with pymongo.timeout(self.timeout):
                result = self.collection.insert_one(new_event_log.to_document())
        except (PyMongoError, InvalidDocument) as e:
            logger.error(f"Insert of event log failed: {e}")
            return failure(HTTP_INTERNAL_SERVER_ERROR, str(e))

        logger.info(f"✅ Created event log id={new_event_log.id} event_name={new_event_log.event_name}")
        return success(HTTP_CREATED, {
            "inserted_id": str(result.inserted_id),
            "acknowledged": result.acknowledged,
        })
