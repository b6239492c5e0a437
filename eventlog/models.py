from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional
from bson import ObjectId


class EventLogIn(BaseModel):
    """Body accepted by POST /event/submit. Unknown fields (including id) are ignored."""
    created: str = Field(..., min_length=1)  # opaque timestamp string
    event_name: str = Field(..., min_length=1)
    event_details: Dict[str, Any]

    @field_validator("event_details")
    @classmethod
    def details_not_empty(cls, v):
        if not v:
            raise ValueError("event_details must not be empty")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "created": "2024-01-01T00:00:00Z",
                "event_name": "login",
                "event_details": {"user": "alice"}
            }
        }


class EventLog(BaseModel):
    """Stored/returned record. Only shape is checked, emptiness was enforced on the way in."""
    id: Optional[str] = None
    created: str
    event_name: str
    event_details: Dict[str, Any]

    @field_validator("id", mode="before")
    @classmethod
    def object_id_to_hex(cls, v):
        if isinstance(v, ObjectId):
            return str(v)
        return v

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "EventLog":
        return cls.model_validate(doc)

    def to_document(self) -> Dict[str, Any]:
        oid = ObjectId(self.id)
        return {
            "_id": oid,
            "id": oid,
            "created": self.created,
            "event_name": self.event_name,
            "event_details": self.event_details,
        }


class Envelope(BaseModel):
    status: int
    message: str
    data: Dict[str, Any]


def success(status: int, data: Any) -> Envelope:
    return Envelope(status=status, message="success", data={"data": data})


def failure(status: int, detail: str) -> Envelope:
    return Envelope(status=status, message="error", data={"data": detail})
