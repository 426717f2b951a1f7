"""
Shared Pydantic schemas.

Documents are exchanged with clients using camelCase keys, and storage
write outcomes are returned in the MongoDB driver shape clients consume.
"""

from typing import Annotated, Any, Optional
from pydantic import BaseModel, BeforeValidator
from pydantic.alias_generators import to_camel

def _stringify_id(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


# ObjectId rendered as its string form
ObjectIdStr = Annotated[str, BeforeValidator(_stringify_id)]


class CamelModel(BaseModel):
    """Base schema with camelCase aliases that also accepts field names."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True

    def to_document(self) -> dict:
        """Dump to the stored document shape (camelCase, unset optionals dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class InsertResult(CamelModel):
    acknowledged: bool
    inserted_id: ObjectIdStr

    @classmethod
    def from_pymongo(cls, result: Any) -> "InsertResult":
        return cls(acknowledged=result.acknowledged, inserted_id=result.inserted_id)


class UpdateResult(CamelModel):
    acknowledged: bool
    matched_count: int
    modified_count: int
    upserted_count: int = 0
    upserted_id: Optional[ObjectIdStr] = None

    @classmethod
    def from_pymongo(cls, result: Any) -> "UpdateResult":
        return cls(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_count=0 if result.upserted_id is None else 1,
            upserted_id=result.upserted_id,
        )


class DeleteResult(CamelModel):
    acknowledged: bool
    deleted_count: int

    @classmethod
    def from_pymongo(cls, result: Any) -> "DeleteResult":
        return cls(acknowledged=result.acknowledged, deleted_count=result.deleted_count)


class MessageResponse(BaseModel):
    message: str
