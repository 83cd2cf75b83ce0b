from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthorizationType(BaseModel):
    """One supported login provider in the ``user_authorization_types`` lookup table.

    Python field names are snake_case; the persisted document uses the keys the
    consuming application reads (``userAuthorizationTypeId`` and friends).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int = Field(ge=1, alias="userAuthorizationTypeId")
    description: str = Field(min_length=1, max_length=120, alias="userAuthorizationTypeDescription")
    is_active: bool = Field(default=True, alias="isActive")
    created_at: Optional[datetime] = Field(default=None, alias="createdAtUtc")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAtUtc")

    @property
    def document_id(self) -> str:
        return str(self.id)

    def to_document(self) -> dict[str, Any]:
        """Persisted fields without timestamps; the writer decides how those are set."""
        return self.model_dump(by_alias=True, include={"id", "description", "is_active"})

    @classmethod
    def from_snapshot(cls, snapshot) -> "AuthorizationType":
        return cls.model_validate(snapshot.to_dict() or {})


class IndexResult(BaseModel):
    collection: str
    field: str
    name: str
    created: bool
    unique: bool = False
