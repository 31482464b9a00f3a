from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from schoolhub.core.schemas import CamelModel


class StudentCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    user_id: Optional[UUID] = None
    parent_user_id: Optional[UUID] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class StudentResponse(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    user_id: Optional[UUID] = None
    parent_user_id: Optional[UUID] = None
    is_active: bool
    created_at: datetime
