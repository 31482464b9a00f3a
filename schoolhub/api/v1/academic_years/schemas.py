from datetime import date, datetime
from uuid import UUID

from pydantic import Field

from schoolhub.core.enums import AcademicYearStatus
from schoolhub.core.schemas import CamelModel


class AcademicYearCreate(CamelModel):
    """Create academic year. name must be unique."""

    name: str = Field(..., min_length=1, max_length=50, description="e.g. 2025-2026")
    start_date: date = Field(..., description="Academic year start date")
    end_date: date = Field(..., description="Academic year end date (must be after start_date)")
    is_current: bool = Field(False, description="If true, all other years become non-current")


class AcademicYearResponse(CamelModel):
    id: UUID
    name: str
    start_date: date
    end_date: date
    is_current: bool
    status: AcademicYearStatus
    created_at: datetime
    updated_at: datetime
