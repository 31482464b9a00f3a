import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from schoolhub.core.enums import AcademicYearStatus
from schoolhub.db.session import Base


class AcademicYear(Base):
    """
    School academic year. Only one row can be is_current = true.
    Optional scope for fee structures.
    """

    __tablename__ = "academic_years"
    __table_args__ = (UniqueConstraint("name", name="uq_academic_year_name"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False)  # e.g. "2025-2026"
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=AcademicYearStatus.ACTIVE.value)  # ACTIVE | CLOSED
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
