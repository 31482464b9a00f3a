from datetime import date
from typing import List

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.enums import AcademicYearStatus
from schoolhub.core.exceptions import ConflictError, ValidationError
from schoolhub.core.logging import get_logger
from schoolhub.core.models import AcademicYear

from .schemas import AcademicYearResponse

logger = get_logger(__name__)


def _validate_dates(start_date: date, end_date: date) -> None:
    if end_date <= start_date:
        raise ValidationError("end_date must be after start_date")


async def create_academic_year(
    db: AsyncSession,
    *,
    name: str,
    start_date: date,
    end_date: date,
    is_current: bool = False,
) -> AcademicYearResponse:
    """Create academic year. If is_current=true, unset current on all other years (same transaction)."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Academic year name is required")
    _validate_dates(start_date, end_date)
    existing = await db.execute(select(AcademicYear.id).where(AcademicYear.name == name))
    if existing.scalar_one_or_none():
        raise ConflictError(f"Academic year with name '{name}' already exists")
    if is_current:
        await db.execute(update(AcademicYear).values(is_current=False))
    ay = AcademicYear(
        name=name,
        start_date=start_date,
        end_date=end_date,
        is_current=is_current,
        status=AcademicYearStatus.ACTIVE.value,
    )
    db.add(ay)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Academic year name conflict")
    await db.refresh(ay)
    logger.info("academic_year.created", academic_year_id=str(ay.id), is_current=is_current)
    return AcademicYearResponse.model_validate(ay)


async def list_academic_years(db: AsyncSession) -> List[AcademicYearResponse]:
    rows = (
        await db.execute(select(AcademicYear).order_by(AcademicYear.start_date.desc()))
    ).scalars().all()
    return [AcademicYearResponse.model_validate(r) for r in rows]
