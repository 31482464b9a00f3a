"""Students service: the records fees are charged to."""

from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.auth.models import User
from schoolhub.core.exceptions import ConflictError, NotFoundError, ValidationError
from schoolhub.core.logging import get_logger
from schoolhub.core.models import Student
from schoolhub.core.schemas import Page, PageMeta
from schoolhub.db.filters import contains_pattern

from .schemas import StudentResponse

logger = get_logger(__name__)


async def _ensure_user(db: AsyncSession, user_id: Optional[UUID], label: str) -> None:
    if user_id is None:
        return
    found = (await db.execute(select(User.id).where(User.id == user_id))).scalar_one_or_none()
    if found is None:
        raise NotFoundError(label, user_id)


async def create_student(
    db: AsyncSession,
    *,
    first_name: str,
    last_name: str,
    user_id: Optional[UUID] = None,
    parent_user_id: Optional[UUID] = None,
) -> StudentResponse:
    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    if not first_name or not last_name:
        raise ValidationError("First and last name are required")
    await _ensure_user(db, user_id, "User")
    await _ensure_user(db, parent_user_id, "Parent user")
    if user_id is not None:
        taken = (await db.execute(select(Student.id).where(Student.user_id == user_id))).scalar_one_or_none()
        if taken is not None:
            raise ConflictError("User is already linked to another student")

    student = Student(
        first_name=first_name,
        last_name=last_name,
        user_id=user_id,
        parent_user_id=parent_user_id,
    )
    db.add(student)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("User is already linked to another student")
    await db.refresh(student)
    logger.info("student.created", student_id=str(student.id))
    return StudentResponse.model_validate(student)


async def get_student(db: AsyncSession, student_id: UUID) -> StudentResponse:
    student = (await db.execute(select(Student).where(Student.id == student_id))).scalar_one_or_none()
    if not student:
        raise NotFoundError("Student", student_id)
    return StudentResponse.model_validate(student)


async def list_students(
    db: AsyncSession,
    *,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Page[StudentResponse]:
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")
    conditions = []
    if search and search.strip():
        pattern = contains_pattern(search)
        conditions.append(
            or_(Student.first_name.ilike(pattern, escape="\\"), Student.last_name.ilike(pattern, escape="\\"))
        )

    total = (await db.execute(select(func.count()).select_from(Student).where(*conditions))).scalar_one()
    rows = (
        await db.execute(
            select(Student)
            .where(*conditions)
            .order_by(Student.last_name, Student.first_name)
            .offset((page - 1) * limit)
            .limit(limit)
        )
    ).scalars().all()
    return Page[StudentResponse](
        items=[StudentResponse.model_validate(s) for s in rows],
        meta=PageMeta.build(total=total, page=page, limit=limit),
    )
