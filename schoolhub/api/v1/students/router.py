from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.auth.rbac import check_permission
from schoolhub.core.config import settings
from schoolhub.core.enums import Permission
from schoolhub.core.schemas import ApiResponse, Page
from schoolhub.db.session import get_db

from .schemas import StudentCreate, StudentResponse
from . import service

router = APIRouter(prefix="/api/students", tags=["students"])


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission(Permission.MANAGE_STUDENTS))],
)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    student = await service.create_student(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        user_id=payload.user_id,
        parent_user_id=payload.parent_user_id,
    )
    return ApiResponse(data=student)


@router.get(
    "",
    response_model=ApiResponse[Page[StudentResponse]],
    dependencies=[Depends(check_permission(Permission.VIEW_STUDENTS))],
)
async def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[Page[StudentResponse]]:
    return ApiResponse(data=await service.list_students(db, search=search, page=page, limit=limit))


@router.get(
    "/{student_id}",
    response_model=ApiResponse[StudentResponse],
    dependencies=[Depends(check_permission(Permission.VIEW_STUDENTS))],
)
async def get_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    return ApiResponse(data=await service.get_student(db, student_id))
