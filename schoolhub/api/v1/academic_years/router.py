from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.auth.rbac import check_permission
from schoolhub.core.enums import Permission
from schoolhub.core.schemas import ApiResponse
from schoolhub.db.session import get_db

from .schemas import AcademicYearCreate, AcademicYearResponse
from . import service

router = APIRouter(prefix="/api/academic-years", tags=["academic-years"])


@router.post(
    "",
    response_model=ApiResponse[AcademicYearResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission(Permission.MANAGE_ACADEMIC_YEARS))],
)
async def create_academic_year(
    payload: AcademicYearCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AcademicYearResponse]:
    created = await service.create_academic_year(
        db,
        name=payload.name,
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_current=payload.is_current,
    )
    return ApiResponse(data=created)


@router.get(
    "",
    response_model=ApiResponse[List[AcademicYearResponse]],
    dependencies=[Depends(check_permission(Permission.VIEW_FEE_STRUCTURES))],
)
async def list_academic_years(db: AsyncSession = Depends(get_db)) -> ApiResponse[List[AcademicYearResponse]]:
    return ApiResponse(data=await service.list_academic_years(db))
