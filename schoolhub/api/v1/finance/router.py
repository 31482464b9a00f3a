"""Finance router: fee structures, assignment, payment, student ledger."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.auth.rbac import check_permission
from schoolhub.auth.schemas import CurrentUser
from schoolhub.core.config import settings
from schoolhub.core.enums import Permission
from schoolhub.core.events import EventBus, get_event_bus
from schoolhub.core.schemas import ApiResponse, Page
from schoolhub.db.session import get_db

from .schemas import (
    AssignFeeRequest,
    FeeStructureCreate,
    FeeStructureResponse,
    PaymentCreate,
    PaymentResponse,
    StudentFeeResponse,
    StudentLedger,
)
from . import service

router = APIRouter(prefix="/api/finance", tags=["finance"])


# --- Fee Structure ---
@router.post(
    "/structure",
    response_model=ApiResponse[FeeStructureResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_structure(
    payload: FeeStructureCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(check_permission(Permission.MANAGE_FEE_STRUCTURES)),
) -> ApiResponse[FeeStructureResponse]:
    fee = await service.create_fee_structure(
        db,
        name=payload.name,
        amount=payload.amount,
        description=payload.description,
        due_date=payload.due_date,
        academic_year_id=payload.academic_year_id,
        changed_by=current_user.id,
    )
    return ApiResponse(data=fee)


@router.get(
    "/structure",
    response_model=ApiResponse[Page[FeeStructureResponse]],
    dependencies=[Depends(check_permission(Permission.VIEW_FEE_STRUCTURES))],
)
async def list_fee_structures(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None, max_length=255),
    academic_year_id: Optional[UUID] = Query(None, alias="academicYearId"),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[Page[FeeStructureResponse]]:
    fees = await service.list_fee_structures(
        db, search=search, academic_year_id=academic_year_id, page=page, limit=limit
    )
    return ApiResponse(data=fees)


@router.get(
    "/structure/{fee_structure_id}",
    response_model=ApiResponse[FeeStructureResponse],
    dependencies=[Depends(check_permission(Permission.VIEW_FEE_STRUCTURES))],
)
async def get_fee_structure(
    fee_structure_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FeeStructureResponse]:
    return ApiResponse(data=await service.get_fee_structure(db, fee_structure_id))


# --- Student Fee Assignment ---
@router.post(
    "/assign",
    response_model=ApiResponse[StudentFeeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def assign_fee(
    payload: AssignFeeRequest,
    db: AsyncSession = Depends(get_db),
    events: EventBus = Depends(get_event_bus),
    current_user: CurrentUser = Depends(check_permission(Permission.ASSIGN_FEES)),
) -> ApiResponse[StudentFeeResponse]:
    assignment = await service.assign_fee(
        db,
        student_id=payload.student_id,
        fee_structure_id=payload.fee_structure_id,
        changed_by=current_user.id,
        events=events,
    )
    return ApiResponse(data=assignment)


# --- Payment ---
@router.post(
    "/pay",
    response_model=ApiResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    events: EventBus = Depends(get_event_bus),
    current_user: CurrentUser = Depends(check_permission(Permission.RECORD_PAYMENTS)),
) -> ApiResponse[PaymentResponse]:
    payment = await service.record_payment(
        db,
        student_fee_id=payload.student_fee_id,
        amount=payload.amount,
        method=payload.method,
        reference=payload.reference,
        recorded_by=current_user.id,
        events=events,
    )
    return ApiResponse(data=payment)


# --- Ledger ---
@router.get(
    "/ledger/{student_id}",
    response_model=ApiResponse[StudentLedger],
)
async def get_student_ledger(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(
        check_permission(Permission.VIEW_ANY_LEDGER, Permission.VIEW_OWN_LEDGER)
    ),
) -> ApiResponse[StudentLedger]:
    await service.ensure_can_view_student(db, current_user, student_id)
    return ApiResponse(data=await service.get_student_ledger(db, student_id))


@router.get(
    "/payments/{student_id}",
    response_model=ApiResponse[List[PaymentResponse]],
)
async def get_payment_history(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(
        check_permission(Permission.VIEW_ANY_LEDGER, Permission.VIEW_OWN_LEDGER)
    ),
) -> ApiResponse[List[PaymentResponse]]:
    await service.ensure_can_view_student(db, current_user, student_id)
    return ApiResponse(data=await service.get_payment_history(db, student_id))
