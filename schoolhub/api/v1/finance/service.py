"""Finance service: fee structures, student fee assignments, payments, ledger. Financial logic with audit."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.auth.schemas import CurrentUser
from schoolhub.core.enums import FeeAuditAction, FeeStatus, Permission, PaymentMethod
from schoolhub.core.events import FEE_ASSIGNED, PAYMENT_RECORDED, DomainEvent, EventBus
from schoolhub.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from schoolhub.core.logging import get_logger
from schoolhub.core.models import (
    AcademicYear,
    FeeAuditLog,
    FeeStructure,
    Payment,
    Student,
    StudentFee,
)
from schoolhub.core.schemas import Page, PageMeta
from schoolhub.db.filters import contains_pattern

from .ledger import derive_fee_status, fee_position, stored_status_drifted, sum_amounts, to_money
from .schemas import (
    FeeStructureResponse,
    LedgerItem,
    LedgerSummary,
    PaymentResponse,
    StudentFeeResponse,
    StudentLedger,
)

logger = get_logger(__name__)


# --- Audit helper ---
async def _log_fee_audit(
    db: AsyncSession,
    reference_table: str,
    reference_id: UUID,
    action_type: FeeAuditAction,
    old_value: Optional[dict],
    new_value: Optional[dict],
    changed_by: Optional[UUID],
) -> None:
    db.add(
        FeeAuditLog(
            reference_table=reference_table,
            reference_id=reference_id,
            action_type=action_type.value,
            old_value=old_value,
            new_value=new_value,
            changed_by=changed_by,
        )
    )


async def _get_student(db: AsyncSession, student_id: UUID) -> Student:
    student = (await db.execute(select(Student).where(Student.id == student_id))).scalar_one_or_none()
    if not student:
        raise NotFoundError("Student", student_id)
    return student


async def _publish(events: Optional[EventBus], event: DomainEvent) -> None:
    if events is not None:
        await events.publish(event)


def _payment_to_response(p: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=p.id,
        student_fee_id=p.student_fee_id,
        amount=to_money(p.amount),
        method=p.method,
        reference=p.reference,
        paid_at=p.paid_at,
        recorded_by=p.recorded_by,
    )


# --- Fee Structure ---
async def create_fee_structure(
    db: AsyncSession,
    *,
    name: str,
    amount,
    description: Optional[str] = None,
    due_date: Optional[date] = None,
    academic_year_id: Optional[UUID] = None,
    changed_by: Optional[UUID] = None,
) -> FeeStructureResponse:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Fee name is required")
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Fee amount must be greater than zero")

    if academic_year_id is not None:
        ay = (
            await db.execute(select(AcademicYear.id).where(AcademicYear.id == academic_year_id))
        ).scalar_one_or_none()
        if ay is None:
            raise NotFoundError("Academic year", academic_year_id)

    fs = FeeStructure(
        name=name,
        amount=amount,
        description=(description or "").strip() or None,
        due_date=due_date,
        academic_year_id=academic_year_id,
    )
    try:
        db.add(fs)
        await db.flush()
        await _log_fee_audit(
            db, "fee_structures", fs.id, FeeAuditAction.CREATE,
            None,
            {"name": name, "amount": str(amount), "due_date": due_date.isoformat() if due_date else None},
            changed_by,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(fs)
    logger.info("fee_structure.created", fee_structure_id=str(fs.id), amount=str(amount))
    return FeeStructureResponse.model_validate(fs)


async def list_fee_structures(
    db: AsyncSession,
    *,
    search: Optional[str] = None,
    academic_year_id: Optional[UUID] = None,
    page: int = 1,
    limit: int = 10,
) -> Page[FeeStructureResponse]:
    """Newest first. search is a case-insensitive substring match on name."""
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")

    conditions = []
    if search and search.strip():
        conditions.append(FeeStructure.name.ilike(contains_pattern(search), escape="\\"))
    if academic_year_id is not None:
        conditions.append(FeeStructure.academic_year_id == academic_year_id)

    total = (
        await db.execute(select(func.count()).select_from(FeeStructure).where(*conditions))
    ).scalar_one()
    rows = (
        await db.execute(
            select(FeeStructure)
            .where(*conditions)
            .order_by(FeeStructure.created_at.desc(), FeeStructure.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
    ).scalars().all()
    return Page[FeeStructureResponse](
        items=[FeeStructureResponse.model_validate(r) for r in rows],
        meta=PageMeta.build(total=total, page=page, limit=limit),
    )


async def get_fee_structure(db: AsyncSession, fee_structure_id: UUID) -> FeeStructureResponse:
    fs = (
        await db.execute(select(FeeStructure).where(FeeStructure.id == fee_structure_id))
    ).scalar_one_or_none()
    if not fs:
        raise NotFoundError("Fee structure", fee_structure_id)
    return FeeStructureResponse.model_validate(fs)


# --- Student Fee Assignment ---
async def assign_fee(
    db: AsyncSession,
    *,
    student_id: UUID,
    fee_structure_id: UUID,
    changed_by: Optional[UUID] = None,
    events: Optional[EventBus] = None,
) -> StudentFeeResponse:
    """Charge a fee structure to a student. Starts PENDING. Re-charging the same structure is allowed."""
    await _get_student(db, student_id)
    fs = (
        await db.execute(select(FeeStructure).where(FeeStructure.id == fee_structure_id))
    ).scalar_one_or_none()
    if not fs:
        raise NotFoundError("Fee structure", fee_structure_id)

    sf = StudentFee(
        student_id=student_id,
        fee_structure_id=fee_structure_id,
        status=FeeStatus.PENDING.value,
    )
    try:
        db.add(sf)
        await db.flush()
        await _log_fee_audit(
            db, "student_fees", sf.id, FeeAuditAction.ASSIGN,
            None,
            {
                "student_id": str(student_id),
                "fee_structure_id": str(fee_structure_id),
                "amount": str(to_money(fs.amount)),
                "status": sf.status,
            },
            changed_by,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(sf)
    logger.info(
        "fee.assigned",
        student_fee_id=str(sf.id),
        student_id=str(student_id),
        fee_structure_id=str(fee_structure_id),
    )
    response = StudentFeeResponse.model_validate(sf)
    await _publish(
        events,
        DomainEvent(
            FEE_ASSIGNED,
            {
                "student_fee_id": str(sf.id),
                "student_id": str(student_id),
                "fee_structure_id": str(fee_structure_id),
                "amount": str(to_money(fs.amount)),
            },
        ),
    )
    return response


# --- Payment ---
async def record_payment(
    db: AsyncSession,
    *,
    student_fee_id: UUID,
    amount,
    method: PaymentMethod,
    reference: Optional[str] = None,
    recorded_by: Optional[UUID] = None,
    paid_at: Optional[datetime] = None,
    events: Optional[EventBus] = None,
) -> PaymentResponse:
    """
    Insert a payment and recompute the owning fee's status in one transaction.
    Either both persist or neither does. Never retried on failure.
    """
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than zero")
    method = PaymentMethod(method)

    try:
        sf = (
            await db.execute(
                select(StudentFee)
                .options(selectinload(StudentFee.fee_structure))
                .where(StudentFee.id == student_fee_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if not sf:
            raise NotFoundError("Student fee", student_fee_id)

        payment = Payment(
            student_fee_id=sf.id,
            amount=amount,
            method=method.value,
            reference=(reference or "").strip() or None,
            paid_at=paid_at or datetime.now(timezone.utc),
            recorded_by=recorded_by,
        )
        db.add(payment)
        await db.flush()

        amounts = (
            await db.execute(select(Payment.amount).where(Payment.student_fee_id == sf.id))
        ).scalars().all()
        total_paid = sum_amounts(amounts)
        old_status = sf.status
        new_status = derive_fee_status(total_paid, sf.fee_structure.amount)
        sf.status = new_status.value

        await _log_fee_audit(
            db, "payments", payment.id, FeeAuditAction.PAYMENT,
            None,
            {
                "student_fee_id": str(sf.id),
                "amount": str(amount),
                "method": method.value,
                "total_paid": str(total_paid),
            },
            recorded_by,
        )
        if old_status != new_status.value:
            await _log_fee_audit(
                db, "student_fees", sf.id, FeeAuditAction.STATUS_CHANGE,
                {"status": old_status},
                {"status": new_status.value},
                recorded_by,
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(payment)
    logger.info(
        "payment.recorded",
        payment_id=str(payment.id),
        student_fee_id=str(sf.id),
        amount=str(amount),
        method=method.value,
        status=new_status.value,
    )
    response = _payment_to_response(payment)
    await _publish(
        events,
        DomainEvent(
            PAYMENT_RECORDED,
            {
                "payment_id": str(payment.id),
                "student_fee_id": str(sf.id),
                "student_id": str(sf.student_id),
                "amount": str(amount),
                "total_paid": str(total_paid),
                "status": new_status.value,
            },
        ),
    )
    return response


async def get_payment_history(db: AsyncSession, student_id: UUID) -> List[PaymentResponse]:
    await _get_student(db, student_id)
    rows = (
        await db.execute(
            select(Payment)
            .join(StudentFee, Payment.student_fee_id == StudentFee.id)
            .where(StudentFee.student_id == student_id)
            .order_by(Payment.paid_at.desc(), Payment.id.desc())
        )
    ).scalars().all()
    return [_payment_to_response(p) for p in rows]


# --- Ledger ---
async def get_student_ledger(db: AsyncSession, student_id: UUID) -> StudentLedger:
    """
    Full fee history for a student. Paid amount, balance and status are derived
    from the payment rows on every read; the stored status column is not trusted.
    """
    await _get_student(db, student_id)
    fees = (
        await db.execute(
            select(StudentFee)
            .options(selectinload(StudentFee.fee_structure), selectinload(StudentFee.payments))
            .where(StudentFee.student_id == student_id)
            .order_by(StudentFee.created_at, StudentFee.id)
            .execution_options(populate_existing=True)
        )
    ).scalars().all()

    total_due = Decimal("0")
    total_paid = Decimal("0")
    items: List[LedgerItem] = []
    for sf in fees:
        fs = sf.fee_structure
        amount = to_money(fs.amount)
        paid, balance, status = fee_position(amount, (p.amount for p in sf.payments))
        if stored_status_drifted(sf.status, status):
            logger.warning(
                "ledger.status_drift",
                student_fee_id=str(sf.id),
                stored=sf.status,
                derived=status.value,
            )
        total_due += amount
        total_paid += paid
        items.append(
            LedgerItem(
                id=sf.id,
                fee_structure_id=fs.id,
                title=fs.name,
                amount=amount,
                paid_amount=paid,
                balance=balance,
                status=status,
                due_date=fs.due_date,
                payments=[_payment_to_response(p) for p in sf.payments],
            )
        )

    return StudentLedger(
        student_id=student_id,
        summary=LedgerSummary(
            total_due=to_money(total_due),
            total_paid=to_money(total_paid),
            outstanding=to_money(total_due - total_paid),
        ),
        items=items,
    )


async def ensure_can_view_student(db: AsyncSession, current_user: CurrentUser, student_id: UUID) -> None:
    """
    VIEW_ANY_LEDGER sees every student. VIEW_OWN_LEDGER only sees a student
    whose login or parent login is the current user.
    """
    if current_user.has(Permission.VIEW_ANY_LEDGER):
        return
    if current_user.has(Permission.VIEW_OWN_LEDGER):
        linked = (
            await db.execute(
                select(Student.id).where(
                    Student.id == student_id,
                    (Student.user_id == current_user.id) | (Student.parent_user_id == current_user.id),
                )
            )
        ).scalar_one_or_none()
        if linked is not None:
            return
    raise PermissionDeniedError("You can only view ledgers of students linked to your account")
