"""Finance schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from schoolhub.core.enums import FeeStatus, PaymentMethod
from schoolhub.core.schemas import CamelModel


# --- Fee Structure ---
class FeeStructureCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = None
    due_date: Optional[date] = None
    academic_year_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v


class FeeStructureResponse(CamelModel):
    id: UUID
    name: str
    amount: Decimal
    description: Optional[str] = None
    due_date: Optional[date] = None
    academic_year_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


# --- Student Fee Assignment ---
class AssignFeeRequest(CamelModel):
    student_id: UUID
    fee_structure_id: UUID


class StudentFeeResponse(CamelModel):
    id: UUID
    student_id: UUID
    fee_structure_id: UUID
    status: FeeStatus
    created_at: datetime
    updated_at: datetime


# --- Payment ---
class PaymentCreate(CamelModel):
    student_fee_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: PaymentMethod
    reference: Optional[str] = Field(None, max_length=100)

    @field_validator("method", mode="before")
    @classmethod
    def normalise_method(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class PaymentResponse(CamelModel):
    id: UUID
    student_fee_id: UUID
    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None
    paid_at: datetime
    recorded_by: Optional[UUID] = None


# --- Ledger ---
class LedgerSummary(CamelModel):
    total_due: Decimal
    total_paid: Decimal
    outstanding: Decimal


class LedgerItem(CamelModel):
    id: UUID
    fee_structure_id: UUID
    title: str
    amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: FeeStatus
    due_date: Optional[date] = None
    payments: List[PaymentResponse] = Field(default_factory=list)


class StudentLedger(CamelModel):
    student_id: UUID
    summary: LedgerSummary
    items: List[LedgerItem]
