"""Payment: append-only record of money received against a student fee."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from schoolhub.db.session import Base


class Payment(Base):
    """Never updated or deleted. Overpayment is stored as-is."""

    __tablename__ = "payments"
    __table_args__ = (CheckConstraint("amount > 0", name="chk_payment_amount_positive"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_fee_id = Column(
        UUID(as_uuid=True),
        ForeignKey("student_fees.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(30), nullable=False)  # CASH, CARD, ONLINE, CHECK, BANK_TRANSFER
    reference = Column(String(100), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=False)
    recorded_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student_fee = relationship("StudentFee", back_populates="payments")
