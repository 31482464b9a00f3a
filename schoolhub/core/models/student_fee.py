"""Student fee assignment: one fee structure charged to one student."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from schoolhub.core.enums import FeeStatus
from schoolhub.db.session import Base


class StudentFee(Base):
    """
    Fee charged to a student. status is recomputed from the summed payments
    on every payment; readers derive it again rather than trusting the column.
    """

    __tablename__ = "student_fees"
    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING','PARTIAL','PAID')",
            name="chk_student_fee_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_structure_id = Column(
        UUID(as_uuid=True),
        ForeignKey("fee_structures.id", ondelete="RESTRICT"),
        nullable=False,
    )
    status = Column(String(20), nullable=False, default=FeeStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", backref="fees")
    fee_structure = relationship("FeeStructure")
    payments = relationship(
        "Payment",
        back_populates="student_fee",
        order_by="Payment.paid_at.desc()",
    )
