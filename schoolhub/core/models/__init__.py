from schoolhub.auth.models import User
from schoolhub.core.models.academic_year import AcademicYear
from schoolhub.core.models.student import Student
from schoolhub.core.models.fee_structure import FeeStructure
from schoolhub.core.models.student_fee import StudentFee
from schoolhub.core.models.payment import Payment
from schoolhub.core.models.fee_audit_log import FeeAuditLog

__all__ = [
    "AcademicYear",
    "FeeAuditLog",
    "FeeStructure",
    "Payment",
    "Student",
    "StudentFee",
    "User",
]
