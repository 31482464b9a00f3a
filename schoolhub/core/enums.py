from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    CASHIER = "CASHIER"
    TEACHER = "TEACHER"
    PARENT = "PARENT"
    STUDENT = "STUDENT"


class Permission(str, Enum):
    MANAGE_FEE_STRUCTURES = "MANAGE_FEE_STRUCTURES"
    VIEW_FEE_STRUCTURES = "VIEW_FEE_STRUCTURES"
    ASSIGN_FEES = "ASSIGN_FEES"
    RECORD_PAYMENTS = "RECORD_PAYMENTS"
    VIEW_ANY_LEDGER = "VIEW_ANY_LEDGER"
    VIEW_OWN_LEDGER = "VIEW_OWN_LEDGER"
    MANAGE_STUDENTS = "MANAGE_STUDENTS"
    VIEW_STUDENTS = "VIEW_STUDENTS"
    MANAGE_ACADEMIC_YEARS = "MANAGE_ACADEMIC_YEARS"


class FeeStatus(str, Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    ONLINE = "ONLINE"
    CHECK = "CHECK"
    BANK_TRANSFER = "BANK_TRANSFER"


class AcademicYearStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class FeeAuditAction(str, Enum):
    CREATE = "CREATE"
    ASSIGN = "ASSIGN"
    PAYMENT = "PAYMENT"
    STATUS_CHANGE = "STATUS_CHANGE"
