from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from llnd_portal.core.base_config import CamelModel


class PaymentMethod(str, Enum):
    bank_transfer = "bank_transfer"
    direct_pay = "direct_pay"
    cash = "cash"
    card = "card"


class CardDetails(CamelModel):
    card_name: str = ""
    card_number: str = ""
    expiry_month: str = ""
    expiry_year: str = ""
    cvv: str = ""


class ProcessCardPaymentRequest(CamelModel):
    full_name: str
    email: str
    phone: str
    password: str
    course_id: str
    selected_course_date_id: str
    amount_cents: int
    currency: str = "AUD"
    card_name: str
    card_number: str
    expiry_month: str
    expiry_year: str
    cvv: str


class CardPaymentResult(CamelModel):
    success: bool = False
    transaction_id: Optional[int] = None
    response_code: Optional[str] = None
    response_message: Optional[str] = None
    authorisation_code: Optional[str] = None
    error_messages: Optional[str] = None
    amount_paid_cents: Optional[int] = None
    amount_paid: Optional[float] = None
    invoice_number: Optional[str] = None
    user_id: Optional[str] = None
    student_id: Optional[str] = None
    enrollment_id: Optional[str] = None
    student_name: Optional[str] = None
    email: Optional[str] = None
    course_name: Optional[str] = None
    course_code: Optional[str] = None
    selected_date: Optional[str] = None
    payment_status: Optional[str] = None
    enrollment_status: Optional[str] = None
    booked_at: Optional[str] = None


# ---- admin payment-proof review ----

class AdminPaymentProof(CamelModel):
    payment_proof_id: str
    enrollment_id: str
    student_id: str
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    course_id: Optional[str] = None
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    course_price: float = 0
    receipt_file_url: Optional[str] = None
    receipt_file_name: Optional[str] = None
    transaction_id: str
    amount_paid: float = 0
    payment_date: Optional[str] = None
    payment_method: Optional[str] = None
    bank_name: Optional[str] = None
    reference_number: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    status: str = "Pending"
    verified_by: Optional[str] = None
    verified_by_name: Optional[str] = None
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class AdminPaymentListResponse(CamelModel):
    payment_proofs: List[AdminPaymentProof] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10
    total_pages: int = 0


class RecentPaymentActivity(CamelModel):
    payment_proof_id: str
    student_name: Optional[str] = None
    course_name: Optional[str] = None
    amount: float = 0
    status: Optional[str] = None
    activity_date: Optional[datetime] = None


class AdminPaymentStats(CamelModel):
    pending_count: int = 0
    verified_count: int = 0
    rejected_count: int = 0
    total_count: int = 0
    total_verified_amount: float = 0
    total_pending_amount: float = 0
    recent_activity: List[RecentPaymentActivity] = Field(default_factory=list)


class AdminPaymentFilter(CamelModel):
    status: Optional[str] = None
    student_id: Optional[str] = None
    course_id: Optional[str] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    search_query: Optional[str] = None
    sort_by: Optional[str] = None
    sort_descending: Optional[bool] = None
    page: Optional[int] = None
    page_size: Optional[int] = None


class VerifyPaymentRequest(CamelModel):
    approve: bool
    rejection_reason: Optional[str] = None
