"""
Async client for the enrollment API.

Most endpoints answer with an envelope ``{success, message, data}`` which is
unwrapped here; the quiz endpoints return their body without one. A non-2xx
status, a transport failure or ``success: false`` all raise PortalApiError.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from llnd_portal.core.config import settings
from llnd_portal.core.errors import PortalApiError
from llnd_portal.schemas.enrollment import (
    CourseDateDropdownItem,
    CourseDropdownItem,
    CreateEnrollmentRequest,
    DocumentUploadResponse,
    EnrollmentFormFilter,
    EnrollmentFormListResponse,
    EnrollmentFormResponse,
    EnrollmentFormStats,
    EnrollmentResponse,
    PaymentProofResponse,
    PublicEnrollmentFormResponse,
    PublicEnrollmentSubmission,
    ReviewEnrollmentFormRequest,
)
from llnd_portal.schemas.payment import (
    AdminPaymentFilter,
    AdminPaymentListResponse,
    AdminPaymentProof,
    AdminPaymentStats,
    CardPaymentResult,
    ProcessCardPaymentRequest,
    VerifyPaymentRequest,
)
from llnd_portal.schemas.quiz_api import (
    AdminBypassResponse,
    CanEnrollResponse,
    CreateAdminBypassRequest,
    GuestQuizSubmissionResult,
    HasPassedResponse,
    QuizAttemptFilter,
    QuizAttemptListResponse,
    QuizAttemptResponse,
    QuizStatisticsResponse,
    QuizSubmissionResult,
    RejectStudentRequest,
    StudentQuizStatus,
    SubmitGuestQuizRequest,
    SubmitQuizRequest,
)
from llnd_portal.schemas.student import (
    StudentCreate,
    StudentFilter,
    StudentListResponse,
    StudentResponse,
    StudentStatsResponse,
    StudentUpdate,
)
from llnd_portal.services.payment import failure_message

logger = logging.getLogger(__name__)

# (filename, content, content type)
FileTuple = Tuple[str, bytes, str]

UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from the enrollment API"
PAYMENT_UNCONFIRMED_MESSAGE = (
    "The payment could not be confirmed. Please contact us before trying again."
)


def unwrap_envelope(body: Any, status_code: Optional[int] = None) -> Any:
    """Return ``data`` from an API envelope, raising when it reports failure."""
    if not isinstance(body, dict) or "success" not in body:
        raise PortalApiError(UNEXPECTED_RESPONSE_MESSAGE, status_code)
    if not body.get("success"):
        raise PortalApiError(body.get("message") or "Request failed", status_code)
    return body.get("data")


class PortalApiClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            headers=headers,
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "PortalApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # ---- transport helpers ----

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Enrollment API %s %s failed: %s", method, path, e)
            raise PortalApiError("Unable to reach the enrollment API") from e

    @staticmethod
    def _body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def _check_status(self, response: httpx.Response, body: Any) -> None:
        if response.is_success:
            return
        message = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("title")
        logger.warning(
            "Enrollment API %s %s returned %s", response.request.method, response.request.url.path, response.status_code
        )
        raise PortalApiError(message or f"Request failed with status {response.status_code}", response.status_code)

    async def _enveloped(self, method: str, path: str, **kwargs) -> Any:
        response = await self._send(method, path, **kwargs)
        body = self._body(response)
        self._check_status(response, body)
        return unwrap_envelope(body, response.status_code)

    async def _flat(self, method: str, path: str, **kwargs) -> Any:
        response = await self._send(method, path, **kwargs)
        body = self._body(response)
        self._check_status(response, body)
        if isinstance(body, dict) and body.get("success") is False:
            raise PortalApiError(body.get("message") or "Request failed", response.status_code)
        return body

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning("Enrollment API returned an unreadable %s: %s", model.__name__, e.error_count())
            raise PortalApiError(UNEXPECTED_RESPONSE_MESSAGE) from e

    @staticmethod
    def _params(model) -> Dict[str, Any]:
        params = model.to_api() if model is not None else {}
        # Query strings carry booleans as 'true' / 'false'
        return {k: (str(v).lower() if isinstance(v, bool) else v) for k, v in params.items()}

    # ---- quiz ----

    async def submit_quiz(self, request: SubmitQuizRequest) -> QuizSubmissionResult:
        body = await self._flat("POST", "/quiz/submit", json=request.to_api())
        return self._parse(QuizSubmissionResult, body)

    async def submit_guest_quiz(self, request: SubmitGuestQuizRequest) -> GuestQuizSubmissionResult:
        body = await self._flat("POST", "/quiz/submit-guest", json=request.to_api())
        return self._parse(GuestQuizSubmissionResult, body)

    async def get_quiz_attempt(self, quiz_attempt_id: str) -> QuizAttemptResponse:
        body = await self._flat("GET", f"/quiz/{quiz_attempt_id}")
        return self._parse(QuizAttemptResponse, body)

    async def list_quiz_attempts(self, filters: Optional[QuizAttemptFilter] = None) -> QuizAttemptListResponse:
        body = await self._flat("GET", "/quiz", params=self._params(filters))
        return self._parse(QuizAttemptListResponse, body)

    async def get_student_quiz_status(self, student_id: str) -> StudentQuizStatus:
        body = await self._flat("GET", f"/quiz/student/{student_id}/status")
        return self._parse(StudentQuizStatus, body)

    async def get_latest_quiz_attempt(self, student_id: str) -> QuizAttemptResponse:
        body = await self._flat("GET", f"/quiz/student/{student_id}/latest")
        return self._parse(QuizAttemptResponse, body)

    async def has_student_passed_quiz(self, student_id: str) -> HasPassedResponse:
        body = await self._flat("GET", f"/quiz/student/{student_id}/has-passed")
        return self._parse(HasPassedResponse, body)

    async def can_student_enroll(self, student_id: str) -> CanEnrollResponse:
        body = await self._flat("GET", f"/quiz/student/{student_id}/can-enroll")
        return self._parse(CanEnrollResponse, body)

    # ---- admin quiz overrides ----

    async def get_quiz_statistics(self) -> QuizStatisticsResponse:
        data = await self._enveloped("GET", "/admin/quiz/statistics")
        return self._parse(QuizStatisticsResponse, data)

    async def create_admin_bypass(self, admin_id: str, request: CreateAdminBypassRequest) -> AdminBypassResponse:
        data = await self._enveloped(
            "POST", "/admin/quiz/bypass", json=request.to_api(), headers={"X-Admin-UserId": admin_id}
        )
        logger.info("Quiz bypass granted to student %s by %s", request.student_id, admin_id)
        return self._parse(AdminBypassResponse, data)

    async def revoke_admin_bypass(self, admin_id: str, bypass_id: str) -> None:
        await self._enveloped("DELETE", f"/admin/quiz/bypass/{bypass_id}", headers={"X-Admin-UserId": admin_id})
        logger.info("Quiz bypass %s revoked by %s", bypass_id, admin_id)

    async def list_admin_bypasses(self) -> List[AdminBypassResponse]:
        data = await self._enveloped("GET", "/admin/quiz/bypasses")
        return [self._parse(AdminBypassResponse, item) for item in data or []]

    async def reject_student(self, admin_id: str, request: RejectStudentRequest) -> None:
        await self._enveloped(
            "POST", "/admin/quiz/reject", json=request.to_api(), headers={"X-Admin-UserId": admin_id}
        )
        logger.info("Quiz attempt %s rejected by %s", request.quiz_attempt_id, admin_id)

    # ---- student management ----

    async def list_students(self, filters: Optional[StudentFilter] = None) -> StudentListResponse:
        data = await self._enveloped("GET", "/StudentManagement", params=self._params(filters))
        return self._parse(StudentListResponse, data)

    async def get_student(self, student_id: str) -> StudentResponse:
        data = await self._enveloped("GET", f"/StudentManagement/{student_id}")
        return self._parse(StudentResponse, data)

    async def create_student(self, request: StudentCreate) -> StudentResponse:
        data = await self._enveloped("POST", "/StudentManagement", json=request.to_api())
        return self._parse(StudentResponse, data)

    async def update_student(self, student_id: str, request: StudentUpdate) -> StudentResponse:
        data = await self._enveloped("PUT", f"/StudentManagement/{student_id}", json=request.to_api())
        return self._parse(StudentResponse, data)

    async def delete_student(self, student_id: str) -> bool:
        return bool(await self._enveloped("DELETE", f"/StudentManagement/{student_id}"))

    async def toggle_student_status(self, student_id: str) -> bool:
        return bool(await self._enveloped("PATCH", f"/StudentManagement/{student_id}/toggle-status"))

    async def get_student_stats(self) -> StudentStatsResponse:
        data = await self._enveloped("GET", "/StudentManagement/stats")
        return self._parse(StudentStatsResponse, data)

    # ---- enrollment forms ----

    async def get_enrollment_form(self, student_id: str) -> EnrollmentFormResponse:
        data = await self._enveloped("GET", f"/StudentEnrollmentForm/student/{student_id}")
        return self._parse(EnrollmentFormResponse, data)

    async def submit_public_enrollment_form(
        self, request: PublicEnrollmentSubmission
    ) -> PublicEnrollmentFormResponse:
        data = await self._enveloped("POST", "/StudentEnrollmentForm/public/submit", json=request.to_api())
        return self._parse(PublicEnrollmentFormResponse, data)

    async def list_enrollment_forms(
        self, filters: Optional[EnrollmentFormFilter] = None
    ) -> EnrollmentFormListResponse:
        data = await self._enveloped("GET", "/StudentEnrollmentForm/admin/list", params=self._params(filters))
        return self._parse(EnrollmentFormListResponse, data)

    async def get_enrollment_form_for_admin(self, student_id: str) -> EnrollmentFormResponse:
        data = await self._enveloped("GET", f"/StudentEnrollmentForm/admin/{student_id}")
        return self._parse(EnrollmentFormResponse, data)

    async def review_enrollment_form(self, student_id: str, approve: bool, review_notes: Optional[str] = None) -> None:
        request = ReviewEnrollmentFormRequest(approve=approve, review_notes=review_notes)
        await self._enveloped("POST", f"/StudentEnrollmentForm/admin/{student_id}/review", json=request.to_api())
        logger.info("Enrollment form for %s %s", student_id, "approved" if approve else "rejected")

    async def get_enrollment_form_stats(self) -> EnrollmentFormStats:
        data = await self._enveloped("GET", "/StudentEnrollmentForm/admin/stats")
        return self._parse(EnrollmentFormStats, data)

    async def upload_enrollment_document(
        self, document_type: str, file: FileTuple, student_id: Optional[str] = None
    ) -> DocumentUploadResponse:
        path = "/StudentEnrollmentForm/upload-document"
        if student_id:
            path = f"{path}/{student_id}"
        data = await self._enveloped("POST", path, params={"documentType": document_type}, files={"file": file})
        return self._parse(DocumentUploadResponse, data)

    async def get_enrollment_form_html(self, student_id: str) -> str:
        response = await self._send("GET", f"/StudentEnrollmentForm/admin/{student_id}/pdf/html")
        if not response.is_success:
            raise PortalApiError("Failed to generate PDF", response.status_code)
        return response.text

    # ---- courses and enrollments ----

    async def get_course_dropdown(self) -> List[CourseDropdownItem]:
        data = await self._enveloped("GET", "/PublicEnrollment/courses")
        return [self._parse(CourseDropdownItem, item) for item in data or []]

    async def get_course_dates(self, course_id: str) -> List[CourseDateDropdownItem]:
        data = await self._enveloped("GET", f"/PublicEnrollment/courses/{course_id}/dates")
        return [self._parse(CourseDateDropdownItem, item) for item in data or []]

    async def create_enrollment(self, student_id: str, request: CreateEnrollmentRequest) -> EnrollmentResponse:
        data = await self._enveloped("POST", f"/enrollment/{student_id}", json=request.to_api())
        return self._parse(EnrollmentResponse, data)

    async def cancel_enrollment(self, enrollment_id: str, student_id: str) -> None:
        await self._enveloped("DELETE", f"/enrollment/{enrollment_id}/student/{student_id}")

    async def submit_payment_proof(
        self,
        enrollment_id: str,
        student_id: str,
        transaction_id: str,
        amount_paid: float,
        receipt: FileTuple,
        payment_date: Optional[str] = None,
        payment_method: Optional[str] = None,
        bank_name: Optional[str] = None,
        reference_number: Optional[str] = None,
    ) -> PaymentProofResponse:
        form = {"transactionId": transaction_id, "amountPaid": str(amount_paid)}
        optional_fields = {
            "paymentDate": payment_date,
            "paymentMethod": payment_method,
            "bankName": bank_name,
            "referenceNumber": reference_number,
        }
        form.update({k: v for k, v in optional_fields.items() if v})
        data = await self._enveloped(
            "POST",
            f"/enrollment/{enrollment_id}/payment/{student_id}",
            data=form,
            files={"receiptFile": receipt},
        )
        return self._parse(PaymentProofResponse, data)

    # ---- payments ----

    async def process_card_payment(self, request: ProcessCardPaymentRequest) -> CardPaymentResult:
        response = await self._send("POST", "/payment/process-card", json=request.to_api())
        body = self._body(response)
        if not isinstance(body, dict):
            body = None
        data = body.get("data") if body else None
        if not response.is_success or not body or not body.get("success") or not data:
            message = failure_message(body)
            logger.warning("Card payment declined (status %s)", response.status_code)
            raise PortalApiError(message, response.status_code)
        try:
            return CardPaymentResult.model_validate(data)
        except ValidationError as e:
            # The charge went through but the receipt is unreadable
            logger.error("Card payment succeeded with an unreadable response: %s", e.error_count())
            raise PortalApiError(PAYMENT_UNCONFIRMED_MESSAGE, response.status_code) from e

    # ---- admin payment-proof review ----

    async def list_payment_proofs(self, filters: Optional[AdminPaymentFilter] = None) -> AdminPaymentListResponse:
        data = await self._enveloped("GET", "/enrollment/admin/payments", params=self._params(filters))
        return self._parse(AdminPaymentListResponse, data)

    async def get_payment_proof(self, payment_proof_id: str) -> AdminPaymentProof:
        data = await self._enveloped("GET", f"/enrollment/admin/payments/{payment_proof_id}")
        return self._parse(AdminPaymentProof, data)

    async def get_payment_stats(self) -> AdminPaymentStats:
        data = await self._enveloped("GET", "/enrollment/admin/payments/stats")
        return self._parse(AdminPaymentStats, data)

    async def verify_payment(self, payment_proof_id: str, admin_id: str, request: VerifyPaymentRequest) -> None:
        await self._enveloped(
            "PUT",
            f"/enrollment/payment/{payment_proof_id}/verify",
            params={"adminId": admin_id},
            json=request.to_api(),
        )
        logger.info("Payment proof %s %s by %s", payment_proof_id, "verified" if request.approve else "rejected", admin_id)

    async def download_receipt(self, payment_proof_id: str) -> FileTuple:
        response = await self._send("GET", f"/enrollment/admin/payments/{payment_proof_id}/download")
        if not response.is_success:
            raise PortalApiError("Failed to download receipt", response.status_code)
        content_type = response.headers.get("content-type", "application/octet-stream")
        return f"payment_receipt_{payment_proof_id}", response.content, content_type
