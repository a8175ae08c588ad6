from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi_cache.decorator import cache

from llnd_portal.api.cache import request_path_key
from llnd_portal.api.deps import get_current_user, get_portal_client
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.core.config import settings
from llnd_portal.core.errors import FieldValidationError
from llnd_portal.schemas.enrollment import (
    CourseDateDropdownItem,
    CourseDropdownItem,
    CreateEnrollmentRequest,
    DocumentUploadResponse,
    EnrollmentResponse,
    PaymentProofResponse,
)
from llnd_portal.schemas.user import CurrentUser
from llnd_portal.services.validators import validate_upload

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


def _student_id(current_user: CurrentUser) -> str:
    if not current_user.student_id:
        raise HTTPException(status_code=403, detail="Student account required")
    return current_user.student_id


async def _read_upload(upload: UploadFile):
    content = await upload.read()
    errors = validate_upload(upload.content_type, len(content), settings.MAX_UPLOAD_BYTES)
    if errors:
        raise FieldValidationError(errors)
    return upload.filename or "upload", content, upload.content_type


@router.get("/courses", response_model=List[CourseDropdownItem])
@cache(expire=settings.COURSE_CACHE_SECONDS, key_builder=request_path_key)
async def list_courses(client: PortalApiClient = Depends(get_portal_client)):
    return await client.get_course_dropdown()


@router.get("/courses/{course_id}/dates", response_model=List[CourseDateDropdownItem])
@cache(expire=settings.COURSE_CACHE_SECONDS, key_builder=request_path_key)
async def list_course_dates(course_id: str, client: PortalApiClient = Depends(get_portal_client)):
    return await client.get_course_dates(course_id)


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    payload: CreateEnrollmentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    return await client.create_enrollment(_student_id(current_user), payload)


@router.delete("/{enrollment_id}")
async def cancel_enrollment(
    enrollment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    await client.cancel_enrollment(enrollment_id, _student_id(current_user))
    return {"message": "Enrollment cancelled"}


@router.post("/{enrollment_id}/payment-proof", response_model=PaymentProofResponse)
async def submit_payment_proof(
    enrollment_id: str,
    transaction_id: str = Form("", alias="transactionId"),
    amount_paid: float = Form(..., alias="amountPaid"),
    payment_date: Optional[str] = Form(None, alias="paymentDate"),
    payment_method: Optional[str] = Form(None, alias="paymentMethod"),
    bank_name: Optional[str] = Form(None, alias="bankName"),
    reference_number: Optional[str] = Form(None, alias="referenceNumber"),
    receipt: UploadFile = File(..., alias="receiptFile"),
    current_user: CurrentUser = Depends(get_current_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    if not transaction_id.strip():
        raise FieldValidationError({"transactionId": "Transaction ID is required"})
    receipt_file = await _read_upload(receipt)
    return await client.submit_payment_proof(
        enrollment_id,
        _student_id(current_user),
        transaction_id.strip(),
        amount_paid,
        receipt_file,
        payment_date=payment_date,
        payment_method=payment_method,
        bank_name=bank_name,
        reference_number=reference_number,
    )


@router.post("/documents", response_model=DocumentUploadResponse)
async def upload_document(
    document_type: str = Form(..., alias="documentType"),
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    """Upload an identity or supporting document for the enrollment form."""
    document = await _read_upload(file)
    return await client.upload_enrollment_document(document_type, document, student_id=current_user.student_id)
