from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from llnd_portal.api.deps import get_portal_client, require_admin
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.core.errors import FieldValidationError
from llnd_portal.schemas.payment import (
    AdminPaymentFilter,
    AdminPaymentListResponse,
    AdminPaymentProof,
    AdminPaymentStats,
    VerifyPaymentRequest,
)
from llnd_portal.schemas.user import CurrentUser
from llnd_portal.services.validators import validate_payment_review

router = APIRouter(prefix="/admin/payments", tags=["Admin Payments"])


@router.get("", response_model=AdminPaymentListResponse)
async def list_payment_proofs(
    proof_status: Optional[str] = Query(None, alias="status"),
    student_id: Optional[str] = Query(None, alias="studentId"),
    course_id: Optional[str] = Query(None, alias="courseId"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    search: Optional[str] = Query(None, alias="searchQuery"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_descending: Optional[bool] = Query(None, alias="sortDescending"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    filters = AdminPaymentFilter(
        status=proof_status or None,
        student_id=student_id,
        course_id=course_id,
        from_date=from_date,
        to_date=to_date,
        search_query=search or None,
        sort_by=sort_by,
        sort_descending=sort_descending,
        page=page,
        page_size=page_size,
    )
    return await client.list_payment_proofs(filters)


@router.get("/stats", response_model=AdminPaymentStats)
async def payment_stats(client: PortalApiClient = Depends(get_portal_client), admin: CurrentUser = Depends(require_admin)):
    return await client.get_payment_stats()


@router.get("/{payment_proof_id}", response_model=AdminPaymentProof)
async def get_payment_proof(
    payment_proof_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    return await client.get_payment_proof(payment_proof_id)


@router.put("/{payment_proof_id}/verify")
async def verify_payment(
    payment_proof_id: str,
    payload: VerifyPaymentRequest,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    """Verify a payment proof, or reject it with a reason."""
    errors = validate_payment_review(payload)
    if errors:
        raise FieldValidationError(errors)
    await client.verify_payment(payment_proof_id, admin.user_id, payload)
    return {"message": "Payment verified" if payload.approve else "Payment rejected"}


@router.get("/{payment_proof_id}/receipt")
async def download_receipt(
    payment_proof_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    filename, content, content_type = await client.download_receipt(payment_proof_id)
    return Response(
        content=content,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
