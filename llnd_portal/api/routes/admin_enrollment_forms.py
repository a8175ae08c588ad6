from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from llnd_portal.api.deps import get_portal_client, require_admin
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.schemas.enrollment import (
    EnrollmentFormFilter,
    EnrollmentFormListResponse,
    EnrollmentFormResponse,
    EnrollmentFormStats,
    ReviewEnrollmentFormRequest,
)
from llnd_portal.schemas.user import CurrentUser

router = APIRouter(prefix="/admin/enrollment-forms", tags=["Admin Enrollment Forms"])


@router.get("", response_model=EnrollmentFormListResponse)
async def list_enrollment_forms(
    search: Optional[str] = Query(None, alias="searchQuery"),
    form_status: Optional[str] = Query(None, alias="status"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_descending: Optional[bool] = Query(None, alias="sortDescending"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    filters = EnrollmentFormFilter(
        search_query=search or None,
        status=form_status or None,
        from_date=from_date,
        to_date=to_date,
        sort_by=sort_by,
        sort_descending=sort_descending,
        page=page,
        page_size=page_size,
    )
    return await client.list_enrollment_forms(filters)


@router.get("/stats", response_model=EnrollmentFormStats)
async def enrollment_form_stats(
    client: PortalApiClient = Depends(get_portal_client), admin: CurrentUser = Depends(require_admin)
):
    return await client.get_enrollment_form_stats()


@router.get("/{student_id}", response_model=EnrollmentFormResponse)
async def get_enrollment_form(
    student_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    return await client.get_enrollment_form_for_admin(student_id)


@router.post("/{student_id}/review")
async def review_enrollment_form(
    student_id: str,
    payload: ReviewEnrollmentFormRequest,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    """Approve or reject a submitted form."""
    await client.review_enrollment_form(student_id, payload.approve, payload.review_notes)
    return {"message": "Enrollment form approved" if payload.approve else "Enrollment form rejected"}


@router.get("/{student_id}/html", response_class=HTMLResponse)
async def enrollment_form_html(
    student_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    return HTMLResponse(await client.get_enrollment_form_html(student_id))
