from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from llnd_portal.api.deps import get_portal_client, require_admin
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.schemas.student import (
    StudentCreate,
    StudentFilter,
    StudentPage,
    StudentResponse,
    StudentStatsResponse,
    StudentUpdate,
)
from llnd_portal.schemas.user import CurrentUser
from llnd_portal.services.admin_review import DEFAULT_PAGE_SIZE, load_student_page

router = APIRouter(prefix="/admin/students", tags=["Admin Students"])


@router.get("", response_model=StudentPage)
async def list_students(
    search: Optional[str] = Query(None, alias="searchQuery"),
    student_status: Optional[str] = Query(None, alias="status"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=100),
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    """One page of students with their quiz and enrollment-form badges."""
    filters = StudentFilter(
        search_query=search or None,
        status=student_status or None,
        page_number=page_number,
        page_size=page_size,
    )
    return await load_student_page(client, filters)


@router.get("/stats", response_model=StudentStatsResponse)
async def student_stats(
    client: PortalApiClient = Depends(get_portal_client), admin: CurrentUser = Depends(require_admin)
):
    return await client.get_student_stats()


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    return await client.get_student(student_id)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    return await client.create_student(payload)


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    payload: StudentUpdate,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    return await client.update_student(student_id, payload)


@router.delete("/{student_id}")
async def delete_student(
    student_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    deleted = await client.delete_student(student_id)
    return {"deleted": deleted}


@router.patch("/{student_id}/toggle-status")
async def toggle_student_status(
    student_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    toggled = await client.toggle_student_status(student_id)
    return {"toggled": toggled}
