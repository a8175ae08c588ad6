from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from llnd_portal.api.deps import get_portal_client, require_admin
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.schemas.quiz_api import (
    AdminBypassResponse,
    CreateAdminBypassRequest,
    QuizAttemptFilter,
    QuizAttemptListResponse,
    QuizAttemptResponse,
    QuizStatisticsResponse,
    RejectStudentRequest,
)
from llnd_portal.schemas.user import CurrentUser

router = APIRouter(prefix="/admin/quiz", tags=["Admin Quiz"])


@router.get("/attempts", response_model=QuizAttemptListResponse)
async def list_quiz_attempts(
    student_id: Optional[str] = Query(None, alias="studentId"),
    attempt_status: Optional[str] = Query(None, alias="status"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    is_passed: Optional[bool] = Query(None, alias="isPassed"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    filters = QuizAttemptFilter(
        student_id=student_id,
        status=attempt_status,
        from_date=from_date,
        to_date=to_date,
        is_passed=is_passed,
        page_number=page_number,
        page_size=page_size,
    )
    return await client.list_quiz_attempts(filters)


@router.get("/attempts/{quiz_attempt_id}", response_model=QuizAttemptResponse)
async def get_quiz_attempt(
    quiz_attempt_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    return await client.get_quiz_attempt(quiz_attempt_id)


@router.get("/statistics", response_model=QuizStatisticsResponse)
async def quiz_statistics(
    client: PortalApiClient = Depends(get_portal_client), admin: CurrentUser = Depends(require_admin)
):
    return await client.get_quiz_statistics()


@router.get("/bypasses", response_model=List[AdminBypassResponse])
async def list_bypasses(
    client: PortalApiClient = Depends(get_portal_client), admin: CurrentUser = Depends(require_admin)
):
    return await client.list_admin_bypasses()


@router.post("/bypasses", response_model=AdminBypassResponse, status_code=status.HTTP_201_CREATED)
async def create_bypass(
    payload: CreateAdminBypassRequest,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    """Let a student who failed the assessment enrol anyway."""
    return await client.create_admin_bypass(admin.user_id, payload)


@router.delete("/bypasses/{bypass_id}")
async def revoke_bypass(
    bypass_id: str,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    await client.revoke_admin_bypass(admin.user_id, bypass_id)
    return {"message": "Bypass has been revoked"}


@router.post("/reject")
async def reject_student(
    payload: RejectStudentRequest,
    client: PortalApiClient = Depends(get_portal_client),
    admin: CurrentUser = Depends(require_admin),
):
    await client.reject_student(admin.user_id, payload)
    return {"message": "Student has been rejected"}
