from fastapi import APIRouter, Depends, HTTPException

from llnd_portal.api.deps import get_current_user, get_portal_client
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.schemas.enrollment import EnrollmentFormResponse
from llnd_portal.schemas.quiz_api import QuizAttemptResponse, StudentQuizStatus
from llnd_portal.schemas.user import CurrentUser

router = APIRouter(prefix="/me", tags=["Student"])


def _student_id(current_user: CurrentUser) -> str:
    if not current_user.student_id:
        raise HTTPException(status_code=403, detail="Student account required")
    return current_user.student_id


@router.get("/quiz-status", response_model=StudentQuizStatus)
async def my_quiz_status(
    current_user: CurrentUser = Depends(get_current_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    return await client.get_student_quiz_status(_student_id(current_user))


@router.get("/quiz-attempts/latest", response_model=QuizAttemptResponse)
async def my_latest_attempt(
    current_user: CurrentUser = Depends(get_current_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    return await client.get_latest_quiz_attempt(_student_id(current_user))


@router.get("/enrollment-form", response_model=EnrollmentFormResponse)
async def my_enrollment_form(
    current_user: CurrentUser = Depends(get_current_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    return await client.get_enrollment_form(_student_id(current_user))
