from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from llnd_portal.api.deps import get_portal_client
from llnd_portal.api.routes.enrollments import list_course_dates, list_courses
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.core.errors import FieldValidationError
from llnd_portal.crud import crud_draft
from llnd_portal.db.session import get_db
from llnd_portal.schemas.enrollment import CourseDateDropdownItem, CourseDropdownItem
from llnd_portal.schemas.flow import WizardView
from llnd_portal.schemas.payment import CardDetails
from llnd_portal.services import wizard
from llnd_portal.services.wizard import ENROLLMENT_FORM, LearnerWizardEvent, Next, SelectCourse, WizardState, WizardStatus
from llnd_portal.services.wizard_submission import pay_by_card, submit_wizard

router = APIRouter(prefix="/enrollment-wizard", tags=["Enrollment Wizard"])


class StartWizardRequest(BaseModel):
    course_id: str = ""
    course_date_id: str = ""


class WizardEventRequest(BaseModel):
    event: LearnerWizardEvent


def _load(db: Session, wizard_id: str):
    draft = crud_draft.get_draft(db, wizard_id, kind=crud_draft.WIZARD_DRAFT)
    if draft is None:
        raise HTTPException(status_code=404, detail="Enrollment not found")
    return draft, WizardState.model_validate(draft.state)


def _save(db: Session, draft, state: WizardState) -> WizardView:
    crud_draft.save_draft(db, draft, state, state.status.value)
    return WizardView.from_state(draft.id, state)


# Same cached dropdowns as /enrollments, under the wizard prefix
router.add_api_route("/courses", list_courses, methods=["GET"], response_model=List[CourseDropdownItem])
router.add_api_route(
    "/courses/{course_id}/dates", list_course_dates, methods=["GET"], response_model=List[CourseDateDropdownItem]
)


@router.post("", response_model=WizardView, response_model_by_alias=False, status_code=status.HTTP_201_CREATED)
def start_wizard(payload: Optional[StartWizardRequest] = None, db: Session = Depends(get_db)):
    payload = payload or StartWizardRequest()
    state = wizard.new_wizard(payload.course_id, payload.course_date_id)
    draft = crud_draft.create_draft(db, crud_draft.WIZARD_DRAFT, state, state.status.value)
    return WizardView.from_state(draft.id, state)


@router.get("/{wizard_id}", response_model=WizardView, response_model_by_alias=False)
def read_wizard(wizard_id: str, db: Session = Depends(get_db)):
    draft, state = _load(db, wizard_id)
    return WizardView.from_state(draft.id, state)


@router.post("/{wizard_id}/events", response_model=WizardView, response_model_by_alias=False)
async def apply_event(
    wizard_id: str,
    payload: WizardEventRequest,
    db: Session = Depends(get_db),
    client: PortalApiClient = Depends(get_portal_client),
):
    draft, state = await run_in_threadpool(_load, db, wizard_id)
    event = payload.event

    if isinstance(event, SelectCourse):
        # Price always comes from the course list, never from the browser
        courses = await client.get_course_dropdown()
        course = next((c for c in courses if c.course_id == event.course_id), None)
        if course is None:
            raise FieldValidationError({"courseId": "Unknown course"})
        event = event.model_copy(update={"price": course.price})

    if isinstance(event, Next) and state.step == ENROLLMENT_FORM:
        return await _submit(db, draft, state, client)

    state = wizard.transition(state, event)
    if state.status == WizardStatus.cancelled:
        await run_in_threadpool(crud_draft.delete_draft, db, draft)
        return WizardView.from_state(wizard_id, state)
    return await run_in_threadpool(_save, db, draft, state)


@router.post("/{wizard_id}/payment/card", response_model=WizardView, response_model_by_alias=False)
async def pay_with_card(
    wizard_id: str,
    card: CardDetails,
    db: Session = Depends(get_db),
    client: PortalApiClient = Depends(get_portal_client),
):
    draft, state = await run_in_threadpool(_load, db, wizard_id)
    state = await pay_by_card(state, card, client)
    return await run_in_threadpool(_save, db, draft, state)


@router.post("/{wizard_id}/submit", response_model=WizardView, response_model_by_alias=False)
async def submit(
    wizard_id: str,
    db: Session = Depends(get_db),
    client: PortalApiClient = Depends(get_portal_client),
):
    draft, state = await run_in_threadpool(_load, db, wizard_id)
    return await _submit(db, draft, state, client)


async def _submit(db: Session, draft, state: WizardState, client: PortalApiClient) -> WizardView:
    async def mark_submitting(started: WizardState) -> None:
        await run_in_threadpool(crud_draft.save_draft, db, draft, started, started.status.value)

    state = await submit_wizard(state, client, on_started=mark_submitting)
    return await run_in_threadpool(_save, db, draft, state)
