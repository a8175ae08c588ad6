from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from llnd_portal.api.deps import get_optional_user, get_portal_client
from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.crud import crud_draft
from llnd_portal.db.session import get_db
from llnd_portal.schemas.flow import QuizAttemptView, QuizView
from llnd_portal.schemas.user import CurrentUser
from llnd_portal.services import quiz_flow
from llnd_portal.services.quiz_flow import LearnerQuizEvent, QuizFlowState, QuizStep, QuizVariant
from llnd_portal.services.quiz_submission import submit_quiz_attempt

router = APIRouter(prefix="/quiz-attempts", tags=["Quiz Attempts"])


class StartAttemptRequest(BaseModel):
    variant: QuizVariant = QuizVariant.student


class QuizEventRequest(BaseModel):
    event: LearnerQuizEvent


def _view(draft_id: str, state: QuizFlowState) -> QuizAttemptView:
    return QuizAttemptView(id=draft_id, **QuizView.from_state(state).model_dump())


def _load(db: Session, attempt_id: str, current_user: Optional[CurrentUser]):
    draft = crud_draft.get_draft(db, attempt_id, kind=crud_draft.QUIZ_DRAFT)
    if draft is None:
        raise HTTPException(status_code=404, detail="Quiz attempt not found")
    if draft.owner_id and (current_user is None or current_user.user_id != draft.owner_id):
        raise HTTPException(status_code=404, detail="Quiz attempt not found")
    return draft, QuizFlowState.model_validate(draft.state)


@router.post("", response_model=QuizAttemptView, status_code=status.HTTP_201_CREATED)
def start_attempt(
    payload: StartAttemptRequest,
    db: Session = Depends(get_db),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
):
    if payload.variant == QuizVariant.wizard:
        raise HTTPException(status_code=400, detail="The wizard assessment is started from the enrollment wizard")
    if payload.variant == QuizVariant.student and current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    user = current_user if payload.variant == QuizVariant.student else None
    state = quiz_flow.new_quiz_flow(payload.variant, user=user)
    draft = crud_draft.create_draft(
        db, crud_draft.QUIZ_DRAFT, state, state.step.value, owner_id=user.user_id if user else None
    )
    return _view(draft.id, state)


@router.get("/{attempt_id}", response_model=QuizAttemptView)
def read_attempt(
    attempt_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
):
    draft, state = _load(db, attempt_id, current_user)
    return _view(draft.id, state)


@router.post("/{attempt_id}/events", response_model=QuizAttemptView)
def apply_event(
    attempt_id: str,
    payload: QuizEventRequest,
    db: Session = Depends(get_db),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
):
    draft, state = _load(db, attempt_id, current_user)
    state = quiz_flow.transition(state, payload.event)
    if state.step == QuizStep.cancelled:
        crud_draft.delete_draft(db, draft)
        return _view(attempt_id, state)
    crud_draft.save_draft(db, draft, state, state.step.value)
    return _view(draft.id, state)


@router.post("/{attempt_id}/submit", response_model=QuizAttemptView)
async def submit_attempt(
    attempt_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    client: PortalApiClient = Depends(get_portal_client),
):
    draft, state = await run_in_threadpool(_load, db, attempt_id, current_user)

    async def mark_submitting(started: QuizFlowState) -> None:
        await run_in_threadpool(crud_draft.save_draft, db, draft, started, started.step.value)

    state = await submit_quiz_attempt(state, client, user=current_user, on_started=mark_submitting)
    await run_in_threadpool(crud_draft.save_draft, db, draft, state, state.step.value)
    return _view(draft.id, state)
