from typing import Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session
from sqlalchemy.future import select

from llnd_portal.db.models import FlowDraft, new_id, utcnow

QUIZ_DRAFT = "quiz"
WIZARD_DRAFT = "wizard"


def create_draft(db: Session, kind: str, state: BaseModel, status: str, owner_id: Optional[str] = None):
    draft = FlowDraft(
        id=new_id(),
        kind=kind,
        owner_id=owner_id,
        state=state.model_dump(mode="json"),
        status=status,
    )
    db.add(draft)
    db.commit()
    db.refresh(draft)
    return draft


def get_draft(db: Session, draft_id: str, kind: Optional[str] = None):
    query = select(FlowDraft).where(FlowDraft.id == draft_id)
    if kind is not None:
        query = query.where(FlowDraft.kind == kind)
    return db.execute(query).scalar_one_or_none()


def save_draft(db: Session, draft: FlowDraft, state: BaseModel, status: str):
    draft.state = state.model_dump(mode="json")
    draft.status = status
    draft.updated_at = utcnow()
    db.commit()
    db.refresh(draft)
    return draft


def delete_draft(db: Session, draft: FlowDraft) -> None:
    db.delete(draft)
    db.commit()
