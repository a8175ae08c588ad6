"""
State machine for one quiz attempt.

guidelines (student) / registration (guest) -> quiz -> declaration -> results -> submitted

``transition(state, event)`` is pure. Validation failures are recorded on the
state (``field_errors``) and leave the step unchanged; an event that makes no
sense in the current step raises InvalidTransition. The wizard embeds the same
machine starting straight at ``quiz``.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from llnd_portal.core.errors import InvalidTransition
from llnd_portal.quiz.catalog import get_catalog
from llnd_portal.schemas.quiz import QuizCatalog, QuizTotals, Section, SectionResult
from llnd_portal.schemas.registration import Declaration, RegistrationData
from llnd_portal.schemas.user import CurrentUser
from llnd_portal.services import quiz_runner
from llnd_portal.services.quiz_runner import SectionRunner
from llnd_portal.services.scoring import compute_totals, score_section
from llnd_portal.services.validators import QUIZ_AGREEMENT_MESSAGE, validate_declaration, validate_registration


class QuizVariant(str, Enum):
    student = "student"
    guest = "guest"
    wizard = "wizard"


class QuizStep(str, Enum):
    guidelines = "guidelines"
    registration = "registration"
    quiz = "quiz"
    declaration = "declaration"
    results = "results"
    submitted = "submitted"
    cancelled = "cancelled"


class QuizOutcome(BaseModel):
    quiz_attempt_id: Optional[str] = None
    is_passed: bool = False
    can_enroll: bool = False
    overall_percentage: Optional[float] = None
    user_id: Optional[str] = None
    student_id: Optional[str] = None


class QuizFlowState(BaseModel):
    variant: QuizVariant
    step: QuizStep
    catalog_version: str
    section_index: int = 0
    runner: Optional[SectionRunner] = None
    answers: Dict[str, str] = Field(default_factory=dict)
    section_results: List[SectionResult] = Field(default_factory=list)
    totals: Optional[QuizTotals] = None
    registration: RegistrationData = Field(default_factory=RegistrationData)
    declaration: Declaration = Field(default_factory=Declaration)
    field_errors: Dict[str, str] = Field(default_factory=dict)
    submit_error: Optional[str] = None
    submitting: bool = False
    outcome: Optional[QuizOutcome] = None

    @property
    def finished(self) -> bool:
        return self.step in (QuizStep.submitted, QuizStep.cancelled)


# ---- events ----

class StartQuiz(BaseModel):
    type: Literal["start_quiz"] = "start_quiz"


class Register(BaseModel):
    type: Literal["register"] = "register"
    registration: RegistrationData
    agreed: bool = False


class Answer(BaseModel):
    type: Literal["answer"] = "answer"
    value: str


class AnswerPart(BaseModel):
    type: Literal["answer_part"] = "answer_part"
    part_index: int
    value: str


class CompleteDragDrop(BaseModel):
    type: Literal["complete_drag_drop"] = "complete_drag_drop"


class Continue(BaseModel):
    type: Literal["continue"] = "continue"


class Declare(BaseModel):
    type: Literal["declare"] = "declare"
    honest: bool = False
    understand: bool = False
    name: str = ""


class SubmissionStarted(BaseModel):
    type: Literal["submission_started"] = "submission_started"


class SubmissionSucceeded(BaseModel):
    type: Literal["submission_succeeded"] = "submission_succeeded"
    outcome: QuizOutcome


class SubmissionFailed(BaseModel):
    type: Literal["submission_failed"] = "submission_failed"
    message: str


class Cancel(BaseModel):
    type: Literal["cancel"] = "cancel"


QuizEvent = Annotated[
    Union[
        StartQuiz,
        Register,
        Answer,
        AnswerPart,
        CompleteDragDrop,
        Continue,
        Declare,
        SubmissionStarted,
        SubmissionSucceeded,
        SubmissionFailed,
        Cancel,
    ],
    Field(discriminator="type"),
]

# Events a learner may send; submission events are produced by quiz_submission only
LearnerQuizEvent = Annotated[
    Union[StartQuiz, Register, Answer, AnswerPart, CompleteDragDrop, Continue, Declare, Cancel],
    Field(discriminator="type"),
]


def new_quiz_flow(
    variant: QuizVariant, user: Optional[CurrentUser] = None, catalog: Optional[QuizCatalog] = None
) -> QuizFlowState:
    catalog = catalog or get_catalog()
    first_step = {
        QuizVariant.student: QuizStep.guidelines,
        QuizVariant.guest: QuizStep.registration,
        QuizVariant.wizard: QuizStep.quiz,
    }[variant]
    state = QuizFlowState(
        variant=variant,
        step=first_step,
        catalog_version=catalog.version,
        declaration=Declaration(name=user.full_name if user else ""),
    )
    if first_step == QuizStep.quiz:
        state = state.model_copy(update={"runner": quiz_runner.start_section(catalog.section_at(0))})
    return state


def current_section(state: QuizFlowState, catalog: Optional[QuizCatalog] = None) -> Section:
    catalog = catalog or get_catalog()
    return catalog.section_at(state.section_index)


def _require(state: QuizFlowState, event, *steps: QuizStep) -> None:
    if state.step not in steps:
        raise InvalidTransition(state.step.value, event.type)


def _on_runner(state: QuizFlowState, event, catalog: QuizCatalog, apply) -> QuizFlowState:
    _require(state, event, QuizStep.quiz)
    section = catalog.section_at(state.section_index)
    try:
        runner = apply(state.runner, section)
    except (ValueError, IndexError) as e:
        raise InvalidTransition(state.step.value, event.type) from e
    return state.model_copy(update={"runner": runner})


def _continue(state: QuizFlowState, event: Continue, catalog: QuizCatalog) -> QuizFlowState:
    _require(state, event, QuizStep.quiz)
    section = catalog.section_at(state.section_index)
    runner, section_answers = quiz_runner.advance(state.runner, section)
    if section_answers is None:
        return state.model_copy(update={"runner": runner})

    results = state.section_results + [score_section(section, section_answers)]
    answers = {**state.answers, **section_answers}
    next_index = state.section_index + 1
    if next_index < len(catalog.sections):
        return state.model_copy(
            update={
                "answers": answers,
                "section_results": results,
                "section_index": next_index,
                "runner": quiz_runner.start_section(catalog.section_at(next_index)),
            }
        )
    return state.model_copy(
        update={
            "answers": answers,
            "section_results": results,
            "runner": None,
            "totals": compute_totals(catalog, results),
            "step": QuizStep.declaration,
        }
    )


def transition(state: QuizFlowState, event, catalog: Optional[QuizCatalog] = None) -> QuizFlowState:
    catalog = catalog or get_catalog()

    if isinstance(event, Cancel):
        if state.finished:
            raise InvalidTransition(state.step.value, event.type)
        return state.model_copy(update={"step": QuizStep.cancelled, "runner": None})

    if isinstance(event, StartQuiz):
        _require(state, event, QuizStep.guidelines)
        return state.model_copy(
            update={"step": QuizStep.quiz, "runner": quiz_runner.start_section(catalog.section_at(0))}
        )

    if isinstance(event, Register):
        _require(state, event, QuizStep.registration)
        errors = validate_registration(event.registration, event.agreed, QUIZ_AGREEMENT_MESSAGE)
        if errors:
            return state.model_copy(update={"registration": event.registration, "field_errors": errors})
        declaration = state.declaration
        if not declaration.name:
            declaration = declaration.model_copy(update={"name": event.registration.full_name.strip()})
        return state.model_copy(
            update={
                "registration": event.registration,
                "declaration": declaration,
                "field_errors": {},
                "step": QuizStep.quiz,
                "runner": quiz_runner.start_section(catalog.section_at(0)),
            }
        )

    if isinstance(event, Answer):
        return _on_runner(state, event, catalog, lambda r, s: quiz_runner.record_answer(r, s, event.value))

    if isinstance(event, AnswerPart):
        return _on_runner(
            state, event, catalog, lambda r, s: quiz_runner.record_part_answer(r, s, event.part_index, event.value)
        )

    if isinstance(event, CompleteDragDrop):
        return _on_runner(state, event, catalog, quiz_runner.record_drag_drop_completion)

    if isinstance(event, Continue):
        return _continue(state, event, catalog)

    if isinstance(event, Declare):
        _require(state, event, QuizStep.declaration)
        declaration = Declaration(honest=event.honest, understand=event.understand, name=event.name)
        message = validate_declaration(declaration)
        if message:
            return state.model_copy(update={"declaration": declaration, "field_errors": {"declaration": message}})
        return state.model_copy(update={"declaration": declaration, "field_errors": {}, "step": QuizStep.results})

    if isinstance(event, SubmissionStarted):
        _require(state, event, QuizStep.results)
        if state.submitting or state.variant == QuizVariant.wizard:
            raise InvalidTransition(state.step.value, event.type)
        return state.model_copy(update={"submitting": True, "submit_error": None})

    if isinstance(event, SubmissionSucceeded):
        _require(state, event, QuizStep.results)
        return state.model_copy(update={"submitting": False, "outcome": event.outcome, "step": QuizStep.submitted})

    if isinstance(event, SubmissionFailed):
        _require(state, event, QuizStep.results)
        return state.model_copy(update={"submitting": False, "submit_error": event.message})

    raise InvalidTransition(state.step.value, getattr(event, "type", type(event).__name__))
