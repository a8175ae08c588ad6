"""
Public enrollment wizard.

Registration -> Course Selection -> Payment -> LLND Assessment -> Enrollment Form

Each step validates locally before ``Next`` moves on. The assessment step
runs the quiz machine from ``quiz_flow`` in its ``wizard`` variant. Nothing is
sent to the enrollment API until the final combined submission (see
``wizard_submission``), apart from an optional card payment on step 3.
"""

from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

from llnd_portal.core.errors import InvalidTransition
from llnd_portal.schemas.enrollment import PublicEnrollmentFormResponse
from llnd_portal.schemas.enrollment_form import EnrollmentFormData, update_section
from llnd_portal.schemas.payment import PaymentMethod
from llnd_portal.schemas.registration import RegistrationData
from llnd_portal.services import quiz_flow
from llnd_portal.services.quiz_flow import QuizEvent, QuizFlowState, QuizStep, QuizVariant, new_quiz_flow
from llnd_portal.services.validators import (
    WIZARD_AGREEMENT_MESSAGE,
    first_invalid_form_section,
    validate_form_section,
    validate_registration,
)

REGISTRATION, COURSE_SELECTION, PAYMENT, ASSESSMENT, ENROLLMENT_FORM = 1, 2, 3, 4, 5

WIZARD_STEPS = {
    REGISTRATION: "Registration",
    COURSE_SELECTION: "Course Selection",
    PAYMENT: "Payment",
    ASSESSMENT: "LLND Assessment",
    ENROLLMENT_FORM: "Enrollment Form",
}

FORM_SECTION_COUNT = 5

# The embedded assessment is submitted with the enrollment form, never on its own
WIZARD_QUIZ_EVENTS = {"answer", "answer_part", "complete_drag_drop", "continue", "declare"}

SELECT_COURSE_MESSAGE = "Please select a course"
SELECT_DATE_MESSAGE = "Please select a course date"
CARD_PAYMENT_REQUIRED_MESSAGE = "Please complete the card payment"
ASSESSMENT_REQUIRED_MESSAGE = "Please complete the LLND assessment"
REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


class WizardStatus(str, Enum):
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class WizardState(BaseModel):
    step: int = REGISTRATION
    status: WizardStatus = WizardStatus.in_progress
    message: Optional[str] = None

    registration: RegistrationData = Field(default_factory=RegistrationData)
    agreed_to_terms: bool = False
    registration_errors: Dict[str, str] = Field(default_factory=dict)

    course_id: str = ""
    course_date_id: str = ""
    course_price: float = 0

    payment_method: PaymentMethod = PaymentMethod.bank_transfer
    transaction_id: str = ""
    card_errors: Dict[str, str] = Field(default_factory=dict)
    payment_error: Optional[str] = None
    payment_completed: bool = False
    payment_transaction_id: Optional[int] = None
    user_id: Optional[str] = None
    student_id: Optional[str] = None

    quiz: QuizFlowState = Field(default_factory=lambda: new_quiz_flow(QuizVariant.wizard))

    form: EnrollmentFormData = Field(default_factory=EnrollmentFormData)
    form_section: int = 1
    form_errors: Dict[str, str] = Field(default_factory=dict)

    submitting: bool = False
    submit_error: Optional[str] = None
    result: Optional[PublicEnrollmentFormResponse] = None

    @property
    def quiz_completed(self) -> bool:
        return self.quiz.step == QuizStep.results


# ---- events ----

class UpdateRegistration(BaseModel):
    type: Literal["update_registration"] = "update_registration"
    registration: RegistrationData
    agreed: bool = False


class SelectCourse(BaseModel):
    type: Literal["select_course"] = "select_course"
    course_id: str
    price: float = 0


class SelectCourseDate(BaseModel):
    type: Literal["select_course_date"] = "select_course_date"
    course_date_id: str


class ChoosePaymentMethod(BaseModel):
    type: Literal["choose_payment_method"] = "choose_payment_method"
    method: PaymentMethod
    transaction_id: str = ""


class CardValidationFailed(BaseModel):
    type: Literal["card_validation_failed"] = "card_validation_failed"
    errors: Dict[str, str]


class CardPaymentSucceeded(BaseModel):
    type: Literal["card_payment_succeeded"] = "card_payment_succeeded"
    transaction_id: Optional[int] = None
    user_id: Optional[str] = None
    student_id: Optional[str] = None


class CardPaymentFailed(BaseModel):
    type: Literal["card_payment_failed"] = "card_payment_failed"
    message: str


class QuizAction(BaseModel):
    type: Literal["quiz"] = "quiz"
    event: QuizEvent


class UpdateEnrollmentForm(BaseModel):
    type: Literal["update_form"] = "update_form"
    section: int = Field(ge=1, le=FORM_SECTION_COUNT)
    values: Dict[str, object]


class FormNext(BaseModel):
    type: Literal["form_next"] = "form_next"


class FormPrevious(BaseModel):
    type: Literal["form_previous"] = "form_previous"


class Next(BaseModel):
    type: Literal["next"] = "next"


class Previous(BaseModel):
    type: Literal["previous"] = "previous"


class WizardSubmissionStarted(BaseModel):
    type: Literal["submission_started"] = "submission_started"


class WizardSubmissionSucceeded(BaseModel):
    type: Literal["submission_succeeded"] = "submission_succeeded"
    result: PublicEnrollmentFormResponse


class WizardSubmissionFailed(BaseModel):
    type: Literal["submission_failed"] = "submission_failed"
    message: str


class CancelWizard(BaseModel):
    type: Literal["cancel"] = "cancel"


WizardEvent = Annotated[
    Union[
        UpdateRegistration,
        SelectCourse,
        SelectCourseDate,
        ChoosePaymentMethod,
        CardValidationFailed,
        CardPaymentSucceeded,
        CardPaymentFailed,
        QuizAction,
        UpdateEnrollmentForm,
        FormNext,
        FormPrevious,
        Next,
        Previous,
        WizardSubmissionStarted,
        WizardSubmissionSucceeded,
        WizardSubmissionFailed,
        CancelWizard,
    ],
    Field(discriminator="type"),
]

# Events a learner may send; payment and submission outcomes are produced server side
LearnerWizardEvent = Annotated[
    Union[
        UpdateRegistration,
        SelectCourse,
        SelectCourseDate,
        ChoosePaymentMethod,
        QuizAction,
        UpdateEnrollmentForm,
        FormNext,
        FormPrevious,
        Next,
        Previous,
        CancelWizard,
    ],
    Field(discriminator="type"),
]


def new_wizard(course_id: str = "", course_date_id: str = "") -> WizardState:
    """Start a wizard, optionally with the course and date pre-selected from a link."""
    return WizardState(course_id=course_id, course_date_id=course_date_id if course_id else "")


def _require(state: WizardState, event, step: int) -> None:
    if state.status != WizardStatus.in_progress or state.step != step:
        raise InvalidTransition(f"{state.status.value}:{state.step}", event.type)


def _prefill_from_registration(state: WizardState) -> WizardState:
    registration = state.registration
    full_name = registration.full_name.strip()
    name_parts = full_name.split(" ")
    applicant = state.form.applicant.model_copy(
        update={
            "given_name": name_parts[0] if name_parts else "",
            "surname": " ".join(name_parts[1:]),
            "email": registration.email,
            "mobile": registration.phone,
        }
    )
    form = state.form.model_copy(update={"applicant": applicant})
    declaration = state.quiz.declaration.model_copy(update={"name": registration.full_name})
    quiz = state.quiz.model_copy(update={"declaration": declaration})
    return state.model_copy(update={"form": form, "quiz": quiz})


def _next(state: WizardState, event: Next) -> WizardState:
    cleared = state.model_copy(update={"message": None})

    if state.step == REGISTRATION:
        errors = validate_registration(state.registration, state.agreed_to_terms, WIZARD_AGREEMENT_MESSAGE)
        if errors:
            return cleared.model_copy(update={"registration_errors": errors})
        prefilled = _prefill_from_registration(cleared)
        return prefilled.model_copy(update={"registration_errors": {}, "step": COURSE_SELECTION})

    if state.step == COURSE_SELECTION:
        if not state.course_id:
            return cleared.model_copy(update={"message": SELECT_COURSE_MESSAGE})
        if not state.course_date_id:
            return cleared.model_copy(update={"message": SELECT_DATE_MESSAGE})
        return cleared.model_copy(update={"step": PAYMENT})

    if state.step == PAYMENT:
        if state.payment_method == PaymentMethod.card and not state.payment_completed:
            return cleared.model_copy(update={"message": CARD_PAYMENT_REQUIRED_MESSAGE})
        return cleared.model_copy(update={"step": ASSESSMENT})

    if state.step == ASSESSMENT:
        if not state.quiz_completed:
            return cleared.model_copy(update={"message": ASSESSMENT_REQUIRED_MESSAGE})
        return cleared.model_copy(update={"step": ENROLLMENT_FORM})

    # Enrollment form: every section must pass before the final submission
    section, errors = first_invalid_form_section(state.form)
    if section is not None:
        return cleared.model_copy(
            update={"form_section": section, "form_errors": errors, "message": REQUIRED_FIELDS_MESSAGE}
        )
    return cleared.model_copy(update={"form_errors": {}})


def transition(state: WizardState, event) -> WizardState:
    if isinstance(event, CancelWizard):
        if state.status != WizardStatus.in_progress:
            raise InvalidTransition(state.status.value, event.type)
        return state.model_copy(update={"status": WizardStatus.cancelled})

    if state.status != WizardStatus.in_progress:
        raise InvalidTransition(state.status.value, event.type)

    if isinstance(event, Next):
        if state.submitting:
            raise InvalidTransition("submitting", event.type)
        return _next(state, event)

    if isinstance(event, Previous):
        if state.submitting:
            raise InvalidTransition("submitting", event.type)
        return state.model_copy(update={"step": max(REGISTRATION, state.step - 1), "message": None})

    if isinstance(event, UpdateRegistration):
        _require(state, event, REGISTRATION)
        return state.model_copy(update={"registration": event.registration, "agreed_to_terms": event.agreed})

    if isinstance(event, SelectCourse):
        _require(state, event, COURSE_SELECTION)
        # A different course invalidates the chosen date
        date_id = state.course_date_id if event.course_id == state.course_id else ""
        return state.model_copy(
            update={"course_id": event.course_id, "course_price": event.price, "course_date_id": date_id}
        )

    if isinstance(event, SelectCourseDate):
        _require(state, event, COURSE_SELECTION)
        if not state.course_id:
            return state.model_copy(update={"message": SELECT_COURSE_MESSAGE})
        return state.model_copy(update={"course_date_id": event.course_date_id})

    if isinstance(event, ChoosePaymentMethod):
        _require(state, event, PAYMENT)
        if state.payment_completed:
            raise InvalidTransition("payment_completed", event.type)
        return state.model_copy(
            update={
                "payment_method": event.method,
                "transaction_id": event.transaction_id,
                "card_errors": {},
                "payment_error": None,
            }
        )

    if isinstance(event, CardValidationFailed):
        _require(state, event, PAYMENT)
        return state.model_copy(update={"card_errors": event.errors, "payment_error": None})

    if isinstance(event, CardPaymentSucceeded):
        _require(state, event, PAYMENT)
        return state.model_copy(
            update={
                "payment_completed": True,
                "payment_transaction_id": event.transaction_id,
                "user_id": event.user_id or state.user_id,
                "student_id": event.student_id or state.student_id,
                "card_errors": {},
                "payment_error": None,
                "message": None,
                "step": ASSESSMENT,
            }
        )

    if isinstance(event, CardPaymentFailed):
        _require(state, event, PAYMENT)
        return state.model_copy(update={"card_errors": {}, "payment_error": event.message})

    if isinstance(event, QuizAction):
        _require(state, event, ASSESSMENT)
        if event.event.type not in WIZARD_QUIZ_EVENTS:
            raise InvalidTransition(state.quiz.step.value, event.event.type)
        quiz = quiz_flow.transition(state.quiz, event.event)
        return state.model_copy(update={"quiz": quiz, "message": None})

    if isinstance(event, UpdateEnrollmentForm):
        _require(state, event, ENROLLMENT_FORM)
        form = update_section(state.form, event.section, event.values)
        return state.model_copy(update={"form": form})

    if isinstance(event, FormNext):
        _require(state, event, ENROLLMENT_FORM)
        errors = validate_form_section(state.form, state.form_section)
        if errors:
            return state.model_copy(update={"form_errors": errors, "message": REQUIRED_FIELDS_MESSAGE})
        return state.model_copy(
            update={
                "form_section": min(state.form_section + 1, FORM_SECTION_COUNT),
                "form_errors": {},
                "message": None,
            }
        )

    if isinstance(event, FormPrevious):
        _require(state, event, ENROLLMENT_FORM)
        return state.model_copy(update={"form_section": max(state.form_section - 1, 1), "form_errors": {}})

    if isinstance(event, WizardSubmissionStarted):
        _require(state, event, ENROLLMENT_FORM)
        if state.submitting:
            raise InvalidTransition("submitting", event.type)
        return state.model_copy(update={"submitting": True, "submit_error": None})

    if isinstance(event, WizardSubmissionSucceeded):
        _require(state, event, ENROLLMENT_FORM)
        return state.model_copy(
            update={
                "submitting": False,
                "result": event.result,
                "user_id": event.result.user_id,
                "student_id": event.result.student_id,
                "status": WizardStatus.completed,
            }
        )

    if isinstance(event, WizardSubmissionFailed):
        _require(state, event, ENROLLMENT_FORM)
        return state.model_copy(update={"submitting": False, "submit_error": event.message})

    raise InvalidTransition(f"{state.status.value}:{state.step}", getattr(event, "type", type(event).__name__))
