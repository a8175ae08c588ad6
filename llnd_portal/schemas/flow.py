"""What the front end sees of a stored quiz attempt or wizard.

Passwords and correct answers never leave the server.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from llnd_portal.quiz.catalog import get_catalog
from llnd_portal.schemas.enrollment import PublicEnrollmentFormResponse
from llnd_portal.schemas.enrollment_form import EnrollmentFormData
from llnd_portal.schemas.payment import PaymentMethod
from llnd_portal.schemas.quiz import QuestionOut, QuizTotals, SectionResult
from llnd_portal.schemas.registration import Declaration
from llnd_portal.services.quiz_flow import QuizFlowState, QuizOutcome, QuizStep, QuizVariant
from llnd_portal.services.wizard import WIZARD_STEPS, WizardState, WizardStatus


class RegistrationOut(BaseModel):
    full_name: str
    email: str
    phone: str


class QuestionProgress(BaseModel):
    section_id: str
    section_title: str
    section_description: str
    section_number: int
    section_count: int
    question_number: int
    question_count: int
    question: QuestionOut
    answer: Optional[str] = None
    part_answers: Dict[int, str] = {}
    validation_message: Optional[str] = None


class QuizView(BaseModel):
    variant: QuizVariant
    step: QuizStep
    catalog_version: str
    registration: RegistrationOut
    progress: Optional[QuestionProgress] = None
    section_results: List[SectionResult]
    totals: Optional[QuizTotals] = None
    declaration: Declaration
    field_errors: Dict[str, str]
    submitting: bool
    submit_error: Optional[str] = None
    outcome: Optional[QuizOutcome] = None

    @classmethod
    def from_state(cls, state: QuizFlowState) -> "QuizView":
        progress = None
        if state.step == QuizStep.quiz and state.runner is not None:
            catalog = get_catalog()
            section = catalog.section_at(state.section_index)
            question = section.questions[state.runner.question_index]
            progress = QuestionProgress(
                section_id=section.id,
                section_title=section.title,
                section_description=section.description,
                section_number=state.section_index + 1,
                section_count=len(catalog.sections),
                question_number=state.runner.question_index + 1,
                question_count=len(section.questions),
                question=QuestionOut.from_question(question),
                answer=state.runner.answers.get(question.id),
                part_answers=state.runner.part_answers.get(question.id, {}),
                validation_message=state.runner.validation_message,
            )
        registration = state.registration
        return cls(
            variant=state.variant,
            step=state.step,
            catalog_version=state.catalog_version,
            registration=RegistrationOut(
                full_name=registration.full_name, email=registration.email, phone=registration.phone
            ),
            progress=progress,
            section_results=state.section_results,
            totals=state.totals,
            declaration=state.declaration,
            field_errors=state.field_errors,
            submitting=state.submitting,
            submit_error=state.submit_error,
            outcome=state.outcome,
        )


class QuizAttemptView(QuizView):
    id: str


class WizardView(BaseModel):
    id: str
    step: int
    step_name: str
    status: WizardStatus
    message: Optional[str] = None
    registration: RegistrationOut
    agreed_to_terms: bool
    registration_errors: Dict[str, str]
    course_id: str
    course_date_id: str
    course_price: float
    payment_method: PaymentMethod
    transaction_id: str
    card_errors: Dict[str, str]
    payment_error: Optional[str] = None
    payment_completed: bool
    payment_transaction_id: Optional[int] = None
    quiz: QuizView
    form: EnrollmentFormData
    form_section: int
    form_errors: Dict[str, str]
    submitting: bool
    submit_error: Optional[str] = None
    result: Optional[PublicEnrollmentFormResponse] = None

    @classmethod
    def from_state(cls, draft_id: str, state: WizardState) -> "WizardView":
        registration = state.registration
        return cls(
            id=draft_id,
            step=state.step,
            step_name=WIZARD_STEPS[state.step],
            status=state.status,
            message=state.message,
            registration=RegistrationOut(
                full_name=registration.full_name, email=registration.email, phone=registration.phone
            ),
            agreed_to_terms=state.agreed_to_terms,
            registration_errors=state.registration_errors,
            course_id=state.course_id,
            course_date_id=state.course_date_id,
            course_price=state.course_price,
            payment_method=state.payment_method,
            transaction_id=state.transaction_id,
            card_errors=state.card_errors,
            payment_error=state.payment_error,
            payment_completed=state.payment_completed,
            payment_transaction_id=state.payment_transaction_id,
            quiz=QuizView.from_state(state.quiz),
            form=state.form,
            form_section=state.form_section,
            form_errors=state.form_errors,
            submitting=state.submitting,
            submit_error=state.submit_error,
            result=state.result,
        )
