import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.core.errors import InvalidTransition, PortalApiError
from llnd_portal.schemas.quiz import SectionResult
from llnd_portal.schemas.quiz_api import SubmitGuestQuizRequest, SubmitQuizRequest, SubmitQuizSectionResult
from llnd_portal.schemas.user import CurrentUser
from llnd_portal.services.quiz_flow import (
    QuizFlowState,
    QuizOutcome,
    QuizStep,
    QuizVariant,
    SubmissionFailed,
    SubmissionStarted,
    SubmissionSucceeded,
    transition,
)
from llnd_portal.services.scoring import section_name

logger = logging.getLogger(__name__)

MISSING_STUDENT_ID_MESSAGE = "Student ID not found. Please log out and log back in to refresh your session."
GENERIC_FAILURE_MESSAGE = "Failed to submit quiz results. Please try again."


def section_payload(results: Sequence[SectionResult]) -> List[SubmitQuizSectionResult]:
    return [
        SubmitQuizSectionResult(
            section_name=section_name(result.title),
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            section_percentage=result.percentage,
            section_passed=result.passed,
        )
        for result in results
    ]


def build_student_request(state: QuizFlowState, student_id: str) -> SubmitQuizRequest:
    totals = state.totals
    return SubmitQuizRequest(
        student_id=student_id,
        total_questions=totals.total_questions,
        correct_answers=totals.correct_answers,
        overall_percentage=totals.overall_percentage,
        is_passed=totals.passed,
        declaration_name=state.declaration.name.strip(),
        section_results=section_payload(state.section_results),
    )


def build_guest_request(state: QuizFlowState) -> SubmitGuestQuizRequest:
    totals = state.totals
    registration = state.registration
    return SubmitGuestQuizRequest(
        full_name=registration.full_name.strip(),
        email=registration.email.strip(),
        phone=registration.phone.strip(),
        password=registration.password,
        total_questions=totals.total_questions,
        correct_answers=totals.correct_answers,
        overall_percentage=totals.overall_percentage,
        is_passed=totals.passed,
        declaration_name=state.declaration.name.strip(),
        section_results=section_payload(state.section_results),
    )


async def submit_quiz_attempt(
    state: QuizFlowState,
    client: PortalApiClient,
    user: Optional[CurrentUser] = None,
    on_started: Optional[Callable[[QuizFlowState], Awaitable[None]]] = None,
) -> QuizFlowState:
    """Send a finished attempt to the enrollment API.

    ``on_started`` receives the state with ``submitting`` set before the
    network call so a caller can persist it and turn away a second submit.
    """
    if state.step != QuizStep.results:
        raise InvalidTransition(state.step.value, "submit")
    state = transition(state, SubmissionStarted())
    if on_started is not None:
        await on_started(state)

    try:
        if state.variant == QuizVariant.student:
            if user is None or not user.student_id:
                return transition(state, SubmissionFailed(message=MISSING_STUDENT_ID_MESSAGE))
            result = await client.submit_quiz(build_student_request(state, user.student_id))
            outcome = QuizOutcome(
                quiz_attempt_id=result.quiz_attempt_id,
                is_passed=result.is_passed,
                can_enroll=result.can_enroll,
                overall_percentage=result.overall_percentage,
                student_id=user.student_id,
            )
        else:
            result = await client.submit_guest_quiz(build_guest_request(state))
            outcome = QuizOutcome(
                quiz_attempt_id=result.quiz_attempt_id,
                is_passed=result.is_passed,
                can_enroll=result.can_enroll,
                overall_percentage=result.overall_percentage,
                user_id=result.user_id,
                student_id=result.student_id,
            )
    except PortalApiError as e:
        logger.warning("Quiz submission failed: %s", e.message)
        return transition(state, SubmissionFailed(message=e.message or GENERIC_FAILURE_MESSAGE))

    logger.info("Quiz attempt %s submitted (passed=%s)", outcome.quiz_attempt_id, outcome.is_passed)
    return transition(state, SubmissionSucceeded(outcome=outcome))
