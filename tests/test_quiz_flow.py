"""Tests for the quiz attempt state machine and its submission."""

import pytest

from llnd_portal.core.errors import InvalidTransition
from llnd_portal.schemas.registration import RegistrationData
from llnd_portal.schemas.user import CurrentUser
from llnd_portal.services import quiz_flow
from llnd_portal.services.quiz_flow import (
    Answer,
    Cancel,
    Continue,
    Declare,
    QuizStep,
    QuizVariant,
    Register,
    StartQuiz,
    SubmissionStarted,
)
from llnd_portal.services.quiz_submission import MISSING_STUDENT_ID_MESSAGE, submit_quiz_attempt

from helpers import all_quiz_events, run_events

STUDENT = CurrentUser(user_id="u-1", student_id="s-1", full_name="Jane Citizen", token="t0k3n")

GUEST = RegistrationData(full_name="  Jane Citizen ", email="jane@example.com", phone="0400 000 000", password="secret1")


def finished_student_attempt(overrides=None, user=STUDENT):
    state = quiz_flow.new_quiz_flow(QuizVariant.student, user=user)
    state = quiz_flow.transition(state, StartQuiz())
    state = run_events(state, all_quiz_events(overrides))
    return quiz_flow.transition(state, Declare(honest=True, understand=True, name="Jane Citizen"))


class TestStudentFlow:
    def test_starts_on_guidelines_with_declaration_prefilled(self):
        state = quiz_flow.new_quiz_flow(QuizVariant.student, user=STUDENT)
        assert state.step == QuizStep.guidelines
        assert state.declaration.name == "Jane Citizen"

    def test_one_wrong_digital_answer_still_passes(self):
        state = finished_student_attempt({"d3": "www.google.com"})
        assert state.step == QuizStep.results
        digital = state.section_results[3]
        assert (digital.correct_answers, digital.percentage, digital.passed) == (2, 67, True)
        assert state.totals.passed

    def test_zero_numeracy_fails_attempt(self):
        state = finished_student_attempt({"n1": ["x", "x"], "n2": ["x", "x"], "n3": ["x", "x"]})
        numeracy = state.section_results[0]
        assert (numeracy.percentage, numeracy.passed) == (0, False)
        assert not state.totals.passed

    def test_results_kept_in_catalog_order(self):
        state = finished_student_attempt()
        assert [r.section_id for r in state.section_results] == ["numeracy", "literacy", "language", "digital"]
        assert state.totals.overall_percentage == 100

    def test_continue_without_answer_stays_put(self):
        state = quiz_flow.transition(quiz_flow.new_quiz_flow(QuizVariant.student, user=STUDENT), StartQuiz())
        state = quiz_flow.transition(state, Continue())
        assert state.runner.question_index == 0
        assert state.runner.validation_message == "Please select an answer before continuing"

    def test_incomplete_declaration_keeps_results_hidden(self):
        state = quiz_flow.new_quiz_flow(QuizVariant.student, user=STUDENT)
        state = run_events(quiz_flow.transition(state, StartQuiz()), all_quiz_events())
        assert state.step == QuizStep.declaration
        state = quiz_flow.transition(state, Declare(honest=True, understand=False, name="Jane"))
        assert state.step == QuizStep.declaration
        assert state.field_errors == {"declaration": "Please complete all declaration fields"}

    def test_answer_outside_quiz_step_rejected(self):
        state = quiz_flow.new_quiz_flow(QuizVariant.student, user=STUDENT)
        with pytest.raises(InvalidTransition):
            quiz_flow.transition(state, Answer(value="x"))

    def test_cancel_then_nothing_else(self):
        state = quiz_flow.transition(quiz_flow.new_quiz_flow(QuizVariant.student, user=STUDENT), Cancel())
        assert state.step == QuizStep.cancelled
        with pytest.raises(InvalidTransition):
            quiz_flow.transition(state, Cancel())

    def test_state_survives_json_round_trip(self):
        state = quiz_flow.transition(quiz_flow.new_quiz_flow(QuizVariant.student, user=STUDENT), StartQuiz())
        state = run_events(state, all_quiz_events()[:3])
        restored = quiz_flow.QuizFlowState.model_validate(state.model_dump(mode="json"))
        assert restored == state


class TestGuestFlow:
    def test_bad_email_keeps_learner_on_registration(self):
        state = quiz_flow.new_quiz_flow(QuizVariant.guest)
        bad = GUEST.model_copy(update={"email": "bad-email"})
        state = quiz_flow.transition(state, Register(registration=bad, agreed=True))
        assert state.step == QuizStep.registration
        assert state.field_errors["email"] == "Please enter a valid email address"
        assert state.runner is None

    def test_agreement_required(self):
        state = quiz_flow.transition(quiz_flow.new_quiz_flow(QuizVariant.guest), Register(registration=GUEST))
        assert state.field_errors == {"terms": "Please agree to the conditions"}

    def test_registration_prefills_declaration_name(self):
        state = quiz_flow.new_quiz_flow(QuizVariant.guest)
        state = quiz_flow.transition(state, Register(registration=GUEST, agreed=True))
        assert state.step == QuizStep.quiz
        assert state.declaration.name == "Jane Citizen"

    def test_guest_cannot_skip_registration(self):
        with pytest.raises(InvalidTransition):
            quiz_flow.transition(quiz_flow.new_quiz_flow(QuizVariant.guest), StartQuiz())


class TestWizardVariant:
    def test_starts_directly_on_first_question(self):
        state = quiz_flow.new_quiz_flow(QuizVariant.wizard)
        assert state.step == QuizStep.quiz
        assert state.runner.section_id == "numeracy"

    def test_cannot_be_submitted_on_its_own(self):
        state = run_events(quiz_flow.new_quiz_flow(QuizVariant.wizard), all_quiz_events())
        state = quiz_flow.transition(state, Declare(honest=True, understand=True, name="Jane"))
        with pytest.raises(InvalidTransition):
            quiz_flow.transition(state, SubmissionStarted())


class TestSubmission:
    async def test_student_submission(self, fake_api, portal_client):
        fake_api.on("POST", "/quiz/submit", body={
            "success": True, "quizAttemptId": "qa-1", "isPassed": True, "overallPercentage": 92.31, "canEnroll": True,
        })
        state = finished_student_attempt({"d3": "wrong"})

        state = await submit_quiz_attempt(state, portal_client, user=STUDENT)

        assert state.step == QuizStep.submitted
        assert state.outcome.quiz_attempt_id == "qa-1"
        sent = fake_api.sent_json()
        assert sent["studentId"] == "s-1"
        assert sent["overallPercentage"] == 92.31
        assert sent["declarationName"] == "Jane Citizen"
        assert sent["sectionResults"][3] == {
            "sectionName": "Digital Literacy",
            "totalQuestions": 3,
            "correctAnswers": 2,
            "sectionPercentage": 67,
            "sectionPassed": True,
        }
        assert fake_api.requests[-1].headers["Authorization"] == "Bearer t0k3n"

    async def test_missing_student_id_is_reported(self, fake_api, portal_client):
        user = STUDENT.model_copy(update={"student_id": None})
        state = await submit_quiz_attempt(finished_student_attempt(user=user), portal_client, user=user)
        assert state.step == QuizStep.results
        assert state.submit_error == MISSING_STUDENT_ID_MESSAGE
        assert fake_api.requests == []

    async def test_guest_submission_trims_fields(self, fake_api, portal_client):
        fake_api.on("POST", "/quiz/submit-guest", body={
            "success": True, "quizAttemptId": "qa-2", "isPassed": True, "canEnroll": True,
            "userId": "u-9", "studentId": "s-9",
        })
        state = quiz_flow.transition(quiz_flow.new_quiz_flow(QuizVariant.guest), Register(registration=GUEST, agreed=True))
        state = run_events(state, all_quiz_events())
        state = quiz_flow.transition(state, Declare(honest=True, understand=True, name="Jane Citizen"))

        state = await submit_quiz_attempt(state, portal_client)

        assert state.outcome.student_id == "s-9"
        sent = fake_api.sent_json()
        assert sent["fullName"] == "Jane Citizen"
        assert sent["password"] == "secret1"

    async def test_failure_allows_retry(self, fake_api, portal_client):
        fake_api.on("POST", "/quiz/submit", status=500, body={"message": "Database unavailable"})
        state = await submit_quiz_attempt(finished_student_attempt(), portal_client, user=STUDENT)
        assert state.step == QuizStep.results
        assert not state.submitting
        assert state.submit_error == "Database unavailable"

        fake_api.on("POST", "/quiz/submit", body={"success": True, "quizAttemptId": "qa-3", "isPassed": True})
        state = await submit_quiz_attempt(state, portal_client, user=STUDENT)
        assert state.step == QuizStep.submitted

    async def test_on_started_sees_submitting_flag(self, fake_api, portal_client):
        fake_api.on("POST", "/quiz/submit", body={"success": True, "quizAttemptId": "qa-4"})
        seen = []

        async def record(started):
            seen.append(started.submitting)

        await submit_quiz_attempt(finished_student_attempt(), portal_client, user=STUDENT, on_started=record)
        assert seen == [True]

    async def test_second_submit_while_in_flight_rejected(self, portal_client):
        state = quiz_flow.transition(finished_student_attempt(), SubmissionStarted())
        with pytest.raises(InvalidTransition):
            await submit_quiz_attempt(state, portal_client, user=STUDENT)

    async def test_submitting_before_results_rejected(self, portal_client):
        state = quiz_flow.new_quiz_flow(QuizVariant.student, user=STUDENT)
        with pytest.raises(InvalidTransition):
            await submit_quiz_attempt(state, portal_client, user=STUDENT)
