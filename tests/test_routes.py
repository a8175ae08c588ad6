"""End-to-end tests through the FastAPI app with the enrollment API mocked."""

import asyncio

import pytest

from llnd_portal.crud import crud_draft

from helpers import all_quiz_events, bearer, envelope

STUDENT = bearer()
ADMIN = bearer(user_id="admin-1", student_id=None, role="Admin", full_name="Site Admin")
DECLARE = {"type": "declare", "honest": True, "understand": True, "name": "Jane Citizen"}


def send(client, attempt_id, event, headers=STUDENT):
    return client.post(f"/quiz-attempts/{attempt_id}/events", json={"event": event}, headers=headers)


def finish_attempt(client, headers=STUDENT):
    attempt = client.post("/quiz-attempts", json={"variant": "student"}, headers=headers).json()
    send(client, attempt["id"], {"type": "start_quiz"}, headers)
    for event in all_quiz_events():
        response = send(client, attempt["id"], event.model_dump(), headers)
        assert response.status_code == 200, response.text
    return send(client, attempt["id"], DECLARE, headers).json()


class TestQuizContent:
    def test_root(self, api_app):
        assert api_app.get("/").status_code == 200

    def test_catalog_hides_answers(self, api_app):
        response = api_app.get("/quiz/catalog")
        assert response.status_code == 200
        body = response.json()
        assert body["total_questions"] == 13
        assert "correct_answer" not in response.text
        assert "$4.00" in response.text  # options are still shown

    def test_unknown_section(self, api_app):
        assert api_app.get("/quiz/sections/history").status_code == 404


class TestQuizAttempts:
    def test_student_attempt_requires_token(self, api_app):
        assert api_app.post("/quiz-attempts", json={"variant": "student"}).status_code == 401

    def test_bad_token(self, api_app):
        response = api_app.post(
            "/quiz-attempts", json={"variant": "student"}, headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 401

    def test_progress_shows_current_question(self, api_app):
        attempt = api_app.post("/quiz-attempts", json={"variant": "student"}, headers=STUDENT).json()
        assert attempt["step"] == "guidelines"
        state = send(api_app, attempt["id"], {"type": "start_quiz"}).json()
        assert state["progress"]["question"]["id"] == "n1"
        assert state["progress"]["section_count"] == 4
        state = send(api_app, attempt["id"], {"type": "answer_part", "part_index": 0, "value": "$96"}).json()
        assert state["progress"]["part_answers"] == {"0": "$96"}

    def test_full_attempt_and_submit(self, api_app, fake_api):
        fake_api.on("POST", "/quiz/submit", body={
            "success": True, "quizAttemptId": "qa-1", "isPassed": True, "overallPercentage": 100, "canEnroll": True,
        })
        state = finish_attempt(api_app)
        assert state["step"] == "results"
        assert state["totals"]["passed"] is True

        submitted = api_app.post(f"/quiz-attempts/{state['id']}/submit", headers=STUDENT).json()

        assert submitted["step"] == "submitted"
        assert submitted["outcome"]["quiz_attempt_id"] == "qa-1"
        assert fake_api.sent_json()["studentId"] == "s-1"
        # The stored draft keeps its final state
        again = api_app.get(f"/quiz-attempts/{state['id']}", headers=STUDENT).json()
        assert again["step"] == "submitted"

    def test_submit_twice_conflicts(self, api_app, fake_api):
        fake_api.on("POST", "/quiz/submit", body={"success": True, "quizAttemptId": "qa-1", "isPassed": True})
        state = finish_attempt(api_app)
        api_app.post(f"/quiz-attempts/{state['id']}/submit", headers=STUDENT)
        assert api_app.post(f"/quiz-attempts/{state['id']}/submit", headers=STUDENT).status_code == 409

    def test_unreadable_reply_can_be_resubmitted(self, api_app, fake_api):
        replies = iter([
            (200, ""),
            (200, {"success": True, "quizAttemptId": "qa-2", "isPassed": True, "canEnroll": True}),
        ])
        fake_api.on("POST", "/quiz/submit", handler=lambda request: next(replies))
        state = finish_attempt(api_app)

        first = api_app.post(f"/quiz-attempts/{state['id']}/submit", headers=STUDENT)
        assert first.status_code == 200
        assert first.json()["step"] == "results"
        assert first.json()["submit_error"] == "Unexpected response from the enrollment API"
        stored = api_app.get(f"/quiz-attempts/{state['id']}", headers=STUDENT).json()
        assert stored["submitting"] is False

        retry = api_app.post(f"/quiz-attempts/{state['id']}/submit", headers=STUDENT)
        assert retry.status_code == 200
        assert retry.json()["step"] == "submitted"
        assert retry.json()["outcome"]["quiz_attempt_id"] == "qa-2"

    def test_submit_saves_drafts_off_the_event_loop(self, api_app, fake_api, monkeypatch):
        fake_api.on("POST", "/quiz/submit", body={"success": True, "quizAttemptId": "qa-3", "isPassed": True})
        state = finish_attempt(api_app)
        real_save = crud_draft.save_draft
        on_loop = []

        def recording_save(*args, **kwargs):
            try:
                asyncio.get_running_loop()
                on_loop.append(True)
            except RuntimeError:
                on_loop.append(False)
            return real_save(*args, **kwargs)

        monkeypatch.setattr(crud_draft, "save_draft", recording_save)
        api_app.post(f"/quiz-attempts/{state['id']}/submit", headers=STUDENT)

        assert on_loop == [False, False]

    def test_other_user_cannot_see_attempt(self, api_app):
        attempt = api_app.post("/quiz-attempts", json={"variant": "student"}, headers=STUDENT).json()
        other = bearer(user_id="u-2", student_id="s-2")
        assert api_app.get(f"/quiz-attempts/{attempt['id']}", headers=other).status_code == 404

    def test_event_in_wrong_step_conflicts(self, api_app):
        attempt = api_app.post("/quiz-attempts", json={"variant": "student"}, headers=STUDENT).json()
        response = send(api_app, attempt["id"], {"type": "answer", "value": "x"})
        assert response.status_code == 409

    def test_submission_events_not_accepted_from_learner(self, api_app):
        attempt = api_app.post("/quiz-attempts", json={"variant": "student"}, headers=STUDENT).json()
        response = send(api_app, attempt["id"], {"type": "submission_succeeded", "outcome": {"is_passed": True}})
        assert response.status_code == 422

    def test_cancel_removes_draft(self, api_app):
        attempt = api_app.post("/quiz-attempts", json={"variant": "student"}, headers=STUDENT).json()
        assert send(api_app, attempt["id"], {"type": "cancel"}).json()["step"] == "cancelled"
        assert api_app.get(f"/quiz-attempts/{attempt['id']}", headers=STUDENT).status_code == 404

    def test_guest_bad_email(self, api_app):
        attempt = api_app.post("/quiz-attempts", json={"variant": "guest"}).json()
        registration = {"fullName": "Jane", "email": "bad-email", "phone": "0400", "password": "secret1"}
        state = send(api_app, attempt["id"], {"type": "register", "registration": registration, "agreed": True}, {}).json()
        assert state["step"] == "registration"
        assert state["field_errors"]["email"] == "Please enter a valid email address"
        assert "password" not in state["registration"]


class TestEnrollmentWizard:
    def test_course_price_comes_from_course_list(self, api_app, fake_api):
        fake_api.on("GET", "/PublicEnrollment/courses", body=envelope([
            {"courseId": "c-1", "courseCode": "WHS1", "courseName": "White Card", "price": 120.5},
        ]))
        wizard = api_app.post("/enrollment-wizard").json()
        wid = wizard["id"]
        registration = {"fullName": "Jane Citizen", "email": "jane@example.com", "phone": "0400", "password": "secret1"}
        api_app.post(f"/enrollment-wizard/{wid}/events", json={"event": {"type": "update_registration", "registration": registration, "agreed": True}})
        state = api_app.post(f"/enrollment-wizard/{wid}/events", json={"event": {"type": "next"}}).json()
        assert state["step_name"] == "Course Selection"

        state = api_app.post(
            f"/enrollment-wizard/{wid}/events",
            json={"event": {"type": "select_course", "course_id": "c-1", "price": 1}},
        ).json()

        assert state["course_price"] == 120.5

    def test_unknown_course(self, api_app, fake_api):
        fake_api.on("GET", "/PublicEnrollment/courses", body=envelope([]))
        wid = api_app.post("/enrollment-wizard").json()["id"]
        registration = {"fullName": "Jane Citizen", "email": "jane@example.com", "phone": "0400", "password": "secret1"}
        api_app.post(f"/enrollment-wizard/{wid}/events", json={"event": {"type": "update_registration", "registration": registration, "agreed": True}})
        api_app.post(f"/enrollment-wizard/{wid}/events", json={"event": {"type": "next"}})
        response = api_app.post(f"/enrollment-wizard/{wid}/events", json={"event": {"type": "select_course", "course_id": "c-9"}})
        assert response.status_code == 422
        assert response.json()["errors"] == {"courseId": "Unknown course"}

    def test_course_dates(self, api_app, fake_api):
        fake_api.on("GET", "/PublicEnrollment/courses/c-1/dates", body=envelope([
            {"courseDateId": "d-1", "startDate": "2026-07-01", "availableSlots": 4, "maxCapacity": 12},
        ]))
        dates = api_app.get("/enrollment-wizard/courses/c-1/dates").json()
        assert dates[0]["courseDateId"] == "d-1"

    def test_course_list_shared_with_enrollments(self, api_app, fake_api):
        fake_api.on("GET", "/PublicEnrollment/courses", body=envelope([
            {"courseId": "c-3", "courseCode": "FA1", "courseName": "First Aid", "price": 99},
        ]))
        wizard_courses = api_app.get("/enrollment-wizard/courses").json()
        student_courses = api_app.get("/enrollments/courses").json()
        assert wizard_courses == student_courses
        assert wizard_courses[0]["courseId"] == "c-3"

    def test_missing_wizard(self, api_app):
        assert api_app.get("/enrollment-wizard/nope").status_code == 404


class TestAdmin:
    def test_students_need_admin(self, api_app):
        assert api_app.get("/admin/students", headers=STUDENT).status_code == 403

    def test_student_page(self, api_app, fake_api):
        fake_api.on("GET", "/StudentManagement", body=envelope({
            "students": [{"studentId": "s-1", "fullName": "Jane", "email": "jane@example.com"}],
            "totalCount": 1, "pageNumber": 1, "pageSize": 10, "totalPages": 1,
        }))
        fake_api.on("GET", "/quiz/student/s-1/status", body={"studentId": "s-1", "hasPassedQuiz": True})
        fake_api.on("GET", "/StudentEnrollmentForm/student/s-1", status=404, body={"success": False, "message": "No form"})

        body = api_app.get("/admin/students", params={"searchQuery": "jan"}, headers=ADMIN).json()

        assert body["students"][0]["fullName"] == "Jane"
        assert body["statuses"] == [{"studentId": "s-1", "hasPassedQuiz": False, "hasCompletedEnrollment": False}]
        assert fake_api.requests[0].url.params["searchQuery"] == "jan"

    def test_review_form(self, api_app, fake_api):
        fake_api.on("POST", "/StudentEnrollmentForm/admin/s-1/review", body=envelope(None))
        response = api_app.post(
            "/admin/enrollment-forms/s-1/review", json={"approve": True, "reviewNotes": "All good"}, headers=ADMIN
        )
        assert response.json() == {"message": "Enrollment form approved"}

    def test_payment_rejection_needs_reason(self, api_app, fake_api):
        response = api_app.put("/admin/payments/pp-1/verify", json={"approve": False}, headers=ADMIN)
        assert response.status_code == 422
        assert response.json()["errors"] == {"rejectionReason": "Please provide a reason for rejection"}
        assert fake_api.requests == []

    def test_payment_verified_by_signed_in_admin(self, api_app, fake_api):
        fake_api.on("PUT", "/enrollment/payment/pp-1/verify", body=envelope(None))
        response = api_app.put("/admin/payments/pp-1/verify", json={"approve": True}, headers=ADMIN)
        assert response.json() == {"message": "Payment verified"}
        assert fake_api.requests[-1].url.params["adminId"] == "admin-1"

    def test_payment_stats_and_receipt(self, api_app, fake_api):
        fake_api.on("GET", "/enrollment/admin/payments/stats", body=envelope({"pendingCount": 2, "totalCount": 5}))
        fake_api.on("GET", "/enrollment/admin/payments/pp-1/download", body="%PDF-1.4")

        assert api_app.get("/admin/payments/stats", headers=ADMIN).json()["pendingCount"] == 2
        receipt = api_app.get("/admin/payments/pp-1/receipt", headers=ADMIN)
        assert receipt.content == b"%PDF-1.4"
        assert receipt.headers["content-disposition"].startswith("attachment")

    def test_payments_need_admin(self, api_app):
        assert api_app.get("/admin/payments", headers=STUDENT).status_code == 403

    def test_grant_and_revoke_bypass(self, api_app, fake_api):
        fake_api.on("POST", "/admin/quiz/bypass", body=envelope({
            "bypassId": "b-1", "studentId": "s-1", "quizAttemptId": "qa-1", "isActive": True,
        }))
        fake_api.on("DELETE", "/admin/quiz/bypass/b-1", body=envelope(None))

        created = api_app.post(
            "/admin/quiz/bypasses", json={"studentId": "s-1", "quizAttemptId": "qa-1"}, headers=ADMIN
        )
        assert created.status_code == 201
        assert created.json()["bypassId"] == "b-1"
        revoked = api_app.delete("/admin/quiz/bypasses/b-1", headers=ADMIN)
        assert revoked.json() == {"message": "Bypass has been revoked"}
        assert all(r.headers["X-Admin-UserId"] == "admin-1" for r in fake_api.requests)

    def test_quiz_statistics_and_reject(self, api_app, fake_api):
        fake_api.on("GET", "/admin/quiz/statistics", body=envelope({"totalAttempts": 12, "passRate": 75.0}))
        fake_api.on("POST", "/admin/quiz/reject", body=envelope(None))

        assert api_app.get("/admin/quiz/statistics", headers=ADMIN).json()["passRate"] == 75.0
        rejected = api_app.post(
            "/admin/quiz/reject", json={"studentId": "s-2", "quizAttemptId": "qa-2", "reason": "No show"}, headers=ADMIN
        )
        assert rejected.json() == {"message": "Student has been rejected"}

    def test_upstream_failure_is_bad_gateway(self, api_app, fake_api):
        fake_api.on("GET", "/StudentManagement/stats", status=500, body={"message": "Database down"})
        response = api_app.get("/admin/students/stats", headers=ADMIN)
        assert response.status_code == 502
        assert response.json() == {"detail": "Database down"}


class TestStudentSelfService:
    def test_quiz_status(self, api_app, fake_api):
        fake_api.on("GET", "/quiz/student/s-1/status", body={"studentId": "s-1", "hasAttemptedQuiz": True, "canEnroll": True})
        body = api_app.get("/me/quiz-status", headers=STUDENT).json()
        assert body["canEnroll"] is True
        assert fake_api.requests[0].headers["Authorization"] == STUDENT["Authorization"]

    def test_admin_without_student_id(self, api_app):
        assert api_app.get("/me/quiz-status", headers=ADMIN).status_code == 403

    @pytest.mark.parametrize(
        "filename,content_type,size,message",
        [
            ("photo.gif", "image/gif", 10, "Please upload a JPG, PNG, or PDF file"),
            ("scan.pdf", "application/pdf", 5 * 1024 * 1024 + 1, "File size must be less than 5MB"),
        ],
    )
    def test_upload_checks(self, api_app, fake_api, filename, content_type, size, message):
        response = api_app.post(
            "/enrollments/documents",
            data={"documentType": "usi"},
            files={"file": (filename, b"x" * size, content_type)},
            headers=STUDENT,
        )
        assert response.status_code == 422
        assert response.json()["errors"] == {"file": message}
        assert fake_api.requests == []

    def test_payment_proof_needs_transaction_id(self, api_app, fake_api):
        response = api_app.post(
            "/enrollments/e-1/payment-proof",
            data={"transactionId": " ", "amountPaid": "450"},
            files={"receiptFile": ("receipt.pdf", b"%PDF", "application/pdf")},
            headers=STUDENT,
        )
        assert response.status_code == 422
        assert response.json()["errors"] == {"transactionId": "Transaction ID is required"}

    def test_payment_proof_forwarded(self, api_app, fake_api):
        fake_api.on("POST", "/enrollment/e-1/payment/s-1", body=envelope({
            "paymentProofId": "p-1", "enrollmentId": "e-1", "transactionId": "TX-1", "amountPaid": 450,
        }))
        response = api_app.post(
            "/enrollments/e-1/payment-proof",
            data={"transactionId": "TX-1", "amountPaid": "450"},
            files={"receiptFile": ("receipt.pdf", b"%PDF", "application/pdf")},
            headers=STUDENT,
        )
        assert response.status_code == 200
        assert response.json()["paymentProofId"] == "p-1"
