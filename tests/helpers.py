"""Shared builders for the test suite."""

import json
from typing import Callable, Dict, Tuple

import httpx

from llnd_portal.core.security import create_access_token
from llnd_portal.quiz.catalog import get_catalog
from llnd_portal.services import quiz_flow
from llnd_portal.services.quiz_flow import Answer, AnswerPart, CompleteDragDrop, Continue

# question id -> per-part answers, a scalar answer, or None for drag-and-drop
CORRECT_ANSWERS = {
    "n1": ["$96", "$4.00"],
    "n2": ["5 barriers", "75 kg"],
    "n3": ["201 kg", "99 kg"],
    "l1": ["Silvia", "Mike", "Tyres needed - Order no 2457", "Bridgestone"],
    "l2": ["Everyone's", "9", "1", "Before and after providing care"],
    "l3": ["hand", "forklift", "ground", "ice pack", "First Aid"],
    "l4": "Hard hats, steel-capped boots, high-visibility vests",
    "l5": "The site supervisor",
    "l6": "Follow all safety signs and instructions",
    "lang1": ["May 2020", "2@", "Skilled Migration Visa", "Computer Programmer", "Evening", "Local TAFE"],
    "d1": None,
    "d2": None,
    "d3": "https://safetytrainingacademy.edu.au/",
}


def answer_events(question, answer):
    """Events that answer one question and move past it."""
    if question.kind.value == "drag-drop":
        return [CompleteDragDrop(), Continue()]
    if isinstance(answer, list):
        return [AnswerPart(part_index=i, value=v) for i, v in enumerate(answer)] + [Continue()]
    return [Answer(value=answer), Continue()]


def section_events(section, overrides=None):
    overrides = overrides or {}
    events = []
    for question in section.questions:
        answer = overrides.get(question.id, CORRECT_ANSWERS[question.id])
        events.extend(answer_events(question, answer))
    return events


def all_quiz_events(overrides=None):
    events = []
    for section in get_catalog().sections:
        events.extend(section_events(section, overrides))
    return events


def run_events(state, events, transition=quiz_flow.transition):
    for event in events:
        state = transition(state, event)
    return state


def bearer(user_id="u-1", student_id="s-1", role="Student", full_name="Jane Citizen"):
    claims = {"sub": user_id, "role": role, "fullName": full_name, "email": "jane@example.com"}
    if student_id:
        claims["studentId"] = student_id
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


def envelope(data, success=True, message="OK"):
    return {"success": success, "message": message, "data": data}


Handler = Callable[[httpx.Request], Tuple[int, object]]


class FakeEnrollmentApi:
    """Routes requests to per-path handlers and records what was sent."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests = []

    def on(self, method: str, path: str, status: int = 200, body=None, handler: Handler = None):
        self.routes[(method, path)] = handler or (lambda request: (status, body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/api", "", 1)
        handler = self.routes.get((request.method, path))
        if handler is None:
            return httpx.Response(404, json={"success": False, "message": f"No route for {path}"})
        status, body = handler(request)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def sent_json(self, index: int = -1):
        return json.loads(self.requests[index].content)

    def paths(self):
        return [request.url.path.replace("/api", "", 1) for request in self.requests]
