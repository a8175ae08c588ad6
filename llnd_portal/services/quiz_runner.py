"""Walks a learner through one section, one question at a time.

Every function here is pure: it takes a runner and returns a new one.
"""

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field

from llnd_portal.schemas.quiz import Question, QuestionKind, Section
from llnd_portal.services.scoring import DRAG_DROP_COMPLETED

ANSWER_REQUIRED_MESSAGE = "Please select an answer before continuing"


class SectionRunner(BaseModel):
    section_id: str
    question_index: int = 0
    answers: Dict[str, str] = Field(default_factory=dict)
    part_answers: Dict[str, Dict[int, str]] = Field(default_factory=dict)
    validation_message: Optional[str] = None


def start_section(section: Section) -> SectionRunner:
    return SectionRunner(section_id=section.id)


def _check_section(runner: SectionRunner, section: Section) -> None:
    if runner.section_id != section.id:
        raise ValueError(f"Runner is on section '{runner.section_id}', not '{section.id}'")


def current_question(runner: SectionRunner, section: Section) -> Question:
    _check_section(runner, section)
    return section.questions[runner.question_index]


def record_answer(runner: SectionRunner, section: Section, value: str) -> SectionRunner:
    question = current_question(runner, section)
    if question.is_multi_part:
        raise ValueError(f"Question {question.id} has parts; answer them individually")
    answers = {**runner.answers, question.id: value}
    return runner.model_copy(update={"answers": answers, "validation_message": None})


def record_part_answer(runner: SectionRunner, section: Section, part_index: int, value: str) -> SectionRunner:
    question = current_question(runner, section)
    if not 0 <= part_index < len(question.parts):
        raise ValueError(f"Question {question.id} has no part {part_index}")
    parts = {**runner.part_answers.get(question.id, {}), part_index: value}
    part_answers = {**runner.part_answers, question.id: parts}
    return runner.model_copy(update={"part_answers": part_answers, "validation_message": None})


def record_drag_drop_completion(runner: SectionRunner, section: Section) -> SectionRunner:
    """Mark the current drag-and-drop question done once every placement is made."""
    question = current_question(runner, section)
    if question.kind != QuestionKind.drag_drop:
        raise ValueError(f"Question {question.id} is not a drag-and-drop question")
    if runner.answers.get(question.id):
        return runner
    answers = {**runner.answers, question.id: DRAG_DROP_COMPLETED}
    return runner.model_copy(update={"answers": answers, "validation_message": None})


def is_answered(runner: SectionRunner, question: Question) -> bool:
    if question.is_multi_part:
        given = runner.part_answers.get(question.id, {})
        return all(given.get(index) for index in range(len(question.parts)))
    return bool(runner.answers.get(question.id))


def _combined(runner: SectionRunner, question: Question) -> str:
    given = runner.part_answers.get(question.id, {})
    return "|".join(given.get(index) or "" for index in range(len(question.parts)))


def advance(runner: SectionRunner, section: Section) -> Tuple[SectionRunner, Optional[Dict[str, str]]]:
    """Move past the current question.

    Returns the updated runner and, when the final question was just
    completed, the full answer map for the section (multi-part answers joined
    with '|' in part order). An unanswered question leaves the index where it
    is and sets the validation message.
    """
    question = current_question(runner, section)
    if not is_answered(runner, question):
        return runner.model_copy(update={"validation_message": ANSWER_REQUIRED_MESSAGE}), None

    answers = dict(runner.answers)
    if question.is_multi_part:
        answers[question.id] = _combined(runner, question)

    if runner.question_index >= len(section.questions) - 1:
        done = runner.model_copy(update={"answers": answers, "validation_message": None})
        return done, answers

    moved = runner.model_copy(
        update={"answers": answers, "question_index": runner.question_index + 1, "validation_message": None}
    )
    return moved, None
