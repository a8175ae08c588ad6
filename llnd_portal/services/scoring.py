import math
from typing import Dict, List, Optional, Sequence

from llnd_portal.schemas.quiz import (
    Question,
    QuestionKind,
    QuizCatalog,
    QuizTotals,
    Section,
    SectionResult,
    section_name,
)

DRAG_DROP_COMPLETED = "completed"

WIZARD_SCORE_FLOOR = 66


def normalize(value: Optional[str]) -> str:
    if not value:
        return ""
    return value.strip().lower()


def round_half_up(value: float) -> int:
    # Percentages are never negative, so floor(x + 0.5) rounds .5 upward
    return int(math.floor(value + 0.5))


def is_correct(question: Question, answer: Optional[str]) -> bool:
    if question.kind == QuestionKind.drag_drop:
        # Finishing the interaction counts as correct; placements are not checked.
        return normalize(answer) == DRAG_DROP_COMPLETED

    if question.is_multi_part:
        given = [normalize(part) for part in (answer or "").split("|")]
        for index, part in enumerate(question.parts):
            submitted = given[index] if index < len(given) else ""
            if submitted != normalize(part.correct_answer):
                return False
        return True

    submitted = normalize(answer)
    return bool(submitted) and submitted == normalize(question.correct_answer)


def score_section(section: Section, answers: Dict[str, str]) -> SectionResult:
    correct = sum(1 for question in section.questions if is_correct(question, answers.get(question.id)))
    count = len(section.questions)
    percentage = round_half_up(100 * correct / count) if count else 0
    return SectionResult(
        section_id=section.id,
        title=section.title,
        total_questions=count,
        correct_answers=correct,
        percentage=percentage,
        passed=percentage >= section.passing_percentage,
    )


def compute_totals(catalog: QuizCatalog, section_results: Sequence[SectionResult]) -> QuizTotals:
    by_section = {result.section_id: result for result in section_results}
    total = 0
    correct = 0
    passed = True
    for section in catalog.sections:
        result = by_section.get(section.id)
        if result is None:
            passed = False
            continue
        total += result.total_questions
        correct += result.correct_answers
        passed = passed and result.passed

    overall = round(100 * correct / total, 2) if total else 0
    return QuizTotals(
        total_questions=total,
        correct_answers=correct,
        wrong_answers=total - correct,
        overall_percentage=overall,
        passed=passed,
    )


def apply_score_floor(results: Sequence[SectionResult], floor: int = WIZARD_SCORE_FLOOR) -> List[SectionResult]:
    """Raise every section below ``floor`` to exactly ``floor`` and mark it passed.

    Used by the enrollment wizard only. Learners cannot fail the assessment on
    this path; the standalone quiz keeps the raw scores.
    """
    floored = []
    for result in results:
        percentage = floor if result.percentage < floor else result.percentage
        floored.append(result.model_copy(update={"percentage": percentage, "passed": True}))
    return floored
