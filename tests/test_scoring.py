"""Tests for answer checking, section scoring and the wizard score floor."""

import pytest

from llnd_portal.quiz.catalog import CATALOG_VERSION, get_section
from llnd_portal.schemas.quiz import SectionResult
from llnd_portal.services.scoring import (
    DRAG_DROP_COMPLETED,
    apply_score_floor,
    compute_totals,
    is_correct,
    round_half_up,
    score_section,
    section_name,
)

from helpers import CORRECT_ANSWERS


def correct_answers_for(section):
    answers = {}
    for question in section.questions:
        expected = CORRECT_ANSWERS[question.id]
        if expected is None:
            answers[question.id] = DRAG_DROP_COMPLETED
        elif isinstance(expected, list):
            answers[question.id] = "|".join(expected)
        else:
            answers[question.id] = expected
    return answers


class TestCatalog:
    def test_four_sections_in_order(self, catalog):
        assert [s.id for s in catalog.sections] == ["numeracy", "literacy", "language", "digital"]
        assert catalog.version == CATALOG_VERSION

    def test_question_counts(self, catalog):
        assert [len(s.questions) for s in catalog.sections] == [3, 6, 1, 3]
        assert catalog.total_questions == 13

    def test_every_section_passes_at_66(self, catalog):
        assert {s.passing_percentage for s in catalog.sections} == {66}

    def test_multi_part_composites_match_parts(self, catalog):
        for section in catalog.sections:
            for question in section.questions:
                if question.is_multi_part:
                    assert question.correct_answer == "|".join(p.correct_answer for p in question.parts)

    def test_get_section_unknown(self):
        with pytest.raises(KeyError):
            get_section("history")

    def test_section_name_strips_prefix(self):
        assert section_name("Section 2: Literacy (Reading & Writing)") == "Literacy (Reading & Writing)"
        assert section_name("Numeracy") == "Numeracy"


class TestIsCorrect:
    def test_scalar_is_trimmed_and_case_insensitive(self):
        question = get_section("digital").questions[2]
        assert is_correct(question, "  HTTPS://SafetyTrainingAcademy.edu.au/ ")

    def test_empty_answer_is_wrong(self):
        question = get_section("literacy").questions[4]
        assert not is_correct(question, "")
        assert not is_correct(question, None)

    def test_multi_part_needs_every_part(self):
        question = get_section("numeracy").questions[0]
        assert is_correct(question, "$96|$4.00")
        assert not is_correct(question, "$96|$5.00")
        assert not is_correct(question, "$96")

    def test_drag_drop_counts_completion_only(self):
        question = get_section("digital").questions[0]
        assert is_correct(question, DRAG_DROP_COMPLETED)
        assert not is_correct(question, "")
        assert not is_correct(question, question.correct_answer)


class TestScoreSection:
    def test_all_correct(self):
        section = get_section("literacy")
        result = score_section(section, correct_answers_for(section))
        assert (result.correct_answers, result.total_questions, result.percentage) == (6, 6, 100)
        assert result.passed

    def test_digital_with_one_wrong_text_answer(self):
        section = get_section("digital")
        answers = {**correct_answers_for(section), "d3": "www.google.com"}
        result = score_section(section, answers)
        assert result.percentage == 67
        assert result.passed

    def test_zero_numeracy(self):
        result = score_section(get_section("numeracy"), {})
        assert result.percentage == 0
        assert not result.passed

    def test_one_of_three_rounds_to_33(self):
        section = get_section("numeracy")
        answers = {"n1": "$96|$4.00"}
        assert score_section(section, answers).percentage == 33

    def test_round_half_up(self):
        assert round_half_up(66.5) == 67
        assert round_half_up(66.4999) == 66
        assert round_half_up(0) == 0


class TestTotals:
    def test_overall_percentage_has_two_decimals(self, catalog):
        results = [score_section(s, correct_answers_for(s)) for s in catalog.sections]
        results[3] = score_section(catalog.sections[3], {**correct_answers_for(catalog.sections[3]), "d3": "x"})
        totals = compute_totals(catalog, results)
        assert totals.total_questions == 13
        assert totals.correct_answers == 12
        assert totals.wrong_answers == 1
        assert totals.overall_percentage == 92.31
        assert totals.passed

    def test_failed_section_fails_attempt(self, catalog):
        results = [score_section(s, correct_answers_for(s)) for s in catalog.sections]
        results[0] = score_section(catalog.sections[0], {})
        assert not compute_totals(catalog, results).passed

    def test_missing_section_fails_attempt(self, catalog):
        results = [score_section(s, correct_answers_for(s)) for s in catalog.sections[:3]]
        assert not compute_totals(catalog, results).passed


class TestScoreFloor:
    def test_low_scores_raised_to_66_and_passed(self):
        low = SectionResult(
            section_id="numeracy", title="Section 1: Numeracy",
            total_questions=3, correct_answers=0, percentage=0, passed=False,
        )
        high = low.model_copy(update={"correct_answers": 3, "percentage": 100, "passed": True})
        floored = apply_score_floor([low, high])
        assert [(r.percentage, r.passed) for r in floored] == [(66, True), (100, True)]
        # Raw counts are left alone
        assert floored[0].correct_answers == 0

    def test_original_results_untouched(self):
        low = SectionResult(
            section_id="numeracy", title="Section 1: Numeracy",
            total_questions=3, correct_answers=1, percentage=33, passed=False,
        )
        apply_score_floor([low])
        assert low.percentage == 33
