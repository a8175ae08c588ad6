import re
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

_SECTION_PREFIX = re.compile(r"^Section \d+:\s*(.+)$")


def section_name(title: str) -> str:
    """'Section 2: Literacy (Reading & Writing)' -> 'Literacy (Reading & Writing)'"""
    match = _SECTION_PREFIX.match(title)
    return match.group(1) if match else title


class QuestionKind(str, Enum):
    multiple_choice = "multiple-choice"
    dropdown = "dropdown"
    text = "text"
    drag_drop = "drag-drop"


class QuestionPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    options: Tuple[str, ...] = ()
    correct_answer: str


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    prompt: str
    kind: QuestionKind
    options: Tuple[str, ...] = ()
    correct_answer: str
    parts: Tuple[QuestionPart, ...] = ()
    media: Optional[str] = None

    @property
    def is_multi_part(self) -> bool:
        return bool(self.parts)

    @model_validator(mode="after")
    def _composite_matches_parts(self):
        if self.parts:
            joined = "|".join(part.correct_answer for part in self.parts)
            if joined != self.correct_answer:
                raise ValueError(f"Question {self.id}: composite answer does not match its parts")
        return self


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    questions: Tuple[Question, ...]
    passing_percentage: int = 66

    @property
    def name(self) -> str:
        return section_name(self.title)


class QuizCatalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    sections: Tuple[Section, ...]

    @property
    def total_questions(self) -> int:
        return sum(len(section.questions) for section in self.sections)

    def section_at(self, index: int) -> Section:
        return self.sections[index]

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None


# Public views, answers stripped

class QuestionPartOut(BaseModel):
    label: str
    options: List[str]


class QuestionOut(BaseModel):
    id: str
    prompt: str
    kind: QuestionKind
    options: List[str]
    parts: List[QuestionPartOut]
    media: Optional[str] = None

    @classmethod
    def from_question(cls, question: Question) -> "QuestionOut":
        return cls(
            id=question.id,
            prompt=question.prompt,
            kind=question.kind,
            options=list(question.options),
            parts=[QuestionPartOut(label=p.label, options=list(p.options)) for p in question.parts],
            media=question.media,
        )


class SectionOut(BaseModel):
    id: str
    title: str
    description: str
    passing_percentage: int
    questions: List[QuestionOut]

    @classmethod
    def from_section(cls, section: Section) -> "SectionOut":
        return cls(
            id=section.id,
            title=section.title,
            description=section.description,
            passing_percentage=section.passing_percentage,
            questions=[QuestionOut.from_question(q) for q in section.questions],
        )


class CatalogOut(BaseModel):
    version: str
    total_questions: int
    sections: List[SectionOut]


class SectionResult(BaseModel):
    section_id: str
    title: str
    total_questions: int
    correct_answers: int
    percentage: int
    passed: bool

    @property
    def name(self) -> str:
        return section_name(self.title)


class QuizTotals(BaseModel):
    total_questions: int
    correct_answers: int
    wrong_answers: int
    overall_percentage: float
    passed: bool
