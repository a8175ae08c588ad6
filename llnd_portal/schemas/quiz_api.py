from datetime import datetime
from typing import List, Optional

from pydantic import Field

from llnd_portal.core.base_config import CamelModel


class SubmitQuizSectionResult(CamelModel):
    section_name: str
    total_questions: int
    correct_answers: int
    section_percentage: float
    section_passed: bool


class SubmitQuizRequest(CamelModel):
    student_id: str
    total_questions: int
    correct_answers: int
    overall_percentage: float
    is_passed: bool
    declaration_name: str
    section_results: List[SubmitQuizSectionResult]


class SubmitGuestQuizRequest(CamelModel):
    full_name: str
    email: str
    phone: str
    password: str
    total_questions: int
    correct_answers: int
    overall_percentage: float
    is_passed: bool
    declaration_name: str
    section_results: List[SubmitQuizSectionResult]


class QuizSectionResultResponse(CamelModel):
    section_result_id: Optional[str] = None
    section_name: str
    total_questions: int
    correct_answers: int
    section_percentage: float
    section_passed: bool


class QuizSubmissionResult(CamelModel):
    success: bool = True
    message: str = ""
    quiz_attempt_id: Optional[str] = None
    is_passed: bool = False
    overall_percentage: float = 0
    can_enroll: bool = False
    section_results: List[QuizSectionResultResponse] = Field(default_factory=list)


class GuestQuizSubmissionResult(QuizSubmissionResult):
    user_id: Optional[str] = None
    student_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None


class QuizAttemptResponse(CamelModel):
    quiz_attempt_id: str
    student_id: str
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    attempt_date: Optional[datetime] = None
    total_questions: int = 0
    correct_answers: int = 0
    wrong_answers: int = 0
    overall_percentage: float = 0
    is_passed: bool = False
    status: Optional[str] = None
    completed_at: Optional[datetime] = None
    has_admin_bypass: bool = False
    admin_bypass: Optional["AdminBypassResponse"] = None
    section_results: List[QuizSectionResultResponse] = Field(default_factory=list)


class StudentQuizStatus(CamelModel):
    student_id: str
    has_attempted_quiz: bool = False
    has_passed_quiz: bool = False
    has_admin_bypass: bool = False
    can_enroll: bool = False
    total_attempts: int = 0
    latest_attempt: Optional[QuizAttemptResponse] = None
    passed_attempt: Optional[QuizAttemptResponse] = None


class QuizAttemptListResponse(CamelModel):
    quiz_attempts: List[QuizAttemptResponse] = Field(default_factory=list)
    total_count: int = 0
    page_number: int = 1
    page_size: int = 10
    total_pages: int = 0


class QuizAttemptFilter(CamelModel):
    student_id: Optional[str] = None
    status: Optional[str] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    is_passed: Optional[bool] = None
    page_number: Optional[int] = None
    page_size: Optional[int] = None


class HasPassedResponse(CamelModel):
    student_id: str
    has_passed: bool


class CanEnrollResponse(CamelModel):
    student_id: str
    can_enroll: bool


# ---- admin overrides ----

class CreateAdminBypassRequest(CamelModel):
    student_id: str
    quiz_attempt_id: str
    reason: Optional[str] = None


class RejectStudentRequest(CamelModel):
    student_id: str
    quiz_attempt_id: str
    reason: Optional[str] = None


class AdminBypassResponse(CamelModel):
    bypass_id: str
    student_id: str
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    quiz_attempt_id: str
    bypassed_by: Optional[str] = None
    bypassed_by_name: Optional[str] = None
    reason: Optional[str] = None
    bypassed_at: Optional[datetime] = None
    is_active: bool = True


class QuizStatisticsResponse(CamelModel):
    total_attempts: int = 0
    passed_count: int = 0
    failed_count: int = 0
    pending_review_count: int = 0
    approved_bypass_count: int = 0
    rejected_count: int = 0
    average_score: float = 0
    pass_rate: float = 0


QuizAttemptResponse.model_rebuild()
StudentQuizStatus.model_rebuild()
QuizAttemptListResponse.model_rebuild()
