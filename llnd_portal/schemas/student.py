from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from llnd_portal.core.base_config import CamelModel


class StudentProfileFields(CamelModel):
    preferred_name: Optional[str] = None
    phone_number: Optional[str] = None
    passport_id_type: Optional[str] = None
    document_type: Optional[str] = None
    passport_id_number: Optional[str] = None
    position_title: Optional[str] = None
    employment_type: Optional[str] = None
    start_date: Optional[str] = None
    campus_location: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    suburb: Optional[str] = None
    state_code: Optional[str] = None
    postcode: Optional[str] = None
    teaching_qualification: Optional[str] = None
    vocational_qualifications: Optional[str] = None
    compliance_expiry_date: Optional[str] = None
    police_check_status: Optional[str] = None
    right_to_work: Optional[str] = None
    permissions: Optional[str] = None


class StudentCreate(StudentProfileFields):
    full_name: str
    email: EmailStr
    password: str = Field(min_length=6)


class StudentUpdate(StudentProfileFields):
    full_name: str
    email: EmailStr
    password: Optional[str] = None
    is_active: Optional[bool] = None


class StudentResponse(StudentProfileFields):
    student_id: str
    user_id: Optional[str] = None
    full_name: str
    email: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    enrollment_count: int = 0


class StudentListResponse(CamelModel):
    students: List[StudentResponse] = Field(default_factory=list)
    total_count: int = 0
    page_number: int = 1
    page_size: int = 10
    total_pages: int = 0


class StudentStatsResponse(CamelModel):
    total_students: int = 0
    active_students: int = 0
    inactive_students: int = 0
    new_students_this_month: int = 0
    students_with_enrollments: int = 0
    students_with_completed_courses: int = 0


class StudentFilter(CamelModel):
    search_query: Optional[str] = None
    status: Optional[str] = None
    campus_location: Optional[str] = None
    employment_type: Optional[str] = None
    page_number: Optional[int] = None
    page_size: Optional[int] = None


class StudentStatus(CamelModel):
    """Row badges on the admin student list."""

    student_id: str
    has_passed_quiz: bool = False
    has_completed_enrollment: bool = False


class StudentPage(CamelModel):
    students: List[StudentResponse]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
    statuses: List[StudentStatus]
