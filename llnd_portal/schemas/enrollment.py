from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from llnd_portal.core.base_config import CamelModel
from llnd_portal.schemas.quiz_api import SubmitQuizSectionResult


class EnrollmentFormSubmission(CamelModel):
    # Section 1 - Applicant
    title: str
    surname: str
    given_name: str
    middle_name: Optional[str] = None
    preferred_name: Optional[str] = None
    date_of_birth: str
    gender: str
    home_phone: Optional[str] = None
    work_phone: Optional[str] = None
    mobile: str
    email: str
    residential_address: str
    residential_suburb: str
    residential_state: str
    residential_postcode: str
    postal_address_different: bool = False
    postal_address: Optional[str] = None
    postal_suburb: Optional[str] = None
    postal_state: Optional[str] = None
    postal_postcode: Optional[str] = None
    emergency_contact_name: str
    emergency_contact_relationship: str
    emergency_contact_number: str
    emergency_permission: str

    # Section 2 - USI
    usi: Optional[str] = None
    usi_access_permission: bool = False
    usi_apply_through_sta: str = Field(alias="usiApplyThroughSTA")
    usi_authorise_name: Optional[str] = None
    usi_consent: Optional[bool] = None
    town_city_of_birth: Optional[str] = None
    overseas_city_of_birth: Optional[str] = None
    usi_id_type: Optional[str] = None
    drivers_licence_state: Optional[str] = None
    drivers_licence_number: Optional[str] = None
    medicare_number: Optional[str] = None
    medicare_irn: Optional[str] = Field(default=None, alias="medicareIRN")
    medicare_card_color: Optional[str] = None
    medicare_expiry: Optional[str] = None
    birth_certificate_state: Optional[str] = None
    immi_card_number: Optional[str] = None
    australian_passport_number: Optional[str] = None
    non_australian_passport_number: Optional[str] = None
    non_australian_passport_country: Optional[str] = None
    citizenship_stock_number: Optional[str] = None
    citizenship_acquisition_date: Optional[str] = None
    descent_acquisition_date: Optional[str] = None

    # Section 3 - Education and employment
    school_level: str
    school_complete_year: str
    school_name: str
    school_in_australia: bool = True
    school_state: Optional[str] = None
    school_postcode: Optional[str] = None
    school_country: Optional[str] = None
    has_post_secondary_qualification: str
    qualification_levels: Optional[List[str]] = None
    qualification_details: Optional[str] = None
    employment_status: str
    employer_name: Optional[str] = None
    supervisor_name: Optional[str] = None
    employer_address: Optional[str] = None
    employer_email: Optional[str] = None
    employer_phone: Optional[str] = None
    training_reason: str
    training_reason_other: Optional[str] = None

    # Section 4 - Additional information
    country_of_birth: str
    speaks_other_language: str
    home_language: Optional[str] = None
    indigenous_status: str
    has_disability: str
    disability_types: Optional[List[str]] = None
    disability_notes: Optional[str] = None

    # Section 5 - Privacy and terms
    accepted_privacy_notice: bool
    accepted_terms_and_conditions: bool
    declaration_name: str
    declaration_date: str
    signature_data: str = ""


class PublicEnrollmentSubmission(EnrollmentFormSubmission):
    """Everything the wizard collected, sent in one request."""

    password: str
    full_name: str
    phone: str

    total_questions: int
    correct_answers: int
    overall_percentage: float
    is_passed: bool
    section_results: List[SubmitQuizSectionResult]

    course_id: Optional[str] = None
    course_date_id: Optional[str] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_amount: Optional[float] = None


class PublicEnrollmentFormResponse(CamelModel):
    user_id: str
    student_id: str
    email: str
    full_name: str
    enrollment_form_status: Optional[str] = None


class EnrollmentFormResponse(CamelModel):
    # The full record has ~100 fields; only the review fields are typed here.
    model_config = ConfigDict(extra="allow")

    student_id: str
    student_name: Optional[str] = None
    email: Optional[str] = None
    enrollment_form_completed: bool = False
    enrollment_form_submitted_at: Optional[datetime] = None
    enrollment_form_status: Optional[str] = None
    reviewed_by_name: Optional[str] = None
    enrollment_form_reviewed_at: Optional[datetime] = None
    enrollment_form_review_notes: Optional[str] = None


class EnrollmentFormListItem(CamelModel):
    student_id: str
    full_name: str
    email: str
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    status: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by_name: Optional[str] = None
    enrollment_count: int = 0
    is_active: bool = True


class EnrollmentFormListResponse(CamelModel):
    enrollment_forms: List[EnrollmentFormListItem] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10
    total_pages: int = 0


class EnrollmentFormStats(CamelModel):
    total_submitted: int = 0
    pending_count: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    not_submitted_count: int = 0
    last_submitted_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None


class EnrollmentFormFilter(CamelModel):
    search_query: Optional[str] = None
    status: Optional[str] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    sort_by: Optional[str] = None
    sort_descending: Optional[bool] = None
    page: Optional[int] = None
    page_size: Optional[int] = None


class ReviewEnrollmentFormRequest(CamelModel):
    approve: bool
    review_notes: Optional[str] = None


class DocumentUploadResponse(CamelModel):
    document_url: str


class CourseDropdownItem(CamelModel):
    course_id: str
    course_code: str
    course_name: str
    price: float = 0
    duration: Optional[str] = None
    category_name: Optional[str] = None


class CourseDateDropdownItem(CamelModel):
    course_date_id: str
    start_date: str
    end_date: Optional[str] = None
    location: Optional[str] = None
    available_slots: int = 0
    max_capacity: int = 0
    is_available: bool = True


class CreateEnrollmentRequest(CamelModel):
    course_id: str
    quiz_attempt_id: Optional[str] = None
    selected_exam_date_id: Optional[str] = None
    selected_theory_date_id: Optional[str] = None


class PaymentProofResponse(CamelModel):
    payment_proof_id: str
    enrollment_id: str
    receipt_file_url: Optional[str] = None
    transaction_id: str
    amount_paid: float
    payment_date: Optional[str] = None
    payment_method: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    status: Optional[str] = None


class EnrollmentResponse(CamelModel):
    model_config = ConfigDict(extra="allow")

    enrollment_id: str
    student_id: str
    course_id: str
    course_name: Optional[str] = None
    amount_paid: float = 0
    payment_status: Optional[str] = None
    status: Optional[str] = None
    enrolled_at: Optional[datetime] = None
