import re
from typing import Dict, Optional

from llnd_portal.schemas.enrollment_form import EnrollmentFormData
from llnd_portal.schemas.payment import VerifyPaymentRequest
from llnd_portal.schemas.registration import Declaration, RegistrationData

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 6

QUIZ_AGREEMENT_MESSAGE = "Please agree to the conditions"
WIZARD_AGREEMENT_MESSAGE = "Please agree to the terms"

DECLARATION_MESSAGE = "Please complete all declaration fields"

ALLOWED_UPLOAD_TYPES = ("image/jpeg", "image/jpg", "image/png", "application/pdf")
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def validate_registration(
    data: RegistrationData, agreed: bool, agreement_message: str = QUIZ_AGREEMENT_MESSAGE
) -> Dict[str, str]:
    errors = {}
    if not data.full_name.strip():
        errors["fullName"] = "Full name is required"
    if not data.email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(data.email):
        errors["email"] = "Please enter a valid email address"
    if not data.phone.strip():
        errors["phone"] = "Phone number is required"
    if not data.password:
        errors["password"] = "Password is required"
    elif len(data.password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if not agreed:
        errors["terms"] = agreement_message
    return errors


def validate_declaration(declaration: Declaration) -> Optional[str]:
    if not declaration.honest or not declaration.understand or not declaration.name.strip():
        return DECLARATION_MESSAGE
    return None


_APPLICANT_REQUIRED = (
    ("title", "title", "Title is required"),
    ("surname", "surname", "Surname is required"),
    ("given_name", "givenName", "Given name is required"),
    ("dob", "dob", "Date of birth is required"),
    ("gender", "gender", "Gender is required"),
    ("mobile", "mobile", "Mobile phone is required"),
    ("email", "email", "Email is required"),
    ("res_address", "resAddress", "Residential address is required"),
    ("res_suburb", "resSuburb", "Suburb is required"),
    ("res_state", "resState", "State is required"),
    ("res_postcode", "resPostcode", "Postcode is required"),
    ("emergency_name", "emergencyName", "Emergency contact name is required"),
    ("emergency_relationship", "emergencyRelationship", "Relationship is required"),
    ("emergency_contact_number", "emergencyContactNumber", "Contact number is required"),
)

_REQUIRED_BY_SECTION = {
    1: ("applicant", _APPLICANT_REQUIRED),
    2: ("usi", (("usi_apply", "usiApply", "Please select an option"),)),
    3: (
        "education",
        (
            ("school_level", "schoolLevel", "School level is required"),
            ("employment_status", "employmentStatus", "Employment status is required"),
        ),
    ),
    4: ("additional_info", (("country_of_birth", "countryOfBirth", "Country of birth is required"),)),
    5: (
        "privacy_terms",
        (
            ("accept_privacy", "acceptPrivacy", "You must accept the privacy notice"),
            ("accept_terms", "acceptTerms", "You must accept the terms"),
            ("declare_name", "declareName", "Name is required"),
            ("declare_date", "declareDate", "Date is required"),
        ),
    ),
}


def validate_form_section(form: EnrollmentFormData, section: int) -> Dict[str, str]:
    """Required-field check for one of the five enrollment form sections."""
    attribute, required = _REQUIRED_BY_SECTION[section]
    values = getattr(form, attribute)
    errors = {}
    for field, key, message in required:
        if not getattr(values, field):
            errors[key] = message
    return errors


def first_invalid_form_section(form: EnrollmentFormData):
    for section in sorted(_REQUIRED_BY_SECTION):
        errors = validate_form_section(form, section)
        if errors:
            return section, errors
    return None, {}


def validate_upload(
    content_type: Optional[str], size: int, max_bytes: int = MAX_UPLOAD_BYTES
) -> Dict[str, str]:
    errors = {}
    if (content_type or "").lower() not in ALLOWED_UPLOAD_TYPES:
        errors["file"] = "Please upload a JPG, PNG, or PDF file"
    elif size > max_bytes:
        errors["file"] = "File size must be less than 5MB"
    return errors


def validate_payment_review(request: VerifyPaymentRequest) -> Dict[str, str]:
    if not request.approve and not (request.rejection_reason or "").strip():
        return {"rejectionReason": "Please provide a reason for rejection"}
    return {}
