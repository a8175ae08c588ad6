"""The five sections of the enrollment form as the learner fills them in.

Field names follow the form inputs (``resAddress``, ``dlState``...). The wire
shape sent to the enrollment API lives in ``schemas/enrollment.py``.
"""

from typing import List, Optional

from pydantic import Field

from llnd_portal.core.base_config import CamelModel
from llnd_portal.core.errors import FieldValidationError

TITLE_OPTIONS = ("Mr", "Mrs", "Miss", "Ms", "Dr", "Other")
GENDER_OPTIONS = ("Male", "Female")
STATE_OPTIONS = ("NSW", "VIC", "QLD", "WA", "SA", "TAS", "ACT", "NT")


class ApplicantDetails(CamelModel):
    title: str = ""
    surname: str = ""
    given_name: str = ""
    middle_name: str = ""
    preferred_name: str = ""
    dob: str = ""
    gender: str = ""

    home_phone: str = ""
    work_phone: str = ""
    mobile: str = ""
    email: str = ""

    res_address: str = ""
    res_suburb: str = ""
    res_state: str = ""
    res_postcode: str = ""

    postal_different: bool = False
    post_address: str = ""
    post_suburb: str = ""
    post_state: str = ""
    post_postcode: str = ""

    emergency_name: str = ""
    emergency_relationship: str = ""
    emergency_contact_number: str = ""
    emergency_permission: str = ""


class USIDetails(CamelModel):
    usi: str = ""
    usi_access_permission: bool = False
    usi_apply: str = ""

    usi_authorise_name: str = ""
    usi_consent: bool = False
    town_city_birth: str = ""
    overseas_city_birth: str = ""

    usi_id_type: str = ""
    dl_state: str = ""
    dl_number: str = ""
    medicare_number: str = ""
    medicare_irn: str = Field(default="", alias="medicareIRN")
    medicare_color: str = ""
    medicare_expiry: str = ""
    birth_state: str = ""
    immi_number: str = ""
    aus_passport_number: str = ""
    non_aus_passport_number: str = ""
    non_aus_passport_country: str = ""
    citizenship_stock: str = ""
    citizenship_acq_date: str = ""
    descent_acq_date: str = ""


class EducationDetails(CamelModel):
    school_level: str = ""
    school_complete_year: str = ""
    school_name: str = ""
    school_in_aus: bool = True
    school_state: str = ""
    school_postcode: str = ""
    school_country: str = ""

    has_post_qual: str = ""
    qual_levels: List[str] = Field(default_factory=list)
    qual_details: str = ""

    employment_status: str = ""
    employer_name: str = ""
    supervisor_name: str = ""
    employer_address: str = ""
    employer_email: str = ""
    employer_phone: str = ""

    training_reason: str = ""
    training_reason_other: str = ""


class AdditionalInfo(CamelModel):
    country_of_birth: str = ""
    lang_other: str = ""
    home_language: str = ""
    indigenous_status: str = ""
    has_disability: str = ""
    disability_types: List[str] = Field(default_factory=list)
    disability_notes: str = ""


class PrivacyTerms(CamelModel):
    accept_privacy: bool = False
    accept_terms: bool = False
    declare_name: str = ""
    declare_date: str = ""
    signature_data: str = ""


class EnrollmentFormData(CamelModel):
    applicant: ApplicantDetails = Field(default_factory=ApplicantDetails)
    usi: USIDetails = Field(default_factory=USIDetails)
    education: EducationDetails = Field(default_factory=EducationDetails)
    additional_info: AdditionalInfo = Field(default_factory=AdditionalInfo)
    privacy_terms: PrivacyTerms = Field(default_factory=PrivacyTerms)


# Form section number -> attribute on EnrollmentFormData
FORM_SECTIONS = {
    1: "applicant",
    2: "usi",
    3: "education",
    4: "additional_info",
    5: "privacy_terms",
}


def section_model(form: EnrollmentFormData, section: int):
    return getattr(form, FORM_SECTIONS[section])


def update_section(form: EnrollmentFormData, section: int, values: dict) -> EnrollmentFormData:
    """Merge ``values`` (camelCase or snake_case keys) into one form section."""
    current = section_model(form, section)
    merged = current.model_dump()
    for key, value in values.items():
        merged[_field_name(type(current), key)] = value
    updated = type(current).model_validate(merged)
    return form.model_copy(update={FORM_SECTIONS[section]: updated})


def _field_name(model, key: str) -> str:
    if key in model.model_fields:
        return key
    for name, info in model.model_fields.items():
        if info.alias == key:
            return name
    raise FieldValidationError({key: "Unknown field"})


def optional(value: str) -> Optional[str]:
    return value or None
