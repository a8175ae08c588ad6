"""Tests for registration, form section and upload checks."""

import pytest

from llnd_portal.core.errors import FieldValidationError
from llnd_portal.schemas.enrollment_form import EnrollmentFormData, update_section
from llnd_portal.schemas.payment import VerifyPaymentRequest
from llnd_portal.schemas.registration import Declaration, RegistrationData
from llnd_portal.services.validators import (
    WIZARD_AGREEMENT_MESSAGE,
    first_invalid_form_section,
    validate_declaration,
    validate_form_section,
    validate_payment_review,
    validate_registration,
    validate_upload,
)

VALID = RegistrationData(full_name="Jane Citizen", email="jane@example.com", phone="0400000000", password="secret1")


class TestRegistration:
    def test_valid(self):
        assert validate_registration(VALID, agreed=True) == {}

    def test_all_missing(self):
        errors = validate_registration(RegistrationData(), agreed=False)
        assert errors == {
            "fullName": "Full name is required",
            "email": "Email is required",
            "phone": "Phone number is required",
            "password": "Password is required",
            "terms": "Please agree to the conditions",
        }

    def test_bad_email(self):
        errors = validate_registration(VALID.model_copy(update={"email": "bad-email"}), agreed=True)
        assert errors == {"email": "Please enter a valid email address"}

    def test_short_password(self):
        errors = validate_registration(VALID.model_copy(update={"password": "12345"}), agreed=True)
        assert errors == {"password": "Password must be at least 6 characters"}

    def test_wizard_agreement_wording(self):
        errors = validate_registration(VALID, agreed=False, agreement_message=WIZARD_AGREEMENT_MESSAGE)
        assert errors == {"terms": "Please agree to the terms"}


class TestDeclaration:
    def test_all_three_needed(self):
        assert validate_declaration(Declaration(honest=True, understand=True, name="Jane")) is None
        assert validate_declaration(Declaration(honest=True, understand=True, name="  ")) is not None
        assert validate_declaration(Declaration(honest=False, understand=True, name="Jane")) is not None


class TestFormSections:
    def test_empty_form_fails_section_one_first(self):
        section, errors = first_invalid_form_section(EnrollmentFormData())
        assert section == 1
        assert errors["givenName"] == "Given name is required"

    def test_usi_section_needs_an_option(self):
        assert validate_form_section(EnrollmentFormData(), 2) == {"usiApply": "Please select an option"}

    def test_privacy_section(self):
        form = update_section(
            EnrollmentFormData(), 5,
            {"acceptPrivacy": True, "acceptTerms": True, "declareName": "Jane", "declareDate": "2026-06-15"},
        )
        assert validate_form_section(form, 5) == {}

    def test_update_accepts_snake_case(self):
        form = update_section(EnrollmentFormData(), 1, {"given_name": "Jane"})
        assert form.applicant.given_name == "Jane"

    def test_update_rejects_unknown_field(self):
        with pytest.raises(FieldValidationError) as exc:
            update_section(EnrollmentFormData(), 1, {"favouriteColour": "blue"})
        assert exc.value.errors == {"favouriteColour": "Unknown field"}


class TestUpload:
    def test_pdf_under_limit(self):
        assert validate_upload("application/pdf", 1024) == {}

    def test_wrong_type(self):
        assert validate_upload("image/gif", 10) == {"file": "Please upload a JPG, PNG, or PDF file"}

    def test_too_large(self):
        assert validate_upload("image/png", 5 * 1024 * 1024 + 1) == {"file": "File size must be less than 5MB"}


class TestPaymentReview:
    def test_approval_needs_no_reason(self):
        assert validate_payment_review(VerifyPaymentRequest(approve=True)) == {}

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_rejection_needs_reason(self, reason):
        errors = validate_payment_review(VerifyPaymentRequest(approve=False, rejection_reason=reason))
        assert errors == {"rejectionReason": "Please provide a reason for rejection"}
