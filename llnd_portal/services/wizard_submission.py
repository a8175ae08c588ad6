import logging
from datetime import date
from typing import Awaitable, Callable, Optional

from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.core.errors import InvalidTransition, PortalApiError
from llnd_portal.schemas.enrollment import EnrollmentFormSubmission, PublicEnrollmentSubmission
from llnd_portal.schemas.enrollment_form import EnrollmentFormData, optional
from llnd_portal.schemas.payment import CardDetails, PaymentMethod, ProcessCardPaymentRequest
from llnd_portal.services.payment import amount_in_cents, clean_card_number, validate_card
from llnd_portal.services.quiz_submission import section_payload
from llnd_portal.services.scoring import apply_score_floor
from llnd_portal.services.wizard import (
    ENROLLMENT_FORM,
    PAYMENT,
    CardPaymentFailed,
    CardPaymentSucceeded,
    CardValidationFailed,
    Next,
    WizardState,
    WizardStatus,
    WizardSubmissionFailed,
    WizardSubmissionStarted,
    WizardSubmissionSucceeded,
    transition,
)

logger = logging.getLogger(__name__)

SUBMIT_FAILURE_MESSAGE = "Failed to submit enrollment. Please try again."

# Sent when the learner leaves these blank
FORM_DEFAULTS = {
    "school_level": "Year 12 or equivalent",
    "school_complete_year": "2020",
    "school_name": "N/A",
    "has_post_secondary_qualification": "No",
    "employment_status": "Not employed",
    "training_reason": "To get a job",
    "country_of_birth": "Australia",
    "speaks_other_language": "No",
    "indigenous_status": "No",
    "has_disability": "No",
    "emergency_permission": "Yes",
    "usi_apply_through_sta": "No",
}


def map_form_to_request(form: EnrollmentFormData) -> EnrollmentFormSubmission:
    """Rename the form inputs to the enrollment API's field names."""
    a, u, e, i, p = form.applicant, form.usi, form.education, form.additional_info, form.privacy_terms
    fields = dict(
        title=a.title,
        surname=a.surname,
        given_name=a.given_name,
        middle_name=optional(a.middle_name),
        preferred_name=optional(a.preferred_name),
        date_of_birth=a.dob,
        gender=a.gender,
        home_phone=optional(a.home_phone),
        work_phone=optional(a.work_phone),
        mobile=a.mobile,
        email=a.email,
        residential_address=a.res_address,
        residential_suburb=a.res_suburb,
        residential_state=a.res_state,
        residential_postcode=a.res_postcode,
        postal_address_different=a.postal_different,
        postal_address=optional(a.post_address),
        postal_suburb=optional(a.post_suburb),
        postal_state=optional(a.post_state),
        postal_postcode=optional(a.post_postcode),
        emergency_contact_name=a.emergency_name,
        emergency_contact_relationship=a.emergency_relationship,
        emergency_contact_number=a.emergency_contact_number,
        emergency_permission=a.emergency_permission,
        usi=optional(u.usi),
        usi_access_permission=u.usi_access_permission,
        usi_apply_through_sta=u.usi_apply,
        usi_authorise_name=optional(u.usi_authorise_name),
        usi_consent=u.usi_consent,
        town_city_of_birth=optional(u.town_city_birth),
        overseas_city_of_birth=optional(u.overseas_city_birth),
        usi_id_type=optional(u.usi_id_type),
        drivers_licence_state=optional(u.dl_state),
        drivers_licence_number=optional(u.dl_number),
        medicare_number=optional(u.medicare_number),
        medicare_irn=optional(u.medicare_irn),
        medicare_card_color=optional(u.medicare_color),
        medicare_expiry=optional(u.medicare_expiry),
        birth_certificate_state=optional(u.birth_state),
        immi_card_number=optional(u.immi_number),
        australian_passport_number=optional(u.aus_passport_number),
        non_australian_passport_number=optional(u.non_aus_passport_number),
        non_australian_passport_country=optional(u.non_aus_passport_country),
        citizenship_stock_number=optional(u.citizenship_stock),
        citizenship_acquisition_date=optional(u.citizenship_acq_date),
        descent_acquisition_date=optional(u.descent_acq_date),
        school_level=e.school_level,
        school_complete_year=e.school_complete_year,
        school_name=e.school_name,
        school_in_australia=e.school_in_aus,
        school_state=optional(e.school_state),
        school_postcode=optional(e.school_postcode),
        school_country=optional(e.school_country),
        has_post_secondary_qualification=e.has_post_qual,
        qualification_levels=e.qual_levels or None,
        qualification_details=optional(e.qual_details),
        employment_status=e.employment_status,
        employer_name=optional(e.employer_name),
        supervisor_name=optional(e.supervisor_name),
        employer_address=optional(e.employer_address),
        employer_email=optional(e.employer_email),
        employer_phone=optional(e.employer_phone),
        training_reason=e.training_reason,
        training_reason_other=optional(e.training_reason_other),
        country_of_birth=i.country_of_birth,
        speaks_other_language=i.lang_other,
        home_language=optional(i.home_language),
        indigenous_status=i.indigenous_status,
        has_disability=i.has_disability,
        disability_types=i.disability_types or None,
        disability_notes=optional(i.disability_notes),
        accepted_privacy_notice=p.accept_privacy,
        accepted_terms_and_conditions=p.accept_terms,
        declaration_name=p.declare_name,
        declaration_date=p.declare_date,
        signature_data=p.signature_data or "",
    )
    for key, default in FORM_DEFAULTS.items():
        if not fields[key]:
            fields[key] = default
    return EnrollmentFormSubmission(**fields)


def build_public_submission(state: WizardState) -> PublicEnrollmentSubmission:
    """Combine registration, course, payment, assessment and form into one request.

    Section scores go out with the wizard floor applied.
    """
    quiz = state.quiz
    if quiz.totals is None:
        raise InvalidTransition(quiz.step.value, "submit")
    registration = state.registration
    results = apply_score_floor(quiz.section_results)

    transaction_id = state.transaction_id or None
    if state.payment_method == PaymentMethod.card and state.payment_transaction_id is not None:
        transaction_id = str(state.payment_transaction_id)

    form_fields = map_form_to_request(state.form).model_dump()
    # The assessment declaration name wins over the form's
    form_fields["declaration_name"] = quiz.declaration.name.strip() or form_fields["declaration_name"]

    return PublicEnrollmentSubmission(
        **form_fields,
        password=registration.password,
        full_name=registration.full_name.strip(),
        phone=registration.phone.strip(),
        total_questions=quiz.totals.total_questions,
        correct_answers=quiz.totals.correct_answers,
        overall_percentage=round(quiz.totals.overall_percentage, 2),
        is_passed=all(result.passed for result in results),
        section_results=section_payload(results),
        course_id=state.course_id or None,
        course_date_id=state.course_date_id or None,
        payment_method=state.payment_method.value,
        transaction_id=transaction_id,
        payment_amount=state.course_price,
    )


def build_card_payment_request(state: WizardState, card: CardDetails) -> ProcessCardPaymentRequest:
    registration = state.registration
    return ProcessCardPaymentRequest(
        full_name=registration.full_name.strip(),
        email=registration.email.strip(),
        phone=registration.phone.strip(),
        password=registration.password,
        course_id=state.course_id,
        selected_course_date_id=state.course_date_id,
        amount_cents=amount_in_cents(state.course_price),
        card_name=card.card_name.strip(),
        card_number=clean_card_number(card.card_number),
        expiry_month=card.expiry_month,
        expiry_year=card.expiry_year,
        cvv=card.cvv,
    )


async def pay_by_card(
    state: WizardState, card: CardDetails, client: PortalApiClient, today: Optional[date] = None
) -> WizardState:
    """Validate the card locally, then charge it. Card details are never stored on the state."""
    if state.step != PAYMENT or state.payment_method != PaymentMethod.card:
        raise InvalidTransition(f"{state.status.value}:{state.step}", "pay_by_card")
    if state.payment_completed:
        raise InvalidTransition("payment_completed", "pay_by_card")

    errors = validate_card(card, today)
    if errors:
        return transition(state, CardValidationFailed(errors=errors))

    try:
        result = await client.process_card_payment(build_card_payment_request(state, card))
    except PortalApiError as e:
        logger.warning("Card payment failed for course %s: %s", state.course_id, e.message)
        return transition(state, CardPaymentFailed(message=e.message))

    logger.info("Card payment %s completed for course %s", result.transaction_id, state.course_id)
    return transition(
        state,
        CardPaymentSucceeded(
            transaction_id=result.transaction_id, user_id=result.user_id, student_id=result.student_id
        ),
    )


async def submit_wizard(
    state: WizardState,
    client: PortalApiClient,
    on_started: Optional[Callable[[WizardState], Awaitable[None]]] = None,
) -> WizardState:
    """Validate every form section and send the combined enrollment.

    A failing section becomes the current one and nothing is sent.
    """
    if state.status != WizardStatus.in_progress or state.step != ENROLLMENT_FORM:
        raise InvalidTransition(f"{state.status.value}:{state.step}", "submit")

    state = transition(state, Next())
    if state.form_errors:
        return state

    request = build_public_submission(state)
    state = transition(state, WizardSubmissionStarted())
    if on_started is not None:
        await on_started(state)

    try:
        result = await client.submit_public_enrollment_form(request)
    except PortalApiError as e:
        logger.warning("Enrollment submission failed: %s", e.message)
        return transition(state, WizardSubmissionFailed(message=e.message or SUBMIT_FAILURE_MESSAGE))

    logger.info("Enrollment submitted for student %s", result.student_id)
    return transition(state, WizardSubmissionSucceeded(result=result))
