from fastapi import APIRouter

from .quiz_content import router as quiz_content
from .quiz_attempts import router as quiz_attempts
from .enrollment_wizard import router as enrollment_wizard
from .students import router as students
from .enrollments import router as enrollments
from .admin_students import router as admin_students
from .admin_enrollment_forms import router as admin_enrollment_forms
from .admin_quiz import router as admin_quiz
from .admin_payments import router as admin_payments

api_router = APIRouter()

api_router.include_router(quiz_content)
api_router.include_router(quiz_attempts)
api_router.include_router(enrollment_wizard)
api_router.include_router(students)
api_router.include_router(enrollments)
api_router.include_router(admin_students)
api_router.include_router(admin_enrollment_forms)
api_router.include_router(admin_quiz)
api_router.include_router(admin_payments)
