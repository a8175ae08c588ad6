import asyncio
import logging
from typing import List, Optional, Sequence

from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.core.errors import PortalApiError
from llnd_portal.schemas.student import StudentFilter, StudentPage, StudentResponse, StudentStatus

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


async def fetch_student_status(client: PortalApiClient, student_id: str) -> StudentStatus:
    """Quiz and enrollment-form badges for one student.

    Any failed lookup marks both badges as not completed.
    """
    try:
        quiz_status, form = await asyncio.gather(
            client.get_student_quiz_status(student_id),
            client.get_enrollment_form(student_id),
        )
    except PortalApiError as e:
        logger.warning("Could not load status for student %s: %s", student_id, e)
        return StudentStatus(student_id=student_id)

    return StudentStatus(
        student_id=student_id,
        has_passed_quiz=quiz_status.has_passed_quiz or quiz_status.has_admin_bypass,
        has_completed_enrollment=form.enrollment_form_completed,
    )


async def fetch_student_statuses(
    client: PortalApiClient, students: Sequence[StudentResponse], limit: int = DEFAULT_PAGE_SIZE
) -> List[StudentStatus]:
    semaphore = asyncio.Semaphore(max(limit, 1))

    async def bounded(student_id: str) -> StudentStatus:
        async with semaphore:
            return await fetch_student_status(client, student_id)

    return list(await asyncio.gather(*(bounded(s.student_id) for s in students)))


async def load_student_page(client: PortalApiClient, filters: Optional[StudentFilter] = None) -> StudentPage:
    filters = filters or StudentFilter()
    if filters.page_size is None:
        filters = filters.model_copy(update={"page_size": DEFAULT_PAGE_SIZE})
    if filters.page_number is None:
        filters = filters.model_copy(update={"page_number": 1})

    listing = await client.list_students(filters)
    statuses = await fetch_student_statuses(client, listing.students, limit=filters.page_size)
    return StudentPage(
        students=listing.students,
        total_count=listing.total_count,
        page_number=listing.page_number,
        page_size=listing.page_size,
        total_pages=listing.total_pages,
        statuses=statuses,
    )
