from fastapi import APIRouter, HTTPException

from llnd_portal.quiz.catalog import get_catalog
from llnd_portal.schemas.quiz import CatalogOut, SectionOut

router = APIRouter(prefix="/quiz", tags=["Quiz Content"])


@router.get("/catalog", response_model=CatalogOut)
def read_catalog():
    """All four assessment sections, without correct answers."""
    catalog = get_catalog()
    return CatalogOut(
        version=catalog.version,
        total_questions=catalog.total_questions,
        sections=[SectionOut.from_section(s) for s in catalog.sections],
    )


@router.get("/sections/{section_id}", response_model=SectionOut)
def read_section(section_id: str):
    section = get_catalog().get_section(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail="Section not found")
    return SectionOut.from_section(section)
