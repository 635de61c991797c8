import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from app.api.common import load_curriculum
from app.core.deps import get_current_user_id, get_curricula
from app.services.curriculum import (
    CurriculumNodeNotFound,
    CurriculumStore,
    browse_curriculum,
    curriculum_id_for,
    curriculum_stats,
)

logger = logging.getLogger("lessoncraft.curriculum_api")
router = APIRouter(prefix="/api/curriculum", tags=["curriculum"])


@router.get("")
def list_curricula(
    country: Optional[str] = Query(None),
    grade: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    curricula: CurriculumStore = Depends(get_curricula),
):
    """List stored curricula, newest first.

    `country` matches the lower-cased country exactly; `grade` is a
    case-insensitive substring match on the document's grade.
    """
    try:
        rows = curricula.list_rows(country.lower() if country else None)
    except Exception as exc:
        logger.error("[curriculum.list] DB error: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch curricula")
    if grade:
        rows = [r for r in rows if grade.lower() in str(r["data"].get("grade") or "").lower()]
    return {"success": True, "data": rows, "count": len(rows)}


@router.post("", status_code=201)
def upload_curriculum(
    data: dict = Body(...),
    user_id: str = Depends(get_current_user_id),
    curricula: CurriculumStore = Depends(get_curricula),
):
    """Store a new curriculum under the id derived from its country and grade."""
    country, grade = data.get("country"), data.get("grade")
    if not isinstance(country, str) or not country.strip() or not isinstance(grade, str) or not grade.strip():
        raise HTTPException(status_code=400, detail="Curriculum must have a country and a grade")

    curriculum_id = curriculum_id_for(country, grade)
    stats = curriculum_stats(data)
    try:
        if curricula.get_row(curriculum_id) is not None:
            raise HTTPException(
                status_code=409,
                detail=f"Curriculum for {country} - {grade} already exists",
            )
        curricula.put_curriculum(curriculum_id, data)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("[curriculum.upload] DB error for %s: %s", curriculum_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to upload curriculum")

    logger.info("[curriculum.upload] stored %s (by %s)", curriculum_id, user_id)
    return {
        "success": True,
        "message": "Curriculum uploaded successfully",
        "data": {
            "id": curriculum_id,
            "country": country,
            "grade": grade,
            "stats": stats,
        },
    }


@router.get("/{curriculum_id}")
def get_curriculum(
    curriculum_id: str,
    user_id: str = Depends(get_current_user_id),
    curricula: CurriculumStore = Depends(get_curricula),
):
    try:
        row = curricula.get_row(curriculum_id)
    except Exception as exc:
        logger.error("[curriculum.get] DB error for %s: %s", curriculum_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch curriculum")
    if row is None:
        raise HTTPException(status_code=404, detail=f"No curriculum found with ID: {curriculum_id}")
    return {"success": True, "data": row}


@router.delete("/{curriculum_id}")
def delete_curriculum(
    curriculum_id: str,
    user_id: str = Depends(get_current_user_id),
    curricula: CurriculumStore = Depends(get_curricula),
):
    try:
        deleted = curricula.delete_curriculum(curriculum_id)
    except Exception as exc:
        logger.error("[curriculum.delete] DB error for %s: %s", curriculum_id, exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete curriculum")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"No curriculum found with ID: {curriculum_id}")
    return {"success": True, "message": "Curriculum deleted successfully"}


@router.get("/{curriculum_id}/browse")
def browse(
    curriculum_id: str,
    subject: Optional[str] = Query(None),
    unit: Optional[str] = Query(None),
    chapter: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    curricula: CurriculumStore = Depends(get_curricula),
):
    """Browse one level of the curriculum tree (subjects, units, chapters or lessons)."""
    curriculum = load_curriculum(curricula, curriculum_id)
    try:
        data = browse_curriculum(curriculum_id, curriculum, subject, unit, chapter)
    except CurriculumNodeNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"success": True, "data": data}
