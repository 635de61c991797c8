"""Curriculum storage, lookup and browsing.

Curricula are opaque nested documents (subjects → units → chapters →
lessons, camelCase keys). This module stores them, walks them to find one
lesson and summarises one level of the tree at a time; it does not validate
their shape.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from app.models.lesson import LessonSpec

logger = logging.getLogger("lessoncraft.curriculum")


class CurriculumNodeNotFound(LookupError):
    """A subject / unit / chapter filter matched nothing while browsing."""


@dataclass(frozen=True)
class LessonLocation:
    lesson: LessonSpec
    subject_name: str


def curriculum_id_for(country: str, grade: str) -> str:
    """'Saudi Arabia', 'Grade 10' -> 'saudi-arabia-grade-10'."""
    def slug(value: str) -> str:
        return re.sub(r"\s+", "-", value.strip().lower())

    return f"{slug(country)}-{slug(grade)}"


def _children(node, key: str) -> list[dict]:
    """Dict children under `key`; any other shape counts as no children."""
    if not isinstance(node, dict):
        return []
    value = node.get(key)
    if not isinstance(value, list):
        return []
    return [child for child in value if isinstance(child, dict)]


def _subjects(curriculum: dict) -> list[dict]:
    return _children(curriculum, "subjects")


def _units(subject: dict) -> list[dict]:
    return _children(subject, "units")


def _chapters(unit: dict) -> list[dict]:
    return _children(unit, "chapters")


def _lessons(chapter: dict) -> list[dict]:
    return _children(chapter, "lessons")


def _str_list(value) -> list[str]:
    return [str(v) for v in value] if isinstance(value, list) else []


def find_lesson(
    curriculum: dict,
    lesson_id: str,
    subject_id: Optional[str] = None,
    unit_id: Optional[str] = None,
    chapter_id: Optional[str] = None,
) -> Optional[LessonLocation]:
    """Return the first lesson with `lesson_id`, honouring the optional filters."""
    for subject in _subjects(curriculum):
        if subject_id and subject.get("subjectId") != subject_id:
            continue
        for unit in _units(subject):
            if unit_id and unit.get("unitId") != unit_id:
                continue
            for chapter in _chapters(unit):
                if chapter_id and chapter.get("chapterId") != chapter_id:
                    continue
                for lesson in _lessons(chapter):
                    if lesson.get("lessonId") == lesson_id:
                        return LessonLocation(
                            lesson=LessonSpec.from_curriculum(lesson),
                            subject_name=str(subject.get("name") or ""),
                        )
    return None


def curriculum_stats(curriculum: dict) -> dict:
    units = [u for s in _subjects(curriculum) for u in _units(s)]
    chapters = [c for u in units for c in _chapters(u)]
    return {
        "subjects": len(_subjects(curriculum)),
        "units": len(units),
        "chapters": len(chapters),
        "lessons": sum(len(_lessons(c)) for c in chapters),
    }


def _pick(nodes: list, key: str, wanted: str, label: str) -> dict:
    for node in nodes:
        if node.get(key) == wanted:
            return node
    raise CurriculumNodeNotFound(f"{label} not found")


def browse_curriculum(
    curriculum_id: str,
    curriculum: dict,
    subject_id: Optional[str] = None,
    unit_id: Optional[str] = None,
    chapter_id: Optional[str] = None,
) -> dict:
    """
    Summarise one level of the tree.

    No filter lists subjects with unit/chapter/lesson counts; subject_id lists
    its units; subject_id + unit_id lists chapters; all three list lessons.
    A filter that matches nothing raises CurriculumNodeNotFound. Deeper
    filters without their parents are ignored.
    """
    result = {
        "curriculumId": curriculum_id,
        "country": curriculum.get("country"),
        "grade": curriculum.get("grade"),
    }

    if not subject_id:
        result["subjects"] = []
        for subject in _subjects(curriculum):
            stats = curriculum_stats({"subjects": [subject]})
            result["subjects"].append({
                "subjectId": subject.get("subjectId"),
                "name": subject.get("name"),
                "unitCount": stats["units"],
                "chapterCount": stats["chapters"],
                "lessonCount": stats["lessons"],
            })
        return result

    subject = _pick(_subjects(curriculum), "subjectId", subject_id, "Subject")
    result["subject"] = {"subjectId": subject.get("subjectId"), "name": subject.get("name")}

    if not unit_id:
        result["units"] = [
            {
                "unitId": unit.get("unitId"),
                "name": unit.get("name"),
                "chapterCount": len(_chapters(unit)),
                "lessonCount": sum(len(_lessons(c)) for c in _chapters(unit)),
            }
            for unit in _units(subject)
        ]
        return result

    unit = _pick(_units(subject), "unitId", unit_id, "Unit")
    result["unit"] = {"unitId": unit.get("unitId"), "name": unit.get("name")}

    if not chapter_id:
        result["chapters"] = [
            {
                "chapterId": chapter.get("chapterId"),
                "name": chapter.get("name"),
                "lessonCount": len(_lessons(chapter)),
            }
            for chapter in _chapters(unit)
        ]
        return result

    chapter = _pick(_chapters(unit), "chapterId", chapter_id, "Chapter")
    result["chapter"] = {"chapterId": chapter.get("chapterId"), "name": chapter.get("name")}
    result["lessons"] = [
        {
            "lessonId": lesson.get("lessonId"),
            "name": lesson.get("name"),
            "objectives": _str_list(lesson.get("objectives")),
            "keywords": _str_list(lesson.get("keywords")),
            "dependencies": _str_list(lesson.get("dependencies")),
        }
        for lesson in _lessons(chapter)
    ]
    return result


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class CurriculumStore:
    """
    Rows are dicts: {id, country_code, created_at, data}. `data` is the
    curriculum document itself.
    """

    def get_curriculum(self, curriculum_id: str) -> Optional[dict]:
        row = self.get_row(curriculum_id)
        return row["data"] if row else None

    def get_row(self, curriculum_id: str) -> Optional[dict]:
        raise NotImplementedError

    def list_rows(self, country_code: Optional[str] = None) -> list[dict]:
        """Newest first."""
        raise NotImplementedError

    def put_curriculum(self, curriculum_id: str, data: dict) -> None:
        raise NotImplementedError

    def delete_curriculum(self, curriculum_id: str) -> bool:
        raise NotImplementedError


def _country_code(data: dict) -> str:
    return str(data.get("country") or "").lower()


class InMemoryCurriculumStore(CurriculumStore):
    def __init__(self):
        self._rows: dict[str, dict] = {}

    def get_row(self, curriculum_id: str) -> Optional[dict]:
        return self._rows.get(curriculum_id)

    def list_rows(self, country_code: Optional[str] = None) -> list[dict]:
        rows = [
            r for r in self._rows.values()
            if country_code is None or r["country_code"] == country_code
        ]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def put_curriculum(self, curriculum_id: str, data: dict) -> None:
        existing = self._rows.get(curriculum_id)
        self._rows[curriculum_id] = {
            "id": curriculum_id,
            "country_code": _country_code(data),
            "created_at": existing["created_at"] if existing else datetime.now(timezone.utc).isoformat(),
            "data": data,
        }

    def delete_curriculum(self, curriculum_id: str) -> bool:
        return self._rows.pop(curriculum_id, None) is not None


class SupabaseCurriculumStore(CurriculumStore):
    """Backed by the `curricula` table (id, country_code, created_at, data)."""

    _COLUMNS = "id, country_code, created_at, data"

    def __init__(self, supabase_client):
        self.sb = supabase_client

    def get_row(self, curriculum_id: str) -> Optional[dict]:
        r = (
            self.sb.table("curricula")
            .select(self._COLUMNS)
            .eq("id", curriculum_id)
            .maybe_single()
            .execute()
        )
        row = getattr(r, "data", None)
        if not row:
            return None
        return {**row, "data": row.get("data") or {}}

    def list_rows(self, country_code: Optional[str] = None) -> list[dict]:
        q = self.sb.table("curricula").select(self._COLUMNS)
        if country_code is not None:
            q = q.eq("country_code", country_code)
        r = q.order("created_at", desc=True).execute()
        return list(r.data or [])

    def put_curriculum(self, curriculum_id: str, data: dict) -> None:
        payload = {"id": curriculum_id, "country_code": _country_code(data), "data": data}
        self.sb.table("curricula").upsert(payload, on_conflict="id").execute()

    def delete_curriculum(self, curriculum_id: str) -> bool:
        r = self.sb.table("curricula").delete().eq("id", curriculum_id).execute()
        return bool(r.data)


CURRICULUM_STORE = InMemoryCurriculumStore()


def get_curriculum_store() -> CurriculumStore:
    from app.core.config import get_settings

    if get_settings().curriculum_store.lower() != "supabase":
        return CURRICULUM_STORE

    from app.services.supabase_client import get_supabase_client
    return SupabaseCurriculumStore(get_supabase_client())
