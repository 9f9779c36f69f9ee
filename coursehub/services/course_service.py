from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursehub.core.error_codes import ErrorCode
from coursehub.core.errors import Conflict, Forbidden, NotFound, field_error
from coursehub.core.ids import parse_uuid
from coursehub.core.security import Identity
from coursehub.models import Course, CourseModule, Material
from coursehub.schemas.content import (
    MaterialCreateRequest,
    MaterialPatch,
    ModuleCreateRequest,
    ModulePatch,
    check_material_binding,
)
from coursehub.schemas.courses import CourseCreateRequest, CoursePatch
from coursehub.services import access

logger = logging.getLogger(__name__)

COURSE_PATCH_FIELDS = (
    "title",
    "description",
    "category",
    "level",
    "credits",
    "max_students",
    "fees",
    "prerequisites",
    "is_active",
)
MODULE_PATCH_FIELDS = ("title", "description", "duration", "markdown_content")
MATERIAL_PATCH_FIELDS = ("title", "type", "url", "filename", "description", "is_free")
# Fields that must stay non-blank once a patch has been applied.
REQUIRED_TEXT_FIELDS = frozenset({"title", "description", "category"})


@dataclass(frozen=True)
class ContentView:
    """A course as seen by one caller, with the Enrollment Gate bound in."""

    course: Course
    identity: Identity | None
    enrollment_status: str | None

    @property
    def is_owner(self) -> bool:
        return self.identity is not None and self.identity.user_id == self.course.instructor_id

    def can_access(self, material: Material) -> bool:
        return access.can_access(material, self.identity, self.enrollment_status, self.course.instructor_id)


@dataclass(frozen=True)
class ModuleView:
    content: ContentView
    module: CourseModule
    previous_module_id: uuid.UUID | None
    next_module_id: uuid.UUID | None


def _patch_values(patch: BaseModel, fields: tuple[str, ...], required: frozenset[str] = frozenset()) -> dict:
    """Collect the fields explicitly present in ``patch``.

    Falsy values (``False``, ``0``, ``""``) count as present; only omitted
    fields are skipped.
    """
    values = {}
    for name in fields:
        if name not in patch.model_fields_set:
            continue
        value = getattr(patch, name)
        if isinstance(value, str):
            value = value.strip()
            if name in required and not value:
                raise field_error(name, f"{name} must not be blank")
        values[name] = value
    return values


def _next_position(items) -> int:
    return max((item.position for item in items), default=0) + 1


def _load_course(db: Session, course_id: str | uuid.UUID, *, for_update: bool = False) -> Course:
    parsed = parse_uuid(course_id)
    course = None
    if parsed is not None:
        stmt = select(Course).where(Course.id == parsed)
        if for_update:
            stmt = stmt.with_for_update(of=Course)
        course = db.execute(stmt).scalars().first()
    if course is None:
        raise NotFound("Course not found", code=ErrorCode.COURSE_NOT_FOUND)
    return course


def _require_owner(course: Course, caller: Identity) -> None:
    if course.instructor_id != caller.user_id:
        logger.info("Refused mutation of course %s by non-owner %s", course.id, caller.user_id)
        raise Forbidden("Not authorized to modify this course", code=ErrorCode.COURSE_NOT_OWNER)


def _owned_course(db: Session, course_id: str | uuid.UUID, caller: Identity) -> Course:
    # Module and material mutations resolve their target before checking ownership,
    # so a missing child is NotFound even for a non-owner.
    course = _load_course(db, course_id, for_update=True)
    _require_owner(course, caller)
    return course


def _find_module(course: Course, module_id: str | uuid.UUID) -> CourseModule:
    parsed = parse_uuid(module_id)
    for module in course.modules:
        if parsed is not None and module.id == parsed:
            return module
    raise NotFound("Module not found", code=ErrorCode.MODULE_NOT_FOUND)


def _find_material(materials: list[Material], material_id: str | uuid.UUID) -> Material:
    parsed = parse_uuid(material_id)
    for material in materials:
        if parsed is not None and material.id == parsed:
            return material
    raise NotFound("Material not found", code=ErrorCode.MATERIAL_NOT_FOUND)


def _material_list(course: Course, module_id: str | uuid.UUID | None) -> list[Material]:
    if module_id is None:
        return course.materials
    return _find_module(course, module_id).materials


def _material_from_input(payload: MaterialCreateRequest, *, position: int) -> Material:
    return Material(
        title=payload.title.strip(),
        type=payload.type,
        url=payload.url.strip(),
        filename=payload.filename.strip(),
        description=payload.description.strip(),
        is_free=payload.is_free,
        position=position,
    )


# Courses


def create_course(db: Session, payload: CourseCreateRequest, owner: Identity) -> Course:
    if not owner.is_instructor:
        raise Forbidden("Only instructors can create courses", code=ErrorCode.INSTRUCTOR_ONLY)

    course_code = payload.course_code.strip().upper()
    existing = db.execute(
        select(Course.id).where(func.upper(Course.course_code) == course_code)
    ).scalar_one_or_none()
    if existing is not None:
        raise Conflict("Course code already exists", code=ErrorCode.COURSE_CODE_EXISTS)

    course = Course(
        instructor_id=owner.user_id,
        course_code=course_code,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        level=payload.level,
        credits=payload.credits,
        max_students=payload.max_students,
        fees=payload.fees,
        prerequisites=[item.strip() for item in payload.prerequisites if item.strip()],
        is_active=payload.is_active,
    )
    db.add(course)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Course code already exists", code=ErrorCode.COURSE_CODE_EXISTS) from exc

    db.refresh(course)
    logger.info("Created course %s (%s) for instructor %s", course.id, course.course_code, owner.user_id)
    return course


def get_course(db: Session, course_id: str, identity: Identity | None) -> ContentView:
    course = _load_course(db, course_id)
    status = None
    if identity is not None:
        status = access.enrollment_status(db, course.id, identity.user_id)
    return ContentView(course=course, identity=identity, enrollment_status=status)


def update_course(db: Session, course_id: str, patch: CoursePatch, caller: Identity) -> Course:
    values = _patch_values(patch, COURSE_PATCH_FIELDS, REQUIRED_TEXT_FIELDS)
    if "prerequisites" in values:
        values["prerequisites"] = [item.strip() for item in values["prerequisites"] if item.strip()]

    course = _owned_course(db, course_id, caller)
    for name, value in values.items():
        setattr(course, name, value)
    db.commit()
    db.refresh(course)
    return course


def delete_course(db: Session, course_id: str, caller: Identity) -> None:
    """Hard-delete a course together with its modules and materials.

    Enrollments are not consulted; deleting a course with active students is allowed.
    """
    course = _owned_course(db, course_id, caller)
    db.delete(course)
    db.commit()
    logger.info("Deleted course %s by instructor %s", course_id, caller.user_id)


def list_instructor_courses(db: Session, instructor_id: str, caller: Identity) -> list[Course]:
    parsed = parse_uuid(instructor_id)
    if parsed is None or parsed != caller.user_id:
        raise Forbidden("Access denied")
    return list(
        db.execute(
            select(Course)
            .where(Course.instructor_id == parsed)
            .order_by(Course.created_at.desc(), Course.id.desc())
        )
        .scalars()
        .all()
    )


# Modules


def add_module(db: Session, course_id: str, payload: ModuleCreateRequest, caller: Identity) -> CourseModule:
    course = _owned_course(db, course_id, caller)

    module = CourseModule(
        title=payload.title.strip(),
        description=payload.description.strip(),
        duration=payload.duration.strip(),
        markdown_content=payload.markdown_content,
        position=_next_position(course.modules),
    )
    for item in payload.materials:
        module.materials.append(_material_from_input(item, position=_next_position(module.materials)))
    course.modules.append(module)
    db.commit()
    logger.info("Added module %s to course %s", module.id, course.id)
    return module


def get_module(db: Session, course_id: str, module_id: str, identity: Identity | None) -> ModuleView:
    content = get_course(db, course_id, identity)
    modules = content.course.modules
    module = _find_module(content.course, module_id)
    index = modules.index(module)
    previous_id = modules[index - 1].id if index > 0 else None
    next_id = modules[index + 1].id if index + 1 < len(modules) else None
    return ModuleView(content=content, module=module, previous_module_id=previous_id, next_module_id=next_id)


def update_module(
    db: Session, course_id: str, module_id: str, patch: ModulePatch, caller: Identity
) -> CourseModule:
    values = _patch_values(patch, MODULE_PATCH_FIELDS, frozenset({"title"}))
    if "markdown_content" in values:
        # Markdown keeps its own whitespace.
        values["markdown_content"] = patch.markdown_content

    course = _load_course(db, course_id, for_update=True)
    module = _find_module(course, module_id)
    _require_owner(course, caller)
    for name, value in values.items():
        setattr(module, name, value)
    db.commit()
    return module


def delete_module(db: Session, course_id: str, module_id: str, caller: Identity) -> None:
    course = _load_course(db, course_id, for_update=True)
    module = _find_module(course, module_id)
    _require_owner(course, caller)
    course.modules.remove(module)
    db.commit()
    logger.info("Removed module %s from course %s", module_id, course.id)


# Materials; ``module_id=None`` addresses the course's flat material list.


def add_material(
    db: Session,
    course_id: str,
    payload: MaterialCreateRequest,
    caller: Identity,
    *,
    module_id: str | None = None,
) -> Material:
    course = _load_course(db, course_id, for_update=True)
    materials = _material_list(course, module_id)
    _require_owner(course, caller)
    material = _material_from_input(payload, position=_next_position(materials))
    materials.append(material)
    db.commit()
    logger.info("Added material %s to course %s (module=%s)", material.id, course.id, module_id)
    return material


def update_material(
    db: Session,
    course_id: str,
    material_id: str,
    patch: MaterialPatch,
    caller: Identity,
    *,
    module_id: str | None = None,
) -> Material:
    values = _patch_values(patch, MATERIAL_PATCH_FIELDS, frozenset({"title"}))

    course = _load_course(db, course_id, for_update=True)
    material = _find_material(_material_list(course, module_id), material_id)
    _require_owner(course, caller)

    merged_type = values.get("type", material.type)
    merged_url = values.get("url", material.url)
    merged_filename = values.get("filename", material.filename)
    try:
        check_material_binding(merged_type, merged_url, merged_filename)
    except ValueError as exc:
        raise field_error("url" if merged_type == "link" else "filename", str(exc)) from exc

    for name, value in values.items():
        setattr(material, name, value)
    db.commit()
    return material


def delete_material(
    db: Session,
    course_id: str,
    material_id: str,
    caller: Identity,
    *,
    module_id: str | None = None,
) -> None:
    course = _load_course(db, course_id, for_update=True)
    materials = _material_list(course, module_id)
    material = _find_material(materials, material_id)
    _require_owner(course, caller)
    materials.remove(material)
    db.commit()
