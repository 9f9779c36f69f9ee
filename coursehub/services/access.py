"""Enrollment Gate: who may see a course's gated content."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from coursehub.core.error_codes import ErrorCode
from coursehub.core.errors import Forbidden
from coursehub.core.security import Identity
from coursehub.models import ACCESS_GRANTING_STATUSES, Enrollment, Material

logger = logging.getLogger(__name__)


def can_access(
    material: Material,
    identity: Identity | None,
    enrollment_status: str | None,
    instructor_id: uuid.UUID,
) -> bool:
    if identity is not None and identity.user_id == instructor_id:
        return True
    if enrollment_status in ACCESS_GRANTING_STATUSES:
        return True
    return bool(material.is_free)


def enrollment_status(db: Session, course_id: uuid.UUID, user_id: uuid.UUID) -> str | None:
    return db.execute(
        select(Enrollment.status).where(Enrollment.course_id == course_id, Enrollment.student_id == user_id)
    ).scalar_one_or_none()


def require_active_enrollment(db: Session, course_id: uuid.UUID, user_id: uuid.UUID) -> None:
    status = enrollment_status(db, course_id, user_id)
    if status not in ACCESS_GRANTING_STATUSES:
        logger.info("Denied course access: user=%s course=%s status=%s", user_id, course_id, status)
        raise Forbidden("Course not enrolled", code=ErrorCode.NOT_ENROLLED)
