from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursehub.core.error_codes import ErrorCode
from coursehub.core.errors import Conflict, Forbidden, NotFound
from coursehub.core.ids import parse_uuid
from coursehub.core.security import ROLE_STUDENT, Identity, now_utc
from coursehub.models import ACCESS_GRANTING_STATUSES, Course, Enrollment

logger = logging.getLogger(__name__)


def enroll(db: Session, course_id: str, student: Identity) -> tuple[Enrollment, Course]:
    if student.role != ROLE_STUDENT:
        raise Forbidden("Only students can enroll", code=ErrorCode.STUDENT_ONLY)

    parsed = parse_uuid(course_id)
    course = None
    if parsed is not None:
        course = db.execute(
            select(Course).where(Course.id == parsed, Course.is_active.is_(True)).with_for_update(of=Course)
        ).scalars().first()
    if course is None:
        raise NotFound("Course not found", code=ErrorCode.COURSE_NOT_FOUND)

    enrollment = db.execute(
        select(Enrollment).where(Enrollment.course_id == course.id, Enrollment.student_id == student.user_id)
    ).scalars().first()
    if enrollment is not None and enrollment.status in ACCESS_GRANTING_STATUSES:
        raise Conflict("Already enrolled in this course", code=ErrorCode.ALREADY_ENROLLED)

    seats_taken = db.execute(
        select(func.count())
        .select_from(Enrollment)
        .where(Enrollment.course_id == course.id, Enrollment.status == "enrolled")
    ).scalar_one()
    if seats_taken >= course.max_students:
        raise Conflict("Course is full", code=ErrorCode.COURSE_FULL)

    if enrollment is None:
        enrollment = Enrollment(student_id=student.user_id, course_id=course.id, status="enrolled")
        db.add(enrollment)
    else:
        # dropped / suspended students come back through the same record
        enrollment.status = "enrolled"
        enrollment.enrolled_at = now_utc()

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Already enrolled in this course", code=ErrorCode.ALREADY_ENROLLED) from exc

    logger.info("Student %s enrolled in course %s", student.user_id, course.id)
    return enrollment, course


def list_my_enrollments(db: Session, student: Identity) -> list[tuple[Enrollment, Course]]:
    rows = db.execute(
        select(Enrollment, Course)
        .join(Course, Enrollment.course_id == Course.id)
        .where(Enrollment.student_id == student.user_id)
        .order_by(Enrollment.enrolled_at.desc())
    ).all()
    return [(enrollment, course) for enrollment, course in rows]
