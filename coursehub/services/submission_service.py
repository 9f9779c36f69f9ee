"""Assignment submissions and grading.

One row per (assignment, student). Submitting again rewrites that row in
place and keeps the lateness recorded on creation. Grading and returning are
separate instructor actions, so a grade never moves the status on its own.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursehub.core.error_codes import ErrorCode
from coursehub.core.errors import Forbidden, NotFound, ValidationError
from coursehub.core.ids import parse_uuid
from coursehub.core.security import Identity, as_utc, now_utc
from coursehub.models import SUBMISSION_STATUSES, Assignment, Course, Submission
from coursehub.schemas.submissions import SubmitRequest
from coursehub.services import access

logger = logging.getLogger(__name__)

MAX_SUBMISSION_TEXT = 5000
MAX_FEEDBACK = 2000


@dataclass(frozen=True)
class SubmissionList:
    submissions: list[Submission]
    status_counts: dict[str, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.submissions)


def _load_assignment(db: Session, assignment_id: str | uuid.UUID) -> Assignment:
    parsed = parse_uuid(assignment_id)
    assignment = db.get(Assignment, parsed) if parsed is not None else None
    if assignment is None:
        raise NotFound("Assignment not found", code=ErrorCode.ASSIGNMENT_NOT_FOUND)
    return assignment


def _load_submission(db: Session, submission_id: str | uuid.UUID, *, for_update: bool = False) -> Submission:
    parsed = parse_uuid(submission_id)
    submission = None
    if parsed is not None:
        stmt = select(Submission).where(Submission.id == parsed)
        if for_update:
            stmt = stmt.with_for_update()
        submission = db.execute(stmt).scalars().first()
    if submission is None:
        raise NotFound("Submission not found", code=ErrorCode.SUBMISSION_NOT_FOUND)
    return submission


def _is_course_instructor(db: Session, assignment: Assignment, caller: Identity) -> bool:
    instructor_id = db.execute(
        select(Course.instructor_id).where(Course.id == assignment.course_id)
    ).scalar_one_or_none()
    return instructor_id is not None and instructor_id == caller.user_id


def _require_course_instructor(db: Session, assignment: Assignment, caller: Identity) -> None:
    if not _is_course_instructor(db, assignment, caller):
        logger.info("Refused grading access to assignment %s for %s", assignment.id, caller.user_id)
        raise Forbidden("Only the course instructor can do this", code=ErrorCode.SUBMISSION_ACCESS_DENIED)


def _find_existing(db: Session, assignment_id: uuid.UUID, student_id: uuid.UUID) -> Submission | None:
    return db.execute(
        select(Submission)
        .where(Submission.assignment_id == assignment_id, Submission.student_id == student_id)
        .with_for_update()
    ).scalars().first()


def submit(db: Session, assignment_id: str, student: Identity, payload: SubmitRequest) -> Submission:
    if len(payload.submission_text) > MAX_SUBMISSION_TEXT:
        raise ValidationError(
            "Submission text cannot exceed 5000 characters",
            fields=[{"field": "submission_text", "message": "too long"}],
        )

    assignment = _load_assignment(db, assignment_id)
    access.require_active_enrollment(db, assignment.course_id, student.user_id)

    submitted_at = now_utc()
    is_late = submitted_at > as_utc(assignment.due_date)
    attachments = [item.model_dump() for item in payload.attachments]

    submission = _find_existing(db, assignment.id, student.user_id)
    if submission is None:
        submission = Submission(
            assignment_id=assignment.id,
            student_id=student.user_id,
            submission_text=payload.submission_text,
            attachments=attachments,
            submitted_at=submitted_at,
            is_late=is_late,
            status="submitted",
        )
        db.add(submission)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent submit won the insert; fall back to updating its row.
            db.rollback()
            submission = _find_existing(db, assignment.id, student.user_id)
            if submission is None:
                raise
        else:
            logger.info("Stored submission %s for assignment %s", submission.id, assignment.id)
            return submission

    submission.submission_text = payload.submission_text
    submission.attachments = attachments
    submission.submitted_at = submitted_at
    # is_late stays as first recorded. A row still awaiting review keeps
    # "submitted"; one that has been returned comes back as "resubmitted".
    if submission.status != "submitted":
        submission.status = "resubmitted"
    db.commit()
    logger.info("Resubmission %s for assignment %s", submission.id, assignment.id)
    return submission


def grade(
    db: Session,
    submission_id: str,
    points: float,
    feedback: str | None,
    grader: Identity,
) -> Submission:
    if feedback is not None and len(feedback) > MAX_FEEDBACK:
        raise ValidationError(
            "Feedback cannot exceed 2000 characters",
            fields=[{"field": "feedback", "message": "too long"}],
        )

    submission = _load_submission(db, submission_id, for_update=True)
    assignment = _load_assignment(db, submission.assignment_id)
    _require_course_instructor(db, assignment, grader)

    if not math.isfinite(points) or points < 0 or points > assignment.total_points:
        raise ValidationError(
            f"Points must be between 0 and {assignment.total_points:g}",
            code=ErrorCode.POINTS_OUT_OF_RANGE,
            fields=[{"field": "points", "message": "out of range"}],
        )

    submission.grade_points = points
    submission.graded_at = now_utc()
    submission.graded_by = grader.user_id
    if feedback is not None:
        submission.feedback = feedback
    db.commit()
    logger.info("Graded submission %s: %s/%s", submission.id, points, assignment.total_points)
    return submission


def return_submission(db: Session, submission_id: str, grader: Identity) -> Submission:
    submission = _load_submission(db, submission_id, for_update=True)
    assignment = _load_assignment(db, submission.assignment_id)
    _require_course_instructor(db, assignment, grader)

    submission.status = "returned"
    db.commit()
    return submission


def get_submission(db: Session, submission_id: str, caller: Identity) -> Submission:
    submission = _load_submission(db, submission_id)
    if submission.student_id == caller.user_id:
        return submission
    assignment = _load_assignment(db, submission.assignment_id)
    _require_course_instructor(db, assignment, caller)
    return submission


def list_for_assignment(db: Session, assignment_id: str, caller: Identity) -> SubmissionList:
    assignment = _load_assignment(db, assignment_id)
    _require_course_instructor(db, assignment, caller)

    submissions = list(
        db.execute(
            select(Submission)
            .where(Submission.assignment_id == assignment.id)
            .order_by(Submission.submitted_at.asc(), Submission.id.asc())
        )
        .scalars()
        .all()
    )
    status_counts = {status: 0 for status in SUBMISSION_STATUSES}
    for submission in submissions:
        status_counts[submission.status] = status_counts.get(submission.status, 0) + 1
    return SubmissionList(submissions=submissions, status_counts=status_counts)
