from coursehub.models import Course, CourseModule, Enrollment, Material, Submission
from coursehub.schemas.content import MaterialOut, ModuleOut
from coursehub.schemas.courses import CourseOut, InstructorOut
from coursehub.schemas.enrollments import EnrollmentOut
from coursehub.schemas.submissions import AttachmentRef, GradeOut, SubmissionOut
from coursehub.services.course_service import ContentView


def course_response(course: Course) -> CourseOut:
    instructor = course.instructor
    return CourseOut(
        id=str(course.id),
        course_code=course.course_code,
        title=course.title,
        description=course.description,
        category=course.category,
        level=course.level,
        credits=course.credits,
        max_students=course.max_students,
        fees=course.fees,
        prerequisites=list(course.prerequisites or []),
        is_active=course.is_active,
        instructor=InstructorOut(
            id=str(instructor.id),
            first_name=instructor.first_name,
            last_name=instructor.last_name,
            email=instructor.email,
        ),
        created_at=course.created_at.isoformat(),
    )


def material_response(material: Material, *, accessible: bool = True) -> MaterialOut:
    return MaterialOut(
        id=str(material.id),
        title=material.title,
        type=material.type,
        url=material.url if accessible else None,
        filename=material.filename if accessible else None,
        description=material.description,
        is_free=material.is_free,
        accessible=accessible,
        upload_date=material.upload_date.isoformat(),
    )


def module_response(module: CourseModule, view: ContentView | None = None) -> ModuleOut:
    return ModuleOut(**module_fields(module, view))


def module_fields(module: CourseModule, view: ContentView | None = None) -> dict:
    return {
        "id": str(module.id),
        "title": module.title,
        "description": module.description,
        "duration": module.duration,
        "markdown_content": module.markdown_content,
        "materials": [
            material_response(item, accessible=view.can_access(item) if view else True)
            for item in module.materials
        ],
    }


def submission_response(submission: Submission) -> SubmissionOut:
    grade = None
    if submission.grade_points is not None and submission.graded_at is not None:
        grade = GradeOut(
            points=submission.grade_points,
            graded_at=submission.graded_at.isoformat(),
            graded_by=str(submission.graded_by),
        )
    return SubmissionOut(
        id=str(submission.id),
        assignment_id=str(submission.assignment_id),
        student_id=str(submission.student_id),
        submission_text=submission.submission_text,
        attachments=[AttachmentRef(**item) for item in submission.attachments or []],
        submitted_at=submission.submitted_at.isoformat(),
        is_late=submission.is_late,
        status=submission.status,
        grade=grade,
        feedback=submission.feedback,
    )


def enrollment_response(enrollment: Enrollment, course: Course) -> EnrollmentOut:
    return EnrollmentOut(
        id=str(enrollment.id),
        course_id=str(course.id),
        course_code=course.course_code,
        course_title=course.title,
        credits=course.credits,
        status=enrollment.status,
        enrolled_at=enrollment.enrolled_at.isoformat(),
    )
