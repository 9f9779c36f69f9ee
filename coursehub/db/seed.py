from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from coursehub.core.security import now_utc
from coursehub.models import Assignment, Course, CourseModule, Material, User


def seed_if_needed(db: Session) -> None:
    existing_course = db.execute(select(Course).where(Course.course_code == "CS101")).scalars().first()
    if existing_course:
        return

    instructor = db.execute(select(User).where(User.email == "instructor@example.com")).scalars().first()
    if not instructor:
        instructor = User(
            email="instructor@example.com",
            first_name="Ada",
            last_name="Lovelace",
            role="instructor",
            status="active",
        )
        db.add(instructor)
        db.flush()

    course = Course(
        instructor_id=instructor.id,
        course_code="CS101",
        title="Introduction to Programming",
        description="Variables, control flow and functions, taught in small weekly modules.",
        category="Computer Science",
        level="Beginner",
        credits=3,
        max_students=40,
        is_active=True,
    )
    db.add(course)

    intro = CourseModule(title="Getting started", duration="1 week", markdown_content="# Welcome\n", position=1)
    intro.materials.append(
        Material(title="Syllabus", type="link", url="https://example.com/cs101/syllabus", is_free=True, position=1)
    )
    loops = CourseModule(title="Loops", duration="1 week", markdown_content="# Loops\n", position=2)
    course.modules.extend([intro, loops])
    db.flush()

    db.add(
        Assignment(
            course_id=course.id,
            title="Hello, world",
            description="Print a greeting.",
            due_date=now_utc() + timedelta(days=14),
            total_points=10,
        )
    )
    db.commit()
