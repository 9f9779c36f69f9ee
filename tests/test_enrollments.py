from types import SimpleNamespace
from uuid import uuid4

import pytest

from coursehub.core.errors import Conflict, Forbidden, NotFound
from coursehub.core.security import Identity
from coursehub.models import Enrollment
from coursehub.services import access, enrollment_service

INSTRUCTOR_ID = uuid4()
OWNER = Identity(user_id=INSTRUCTOR_ID, role="instructor")
STUDENT = Identity(user_id=uuid4(), role="student")
FREE = SimpleNamespace(is_free=True)
PAID = SimpleNamespace(is_free=False)


@pytest.mark.parametrize(
    "material,identity,status,expected",
    [
        (FREE, None, None, True),
        (PAID, None, None, False),
        (PAID, STUDENT, None, False),
        (PAID, STUDENT, "enrolled", True),
        (PAID, STUDENT, "completed", True),
        (PAID, STUDENT, "dropped", False),
        (PAID, STUDENT, "suspended", False),
        (FREE, STUDENT, "dropped", True),
        (PAID, OWNER, None, True),
        (PAID, Identity(user_id=uuid4(), role="instructor"), None, False),
    ],
)
def test_can_access(material, identity, status, expected):
    assert access.can_access(material, identity, status, INSTRUCTOR_ID) is expected


def test_require_active_enrollment(db, make_user, make_course, enroll_student):
    course = make_course(make_user("instructor"))
    student = make_user("student")

    with pytest.raises(Forbidden) as excinfo:
        access.require_active_enrollment(db, course.id, student.user_id)
    assert excinfo.value.code == "NOT_ENROLLED"

    enroll_student(student, course.id, status="completed")
    access.require_active_enrollment(db, course.id, student.user_id)


def test_enroll_creates_record(db, make_user, make_course):
    course = make_course(make_user("instructor"))
    student = make_user("student")

    enrollment, enrolled_course = enrollment_service.enroll(db, str(course.id), student)
    assert enrollment.status == "enrolled"
    assert enrolled_course.id == course.id
    assert access.enrollment_status(db, course.id, student.user_id) == "enrolled"


def test_enroll_twice_conflicts(db, make_user, make_course):
    course = make_course(make_user("instructor"))
    student = make_user("student")
    enrollment_service.enroll(db, str(course.id), student)

    with pytest.raises(Conflict) as excinfo:
        enrollment_service.enroll(db, str(course.id), student)
    assert excinfo.value.code == "ALREADY_ENROLLED"


def test_dropped_student_reenrolls_in_place(db, make_user, make_course, enroll_student):
    course = make_course(make_user("instructor"))
    student = make_user("student")
    original = enroll_student(student, course.id, status="dropped")

    enrollment, _ = enrollment_service.enroll(db, str(course.id), student)
    assert enrollment.id == original.id
    assert enrollment.status == "enrolled"
    assert db.query(Enrollment).filter_by(student_id=student.user_id).count() == 1


def test_full_course_rejects_new_students(db, make_user, make_course, enroll_student):
    course = make_course(make_user("instructor"), max_students=1)
    enroll_student(make_user("student"), course.id)
    # Students who left do not hold a seat.
    enroll_student(make_user("student"), course.id, status="dropped")

    with pytest.raises(Conflict) as excinfo:
        enrollment_service.enroll(db, str(course.id), make_user("student"))
    assert excinfo.value.code == "COURSE_FULL"


def test_inactive_or_missing_course_cannot_be_joined(db, make_user, make_course):
    course = make_course(make_user("instructor"), is_active=False)
    student = make_user("student")
    with pytest.raises(NotFound):
        enrollment_service.enroll(db, str(course.id), student)
    with pytest.raises(NotFound):
        enrollment_service.enroll(db, "bogus", student)


def test_instructors_cannot_enroll(db, make_user, make_course):
    owner = make_user("instructor")
    course = make_course(owner)
    with pytest.raises(Forbidden) as excinfo:
        enrollment_service.enroll(db, str(course.id), owner)
    assert excinfo.value.code == "STUDENT_ONLY"


def test_list_my_enrollments(db, make_user, make_course, enroll_student):
    owner = make_user("instructor")
    student = make_user("student")
    first = make_course(owner, course_code="ENR1")
    second = make_course(owner, course_code="ENR2")
    make_course(owner, course_code="ENR3")
    enroll_student(student, first.id)
    enroll_student(student, second.id, status="completed")

    rows = enrollment_service.list_my_enrollments(db, student)
    assert {course.course_code: enrollment.status for enrollment, course in rows} == {
        "ENR1": "enrolled",
        "ENR2": "completed",
    }


@pytest.mark.integration
def test_enrollment_endpoints(client, make_user, make_course, auth_headers):
    course = make_course(make_user("instructor"), course_code="API1", credits=4)
    student = make_user("student")
    headers = auth_headers(student)

    assert client.post(f"/v1/courses/{course.id}/enroll").status_code == 401

    resp = client.post(f"/v1/courses/{course.id}/enroll", headers=headers)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert (body["course_code"], body["credits"], body["status"]) == ("API1", 4, "enrolled")

    again = client.post(f"/v1/courses/{course.id}/enroll", headers=headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "ALREADY_ENROLLED"

    mine = client.get("/v1/enrollments/me", headers=headers)
    assert mine.status_code == 200
    assert [item["course_id"] for item in mine.json()["enrollments"]] == [str(course.id)]
