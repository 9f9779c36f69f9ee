from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from coursehub.core.errors import Conflict, Forbidden, NotFound, ValidationError
from coursehub.models import CourseModule, Material
from coursehub.schemas.content import MaterialCreateRequest, ModuleCreateRequest
from coursehub.schemas.courses import CoursePatch
from coursehub.services import course_service


def test_create_course_uppercases_code_and_sets_owner(make_user, make_course):
    owner = make_user("instructor")
    course = make_course(owner, course_code="  cs101 ")
    assert course.course_code == "CS101"
    assert course.instructor_id == owner.user_id
    assert course.is_active is True


def test_course_code_is_unique_case_insensitively(make_user, make_course):
    owner = make_user("instructor")
    other = make_user("instructor")
    make_course(owner, course_code="CS101")
    with pytest.raises(Conflict) as excinfo:
        make_course(other, course_code="cs101")
    assert excinfo.value.code == "COURSE_CODE_EXISTS"


def test_students_cannot_create_courses(make_user, make_course):
    with pytest.raises(Forbidden):
        make_course(make_user("student"))


def test_update_applies_only_present_fields(db, make_user, make_course):
    owner = make_user("instructor")
    course = make_course(owner, title="Original", credits=4, fees=50)

    updated = course_service.update_course(db, str(course.id), CoursePatch(title="Renamed"), owner)
    assert updated.title == "Renamed"
    assert updated.credits == 4
    assert updated.fees == 50
    assert updated.is_active is True


def test_update_applies_falsy_values_for_is_active_and_fees(db, make_user, make_course):
    owner = make_user("instructor")
    course = make_course(owner, fees=120)

    updated = course_service.update_course(db, str(course.id), CoursePatch(is_active=False, fees=0), owner)
    assert updated.is_active is False
    assert updated.fees == 0


def test_update_rejects_explicit_null_for_required_field():
    with pytest.raises(PydanticValidationError):
        CoursePatch.model_validate({"title": None})


def test_update_rejects_blank_title_before_touching_course(db, make_user, make_course):
    owner = make_user("instructor")
    course = make_course(owner, title="Keep me")
    with pytest.raises(ValidationError):
        course_service.update_course(db, str(course.id), CoursePatch(title="   "), owner)
    db.refresh(course)
    assert course.title == "Keep me"


def test_non_owner_gets_forbidden_but_missing_course_gets_not_found(db, make_user, make_course):
    owner = make_user("instructor")
    intruder = make_user("instructor")
    course = make_course(owner)

    with pytest.raises(Forbidden):
        course_service.update_course(db, str(course.id), CoursePatch(title="Mine now"), intruder)
    with pytest.raises(Forbidden):
        course_service.delete_course(db, str(course.id), intruder)
    with pytest.raises(Forbidden):
        course_service.add_module(db, str(course.id), ModuleCreateRequest(title="Sneaky"), intruder)

    with pytest.raises(NotFound):
        course_service.update_course(db, str(uuid4()), CoursePatch(title="x"), intruder)
    with pytest.raises(NotFound):
        course_service.delete_course(db, str(uuid4()), intruder)


@pytest.mark.parametrize("course_id", ["not-a-uuid", "", "123", str(uuid4())])
def test_malformed_and_missing_ids_share_not_found(db, course_id):
    with pytest.raises(NotFound) as excinfo:
        course_service.get_course(db, course_id, None)
    assert excinfo.value.code == "COURSE_NOT_FOUND"


def test_delete_course_cascades_modules_and_materials(db, make_user, make_course, enroll_student):
    owner = make_user("instructor")
    course = make_course(owner)
    enroll_student(make_user("student"), course.id)
    link = {"title": "Docs", "type": "link", "url": "https://example.com"}
    module = course_service.add_module(
        db, str(course.id), ModuleCreateRequest(title="M1", materials=[MaterialCreateRequest(**link)]), owner
    )
    course_service.add_material(db, str(course.id), MaterialCreateRequest(**link), owner)

    course_service.delete_course(db, str(course.id), owner)

    assert db.get(CourseModule, module.id) is None
    assert db.query(Material).count() == 0
    with pytest.raises(NotFound):
        course_service.get_course(db, str(course.id), None)


def test_get_course_populates_instructor(db, make_user, make_course):
    owner = make_user("instructor", first_name="Grace", last_name="Hopper")
    course = make_course(owner)
    view = course_service.get_course(db, str(course.id), None)
    assert view.course.instructor.first_name == "Grace"
    assert view.is_owner is False
    assert course_service.get_course(db, str(course.id), owner).is_owner is True


def test_instructor_course_listing_includes_inactive_and_is_self_only(db, make_user, make_course):
    owner = make_user("instructor")
    other = make_user("instructor")
    make_course(owner, course_code="ACT1")
    make_course(owner, course_code="OFF1", is_active=False)
    make_course(other, course_code="OTH1")

    courses = course_service.list_instructor_courses(db, str(owner.user_id), owner)
    assert {course.course_code for course in courses} == {"ACT1", "OFF1"}
    with pytest.raises(Forbidden):
        course_service.list_instructor_courses(db, str(owner.user_id), other)


@pytest.mark.integration
def test_visibility_scenario_end_to_end(client, make_user, auth_headers):
    instructor_a = make_user("instructor")
    instructor_b = make_user("instructor")

    created = client.post(
        "/v1/courses",
        headers=auth_headers(instructor_a),
        json={
            "title": "Computer Science 101",
            "description": "Foundations",
            "course_code": "cs101",
            "category": "Computer Science",
            "level": "Beginner",
            "credits": 3,
            "max_students": 25,
            "is_active": True,
        },
    )
    assert created.status_code == 201, created.text
    course_id = created.json()["id"]
    assert created.json()["course_code"] == "CS101"

    def catalog_codes(headers=None):
        resp = client.get("/v1/courses", headers=headers or {})
        assert resp.status_code == 200, resp.text
        return {course["course_code"] for course in resp.json()["courses"]}

    assert "CS101" in catalog_codes()

    patched = client.patch(f"/v1/courses/{course_id}", headers=auth_headers(instructor_a), json={"is_active": False})
    assert patched.status_code == 200, patched.text
    assert patched.json()["is_active"] is False

    assert "CS101" not in catalog_codes()
    assert "CS101" in catalog_codes(auth_headers(instructor_a))
    assert "CS101" not in catalog_codes(auth_headers(instructor_b))


@pytest.mark.integration
def test_course_endpoints_map_errors(client, make_user, auth_headers, make_course):
    owner = make_user("instructor")
    intruder = make_user("instructor")
    student = make_user("student")
    course = make_course(owner, course_code="ERR1")

    duplicate = client.post(
        "/v1/courses",
        headers=auth_headers(intruder),
        json={
            "title": "Copy",
            "description": "Copy",
            "course_code": "err1",
            "category": "X",
            "level": "Beginner",
            "credits": 1,
            "max_students": 1,
        },
    )
    assert duplicate.status_code == 409

    assert client.patch(f"/v1/courses/{course.id}", json={"title": "x"}).status_code == 401
    assert client.patch(f"/v1/courses/{course.id}", headers=auth_headers(student), json={"title": "x"}).status_code == 403
    assert client.patch(f"/v1/courses/{course.id}", headers=auth_headers(intruder), json={"title": "x"}).status_code == 403
    assert client.delete("/v1/courses/nope", headers=auth_headers(intruder)).status_code == 404
    assert client.get("/v1/courses/nope").status_code == 404

    bad = client.patch(f"/v1/courses/{course.id}", headers=auth_headers(owner), json={"credits": 11})
    assert bad.status_code == 400
    assert bad.json()["error"]["fields"]

    assert client.delete(f"/v1/courses/{course.id}", headers=auth_headers(owner)).status_code == 204
    assert client.get(f"/v1/courses/{course.id}").status_code == 404
