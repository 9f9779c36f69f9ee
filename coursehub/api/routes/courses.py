from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from coursehub.api.deps import CurrentIdentity, InstructorIdentity, OptionalIdentity
from coursehub.api.serializers import course_response, enrollment_response, material_response, module_response
from coursehub.db.session import get_db
from coursehub.schemas.catalog import CatalogQuery
from coursehub.schemas.courses import (
    CatalogResponse,
    CourseCreateRequest,
    CourseDetailResponse,
    CourseOut,
    CoursePatch,
    InstructorCoursesResponse,
    Pagination,
)
from coursehub.schemas.enrollments import EnrollmentOut
from coursehub.services import catalog_service, course_service, enrollment_service

router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.get("", response_model=CatalogResponse)
def list_courses(
    query: Annotated[CatalogQuery, Query()],
    identity: OptionalIdentity,
    db: Session = Depends(get_db),
) -> CatalogResponse:
    page = catalog_service.list_catalog(db, query, identity)
    return CatalogResponse(
        courses=[course_response(course) for course in page.courses],
        pagination=Pagination(
            current=page.page,
            pages=page.pages,
            total=page.total,
            has_next=page.has_next,
            has_prev=page.has_prev,
        ),
    )


@router.post("", response_model=CourseOut, status_code=201)
def create_course(payload: CourseCreateRequest, identity: InstructorIdentity, db: Session = Depends(get_db)) -> CourseOut:
    course = course_service.create_course(db, payload, identity)
    return course_response(course)


@router.get("/instructor/{instructor_id}", response_model=InstructorCoursesResponse)
def list_instructor_courses(
    instructor_id: str, identity: CurrentIdentity, db: Session = Depends(get_db)
) -> InstructorCoursesResponse:
    courses = course_service.list_instructor_courses(db, instructor_id, identity)
    return InstructorCoursesResponse(courses=[course_response(course) for course in courses], total=len(courses))


@router.get("/{course_id}", response_model=CourseDetailResponse)
def get_course(course_id: str, identity: OptionalIdentity, db: Session = Depends(get_db)) -> CourseDetailResponse:
    view = course_service.get_course(db, course_id, identity)
    course = view.course
    return CourseDetailResponse(
        **course_response(course).model_dump(),
        modules=[module_response(module, view) for module in course.modules],
        materials=[material_response(item, accessible=view.can_access(item)) for item in course.materials],
    )


@router.patch("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: str, payload: CoursePatch, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> CourseOut:
    course = course_service.update_course(db, course_id, payload, identity)
    return course_response(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: str, identity: InstructorIdentity, db: Session = Depends(get_db)) -> Response:
    course_service.delete_course(db, course_id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{course_id}/enroll", response_model=EnrollmentOut, status_code=201)
def enroll(course_id: str, identity: CurrentIdentity, db: Session = Depends(get_db)) -> EnrollmentOut:
    enrollment, course = enrollment_service.enroll(db, course_id, identity)
    return enrollment_response(enrollment, course)
