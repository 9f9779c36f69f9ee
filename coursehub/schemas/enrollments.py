from pydantic import BaseModel


class EnrollmentOut(BaseModel):
    id: str
    course_id: str
    course_code: str
    course_title: str
    credits: int
    status: str
    enrolled_at: str


class MyEnrollmentsResponse(BaseModel):
    enrollments: list[EnrollmentOut]
