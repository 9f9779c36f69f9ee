from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from coursehub.schemas.content import MaterialOut, ModuleOut

CourseLevel = Literal["Beginner", "Intermediate", "Advanced"]


class CourseCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    course_code: str = Field(min_length=1, max_length=64)
    category: str = Field(min_length=1, max_length=120)
    level: CourseLevel
    credits: int = Field(ge=1, le=10)
    max_students: int = Field(ge=1)
    fees: float = Field(default=0, ge=0)
    prerequisites: list[str] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("title", "description", "course_code", "category")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CoursePatch(BaseModel):
    """Partial course update. Only fields present in the request are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1, max_length=120)
    level: CourseLevel | None = None
    credits: int | None = Field(default=None, ge=1, le=10)
    max_students: int | None = Field(default=None, ge=1)
    fees: float | None = Field(default=None, ge=0)
    prerequisites: list[str] | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _reject_explicit_null(self) -> "CoursePatch":
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class InstructorOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str


class CourseOut(BaseModel):
    id: str
    course_code: str
    title: str
    description: str
    category: str
    level: str
    credits: int
    max_students: int
    fees: float
    prerequisites: list[str]
    is_active: bool
    instructor: InstructorOut
    created_at: str


class CourseDetailResponse(CourseOut):
    modules: list[ModuleOut]
    materials: list[MaterialOut]


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current: int
    pages: int
    total: int
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class CatalogResponse(BaseModel):
    courses: list[CourseOut]
    pagination: Pagination


class InstructorCoursesResponse(BaseModel):
    courses: list[CourseOut]
    total: int
