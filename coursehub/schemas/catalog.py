from pydantic import BaseModel, Field, field_validator

from coursehub.schemas.courses import CourseLevel


class CatalogQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    category: str | None = None
    level: CourseLevel | None = None
    search: str | None = None

    @field_validator("category", "search")
    @classmethod
    def _blank_is_absent(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None
