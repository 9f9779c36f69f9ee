from typing import Literal

from pydantic import BaseModel, Field, model_validator

MaterialType = Literal["pdf", "video", "link", "document", "note"]


def check_material_binding(type_: str, url: str, filename: str) -> None:
    """Links need a url; every other type needs a stored file reference."""
    if type_ == "link":
        if not url.strip():
            raise ValueError("url is required for link materials")
    elif not (filename.strip() or url.strip()):
        raise ValueError(f"{type_} materials require an uploaded file (filename or url)")


class MaterialCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    type: MaterialType
    url: str = ""
    filename: str = Field(default="", max_length=255)
    description: str = ""
    is_free: bool = False

    @model_validator(mode="after")
    def _check_binding(self) -> "MaterialCreateRequest":
        if not self.title.strip():
            raise ValueError("title must not be blank")
        check_material_binding(self.type, self.url, self.filename)
        return self


class MaterialPatch(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    type: MaterialType | None = None
    url: str | None = None
    filename: str | None = Field(default=None, max_length=255)
    description: str | None = None
    is_free: bool | None = None

    @model_validator(mode="after")
    def _reject_explicit_null(self) -> "MaterialPatch":
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ModuleCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    duration: str = Field(default="", max_length=64)
    markdown_content: str = ""
    materials: list[MaterialCreateRequest] = Field(default_factory=list)

    @model_validator(mode="after")
    def _title_not_blank(self) -> "ModuleCreateRequest":
        if not self.title.strip():
            raise ValueError("title must not be blank")
        return self


class ModulePatch(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    duration: str | None = Field(default=None, max_length=64)
    markdown_content: str | None = None

    @model_validator(mode="after")
    def _reject_explicit_null(self) -> "ModulePatch":
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        if self.title is not None and not self.title.strip():
            raise ValueError("title must not be blank")
        return self


class MaterialOut(BaseModel):
    id: str
    title: str
    type: str
    url: str | None = None
    filename: str | None = None
    description: str
    is_free: bool
    accessible: bool = True
    upload_date: str


class ModuleOut(BaseModel):
    id: str
    title: str
    description: str
    duration: str
    markdown_content: str | None = None
    materials: list[MaterialOut]


class ModuleDetailResponse(ModuleOut):
    course_id: str
    previous_module_id: str | None = None
    next_module_id: str | None = None
