from pydantic import BaseModel, Field


class AttachmentRef(BaseModel):
    original_name: str = ""
    filename: str = Field(min_length=1, max_length=255)
    path: str = ""
    mimetype: str = ""
    size: int = Field(default=0, ge=0)


class SubmitRequest(BaseModel):
    submission_text: str = Field(default="", max_length=5000)
    attachments: list[AttachmentRef] = Field(default_factory=list)


class GradeRequest(BaseModel):
    points: float
    feedback: str | None = Field(default=None, max_length=2000)


class GradeOut(BaseModel):
    points: float
    graded_at: str
    graded_by: str


class SubmissionOut(BaseModel):
    id: str
    assignment_id: str
    student_id: str
    submission_text: str
    attachments: list[AttachmentRef]
    submitted_at: str
    is_late: bool
    status: str
    grade: GradeOut | None = None
    feedback: str


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionOut]
    count: int
    status_counts: dict[str, int]
