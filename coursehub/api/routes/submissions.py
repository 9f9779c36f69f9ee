from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub.api.deps import CurrentIdentity, InstructorIdentity
from coursehub.api.serializers import submission_response
from coursehub.db.session import get_db
from coursehub.schemas.submissions import GradeRequest, SubmissionListResponse, SubmissionOut, SubmitRequest
from coursehub.services import submission_service

router = APIRouter(prefix="/v1", tags=["submissions"])


@router.put("/assignments/{assignment_id}/submission", response_model=SubmissionOut)
def submit(
    assignment_id: str, payload: SubmitRequest, identity: CurrentIdentity, db: Session = Depends(get_db)
) -> SubmissionOut:
    submission = submission_service.submit(db, assignment_id, identity, payload)
    return submission_response(submission)


@router.get("/assignments/{assignment_id}/submissions", response_model=SubmissionListResponse)
def list_submissions(
    assignment_id: str, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> SubmissionListResponse:
    result = submission_service.list_for_assignment(db, assignment_id, identity)
    return SubmissionListResponse(
        submissions=[submission_response(item) for item in result.submissions],
        count=result.count,
        status_counts=result.status_counts,
    )


@router.get("/submissions/{submission_id}", response_model=SubmissionOut)
def get_submission(submission_id: str, identity: CurrentIdentity, db: Session = Depends(get_db)) -> SubmissionOut:
    return submission_response(submission_service.get_submission(db, submission_id, identity))


@router.post("/submissions/{submission_id}/grade", response_model=SubmissionOut)
def grade_submission(
    submission_id: str, payload: GradeRequest, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> SubmissionOut:
    submission = submission_service.grade(db, submission_id, payload.points, payload.feedback, identity)
    return submission_response(submission)


@router.post("/submissions/{submission_id}/return", response_model=SubmissionOut)
def return_submission(
    submission_id: str, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> SubmissionOut:
    return submission_response(submission_service.return_submission(db, submission_id, identity))
