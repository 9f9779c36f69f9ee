from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub.api.deps import CurrentIdentity
from coursehub.api.serializers import enrollment_response
from coursehub.db.session import get_db
from coursehub.schemas.enrollments import MyEnrollmentsResponse
from coursehub.services import enrollment_service

router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


@router.get("/me", response_model=MyEnrollmentsResponse)
def list_my_enrollments(identity: CurrentIdentity, db: Session = Depends(get_db)) -> MyEnrollmentsResponse:
    rows = enrollment_service.list_my_enrollments(db, identity)
    return MyEnrollmentsResponse(enrollments=[enrollment_response(enrollment, course) for enrollment, course in rows])
