from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from coursehub.api.deps import InstructorIdentity, OptionalIdentity
from coursehub.api.serializers import material_response, module_fields, module_response
from coursehub.db.session import get_db
from coursehub.schemas.content import (
    MaterialCreateRequest,
    MaterialOut,
    MaterialPatch,
    ModuleCreateRequest,
    ModuleDetailResponse,
    ModuleOut,
    ModulePatch,
)
from coursehub.services import course_service

router = APIRouter(prefix="/v1/courses/{course_id}", tags=["course-content"])


# Modules


@router.post("/modules", response_model=ModuleOut, status_code=201)
def add_module(
    course_id: str, payload: ModuleCreateRequest, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> ModuleOut:
    module = course_service.add_module(db, course_id, payload, identity)
    return module_response(module)


@router.get("/modules/{module_id}", response_model=ModuleDetailResponse)
def get_module(
    course_id: str, module_id: str, identity: OptionalIdentity, db: Session = Depends(get_db)
) -> ModuleDetailResponse:
    view = course_service.get_module(db, course_id, module_id, identity)
    return ModuleDetailResponse(
        **module_fields(view.module, view.content),
        course_id=str(view.content.course.id),
        previous_module_id=str(view.previous_module_id) if view.previous_module_id else None,
        next_module_id=str(view.next_module_id) if view.next_module_id else None,
    )


@router.patch("/modules/{module_id}", response_model=ModuleOut)
def update_module(
    course_id: str,
    module_id: str,
    payload: ModulePatch,
    identity: InstructorIdentity,
    db: Session = Depends(get_db),
) -> ModuleOut:
    module = course_service.update_module(db, course_id, module_id, payload, identity)
    return module_response(module)


@router.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_module(
    course_id: str, module_id: str, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> Response:
    course_service.delete_module(db, course_id, module_id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Course-level materials


@router.post("/materials", response_model=MaterialOut, status_code=201)
def add_course_material(
    course_id: str, payload: MaterialCreateRequest, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> MaterialOut:
    return material_response(course_service.add_material(db, course_id, payload, identity))


@router.patch("/materials/{material_id}", response_model=MaterialOut)
def update_course_material(
    course_id: str,
    material_id: str,
    payload: MaterialPatch,
    identity: InstructorIdentity,
    db: Session = Depends(get_db),
) -> MaterialOut:
    return material_response(course_service.update_material(db, course_id, material_id, payload, identity))


@router.delete("/materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course_material(
    course_id: str, material_id: str, identity: InstructorIdentity, db: Session = Depends(get_db)
) -> Response:
    course_service.delete_material(db, course_id, material_id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Module materials


@router.post("/modules/{module_id}/materials", response_model=MaterialOut, status_code=201)
def add_module_material(
    course_id: str,
    module_id: str,
    payload: MaterialCreateRequest,
    identity: InstructorIdentity,
    db: Session = Depends(get_db),
) -> MaterialOut:
    material = course_service.add_material(db, course_id, payload, identity, module_id=module_id)
    return material_response(material)


@router.patch("/modules/{module_id}/materials/{material_id}", response_model=MaterialOut)
def update_module_material(
    course_id: str,
    module_id: str,
    material_id: str,
    payload: MaterialPatch,
    identity: InstructorIdentity,
    db: Session = Depends(get_db),
) -> MaterialOut:
    material = course_service.update_material(db, course_id, material_id, payload, identity, module_id=module_id)
    return material_response(material)


@router.delete("/modules/{module_id}/materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_module_material(
    course_id: str,
    module_id: str,
    material_id: str,
    identity: InstructorIdentity,
    db: Session = Depends(get_db),
) -> Response:
    course_service.delete_material(db, course_id, material_id, identity, module_id=module_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
