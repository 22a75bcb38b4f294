from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from qbank.crud import crud_material
from qbank.db.session import get_db
from qbank.schemas.common import ApiResponse, CreatedId, Pagination
from qbank.schemas.material import MaterialCreate, MaterialDetail, MaterialListData, MaterialUpdate
from qbank.utils.query_parser import total_pages

router = APIRouter()


@router.get("", response_model=ApiResponse[MaterialListData])
def read_materials(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, alias="pageSize"),
    question_id: Optional[int] = Query(None, description="Devuelve los materiales que contienen esta pregunta"),
    db: Session = Depends(get_db),
):
    """
    Lista paginada de materiales con sus preguntas.
    Con `question_id` no hay paginación y `pagination` es null.
    """
    materials, total = crud_material.list_materials(db, page=page, page_size=page_size, question_id=question_id)

    pagination = None
    if total is not None:
        pagination = Pagination(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size),
        )
    data = MaterialListData(
        materials=[MaterialDetail.model_validate(m) for m in materials],
        pagination=pagination,
    )
    return ApiResponse(data=data)


@router.post("", response_model=ApiResponse[CreatedId])
def create_material(material_in: MaterialCreate, db: Session = Depends(get_db)):
    """
    Crea un material y sus preguntas (sub_no 1..N en el orden recibido).
    """
    db_material = crud_material.create_material(db, material_in)
    return ApiResponse(data=CreatedId(id=db_material.id), message="Material created")


@router.get("/{material_id}", response_model=ApiResponse[MaterialDetail])
def read_material(material_id: int, db: Session = Depends(get_db)):
    db_material = crud_material.get_material(db, material_id)
    return ApiResponse(data=MaterialDetail.model_validate(db_material))


@router.put("/{material_id}", response_model=ApiResponse[MaterialDetail])
def update_material(material_id: int, material_in: MaterialUpdate, db: Session = Depends(get_db)):
    crud_material.update_material(db, material_id, material_in)
    db_material = crud_material.get_material(db, material_id)
    return ApiResponse(data=MaterialDetail.model_validate(db_material), message="Material updated")


@router.delete("/{material_id}", response_model=ApiResponse)
def delete_material(material_id: int, db: Session = Depends(get_db)):
    """
    Elimina el material junto con todas sus preguntas.
    """
    crud_material.delete_material(db, material_id)
    return ApiResponse(message="Material deleted")
