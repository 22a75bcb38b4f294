from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from qbank.crud.crud_catalog import catalog
from qbank.db.session import get_db
from qbank.schemas.catalog import TagCreate, TagRead, TagUpdate
from qbank.schemas.common import ApiResponse, CreatedId

router = APIRouter()


@router.get("", response_model=ApiResponse[List[TagRead]])
def read_tags(search: Optional[str] = None, db: Session = Depends(get_db)):
    tags = catalog.get_tags(db, search_term=search)
    return ApiResponse(data=[TagRead.model_validate(t) for t in tags])


@router.post("", response_model=ApiResponse[CreatedId])
def create_tag(tag_in: TagCreate, db: Session = Depends(get_db)):
    db_tag = catalog.create_tag(db, tag_in.tag_name)
    return ApiResponse(data=CreatedId(id=db_tag.id), message="Tag created")


@router.put("/{tag_id}", response_model=ApiResponse[TagRead])
def update_tag(tag_id: int, tag_in: TagUpdate, db: Session = Depends(get_db)):
    db_tag = catalog.update_tag(db, tag_id, tag_in.tag_name)
    return ApiResponse(data=TagRead.model_validate(db_tag), message="Tag updated")


@router.delete("/{tag_id}", response_model=ApiResponse)
def delete_tag(tag_id: int, db: Session = Depends(get_db)):
    """
    Elimina una etiqueta. Devuelve 400 si alguna pregunta todavía la usa.
    """
    catalog.delete_tag(db, tag_id)
    return ApiResponse(message="Tag deleted")
