from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from qbank.crud.crud_catalog import catalog
from qbank.db.session import get_db
from qbank.schemas.catalog import SourceCreate, SourceRead, SourceUpdate
from qbank.schemas.common import ApiResponse, CreatedId

router = APIRouter()


@router.get("", response_model=ApiResponse[List[SourceRead]])
def read_sources(search: Optional[str] = None, db: Session = Depends(get_db)):
    sources = catalog.get_sources(db, search_term=search)
    return ApiResponse(data=[SourceRead.model_validate(s) for s in sources])


@router.post("", response_model=ApiResponse[CreatedId])
def create_source(source_in: SourceCreate, db: Session = Depends(get_db)):
    db_source = catalog.create_source(db, source_in.source_name)
    return ApiResponse(data=CreatedId(id=db_source.id), message="Source created")


@router.put("/{source_id}", response_model=ApiResponse[SourceRead])
def update_source(source_id: int, source_in: SourceUpdate, db: Session = Depends(get_db)):
    db_source = catalog.update_source(db, source_id, source_in.source_name)
    return ApiResponse(data=SourceRead.model_validate(db_source), message="Source updated")


@router.delete("/{source_id}", response_model=ApiResponse)
def delete_source(source_id: int, db: Session = Depends(get_db)):
    """
    Elimina una fuente. Devuelve 400 si alguna pregunta todavía la usa.
    """
    catalog.delete_source(db, source_id)
    return ApiResponse(message="Source deleted")
