"""
User endpoints (receptionists who document events)
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import ReceptionistBrief, UserIn, UserOut
from ..services import users as service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/receptionists", response_model=List[ReceptionistBrief])
def list_receptionists(db: Session = Depends(get_db)):
    return service.list_receptionists(db)


@router.post("", response_model=UserOut, status_code=201)
def create_user(user: UserIn, db: Session = Depends(get_db)):
    return service.create_user(db, user)
