"""
Company endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import CompanyDetail, CompanyIn, CompanyOut, CompanyStats, CompanyUpdate
from ..services import companies as service

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("", response_model=List[CompanyOut])
def list_companies(db: Session = Depends(get_db)):
    """Active companies, sorted by name (dropdowns)"""
    return service.list_active_companies(db)


@router.get("/stats", response_model=CompanyStats)
def company_stats(db: Session = Depends(get_db)):
    return service.company_stats(db)


@router.get("/search", response_model=List[CompanyOut])
def search_companies(
    q: str = Query(..., min_length=1, description="Name or RUT fragment"),
    db: Session = Depends(get_db),
):
    """
    **Example:** `/api/companies/search?q=cementos`
    """
    return service.search_companies(db, q)


@router.post("", response_model=CompanyOut, status_code=201)
def create_company(company: CompanyIn, db: Session = Depends(get_db)):
    return service.create_company(db, company)


@router.get("/{company_id}", response_model=CompanyDetail)
def get_company(company_id: str, db: Session = Depends(get_db)):
    return service.get_company_detail(db, company_id)


@router.put("/{company_id}", response_model=CompanyOut)
def update_company(company_id: str, changes: CompanyUpdate, db: Session = Depends(get_db)):
    return service.update_company(db, company_id, changes)


@router.delete("/{company_id}", response_model=CompanyOut)
def deactivate_company(company_id: str, db: Session = Depends(get_db)):
    """Soft delete: the company is only marked inactive"""
    return service.deactivate_company(db, company_id)
