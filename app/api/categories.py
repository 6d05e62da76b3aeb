"""
Category API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
import logging

from app.database import get_db
from app.schemas.category import CategoryCreate, CategoryResponse
from app.services.category_service import category_service

router = APIRouter(prefix="/api/categories", tags=["categories"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    """List quiz categories sorted by title"""
    return category_service.list_categories(db)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(request: CategoryCreate, db: Session = Depends(get_db)):
    """
    Add a new quiz category

    - 400 when the title is blank
    - 409 when a category with the same title exists
    """
    category = category_service.create(db, request.title)
    return CategoryResponse(id=category.id, title=category.title)
