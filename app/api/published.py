"""
Published content API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.schemas.category import CategoryWithQuizzes
from app.services.query_service import query_service

router = APIRouter(prefix="/api", tags=["published"])


@router.get("/published-content", response_model=List[CategoryWithQuizzes])
def get_published_content(db: Session = Depends(get_db)):
    """Categories with their published quizzes, newest quiz first"""
    return query_service.list_published(db)
