"""
Quiz generation, publication and retrieval API endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.api.deps import get_quiz_generator
from app.database import get_db
from app.schemas.quiz import (
    Quiz,
    QuizGenerateRequest,
    QuizPublishRequest,
    QuizPublishResponse,
)
from app.services.gemini_service import GeminiService, build_topic_prompt
from app.services.publication_service import publication_service
from app.services.query_service import query_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.post("/generate", response_model=Quiz)
def generate_quiz(
    request: QuizGenerateRequest,
    generator: GeminiService = Depends(get_quiz_generator),
):
    """
    Generate a quiz for a category/title pair using Gemini AI

    Nothing is stored; the quiz is returned for preview. Fails with 502 when
    the AI call fails or returns an unusable payload.
    """
    logger.info(f"Generating quiz '{request.title}' in category '{request.category}'")
    return generator.generate(build_topic_prompt(request.category, request.title))


@router.post("", response_model=QuizPublishResponse, status_code=201)
def publish_quiz(request: QuizPublishRequest, db: Session = Depends(get_db)):
    """
    Publish a quiz with its questions and answers

    - Creates the category if it does not exist yet
    - All rows are written in a single transaction
    """
    published = publication_service.publish(db, request, request.category_name)

    return QuizPublishResponse(
        message="Quiz published successfully!",
        quiz_id=published.quiz_id,
        create_date=published.create_date,
    )


@router.get("/{quiz_id}", response_model=Quiz)
def get_quiz(quiz_id: int, db: Session = Depends(get_db)):
    """Fetch a published quiz with its questions and answers"""
    return query_service.get_quiz_by_id(db, quiz_id)
