"""
Pydantic schemas for quiz session (lifecycle) endpoints
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from app.schemas.category import CategoryWithQuizzes
from app.schemas.quiz import Quiz
from app.services.grading_service import QuizScore
from app.services.session_service import QuizState, PublishStatus


class AnswerSelection(BaseModel):
    """Select an answer for one question"""
    question_id: str = Field(..., alias="questionId")
    answer_id: str = Field(..., alias="answerId")

    class Config:
        populate_by_name = True


class SubmitRequest(BaseModel):
    """Answers to merge in before grading ({question_id: answer_id})"""
    answers: Dict[str, str] = {}


class SessionPublishRequest(BaseModel):
    """Publish the graded quiz; category defaults to the generation category"""
    category_name: Optional[str] = Field(None, max_length=256, alias="categoryName")

    class Config:
        populate_by_name = True


class SessionView(BaseModel):
    """Snapshot of a quiz session"""
    id: str
    state: QuizState
    loading: Optional[str] = None
    error: Optional[str] = None
    quiz: Optional[Quiz] = None
    user_answers: Dict[str, str] = {}
    result: Optional[QuizScore] = None
    category_name: Optional[str] = None
    publish_status: PublishStatus = PublishStatus.IDLE
    published_quiz_id: Optional[int] = None
    published_content: List[CategoryWithQuizzes] = []
