"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class AnswerContent(BaseModel):
    """Answer option without an identifier (AI payload / publish input)"""
    answer: str
    correct: bool


class QuestionContent(BaseModel):
    """Question without identifiers (AI payload / publish input)"""
    question: str
    explanation: str = ""
    answers: List[AnswerContent] = Field(..., min_length=1)


class QuizContent(BaseModel):
    """Quiz shape as returned by the AI service, before ids are assigned"""
    title: str
    description: str = ""
    questions: List[QuestionContent]


class Answer(AnswerContent):
    """Answer option with an id unique within its question"""
    id: str


class Question(QuestionContent):
    """Question with an id unique within its quiz"""
    id: str
    answers: List[Answer] = []

    def correct_answer(self) -> Optional[Answer]:
        """First answer flagged correct, if any"""
        return next((a for a in self.answers if a.correct), None)


class Quiz(BaseModel):
    """A titled, described ordered set of questions"""
    title: str
    description: str = ""
    questions: List[Question] = []

    def find_question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)


class QuizGenerateRequest(BaseModel):
    """Request schema for quiz generation"""
    category: str = Field(..., max_length=256, description="Category the quiz belongs to")
    title: str = Field(..., max_length=256, description="Quiz title / subject")


class QuizPublishRequest(BaseModel):
    """Request schema for publishing a quiz"""
    title: str
    description: str = ""
    questions: List[QuestionContent]
    category_name: str = Field(..., max_length=256, alias="categoryName")

    class Config:
        populate_by_name = True


class QuizPublishResponse(BaseModel):
    """Response after a quiz is published"""
    message: str
    quiz_id: int = Field(..., alias="quizId")
    create_date: Optional[datetime] = Field(None, alias="createDate")

    class Config:
        populate_by_name = True
