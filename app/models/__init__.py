"""
Database models package
"""
from app.models.category import QuizCategory, QuestionCategory
from app.models.question import Question, Answer
from app.models.content_post import ContentPost
from app.models.quiz import Quiz

__all__ = ["QuizCategory", "QuestionCategory", "Question", "Answer", "ContentPost", "Quiz"]
