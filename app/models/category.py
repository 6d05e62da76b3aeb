"""
Category models - quiz categories and their question-category twins
"""
from sqlalchemy import Column, Integer, String, Text, SmallInteger

from app.database import Base


class QuizCategory(Base):
    """
    Quiz categories table - the grouping quizzes are published and browsed under
    """
    __tablename__ = "quiz_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Integer, nullable=False, default=0)
    title = Column(String(256), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    published = Column(SmallInteger, nullable=False, default=1)

    def __repr__(self):
        return f"<QuizCategory(id={self.id}, title={self.title})>"


class QuestionCategory(Base):
    """
    Question categories table - mirrors quiz_categories by title so that
    published questions are filed under the same name as their quiz
    """
    __tablename__ = "question_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Integer, nullable=False, default=0)
    title = Column(String(256), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    published = Column(SmallInteger, nullable=False, default=1)

    def __repr__(self):
        return f"<QuestionCategory(id={self.id}, title={self.title})>"
