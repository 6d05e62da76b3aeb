"""
Question and Answer models
"""
from sqlalchemy import Column, Integer, String, Text, SmallInteger, Boolean, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base


class Question(Base):
    """
    Questions table - one row per published question
    """
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Integer, nullable=False, default=0)
    category_id = Column(Integer, ForeignKey("question_categories.id"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    explanation = Column(Text)
    type = Column(String(256), nullable=False, default="radio")
    published = Column(SmallInteger, nullable=False, default=1)
    create_date = Column(TIMESTAMP)

    answers = relationship(
        "Answer",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Answer.ordering",
    )

    def __repr__(self):
        return f"<Question(id={self.id}, category_id={self.category_id})>"


class Answer(Base):
    """
    Answers table - ordered answer options of a question
    """
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    answer = Column(Text, nullable=False)
    correct = Column(Boolean, nullable=False, default=False)
    ordering = Column(Integer, nullable=False)

    question = relationship("Question", back_populates="answers")

    def __repr__(self):
        return f"<Answer(id={self.id}, question_id={self.question_id}, correct={self.correct})>"
