"""
Quiz model - stores published quizzes
"""
from sqlalchemy import Column, Integer, Text, SmallInteger, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base


class Quiz(Base):
    """
    Quizzes table - one row per published quiz

    Questions are referenced through ``question_ids``, a comma-separated list
    of question row ids kept in the order the quiz presents them.
    """
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Integer, nullable=False, default=0)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    quiz_category_id = Column(Integer, ForeignKey("quiz_categories.id"), nullable=False, index=True)
    question_ids = Column(Text, nullable=False, default="")
    ordering = Column(Integer, nullable=False, default=1)
    published = Column(SmallInteger, nullable=False, default=1)
    create_date = Column(TIMESTAMP)
    custom_post_id = Column(Integer, ForeignKey("content_posts.id"))

    category = relationship("QuizCategory")
    post = relationship("ContentPost")

    def question_id_list(self):
        """Parse ``question_ids`` into integers, skipping malformed entries"""
        ids = []
        for raw in (self.question_ids or "").split(","):
            raw = raw.strip()
            if raw.isdigit():
                ids.append(int(raw))
        return ids

    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title}, category_id={self.quiz_category_id})>"
