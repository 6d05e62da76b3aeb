"""
ContentPost model - generic content record linked to a published quiz
"""
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP

from app.database import Base


class ContentPost(Base):
    """
    Content posts table - gives every published quiz a page with a URL slug
    """
    __tablename__ = "content_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Integer, nullable=False, default=0)
    title = Column(Text, nullable=False)
    slug = Column(String(200), nullable=False, index=True)
    content = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="publish")
    post_type = Column(String(20), nullable=False, default="quiz")
    create_date = Column(TIMESTAMP)

    def __repr__(self):
        return f"<ContentPost(id={self.id}, slug={self.slug})>"
