"""
Pydantic schemas for categories and published content listings
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CategoryCreate(BaseModel):
    """Schema for adding a new category"""
    title: str = Field(..., max_length=256)


class CategoryResponse(BaseModel):
    """A quiz category"""
    id: int
    title: str

    class Config:
        from_attributes = True


class PublishedQuiz(BaseModel):
    """Summary of a published quiz"""
    id: int
    title: str
    description: str
    create_date: Optional[datetime] = None


class CategoryWithQuizzes(CategoryResponse):
    """Category with its published quizzes, newest first"""
    quizzes: List[PublishedQuiz] = []
