"""
Quiz grading service
Single-choice questions: exact match on the selected answer id
"""
import logging
from typing import Dict, List, Optional
from pydantic import BaseModel

from app.schemas.quiz import Quiz, Question

logger = logging.getLogger(__name__)


class QuestionGrading(BaseModel):
    """Grading details for a single question"""
    question_id: str
    selected_answer_id: Optional[str] = None
    correct_answer_id: Optional[str] = None
    is_correct: bool
    explanation: str = ""


class QuizScore(BaseModel):
    """Result of a graded quiz session"""
    score: int
    total: int
    percentage: int
    breakdown: List[QuestionGrading]


class GradingService:
    """
    Service for grading quiz submissions

    A question counts as correct when the selected answer is the answer
    flagged correct. Questions without a correct answer can never be
    scored.
    """

    def grade_quiz(self, quiz: Quiz, user_answers: Dict[str, str]) -> QuizScore:
        """
        Grade a complete quiz submission

        Args:
            quiz: The quiz that was taken
            user_answers: {question_id: answer_id}

        Returns:
            QuizScore with percentage = 100 * score / total rounded to an
            integer, 0 for an empty quiz
        """
        breakdown = [self._grade_question(q, user_answers.get(q.id)) for q in quiz.questions]

        score = sum(1 for item in breakdown if item.is_correct)
        total = len(quiz.questions)
        # round half up (12.5 -> 13), not Python's banker's rounding
        percentage = int(100 * score / total + 0.5) if total > 0 else 0

        logger.info(f"Quiz graded: {score}/{total} ({percentage}%)")

        return QuizScore(score=score, total=total, percentage=percentage, breakdown=breakdown)

    def _grade_question(self, question: Question, selected: Optional[str]) -> QuestionGrading:
        correct = question.correct_answer()
        correct_id = correct.id if correct else None

        return QuestionGrading(
            question_id=question.id,
            selected_answer_id=selected,
            correct_answer_id=correct_id,
            is_correct=correct_id is not None and selected == correct_id,
            explanation=question.explanation,
        )


# Global instance
grading_service = GradingService()
