"""
Read query service - rebuilds published categories and quizzes from storage
"""
import logging
from typing import List, Dict, Any
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import NotFound, PersistenceFailure
from app.models import Quiz, QuizCategory, Question, Answer
from app.schemas.quiz import Quiz as QuizSchema

logger = logging.getLogger(__name__)


class QueryService:
    """Service for reading published content"""

    def list_published(self, db: Session) -> List[Dict[str, Any]]:
        """
        Published quizzes grouped under their category

        Returns:
            List of {id, title, quizzes: [{id, title, description, create_date}]}
            ordered by category title, quizzes newest first
        """
        try:
            rows = (
                db.query(
                    QuizCategory.id.label("category_id"),
                    QuizCategory.title.label("category_title"),
                    Quiz.id.label("quiz_id"),
                    Quiz.title.label("quiz_title"),
                    Quiz.description.label("quiz_description"),
                    Quiz.create_date.label("quiz_create_date"),
                )
                .join(Quiz, Quiz.quiz_category_id == QuizCategory.id)
                .filter(Quiz.published == 1, QuizCategory.published == 1)
                .order_by(QuizCategory.title, Quiz.create_date.desc(), Quiz.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch published content: {str(e)}")
            raise PersistenceFailure("Error fetching content from the database.") from e

        # dicts keep insertion order, so categories stay sorted by title
        categories: Dict[int, Dict[str, Any]] = {}
        for row in rows:
            category = categories.setdefault(row.category_id, {
                "id": row.category_id,
                "title": row.category_title,
                "quizzes": [],
            })
            category["quizzes"].append({
                "id": row.quiz_id,
                "title": row.quiz_title,
                "description": row.quiz_description,
                "create_date": row.quiz_create_date,
            })

        return list(categories.values())

    def get_quiz_by_id(self, db: Session, quiz_id: int) -> QuizSchema:
        """
        Reassemble a published quiz with its questions and answers

        Question and answer ids are re-prefixed (``q-db-<id>``, ``a-db-<id>``)
        to mark them as coming from storage. A quiz without questions comes
        back with an empty question list.

        Raises:
            NotFound: no quiz with this id
            PersistenceFailure: store error
        """
        try:
            quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
            if not quiz:
                raise NotFound("Quiz not found.")

            question_ids = quiz.question_id_list()
            if not question_ids:
                return QuizSchema(title=quiz.title, description=quiz.description, questions=[])

            questions = db.query(Question).filter(Question.id.in_(question_ids)).all()
            answers = (
                db.query(Answer)
                .filter(Answer.question_id.in_(question_ids))
                .order_by(Answer.question_id, Answer.ordering, Answer.id)
                .all()
            )
        except NotFound:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch quiz {quiz_id}: {str(e)}")
            raise PersistenceFailure("Error fetching quiz details.") from e

        answer_map: Dict[int, List[Dict[str, Any]]] = {}
        for answer in answers:
            answer_map.setdefault(answer.question_id, []).append({
                "id": f"a-db-{answer.id}",
                "answer": answer.answer,
                "correct": bool(answer.correct),
            })

        # keep the order stored on the quiz row, not the order rows came back in
        position = {question_id: index for index, question_id in enumerate(question_ids)}
        questions.sort(key=lambda q: position[q.id])

        return QuizSchema(
            title=quiz.title,
            description=quiz.description,
            questions=[
                {
                    "id": f"q-db-{question.id}",
                    "question": question.question,
                    "explanation": question.explanation or "",
                    "answers": answer_map.get(question.id, []),
                }
                for question in questions
            ],
        )


# Global instance
query_service = QueryService()
