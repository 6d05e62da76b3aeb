"""
Quiz publication service - persists a quiz, its questions and answers atomically
"""
import logging
from datetime import datetime, timezone
from typing import NamedTuple
from sqlalchemy.orm import Session

from app.exceptions import ValidationFailure, DuplicateFailure, PersistenceFailure
from app.models import Quiz, Question, Answer, ContentPost
from app.services.category_service import category_service, ResolvedCategory
from app.utils.slug import slugify

logger = logging.getLogger(__name__)


class PublishResult(NamedTuple):
    """Identity of a freshly published quiz"""
    quiz_id: int
    create_date: datetime


class PublicationService:
    """
    Service for publishing quizzes

    Transaction layout:
    1. Find-or-create the category (quiz and question tables)
    2. Insert questions, each followed by its ordered answers
    3. Insert the quiz row referencing the new question ids
    4. Insert the content post and link it from the quiz row

    Nothing is visible to readers until the final commit; any failure rolls
    the whole transaction back. Publishing the same content twice creates
    two quizzes.
    """

    # one retry when a concurrent request created the category first
    MAX_ATTEMPTS = 2

    def publish(self, db: Session, quiz, category_name: str) -> PublishResult:
        """
        Publish a quiz under a category

        Args:
            db: Database session (must not hold uncommitted work)
            quiz: Quiz-shaped object (title, description, questions with answers)
            category_name: Category to publish under, created if missing

        Returns:
            PublishResult with the new quiz id and the create_date written

        Raises:
            ValidationFailure: missing title, questions or category
            PersistenceFailure: the store rejected the transaction
        """
        self._validate(quiz, category_name)

        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            try:
                result = self._publish_once(db, quiz, category_name)
            except DuplicateFailure as e:
                db.rollback()
                if attempt == self.MAX_ATTEMPTS:
                    logger.error(f"Failed to publish quiz after {attempt} attempts: {str(e)}")
                    raise PersistenceFailure("Database error while publishing quiz.") from e
                logger.info(f"Category '{category_name}' created concurrently, retrying publish")
                continue
            except Exception as e:
                db.rollback()
                logger.error(f"Failed to publish quiz: {str(e)}", exc_info=True)
                raise PersistenceFailure("Database error while publishing quiz.") from e

            logger.info(
                f"Quiz published: {result.quiz_id} '{quiz.title}' "
                f"({len(quiz.questions)} questions, category '{category_name.strip()}')"
            )
            return result

    def _validate(self, quiz, category_name: str) -> None:
        if quiz is None or not (quiz.title or "").strip():
            raise ValidationFailure("Quiz title is required.")
        if not quiz.questions:
            raise ValidationFailure("Quiz must contain at least one question.")
        if not (category_name or "").strip():
            raise ValidationFailure("Category name is required.")

    def _publish_once(self, db: Session, quiz, category_name: str) -> PublishResult:
        category = category_service.resolve_or_create(db, category_name)
        create_date = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)

        question_ids = [
            self._insert_question(db, question, category, create_date)
            for question in quiz.questions
        ]

        quiz_row = Quiz(
            title=quiz.title.strip(),
            description=quiz.description or "",
            quiz_category_id=category.quiz_category_id,
            question_ids=",".join(str(question_id) for question_id in question_ids),
            ordering=1,
            published=1,
            author_id=0,
            create_date=create_date,
        )
        db.add(quiz_row)
        db.flush()

        post = self._insert_post(db, quiz_row)
        quiz_row.custom_post_id = post.id

        db.commit()
        return PublishResult(quiz_row.id, create_date)

    def _insert_question(
        self,
        db: Session,
        question,
        category: ResolvedCategory,
        create_date: datetime
    ) -> int:
        """Insert one question and its answers, returning the question id"""
        row = Question(
            question=question.question,
            explanation=question.explanation,
            type="radio",
            published=1,
            category_id=category.question_category_id,
            author_id=0,
            create_date=create_date,
        )
        db.add(row)
        db.flush()

        for ordering, answer in enumerate(question.answers, start=1):
            db.add(Answer(
                question_id=row.id,
                answer=answer.answer,
                correct=bool(answer.correct),
                ordering=ordering,
            ))
        db.flush()

        return row.id

    def _insert_post(self, db: Session, quiz_row: Quiz) -> ContentPost:
        """Create the content post that gives the quiz a public page"""
        slug = slugify(quiz_row.title) or f"quiz-{quiz_row.id}"

        post = ContentPost(
            title=quiz_row.title,
            slug=slug,
            content=quiz_row.description,
            status="publish",
            post_type="quiz",
            author_id=0,
            create_date=quiz_row.create_date,
        )
        db.add(post)
        db.flush()
        return post


# Global instance
publication_service = PublicationService()
