"""
Category resolver - lists, creates and finds-or-creates quiz categories
"""
import logging
from typing import List, NamedTuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import ValidationFailure, DuplicateFailure, PersistenceFailure
from app.models import QuizCategory, QuestionCategory

logger = logging.getLogger(__name__)


class ResolvedCategory(NamedTuple):
    """Ids of the same category title in both category tables"""
    quiz_category_id: int
    question_category_id: int


class CategoryService:
    """
    Service for quiz categories

    Every quiz category has a question category with the same title. Both
    rows are created in the caller's transaction, so they commit or roll
    back together.
    """

    def list_categories(self, db: Session) -> List[QuizCategory]:
        """All published quiz categories sorted by title"""
        return (
            db.query(QuizCategory)
            .filter(QuizCategory.published == 1)
            .order_by(QuizCategory.title.asc())
            .all()
        )

    def create(self, db: Session, title: str) -> QuizCategory:
        """
        Add a new category and commit

        Args:
            db: Database session
            title: Category title (surrounding whitespace is ignored)

        Returns:
            The new QuizCategory

        Raises:
            ValidationFailure: title is blank
            DuplicateFailure: a category with this title already exists
            PersistenceFailure: any other store error
        """
        title = self._clean_title(title)

        try:
            existing = db.query(QuizCategory).filter(QuizCategory.title == title).first()
            if existing:
                raise DuplicateFailure("A category with this title already exists.")

            category = QuizCategory(title=title, published=1, author_id=0, description="")
            db.add(category)
            db.flush()

            self._find_or_insert(db, QuestionCategory, title)

            db.commit()
            db.refresh(category)

        except DuplicateFailure:
            db.rollback()
            raise
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Duplicate category '{title}': {str(e)}")
            raise DuplicateFailure("A category with this title already exists.") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create category '{title}': {str(e)}")
            raise PersistenceFailure("Error creating category in the database.") from e

        logger.info(f"Category created: {category.id} ({title})")
        return category

    def resolve_or_create(self, db: Session, title: str) -> ResolvedCategory:
        """
        Find or create a category in both tables without committing

        Runs inside the caller's transaction. A unique violation (a concurrent
        request created the same title first) surfaces as DuplicateFailure and
        leaves the session needing a rollback.
        """
        title = self._clean_title(title)

        quiz_category = self._find_or_insert(db, QuizCategory, title)
        question_category = self._find_or_insert(db, QuestionCategory, title)

        return ResolvedCategory(quiz_category.id, question_category.id)

    def _find_or_insert(self, db: Session, model, title: str):
        """Lookup-or-create a row of ``model`` by exact title"""
        row = db.query(model).filter(model.title == title).first()
        if row:
            return row

        row = model(title=title, published=1, author_id=0, description="")
        db.add(row)
        try:
            db.flush()
        except IntegrityError as e:
            logger.warning(f"Concurrent insert of {model.__tablename__} '{title}'")
            raise DuplicateFailure("A category with this title already exists.") from e

        logger.debug(f"Inserted {model.__tablename__} row {row.id} for '{title}'")
        return row

    @staticmethod
    def _clean_title(title: str) -> str:
        title = (title or "").strip()
        if not title:
            raise ValidationFailure("Category title is required.")
        return title


# Global instance
category_service = CategoryService()
