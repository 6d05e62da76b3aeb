"""
Quiz session service - the per-user quiz lifecycle state machine

    SELECTING_TOPIC --generate--> PREVIEW --start--> TAKING --submit--> RESULTS
           |   ^                                        ^                 |
           |   +------------------reset-----------------+-----------------+
           |                                            |
           +--view_published--> VIEWING_PUBLISHED --select_quiz
                                      |
                                      +--back--> SELECTING_TOPIC

Transitions that wait on the generator or the store run with ``loading`` set
to the operation name; every other trigger is refused until it clears.
Publication is offered from RESULTS and never changes the state.
"""
import logging
import threading
import time
import uuid
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy.orm import Session

from app.exceptions import (
    QuizMakerError, ValidationFailure, NotFound, InvalidTransition,
    SessionBusy, GenerationFailure,
)
from app.schemas.quiz import Quiz
from app.services.gemini_service import build_topic_prompt
from app.services.grading_service import grading_service, QuizScore
from app.services.publication_service import publication_service
from app.services.query_service import query_service

logger = logging.getLogger(__name__)


class QuizState(str, Enum):
    SELECTING_TOPIC = "selecting_topic"
    PREVIEW = "preview"
    TAKING = "taking"
    RESULTS = "results"
    VIEWING_PUBLISHED = "viewing_published"


class PublishStatus(str, Enum):
    IDLE = "idle"
    SUCCESS = "success"
    ERROR = "error"


PUBLISH_FAILED_MESSAGE = "Failed to publish quiz. Please try again."


class QuizSession:
    """
    One user's journey through the quiz lifecycle

    The state is a single QuizState value; loading, error and publish status
    live in their own slots so no combination of flags can contradict it.
    """

    def __init__(self, session_id: str):
        self.id = session_id
        self.state = QuizState.SELECTING_TOPIC
        self.loading: Optional[str] = None
        self.error: Optional[str] = None
        self.quiz: Optional[Quiz] = None
        self.user_answers: Dict[str, str] = {}
        self.result: Optional[QuizScore] = None
        self.category_name: Optional[str] = None
        self.publish_status = PublishStatus.IDLE
        self.published_quiz_id: Optional[int] = None
        self.published_content: List[Dict[str, Any]] = []
        self.last_activity = time.monotonic()

        # bumped on close(); results of calls started before are dropped
        self._epoch = 0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Transitions backed by external calls
    # ------------------------------------------------------------------

    def generate(self, category: str, title: str, generator) -> "QuizSession":
        """SELECTING_TOPIC -> PREVIEW, or stay with an error on failure"""
        category = (category or "").strip()
        title = (title or "").strip()
        if not category or not title:
            raise ValidationFailure("Category and title are required.")

        epoch = self._begin("generate", QuizState.SELECTING_TOPIC)
        try:
            quiz = generator.generate(build_topic_prompt(category, title))
        except GenerationFailure as e:
            self._finish(epoch, error=e.message)
            return self
        except Exception:
            self._finish(epoch)
            raise

        self._finish(epoch, apply=partial(self._load_quiz, quiz, QuizState.PREVIEW, category))
        return self

    def view_published(self, db: Session) -> "QuizSession":
        """SELECTING_TOPIC -> VIEWING_PUBLISHED"""
        epoch = self._begin("view_published", QuizState.SELECTING_TOPIC)
        try:
            content = query_service.list_published(db)
        except QuizMakerError as e:
            self._finish(epoch, error=e.message)
            return self
        except Exception:
            self._finish(epoch)
            raise

        self._finish(epoch, apply=partial(self._show_published, content))
        return self

    def select_quiz(self, quiz_id: int, db: Session) -> "QuizSession":
        """VIEWING_PUBLISHED -> TAKING; failures keep the published list open"""
        epoch = self._begin("select_quiz", QuizState.VIEWING_PUBLISHED)
        try:
            quiz = query_service.get_quiz_by_id(db, quiz_id)
        except QuizMakerError as e:
            self._finish(epoch, error=e.message)
            return self
        except Exception:
            self._finish(epoch)
            raise

        self._finish(epoch, apply=partial(self._load_quiz, quiz, QuizState.TAKING, None))
        return self

    def publish(self, db: Session, category_name: Optional[str] = None) -> "QuizSession":
        """
        Persist the quiz from RESULTS

        The category defaults to the one the quiz was generated under, then
        to the quiz title. Outcome is reported through publish_status.
        """
        if category_name is not None and not category_name.strip():
            raise ValidationFailure("Category name is required.")

        epoch = self._begin("publish", QuizState.RESULTS)
        if self.publish_status == PublishStatus.SUCCESS:
            self._finish(epoch)
            raise InvalidTransition("This quiz has already been published.")

        name = (category_name or self.category_name or self.quiz.title).strip()
        try:
            published = publication_service.publish(db, self.quiz, name)
        except QuizMakerError as e:
            logger.warning(f"Session {self.id}: publish failed: {e.message}")
            self._finish(epoch, apply=self._publish_failed)
            return self
        except Exception:
            self._finish(epoch, apply=self._publish_failed)
            raise

        self._finish(epoch, apply=partial(self._publish_succeeded, published.quiz_id, name))
        return self

    # ------------------------------------------------------------------
    # Local transitions
    # ------------------------------------------------------------------

    def start_quiz(self) -> "QuizSession":
        """PREVIEW -> TAKING"""
        with self._lock:
            self._require("start", QuizState.PREVIEW)
            self.state = QuizState.TAKING
            self.error = None
            self._touch()
        return self

    def answer(self, question_id: str, answer_id: str) -> "QuizSession":
        """Record (or replace) the selected answer for one question"""
        with self._lock:
            self._require("answer", QuizState.TAKING)
            self._check_selection(question_id, answer_id)
            self.user_answers[question_id] = answer_id
            self._touch()
        return self

    def submit(self, answers: Optional[Dict[str, str]] = None) -> "QuizSession":
        """TAKING -> RESULTS once every question has an answer"""
        with self._lock:
            self._require("submit", QuizState.TAKING)

            merged = dict(self.user_answers)
            for question_id, answer_id in (answers or {}).items():
                self._check_selection(question_id, answer_id)
                merged[question_id] = answer_id

            unanswered = [q.id for q in self.quiz.questions if q.id not in merged]
            if unanswered:
                raise ValidationFailure("Please answer every question before submitting.")

            self.user_answers = merged
            self.result = grading_service.grade_quiz(self.quiz, merged)
            self.state = QuizState.RESULTS
            self.error = None
            self._touch()
        return self

    def reset(self) -> "QuizSession":
        """Back to SELECTING_TOPIC, discarding the quiz and the answers"""
        with self._lock:
            self._require("reset", QuizState.RESULTS, QuizState.PREVIEW, QuizState.TAKING)
            self._clear()
            self._touch()
        return self

    def back(self) -> "QuizSession":
        """VIEWING_PUBLISHED -> SELECTING_TOPIC"""
        with self._lock:
            self._require("back", QuizState.VIEWING_PUBLISHED)
            self._clear()
            self._touch()
        return self

    def close(self) -> None:
        """Session abandoned; any in-flight result will be discarded"""
        with self._lock:
            self._epoch += 1
            self._clear()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "id": self.id,
                "state": self.state,
                "loading": self.loading,
                "error": self.error,
                "quiz": self.quiz,
                "user_answers": dict(self.user_answers),
                "result": self.result,
                "category_name": self.category_name,
                "publish_status": self.publish_status,
                "published_quiz_id": self.published_quiz_id,
                "published_content": self.published_content,
            }

    def idle_for(self) -> float:
        return time.monotonic() - self.last_activity

    def is_idle(self, timeout: float) -> bool:
        """No call in flight and no activity for more than ``timeout`` seconds"""
        with self._lock:
            return not self.loading and self.idle_for() > timeout

    def _begin(self, operation: str, *allowed: QuizState) -> int:
        with self._lock:
            self._require(operation, *allowed)
            self.loading = operation
            self.error = None
            self._touch()
            return self._epoch

    def _finish(self, epoch: int, apply: Callable[[], None] = None, error: str = None) -> None:
        with self._lock:
            if epoch != self._epoch:
                logger.info(f"Session {self.id}: discarding stale result")
                return
            self.loading = None
            if error is not None:
                self.error = error
            elif apply is not None:
                apply()
            self._touch()

    def _require(self, operation: str, *allowed: QuizState) -> None:
        if self.loading:
            raise SessionBusy(f"Please wait, '{self.loading}' is still in progress.")
        if self.state not in allowed:
            raise InvalidTransition(f"Cannot {operation} while in state '{self.state.value}'.")

    def _check_selection(self, question_id: str, answer_id: str) -> None:
        question = self.quiz.find_question(question_id)
        if question is None:
            raise ValidationFailure(f"Unknown question '{question_id}'.")
        if not any(a.id == answer_id for a in question.answers):
            raise ValidationFailure(f"Unknown answer '{answer_id}' for question '{question_id}'.")

    def _load_quiz(self, quiz: Quiz, state: QuizState, category_name: Optional[str]) -> None:
        self.quiz = quiz
        self.user_answers = {}
        self.result = None
        self.category_name = category_name
        self.publish_status = PublishStatus.IDLE
        self.published_quiz_id = None
        self.state = state

    def _show_published(self, content: List[Dict[str, Any]]) -> None:
        self.published_content = content
        self.state = QuizState.VIEWING_PUBLISHED

    def _publish_succeeded(self, quiz_id: int, category_name: str) -> None:
        self.publish_status = PublishStatus.SUCCESS
        self.published_quiz_id = quiz_id
        self.category_name = category_name

    def _publish_failed(self) -> None:
        self.publish_status = PublishStatus.ERROR
        self.error = PUBLISH_FAILED_MESSAGE

    def _clear(self) -> None:
        self.state = QuizState.SELECTING_TOPIC
        self.loading = None
        self.error = None
        self.quiz = None
        self.user_answers = {}
        self.result = None
        self.category_name = None
        self.publish_status = PublishStatus.IDLE
        self.published_quiz_id = None
        self.published_content = []

    def _touch(self) -> None:
        self.last_activity = time.monotonic()


class SessionManager:
    """In-memory registry of quiz sessions for this process"""

    def __init__(self, idle_timeout: int = 3600):
        self.idle_timeout = idle_timeout
        self._sessions: Dict[str, QuizSession] = {}
        self._lock = threading.Lock()

    def create(self) -> QuizSession:
        self.purge_idle()
        session = QuizSession(uuid.uuid4().hex)
        with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Session created: {session.id}")
        return session

    def get(self, session_id: str) -> QuizSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise NotFound("Session not found.")
        return session

    def discard(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise NotFound("Session not found.")
        session.close()
        logger.info(f"Session discarded: {session_id}")

    def purge_idle(self) -> int:
        """Drop sessions without activity for longer than idle_timeout"""
        with self._lock:
            expired = [
                sid for sid, session in self._sessions.items()
                if session.is_idle(self.idle_timeout)
            ]
            for sid in expired:
                self._sessions.pop(sid).close()
        if expired:
            logger.info(f"Purged {len(expired)} idle sessions")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
