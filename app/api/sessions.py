"""
Quiz session API endpoints - drive the quiz lifecycle of one user

Each endpoint returns the full session snapshot. Failures of the AI service
or the store during generate / view published / select quiz / publish are
reported in the snapshot's ``error`` slot rather than as HTTP errors.
"""
from fastapi import APIRouter, Depends, Response
from typing import Optional
from sqlalchemy.orm import Session

from app.api.deps import get_quiz_generator, get_session_manager
from app.database import get_db
from app.schemas.quiz import QuizGenerateRequest
from app.schemas.session import (
    AnswerSelection,
    SubmitRequest,
    SessionPublishRequest,
    SessionView,
)
from app.services.gemini_service import GeminiService
from app.services.session_service import QuizSession, SessionManager

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _view(session: QuizSession) -> SessionView:
    return SessionView.model_validate(session.to_dict())


@router.post("", response_model=SessionView, status_code=201)
def create_session(manager: SessionManager = Depends(get_session_manager)):
    """Start a new session in the topic selection state"""
    return _view(manager.create())


@router.get("/{session_id}", response_model=SessionView)
def get_session(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    return _view(manager.get(session_id))


@router.delete("/{session_id}", status_code=204)
def delete_session(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """Abandon a session; results of calls still in flight are dropped"""
    manager.discard(session_id)
    return Response(status_code=204)


@router.post("/{session_id}/generate", response_model=SessionView)
def generate(
    session_id: str,
    request: QuizGenerateRequest,
    manager: SessionManager = Depends(get_session_manager),
    generator: GeminiService = Depends(get_quiz_generator),
):
    """Generate a quiz and move to preview"""
    session = manager.get(session_id)
    return _view(session.generate(request.category, request.title, generator))


@router.post("/{session_id}/start", response_model=SessionView)
def start_quiz(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    return _view(manager.get(session_id).start_quiz())


@router.put("/{session_id}/answers", response_model=SessionView)
def answer_question(
    session_id: str,
    selection: AnswerSelection,
    manager: SessionManager = Depends(get_session_manager),
):
    """Select (or change) the answer for one question"""
    session = manager.get(session_id)
    return _view(session.answer(selection.question_id, selection.answer_id))


@router.post("/{session_id}/submit", response_model=SessionView)
def submit(
    session_id: str,
    request: Optional[SubmitRequest] = None,
    manager: SessionManager = Depends(get_session_manager),
):
    """Grade the quiz; every question must be answered"""
    return _view(manager.get(session_id).submit(request.answers if request else None))


@router.post("/{session_id}/reset", response_model=SessionView)
def reset(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    return _view(manager.get(session_id).reset())


@router.post("/{session_id}/published", response_model=SessionView)
def view_published(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
    db: Session = Depends(get_db),
):
    """Open the list of published quizzes"""
    return _view(manager.get(session_id).view_published(db))


@router.post("/{session_id}/published/{quiz_id}", response_model=SessionView)
def select_published_quiz(
    session_id: str,
    quiz_id: int,
    manager: SessionManager = Depends(get_session_manager),
    db: Session = Depends(get_db),
):
    """Load a published quiz and start taking it"""
    return _view(manager.get(session_id).select_quiz(quiz_id, db))


@router.post("/{session_id}/back", response_model=SessionView)
def back(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    return _view(manager.get(session_id).back())


@router.post("/{session_id}/publish", response_model=SessionView)
def publish(
    session_id: str,
    request: Optional[SessionPublishRequest] = None,
    manager: SessionManager = Depends(get_session_manager),
    db: Session = Depends(get_db),
):
    """Publish the graded quiz; the session stays on the results"""
    session = manager.get(session_id)
    return _view(session.publish(db, request.category_name if request else None))
