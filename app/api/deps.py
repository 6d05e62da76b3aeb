"""
Shared FastAPI dependencies for process-wide clients

The generator and the session registry are created at startup and stored on
``app.state``; routes receive them through these dependencies so tests can
swap in fakes with ``app.dependency_overrides``.
"""
from fastapi import Request

from app.services.gemini_service import GeminiService
from app.services.session_service import SessionManager


def get_quiz_generator(request: Request) -> GeminiService:
    return request.app.state.quiz_generator


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager
