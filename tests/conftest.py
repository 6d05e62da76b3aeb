# =============================================================================
# CONFTEST - shared pytest fixtures
# =============================================================================
# In-memory SQLite store and a fake quiz generator, so no test touches
# PostgreSQL or the Gemini API.
# =============================================================================

import os

# Settings are read at import time, so configure the environment first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("GEMINI_API_KEY", "test-key-123")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlalchemy.orm import sessionmaker

from app.database import Base, create_db_engine, get_db, init_db
from app.exceptions import GenerationFailure
from app.schemas.quiz import AnswerContent, QuestionContent, QuizContent
from app.services.gemini_service import assign_ids


def build_quiz_content(num_questions: int = 2, title: str = "The Solar System") -> QuizContent:
    """Quiz with ``num_questions`` questions whose first answer is the correct one"""
    return QuizContent(
        title=title,
        description="Planets, moons and the Sun.",
        questions=[
            QuestionContent(
                question=f"Question {i + 1}?",
                explanation=f"Explanation {i + 1}.",
                answers=[
                    AnswerContent(answer=f"Right {i + 1}", correct=True),
                    AnswerContent(answer=f"Wrong {i + 1}a", correct=False),
                    AnswerContent(answer=f"Wrong {i + 1}b", correct=False),
                ],
            )
            for i in range(num_questions)
        ],
    )


class FakeQuizGenerator:
    """Stands in for GeminiService"""

    def __init__(self):
        self.prompts = []
        self.fail = False
        self.content = build_quiz_content()

    def generate(self, topic_prompt: str):
        self.prompts.append(topic_prompt)
        if self.fail:
            raise GenerationFailure()
        return assign_ids(self.content)


# =============================================================================
# FIXTURES - DATABASE
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory database with all tables"""
    test_engine = create_db_engine("sqlite://")
    init_db(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# FIXTURES - QUIZZES AND GENERATOR
# =============================================================================


@pytest.fixture
def quiz_content():
    return build_quiz_content()


@pytest.fixture
def quiz(quiz_content):
    return assign_ids(quiz_content)


@pytest.fixture
def make_quiz_content():
    return build_quiz_content


@pytest.fixture
def fake_generator():
    return FakeQuizGenerator()


# =============================================================================
# FIXTURES - API
# =============================================================================


@pytest.fixture
def client(session_factory, fake_generator):
    """FastAPI TestClient wired to the test database and the fake generator"""
    from fastapi.testclient import TestClient
    from app.api.deps import get_quiz_generator
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quiz_generator] = lambda: fake_generator

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
