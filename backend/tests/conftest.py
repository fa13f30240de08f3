"""
Pytest configuration and fixtures for Quiz Learner backend tests.

Provides:
- Test database setup/teardown
- FastAPI test client
- User, admin and question fixtures
- Fake AI service for gateway tests
"""

import pytest
import os
import uuid
from datetime import datetime, timedelta
from typing import Generator, Dict, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test_quizlearner.db"
os.environ["OPENAI_API_KEY"] = "test-key-not-real"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["ENVIRONMENT"] = "development"
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("SENTRY_DSN", None)

from app.main import app
from app.database import Base, get_db
from app.dependencies.services import get_ai_gateway
from app.models.models import Question, Quiz, User
from app.services.ai_gateway import AIGateway
from app.services.auth import create_access_token
from app.services.seed import seed_questions
from tests.mocks.openai_mocks import FakeChatService


# Test database setup
TEST_DATABASE_URL = "sqlite:///./test_quizlearner.db"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database tables once per test session"""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()
    if os.path.exists("./test_quizlearner.db"):
        os.remove("./test_quizlearner.db")


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Provide a database session for each test, with rollback after"""
    connection = test_engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def ai_service() -> FakeChatService:
    """AI service with no queued responses: every gateway call falls back"""
    return FakeChatService()


@pytest.fixture(scope="function")
def client(db: Session, ai_service: FakeChatService) -> Generator[TestClient, None, None]:
    """Provide FastAPI test client with database and AI overrides"""
    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_gateway] = lambda: AIGateway(service=ai_service)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =========================================================================
# User Fixtures
# =========================================================================

def create_user(db: Session, email: str = None, role: str = "user", **fields) -> User:
    """Helper to create a user with empty learning state"""
    user = User(
        email=email or f"student_{uuid.uuid4().hex[:8]}@test.com",
        role=role,
        is_active=fields.pop("is_active", True),
        quiz_history=fields.pop("quiz_history", []),
        overall_weakness=fields.pop("overall_weakness", {}),
        **fields
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_header(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a student with no quiz history"""
    return create_user(db, email="student@test.com")


@pytest.fixture
def admin_user(db: Session) -> User:
    """Create an administrator"""
    return create_user(db, email="admin@test.com", role="admin")


@pytest.fixture
def auth_headers(test_user: User) -> Dict[str, str]:
    return auth_header(test_user)


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return auth_header(admin_user)


# =========================================================================
# Question Fixtures
# =========================================================================

def create_question(
    db: Session,
    topic: str = "Human Body Systems",
    text: str = None,
    **fields
) -> Question:
    """Helper to create one active 4-option question"""
    question = Question(
        question_text=text or f"Test question {uuid.uuid4().hex[:8]}?",
        options=fields.pop("options", ["Option A", "Option B", "Option C", "Option D"]),
        correct_answer=fields.pop("correct_answer", "Option B"),
        topic=topic,
        chapter=fields.pop("chapter", "Test Chapter"),
        difficulty=fields.pop("difficulty", "easy"),
        is_active=fields.pop("is_active", True),
        usage_count=fields.pop("usage_count", 0),
        **fields
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


@pytest.fixture
def seeded_questions(db: Session) -> List[Question]:
    """The 46 starter questions (at least 4 per topic)"""
    seed_questions(db)
    return db.query(Question).all()


# =========================================================================
# Quiz Fixtures
# =========================================================================

def create_completed_quiz(db: Session, user: User, score: int, hours_ago: int = 0) -> Quiz:
    """Helper to add a completed quiz row plus the matching quiz_history entry"""
    completed_at = datetime.utcnow() - timedelta(hours=hours_ago)
    quiz = Quiz(
        user_id=user.id, quiz_type="adaptive", total_questions=20,
        correct_answers=score // 5, score=score, time_taken=300,
        topic_wise_analysis={"Reproduction": {"correct": 1, "total": 2, "percentage": 50}},
        is_completed=True, completed_at=completed_at,
    )
    db.add(quiz)
    db.flush()
    user.quiz_history = list(user.quiz_history or []) + [{
        "quizId": quiz.id,
        "score": score,
        "totalQuestions": 20,
        "correctAnswers": score // 5,
        "topicWiseAnalysis": quiz.topic_wise_analysis,
        "completedAt": completed_at.isoformat(),
    }]
    db.commit()
    return quiz
