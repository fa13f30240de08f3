"""
Service Dependencies

Per-request construction of the quiz services so routers share one
database session, and tests can swap the AI gateway via
app.dependency_overrides[get_ai_gateway].
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.adaptive import AdaptiveSelector
from app.services.ai_gateway import AIGateway
from app.services.question_bank import QuestionBank
from app.services.quiz_session import QuizSessionService


def get_ai_gateway() -> AIGateway:
    return AIGateway()


def get_question_bank(db: Session = Depends(get_db)) -> QuestionBank:
    return QuestionBank(db)


def get_quiz_service(
    db: Session = Depends(get_db),
    bank: QuestionBank = Depends(get_question_bank),
    gateway: AIGateway = Depends(get_ai_gateway)
) -> QuizSessionService:
    return QuizSessionService(db, AdaptiveSelector(bank, gateway))
