"""
Start-up data: the default administrator and the starter question bank.

Both steps are idempotent and safe to run on every boot.
"""

import logging
import os
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.data import SEED_QUESTIONS
from app.models.models import Question, User
from app.schemas.quiz import UserRole
from app.services.auth import normalize_email
from app.services.question_bank import QuestionBank

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@quizlearner.com"


def ensure_admin(db: Session, email: Optional[str] = None) -> User:
    """Create the default admin account unless it already exists."""
    email = normalize_email(email or os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL))

    admin = db.query(User).filter(User.email == email).first()
    if admin:
        logger.info(f"Admin user already exists: {email}")
        return admin

    admin = User(email=email, role=UserRole.ADMIN.value, is_active=True,
                 quiz_history=[], overall_weakness={})
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Default admin user created: {email}")
    return admin


def seed_questions(db: Session, questions: List[Dict] = SEED_QUESTIONS) -> int:
    """
    Insert starter questions whose text is not in the bank yet.

    Returns:
        Number of questions inserted
    """
    existing = db.query(Question).count()
    if existing >= len(questions):
        logger.info(f"Questions already exist ({existing} questions found)")
        return 0

    known_texts = {row.question_text for row in db.query(Question.question_text).all()}
    missing = [q for q in questions if q["question_text"] not in known_texts]
    if not missing:
        return 0

    saved = QuestionBank(db).add_questions(missing)
    db.commit()
    logger.info(f"Inserted {len(saved)} seed questions ({existing + len(saved)} total)")
    return len(saved)


def initialize_data(db: Session) -> None:
    ensure_admin(db)
    seed_questions(db)
