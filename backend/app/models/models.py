from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from app.database import Base


def generate_uuid():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, nullable=False, index=True)  # Always stored lower-cased
    role = Column(String, default="user", nullable=False, index=True)  # "user" or "admin"
    is_active = Column(Boolean, default=True, nullable=False)

    # Adaptive learning state
    quiz_history = Column(JSON, default=list)  # Ordered list of completed quiz summaries
    overall_weakness = Column(JSON, default=dict)  # topic -> {weaknessScore, strengthScore, totalAttempts}

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    quizzes = relationship("Quiz", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Question(Base):
    __tablename__ = "questions"

    id = Column(String, primary_key=True, default=generate_uuid)
    question_text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # Ordered list of answer options
    correct_answer = Column(String, nullable=False)
    topic = Column(String, nullable=False, index=True)
    chapter = Column(String, nullable=False)
    difficulty = Column(String, default="medium", index=True)  # "easy", "medium", "hard"
    subject = Column(String, default="Biology", nullable=False)
    grade = Column(String, default="Class 6", nullable=False)
    explanation = Column(Text, nullable=True)  # Cached AI or fallback explanation

    is_active = Column(Boolean, default=True, index=True)
    usage_count = Column(Integer, default=0)
    is_ai_generated = Column(Boolean, default=False, index=True)
    generated_for = Column(String, nullable=True)  # User the question was generated for (kept after user deletion)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Quiz(Base):
    """One quiz attempt. Questions are snapshotted into QuizQuestion rows at start."""
    __tablename__ = "quizzes"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_type = Column(String, nullable=False)  # "initial" or "adaptive"
    total_questions = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, default=0)
    score = Column(Integer, default=0)  # 0-100
    topic_wise_analysis = Column(JSON, default=dict)  # topic -> {correct, total, percentage}
    time_taken = Column(Integer, default=0)  # Total seconds
    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True, index=True)
    is_completed = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="quizzes")
    items = relationship(
        "QuizQuestion",
        back_populates="quiz",
        order_by="QuizQuestion.position",
        cascade="all, delete-orphan",
    )


class QuizQuestion(Base):
    """Frozen copy of a question as it was when the quiz started, plus the user's answer."""
    __tablename__ = "quiz_questions"

    id = Column(String, primary_key=True, default=generate_uuid)
    quiz_id = Column(String, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    question_id = Column(String, nullable=False, index=True)

    # Snapshot
    question_text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    correct_answer = Column(String, nullable=False)
    topic = Column(String, nullable=False)

    # Answer
    user_answer = Column(String, nullable=True)
    is_correct = Column(Boolean, default=False)
    time_taken = Column(Integer, default=0)
    explanation_requested = Column(Boolean, default=False)
    explanation = Column(Text, nullable=True)

    # Relationships
    quiz = relationship("Quiz", back_populates="items")


class OneTimePassword(Base):
    """Login passcode. Only the SHA-256 hash of the code is stored."""
    __tablename__ = "one_time_passwords"

    id = Column(String, primary_key=True, default=generate_uuid)
    email = Column(String, nullable=False, index=True)
    code_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    expires_at = Column(DateTime, nullable=False)
    is_used = Column(Boolean, default=False)
    attempts = Column(Integer, default=0)


class EmailLog(Base):
    """Audit trail of every email the platform tries to send"""
    __tablename__ = "email_logs"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=True, index=True)
    email_type = Column(String, nullable=False, index=True)  # "otp", "welcome", "test"
    recipient_email = Column(String, nullable=False, index=True)
    subject = Column(String, nullable=False)
    provider = Column(String, default="resend")
    status = Column(String, default="queued")  # "queued", "sent", "failed"
    provider_message_id = Column(String, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    sent_at = Column(DateTime, nullable=True)
