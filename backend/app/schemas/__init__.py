"""
Quiz Learner Schemas Package

Pydantic models for request/response validation and curriculum enums.
"""

from app.schemas.quiz import (
    # Enums
    Topic,
    TOPICS,
    Difficulty,
    QuizType,
    UserRole,

    # Envelope
    ApiResponse,
    CamelModel,
)

__all__ = [
    "Topic",
    "TOPICS",
    "Difficulty",
    "QuizType",
    "UserRole",
    "ApiResponse",
    "CamelModel",
]
