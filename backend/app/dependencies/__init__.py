"""
FastAPI Dependencies for Quiz Learner
"""

from app.dependencies.auth import (
    get_current_user,
    get_admin_user,
)
from app.dependencies.services import (
    get_ai_gateway,
    get_question_bank,
    get_quiz_service,
)

__all__ = [
    "get_current_user",
    "get_admin_user",
    "get_ai_gateway",
    "get_question_bank",
    "get_quiz_service",
]
