# Services module

# Question catalog and quiz selection
from app.services.question_bank import (
    QuestionBank,
    QuestionValidationError,
    validate_question_data,
)
from app.services.adaptive import (
    AdaptiveSelector,
    QuizPlan,
    is_initial_quiz,
)
from app.services.weakness import (
    update_weakness,
    get_weak_topics,
)

# Quiz lifecycle
from app.services.quiz_session import (
    QuizSessionService,
    QuizSessionError,
    QuizNotFoundError,
    QuizAlreadyCompletedError,
    NoQuestionsAvailableError,
)

# AI integration
from app.services.ai_gateway import AIGateway
from app.services.openai_service import (
    OpenAIService,
    AIServiceError,
    get_openai_service,
)

__all__ = [
    "QuestionBank",
    "QuestionValidationError",
    "validate_question_data",
    "AdaptiveSelector",
    "QuizPlan",
    "is_initial_quiz",
    "update_weakness",
    "get_weak_topics",
    "QuizSessionService",
    "QuizSessionError",
    "QuizNotFoundError",
    "QuizAlreadyCompletedError",
    "NoQuestionsAvailableError",
    "AIGateway",
    "OpenAIService",
    "AIServiceError",
    "get_openai_service",
]
