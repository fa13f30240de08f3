"""
Quiz Schemas

Enumerations for the curriculum and pydantic models for the quiz API.
Wire format is camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================

class Topic(str, Enum):
    """The 8 fixed Class 6 Biology curriculum topics, in curriculum order."""
    HUMAN_BODY_SYSTEMS = "Human Body Systems"
    PLANT_STRUCTURE = "Plant Structure and Function"
    ANIMAL_DIVERSITY = "Animal Diversity"
    NUTRITION = "Nutrition and Digestion"
    RESPIRATION = "Respiration and Circulation"
    GROWTH = "Growth and Development"
    REPRODUCTION = "Reproduction"
    ADAPTATION = "Environmental Adaptation"


TOPICS: List[str] = [topic.value for topic in Topic]


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizType(str, Enum):
    INITIAL = "initial"
    ADAPTIVE = "adaptive"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


# =============================================================================
# BASE MODELS
# =============================================================================

class CamelModel(BaseModel):
    """Accepts and emits camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope used by every successful response."""
    success: bool = True
    message: str = ""
    data: Optional[DataT] = None


# =============================================================================
# QUIZ START
# =============================================================================

class QuizQuestionOut(CamelModel):
    """A question as shown to the student. Never carries the correct answer."""
    id: str
    question_number: int
    question_text: str
    options: List[str]
    topic: str


class QuizStartData(CamelModel):
    id: str
    quiz_type: QuizType
    total_questions: int
    started_at: datetime
    has_ai_questions: bool = Field(default=False, alias="hasAIQuestions")
    questions: List[QuizQuestionOut]


# =============================================================================
# QUIZ SUBMIT
# =============================================================================

class AnswerIn(CamelModel):
    question_id: str
    user_answer: Optional[str] = None
    time_taken: int = Field(default=0, ge=0)


class SubmitQuizRequest(CamelModel):
    quiz_id: str = Field(..., min_length=1)
    answers: List[AnswerIn]
    time_taken: int = Field(default=0, ge=0)


class TopicPercentage(CamelModel):
    topic: str
    percentage: int


class QuizResult(CamelModel):
    id: str
    quiz_type: QuizType
    completed_at: Optional[datetime] = None
    score: int
    correct_answers: int
    total_questions: int
    weak_topics: List[TopicPercentage]
    strong_topics: List[TopicPercentage]
    time_taken: int


class Recommendations(CamelModel):
    weak_topics: List[TopicPercentage]
    strong_topics: List[TopicPercentage]
    next_quiz_message: str


class SubmitQuizData(CamelModel):
    quiz: QuizResult
    recommendations: Recommendations


# =============================================================================
# STATUS / INFO / EXPLAIN / GENERATE
# =============================================================================

class QuizStatus(CamelModel):
    id: str
    is_completed: bool
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    quiz_type: QuizType
    total_questions: int


class QuizStatusData(CamelModel):
    quiz: QuizStatus


class ExplainRequest(CamelModel):
    question_id: str = Field(..., min_length=1)
    quiz_id: Optional[str] = None


class ExplanationData(CamelModel):
    explanation: str
    source: Literal["cached", "generated"]


class UserStats(CamelModel):
    total_quizzes_taken: int
    average_score: int


class QuizInfoData(CamelModel):
    quiz_type: QuizType
    question_count: int
    total_questions: int
    focus_areas: List[str]
    user_stats: UserStats


class GeneratedQuestionOut(CamelModel):
    id: str
    question_text: str
    topic: str
    difficulty: str


class GenerateQuestionsData(CamelModel):
    questions_generated: int
    weak_topics: List[str]
    questions: List[GeneratedQuestionOut]


class WeakTopic(CamelModel):
    topic: str
    weakness_score: int


# =============================================================================
# REPORT / DIAGNOSTICS
# =============================================================================

class TopicAnalysis(CamelModel):
    correct: int
    total: int
    percentage: int


class ReportQuestion(CamelModel):
    question_id: str
    question_text: str
    options: List[str]
    correct_answer: str
    user_answer: Optional[str] = None
    is_correct: bool
    topic: str
    explanation_requested: bool = False


class QuizReportData(CamelModel):
    quiz: QuizResult
    topic_analysis: Dict[str, TopicAnalysis]
    questions: List[ReportQuestion]


class DebugRecentQuiz(CamelModel):
    id: str
    type: QuizType
    score: int
    completed_at: Optional[datetime] = None
    question_count: int


class DebugQuestionsData(CamelModel):
    total_questions: int
    recent_quiz_count: int
    recent_question_ids: int
    unique_recent_questions: int
    weak_topics: List[str]
    user_quiz_history: int
    recent_quizzes: List[DebugRecentQuiz]
