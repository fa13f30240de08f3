"""
User and Admin Schemas

Response payloads for the profile, history and administration endpoints.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr

from app.schemas.quiz import CamelModel, QuizType, TopicPercentage, UserRole, WeakTopic


# =============================================================================
# PAGINATION
# =============================================================================

class Pagination(CamelModel):
    current_page: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @staticmethod
    def values(page: int, limit: int, total: int) -> Dict[str, Any]:
        return {
            "current_page": page,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "has_next": (page - 1) * limit + limit < total,
            "has_prev": page > 1,
        }


class UserPagination(Pagination):
    total_users: int


class QuizPagination(Pagination):
    total_quizzes: int


# =============================================================================
# USERS
# =============================================================================

class UserOut(CamelModel):
    id: str
    email: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None


class UserBrief(CamelModel):
    id: str
    email: str
    role: UserRole


class UserData(CamelModel):
    user: UserOut


class ProfileStatistics(CamelModel):
    total_quizzes: int
    average_score: int
    weak_topics: List[WeakTopic]


class ProfileData(CamelModel):
    user: UserOut
    statistics: ProfileStatistics


class UserListStatistics(CamelModel):
    total_quizzes: int
    average_score: int
    last_quiz_date: Optional[str] = None


class UserListItem(UserOut):
    statistics: UserListStatistics


class UserListData(CamelModel):
    users: List[UserListItem]
    pagination: UserPagination


class UserDetailStatistics(ProfileStatistics):
    quiz_history: List[Dict[str, Any]]


class UserDetailData(CamelModel):
    user: UserOut
    statistics: UserDetailStatistics


class AddUserRequest(BaseModel):
    email: EmailStr
    role: UserRole = UserRole.USER


class UpdateStatusRequest(CamelModel):
    # Checked in the handler so a non-boolean gets its own message
    is_active: Any = None


# =============================================================================
# QUIZ HISTORY / RECOMMENDATIONS
# =============================================================================

class QuizSummary(CamelModel):
    id: str
    quiz_type: QuizType
    score: int
    correct_answers: int
    total_questions: int
    topic_wise_analysis: Dict[str, Any]
    time_taken: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class QuizHistoryData(CamelModel):
    quizzes: List[QuizSummary]
    pagination: QuizPagination


class UserReportsData(CamelModel):
    user: UserBrief
    quizzes: List[QuizSummary]
    pagination: QuizPagination


class PerformanceData(CamelModel):
    score: int
    weak_topics: List[TopicPercentage]
    strong_topics: List[TopicPercentage]
    quizzes_taken: int


class StudyRecommendationsData(CamelModel):
    recommendations: str
    performance_data: Optional[PerformanceData] = None
    has_data: bool


# =============================================================================
# STATISTICS
# =============================================================================

class UserCounts(CamelModel):
    total: int
    active: int
    inactive: int
    admins: int


class QuizCounts(CamelModel):
    total: int
    average_score: int


class TopicCount(CamelModel):
    topic: str
    count: int


class QuestionCounts(CamelModel):
    total: int
    by_topic: List[TopicCount]


class StatisticsData(CamelModel):
    users: UserCounts
    quizzes: QuizCounts
    questions: QuestionCounts
    ai_service: Dict[str, Any]
