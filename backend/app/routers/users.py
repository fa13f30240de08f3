"""
User Router

Self-service endpoints for the signed-in student: profile, history,
quiz reports, study recommendations and account deletion.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies.auth import get_current_user
from app.dependencies.services import get_ai_gateway, get_quiz_service
from app.models.models import Quiz, User
from app.schemas.quiz import ApiResponse, QuizReportData, TopicPercentage, WeakTopic
from app.schemas.user import (
    PerformanceData,
    ProfileData,
    ProfileStatistics,
    QuizHistoryData,
    QuizPagination,
    QuizSummary,
    StudyRecommendationsData,
    UserOut,
)
from app.services.ai_gateway import AIGateway
from app.services.quiz_session import (
    STRONG_PERCENTAGE_THRESHOLD,
    QuizNotFoundError,
    QuizSessionService,
)
from app.services.weakness import get_weak_topics, round_half_up

router = APIRouter(prefix="/api/user", tags=["user"])
logger = logging.getLogger(__name__)

NO_HISTORY_RECOMMENDATION = (
    "Start taking quizzes to get personalized study recommendations based on your performance."
)
RECOMMENDATION_QUIZ_WINDOW = 5
RECOMMENDATION_WEAK_TOPICS = 3


def average_score(history) -> int:
    if not history:
        return 0
    return round_half_up(sum(entry["score"] for entry in history) / len(history))


def quiz_summary(quiz: Quiz) -> QuizSummary:
    return QuizSummary(
        id=quiz.id,
        quiz_type=quiz.quiz_type,
        score=quiz.score or 0,
        correct_answers=quiz.correct_answers or 0,
        total_questions=quiz.total_questions,
        topic_wise_analysis=quiz.topic_wise_analysis or {},
        time_taken=quiz.time_taken or 0,
        started_at=quiz.started_at,
        completed_at=quiz.completed_at,
    )


def completed_quizzes_page(db: Session, user_id: str, page: int, limit: int):
    """One page of a user's completed quizzes, newest first, plus the total count."""
    query = db.query(Quiz).filter(
        Quiz.user_id == user_id,
        Quiz.is_completed == True  # noqa: E712
    )
    total = query.count()
    quizzes = query.order_by(Quiz.completed_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return quizzes, total


@router.get("/profile", response_model=ApiResponse[ProfileData])
def get_profile(current_user: User = Depends(get_current_user)):
    history = current_user.quiz_history or []

    return ApiResponse(data=ProfileData(
        user=UserOut.model_validate(current_user, from_attributes=True),
        statistics=ProfileStatistics(
            total_quizzes=len(history),
            average_score=average_score(history),
            weak_topics=[WeakTopic(**item) for item in get_weak_topics(current_user.overall_weakness)],
        ),
    ))


@router.get("/quiz-history", response_model=ApiResponse[QuizHistoryData])
def get_quiz_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Completed quizzes, newest first."""
    quizzes, total = completed_quizzes_page(db, current_user.id, page, limit)

    return ApiResponse(data=QuizHistoryData(
        quizzes=[quiz_summary(q) for q in quizzes],
        pagination=QuizPagination(total_quizzes=total, **QuizPagination.values(page, limit, total)),
    ))


@router.get("/quiz-report/{quiz_id}", response_model=ApiResponse[QuizReportData])
def get_quiz_report(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    service: QuizSessionService = Depends(get_quiz_service)
):
    """Question-by-question review of one of the user's completed quizzes."""
    try:
        report = service.report(quiz_id, current_user)
    except QuizNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz report not found")

    return ApiResponse(data=QuizReportData(**report))


@router.get("/study-recommendations", response_model=ApiResponse[StudyRecommendationsData])
def get_study_recommendations(
    current_user: User = Depends(get_current_user),
    gateway: AIGateway = Depends(get_ai_gateway)
):
    """
    Study plan written from the user's recent performance.

    Uses the last five quizzes for the score, the three weakest topics and
    every topic whose running strength has reached the strong threshold.
    """
    history = current_user.quiz_history or []
    if not history:
        return ApiResponse(data=StudyRecommendationsData(
            recommendations=NO_HISTORY_RECOMMENDATION,
            has_data=False,
        ))

    weakness = current_user.overall_weakness or {}
    weak_topics = [
        {"topic": item["topic"], "percentage": 100 - item["weaknessScore"]}
        for item in get_weak_topics(weakness)[:RECOMMENDATION_WEAK_TOPICS]
    ]
    strong_topics = sorted(
        (
            {"topic": topic, "percentage": entry["strengthScore"]}
            for topic, entry in weakness.items()
            if entry.get("strengthScore", 0) >= STRONG_PERCENTAGE_THRESHOLD
        ),
        key=lambda item: item["percentage"],
        reverse=True
    )

    performance = {
        "score": average_score(history[-RECOMMENDATION_QUIZ_WINDOW:]),
        "weak_topics": weak_topics,
        "strong_topics": strong_topics,
        "quizzes_taken": len(history),
    }
    recommendations = gateway.study_recommendations(performance)

    return ApiResponse(data=StudyRecommendationsData(
        recommendations=recommendations,
        performance_data=PerformanceData(
            score=performance["score"],
            weak_topics=[TopicPercentage(**t) for t in weak_topics],
            strong_topics=[TopicPercentage(**t) for t in strong_topics],
            quizzes_taken=performance["quizzes_taken"],
        ),
        has_data=True,
    ))


@router.delete("/delete-account", response_model=ApiResponse[None])
def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Permanently delete the account and every quiz that belongs to it."""
    user_id = current_user.id
    db.delete(current_user)
    db.commit()

    logger.info(f"User {user_id} deleted their account")
    return ApiResponse(message="Account and all associated data have been permanently deleted")
