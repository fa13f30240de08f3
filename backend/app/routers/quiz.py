"""
Quiz Router

Quiz lifecycle for the signed-in student:
- POST /start                 initial or adaptive quiz, chosen automatically
- POST /submit                score the quiz, update weak topics
- GET  /status/{quiz_id}      progress of one quiz
- POST /question/explain      explanation for a question (cached per question)
- GET  /info                  preview of the next quiz
- POST /generate-questions    AI questions for the user's weak topics
- GET  /debug/questions       selection diagnostics (admin)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies.auth import get_admin_user, get_current_user
from app.dependencies.services import get_ai_gateway, get_question_bank, get_quiz_service
from app.models.models import Quiz, QuizQuestion, User
from app.schemas.quiz import (
    ApiResponse,
    DebugQuestionsData,
    DebugRecentQuiz,
    ExplainRequest,
    ExplanationData,
    GeneratedQuestionOut,
    GenerateQuestionsData,
    QuizInfoData,
    QuizQuestionOut,
    QuizResult,
    QuizStartData,
    QuizStatus,
    QuizStatusData,
    QuizType,
    Recommendations,
    SubmitQuizData,
    SubmitQuizRequest,
    UserStats,
)
from app.services.adaptive import RECENT_QUIZ_WINDOW
from app.services.ai_gateway import AIGateway
from app.services.question_bank import QuestionBank
from app.services.quiz_session import (
    NoQuestionsAvailableError,
    QuizAlreadyCompletedError,
    QuizNotFoundError,
    QuizSessionService,
    next_quiz_message,
    performance_summary,
)
from app.services.weakness import get_weak_topics, round_half_up

router = APIRouter(prefix="/api/quiz", tags=["quiz"])
logger = logging.getLogger(__name__)

MIN_GENERATED_QUESTIONS = 3
MAX_GENERATED_QUESTIONS = 5


def user_stats(user: User) -> UserStats:
    history = user.quiz_history or []
    average = round_half_up(sum(entry["score"] for entry in history) / len(history)) if history else 0
    return UserStats(total_quizzes_taken=len(history), average_score=average)


@router.post("/start", response_model=ApiResponse[QuizStartData], status_code=status.HTTP_201_CREATED)
def start_quiz(
    current_user: User = Depends(get_current_user),
    service: QuizSessionService = Depends(get_quiz_service)
):
    """Start the user's next quiz. Correct answers are never included."""
    try:
        quiz, plan = service.start(current_user)
    except NoQuestionsAvailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    data = QuizStartData(
        id=quiz.id,
        quiz_type=QuizType(quiz.quiz_type),
        total_questions=quiz.total_questions,
        started_at=quiz.started_at,
        has_ai_questions=plan.ai_generated_count > 0,
        questions=[
            QuizQuestionOut(
                id=item.question_id,
                question_number=item.position + 1,
                question_text=item.question_text,
                options=item.options,
                topic=item.topic,
            )
            for item in quiz.items
        ],
    )
    return ApiResponse(message=f"{quiz.quiz_type.capitalize()} quiz started successfully", data=data)


@router.post("/submit", response_model=ApiResponse[SubmitQuizData])
def submit_quiz(
    request: SubmitQuizRequest,
    current_user: User = Depends(get_current_user),
    service: QuizSessionService = Depends(get_quiz_service)
):
    """Record answers, score the quiz and update the user's weak topics."""
    try:
        quiz = service.complete(request.quiz_id, current_user, request.answers, request.time_taken)
    except (QuizNotFoundError, QuizAlreadyCompletedError) as e:
        logger.info(f"Rejected submit of quiz {request.quiz_id} by user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz not found or already completed"
        )

    summary = performance_summary(quiz)
    return ApiResponse(
        message="Quiz submitted successfully",
        data=SubmitQuizData(
            quiz=QuizResult(
                id=quiz.id,
                quiz_type=QuizType(quiz.quiz_type),
                completed_at=quiz.completed_at,
                **summary
            ),
            recommendations=Recommendations(
                weak_topics=summary["weak_topics"],
                strong_topics=summary["strong_topics"],
                next_quiz_message=next_quiz_message(summary),
            ),
        ),
    )


@router.get("/status/{quiz_id}", response_model=ApiResponse[QuizStatusData])
def get_quiz_status(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    service: QuizSessionService = Depends(get_quiz_service)
):
    try:
        quiz_status = service.status(quiz_id, current_user)
    except QuizNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")

    return ApiResponse(data=QuizStatusData(quiz=QuizStatus(**quiz_status)))


@router.post("/question/explain", response_model=ApiResponse[ExplanationData])
def explain_question(
    request: ExplainRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    bank: QuestionBank = Depends(get_question_bank),
    gateway: AIGateway = Depends(get_ai_gateway),
    service: QuizSessionService = Depends(get_quiz_service)
):
    """
    Explanation for a question. Generated once, then served from the
    question for every later request. Passing quizId marks the question as
    explained in that quiz.
    """
    question = bank.get(request.question_id)
    if not question:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")

    explanation, source = gateway.explain(question)

    if request.quiz_id:
        service.mark_explanation_requested(request.quiz_id, current_user, question.id, explanation)

    db.commit()
    return ApiResponse(data=ExplanationData(explanation=explanation, source=source))


@router.get("/info", response_model=ApiResponse[QuizInfoData])
def get_quiz_info(
    current_user: User = Depends(get_current_user),
    bank: QuestionBank = Depends(get_question_bank),
    service: QuizSessionService = Depends(get_quiz_service)
):
    """Preview of the next quiz: type, size and focus topics."""
    preview = service.selector.preview(current_user)

    return ApiResponse(data=QuizInfoData(
        quiz_type=preview["quiz_type"],
        question_count=preview["question_count"],
        total_questions=bank.count_active(),
        focus_areas=preview["focus_areas"],
        user_stats=user_stats(current_user),
    ))


@router.post(
    "/generate-questions",
    response_model=ApiResponse[GenerateQuestionsData],
    status_code=status.HTTP_201_CREATED
)
def generate_questions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    bank: QuestionBank = Depends(get_question_bank),
    gateway: AIGateway = Depends(get_ai_gateway)
):
    """Add 3-5 AI-written questions for the user's weak topics to the bank."""
    weak_topics = get_weak_topics(current_user.overall_weakness)
    if not weak_topics:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No weak topics identified. Take a quiz first to identify areas for improvement."
        )

    count = min(MAX_GENERATED_QUESTIONS, max(MIN_GENERATED_QUESTIONS, len(weak_topics)))
    candidates = gateway.generate_for_weak_topics(weak_topics, count)
    saved = bank.add_questions(candidates, ai_generated=True, generated_for=current_user.id)

    if not saved:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate questions. Please try again later."
        )

    db.commit()
    topic_names = [item["topic"] for item in weak_topics]
    logger.info(f"Generated {len(saved)} questions for user {current_user.id} ({topic_names})")

    return ApiResponse(
        message=f"Generated {len(saved)} new questions for your weak topics",
        data=GenerateQuestionsData(
            questions_generated=len(saved),
            weak_topics=topic_names,
            questions=[
                GeneratedQuestionOut(
                    id=q.id, question_text=q.question_text, topic=q.topic, difficulty=q.difficulty
                )
                for q in saved
            ],
        ),
    )


@router.get("/debug/questions", response_model=ApiResponse[DebugQuestionsData])
def debug_question_selection(
    user_id: Optional[str] = Query(None, alias="userId"),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db),
    bank: QuestionBank = Depends(get_question_bank)
):
    """What the adaptive selector would see for a user (admin only)."""
    user = db.query(User).filter(User.id == (user_id or admin.id)).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    recent_quizzes = db.query(Quiz).filter(
        Quiz.user_id == user.id,
        Quiz.is_completed == True  # noqa: E712
    ).order_by(Quiz.completed_at.desc()).limit(RECENT_QUIZ_WINDOW).all()

    recent_ids = [
        row.question_id
        for row in db.query(QuizQuestion.question_id).filter(
            QuizQuestion.quiz_id.in_([q.id for q in recent_quizzes])
        ).all()
    ] if recent_quizzes else []

    return ApiResponse(data=DebugQuestionsData(
        total_questions=bank.count_active(),
        recent_quiz_count=len(recent_quizzes),
        recent_question_ids=len(recent_ids),
        unique_recent_questions=len(set(recent_ids)),
        weak_topics=[item["topic"] for item in get_weak_topics(user.overall_weakness)],
        user_quiz_history=len(user.quiz_history or []),
        recent_quizzes=[
            DebugRecentQuiz(
                id=q.id,
                type=QuizType(q.quiz_type),
                score=q.score or 0,
                completed_at=q.completed_at,
                question_count=q.total_questions,
            )
            for q in recent_quizzes
        ],
    ))
