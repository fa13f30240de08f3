"""
Admin Router
Handles account management and platform-wide statistics. Every endpoint
requires the admin role.
"""
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies.auth import get_admin_user
from app.dependencies.services import get_question_bank
from app.models.models import Quiz, User
from app.routers.users import average_score, completed_quizzes_page, quiz_summary
from app.schemas.quiz import ApiResponse, UserRole, WeakTopic
from app.schemas.user import (
    AddUserRequest,
    QuestionCounts,
    QuizCounts,
    QuizPagination,
    StatisticsData,
    TopicCount,
    UpdateStatusRequest,
    UserBrief,
    UserCounts,
    UserData,
    UserDetailData,
    UserDetailStatistics,
    UserListData,
    UserListItem,
    UserListStatistics,
    UserOut,
    UserPagination,
    UserReportsData,
)
from app.services.auth import normalize_email
from app.services.email import get_email_service
from app.services.openai_service import get_openai_service
from app.services.question_bank import QuestionBank
from app.services.weakness import get_weak_topics, round_half_up

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)

RECENT_HISTORY_ENTRIES = 10


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# ==================== User Management ====================

@router.get("/users", response_model=ApiResponse[UserListData])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Literal["all", "user", "admin"] = Query("all"),
    status_filter: Literal["all", "active", "inactive"] = Query("all", alias="status"),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Paginated user list, newest accounts first."""
    query = db.query(User)
    if role != "all":
        query = query.filter(User.role == role)
    if status_filter != "all":
        query = query.filter(User.is_active == (status_filter == "active"))

    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()

    items = []
    for user in users:
        history = user.quiz_history or []
        items.append(UserListItem(
            id=user.id,
            email=user.email,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at,
            statistics=UserListStatistics(
                total_quizzes=len(history),
                average_score=average_score(history),
                last_quiz_date=history[-1].get("completedAt") if history else None,
            ),
        ))

    return ApiResponse(data=UserListData(
        users=items,
        pagination=UserPagination(total_users=total, **UserPagination.values(page, limit, total)),
    ))


@router.post("/user/add", response_model=ApiResponse[UserData], status_code=status.HTTP_201_CREATED)
async def add_user(
    request: AddUserRequest,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Create an account and send a welcome email. Email failures do not undo the account."""
    email = normalize_email(request.email)

    if db.query(User).filter(User.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

    user = User(email=email, role=request.role.value, is_active=True,
                quiz_history=[], overall_weakness={})
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} created {user.role} account {user.id}")

    sent = await get_email_service().send_welcome_email(db, user)
    if not sent:
        logger.warning(f"Welcome email to {email} was not delivered")

    return ApiResponse(
        message="User created successfully",
        data=UserData(user=UserOut.model_validate(user, from_attributes=True))
    )


@router.get("/user/{user_id}", response_model=ApiResponse[UserDetailData])
def get_user_detail(
    user_id: str,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    user = get_user_or_404(db, user_id)
    history = user.quiz_history or []

    return ApiResponse(data=UserDetailData(
        user=UserOut.model_validate(user, from_attributes=True),
        statistics=UserDetailStatistics(
            total_quizzes=len(history),
            average_score=average_score(history),
            weak_topics=[WeakTopic(**item) for item in get_weak_topics(user.overall_weakness)],
            quiz_history=history[-RECENT_HISTORY_ENTRIES:],
        ),
    ))


@router.put("/user/{user_id}/status", response_model=ApiResponse[UserData])
def update_user_status(
    user_id: str,
    request: UpdateStatusRequest,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Activate or deactivate an account. Inactive users cannot log in."""
    if not isinstance(request.is_active, bool):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="isActive must be a boolean value"
        )

    user = get_user_or_404(db, user_id)
    user.is_active = request.is_active
    db.commit()
    db.refresh(user)

    action = "activated" if user.is_active else "deactivated"
    logger.info(f"Admin {admin.id} {action} user {user.id}")
    return ApiResponse(
        message=f"User {action} successfully",
        data=UserData(user=UserOut.model_validate(user, from_attributes=True))
    )


@router.delete("/user/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: str,
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Delete an account together with all of its quizzes."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )

    user = get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()

    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return ApiResponse(message="User and all associated data deleted successfully")


@router.get("/user/{user_id}/reports", response_model=ApiResponse[UserReportsData])
def get_user_reports(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """A user's completed quizzes, newest first."""
    user = get_user_or_404(db, user_id)
    quizzes, total = completed_quizzes_page(db, user.id, page, limit)

    return ApiResponse(data=UserReportsData(
        user=UserBrief(id=user.id, email=user.email, role=user.role),
        quizzes=[quiz_summary(q) for q in quizzes],
        pagination=QuizPagination(total_quizzes=total, **QuizPagination.values(page, limit, total)),
    ))


# ==================== Statistics ====================

@router.get("/statistics", response_model=ApiResponse[StatisticsData])
def get_statistics(
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db),
    bank: QuestionBank = Depends(get_question_bank)
):
    """Platform totals. User counts cover the student role only."""
    students = db.query(User).filter(User.role == UserRole.USER.value)
    total_users = students.count()
    active_users = students.filter(User.is_active == True).count()  # noqa: E712
    total_admins = db.query(User).filter(User.role == UserRole.ADMIN.value).count()

    completed = db.query(Quiz).filter(Quiz.is_completed == True)  # noqa: E712
    total_quizzes = completed.count()
    mean_score = db.query(func.avg(Quiz.score)).filter(Quiz.is_completed == True).scalar()  # noqa: E712

    return ApiResponse(data=StatisticsData(
        users=UserCounts(
            total=total_users,
            active=active_users,
            inactive=total_users - active_users,
            admins=total_admins,
        ),
        quizzes=QuizCounts(
            total=total_quizzes,
            average_score=round_half_up(float(mean_score)) if mean_score is not None else 0,
        ),
        questions=QuestionCounts(
            total=bank.count_active(),
            by_topic=[TopicCount(**row) for row in bank.topic_distribution()],
        ),
        ai_service=get_openai_service().get_status(),
    ))
