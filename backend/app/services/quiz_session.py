"""
Quiz Session Service

Lifecycle of one quiz attempt: in_progress -> completed (one-way).

start()     selects questions, snapshots them into QuizQuestion rows and
            records usage on the bank
complete()  records answers, scores the attempt, flips it to completed with
            a conditional UPDATE, then folds the topic analysis into the
            user's weakness map and quiz history in the same transaction
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.models import Quiz, QuizQuestion, User
from app.schemas.quiz import AnswerIn, QuizType
from app.services.adaptive import AdaptiveSelector, QuizPlan, is_initial_quiz, recent_question_ids
from app.services.weakness import round_half_up, update_weakness

logger = logging.getLogger(__name__)

WEAK_PERCENTAGE_THRESHOLD = 60
STRONG_PERCENTAGE_THRESHOLD = 80

NEXT_QUIZ_WEAK_MESSAGE = "Your next quiz will focus on your weak areas to help you improve."
NEXT_QUIZ_STRONG_MESSAGE = "Great job! Keep practicing to maintain your performance."


class QuizSessionError(Exception):
    """Base exception for quiz lifecycle errors"""
    pass


class QuizNotFoundError(QuizSessionError):
    """No quiz with that id, owned by that user, in the required state"""
    pass


class QuizAlreadyCompletedError(QuizSessionError):
    """The quiz was completed by another request first"""
    pass


class NoQuestionsAvailableError(QuizSessionError):
    """The question bank has no active questions"""
    pass


def calculate_score(correct_answers: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    return round_half_up(correct_answers / total_questions * 100)


def compute_topic_analysis(items: Iterable[QuizQuestion]) -> Dict[str, Dict]:
    """
    Per-topic {correct, total, percentage} over the quiz's own questions,
    keyed in order of first appearance.
    """
    analysis: Dict[str, Dict] = {}
    for item in items:
        entry = analysis.setdefault(item.topic, {"correct": 0, "total": 0, "percentage": 0})
        entry["total"] += 1
        if item.is_correct:
            entry["correct"] += 1

    for entry in analysis.values():
        entry["percentage"] = round_half_up(entry["correct"] / entry["total"] * 100)

    return analysis


def performance_summary(quiz: Quiz) -> Dict:
    """Score plus weak (< 60%, ascending) and strong (>= 80%, descending) topics."""
    weak_topics = []
    strong_topics = []
    for topic, analysis in (quiz.topic_wise_analysis or {}).items():
        if analysis["percentage"] < WEAK_PERCENTAGE_THRESHOLD:
            weak_topics.append({"topic": topic, "percentage": analysis["percentage"]})
        elif analysis["percentage"] >= STRONG_PERCENTAGE_THRESHOLD:
            strong_topics.append({"topic": topic, "percentage": analysis["percentage"]})

    return {
        "score": quiz.score,
        "correct_answers": quiz.correct_answers,
        "total_questions": quiz.total_questions,
        "weak_topics": sorted(weak_topics, key=lambda t: t["percentage"]),
        "strong_topics": sorted(strong_topics, key=lambda t: t["percentage"], reverse=True),
        "time_taken": quiz.time_taken,
    }


def next_quiz_message(summary: Dict) -> str:
    return NEXT_QUIZ_WEAK_MESSAGE if summary["weak_topics"] else NEXT_QUIZ_STRONG_MESSAGE


class QuizSessionService:
    """Starts, answers and completes quizzes for one database session."""

    def __init__(
        self,
        db: Session,
        selector: AdaptiveSelector,
        logger: Optional[logging.Logger] = None
    ):
        self.db = db
        self.selector = selector
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    def start(self, user: User) -> Tuple[Quiz, QuizPlan]:
        """
        Create an in-progress quiz for the user.

        Raises:
            NoQuestionsAvailableError: If nothing could be selected
        """
        recent_ids = set() if is_initial_quiz(user) else recent_question_ids(self.db, user.id)
        plan = self.selector.plan(user, recent_ids=recent_ids)

        if not plan.questions:
            raise NoQuestionsAvailableError("No questions are available right now")

        quiz = Quiz(
            user_id=user.id,
            quiz_type=plan.quiz_type.value,
            total_questions=len(plan.questions),
            started_at=datetime.utcnow(),
            is_completed=False,
        )
        quiz.items = [
            QuizQuestion(
                position=position,
                question_id=question.id,
                question_text=question.question_text,
                options=list(question.options),
                correct_answer=question.correct_answer,
                topic=question.topic,
            )
            for position, question in enumerate(plan.questions)
        ]
        self.db.add(quiz)

        self.selector.bank.record_usage([q.id for q in plan.questions])
        self.db.commit()
        self.db.refresh(quiz)

        self.logger.info(
            f"Started {quiz.quiz_type} quiz {quiz.id} for user {user.id} "
            f"with {quiz.total_questions} questions"
        )
        return quiz, plan

    # ------------------------------------------------------------------
    # Answers and completion
    # ------------------------------------------------------------------

    def record_answers(self, quiz: Quiz, answers: Iterable[AnswerIn]) -> int:
        """
        Apply answers to an in-progress quiz. Unknown question ids are ignored.

        Returns:
            Number of answers matched to a quiz question
        """
        if quiz.is_completed:
            raise QuizAlreadyCompletedError(f"Quiz {quiz.id} is already completed")

        items_by_question = {}
        for item in quiz.items:
            items_by_question.setdefault(item.question_id, item)

        matched = 0
        for answer in answers:
            item = items_by_question.get(answer.question_id)
            if item is None:
                self.logger.debug(f"Ignoring answer for unknown question {answer.question_id}")
                continue

            item.user_answer = answer.user_answer
            item.is_correct = bool(answer.user_answer) and answer.user_answer == item.correct_answer
            item.time_taken = answer.time_taken or 0
            matched += 1

        return matched

    def complete(
        self,
        quiz_id: str,
        user: User,
        answers: List[AnswerIn],
        total_time: int = 0
    ) -> Quiz:
        """
        Score and close a quiz, then update the user's weakness map.

        Raises:
            QuizNotFoundError: Quiz missing, owned by someone else, or already completed
            QuizAlreadyCompletedError: Lost the race against a concurrent submit
        """
        quiz = self.db.query(Quiz).filter(
            Quiz.id == quiz_id,
            Quiz.user_id == user.id,
            Quiz.is_completed == False  # noqa: E712
        ).first()

        if not quiz:
            raise QuizNotFoundError("Quiz not found or already completed")

        self.record_answers(quiz, answers)
        self.db.flush()

        correct_answers = sum(1 for item in quiz.items if item.is_correct)
        analysis = compute_topic_analysis(quiz.items)
        score = calculate_score(correct_answers, quiz.total_questions)
        completed_at = datetime.utcnow()

        # Only one submit may flip is_completed; the loser sees zero rows updated
        updated = self.db.query(Quiz).filter(
            Quiz.id == quiz.id,
            Quiz.is_completed == False  # noqa: E712
        ).update(
            {
                Quiz.is_completed: True,
                Quiz.completed_at: completed_at,
                Quiz.correct_answers: correct_answers,
                Quiz.score: score,
                Quiz.topic_wise_analysis: analysis,
                Quiz.time_taken: total_time or 0,
            },
            synchronize_session=False
        )
        if updated == 0:
            raise QuizAlreadyCompletedError(f"Quiz {quiz.id} was already completed")

        self.db.refresh(quiz)

        user.overall_weakness = update_weakness(user.overall_weakness, analysis)
        user.quiz_history = list(user.quiz_history or []) + [{
            "quizId": quiz.id,
            "score": score,
            "totalQuestions": quiz.total_questions,
            "correctAnswers": correct_answers,
            "topicWiseAnalysis": analysis,
            "completedAt": completed_at.isoformat(),
        }]
        self.db.commit()
        self.db.refresh(quiz)

        self.logger.info(
            f"Completed quiz {quiz.id} for user {user.id}: "
            f"{correct_answers}/{quiz.total_questions} ({score}%)"
        )
        return quiz

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_owned(self, quiz_id: str, user: User, completed: Optional[bool] = None) -> Quiz:
        """Quiz by id for its owner, optionally restricted by completion state."""
        query = self.db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.user_id == user.id)
        if completed is not None:
            query = query.filter(Quiz.is_completed == completed)

        quiz = query.first()
        if not quiz:
            raise QuizNotFoundError("Quiz not found")
        return quiz

    def status(self, quiz_id: str, user: User) -> Dict:
        quiz = self.get_owned(quiz_id, user)
        return {
            "id": quiz.id,
            "is_completed": quiz.is_completed,
            "started_at": quiz.started_at,
            "completed_at": quiz.completed_at,
            "quiz_type": QuizType(quiz.quiz_type),
            "total_questions": quiz.total_questions,
        }

    def report(self, quiz_id: str, user: User) -> Dict:
        """Full review of a completed quiz, correct answers included."""
        quiz = self.get_owned(quiz_id, user, completed=True)
        summary = performance_summary(quiz)

        return {
            "quiz": {
                "id": quiz.id,
                "quiz_type": QuizType(quiz.quiz_type),
                "completed_at": quiz.completed_at,
                **summary,
            },
            "topic_analysis": quiz.topic_wise_analysis or {},
            "questions": [
                {
                    "question_id": item.question_id,
                    "question_text": item.question_text,
                    "options": item.options,
                    "correct_answer": item.correct_answer,
                    "user_answer": item.user_answer,
                    "is_correct": item.is_correct,
                    "topic": item.topic,
                    "explanation_requested": item.explanation_requested,
                }
                for item in quiz.items
            ],
        }

    def mark_explanation_requested(
        self,
        quiz_id: str,
        user: User,
        question_id: str,
        explanation: str
    ) -> bool:
        """
        Flag a quiz question as explained. Silently does nothing when the quiz
        or question does not match. The caller commits.
        """
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.user_id == user.id).first()
        if not quiz:
            return False

        for item in quiz.items:
            if item.question_id == question_id:
                item.explanation_requested = True
                item.explanation = explanation
                return True
        return False
