"""
Adaptive Question Selection

Assembles the question set for a new quiz:

1. Initial quiz (user has no quiz history): 3 questions from each of the
   8 topics, topped up with random questions if a topic runs short.
2. Adaptive quiz: 60% of the quiz drawn from the user's weak topics
   (capped at 15), the rest from the whole bank. Questions used in the
   user's 2 most recent completed quizzes are avoided. If the bank cannot
   fill the quiz, a few questions are generated for the weak topics and
   then the recency exclusion is relaxed.

The final list is shuffled.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from app.models.models import Quiz, QuizQuestion, Question, User
from app.schemas.quiz import TOPICS, QuizType
from app.services.question_bank import QuestionBank
from app.services.weakness import get_weak_topics

logger = logging.getLogger(__name__)

INITIAL_QUESTIONS_PER_TOPIC = 3
INITIAL_QUIZ_SIZE = INITIAL_QUESTIONS_PER_TOPIC * len(TOPICS)
ADAPTIVE_QUIZ_SIZE = 20
RECENT_QUIZ_WINDOW = 2
WEAK_TOPIC_SHARE = 0.6
MAX_WEAK_TOPIC_QUESTIONS = 15
AI_BACKFILL_LIMIT = 3
FOCUS_AREA_COUNT = 3


@dataclass
class QuizPlan:
    """Outcome of one selection run."""
    quiz_type: QuizType
    questions: List[Question]
    weak_topics: List[str] = field(default_factory=list)
    recent_ids: Set[str] = field(default_factory=set)
    ai_generated_count: int = 0


def is_initial_quiz(user: User) -> bool:
    return not user.quiz_history


def recent_question_ids(db: Session, user_id: str, window: int = RECENT_QUIZ_WINDOW) -> Set[str]:
    """Question IDs used in the user's most recently completed quizzes."""
    recent_quizzes = db.query(Quiz.id).filter(
        Quiz.user_id == user_id,
        Quiz.is_completed == True  # noqa: E712
    ).order_by(Quiz.completed_at.desc()).limit(window).all()

    quiz_ids = [row.id for row in recent_quizzes]
    if not quiz_ids:
        return set()

    rows = db.query(QuizQuestion.question_id).filter(
        QuizQuestion.quiz_id.in_(quiz_ids)
    ).all()
    return {row.question_id for row in rows}


class AdaptiveSelector:
    """
    Builds question sets from a QuestionBank.

    The AI gateway is optional; without it the AI backfill step is skipped.
    """

    def __init__(
        self,
        bank: QuestionBank,
        gateway=None,
        logger: Optional[logging.Logger] = None,
        rng: Optional[random.Random] = None
    ):
        self.bank = bank
        self.gateway = gateway
        self.logger = logger or logging.getLogger(__name__)
        self.rng = rng or random.Random()

    def plan(self, user: User, recent_ids: Optional[Set[str]] = None) -> QuizPlan:
        """Select questions for the user's next quiz."""
        if is_initial_quiz(user):
            questions = self.select_initial()
            self.rng.shuffle(questions)
            return QuizPlan(quiz_type=QuizType.INITIAL, questions=questions)

        weak_topics = [item["topic"] for item in get_weak_topics(user.overall_weakness)]
        recent_ids = set(recent_ids or ())

        questions, ai_count = self.select_adaptive(weak_topics, recent_ids, user_id=user.id)
        self.rng.shuffle(questions)

        return QuizPlan(
            quiz_type=QuizType.ADAPTIVE,
            questions=questions,
            weak_topics=weak_topics,
            recent_ids=recent_ids,
            ai_generated_count=ai_count,
        )

    def select_initial(self) -> List[Question]:
        """3 questions per topic in curriculum order, topped up to 24 at random."""
        questions = []
        for topic in TOPICS:
            questions.extend(self.bank.by_topic(topic, limit=INITIAL_QUESTIONS_PER_TOPIC))

        if len(questions) < INITIAL_QUIZ_SIZE:
            shortfall = INITIAL_QUIZ_SIZE - len(questions)
            questions.extend(self.bank.sample(shortfall, exclude_ids=_ids(questions)))

        self.logger.info(f"Initial quiz: selected {len(questions)}/{INITIAL_QUIZ_SIZE} questions")
        return questions

    def select_adaptive(
        self,
        weak_topics: List[str],
        recent_ids: Set[str],
        user_id: Optional[str] = None
    ) -> Tuple[List[Question], int]:
        """
        Returns (questions, number of AI-generated questions added).
        """
        self.logger.info(
            f"Adaptive quiz: weak topics={weak_topics}, excluding {len(recent_ids)} recent questions"
        )

        if not weak_topics:
            questions = self.bank.sample(ADAPTIVE_QUIZ_SIZE, exclude_ids=recent_ids)
            if len(questions) < ADAPTIVE_QUIZ_SIZE:
                questions.extend(self.bank.sample(
                    ADAPTIVE_QUIZ_SIZE - len(questions),
                    exclude_ids=_ids(questions)
                ))
            self.logger.info(f"Adaptive quiz (no weak topics): selected {len(questions)} questions")
            return questions, 0

        weak_target = math.floor(ADAPTIVE_QUIZ_SIZE * WEAK_TOPIC_SHARE)
        weak_questions = self.bank.sample(
            min(weak_target, MAX_WEAK_TOPIC_QUESTIONS),
            topics=weak_topics,
            exclude_ids=recent_ids
        )
        general_questions = self.bank.sample(
            ADAPTIVE_QUIZ_SIZE - weak_target,
            exclude_ids=recent_ids | _ids(weak_questions)
        )
        questions = weak_questions + general_questions

        self.logger.info(
            f"Adaptive quiz: {len(weak_questions)} weak-topic + "
            f"{len(general_questions)} general questions"
        )

        ai_count = 0
        if len(questions) < ADAPTIVE_QUIZ_SIZE:
            generated = self._ai_backfill(
                weak_topics,
                min(ADAPTIVE_QUIZ_SIZE - len(questions), AI_BACKFILL_LIMIT),
                user_id,
                exclude_ids=_ids(questions)
            )
            ai_count = len(generated)
            questions.extend(generated)

        if len(questions) < ADAPTIVE_QUIZ_SIZE:
            relaxed = self.bank.sample(ADAPTIVE_QUIZ_SIZE - len(questions), exclude_ids=_ids(questions))
            self.logger.info(f"Relaxed recency exclusion: added {len(relaxed)} questions")
            questions.extend(relaxed)

        return questions, ai_count

    def _ai_backfill(
        self,
        weak_topics: List[str],
        count: int,
        user_id: Optional[str],
        exclude_ids: Set[str]
    ) -> List[Question]:
        """
        Generated questions for the weak topics. A candidate whose text is
        already in the bank reuses that row (unless it is already selected)
        instead of being stored again.
        """
        if self.gateway is None or count <= 0:
            return []

        try:
            candidates = self.gateway.generate_for_weak_topics(weak_topics, count)[:count]
            existing = self.bank.find_by_texts(_candidate_text(c) for c in candidates)

            reused = [q for q in existing.values() if q.id not in exclude_ids]

            saved = self.bank.add_questions(
                [c for c in candidates if _candidate_text(c) not in existing],
                ai_generated=True,
                generated_for=user_id
            )
            self.logger.info(
                f"AI backfill: {len(saved)} new and {len(reused)} existing questions for weak topics"
            )
            return reused + saved
        except Exception as e:
            self.logger.warning(f"AI backfill failed, continuing without it: {e}")
            return []

    def preview(self, user: User) -> Dict:
        """What the user's next quiz will look like, without selecting anything."""
        if is_initial_quiz(user):
            return {
                "quiz_type": QuizType.INITIAL,
                "question_count": INITIAL_QUIZ_SIZE,
                "focus_areas": [],
            }

        weak_topics = [item["topic"] for item in get_weak_topics(user.overall_weakness)]
        return {
            "quiz_type": QuizType.ADAPTIVE,
            "question_count": ADAPTIVE_QUIZ_SIZE,
            "focus_areas": weak_topics[:FOCUS_AREA_COUNT],
        }


def _ids(questions: List[Question]) -> Set[str]:
    return {q.id for q in questions}


def _candidate_text(candidate: Dict) -> str:
    return (candidate.get("question_text") or candidate.get("questionText") or "").strip()
