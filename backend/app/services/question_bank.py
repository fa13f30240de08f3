"""
Question Bank

Catalog of biology questions with the sampling primitives the adaptive
selector is built on:

- sample(n, topics, exclude_ids): uniform random active questions, tolerant
  of undersupply (returns what exists, never raises)
- by_topic(topic, limit): active questions of one topic in creation order
- record_usage(ids): one atomic UPDATE incrementing usage_count
- add_questions(candidates): validated insertion (seed data, AI output)

Questions are never physically deleted; they are soft-deactivated.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from app.models.models import Question
from app.schemas.quiz import TOPICS, Difficulty

logger = logging.getLogger(__name__)

DIFFICULTIES = {d.value for d in Difficulty}


class QuestionValidationError(ValueError):
    """Raised when question data violates the question invariants"""
    pass


def validate_question_data(data: Dict) -> Dict:
    """
    Validate and normalise raw question data.

    Rules:
    - question text and chapter are required
    - at least 2 options, all non-empty and distinct
    - correct answer must be one of the options
    - topic must be one of the 8 curriculum topics
    - difficulty must be easy/medium/hard (defaults to medium)

    Returns:
        Normalised dict with snake_case keys ready for Question(**data)

    Raises:
        QuestionValidationError: On the first violated rule
    """
    question_text = (data.get("question_text") or data.get("questionText") or "").strip()
    if not question_text:
        raise QuestionValidationError("Question text is required")

    options = data.get("options")
    if not isinstance(options, list) or len(options) < 2:
        raise QuestionValidationError("Question must have at least 2 options")
    if not all(isinstance(option, str) and option.strip() for option in options):
        raise QuestionValidationError("Options must be non-empty strings")
    options = [option.strip() for option in options]
    if len(set(options)) != len(options):
        raise QuestionValidationError("Options must be distinct")

    correct_answer = data.get("correct_answer") or data.get("correctAnswer") or ""
    correct_answer = correct_answer.strip() if isinstance(correct_answer, str) else ""
    if not correct_answer:
        raise QuestionValidationError("Correct answer is required")
    if correct_answer not in options:
        raise QuestionValidationError("Correct answer must be one of the provided options")

    topic = data.get("topic")
    if topic not in TOPICS:
        raise QuestionValidationError(f"Unknown topic: {topic}")

    chapter = (data.get("chapter") or "").strip()
    if not chapter:
        raise QuestionValidationError("Chapter is required")

    difficulty = data.get("difficulty") or Difficulty.MEDIUM.value
    if difficulty not in DIFFICULTIES:
        raise QuestionValidationError(f"Unknown difficulty: {difficulty}")

    return {
        "question_text": question_text,
        "options": options,
        "correct_answer": correct_answer,
        "topic": topic,
        "chapter": chapter,
        "difficulty": difficulty,
    }


class QuestionBank:
    """Sampling and bookkeeping over the active question catalog."""

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.db = db
        self.logger = logger or logging.getLogger(__name__)

    def _active(self):
        return self.db.query(Question).filter(Question.is_active == True)  # noqa: E712

    def sample(
        self,
        n: int,
        topics: Optional[Iterable[str]] = None,
        exclude_ids: Optional[Iterable[str]] = None
    ) -> List[Question]:
        """
        Up to n uniformly random active questions.

        Args:
            n: Maximum number of questions to return
            topics: Restrict to these topics (None or empty = all topics)
            exclude_ids: Question IDs that must not be returned
        """
        if n <= 0:
            return []

        query = self._active()

        topics = list(topics) if topics else []
        if topics:
            query = query.filter(Question.topic.in_(topics))

        exclude_ids = list(exclude_ids) if exclude_ids else []
        if exclude_ids:
            query = query.filter(Question.id.notin_(exclude_ids))

        return query.order_by(func.random()).limit(n).all()

    def by_topic(self, topic: str, limit: Optional[int] = None) -> List[Question]:
        """Active questions for one topic, oldest first."""
        query = self._active().filter(Question.topic == topic).order_by(
            Question.created_at, Question.id
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def get(self, question_id: str) -> Optional[Question]:
        return self.db.query(Question).filter(Question.id == question_id).first()

    def record_usage(self, question_ids: Iterable[str]) -> int:
        """Atomically increment usage_count for each id. Returns rows touched."""
        ids = list(question_ids)
        if not ids:
            return 0

        return self.db.query(Question).filter(Question.id.in_(ids)).update(
            {Question.usage_count: Question.usage_count + 1},
            synchronize_session=False
        )

    def count_active(self) -> int:
        return self._active().count()

    def topic_distribution(self) -> List[Dict]:
        """Active question count per topic, largest first."""
        count = func.count(Question.id)
        rows = self.db.query(Question.topic, count).filter(
            Question.is_active == True  # noqa: E712
        ).group_by(Question.topic).order_by(desc(count)).all()

        return [{"topic": topic, "count": total} for topic, total in rows]

    def find_by_texts(self, texts: Iterable[str]) -> Dict[str, Question]:
        """Active questions keyed by question text, oldest row per text."""
        texts = list({text.strip() for text in texts if text and text.strip()})
        if not texts:
            return {}

        rows = self._active().filter(Question.question_text.in_(texts)).order_by(
            Question.created_at, Question.id
        ).all()

        found: Dict[str, Question] = {}
        for question in rows:
            found.setdefault(question.question_text, question)
        return found

    def add_questions(
        self,
        candidates: Iterable[Dict],
        ai_generated: bool = False,
        generated_for: Optional[str] = None
    ) -> List[Question]:
        """
        Validate and persist question candidates.

        Invalid candidates are logged and skipped, as are candidates whose
        text is already in the active bank or earlier in the same batch.
        The session is flushed so the returned rows have ids; committing is
        left to the caller.
        """
        valid = []
        for candidate in candidates:
            try:
                valid.append(validate_question_data(candidate))
            except QuestionValidationError as e:
                self.logger.warning(f"Skipping invalid question candidate: {e}")

        seen = set(self.find_by_texts(data["question_text"] for data in valid))
        saved = []
        for data in valid:
            if data["question_text"] in seen:
                self.logger.info(f"Skipping duplicate question: {data['question_text'][:60]}")
                continue
            seen.add(data["question_text"])

            question = Question(
                **data,
                is_active=True,
                usage_count=0,
                is_ai_generated=ai_generated,
                generated_for=generated_for,
            )
            self.db.add(question)
            saved.append(question)

        if saved:
            self.db.flush()
            self.logger.info(
                f"Added {len(saved)} questions to the bank (ai_generated={ai_generated})"
            )

        return saved
