"""
Tests for adaptive question selection.

The selector only depends on the bank's sampling contract, so most tests
run against an in-memory bank.
"""

import random
from types import SimpleNamespace
from typing import Dict, List
from unittest.mock import MagicMock

from app.schemas.quiz import TOPICS, QuizType
from app.services.adaptive import (
    ADAPTIVE_QUIZ_SIZE,
    INITIAL_QUIZ_SIZE,
    AdaptiveSelector,
    recent_question_ids,
)
from tests.conftest import create_question, create_user


class InMemoryBank:
    """List-backed bank honouring the QuestionBank sampling contract"""

    def __init__(self, questions, rng=None):
        self.questions = list(questions)
        self.added: List[Dict] = []
        self.rng = rng

    def sample(self, n, topics=None, exclude_ids=None):
        if n <= 0:
            return []
        exclude_ids = set(exclude_ids or ())
        pool = [
            q for q in self.questions
            if q.id not in exclude_ids and (not topics or q.topic in topics)
        ]
        if self.rng is not None:
            self.rng.shuffle(pool)
        return pool[:n]

    def by_topic(self, topic, limit=None):
        matches = [q for q in self.questions if q.topic == topic]
        return matches[:limit] if limit else matches

    def find_by_texts(self, texts):
        texts = set(texts)
        found = {}
        for q in self.questions:
            if q.question_text in texts:
                found.setdefault(q.question_text, q)
        return found

    def add_questions(self, candidates, ai_generated=False, generated_for=None):
        saved = []
        for candidate in candidates:
            question = SimpleNamespace(
                id=f"ai-{len(self.questions)}", topic=candidate["topic"],
                question_text=candidate["question_text"], ai_generated=ai_generated
            )
            self.questions.append(question)
            self.added.append(candidate)
            saved.append(question)
        return saved


def make_questions(per_topic: int, topics=TOPICS) -> List[SimpleNamespace]:
    return [
        SimpleNamespace(id=f"{topic[:4]}-{i}", topic=topic, question_text=f"{topic} question {i}?")
        for topic in topics
        for i in range(per_topic)
    ]


def make_user(history=None, weakness=None):
    return SimpleNamespace(id="user-1", quiz_history=history or [], overall_weakness=weakness or {})


WEAK_USER = make_user(
    history=[{"score": 40}],
    weakness={
        "Reproduction": {"weaknessScore": 80, "strengthScore": 20, "totalAttempts": 1},
        "Animal Diversity": {"weaknessScore": 70, "strengthScore": 30, "totalAttempts": 1},
        "Human Body Systems": {"weaknessScore": 20, "strengthScore": 80, "totalAttempts": 1},
    },
)


def selector_for(bank, gateway=None):
    return AdaptiveSelector(bank, gateway=gateway, rng=random.Random(7))


class TestInitialQuiz:

    def test_three_questions_from_every_topic(self):
        selector = selector_for(InMemoryBank(make_questions(per_topic=5)))

        plan = selector.plan(make_user())

        assert plan.quiz_type == QuizType.INITIAL
        assert len(plan.questions) == INITIAL_QUIZ_SIZE == 24
        for topic in TOPICS:
            assert sum(1 for q in plan.questions if q.topic == topic) == 3

    def test_short_topic_is_topped_up_from_other_topics(self):
        questions = make_questions(per_topic=5, topics=TOPICS[1:]) + make_questions(1, topics=TOPICS[:1])
        selector = selector_for(InMemoryBank(questions))

        plan = selector.plan(make_user())

        assert len(plan.questions) == 24
        assert len({q.id for q in plan.questions}) == 24

    def test_small_bank_returns_what_exists(self):
        selector = selector_for(InMemoryBank(make_questions(per_topic=1)))

        assert len(selector.plan(make_user()).questions) == 8


class TestAdaptiveQuiz:

    def test_twelve_weak_plus_eight_general(self):
        weak_pool = make_questions(per_topic=10, topics=["Reproduction", "Animal Diversity"])
        general_pool = make_questions(per_topic=10, topics=["Human Body Systems", "Nutrition and Digestion"])
        # General questions first so an unfiltered sample cannot pick weak ones by accident
        selector = selector_for(InMemoryBank(general_pool + weak_pool))

        questions, ai_count = selector.select_adaptive(
            ["Reproduction", "Animal Diversity"], recent_ids=set()
        )

        weak = [q for q in questions if q.topic in ("Reproduction", "Animal Diversity")]
        assert len(questions) == ADAPTIVE_QUIZ_SIZE == 20
        assert len(weak) == 12
        assert ai_count == 0

    def test_general_draw_never_repeats_weak_selection(self):
        # Exactly 12 weak-topic questions and 8 elsewhere: only one valid quiz exists
        questions = (
            make_questions(per_topic=12, topics=["Reproduction"])
            + make_questions(per_topic=4, topics=["Human Body Systems", "Animal Diversity"])
        )

        for seed in range(10):
            bank = InMemoryBank(questions, rng=random.Random(seed))
            selected, _ = selector_for(bank).select_adaptive(["Reproduction"], recent_ids=set())

            assert len(selected) == 20
            assert len({q.id for q in selected}) == 20
            assert sum(1 for q in selected if q.topic == "Reproduction") == 12

    def test_no_duplicates_and_recent_questions_avoided(self):
        questions = make_questions(per_topic=6)
        recent = {q.id for q in questions[:10]}
        selector = selector_for(InMemoryBank(questions))

        plan = selector.plan(WEAK_USER, recent_ids=recent)

        ids = [q.id for q in plan.questions]
        assert plan.quiz_type == QuizType.ADAPTIVE
        assert len(ids) == 20
        assert len(set(ids)) == 20
        assert not recent & set(ids)
        assert plan.weak_topics == ["Reproduction", "Animal Diversity"]

    def test_recency_is_relaxed_when_bank_is_small(self):
        questions = make_questions(per_topic=2, topics=TOPICS)  # 16 questions
        recent = {q.id for q in questions}
        selector = selector_for(InMemoryBank(questions))

        questions_out, _ = selector.select_adaptive([], recent_ids=recent)

        assert len(questions_out) == 16

    def test_ai_backfill_adds_at_most_three(self):
        questions = make_questions(per_topic=1, topics=TOPICS)  # 8 questions
        bank = InMemoryBank(questions)
        gateway = MagicMock()
        gateway.generate_for_weak_topics.return_value = [
            {"topic": "Reproduction", "question_text": f"Generated {i}?"} for i in range(5)
        ]
        selector = selector_for(bank, gateway=gateway)

        questions_out, ai_count = selector.select_adaptive(["Reproduction"], recent_ids=set(), user_id="u1")

        gateway.generate_for_weak_topics.assert_called_once_with(["Reproduction"], 3)
        assert ai_count == 3
        assert len(questions_out) == 11
        assert len({q.id for q in questions_out}) == 11

    def test_ai_backfill_reuses_questions_already_in_bank(self):
        questions = make_questions(per_topic=1, topics=TOPICS)
        canned = SimpleNamespace(id="canned-1", topic="Reproduction", question_text="Canned question?")
        bank = InMemoryBank(questions + [canned])
        gateway = MagicMock()
        gateway.generate_for_weak_topics.return_value = [
            {"topic": "Reproduction", "question_text": "Canned question?"},
            {"topic": "Reproduction", "question_text": "Brand new question?"},
        ]
        selector = selector_for(bank, gateway=gateway)

        generated = selector._ai_backfill(["Reproduction"], 3, "u1", exclude_ids=set())

        assert [q.question_text for q in generated] == ["Canned question?", "Brand new question?"]
        assert generated[0] is canned
        assert [c["question_text"] for c in bank.added] == ["Brand new question?"]

    def test_ai_backfill_skips_copies_already_selected(self):
        canned = SimpleNamespace(id="canned-1", topic="Reproduction", question_text="Canned question?")
        bank = InMemoryBank([canned])
        gateway = MagicMock()
        gateway.generate_for_weak_topics.return_value = [
            {"topic": "Reproduction", "question_text": "Canned question?"},
        ]
        selector = selector_for(bank, gateway=gateway)

        generated = selector._ai_backfill(["Reproduction"], 3, "u1", exclude_ids={"canned-1"})

        assert generated == []
        assert bank.added == []

    def test_ai_failure_does_not_break_selection(self):
        bank = InMemoryBank(make_questions(per_topic=1))
        gateway = MagicMock()
        gateway.generate_for_weak_topics.side_effect = RuntimeError("model down")
        selector = selector_for(bank, gateway=gateway)

        questions, ai_count = selector.select_adaptive(["Reproduction"], recent_ids=set())

        assert ai_count == 0
        assert len(questions) == 8

    def test_no_weak_topics_samples_whole_bank(self):
        selector = selector_for(InMemoryBank(make_questions(per_topic=5)))

        plan = selector.plan(make_user(history=[{"score": 95}]))

        assert plan.quiz_type == QuizType.ADAPTIVE
        assert plan.weak_topics == []
        assert len(plan.questions) == 20


class TestPreview:

    def test_initial_preview(self):
        preview = selector_for(InMemoryBank([])).preview(make_user())

        assert preview == {"quiz_type": QuizType.INITIAL, "question_count": 24, "focus_areas": []}

    def test_adaptive_preview_lists_top_three_weak_topics(self):
        weakness = {
            topic: {"weaknessScore": 90 - i, "strengthScore": 10 + i, "totalAttempts": 1}
            for i, topic in enumerate(TOPICS[:5])
        }
        preview = selector_for(InMemoryBank([])).preview(make_user(history=[{"score": 10}], weakness=weakness))

        assert preview["quiz_type"] == QuizType.ADAPTIVE
        assert preview["question_count"] == 20
        assert preview["focus_areas"] == TOPICS[:3]


class TestRecentQuestionIds:

    def test_only_the_two_latest_completed_quizzes_count(self, db):
        from datetime import datetime, timedelta
        from app.models.models import Quiz, QuizQuestion

        user = create_user(db)
        question = create_question(db)
        now = datetime.utcnow()

        for offset, marker, completed in [(3, "old", True), (2, "mid", True), (1, "new", True), (0, "open", False)]:
            quiz = Quiz(
                user_id=user.id, quiz_type="adaptive", total_questions=1,
                is_completed=completed, completed_at=now - timedelta(hours=offset) if completed else None,
            )
            quiz.items = [QuizQuestion(
                position=0, question_id=f"{marker}-q", question_text=question.question_text,
                options=question.options, correct_answer=question.correct_answer, topic=question.topic,
            )]
            db.add(quiz)
        db.commit()

        assert recent_question_ids(db, user.id) == {"new-q", "mid-q"}
