"""
Tests for the AI gateway and the OpenAI service wrapper.

All model calls are mocked; nothing here touches the network.
"""

import json
from unittest.mock import patch

import pytest

from app.services.ai_gateway import (
    DEFAULT_KEY_TOPIC,
    FALLBACK_RECOMMENDATION,
    AIGateway,
    extract_key_topic,
    fallback_explanation,
    fallback_questions,
    is_valid_generated_question,
    parse_generated_questions,
)
from app.services.openai_service import (
    AINotConfiguredError,
    AIServiceError,
    CircuitBreakerOpenError,
    OpenAIService,
)
from app.utils.api_retry import CircuitState, RetryConfig
from tests.conftest import create_question
from tests.mocks.openai_mocks import (
    MOCK_EXPLANATION,
    MOCK_GENERATED_QUESTIONS,
    FakeChatService,
    MockOpenAIClient,
    generated_questions_response,
    mock_openai_completion,
)


class TestFallbacks:

    def test_key_topic_uses_first_matching_keyword(self):
        assert extract_key_topic("Which blood vessel leaves the heart?") == \
            "circulation and the cardiovascular system"
        assert extract_key_topic("What is a tadpole?") == DEFAULT_KEY_TOPIC

    def test_fallback_explanation_names_correct_option(self):
        text = fallback_explanation(
            "Which organ pumps blood?", ["Lungs", "Heart", "Liver", "Kidney"], "Heart"
        )

        assert text.startswith("Correct Answer: B. Heart")
        assert "- A. Lungs" in text
        assert "- B. Heart" not in text
        assert "Study Tip:" in text

    def test_fallback_questions_follow_weak_topic_order(self):
        questions = fallback_questions(["Reproduction", "Animal Diversity", "Human Body Systems"], 2)

        assert [q["topic"] for q in questions] == ["Reproduction", "Animal Diversity"]
        assert all(q["correct_answer"] in q["options"] for q in questions)


class TestGeneratedQuestionParsing:

    def test_valid_candidate(self):
        assert is_valid_generated_question(MOCK_GENERATED_QUESTIONS[0])

    @pytest.mark.parametrize("change", [
        {"options": ["A", "B", "C"]},
        {"options": ["A", "A", "B", "C"]},
        {"correctAnswer": "Spleen"},
        {"topic": "Chemistry"},
        {"difficulty": "extreme"},
        {"chapter": ""},
    ])
    def test_invalid_candidates(self, change):
        assert not is_valid_generated_question({**MOCK_GENERATED_QUESTIONS[0], **change})

    def test_code_fences_are_stripped(self):
        parsed = parse_generated_questions(generated_questions_response(fenced=True))

        assert len(parsed) == 3
        assert parsed[0]["question_text"] == "Which organ pumps blood around the body?"
        assert parsed[0]["correct_answer"] == "Heart"

    def test_invalid_items_are_dropped(self):
        bad = {**MOCK_GENERATED_QUESTIONS[1], "correctAnswer": "Sunlight"}
        parsed = parse_generated_questions(json.dumps([MOCK_GENERATED_QUESTIONS[0], bad]))

        assert len(parsed) == 1

    def test_non_array_is_rejected(self):
        with pytest.raises(ValueError):
            parse_generated_questions('{"questionText": "not a list"}')


class TestExplain:

    def test_cached_explanation_skips_the_model(self, db):
        question = create_question(db, explanation="Already explained.")
        service = FakeChatService()

        explanation, source = AIGateway(service=service).explain(question)

        assert (explanation, source) == ("Already explained.", "cached")
        assert service.calls == []

    def test_generated_explanation_is_stored_on_question(self, db):
        question = create_question(db)
        service = FakeChatService(responses=[MOCK_EXPLANATION])

        explanation, source = AIGateway(service=service).explain(question)

        assert source == "generated"
        assert explanation == MOCK_EXPLANATION
        assert question.explanation == MOCK_EXPLANATION
        assert service.calls[0]["max_tokens"] == 500

    def test_model_failure_uses_fallback(self, db):
        question = create_question(
            db, text="Which organ pumps blood?",
            options=["Lungs", "Heart", "Liver", "Kidney"], correct_answer="Heart"
        )

        explanation, source = AIGateway(service=FakeChatService()).explain(question)

        assert source == "generated"
        assert explanation.startswith("Correct Answer: B. Heart")
        assert question.explanation == explanation


class TestGenerateForWeakTopics:

    def test_returns_parsed_questions_up_to_count(self):
        service = FakeChatService(responses=[generated_questions_response()])

        questions = AIGateway(service=service).generate_for_weak_topics(
            [{"topic": "Human Body Systems", "weaknessScore": 80}], count=2
        )

        assert len(questions) == 2
        assert questions[0]["topic"] == "Human Body Systems"
        assert "weakness score: 80%" in service.calls[0]["messages"][1]["content"]

    def test_unparseable_response_falls_back(self):
        service = FakeChatService(responses=["Sorry, I cannot do that."])

        questions = AIGateway(service=service).generate_for_weak_topics(["Reproduction"], count=3)

        assert [q["topic"] for q in questions] == ["Reproduction"]

    def test_model_failure_falls_back(self):
        questions = AIGateway(service=FakeChatService()).generate_for_weak_topics(
            ["Reproduction", "Animal Diversity"], count=5
        )

        assert [q["topic"] for q in questions] == ["Reproduction", "Animal Diversity"]

    def test_no_topics_means_no_questions(self):
        service = FakeChatService(responses=[generated_questions_response()])

        assert AIGateway(service=service).generate_for_weak_topics([], count=3) == []
        assert service.calls == []


class TestStudyRecommendations:

    def test_prompt_includes_performance(self):
        service = FakeChatService(responses=["Study plan text"])

        text = AIGateway(service=service).study_recommendations({
            "score": 62,
            "weak_topics": [{"topic": "Reproduction", "percentage": 30}],
            "strong_topics": [],
            "quizzes_taken": 4,
        })

        prompt = service.calls[0]["messages"][1]["content"]
        assert text == "Study plan text"
        assert "Overall Score: 62%" in prompt
        assert "Reproduction (30%)" in prompt
        assert "Number of quizzes taken: 4" in prompt

    def test_failure_returns_fixed_recommendation(self):
        text = AIGateway(service=FakeChatService()).study_recommendations({"score": 50})

        assert text == FALLBACK_RECOMMENDATION


class TestOpenAIService:

    @pytest.fixture
    def mock_client(self):
        client = MockOpenAIClient()
        with patch("app.services.openai_service.get_openai_client", return_value=client):
            yield client

    @pytest.fixture
    def fast_config(self):
        return RetryConfig(max_retries=1, initial_delay=0.0, max_delay=0.0, jitter_factor=0.0, failure_threshold=2)

    def test_returns_stripped_content(self, mock_client):
        service = OpenAIService()

        text = service.chat_completion([{"role": "user", "content": "Explain photosynthesis"}])

        assert text == MOCK_EXPLANATION
        assert service.metrics["successful_calls"] == 1

    def test_missing_key_is_not_retried(self, mock_client, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY")

        with pytest.raises(AINotConfiguredError):
            OpenAIService().chat_completion([{"role": "user", "content": "hi"}])

        assert mock_client.chat.completions.call_count == 0

    def test_empty_content_is_an_error(self, mock_client):
        with patch.object(
            mock_client.chat.completions, "create", return_value=mock_openai_completion("   ")
        ):
            with pytest.raises(AIServiceError):
                OpenAIService().chat_completion([{"role": "user", "content": "hi"}])

    def test_repeated_failures_open_the_circuit(self, mock_client, fast_config):
        service = OpenAIService(config=fast_config)
        mock_client.chat.completions.fail_next(*[Exception("503 Service Unavailable")] * 2)

        with pytest.raises(AIServiceError):
            service.chat_completion([{"role": "user", "content": "hi"}])

        assert mock_client.chat.completions.call_count == 2

        assert service.circuit_breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitBreakerOpenError):
            service.chat_completion([{"role": "user", "content": "hi"}])
        assert service.metrics["rejected_calls"] == 1
        assert service.get_status()["circuit_breaker"]["state"] == "open"
