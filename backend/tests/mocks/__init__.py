"""
Mock infrastructure for Quiz Learner testing.
Provides deterministic mocks for OpenAI and other external services.
"""

from .openai_mocks import (
    MOCK_EXPLANATION,
    MOCK_GENERATED_QUESTIONS,
    MOCK_RECOMMENDATIONS,
    MockOpenAIClient,
    MockChatCompletion,
    FakeChatService,
    mock_openai_completion,
    generated_questions_response,
)

__all__ = [
    "MOCK_EXPLANATION",
    "MOCK_GENERATED_QUESTIONS",
    "MOCK_RECOMMENDATIONS",
    "MockOpenAIClient",
    "MockChatCompletion",
    "FakeChatService",
    "mock_openai_completion",
    "generated_questions_response",
]
