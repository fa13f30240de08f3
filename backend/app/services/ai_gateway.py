"""
AI Gateway

Language-model features of the quiz platform, each with a deterministic
fallback so the platform keeps working without an API key or when the
provider is down:

- explain(question): why the correct answer is right, cached on the question
- generate_for_weak_topics(topics, count): new questions for weak topics
- study_recommendations(performance): a short personalised study plan
"""

import json
import logging
import re
from typing import Dict, List, Optional, Tuple, Union

from app.models.models import Question
from app.schemas.quiz import TOPICS, Difficulty
from app.services.openai_service import AIServiceError, OpenAIService, get_openai_service

logger = logging.getLogger(__name__)

GENERATED_OPTION_COUNT = 4

EXPLANATION_SYSTEM_PROMPT = (
    "You are a helpful biology teacher for 6th-grade students. "
    "Provide clear, simple explanations that are easy to understand."
)

GENERATION_SYSTEM_PROMPT = (
    "You are an educational AI assistant specializing in creating biology quiz "
    "questions for middle school students. Always respond with valid JSON format."
)

RECOMMENDATION_SYSTEM_PROMPT = (
    "You are a supportive educational AI assistant specializing in personalized "
    "learning recommendations."
)

FALLBACK_RECOMMENDATION = (
    "Keep practicing and reviewing your weak topics. "
    "Focus on understanding concepts rather than memorizing answers."
)

# First matching keyword (in this order) names the concept in fallback explanations
TOPIC_KEYWORDS = [
    ("digestive", "digestion and the digestive system"),
    ("respiration", "respiration and breathing"),
    ("heart", "circulation and the cardiovascular system"),
    ("blood", "blood circulation and the circulatory system"),
    ("plant", "plant biology and botany"),
    ("leaf", "plant structure and photosynthesis"),
    ("root", "plant structure and nutrition"),
    ("flower", "plant reproduction"),
    ("animal", "animal biology and classification"),
    ("bird", "animal classification and characteristics"),
    ("mammal", "mammalian characteristics"),
    ("cell", "cell biology and structure"),
    ("bone", "skeletal system and bone structure"),
    ("muscle", "muscular system"),
    ("brain", "nervous system"),
    ("kidney", "excretory system"),
    ("nutrition", "nutrition and diet"),
    ("vitamin", "vitamins and nutrition"),
    ("protein", "nutrients and nutrition"),
]
DEFAULT_KEY_TOPIC = "this biology concept"

FALLBACK_QUESTIONS: Dict[str, List[Dict]] = {
    "Human Body Systems": [{
        "question_text": "Which system in the human body is responsible for breaking down food?",
        "options": ["Circulatory system", "Digestive system", "Respiratory system", "Nervous system"],
        "correct_answer": "Digestive system",
        "chapter": "Body Systems",
        "difficulty": "easy",
    }],
    "Plant Structure and Function": [{
        "question_text": "What do plants use to make their own food?",
        "options": ["Sunlight and water", "Sunlight, water and carbon dioxide", "Only soil", "Only sunlight"],
        "correct_answer": "Sunlight, water and carbon dioxide",
        "chapter": "Plant Nutrition",
        "difficulty": "medium",
    }],
    "Animal Diversity": [{
        "question_text": "Which characteristic is common to all mammals?",
        "options": ["They lay eggs", "They have fur or hair", "They live in water", "They are cold-blooded"],
        "correct_answer": "They have fur or hair",
        "chapter": "Mammal Characteristics",
        "difficulty": "easy",
    }],
    "Nutrition and Digestion": [{
        "question_text": "Which nutrient is most important for building muscles?",
        "options": ["Carbohydrates", "Proteins", "Fats", "Vitamins"],
        "correct_answer": "Proteins",
        "chapter": "Nutrients",
        "difficulty": "medium",
    }],
    "Respiration and Circulation": [{
        "question_text": "What is the main function of red blood cells?",
        "options": ["Fight infection", "Carry oxygen", "Help in clotting", "Produce hormones"],
        "correct_answer": "Carry oxygen",
        "chapter": "Blood Function",
        "difficulty": "easy",
    }],
    "Growth and Development": [{
        "question_text": "What is the correct order of a frog's life cycle?",
        "options": [
            "Egg → Adult → Tadpole",
            "Tadpole → Egg → Adult",
            "Egg → Tadpole → Adult",
            "Adult → Tadpole → Egg",
        ],
        "correct_answer": "Egg → Tadpole → Adult",
        "chapter": "Life Cycles",
        "difficulty": "medium",
    }],
    "Reproduction": [{
        "question_text": "What is the female reproductive part of a flower called?",
        "options": ["Stamen", "Pistil", "Petal", "Sepal"],
        "correct_answer": "Pistil",
        "chapter": "Plant Reproduction",
        "difficulty": "easy",
    }],
    "Environmental Adaptation": [{
        "question_text": "How do penguins stay warm in cold climates?",
        "options": ["Thick feathers and fat layer", "Flying to warm places", "Eating hot food", "Staying underwater"],
        "correct_answer": "Thick feathers and fat layer",
        "chapter": "Cold Adaptations",
        "difficulty": "easy",
    }],
}

_CODE_FENCE = re.compile(r"```(?:json)?\s*|\s*```")


def _option_letter(index: int) -> str:
    return chr(ord("A") + index)


def extract_key_topic(question_text: str) -> str:
    lowered = question_text.lower()
    for keyword, phrase in TOPIC_KEYWORDS:
        if keyword in lowered:
            return phrase
    return DEFAULT_KEY_TOPIC


def fallback_explanation(question_text: str, options: List[str], correct_answer: str) -> str:
    """Template explanation used when the model cannot be reached."""
    key_topic = extract_key_topic(question_text)
    correct_index = options.index(correct_answer) if correct_answer in options else 0

    lines = [
        f"Correct Answer: {_option_letter(correct_index)}. {correct_answer}",
        "",
        "Explanation:",
        f'The correct answer is "{correct_answer}" because it best answers the question about {key_topic}.',
        "",
        "Why other options are incorrect:",
    ]
    for index, option in enumerate(options):
        if option != correct_answer:
            lines.append(
                f"- {_option_letter(index)}. {option} - This is not the most accurate answer for this question."
            )
    lines.append("")
    lines.append(f"Study Tip: Review the concepts related to {key_topic} to better understand this topic.")
    return "\n".join(lines)


def fallback_questions(weak_topics: List[str], count: int) -> List[Dict]:
    """Canned questions for the weak topics, at most `count`, in weak-topic order."""
    questions = []
    for topic in weak_topics:
        for template in FALLBACK_QUESTIONS.get(topic, []):
            if len(questions) >= count:
                return questions
            questions.append({**template, "options": list(template["options"]), "topic": topic})
    return questions


def is_valid_generated_question(candidate: Dict) -> bool:
    """Generated questions need 4 distinct options with the answer among them."""
    if not isinstance(candidate, dict):
        return False

    options = candidate.get("options")
    if not isinstance(options, list) or len(options) != GENERATED_OPTION_COUNT:
        return False
    if not all(isinstance(option, str) and option.strip() for option in options):
        return False
    if len(set(options)) != len(options):
        return False

    question_text = candidate.get("questionText")
    chapter = candidate.get("chapter")
    return bool(
        isinstance(question_text, str) and question_text.strip()
        and candidate.get("correctAnswer") in options
        and candidate.get("topic") in TOPICS
        and isinstance(chapter, str) and chapter.strip()
        and candidate.get("difficulty") in {d.value for d in Difficulty}
    )


def parse_generated_questions(response_text: str) -> List[Dict]:
    """
    Parse the model's JSON array (markdown code fences tolerated) and keep
    only valid candidates, converted to snake_case keys.

    Raises:
        ValueError: If the response is not a JSON array
    """
    cleaned = _CODE_FENCE.sub("", response_text).strip()
    data = json.loads(cleaned)
    if not isinstance(data, list):
        raise ValueError("Expected a JSON array of questions")

    return [
        {
            "question_text": item["questionText"].strip(),
            "options": [option.strip() for option in item["options"]],
            "correct_answer": item["correctAnswer"].strip(),
            "topic": item["topic"],
            "chapter": item["chapter"].strip(),
            "difficulty": item["difficulty"],
        }
        for item in data
        if is_valid_generated_question(item)
    ]


def _topic_name(topic: Union[str, Dict]) -> str:
    return topic["topic"] if isinstance(topic, dict) else topic


class AIGateway:
    """Language-model features with fallbacks. Methods never raise on AI failure."""

    def __init__(
        self,
        service: Optional[OpenAIService] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.service = service or get_openai_service()
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Explanations
    # ------------------------------------------------------------------

    def explain(self, question: Question) -> Tuple[str, str]:
        """
        Explanation for a question and where it came from ("cached" or
        "generated"). A newly produced explanation is written onto the
        question; the caller commits.
        """
        if question.explanation:
            return question.explanation, "cached"

        try:
            explanation = self.service.chat_completion(
                messages=[
                    {"role": "system", "content": EXPLANATION_SYSTEM_PROMPT},
                    {"role": "user", "content": self._explanation_prompt(question)},
                ],
                max_tokens=500,
                temperature=0.7
            )
        except AIServiceError as e:
            self.logger.warning(f"Explanation generation failed for question {question.id}, using fallback: {e}")
            explanation = fallback_explanation(
                question.question_text, question.options, question.correct_answer
            )

        question.explanation = explanation
        return explanation, "generated"

    @staticmethod
    def _explanation_prompt(question: Question) -> str:
        options = "\n".join(
            f"{_option_letter(index)}. {option}" for index, option in enumerate(question.options)
        )
        return f"""You are an educational assistant for Class 6 Biology students. Please provide a clear, simple explanation for the following question:

Question: {question.question_text}

Options:
{options}

Correct Answer: {question.correct_answer}

Please explain:
1. Why the correct answer is right
2. Why the other options are incorrect (briefly)
3. Any helpful tips or additional information that would help a 6th-grade student understand this concept

Keep the explanation simple, engaging, and appropriate for a 12-year-old student."""

    # ------------------------------------------------------------------
    # Question generation
    # ------------------------------------------------------------------

    def generate_for_weak_topics(
        self,
        weak_topics: List[Union[str, Dict]],
        count: int = 5
    ) -> List[Dict]:
        """
        Candidate questions (snake_case dicts, not yet persisted) for the
        weak topics. Falls back to canned questions when the model fails
        or yields nothing usable.
        """
        topic_names = [_topic_name(topic) for topic in weak_topics]
        if count <= 0 or not topic_names:
            return []

        try:
            response_text = self.service.chat_completion(
                messages=[
                    {"role": "system", "content": GENERATION_SYSTEM_PROMPT},
                    {"role": "user", "content": self._generation_prompt(weak_topics, count)},
                ],
                max_tokens=1500,
                temperature=0.8
            )
            questions = parse_generated_questions(response_text)
        except AIServiceError as e:
            self.logger.warning(f"Question generation failed, using fallback questions: {e}")
            return fallback_questions(topic_names, count)
        except (ValueError, KeyError, AttributeError) as e:
            self.logger.error(f"Could not parse generated questions, using fallback questions: {e}")
            return fallback_questions(topic_names, count)

        if not questions:
            self.logger.warning("Model returned no valid questions, using fallback questions")
            return fallback_questions(topic_names, count)

        self.logger.info(f"Generated {len(questions)} valid questions for weak topics {topic_names}")
        return questions[:count]

    @staticmethod
    def _generation_prompt(weak_topics: List[Union[str, Dict]], count: int) -> str:
        topics_text = ", ".join(
            f"{topic['topic']} (weakness score: {topic['weaknessScore']}%)"
            if isinstance(topic, dict) and "weaknessScore" in topic
            else _topic_name(topic)
            for topic in weak_topics
        )
        return f"""You are an educational AI assistant creating quiz questions for Class 6 Biology students.

Create {count} multiple-choice questions focusing on these weak topics: {topics_text}

For each question, provide:
1. A clear, age-appropriate question text
2. Exactly 4 multiple choice options
3. The correct answer (must be one of the 4 options)
4. The topic from this list: {json.dumps(TOPICS)}
5. A relevant chapter name
6. Difficulty level: "easy", "medium", or "hard"

Requirements:
- Questions must be suitable for 6th grade students (age 11-12)
- Focus on the weak topics provided
- Use simple, clear language
- Each question should test understanding, not just memorization

Format your response as a JSON array with this exact structure:
[
  {{
    "questionText": "Your question here?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": "Option B",
    "topic": "Human Body Systems",
    "chapter": "Chapter Name",
    "difficulty": "easy"
  }}
]

Make sure the JSON is valid and properly formatted."""

    # ------------------------------------------------------------------
    # Study recommendations
    # ------------------------------------------------------------------

    def study_recommendations(self, performance: Dict) -> str:
        """
        Args:
            performance: {score, weak_topics, strong_topics, quizzes_taken}
                where the topic lists hold {topic, percentage} dicts
        """
        def describe(topics):
            return ", ".join(f"{t['topic']} ({t['percentage']}%)" for t in topics) or "None yet"

        prompt = f"""You are an educational AI assistant providing personalized study recommendations for a Class 6 Biology student.

Student's Performance Summary:
- Overall Score: {performance.get('score', 0)}%
- Weak Topics: {describe(performance.get('weak_topics', []))}
- Strong Topics: {describe(performance.get('strong_topics', []))}
- Number of quizzes taken: {performance.get('quizzes_taken', 0)}

Please provide:
1. Specific study plan recommendations for the next week
2. Resources or activities that would help improve weak areas
3. Ways to maintain strength in strong topics
4. Motivational tips based on their performance

Keep recommendations practical and age-appropriate for a 6th grader."""

        try:
            return self.service.chat_completion(
                messages=[
                    {"role": "system", "content": RECOMMENDATION_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=700,
                temperature=0.7
            )
        except AIServiceError as e:
            self.logger.warning(f"Study recommendation generation failed, using fallback: {e}")
            return FALLBACK_RECOMMENDATION
