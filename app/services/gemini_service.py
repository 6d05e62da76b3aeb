"""
Gemini AI service for quiz generation
"""
import google.generativeai as genai
from pydantic import ValidationError
import json
import logging
import uuid
from typing import Any, Dict

from app.config import settings
from app.exceptions import GenerationFailure
from app.schemas.quiz import QuizContent, Quiz, Question, Answer

logger = logging.getLogger(__name__)


# Output contract handed to Gemini; ids are assigned locally afterwards
QUIZ_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {
            "type": "STRING",
            "description": "The title of the quiz."
        },
        "description": {
            "type": "STRING",
            "description": "A brief description of the quiz topic."
        },
        "questions": {
            "type": "ARRAY",
            "description": "An array of quiz questions.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "question": {
                        "type": "STRING",
                        "description": "The text of the question."
                    },
                    "explanation": {
                        "type": "STRING",
                        "description": "A brief explanation for why the correct answer is right."
                    },
                    "answers": {
                        "type": "ARRAY",
                        "description": "An array of possible answers. Exactly one answer must be correct.",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "answer": {
                                    "type": "STRING",
                                    "description": "The text of the answer option."
                                },
                                "correct": {
                                    "type": "BOOLEAN",
                                    "description": "Whether this answer is the correct one."
                                }
                            },
                            "required": ["answer", "correct"]
                        }
                    }
                },
                "required": ["question", "explanation", "answers"]
            }
        }
    },
    "required": ["title", "description", "questions"]
}


def build_topic_prompt(category: str, title: str) -> str:
    """Topic prompt for a category/title pair"""
    return f'Generate a quiz about "{title.strip()}" from the topic of "{category.strip()}".'


class GeminiService:
    """
    Quiz Content Generator backed by Gemini

    Built once at startup and injected into the routes; holds no state
    between calls besides the configured model.
    """

    def __init__(self, api_key: str, model_name: str, timeout: int = 60):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.timeout = timeout

    def generate(self, topic_prompt: str) -> Quiz:
        """
        Generate a multiple-choice quiz for a topic prompt

        Args:
            topic_prompt: Free-text topic, usually from build_topic_prompt()

        Returns:
            Quiz with fresh question and answer ids

        Raises:
            GenerationFailure: call failed, timed out, or returned an
                unusable payload. Never retried here.
        """
        prompt = self._create_quiz_prompt(topic_prompt)

        try:
            response = self.model.generate_content(
                prompt,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=QUIZ_RESPONSE_SCHEMA,
                ),
                request_options={"timeout": self.timeout},
            )
            response_text = response.text
        except Exception as e:
            logger.error(f"Gemini quiz generation call failed: {str(e)}")
            raise GenerationFailure() from e

        content = self._parse_quiz_response(response_text)
        quiz = assign_ids(content)

        logger.info(f"Generated quiz '{quiz.title}' with {len(quiz.questions)} questions")
        return quiz

    def _create_quiz_prompt(self, topic_prompt: str) -> str:
        """Create structured prompt for quiz generation"""
        return (
            f'Generate a multiple-choice quiz based on the following topic: "{topic_prompt}". '
            "The quiz should be engaging and informative. "
            "Ensure there is only one correct answer per question. "
            "Format the output as a JSON object that adheres to the provided schema."
        )

    def _parse_quiz_response(self, response_text: str) -> QuizContent:
        """Parse and validate Gemini's quiz response"""
        cleaned = (response_text or "").strip()

        # Remove markdown code blocks
        if cleaned.startswith("```json"):
            cleaned = cleaned[7:-3].strip()
        elif cleaned.startswith("```"):
            cleaned = cleaned[3:-3].strip()

        try:
            return QuizContent.model_validate(json.loads(cleaned))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse quiz JSON: {str(e)}")
            logger.error(f"Response text: {cleaned[:500]}")
            raise GenerationFailure() from e


def assign_ids(content: QuizContent) -> Quiz:
    """Attach random question/answer ids to an id-less quiz"""
    return Quiz(
        title=content.title,
        description=content.description,
        questions=[
            Question(
                id=f"q-{uuid.uuid4().hex}",
                question=q.question,
                explanation=q.explanation,
                answers=[
                    Answer(id=f"a-{uuid.uuid4().hex}", answer=a.answer, correct=a.correct)
                    for a in q.answers
                ],
            )
            for q in content.questions
        ],
    )


def create_gemini_service() -> GeminiService:
    """Build the generator from settings"""
    return GeminiService(
        api_key=settings.GEMINI_API_KEY,
        model_name=settings.GEMINI_MODEL,
        timeout=settings.GEMINI_TIMEOUT,
    )
