"""
Core data models for the storefront quiz admin.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from datetime import datetime

from .errors import ValidationError


WRONG_ANSWER_COUNT = 3


@dataclass(frozen=True)
class LocalizedText:
    """User-facing text in the two supported locales."""
    en: str = ""
    ar: str = ""

    def __post_init__(self):
        if not isinstance(self.en, str) or not isinstance(self.ar, str):
            raise ValidationError("LocalizedText fields must be strings")

    @classmethod
    def empty(cls) -> "LocalizedText":
        return cls(en="", ar="")

    def get(self, locale: str) -> str:
        """Return the Arabic field for 'ar', the English field otherwise."""
        return self.ar if locale == "ar" else self.en

    def to_dict(self) -> Dict[str, str]:
        return {"en": self.en, "ar": self.ar}

    @classmethod
    def from_dict(cls, data: Any) -> "LocalizedText":
        """
        Build a LocalizedText from a persisted {"en": ..., "ar": ...} mapping.

        Raises:
            ValidationError: If the value is not a mapping or a locale key is absent
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Localized text must be an object, got {type(data).__name__}")
        for locale in ("en", "ar"):
            if locale not in data:
                raise ValidationError(f"Localized text missing '{locale}' key")
        return cls(en=data["en"], ar=data["ar"])


def _empty_wrong_answers() -> Tuple[LocalizedText, ...]:
    return tuple(LocalizedText.empty() for _ in range(WRONG_ANSWER_COUNT))


@dataclass(frozen=True)
class Question:
    """A single image question with one correct and three wrong answers."""
    id: str
    image: str = ""
    question_text: LocalizedText = field(default_factory=LocalizedText.empty)
    correct_answer: LocalizedText = field(default_factory=LocalizedText.empty)
    wrong_answers: Tuple[LocalizedText, ...] = field(default_factory=_empty_wrong_answers)

    def __post_init__(self):
        # Lists from callers are frozen into tuples so the slot count cannot drift.
        object.__setattr__(self, "wrong_answers", tuple(self.wrong_answers))
        if len(self.wrong_answers) != WRONG_ANSWER_COUNT:
            raise ValidationError(
                f"Question {self.id} must have exactly {WRONG_ANSWER_COUNT} wrong answers, "
                f"got {len(self.wrong_answers)}"
            )
        if not isinstance(self.image, str):
            raise ValidationError(f"Question {self.id} image must be a string")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "image": self.image,
            "questionText": self.question_text.to_dict(),
            "correctAnswer": self.correct_answer.to_dict(),
            "wrongAnswers": [answer.to_dict() for answer in self.wrong_answers],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        if not isinstance(data, dict):
            raise ValidationError("Question must be an object")
        if "id" not in data:
            raise ValidationError("Question missing 'id' field")
        wrong_answers = data.get("wrongAnswers")
        if not isinstance(wrong_answers, list):
            raise ValidationError(f"Question {data['id']} 'wrongAnswers' must be an array")
        return cls(
            id=str(data["id"]),
            image=data.get("image", ""),
            question_text=LocalizedText.from_dict(data.get("questionText")),
            correct_answer=LocalizedText.from_dict(data.get("correctAnswer")),
            wrong_answers=tuple(LocalizedText.from_dict(answer) for answer in wrong_answers),
        )


@dataclass(frozen=True)
class QuestionUpdate:
    """Partial update for a Question; fields left as None are not touched."""
    image: Optional[str] = None
    question_text: Optional[LocalizedText] = None
    correct_answer: Optional[LocalizedText] = None
    wrong_answers: Optional[Tuple[LocalizedText, ...]] = None


@dataclass(frozen=True)
class QuizContent:
    """Quiz fields supplied to the store's add operation."""
    title: LocalizedText
    description: LocalizedText
    questions: Tuple[Question, ...] = ()
    is_active: bool = False


@dataclass(frozen=True)
class Quiz:
    """A bilingual quiz as held in the store collection."""
    id: str
    title: LocalizedText
    description: LocalizedText
    questions: Tuple[Question, ...] = ()
    is_active: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        object.__setattr__(self, "questions", tuple(self.questions))

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title.to_dict(),
            "description": self.description.to_dict(),
            "questions": [question.to_dict() for question in self.questions],
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quiz":
        if not isinstance(data, dict):
            raise ValidationError("Quiz must be an object")
        for key in ("id", "title", "description"):
            if key not in data:
                raise ValidationError(f"Quiz missing '{key}' field")
        questions = data.get("questions", [])
        if not isinstance(questions, list):
            raise ValidationError(f"Quiz {data['id']} 'questions' must be an array")
        is_active = data.get("isActive", False)
        if not isinstance(is_active, bool):
            raise ValidationError(f"Quiz {data['id']} 'isActive' must be a boolean")
        return cls(
            id=str(data["id"]),
            title=LocalizedText.from_dict(data["title"]),
            description=LocalizedText.from_dict(data["description"]),
            questions=tuple(Question.from_dict(q) for q in questions),
            is_active=is_active,
            created_at=_parse_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True)
class QuizResult:
    """Score of one completed quiz attempt."""
    id: str
    score: int
    total_questions: int
    date: datetime

    def __post_init__(self):
        if self.score < 0:
            raise ValidationError("Quiz result score cannot be negative")
        if self.total_questions <= 0:
            raise ValidationError("Quiz result must cover at least one question")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "score": self.score,
            "totalQuestions": self.total_questions,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizResult":
        try:
            return cls(
                id=str(data["id"]),
                score=int(data["score"]),
                total_questions=int(data["totalQuestions"]),
                date=_parse_timestamp(data.get("date")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid quiz result: {e}") from e


@dataclass(frozen=True)
class Product:
    """Storefront product, as far as the dashboard needs it."""
    id: str
    name: LocalizedText
    category: str = ""
    availability: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        name = data.get("name", "")
        # Older catalogue entries store a plain string name.
        if isinstance(name, str):
            name = LocalizedText(en=name, ar="")
        else:
            name = LocalizedText.from_dict(name)
        return cls(
            id=str(data["id"]),
            name=name,
            category=data.get("category", ""),
            availability=bool(data.get("availability", True)),
        )


@dataclass(frozen=True)
class ContactMessage:
    """Message submitted through the storefront contact form."""
    id: str
    name: str
    email: str
    message: str
    status: str = "new"
    date: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContactMessage":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            message=data.get("message", ""),
            status=data.get("status", "new"),
            date=_parse_timestamp(data["date"]) if data.get("date") else None,
        )


@dataclass
class AdminSettings:
    """Configuration settings for the quiz admin."""
    max_image_dimension: int = 400
    jpeg_quality: float = 0.6
    saved_indicator_seconds: float = 2.0
    default_locale: str = "en"
    results_display_limit: int = 20


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now()
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e
