"""
Exception hierarchy for the quiz admin components.
"""


class QuizAdminError(Exception):
    """Base exception for quiz admin errors."""
    pass


class ValidationError(QuizAdminError):
    """Raised when a value violates a content model constraint."""
    pass


class AnswerIndexError(ValidationError, IndexError):
    """Raised when a wrong-answer slot index is outside [0, 3)."""
    pass


class NotFoundError(QuizAdminError):
    """Raised when an entity id does not resolve."""
    pass


class QuizNotFoundError(NotFoundError):
    """Raised when a quiz id is not present in the store."""

    def __init__(self, quiz_id: str):
        super().__init__(f"Quiz not found: {quiz_id}")
        self.quiz_id = quiz_id


class StoreError(QuizAdminError):
    """Raised when a store operation is rejected or cannot be persisted."""
    pass


class NoQuizSelectedError(QuizAdminError):
    """Raised when a draft mutation is attempted with no quiz selected."""
    pass


class ImageDecodeError(QuizAdminError):
    """Raised when an uploaded file cannot be decoded as an image."""
    pass
