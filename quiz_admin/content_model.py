"""
Structural operations on quiz content.

Every function returns a new Quiz snapshot; inputs are never mutated.
"""
import dataclasses
import time
from typing import Callable, Optional, Tuple

from .errors import AnswerIndexError
from .localized_text import with_locale
from .models import (
    WRONG_ANSWER_COUNT,
    LocalizedText,
    Question,
    QuestionUpdate,
    Quiz,
    QuizContent,
)


NEW_QUIZ_TITLE = LocalizedText(en="New Quiz", ar="اختبار جديد")
NEW_QUIZ_DESCRIPTION = LocalizedText(en="Test your knowledge!", ar="اختبر معرفتك!")
NEW_QUESTION_TEXT = LocalizedText(en="What flower is this?", ar="ما هذه الزهرة؟")


def new_quiz_content() -> QuizContent:
    """Seed content for a freshly created quiz: no questions, inactive."""
    return QuizContent(
        title=NEW_QUIZ_TITLE,
        description=NEW_QUIZ_DESCRIPTION,
        questions=(),
        is_active=False,
    )


class QuestionIdGenerator:
    """
    Time-based question ids, unique within one generator.

    Ids are millisecond timestamps; two requests in the same millisecond
    get consecutive values instead of colliding.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._last = 0

    def __call__(self) -> str:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)


def new_question(question_id: str) -> Question:
    return Question(
        id=question_id,
        image="",
        question_text=NEW_QUESTION_TEXT,
        correct_answer=LocalizedText.empty(),
        wrong_answers=tuple(LocalizedText.empty() for _ in range(WRONG_ANSWER_COUNT)),
    )


def add_question(quiz: Quiz, question_id: str) -> Tuple[Quiz, Question]:
    """
    Append a new default question to the quiz.

    Args:
        quiz: Current quiz snapshot
        question_id: Id for the new question

    Returns:
        Tuple of (updated quiz, the appended question)
    """
    question = new_question(question_id)
    return dataclasses.replace(quiz, questions=quiz.questions + (question,)), question


def remove_question(quiz: Quiz, question_id: str) -> Quiz:
    if quiz.find_question(question_id) is None:
        return quiz
    remaining = tuple(q for q in quiz.questions if q.id != question_id)
    return dataclasses.replace(quiz, questions=remaining)


def merge_question(question: Question, update: QuestionUpdate) -> Question:
    """Apply the set fields of a QuestionUpdate; the id is never changed."""
    changes = {}
    if update.image is not None:
        changes["image"] = update.image
    if update.question_text is not None:
        changes["question_text"] = update.question_text
    if update.correct_answer is not None:
        changes["correct_answer"] = update.correct_answer
    if update.wrong_answers is not None:
        changes["wrong_answers"] = tuple(update.wrong_answers)
    if not changes:
        return question
    return dataclasses.replace(question, **changes)


def update_question(quiz: Quiz, question_id: str, update: QuestionUpdate) -> Quiz:
    """
    Merge a partial update into the matching question.

    Unknown question ids leave the quiz unchanged.
    """
    if quiz.find_question(question_id) is None:
        return quiz
    questions = tuple(
        merge_question(q, update) if q.id == question_id else q
        for q in quiz.questions
    )
    return dataclasses.replace(quiz, questions=questions)


def set_wrong_answer(quiz: Quiz, question_id: str, index: int, text: LocalizedText) -> Quiz:
    """
    Replace one wrong-answer slot of a question.

    Raises:
        AnswerIndexError: If index is outside [0, 3)
    """
    if not 0 <= index < WRONG_ANSWER_COUNT:
        raise AnswerIndexError(
            f"Wrong answer index {index} out of range [0, {WRONG_ANSWER_COUNT})"
        )
    question = quiz.find_question(question_id)
    if question is None:
        return quiz
    wrong_answers = list(question.wrong_answers)
    wrong_answers[index] = text
    return update_question(quiz, question_id, QuestionUpdate(wrong_answers=tuple(wrong_answers)))


def set_wrong_answer_locale(quiz: Quiz, question_id: str, index: int, locale: str, value: str) -> Quiz:
    """Replace one locale field of one wrong-answer slot."""
    if not 0 <= index < WRONG_ANSWER_COUNT:
        raise AnswerIndexError(
            f"Wrong answer index {index} out of range [0, {WRONG_ANSWER_COUNT})"
        )
    question = quiz.find_question(question_id)
    if question is None:
        return quiz
    text = with_locale(question.wrong_answers[index], locale, value)
    return set_wrong_answer(quiz, question_id, index, text)
