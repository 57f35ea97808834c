"""
Editing session for a single admin.

Holds a detached draft of one quiz, applies every edit to that draft and
pushes the whole draft to the store on commit.
"""
import asyncio
import dataclasses
import logging
import time
from enum import Enum
from typing import Dict, Optional

from . import content_model
from .content_model import QuestionIdGenerator
from .data_manager import DataManager
from .errors import ImageDecodeError, NoQuizSelectedError, QuizNotFoundError
from .image_ingestion import ImageIngestor
from .localized_text import normalize_locale, with_locale
from .models import LocalizedText, QuestionUpdate, Quiz


class EditorState(Enum):
    """Enumeration of possible editing session states."""
    UNSELECTED = "unselected"
    LOADED = "loaded"
    DIRTY = "dirty"
    SAVED = "saved"
    DELETED = "deleted"


class QuizEditingSession:
    """
    Draft state machine over one quiz.

    The draft is an immutable Quiz snapshot that is replaced on every
    edit; the store copy is untouched until commit().
    """

    def __init__(
        self,
        store: DataManager,
        ingestor: ImageIngestor,
        locale: str = "en",
        saved_indicator_seconds: float = 2.0,
        id_generator: Optional[QuestionIdGenerator] = None
    ):
        """
        Initialize the editing session.

        Args:
            store: Store the draft is loaded from and committed to
            ingestor: Pipeline used for question image uploads
            locale: Display locale for this admin
            saved_indicator_seconds: How long the SAVED state lasts after a commit
            id_generator: Source of new question ids
        """
        self.logger = logging.getLogger(__name__)
        self.store = store
        self.ingestor = ingestor
        self.locale = normalize_locale(locale)
        self.saved_indicator_seconds = saved_indicator_seconds
        self._new_question_id = id_generator or QuestionIdGenerator()

        self.state = EditorState.UNSELECTED
        self.selected_quiz_id: Optional[str] = None
        self.editing_quiz: Optional[Quiz] = None
        self.expanded_questions: Dict[str, bool] = {}

        # Latest ingestion request per question id
        self._image_requests: Dict[str, int] = {}
        self._image_request_seq = 0
        self._saved_reset: Optional[asyncio.TimerHandle] = None

    @property
    def is_dirty(self) -> bool:
        return self.state == EditorState.DIRTY

    @property
    def has_draft(self) -> bool:
        return self.editing_quiz is not None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, quiz_id: str) -> Quiz:
        """
        Load a fresh draft of the given quiz.

        Any unsaved edits on the current draft are discarded.

        Raises:
            QuizNotFoundError: If quiz_id is not in the store
        """
        quiz = self.store.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(quiz_id)

        if self.is_dirty:
            self.logger.warning(
                f"Discarding unsaved edits to quiz {self.selected_quiz_id}",
                extra={
                    'event_type': 'draft_discarded',
                    'quiz_id': self.selected_quiz_id,
                    'next_quiz_id': quiz_id,
                    'timestamp': time.time()
                }
            )

        self._cancel_saved_reset()
        self.selected_quiz_id = quiz_id
        self.editing_quiz = quiz
        self._transition(EditorState.LOADED)
        return quiz

    def auto_select(self) -> Optional[str]:
        """Select the first quiz in the collection when nothing is selected."""
        if self.selected_quiz_id is not None:
            return self.selected_quiz_id
        quizzes = self.store.quizzes
        if not quizzes:
            return None
        self.select(quizzes[0].id)
        return quizzes[0].id

    def discard(self) -> None:
        self._cancel_saved_reset()
        self.selected_quiz_id = None
        self.editing_quiz = None
        self._transition(EditorState.UNSELECTED)

    def mark_deleted(self, quiz_id: str) -> bool:
        """
        Drop the draft if it belongs to a deleted quiz.

        Returns:
            True if this session had the quiz selected
        """
        if self.selected_quiz_id != quiz_id:
            return False
        self._cancel_saved_reset()
        self.selected_quiz_id = None
        self.editing_quiz = None
        self._transition(EditorState.DELETED)
        return True

    def sync_active_flag(self) -> None:
        """Mirror the store's active flag into the draft without dirtying it."""
        if self.editing_quiz is None:
            return
        stored = self.store.get_quiz(self.editing_quiz.id)
        if stored is not None and stored.is_active != self.editing_quiz.is_active:
            self.editing_quiz = dataclasses.replace(self.editing_quiz, is_active=stored.is_active)

    # ------------------------------------------------------------------
    # Draft edits
    # ------------------------------------------------------------------

    def set_title(self, locale: str, value: str) -> None:
        draft = self._require_draft()
        self._apply(dataclasses.replace(draft, title=with_locale(draft.title, locale, value)))

    def set_description(self, locale: str, value: str) -> None:
        draft = self._require_draft()
        self._apply(dataclasses.replace(draft, description=with_locale(draft.description, locale, value)))

    def set_active_flag(self, is_active: bool) -> None:
        draft = self._require_draft()
        self._apply(dataclasses.replace(draft, is_active=is_active))

    def add_question(self) -> str:
        """
        Append a default question and expand it.

        Returns:
            Id of the new question
        """
        draft = self._require_draft()
        quiz, question = content_model.add_question(draft, self._new_question_id())
        self._apply(quiz)
        self.expanded_questions[question.id] = True
        return question.id

    def remove_question(self, question_id: str) -> None:
        draft = self._require_draft()
        self._apply(content_model.remove_question(draft, question_id))
        self.expanded_questions.pop(question_id, None)
        self._image_requests.pop(question_id, None)

    def update_question(self, question_id: str, update: QuestionUpdate) -> None:
        draft = self._require_draft()
        self._apply(content_model.update_question(draft, question_id, update))

    def set_question_text(self, question_id: str, locale: str, value: str) -> None:
        question = self._require_draft().find_question(question_id)
        if question is None:
            return
        self.update_question(
            question_id,
            QuestionUpdate(question_text=with_locale(question.question_text, locale, value))
        )

    def set_correct_answer(self, question_id: str, locale: str, value: str) -> None:
        question = self._require_draft().find_question(question_id)
        if question is None:
            return
        self.update_question(
            question_id,
            QuestionUpdate(correct_answer=with_locale(question.correct_answer, locale, value))
        )

    def set_wrong_answer(self, question_id: str, index: int, locale: str, value: str) -> None:
        draft = self._require_draft()
        self._apply(content_model.set_wrong_answer_locale(draft, question_id, index, locale, value))

    def replace_wrong_answer(self, question_id: str, index: int, text: LocalizedText) -> None:
        draft = self._require_draft()
        self._apply(content_model.set_wrong_answer(draft, question_id, index, text))

    def clear_image(self, question_id: str) -> None:
        self.update_question(question_id, QuestionUpdate(image=""))

    def toggle_question(self, question_id: str) -> bool:
        expanded = not self.expanded_questions.get(question_id, False)
        self.expanded_questions[question_id] = expanded
        return expanded

    async def upload_image(self, question_id: str, data: Optional[bytes]) -> bool:
        """
        Ingest an uploaded file and store it as the question's image.

        Only the most recently issued upload for a question is applied.
        Decode failures leave the current image untouched.

        Args:
            question_id: Question receiving the image
            data: Raw file bytes; empty or None is a no-op

        Returns:
            True if the draft was updated with the new image
        """
        if not data:
            return False
        draft = self._require_draft()
        if draft.find_question(question_id) is None:
            return False

        quiz_id = draft.id
        self._image_request_seq += 1
        request = self._image_request_seq
        self._image_requests[question_id] = request

        try:
            image = await self.ingestor.ingest(data)
        except ImageDecodeError as e:
            self.logger.warning(
                f"Image upload for question {question_id} could not be decoded: {e}",
                extra={'event_type': 'image_decode_failed', 'quiz_id': quiz_id, 'question_id': question_id}
            )
            return False

        if self._image_requests.get(question_id) != request:
            self.logger.debug(f"Dropping superseded image upload for question {question_id}")
            return False
        if self.editing_quiz is None or self.editing_quiz.id != quiz_id:
            self.logger.debug(f"Quiz {quiz_id} is no longer loaded, dropping image for {question_id}")
            return False
        if self.editing_quiz.find_question(question_id) is None:
            return False

        self.update_question(question_id, QuestionUpdate(image=image))
        return True

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def commit(self) -> Quiz:
        """
        Push the whole draft to the store.

        Returns:
            The committed snapshot

        Raises:
            NoQuizSelectedError: If there is no draft
            StoreError: If the store rejects the update; the draft stays dirty
        """
        snapshot = self._require_draft()
        await self.store.update_quiz(snapshot.id, snapshot)

        self.logger.info(
            f"Committed quiz {snapshot.id}",
            extra={
                'event_type': 'draft_committed',
                'quiz_id': snapshot.id,
                'question_count': len(snapshot.questions),
                'timestamp': time.time()
            }
        )

        # Edits made while the update was in flight keep the draft dirty.
        if self.editing_quiz is snapshot:
            self._transition(EditorState.SAVED)
            self._schedule_saved_reset()
        return snapshot

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_draft(self) -> Quiz:
        if self.editing_quiz is None:
            raise NoQuizSelectedError("No quiz is selected for editing")
        return self.editing_quiz

    def _apply(self, quiz: Quiz) -> None:
        if quiz is self.editing_quiz:
            return
        self._cancel_saved_reset()
        self.editing_quiz = quiz
        self._transition(EditorState.DIRTY)

    def _transition(self, new_state: EditorState) -> None:
        if new_state == self.state:
            return
        self.logger.debug(
            f"Editing session {self.state.value} -> {new_state.value}",
            extra={
                'event_type': 'session_state_transition',
                'from_state': self.state.value,
                'to_state': new_state.value,
                'quiz_id': self.selected_quiz_id
            }
        )
        self.state = new_state

    def _schedule_saved_reset(self) -> None:
        self._cancel_saved_reset()
        loop = asyncio.get_running_loop()
        self._saved_reset = loop.call_later(self.saved_indicator_seconds, self._clear_saved)

    def _cancel_saved_reset(self) -> None:
        if self._saved_reset is not None:
            self._saved_reset.cancel()
            self._saved_reset = None

    def _clear_saved(self) -> None:
        self._saved_reset = None
        if self.state == EditorState.SAVED:
            self._transition(EditorState.LOADED)
