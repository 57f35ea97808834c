"""
Quiz list and activation controller.

Owns one editing session per admin user and mediates every operation
that touches the quiz collection as a whole: creation, deletion,
activation and the results list.
"""
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional

from .config_manager import ConfigManager
from .content_model import new_quiz_content
from .data_manager import DataManager
from .editing_session import EditorState, QuizEditingSession
from .errors import NoQuizSelectedError
from .image_ingestion import ImageIngestor
from .localized_text import localize
from .models import Quiz, QuizResult


ConfirmCallback = Callable[[], Awaitable[bool]]


class QuizAdminController:
    """
    Orchestrates editing sessions across admin users.

    Each admin gets an independent draft; collection-level changes are
    propagated to every open session so no draft shows a stale active
    flag or a deleted quiz.
    """

    def __init__(self, data_manager: DataManager, config_manager: ConfigManager,
                 ingestor: Optional[ImageIngestor] = None):
        """
        Initialize the controller.

        Args:
            data_manager: Store holding the quiz collection
            config_manager: Source of admin settings
            ingestor: Image pipeline shared by all sessions
        """
        self.logger = logging.getLogger(__name__)
        self.data_manager = data_manager
        self.config_manager = config_manager
        self.ingestor = ingestor or ImageIngestor(config_manager.get_image_settings())

        self._sessions: Dict[int, QuizEditingSession] = {}

        self.logger.info("QuizAdminController initialized")

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def get_session(self, user_id: int) -> QuizEditingSession:
        """
        Get the editing session for a user, opening one if needed.

        A newly opened session auto-selects the first quiz in the collection.
        """
        session = self._sessions.get(user_id)
        if session is None:
            session = QuizEditingSession(
                self.data_manager,
                self.ingestor,
                locale=self.config_manager.get_default_locale(),
                saved_indicator_seconds=self.config_manager.get_saved_indicator_seconds()
            )
            self._sessions[user_id] = session
            selected = session.auto_select()
            self.logger.info(
                f"Opened editing session for user {user_id}, selected quiz: {selected}",
                extra={'event_type': 'session_opened', 'user_id': user_id, 'quiz_id': selected}
            )
        return session

    def has_session(self, user_id: int) -> bool:
        return user_id in self._sessions

    def close_session(self, user_id: int) -> bool:
        session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        if session.is_dirty:
            self.logger.warning(f"Closing session for user {user_id} with unsaved edits")
        session.discard()
        return True

    def get_session_state(self, user_id: int) -> EditorState:
        session = self._sessions.get(user_id)
        if session is None:
            return EditorState.UNSELECTED
        return session.state

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def list_quizzes(self) -> List[Quiz]:
        return self.data_manager.quizzes

    def get_active_quiz(self) -> Optional[Quiz]:
        return self.data_manager.active_quiz

    def select_quiz(self, user_id: int, quiz_id: str) -> Quiz:
        return self.get_session(user_id).select(quiz_id)

    async def create_quiz(self, user_id: int) -> Quiz:
        """
        Create a quiz with seed content and select it for the user.

        Returns:
            The draft of the new quiz
        """
        quiz_id = await self.data_manager.add_quiz(new_quiz_content())
        draft = self.get_session(user_id).select(quiz_id)
        self.logger.info(
            f"User {user_id} created quiz {quiz_id}",
            extra={'event_type': 'quiz_created', 'user_id': user_id, 'quiz_id': quiz_id, 'timestamp': time.time()}
        )
        return draft

    async def delete_quiz(self, user_id: int, quiz_id: str, confirm: ConfirmCallback) -> bool:
        """
        Delete a quiz after explicit confirmation.

        Args:
            user_id: Admin requesting the deletion
            quiz_id: Quiz to delete
            confirm: Awaitable returning True only when the admin confirmed

        Returns:
            True if the quiz was deleted, False if the admin declined

        Raises:
            QuizNotFoundError: If the quiz is not in the store
            StoreError: If the store rejects the deletion
        """
        if not await confirm():
            self.logger.info(f"User {user_id} cancelled deletion of quiz {quiz_id}")
            return False

        await self.data_manager.delete_quiz(quiz_id)

        cleared = [uid for uid, session in self._sessions.items() if session.mark_deleted(quiz_id)]
        self.logger.info(
            f"User {user_id} deleted quiz {quiz_id}, cleared {len(cleared)} sessions",
            extra={'event_type': 'quiz_deleted', 'user_id': user_id, 'quiz_id': quiz_id}
        )
        return True

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    async def set_active(self, user_id: int, is_active: bool) -> Quiz:
        """
        Switch the active toggle on the user's draft.

        Turning it on activates the quiz in the store, which deactivates
        every other quiz. Turning it off only changes the draft; the flag
        reaches the store on the next commit.

        Returns:
            The updated draft

        Raises:
            NoQuizSelectedError: If the user has no draft
            StoreError: If the store rejects the activation
        """
        session = self.get_session(user_id)
        if session.editing_quiz is None:
            raise NoQuizSelectedError("No quiz is selected for editing")

        session.set_active_flag(is_active)
        quiz_id = session.editing_quiz.id

        if is_active:
            await self.data_manager.set_active_quiz(quiz_id)
            self._sync_active_flags()
            self.logger.info(
                f"User {user_id} activated quiz {quiz_id}",
                extra={'event_type': 'quiz_activated', 'user_id': user_id, 'quiz_id': quiz_id}
            )
        else:
            self.logger.info(f"User {user_id} cleared active flag on draft {quiz_id}")

        return session.editing_quiz

    async def commit(self, user_id: int) -> Quiz:
        """Commit the user's draft and refresh active flags in other drafts."""
        session = self.get_session(user_id)
        snapshot = await session.commit()
        if snapshot.is_active:
            self._sync_active_flags()
        return snapshot

    def _sync_active_flags(self) -> None:
        for session in self._sessions.values():
            session.sync_active_flag()

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def get_quiz_results(self, limit: Optional[int] = None) -> List[QuizResult]:
        """
        Most recent quiz results first.

        Args:
            limit: Maximum number of results; defaults to the configured display limit
        """
        if limit is None:
            limit = self.config_manager.get_results_display_limit()
        return self.data_manager.quiz_results[:limit]

    def get_result_count(self) -> int:
        return len(self.data_manager.quiz_results)

    async def clear_results(self) -> int:
        count = self.get_result_count()
        await self.data_manager.clear_quiz_results()
        return count

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_session_status_summary(self, user_id: int) -> str:
        """
        Human-readable summary of the user's session.

        Returns:
            One-line status string
        """
        session = self._sessions.get(user_id)
        if session is None or session.editing_quiz is None:
            return "No quiz selected"

        draft = session.editing_quiz
        status = {
            EditorState.LOADED: "Loaded",
            EditorState.DIRTY: "Unsaved changes",
            EditorState.SAVED: "Saved",
        }.get(session.state, session.state.value)
        active = "Active" if draft.is_active else "Inactive"
        return (
            f"Quiz: {localize(draft.title, session.locale)} | {status} | {active} | "
            f"Questions: {len(draft.questions)}"
        )
