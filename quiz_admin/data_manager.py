"""
Data manager for the JSON-backed storefront store.

Holds the quiz collection, quiz results and the read-only catalogue data
the dashboard needs, and persists them to a single JSON document.
"""
import asyncio
import dataclasses
import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import QuizNotFoundError, StoreError, ValidationError
from .models import ContactMessage, Product, Quiz, QuizContent, QuizResult


class DataManager:
    """Manages loading, validation and persistence of the admin store."""

    STORE_FILENAME = "store.json"
    MAX_STORE_SIZE = 50 * 1024 * 1024  # inline images make the document large

    def __init__(self, data_directory: str = "./data/"):
        """
        Initialize DataManager with the data directory path.

        Args:
            data_directory: Directory holding store.json
        """
        self.data_directory = Path(data_directory)
        self.logger = logging.getLogger(__name__)
        self.load_errors: List[str] = []

        self._quizzes: List[Quiz] = []
        self._quiz_results: List[QuizResult] = []
        self._products: List[Product] = []
        self._contact_messages: List[ContactMessage] = []
        self._catalogue: Dict[str, List[Any]] = {"products": [], "contactMessages": []}
        self._lock = asyncio.Lock()

    @property
    def store_path(self) -> Path:
        return self.data_directory / self.STORE_FILENAME

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def quizzes(self) -> List[Quiz]:
        return list(self._quizzes)

    @property
    def active_quiz(self) -> Optional[Quiz]:
        for quiz in self._quizzes:
            if quiz.is_active:
                return quiz
        return None

    @property
    def quiz_results(self) -> List[QuizResult]:
        """Quiz results, most recent first."""
        return sorted(self._quiz_results, key=lambda r: r.date.timestamp(), reverse=True)

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    @property
    def contact_messages(self) -> List[ContactMessage]:
        return list(self._contact_messages)

    def get_quiz(self, quiz_id: str) -> Optional[Quiz]:
        for quiz in self._quizzes:
            if quiz.id == quiz_id:
                return quiz
        return None

    def quiz_exists(self, quiz_id: str) -> bool:
        return self.get_quiz(quiz_id) is not None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """
        Load the store document with comprehensive error handling.

        Individual malformed entries are skipped and reported through
        get_load_errors(); a missing document starts an empty store.

        Returns:
            True if the document was read (or freshly created), False otherwise
        """
        self.load_errors.clear()
        self._quizzes, self._quiz_results = [], []
        self._products, self._contact_messages = [], []
        self._catalogue = {"products": [], "contactMessages": []}

        directory_result = self._ensure_data_directory()
        if not directory_result['success']:
            self.load_errors.append(directory_result['error'])
            return False

        if not self.store_path.exists():
            self.logger.warning(f"No store document found at {self.store_path}, starting empty")
            try:
                self._write_document(self._build_document(self._quizzes, self._quiz_results))
            except StoreError as e:
                self.load_errors.append(str(e))
                return False
            return True

        read_result = self._read_document()
        if not read_result['success']:
            self.load_errors.append(read_result['error'])
            return False

        document = read_result['data']
        self._catalogue = {
            "products": document.get("products", []),
            "contactMessages": document.get("contactMessages", []),
        }
        self._quizzes = self._parse_entries(document, "quizzes", Quiz.from_dict)
        self._quiz_results = self._parse_entries(document, "quizResults", QuizResult.from_dict)
        self._products = self._parse_entries(document, "products", Product.from_dict)
        self._contact_messages = self._parse_entries(document, "contactMessages", ContactMessage.from_dict)

        active = [q.id for q in self._quizzes if q.is_active]
        if len(active) > 1:
            # Keep the first active quiz, matching collection order.
            self.logger.warning(f"Store had {len(active)} active quizzes, keeping {active[0]}")
            self.load_errors.append(f"Multiple active quizzes found: {', '.join(active)}")
            self._quizzes = self._with_single_active(self._quizzes, active[0])

        self.logger.info(
            f"Loaded store: {len(self._quizzes)} quizzes, {len(self._quiz_results)} results, "
            f"{len(self._products)} products, {len(self._contact_messages)} messages"
        )
        if self.load_errors:
            self.logger.warning(f"Encountered {len(self.load_errors)} loading errors")
        return True

    def validate_store_structure(self, data: Any) -> bool:
        """
        Validate the top-level shape of the store document.

        Expected structure:
        {
            "quizzes": [...],
            "quizResults": [...],
            "products": [...],         # Optional
            "contactMessages": [...]   # Optional
        }
        """
        if not isinstance(data, dict):
            self.logger.error("Store data must be a JSON object")
            return False

        for key in ("quizzes", "quizResults", "products", "contactMessages"):
            if key in data and not isinstance(data[key], list):
                self.logger.error(f"'{key}' value must be an array")
                return False

        return True

    def _parse_entries(self, document: Dict[str, Any], key: str, parse) -> List[Any]:
        entries = []
        for i, raw in enumerate(document.get(key, [])):
            try:
                entries.append(parse(raw))
            except (ValidationError, KeyError, TypeError, ValueError) as e:
                self.logger.error(f"Skipping {key}[{i}]: {e}")
                self.load_errors.append(f"{key}[{i}]: {e}")
        return entries

    def _ensure_data_directory(self) -> Dict[str, Any]:
        """
        Ensure the data directory exists and is accessible.

        Returns:
            Dictionary with success status and error message if applicable
        """
        try:
            if not self.data_directory.exists():
                self.data_directory.mkdir(parents=True, exist_ok=True)
                self.logger.info(f"Created data directory: {self.data_directory}")

            if not os.access(self.data_directory, os.R_OK | os.W_OK):
                return {
                    'success': False,
                    'error': f"Permission denied: Cannot read/write {self.data_directory}"
                }

            return {'success': True}

        except PermissionError:
            return {
                'success': False,
                'error': f"Permission denied: Cannot access {self.data_directory}"
            }
        except OSError as e:
            return {
                'success': False,
                'error': f"System error accessing {self.data_directory}: {e}"
            }

    def _read_document(self) -> Dict[str, Any]:
        try:
            file_size = self.store_path.stat().st_size
            if file_size > self.MAX_STORE_SIZE:
                return {
                    'success': False,
                    'error': f"Store file too large ({file_size / 1024 / 1024:.1f}MB)"
                }

            with open(self.store_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if not self.validate_store_structure(data):
                return {
                    'success': False,
                    'error': f"Invalid store structure in {self.store_path}"
                }

            return {'success': True, 'data': data}

        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in {self.store_path}: {e}")
            return {
                'success': False,
                'error': f"Invalid JSON in {self.store_path}: {e}"
            }
        except PermissionError:
            return {
                'success': False,
                'error': f"Permission denied: Cannot read {self.store_path}"
            }
        except OSError as e:
            return {
                'success': False,
                'error': f"Failed to read store file {self.store_path}: {e}"
            }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_quiz(self, content: QuizContent) -> str:
        """
        Append a quiz to the collection.

        Args:
            content: Quiz fields; id and created_at are assigned here

        Returns:
            The id of the new quiz
        """
        async with self._lock:
            quiz = Quiz(
                id=uuid.uuid4().hex,
                title=content.title,
                description=content.description,
                questions=content.questions,
                is_active=content.is_active,
                created_at=datetime.now(),
            )
            quizzes = self._quizzes + [quiz]
            if quiz.is_active:
                quizzes = self._with_single_active(quizzes, quiz.id)
            self._commit(quizzes=quizzes)
            self.logger.info(f"Added quiz {quiz.id}")
            return quiz.id

    async def update_quiz(self, quiz_id: str, quiz: Quiz) -> None:
        """
        Replace a stored quiz with the given object.

        An incoming active flag deactivates every other quiz.

        Raises:
            QuizNotFoundError: If quiz_id is not in the collection
            StoreError: If the change cannot be persisted
        """
        async with self._lock:
            if not self.quiz_exists(quiz_id):
                raise QuizNotFoundError(quiz_id)
            replacement = dataclasses.replace(quiz, id=quiz_id)
            quizzes = [replacement if q.id == quiz_id else q for q in self._quizzes]
            if replacement.is_active:
                quizzes = self._with_single_active(quizzes, quiz_id)
            self._commit(quizzes=quizzes)
            self.logger.info(
                f"Updated quiz {quiz_id} ({len(replacement.questions)} questions)",
                extra={'event_type': 'quiz_updated', 'quiz_id': quiz_id}
            )

    async def delete_quiz(self, quiz_id: str) -> None:
        async with self._lock:
            if not self.quiz_exists(quiz_id):
                raise QuizNotFoundError(quiz_id)
            self._commit(quizzes=[q for q in self._quizzes if q.id != quiz_id])
            self.logger.info(f"Deleted quiz {quiz_id}", extra={'event_type': 'quiz_deleted', 'quiz_id': quiz_id})

    async def set_active_quiz(self, quiz_id: str) -> None:
        """
        Mark one quiz active and every other quiz inactive in a single write.

        Raises:
            QuizNotFoundError: If quiz_id is not in the collection
        """
        async with self._lock:
            if not self.quiz_exists(quiz_id):
                raise QuizNotFoundError(quiz_id)
            self._commit(quizzes=self._with_single_active(self._quizzes, quiz_id))
            self.logger.info(f"Activated quiz {quiz_id}", extra={'event_type': 'quiz_activated', 'quiz_id': quiz_id})

    async def clear_quiz_results(self) -> None:
        async with self._lock:
            count = len(self._quiz_results)
            self._commit(quiz_results=[])
            self.logger.info(f"Cleared {count} quiz results")

    async def add_quiz_result(self, score: int, total_questions: int) -> QuizResult:
        async with self._lock:
            result = QuizResult(
                id=uuid.uuid4().hex,
                score=score,
                total_questions=total_questions,
                date=datetime.now(),
            )
            self._commit(quiz_results=self._quiz_results + [result])
            return result

    @staticmethod
    def _with_single_active(quizzes: List[Quiz], active_id: str) -> List[Quiz]:
        return [
            q if q.is_active == (q.id == active_id) else dataclasses.replace(q, is_active=(q.id == active_id))
            for q in quizzes
        ]

    def _commit(self, quizzes: Optional[List[Quiz]] = None,
                quiz_results: Optional[List[QuizResult]] = None) -> None:
        """Persist the new state, then swap it in; memory is untouched on failure."""
        new_quizzes = self._quizzes if quizzes is None else quizzes
        new_results = self._quiz_results if quiz_results is None else quiz_results
        self._write_document(self._build_document(new_quizzes, new_results))
        self._quizzes = list(new_quizzes)
        self._quiz_results = list(new_results)

    def _build_document(self, quizzes: List[Quiz], quiz_results: List[QuizResult]) -> Dict[str, Any]:
        # Catalogue sections are only read here, so they are written back verbatim.
        document = {key: list(value) for key, value in self._catalogue.items()}
        document["quizzes"] = [q.to_dict() for q in quizzes]
        document["quizResults"] = [r.to_dict() for r in quiz_results]
        return document

    def _write_document(self, document: Dict[str, Any]) -> None:
        tmp_path = self.store_path.with_suffix(".json.tmp")
        try:
            self.data_directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.store_path)
        except OSError as e:
            self.logger.error(f"Failed to write store file {self.store_path}: {e}")
            raise StoreError(f"Failed to save changes: {e}") from e

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def get_load_errors(self) -> List[str]:
        return self.load_errors.copy()

    def has_load_errors(self) -> bool:
        return len(self.load_errors) > 0

    def get_loading_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the last load operation.

        Returns:
            Dictionary with store statistics and status
        """
        active = self.active_quiz
        return {
            'total_quizzes': len(self._quizzes),
            'total_results': len(self._quiz_results),
            'active_quiz': active.id if active else None,
            'has_errors': self.has_load_errors(),
            'error_count': len(self.load_errors),
            'errors': self.get_load_errors(),
            'data_directory': str(self.data_directory),
        }
