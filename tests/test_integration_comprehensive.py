"""
Comprehensive integration tests for the storefront quiz admin.
Tests complete authoring flows and component interactions.
"""
import base64
import io
import json
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock

from PIL import Image

from quiz_admin.config_manager import ConfigManager
from quiz_admin.data_manager import DataManager
from quiz_admin.editing_session import EditorState
from quiz_admin.image_ingestion import DATA_URI_PREFIX
from quiz_admin.models import LocalizedText
from quiz_admin.quiz_controller import QuizAdminController
from tests.test_fixtures import TestFixtures, TestDataValidation


ADMIN = 1
SECOND_ADMIN = 2


class TestCompleteAuthoringFlow(unittest.IsolatedAsyncioTestCase):
    """Test a quiz from creation to activation against a real store."""

    async def asyncSetUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_manager = ConfigManager()
        self.config_manager.set_data_directory(self.temp_dir)
        self.config_manager.set_saved_indicator_seconds(0)
        self.data_manager = DataManager(self.config_manager.get_data_directory())
        self.assertTrue(self.data_manager.load())
        self.controller = QuizAdminController(self.data_manager, self.config_manager)

    async def asyncTearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def reload_store(self) -> DataManager:
        data_manager = DataManager(self.temp_dir)
        self.assertTrue(data_manager.load())
        return data_manager

    async def test_complete_authoring_flow(self):
        session = self.controller.get_session(ADMIN)
        self.assertEqual(session.state, EditorState.UNSELECTED)

        # Create and fill in a quiz
        draft = await self.controller.create_quiz(ADMIN)
        session.set_title("en", "Spring Flowers")
        session.set_title("ar", "زهور الربيع")
        question_id = session.add_question()
        session.set_correct_answer(question_id, "en", "Tulip")
        session.set_correct_answer(question_id, "ar", "توليب")
        for slot, (en, ar) in enumerate([("Rose", "وردة"), ("Lily", "زنبق"), ("Daisy", "أقحوان")]):
            session.set_wrong_answer(question_id, slot, "en", en)
            session.set_wrong_answer(question_id, slot, "ar", ar)
        uploaded = await session.upload_image(question_id, TestFixtures.create_image_bytes(1200, 900))
        self.assertTrue(uploaded)
        self.assertEqual(session.state, EditorState.DIRTY)

        # Nothing reaches the store before the commit
        self.assertEqual(self.data_manager.get_quiz(draft.id).questions, ())

        await self.controller.set_active(ADMIN, True)
        committed = await self.controller.commit(ADMIN)

        stored = self.reload_store().get_quiz(draft.id)
        self.assertEqual(stored, committed)
        self.assertTrue(stored.is_active)
        self.assertEqual(stored.title, LocalizedText(en="Spring Flowers", ar="زهور الربيع"))
        question = stored.find_question(question_id)
        self.assertTrue(TestDataValidation.validate_question(question))
        self.assertEqual(question.wrong_answers[2], LocalizedText(en="Daisy", ar="أقحوان"))

        image = Image.open(io.BytesIO(base64.b64decode(question.image[len(DATA_URI_PREFIX):])))
        self.assertEqual(image.size, (400, 300))

    async def test_configured_image_size_reaches_uploads(self):
        self.config_manager.set_max_image_dimension(100)
        controller = QuizAdminController(self.data_manager, self.config_manager)
        await controller.create_quiz(ADMIN)
        session = controller.get_session(ADMIN)
        question_id = session.add_question()

        await session.upload_image(question_id, TestFixtures.create_image_bytes(300, 600))

        encoded = session.editing_quiz.find_question(question_id).image
        image = Image.open(io.BytesIO(base64.b64decode(encoded[len(DATA_URI_PREFIX):])))
        self.assertEqual(image.size, (50, 100))

    async def test_two_admins_activation_and_deletion(self):
        first = await self.controller.create_quiz(ADMIN)
        second = await self.controller.create_quiz(SECOND_ADMIN)

        await self.controller.set_active(ADMIN, True)
        await self.controller.set_active(SECOND_ADMIN, True)

        quizzes = self.reload_store().quizzes
        self.assertEqual(TestDataValidation.count_active(quizzes), 1)
        self.assertEqual(self.controller.get_active_quiz().id, second.id)
        self.assertFalse(self.controller.get_session(ADMIN).editing_quiz.is_active)

        # The second admin deletes the quiz the first admin is editing
        self.controller.select_quiz(SECOND_ADMIN, first.id)
        deleted = await self.controller.delete_quiz(SECOND_ADMIN, first.id, AsyncMock(return_value=True))

        self.assertTrue(deleted)
        self.assertEqual(self.controller.get_session_state(ADMIN), EditorState.DELETED)
        self.assertEqual([q.id for q in self.reload_store().quizzes], [second.id])

    async def test_results_flow(self):
        for score in (3, 5, 1):
            await self.data_manager.add_quiz_result(score, 5)

        self.assertEqual(self.controller.get_result_count(), 3)
        self.assertEqual(self.controller.get_quiz_results(limit=1)[0].score, 1)

        await self.controller.clear_results()
        self.assertEqual(self.reload_store().quiz_results, [])


class TestDataFlowIntegration(unittest.TestCase):
    """Test store loading feeding the rest of the system."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_partially_corrupt_store_still_serves_valid_quizzes(self):
        document = TestFixtures.create_store_document([
            TestFixtures.create_sample_quiz("quiz-a"),
            TestFixtures.create_sample_quiz("quiz-b", is_active=True),
        ])
        document["quizzes"].insert(0, {"id": "broken"})
        TestFixtures.write_store_document(self.temp_dir, document)

        data_manager = DataManager(self.temp_dir)
        self.assertTrue(data_manager.load())
        controller = QuizAdminController(data_manager, ConfigManager())

        self.assertEqual(controller.get_session(ADMIN).selected_quiz_id, "quiz-a")
        self.assertEqual(controller.get_active_quiz().id, "quiz-b")
        self.assertEqual(len(data_manager.get_load_errors()), 1)

    def test_store_document_keeps_persisted_shape(self):
        TestFixtures.write_store_document(
            self.temp_dir, TestFixtures.create_store_document([TestFixtures.create_sample_quiz()])
        )
        data_manager = DataManager(self.temp_dir)
        data_manager.load()
        data_manager._commit()

        with open(Path(self.temp_dir) / "store.json", encoding='utf-8') as f:
            document = json.load(f)

        quiz = document["quizzes"][0]
        self.assertEqual(
            set(quiz.keys()),
            {"id", "title", "description", "questions", "isActive", "createdAt"}
        )
        self.assertEqual(quiz["title"]["ar"], "اختبار الأزهار quiz-a")
        self.assertEqual(len(quiz["questions"][0]["wrongAnswers"]), 3)


if __name__ == '__main__':
    unittest.main()
