"""
Unit tests for DataManager class.
"""
import dataclasses
import json
import shutil
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from quiz_admin.content_model import new_quiz_content
from quiz_admin.data_manager import DataManager
from quiz_admin.errors import QuizNotFoundError, StoreError
from quiz_admin.models import LocalizedText, QuizContent, QuizResult
from tests.test_fixtures import TestFixtures, TestDataValidation


class TestDataManagerLoading(unittest.TestCase):
    """Test cases for loading the store document."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.data_manager = DataManager(self.temp_dir)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_creates_missing_document(self):
        self.assertTrue(self.data_manager.load())

        store_path = Path(self.temp_dir) / "store.json"
        self.assertTrue(store_path.exists())
        with open(store_path, encoding='utf-8') as f:
            document = json.load(f)
        self.assertEqual(document["quizzes"], [])
        self.assertEqual(document["quizResults"], [])
        self.assertEqual(self.data_manager.quizzes, [])

    def test_load_creates_missing_directory(self):
        nested = Path(self.temp_dir) / "nested" / "data"
        data_manager = DataManager(str(nested))
        self.assertTrue(data_manager.load())
        self.assertTrue(nested.exists())

    def test_load_valid_document(self):
        quizzes = [TestFixtures.create_sample_quiz("quiz-a", is_active=True),
                   TestFixtures.create_sample_quiz("quiz-b")]
        TestFixtures.write_store_document(self.temp_dir, TestFixtures.create_store_document(quizzes))

        self.assertTrue(self.data_manager.load())

        self.assertEqual(self.data_manager.quizzes, quizzes)
        self.assertEqual(self.data_manager.active_quiz.id, "quiz-a")
        self.assertEqual(len(self.data_manager.products), 3)
        self.assertEqual(len(self.data_manager.contact_messages), 2)
        self.assertFalse(self.data_manager.has_load_errors())

    def test_load_invalid_json(self):
        with open(Path(self.temp_dir) / "store.json", 'w') as f:
            f.write('{"quizzes": [')

        self.assertFalse(self.data_manager.load())
        self.assertTrue(self.data_manager.has_load_errors())
        self.assertIn("Invalid JSON", self.data_manager.get_load_errors()[0])

    def test_load_invalid_structure(self):
        TestFixtures.write_store_document(self.temp_dir, {"quizzes": {"not": "a list"}})
        self.assertFalse(self.data_manager.load())

    def test_load_skips_malformed_entries(self):
        document = TestFixtures.create_store_document([TestFixtures.create_sample_quiz("quiz-a")])
        bad_quiz = TestFixtures.create_sample_quiz("quiz-bad").to_dict()
        bad_quiz["questions"][0]["wrongAnswers"].pop()
        document["quizzes"].append(bad_quiz)
        document["quizResults"].append({"id": "r1", "score": 3})
        TestFixtures.write_store_document(self.temp_dir, document)

        self.assertTrue(self.data_manager.load())

        self.assertEqual([q.id for q in self.data_manager.quizzes], ["quiz-a"])
        self.assertEqual(self.data_manager.quiz_results, [])
        self.assertEqual(len(self.data_manager.get_load_errors()), 2)

    def test_load_skips_quiz_with_string_active_flag(self):
        document = TestFixtures.create_store_document([TestFixtures.create_sample_quiz("quiz-a")])
        hand_edited = TestFixtures.create_sample_quiz("quiz-b").to_dict()
        hand_edited["isActive"] = "false"
        document["quizzes"].append(hand_edited)
        TestFixtures.write_store_document(self.temp_dir, document)

        self.assertTrue(self.data_manager.load())

        self.assertEqual([q.id for q in self.data_manager.quizzes], ["quiz-a"])
        self.assertIsNone(self.data_manager.active_quiz)
        self.assertEqual(len(self.data_manager.get_load_errors()), 1)

    def test_load_normalizes_multiple_active_quizzes(self):
        quizzes = [TestFixtures.create_sample_quiz("quiz-a", is_active=True),
                   TestFixtures.create_sample_quiz("quiz-b", is_active=True)]
        TestFixtures.write_store_document(self.temp_dir, TestFixtures.create_store_document(quizzes))

        self.assertTrue(self.data_manager.load())

        self.assertEqual(TestDataValidation.count_active(self.data_manager.quizzes), 1)
        self.assertEqual(self.data_manager.active_quiz.id, "quiz-a")
        self.assertTrue(self.data_manager.has_load_errors())

    def test_loading_summary(self):
        TestFixtures.write_store_document(
            self.temp_dir,
            TestFixtures.create_store_document([TestFixtures.create_sample_quiz(is_active=True)])
        )
        self.data_manager.load()

        summary = self.data_manager.get_loading_summary()

        self.assertEqual(summary['total_quizzes'], 1)
        self.assertEqual(summary['active_quiz'], "quiz-a")
        self.assertFalse(summary['has_errors'])


class TestDataManagerWrites(unittest.IsolatedAsyncioTestCase):
    """Test cases for quiz collection writes."""

    async def asyncSetUp(self):
        self.temp_dir = tempfile.mkdtemp()
        TestFixtures.write_store_document(self.temp_dir, TestFixtures.create_store_document())
        self.data_manager = DataManager(self.temp_dir)
        self.data_manager.load()

    async def asyncTearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def reload(self) -> DataManager:
        data_manager = DataManager(self.temp_dir)
        self.assertTrue(data_manager.load())
        return data_manager

    async def test_add_quiz_returns_new_id(self):
        quiz_id = await self.data_manager.add_quiz(new_quiz_content())

        quiz = self.data_manager.get_quiz(quiz_id)
        self.assertIsNotNone(quiz)
        self.assertEqual(quiz.title, LocalizedText(en="New Quiz", ar="اختبار جديد"))
        self.assertFalse(quiz.is_active)
        self.assertEqual(self.reload().get_quiz(quiz_id), quiz)

    async def test_added_quiz_ids_are_unique(self):
        ids = {await self.data_manager.add_quiz(new_quiz_content()) for _ in range(5)}
        self.assertEqual(len(ids), 5)

    async def test_update_then_read_returns_equal_quiz(self):
        quiz_id = await self.data_manager.add_quiz(new_quiz_content())
        edited = dataclasses.replace(
            self.data_manager.get_quiz(quiz_id),
            title=LocalizedText(en="Spring Flowers", ar="زهور الربيع"),
            questions=(TestFixtures.create_sample_question(),)
        )

        await self.data_manager.update_quiz(quiz_id, edited)

        self.assertEqual(self.data_manager.get_quiz(quiz_id), edited)
        self.assertEqual(self.reload().get_quiz(quiz_id), edited)

    async def test_update_unknown_quiz(self):
        with self.assertRaises(QuizNotFoundError):
            await self.data_manager.update_quiz("missing", TestFixtures.create_sample_quiz("missing"))

    async def test_update_with_active_flag_deactivates_others(self):
        first = await self.data_manager.add_quiz(new_quiz_content())
        second = await self.data_manager.add_quiz(new_quiz_content())
        await self.data_manager.set_active_quiz(first)

        quiz = self.data_manager.get_quiz(second)
        await self.data_manager.update_quiz(second, dataclasses.replace(quiz, is_active=True))

        self.assertEqual(self.data_manager.active_quiz.id, second)
        self.assertEqual(TestDataValidation.count_active(self.data_manager.quizzes), 1)

    async def test_set_active_switches_between_quizzes(self):
        quiz_a = await self.data_manager.add_quiz(new_quiz_content())
        quiz_b = await self.data_manager.add_quiz(new_quiz_content())

        await self.data_manager.set_active_quiz(quiz_a)
        self.assertTrue(self.data_manager.get_quiz(quiz_a).is_active)
        self.assertFalse(self.data_manager.get_quiz(quiz_b).is_active)

        await self.data_manager.set_active_quiz(quiz_b)
        self.assertFalse(self.data_manager.get_quiz(quiz_a).is_active)
        self.assertTrue(self.data_manager.get_quiz(quiz_b).is_active)

        reloaded = self.reload()
        self.assertEqual(reloaded.active_quiz.id, quiz_b)

    async def test_at_most_one_active_for_any_collection_size(self):
        for size in range(6):
            for quiz in self.data_manager.quizzes:
                await self.data_manager.delete_quiz(quiz.id)
            ids = [await self.data_manager.add_quiz(new_quiz_content()) for _ in range(size)]
            for quiz_id in ids:
                await self.data_manager.set_active_quiz(quiz_id)
                self.assertEqual(TestDataValidation.count_active(self.data_manager.quizzes), 1)
                self.assertEqual(self.data_manager.active_quiz.id, quiz_id)

    async def test_set_active_unknown_quiz(self):
        with self.assertRaises(QuizNotFoundError):
            await self.data_manager.set_active_quiz("missing")

    async def test_add_active_quiz_deactivates_others(self):
        first = await self.data_manager.add_quiz(new_quiz_content())
        await self.data_manager.set_active_quiz(first)
        content = QuizContent(
            title=LocalizedText(en="A", ar="أ"),
            description=LocalizedText.empty(),
            is_active=True
        )

        second = await self.data_manager.add_quiz(content)

        self.assertEqual(self.data_manager.active_quiz.id, second)
        self.assertEqual(TestDataValidation.count_active(self.data_manager.quizzes), 1)

    async def test_delete_quiz(self):
        quiz_id = await self.data_manager.add_quiz(new_quiz_content())

        await self.data_manager.delete_quiz(quiz_id)

        self.assertFalse(self.data_manager.quiz_exists(quiz_id))
        self.assertFalse(self.reload().quiz_exists(quiz_id))

        with self.assertRaises(QuizNotFoundError):
            await self.data_manager.delete_quiz(quiz_id)

    async def test_failed_write_leaves_memory_unchanged(self):
        quiz_id = await self.data_manager.add_quiz(new_quiz_content())
        before = self.data_manager.quizzes

        with patch('quiz_admin.data_manager.os.replace', side_effect=OSError("disk full")):
            with self.assertRaises(StoreError):
                await self.data_manager.delete_quiz(quiz_id)
            with self.assertRaises(StoreError):
                await self.data_manager.set_active_quiz(quiz_id)

        self.assertEqual(self.data_manager.quizzes, before)
        self.assertIsNone(self.data_manager.active_quiz)
        self.assertTrue(self.reload().quiz_exists(quiz_id))

    async def test_catalogue_survives_writes(self):
        await self.data_manager.add_quiz(new_quiz_content())

        with open(Path(self.temp_dir) / "store.json", encoding='utf-8') as f:
            document = json.load(f)

        self.assertEqual(document["products"], TestFixtures.create_store_document()["products"])
        self.assertEqual(len(document["contactMessages"]), 2)


class TestDataManagerResults(unittest.IsolatedAsyncioTestCase):
    """Test cases for quiz result handling."""

    async def asyncSetUp(self):
        self.temp_dir = tempfile.mkdtemp()
        results = [
            QuizResult(id="r1", score=2, total_questions=5, date=datetime(2024, 3, 1, 9, 0)),
            QuizResult(id="r2", score=5, total_questions=5, date=datetime(2024, 3, 3, 9, 0)),
            QuizResult(id="r3", score=4, total_questions=5, date=datetime(2024, 3, 2, 9, 0)),
        ]
        TestFixtures.write_store_document(self.temp_dir, TestFixtures.create_store_document(results=results))
        self.data_manager = DataManager(self.temp_dir)
        self.data_manager.load()

    async def asyncTearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    async def test_results_most_recent_first(self):
        self.assertEqual([r.id for r in self.data_manager.quiz_results], ["r2", "r3", "r1"])

    async def test_add_result(self):
        result = await self.data_manager.add_quiz_result(3, 4)
        self.assertEqual(self.data_manager.quiz_results[0], result)
        self.assertEqual(len(self.data_manager.quiz_results), 4)

    async def test_clear_results(self):
        await self.data_manager.clear_quiz_results()

        self.assertEqual(self.data_manager.quiz_results, [])
        reloaded = DataManager(self.temp_dir)
        reloaded.load()
        self.assertEqual(reloaded.quiz_results, [])

    async def test_clear_results_is_idempotent(self):
        await self.data_manager.clear_quiz_results()
        await self.data_manager.clear_quiz_results()
        self.assertEqual(self.data_manager.quiz_results, [])


if __name__ == '__main__':
    unittest.main()
