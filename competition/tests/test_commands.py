import os
import tempfile
from datetime import timedelta
from io import StringIO

import pandas as pd
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from common.enums import AttemptStatus
from competition import tasks
from competition.management.commands.import_quiz_questions import parse_lines
from competition.models import LeaderboardEntry
from competition.services import start_attempt

from .utils import enroll, make_course, make_quiz, make_user

SHEET = [
    "Question: What is 2 + 2?",
    "A) 3",
    "B) 4",
    "C) 5",
    "Answer: B",
    "Points: 2",
    "Question: Which one is a list?",
    "(a) []",
    "(b) ()",
    "Answer: a",
    "Question: broken block with a single option",
    "A) only",
    "Answer: A",
]


class ParseLinesTests(SimpleTestCase):
    def test_blocks(self):
        blocks = parse_lines(SHEET)
        self.assertEqual(len(blocks), 2)
        self.assertEqual(blocks[0], {
            "text": "What is 2 + 2?",
            "options": {"A": "3", "B": "4", "C": "5"},
            "correct": "B",
            "points": 2,
        })
        self.assertEqual(blocks[1]["correct"], "A")
        self.assertEqual(blocks[1]["points"], 1)

    def test_answer_must_name_given_option(self):
        self.assertEqual(parse_lines(["Question: q", "A) x", "B) y", "Answer: D"]), [])

    def test_default_points(self):
        self.assertEqual(parse_lines(SHEET[6:10], default_points=3)[0]["points"], 3)


class ImportQuizQuestionsCommandTests(TestCase):
    def setUp(self):
        self.quiz = make_quiz(make_course())
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "questions.xlsx")
        pd.DataFrame({"rows": SHEET}).to_excel(self.path, header=False, index=False)

    def tearDown(self):
        self.tmp.cleanup()

    def test_appends_after_existing_questions(self):
        call_command("import_quiz_questions", str(self.quiz.pk), self.path, stdout=StringIO())
        questions = list(self.quiz.questions.order_by("order"))
        self.assertEqual(len(questions), 4)
        self.assertEqual(questions[2].order, 3)
        self.assertEqual(questions[2].correct_answer, "B")
        self.assertEqual(questions[2].points, 2)
        self.assertEqual(questions[3].option_c, "")

    def test_replace(self):
        call_command("import_quiz_questions", str(self.quiz.pk), self.path, "--replace", stdout=StringIO())
        self.assertEqual(self.quiz.questions.count(), 2)

    def test_dry_run_writes_nothing(self):
        call_command("import_quiz_questions", str(self.quiz.pk), self.path, "--dry-run", stdout=StringIO())
        self.assertEqual(self.quiz.questions.count(), 2)

    def test_unknown_quiz(self):
        with self.assertRaises(CommandError):
            call_command("import_quiz_questions", "not-a-uuid", self.path, stdout=StringIO())


class MaintenanceCommandTests(TestCase):
    def setUp(self):
        self.course = make_course()
        self.quiz = make_quiz(self.course, time_limit_minutes=5)
        self.student = make_user("s1")
        enroll(self.student, self.course)

    def _overdue_attempt(self):
        return start_attempt(self.student.pk, self.quiz.pk, now=timezone.now() - timedelta(minutes=30))

    def test_recompute_leaderboards_all_courses(self):
        out = StringIO()
        call_command("recompute_leaderboards", stdout=out)
        self.assertIn("Rebuilt 1 leaderboard(s).", out.getvalue())
        self.assertTrue(LeaderboardEntry.objects.filter(course=self.course, student=self.student).exists())

    def test_recompute_leaderboards_unknown_course(self):
        with self.assertRaises(CommandError):
            call_command("recompute_leaderboards", "--course", "9999", stdout=StringIO())

    def test_expire_attempts(self):
        attempt = self._overdue_attempt()
        out = StringIO()
        call_command("expire_attempts", stdout=out)
        self.assertIn("Expired 1 attempt(s).", out.getvalue())
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, AttemptStatus.EXPIRED)

    def test_expiry_task(self):
        attempt = self._overdue_attempt()
        self.assertEqual(tasks.expire_overdue_attempts.apply().get(), 1)
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, AttemptStatus.EXPIRED)

    def test_leaderboard_task(self):
        self.assertEqual(tasks.recompute_course_leaderboard.apply(args=[self.course.pk]).get(), 1)
