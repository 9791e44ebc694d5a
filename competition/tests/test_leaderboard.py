from datetime import timedelta

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from common.enums import AttemptStatus, EnrollmentStatus
from competition.models import LeaderboardEntry, QuizAttempt
from competition.services import refresh_course_leaderboard
from competition.services.leaderboard import Standing, leaderboard_for, rank_of, rank_standings

from .utils import enroll, make_course, make_quiz, make_user

T0 = timezone.now()


class RankStandingsTests(SimpleTestCase):
    def test_ties_share_rank_and_next_rank_skips(self):
        ranked = rank_standings([
            Standing(3, 90, T0),
            Standing(2, 100, T0 + timedelta(minutes=5)),
            Standing(1, 100, T0 + timedelta(minutes=1)),
        ])
        self.assertEqual([(r.student_id, r.rank) for r in ranked], [(1, 1), (2, 1), (3, 3)])

    def test_equal_points_equal_rank_higher_points_better_rank(self):
        ranked = rank_standings([
            Standing(i, points, T0 + timedelta(seconds=i))
            for i, points in enumerate([5, 7, 7, 0, 5, 12, 0, 7], start=1)
        ])
        for a in ranked:
            for b in ranked:
                if a.points == b.points:
                    self.assertEqual(a.rank, b.rank)
                elif a.points > b.points:
                    self.assertLess(a.rank, b.rank)
        self.assertEqual([r.rank for r in ranked], [1, 2, 2, 2, 5, 5, 7, 7])

    def test_student_id_breaks_remaining_ties(self):
        ranked = rank_standings([Standing(9), Standing(4), Standing(6)])
        self.assertEqual([r.student_id for r in ranked], [4, 6, 9])
        self.assertEqual({r.rank for r in ranked}, {1})

    def test_unqualified_students_sort_last_within_total(self):
        ranked = rank_standings([Standing(1, 0, None), Standing(2, 0, T0)])
        self.assertEqual([r.student_id for r in ranked], [2, 1])

    def test_empty(self):
        self.assertEqual(rank_standings([]), [])


class RecomputeLeaderboardTests(TestCase):
    def setUp(self):
        self.course = make_course()
        self.quiz = make_quiz(self.course)
        self.a, self.b, self.c = make_user("a"), make_user("b"), make_user("c")
        for s in (self.a, self.b, self.c):
            enroll(s, self.course)

    def _passed(self, student, points, completed_at, quiz=None, passed=True):
        return QuizAttempt.objects.create(
            quiz=quiz or self.quiz, student=student, status=AttemptStatus.SUBMITTED,
            score=100 if passed else 0, passed=passed, points_earned=points,
            started_at=completed_at - timedelta(minutes=1), completed_at=completed_at,
        )

    def _table(self):
        return [(e.student_id, e.total_points, e.rank_position) for e in leaderboard_for(self.course.pk)]

    def test_tie_scenario(self):
        self._passed(self.b, 100, T0 + timedelta(minutes=10))
        self._passed(self.a, 100, T0 + timedelta(minutes=5))
        self._passed(self.c, 90, T0 + timedelta(minutes=1))

        refresh_course_leaderboard(self.course.pk)
        self.assertEqual(self._table(), [
            (self.a.pk, 100, 1),
            (self.b.pk, 100, 1),
            (self.c.pk, 90, 3),
        ])

    def test_points_sum_passed_attempts_only(self):
        other = make_quiz(self.course, order=2)
        self._passed(self.a, 2, T0, quiz=self.quiz)
        self._passed(self.a, 3, T0 + timedelta(minutes=1), quiz=other)
        self._passed(self.a, 1, T0 + timedelta(minutes=2), passed=False)
        QuizAttempt.objects.create(quiz=self.quiz, student=self.b, status=AttemptStatus.EXPIRED, completed_at=T0)

        refresh_course_leaderboard(self.course.pk)
        entry = LeaderboardEntry.objects.get(course=self.course, student=self.a)
        self.assertEqual(entry.total_points, 5)
        self.assertEqual(entry.last_qualified_at, T0 + timedelta(minutes=1))
        self.assertEqual(LeaderboardEntry.objects.get(course=self.course, student=self.b).total_points, 0)

    def test_other_course_points_do_not_count(self):
        other_course = make_course("course-2")
        enroll(self.a, other_course)
        self._passed(self.a, 7, T0, quiz=make_quiz(other_course))

        refresh_course_leaderboard(self.course.pk)
        self.assertEqual(LeaderboardEntry.objects.get(course=self.course, student=self.a).total_points, 0)

    def test_only_active_enrollments_are_ranked(self):
        self._passed(self.c, 50, T0)
        self.c.enrollments.filter(course=self.course).update(status=EnrollmentStatus.DROPPED)

        refresh_course_leaderboard(self.course.pk)
        self.assertIsNone(rank_of(self.course.pk, self.c.pk))
        self.assertEqual(LeaderboardEntry.objects.filter(course=self.course).count(), 2)

    def test_recompute_is_idempotent(self):
        self._passed(self.a, 4, T0)
        self._passed(self.b, 4, T0 + timedelta(minutes=1))
        self._passed(self.c, 9, T0 + timedelta(minutes=2))

        refresh_course_leaderboard(self.course.pk)
        first = self._table()
        refresh_course_leaderboard(self.course.pk)
        self.assertEqual(self._table(), first)
        self.assertEqual(LeaderboardEntry.objects.filter(course=self.course).count(), 3)

    def test_recompute_replaces_stale_rows(self):
        stale = make_user("stale")
        LeaderboardEntry.objects.create(course=self.course, student=stale, total_points=999,
                                        rank_position=1, updated_at=T0)
        refresh_course_leaderboard(self.course.pk)
        self.assertIsNone(rank_of(self.course.pk, stale.pk))

    def test_average_score_covers_submitted_attempts_in_course(self):
        self._passed(self.a, 2, T0)
        QuizAttempt.objects.create(quiz=self.quiz, student=self.a, status=AttemptStatus.SUBMITTED,
                                   score=40, passed=False, completed_at=T0 + timedelta(minutes=1))
        QuizAttempt.objects.create(quiz=self.quiz, student=self.a, status=AttemptStatus.EXPIRED,
                                   completed_at=T0 + timedelta(minutes=2))
        other_course = make_course("course-2")
        enroll(self.a, other_course)
        self._passed(self.a, 1, T0, quiz=make_quiz(other_course))

        refresh_course_leaderboard(self.course.pk)
        entry = LeaderboardEntry.objects.get(course=self.course, student=self.a)
        self.assertEqual(entry.avg_quiz_score, 70)
        self.assertEqual(LeaderboardEntry.objects.get(course=self.course, student=self.b).avg_quiz_score, 0)

    def test_average_score_does_not_affect_order(self):
        self._passed(self.a, 5, T0)
        self._passed(self.b, 5, T0 + timedelta(minutes=1))
        QuizAttempt.objects.create(quiz=self.quiz, student=self.a, status=AttemptStatus.SUBMITTED,
                                   score=10, passed=False, completed_at=T0 + timedelta(minutes=2))

        refresh_course_leaderboard(self.course.pk)
        self.assertEqual(self._table()[:2], [(self.a.pk, 5, 1), (self.b.pk, 5, 1)])
